"""Cosmetic shop models"""
from enum import Enum
from typing import Any
from pydantic import BaseModel, Field


class ItemType(str, Enum):
    """Equip slot an item occupies"""
    BORDER = "border"
    NAME_COLOR = "name_color"


# Profile field backing each slot
SLOT_FIELDS = {
    ItemType.BORDER: "border_style",
    ItemType.NAME_COLOR: "name_color",
}


class ShopItem(BaseModel):
    """Purchasable cosmetic"""
    id: str
    name: str = ""
    description: str = ""
    item_type: ItemType
    item_value: str
    xp_cost: int = Field(ge=0)

    @property
    def slot_field(self) -> str:
        return SLOT_FIELDS[self.item_type]

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "ShopItem":
        return cls(**{**row, "id": str(row["id"])})


class PurchaseResult(BaseModel):
    """Outcome of ShopEconomy.purchase"""
    item_id: str
    already_owned: bool
    xp_spent: int = 0
    new_xp: int
    new_level: int
    old_level: int
    level_down: bool = False
    equipped_field: str
    equipped_value: str
    achievements_unlocked: list[str] = Field(default_factory=list)
