"""Study deck models"""
from typing import Any, Optional
from pydantic import BaseModel


class StudyDeck(BaseModel):
    """A named collection of flashcards"""
    id: str
    owner_id: str
    title: str = ""
    description: Optional[str] = None
    is_public: bool = False
    color: str = "#22c55e"

    def is_accessible_by(self, user_id: str, shared: bool = False) -> bool:
        """Owner, public deck, or an explicit share"""
        return self.owner_id == user_id or self.is_public or shared

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "StudyDeck":
        return cls(**{**row, "id": str(row["id"]), "owner_id": str(row["owner_id"])})


class CardItem(BaseModel):
    """One flashcard of a deck"""
    id: str
    deck_id: str
    front: str
    back: str
    order_index: int = 0

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "CardItem":
        return cls(**{**row, "id": str(row["id"]), "deck_id": str(row["deck_id"])})
