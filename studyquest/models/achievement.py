"""Achievement models for gamification"""
from enum import Enum
from pydantic import BaseModel
from typing import Optional, Any


class AchievementKind(str, Enum):
    """What an achievement's threshold is measured against"""
    XP_THRESHOLD = "xp_threshold"
    POST_COUNT = "post_count"


# Catalog rows created before achievements carried a kind identify their
# post milestones by display name.
LEGACY_POST_MILESTONES = {
    "First Share": 1,
    "Community Helper": 10,
}


class Achievement(BaseModel):
    """Achievement definition"""
    id: str
    name: str
    description: str = ""
    icon: str = ""
    kind: AchievementKind
    threshold: Optional[int] = None  # None never unlocks

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Achievement":
        """
        Build an achievement from a store row

        Rows that already carry ``kind``/``threshold`` are used as is. Legacy
        rows only have ``xp_required``: a positive value is an XP threshold,
        zero means a post milestone looked up by name.
        """
        xp_required = row.get("xp_required") or 0
        if row.get("kind"):
            kind, threshold = AchievementKind(row["kind"]), row.get("threshold")
        elif xp_required > 0:
            kind, threshold = AchievementKind.XP_THRESHOLD, xp_required
        else:
            kind = AchievementKind.POST_COUNT
            threshold = LEGACY_POST_MILESTONES.get(row["name"])

        return cls(
            id=str(row["id"]),
            name=row["name"],
            description=row.get("description") or "",
            icon=row.get("icon") or "",
            kind=kind,
            threshold=threshold,
        )

    @property
    def xp_required(self) -> int:
        """Catalog sort key: XP threshold, 0 for post milestones"""
        if self.kind == AchievementKind.XP_THRESHOLD:
            return self.threshold or 0
        return 0

    def is_satisfied(self, current_xp: int, post_count: Optional[int]) -> bool:
        """Unlock predicate for this achievement"""
        if self.threshold is None:
            return False
        if self.kind == AchievementKind.XP_THRESHOLD:
            return current_xp >= self.threshold
        return post_count is not None and post_count >= self.threshold

