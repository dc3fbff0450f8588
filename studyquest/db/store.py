"""
Store interface consumed by the progression core

Any persistent store satisfying these operations and their atomicity and
uniqueness guarantees can back the engines. Two implementations ship with
the package: InMemoryStore (tests, local use) and PostgresStore.
"""
from typing import Any, Optional, Protocol, Tuple

from studyquest.models import (
    Achievement,
    ActivityLog,
    CardItem,
    ProgressProfile,
    ShopItem,
    StudyDeck,
    StudySessionResult,
)


class ProgressStore(Protocol):
    """Async store operations used by the engines"""

    # Profiles
    async def get_profile(self, user_id: str) -> ProgressProfile:
        """Return the profile, creating a default one if the user has none"""
        ...

    async def update_profile(self, user_id: str, patch: dict[str, Any]) -> ProgressProfile:
        """Apply all fields of ``patch`` in one atomic update"""
        ...

    async def apply_xp_delta(self, user_id: str, delta: int) -> ProgressProfile:
        """
        Add ``delta`` to XP and recompute the level in one atomic update

        Raises ValidationError when the result would be negative.
        """
        ...

    async def list_top_profiles(self, limit: int = 100, role: Optional[str] = None) -> list[ProgressProfile]:
        ...

    # Achievements
    async def list_achievements(self) -> list[Achievement]:
        """Full catalog ordered by threshold"""
        ...

    async def list_unlocked(self, user_id: str) -> set[str]:
        ...

    async def insert_unlock(self, user_id: str, achievement_id: str) -> bool:
        """Record an unlock; False when the pair already exists"""
        ...

    # Shop
    async def list_shop_items(self) -> list[ShopItem]:
        """Catalog ordered by cost"""
        ...

    async def list_purchases(self, user_id: str) -> set[str]:
        ...

    async def insert_purchase(self, user_id: str, item_id: str) -> bool:
        """Record ownership; False when the pair already exists"""
        ...

    async def commit_purchase(self, user_id: str, item: ShopItem) -> Tuple[ProgressProfile, bool]:
        """
        Purchase unit of work: record ownership, debit XP, recompute level
        and equip the item, all or nothing

        Returns the updated profile and whether a new purchase row was
        written. If the pair already existed no XP is debited. Raises
        InsufficientXPError when the balance would go negative.
        """
        ...

    # Content
    async def count_posts(self, user_id: str) -> int:
        ...

    # Decks
    async def get_deck(self, deck_id: str) -> Optional[StudyDeck]:
        ...

    async def list_card_items(self, deck_id: str) -> list[CardItem]:
        """Cards of a deck ordered by order_index"""
        ...

    async def check_shared_access(self, deck_id: str, user_id: str) -> bool:
        ...

    # Sessions and audit
    async def insert_session_result(self, result: StudySessionResult) -> bool:
        """Append a session row; False when session_id was already stored"""
        ...

    async def insert_activity_log(self, entry: ActivityLog) -> None:
        ...
