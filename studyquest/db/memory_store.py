"""
In-memory store

Implements the full store interface in process. Every method runs to
completion without awaiting, so each call is atomic with respect to other
tasks on the event loop.
"""

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Any, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from studyquest.exceptions import InsufficientXPError, ValidationError
from studyquest.gamification.xp_system import level_for_xp
from studyquest.models import (
    Achievement,
    ActivityLog,
    CardItem,
    ProgressProfile,
    ShopItem,
    StudyDeck,
    StudySessionResult,
)

logger = logging.getLogger(__name__)

# Fields update_profile may touch
PROFILE_FIELDS = frozenset(ProgressProfile.model_fields) - {"user_id"}


class InMemoryStore:
    """Dict-backed store for tests and local use"""

    def __init__(self, emulate_session_trigger: bool = True):
        self.emulate_session_trigger = emulate_session_trigger
        self._profiles: dict[str, ProgressProfile] = {}
        self._achievements: dict[str, Achievement] = {}
        self._unlocked: dict[str, dict[str, datetime]] = {}
        self._shop_items: dict[str, ShopItem] = {}
        self._purchases: dict[str, dict[str, datetime]] = {}
        self._posts: dict[str, int] = {}
        self._decks: dict[str, StudyDeck] = {}
        self._cards: dict[str, list[CardItem]] = {}
        self._shares: set[tuple[str, str]] = set()
        self._sessions: dict[str, StudySessionResult] = {}
        self.activity_logs: list[ActivityLog] = []
        logger.debug("InMemoryStore initialized")

    # ==========================================
    # Seeding helpers
    # ==========================================

    def add_profile(self, user_id: str, xp: int = 0, **fields) -> ProgressProfile:
        profile = ProgressProfile(user_id=user_id, xp=xp, level=level_for_xp(xp), **fields)
        self._profiles[user_id] = profile
        return profile

    def add_achievement(self, achievement: Achievement) -> None:
        self._achievements[achievement.id] = achievement

    def add_shop_item(self, item: ShopItem) -> None:
        self._shop_items[item.id] = item

    def add_deck(self, deck: StudyDeck, cards: Optional[list[CardItem]] = None) -> None:
        self._decks[deck.id] = deck
        self._cards[deck.id] = list(cards or [])

    def share_deck(self, deck_id: str, user_id: str) -> None:
        self._shares.add((deck_id, user_id))

    def record_post(self, user_id: str) -> int:
        """Count a published post; returns the user's new post count"""
        self._posts[user_id] = self._posts.get(user_id, 0) + 1
        return self._posts[user_id]

    @property
    def session_results(self) -> list[StudySessionResult]:
        return list(self._sessions.values())

    # ==========================================
    # Profiles
    # ==========================================

    async def get_profile(self, user_id: str) -> ProgressProfile:
        if user_id not in self._profiles:
            logger.info(f"Created new progress profile for user {user_id}")
            self._profiles[user_id] = ProgressProfile(user_id=user_id)
        return self._profiles[user_id].model_copy()

    async def update_profile(self, user_id: str, patch: dict[str, Any]) -> ProgressProfile:
        unknown = set(patch) - PROFILE_FIELDS
        if unknown:
            raise ValidationError(
                message=f"Unknown profile fields: {sorted(unknown)}",
                field="patch",
                value=sorted(unknown),
                user_id=user_id,
            )
        if patch.get("xp", 0) < 0:
            raise ValidationError(message="XP cannot be negative", field="xp", value=patch["xp"], user_id=user_id)

        current = await self.get_profile(user_id)
        # Validate the whole patch before replacing the stored profile
        try:
            updated = ProgressProfile.model_validate({**current.model_dump(), **patch})
        except PydanticValidationError as e:
            raise ValidationError(
                message=f"Invalid profile patch: {e.error_count()} error(s)",
                field="patch",
                value=sorted(patch),
                user_id=user_id,
            ) from e
        self._profiles[user_id] = updated
        return updated.model_copy()

    async def apply_xp_delta(self, user_id: str, delta: int) -> ProgressProfile:
        current = await self.get_profile(user_id)
        new_xp = current.xp + delta
        if new_xp < 0:
            raise ValidationError(
                message=f"XP delta {delta} would make balance negative",
                field="xp",
                value=new_xp,
                user_id=user_id,
            )
        return await self.update_profile(user_id, {"xp": new_xp, "level": level_for_xp(new_xp)})

    async def list_top_profiles(self, limit: int = 100, role: Optional[str] = None) -> list[ProgressProfile]:
        profiles = [p for p in self._profiles.values() if role is None or p.role == role]
        profiles.sort(key=lambda p: p.xp, reverse=True)
        return [p.model_copy() for p in profiles[:limit]]

    # ==========================================
    # Achievements
    # ==========================================

    async def list_achievements(self) -> list[Achievement]:
        return sorted(self._achievements.values(), key=lambda a: a.xp_required)

    async def list_unlocked(self, user_id: str) -> set[str]:
        return set(self._unlocked.get(user_id, {}))

    async def insert_unlock(self, user_id: str, achievement_id: str) -> bool:
        unlocked = self._unlocked.setdefault(user_id, {})
        if achievement_id in unlocked:
            return False
        unlocked[achievement_id] = datetime.now(timezone.utc)
        return True

    # ==========================================
    # Shop
    # ==========================================

    async def list_shop_items(self) -> list[ShopItem]:
        return sorted(self._shop_items.values(), key=lambda i: i.xp_cost)

    async def list_purchases(self, user_id: str) -> set[str]:
        return set(self._purchases.get(user_id, {}))

    async def insert_purchase(self, user_id: str, item_id: str) -> bool:
        purchases = self._purchases.setdefault(user_id, {})
        if item_id in purchases:
            return False
        purchases[item_id] = datetime.now(timezone.utc)
        return True

    async def commit_purchase(self, user_id: str, item: ShopItem) -> Tuple[ProgressProfile, bool]:
        current = await self.get_profile(user_id)
        owned = item.id in self._purchases.get(user_id, {})
        cost = 0 if owned else item.xp_cost

        if current.xp < cost:
            raise InsufficientXPError(required=item.xp_cost, available=current.xp, item_id=item.id, user_id=user_id)

        new_xp = current.xp - cost
        patch = {"xp": new_xp, "level": level_for_xp(new_xp), item.slot_field: item.item_value}
        # Validate before writing so a bad patch leaves both tables untouched
        updated = ProgressProfile.model_validate({**current.model_dump(), **patch})

        if not owned:
            self._purchases.setdefault(user_id, {})[item.id] = datetime.now(timezone.utc)
        self._profiles[user_id] = updated
        return updated.model_copy(), not owned

    # ==========================================
    # Content
    # ==========================================

    async def count_posts(self, user_id: str) -> int:
        return self._posts.get(user_id, 0)

    # ==========================================
    # Decks
    # ==========================================

    async def get_deck(self, deck_id: str) -> Optional[StudyDeck]:
        deck = self._decks.get(deck_id)
        return deck.model_copy() if deck else None

    async def list_card_items(self, deck_id: str) -> list[CardItem]:
        return sorted(self._cards.get(deck_id, []), key=lambda c: c.order_index)

    async def check_shared_access(self, deck_id: str, user_id: str) -> bool:
        return (deck_id, user_id) in self._shares

    # ==========================================
    # Sessions and audit
    # ==========================================

    async def insert_session_result(self, result: StudySessionResult) -> bool:
        if result.session_id in self._sessions:
            logger.info(f"Session {result.session_id} already stored, ignoring resubmit")
            return False

        self._sessions[result.session_id] = result.model_copy()
        if self.emulate_session_trigger:
            self._roll_session_into_profile(result)
        return True

    async def insert_activity_log(self, entry: ActivityLog) -> None:
        self.activity_logs.append(entry.model_copy())

    def _roll_session_into_profile(self, result: StudySessionResult) -> None:
        """Same effect as the study_sessions trigger of the postgres schema"""
        profile = self._profiles.get(result.user_id) or ProgressProfile(user_id=result.user_id)

        new_xp = profile.xp + result.xp_earned
        last = profile.last_study_date
        if last is not None and result.session_date <= last:
            streak = max(profile.current_streak, 1)
        elif last == result.session_date - timedelta(days=1):
            streak = profile.current_streak + 1
        else:
            streak = 1

        self._profiles[result.user_id] = profile.model_copy(update={
            "xp": new_xp,
            "level": level_for_xp(new_xp),
            "current_streak": streak,
            "longest_streak": max(profile.longest_streak, streak),
            "last_study_date": max(last or date.min, result.session_date),
        })
