"""
PostgreSQL store

Delegates to the query modules and converts rows into models. psycopg
errors leave this layer as DatabaseError subclasses.
"""

import functools
import logging
from typing import Any, Optional, Tuple

import psycopg

from studyquest.db import queries
from studyquest.exceptions import (
    InsufficientXPError,
    RecordNotFoundError,
    ValidationError,
    wrap_external_exception,
)
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


def _db_operation(func):
    """Translate psycopg errors raised by a store method"""

    takes_user_id = func.__code__.co_varnames[1:2] == ("user_id",)

    @functools.wraps(func)
    async def wrapper(self, *args, **kwargs):
        try:
            return await func(self, *args, **kwargs)
        except psycopg.Error as e:
            user_id = args[0] if takes_user_id and args else kwargs.get("user_id")
            raise wrap_external_exception(e, operation=func.__name__, user_id=user_id) from e

    return wrapper


class PostgresStore:
    """Store backed by the psycopg connection pool in studyquest.db.connection"""

    # ==========================================
    # Profiles
    # ==========================================

    @_db_operation
    async def get_profile(self, user_id: str) -> ProgressProfile:
        row = await queries.get_profile(user_id)
        return ProgressProfile(**row)

    @_db_operation
    async def update_profile(self, user_id: str, patch: dict[str, Any]) -> ProgressProfile:
        try:
            row = await queries.update_profile(user_id, patch)
        except ValueError as e:
            raise ValidationError(message=str(e), field="patch", value=sorted(patch), user_id=user_id) from e

        if row is None:
            raise RecordNotFoundError(
                message=f"No profile for user {user_id}",
                record_type="Profile",
                record_id=user_id,
                user_id=user_id,
            )
        return ProgressProfile(**row)

    @_db_operation
    async def apply_xp_delta(self, user_id: str, delta: int) -> ProgressProfile:
        await queries.get_profile(user_id)
        row = await queries.apply_xp_delta(user_id, delta)
        if row is None:
            raise ValidationError(
                message=f"XP delta {delta} would make balance negative",
                field="xp",
                value=delta,
                user_id=user_id,
            )
        return ProgressProfile(**row)

    @_db_operation
    async def list_top_profiles(self, limit: int = 100, role: Optional[str] = None) -> list[ProgressProfile]:
        rows = await queries.get_top_profiles(limit, role)
        return [ProgressProfile(**row) for row in rows]

    # ==========================================
    # Achievements
    # ==========================================

    @_db_operation
    async def list_achievements(self) -> list[Achievement]:
        rows = await queries.get_all_achievements()
        return [Achievement.from_row(row) for row in rows]

    @_db_operation
    async def list_unlocked(self, user_id: str) -> set[str]:
        return await queries.get_unlocked_achievement_ids(user_id)

    @_db_operation
    async def insert_unlock(self, user_id: str, achievement_id: str) -> bool:
        return await queries.unlock_achievement(user_id, achievement_id)

    # ==========================================
    # Shop
    # ==========================================

    @_db_operation
    async def list_shop_items(self) -> list[ShopItem]:
        rows = await queries.get_shop_items()
        return [ShopItem.from_row(row) for row in rows]

    @_db_operation
    async def list_purchases(self, user_id: str) -> set[str]:
        return await queries.get_purchased_item_ids(user_id)

    @_db_operation
    async def insert_purchase(self, user_id: str, item_id: str) -> bool:
        return await queries.add_purchase(user_id, item_id)

    @_db_operation
    async def commit_purchase(self, user_id: str, item: ShopItem) -> Tuple[ProgressProfile, bool]:
        # The purchase references the profile row, so make sure it exists
        await queries.get_profile(user_id)
        row, newly_purchased, balance = await queries.commit_purchase(
            user_id, item.id, item.xp_cost, item.slot_field, item.item_value
        )
        if row is None:
            raise InsufficientXPError(
                required=item.xp_cost,
                available=balance,
                item_id=item.id,
                user_id=user_id,
                operation="commit_purchase",
            )
        return ProgressProfile(**row), newly_purchased

    # ==========================================
    # Content
    # ==========================================

    @_db_operation
    async def count_posts(self, user_id: str) -> int:
        return await queries.count_posts(user_id)

    # ==========================================
    # Decks
    # ==========================================

    @_db_operation
    async def get_deck(self, deck_id: str) -> Optional[StudyDeck]:
        row = await queries.get_deck(deck_id)
        return StudyDeck.from_row(row) if row else None

    @_db_operation
    async def list_card_items(self, deck_id: str) -> list[CardItem]:
        rows = await queries.get_card_items(deck_id)
        return [CardItem.from_row(row) for row in rows]

    @_db_operation
    async def check_shared_access(self, deck_id: str, user_id: str) -> bool:
        return await queries.has_shared_access(deck_id, user_id)

    # ==========================================
    # Sessions and audit
    # ==========================================

    @_db_operation
    async def insert_session_result(self, result: StudySessionResult) -> bool:
        inserted = await queries.save_study_session(result.model_dump())
        if not inserted:
            logger.info(f"Session {result.session_id} already stored, ignoring resubmit")
        return inserted

    @_db_operation
    async def insert_activity_log(self, entry: ActivityLog) -> None:
        await queries.add_activity_log(entry.user_id, entry.action, entry.details)
