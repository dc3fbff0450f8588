"""Gamification database queries"""
import logging
from typing import Optional, Tuple
from psycopg import sql
from studyquest.db.connection import db
from studyquest.db.queries.profile import PROFILE_COLUMNS

logger = logging.getLogger(__name__)


# ==========================================
# Achievement Functions
# ==========================================

async def get_all_achievements() -> list[dict]:
    """Achievement catalog ordered by xp_required"""
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                SELECT id, name, description, icon, kind, threshold, xp_required
                FROM achievements
                ORDER BY xp_required, created_at
                """
            )
            rows = await cur.fetchall()
            return [dict(row) for row in rows]


async def get_unlocked_achievement_ids(user_id: str) -> set[str]:
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                "SELECT achievement_id FROM user_achievements WHERE user_id = %s",
                (user_id,)
            )
            rows = await cur.fetchall()
            return {str(row["achievement_id"]) for row in rows}


async def unlock_achievement(user_id: str, achievement_id: str) -> bool:
    """
    Record an unlock

    Returns:
        True if the row was inserted, False if the pair already existed
    """
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                INSERT INTO user_achievements (user_id, achievement_id)
                VALUES (%s, %s)
                ON CONFLICT (user_id, achievement_id) DO NOTHING
                RETURNING id
                """,
                (user_id, achievement_id)
            )
            row = await cur.fetchone()
            await conn.commit()
            return row is not None


# ==========================================
# Shop Functions
# ==========================================

async def get_shop_items() -> list[dict]:
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                SELECT id, name, description, item_type, item_value, xp_cost
                FROM shop_items
                ORDER BY xp_cost
                """
            )
            rows = await cur.fetchall()
            return [dict(row) for row in rows]


async def get_purchased_item_ids(user_id: str) -> set[str]:
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                "SELECT shop_item_id FROM user_purchases WHERE user_id = %s",
                (user_id,)
            )
            rows = await cur.fetchall()
            return {str(row["shop_item_id"]) for row in rows}


async def add_purchase(user_id: str, item_id: str) -> bool:
    """Returns False if the user already owned the item"""
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                INSERT INTO user_purchases (user_id, shop_item_id)
                VALUES (%s, %s)
                ON CONFLICT (user_id, shop_item_id) DO NOTHING
                RETURNING id
                """,
                (user_id, item_id)
            )
            row = await cur.fetchone()
            await conn.commit()
            return row is not None


async def commit_purchase(
    user_id: str,
    item_id: str,
    xp_cost: int,
    slot_column: str,
    item_value: str
) -> Tuple[Optional[dict], bool, int]:
    """
    Purchase unit of work in one transaction

    Locks the profile row, records ownership, debits XP, recomputes the
    level and equips the item. Nothing is written when the balance is short.

    Returns:
        (updated profile row or None, newly purchased, balance before)
        The row is None when the balance is below the cost.
    """
    async with db.connection() as conn:
        async with conn.transaction():
            async with conn.cursor() as cur:
                await cur.execute(
                    "SELECT xp FROM profiles WHERE user_id = %s FOR UPDATE",
                    (user_id,)
                )
                balance_row = await cur.fetchone()
                balance = balance_row["xp"] if balance_row else 0

                await cur.execute(
                    """
                    SELECT 1 FROM user_purchases
                    WHERE user_id = %s AND shop_item_id = %s
                    """,
                    (user_id, item_id)
                )
                owned = await cur.fetchone() is not None
                cost = 0 if owned else xp_cost

                if balance < cost:
                    return None, False, balance

                if not owned:
                    await cur.execute(
                        """
                        INSERT INTO user_purchases (user_id, shop_item_id)
                        VALUES (%s, %s)
                        """,
                        (user_id, item_id)
                    )

                query = sql.SQL(
                    """
                    UPDATE profiles
                    SET xp = xp - %s,
                        level = (xp - %s) / 100 + 1,
                        {} = %s,
                        updated_at = CURRENT_TIMESTAMP
                    WHERE user_id = %s
                    RETURNING
                    """
                ).format(sql.Identifier(slot_column)) + sql.SQL(PROFILE_COLUMNS)
                await cur.execute(query, (cost, cost, item_value, user_id))
                row = await cur.fetchone()

    return dict(row) if row else None, not owned, balance
