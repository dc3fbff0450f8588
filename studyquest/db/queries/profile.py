"""Profile, post and audit database queries"""
import json
import logging
from typing import Any, Optional
from psycopg import sql
from studyquest.db.connection import db

logger = logging.getLogger(__name__)

PROFILE_COLUMNS = (
    "user_id, full_name, role, xp, level, border_style, name_color, "
    "current_streak, longest_streak, last_study_date"
)

# Columns update_profile may set
UPDATABLE_COLUMNS = frozenset({
    "full_name", "role", "xp", "level", "border_style", "name_color",
    "current_streak", "longest_streak", "last_study_date",
})


async def get_profile(user_id: str) -> dict:
    """
    Get user's progress profile (creates if doesn't exist)

    Returns:
        Profile row with PROFILE_COLUMNS
    """
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                f"SELECT {PROFILE_COLUMNS} FROM profiles WHERE user_id = %s",
                (user_id,)
            )
            row = await cur.fetchone()

            if not row:
                # Create new profile with defaults; a concurrent insert wins the race
                await cur.execute(
                    """
                    INSERT INTO profiles (user_id) VALUES (%s)
                    ON CONFLICT (user_id) DO NOTHING
                    """,
                    (user_id,)
                )
                await cur.execute(
                    f"SELECT {PROFILE_COLUMNS} FROM profiles WHERE user_id = %s",
                    (user_id,)
                )
                row = await cur.fetchone()
                await conn.commit()
                logger.info(f"Created new progress profile for user {user_id}")

            return dict(row) if row else None


async def update_profile(user_id: str, patch: dict[str, Any]) -> Optional[dict]:
    """
    Update several profile columns in one statement

    Args:
        user_id: User ID
        patch: Column -> value, keys limited to UPDATABLE_COLUMNS

    Returns:
        Updated row, None if the user has no profile
    """
    unknown = set(patch) - UPDATABLE_COLUMNS
    if unknown:
        raise ValueError(f"Cannot update profile columns {sorted(unknown)}")

    assignments = sql.SQL(", ").join(
        sql.SQL("{} = %s").format(sql.Identifier(column)) for column in patch
    )
    query = sql.SQL(
        "UPDATE profiles SET {}, updated_at = CURRENT_TIMESTAMP WHERE user_id = %s RETURNING "
    ).format(assignments) + sql.SQL(PROFILE_COLUMNS)

    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(query, (*patch.values(), user_id))
            row = await cur.fetchone()
            await conn.commit()
            return dict(row) if row else None


async def apply_xp_delta(user_id: str, delta: int) -> Optional[dict]:
    """
    Server-side XP increment with level recompute

    Returns:
        Updated row, None if the balance would go negative
    """
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                f"""
                UPDATE profiles
                SET xp = xp + %s,
                    level = (xp + %s) / 100 + 1,
                    updated_at = CURRENT_TIMESTAMP
                WHERE user_id = %s AND xp + %s >= 0
                RETURNING {PROFILE_COLUMNS}
                """,
                (delta, delta, user_id, delta)
            )
            row = await cur.fetchone()
            await conn.commit()
            return dict(row) if row else None


async def get_top_profiles(limit: int = 100, role: Optional[str] = None) -> list[dict]:
    """Profiles ordered by XP, optionally filtered by role"""
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                f"""
                SELECT {PROFILE_COLUMNS}
                FROM profiles
                WHERE %s::text IS NULL OR role = %s
                ORDER BY xp DESC
                LIMIT %s
                """,
                (role, role, limit)
            )
            rows = await cur.fetchall()
            return [dict(row) for row in rows]


async def count_posts(user_id: str) -> int:
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                "SELECT COUNT(*) AS post_count FROM posts WHERE user_id = %s",
                (user_id,)
            )
            row = await cur.fetchone()
            return row["post_count"] if row else 0


async def add_activity_log(user_id: str, action: str, details: dict) -> None:
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                INSERT INTO activity_logs (user_id, action, details)
                VALUES (%s, %s, %s)
                """,
                (user_id, action, json.dumps(details))
            )
            await conn.commit()
