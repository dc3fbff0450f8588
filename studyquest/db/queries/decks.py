"""Study deck and session database queries"""
import logging
from typing import Optional
from studyquest.db.connection import db

logger = logging.getLogger(__name__)


async def get_deck(deck_id: str) -> Optional[dict]:
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                SELECT id, owner_id, title, description, is_public, color
                FROM study_cards
                WHERE id = %s
                """,
                (deck_id,)
            )
            row = await cur.fetchone()
            return dict(row) if row else None


async def get_card_items(deck_id: str) -> list[dict]:
    """Cards of a deck in display order"""
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                SELECT id, deck_id, front, back, order_index
                FROM study_card_items
                WHERE deck_id = %s
                ORDER BY order_index ASC
                """,
                (deck_id,)
            )
            rows = await cur.fetchall()
            return [dict(row) for row in rows]


async def has_shared_access(deck_id: str, user_id: str) -> bool:
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                SELECT 1 FROM shared_cards
                WHERE deck_id = %s AND shared_with_user_id = %s
                """,
                (deck_id, user_id)
            )
            return await cur.fetchone() is not None


async def save_study_session(session: dict) -> bool:
    """
    Append a study session row

    The study_session_progress trigger rolls XP, level and streak into the
    profile. Returns False if session_id was already stored.
    """
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                INSERT INTO study_sessions
                    (session_id, user_id, deck_id, questions_answered, correct_answers, xp_earned, session_date)
                VALUES (%s, %s, %s, %s, %s, %s, %s)
                ON CONFLICT (session_id) DO NOTHING
                RETURNING id
                """,
                (
                    session["session_id"],
                    session["user_id"],
                    session["deck_id"],
                    session["questions_answered"],
                    session["correct_answers"],
                    session["xp_earned"],
                    session["session_date"],
                )
            )
            row = await cur.fetchone()
            await conn.commit()
            return row is not None
