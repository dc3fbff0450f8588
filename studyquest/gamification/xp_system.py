"""
XP and Leveling System

Manages XP awards and level calculations.

Leveling Curve:
- Flat 100 XP per level: level = xp // 100 + 1
- Level N's XP target (the XP bar maximum) is N * 100

Ranks:
- Level 1-5: Novice
- Level 6-10: Apprentice
- Level 11-20: Expert
- Level 21+: Master

XP Award Rules:
- Correct quiz answer: 10 XP (rolled into the profile by the session store)
- Community post: material 50, strategy 30, idea 20
"""

from typing import Any, Dict, Optional
import logging

from studyquest.exceptions import ValidationError

logger = logging.getLogger(__name__)

XP_PER_LEVEL = 100

POST_XP = {
    "material": 50,
    "strategy": 30,
    "idea": 20,
}

RANKS = (
    (21, "Master"),
    (11, "Expert"),
    (6, "Apprentice"),
    (1, "Novice"),
)


def level_for_xp(xp: int) -> int:
    """Level for a non-negative XP total"""
    if xp < 0:
        raise ValidationError(message="XP cannot be negative", field="xp", value=xp)
    return xp // XP_PER_LEVEL + 1


def xp_ceiling_for_level(level: int) -> int:
    """XP target shown as the maximum of the level's XP bar"""
    return level * XP_PER_LEVEL


def rank_for_level(level: int) -> str:
    for min_level, rank in RANKS:
        if level >= min_level:
            return rank
    return RANKS[-1][1]


def calculate_level_from_xp(total_xp: int) -> Dict[str, Any]:
    """
    Calculate level, rank and XP bar values from total XP

    Returns:
        {
            'current_level': int,
            'rank': str,
            'xp_ceiling': int,
            'xp_to_next_level': int,
            'progress_percent': float
        }
    """
    level = level_for_xp(total_xp)
    ceiling = xp_ceiling_for_level(level)

    return {
        "current_level": level,
        "rank": rank_for_level(level),
        "xp_ceiling": ceiling,
        "xp_to_next_level": ceiling - total_xp,
        "progress_percent": min(total_xp / ceiling * 100, 100.0),
    }


def xp_for_post(post_type: str) -> int:
    """XP earned for publishing a post of the given type"""
    if post_type not in POST_XP:
        raise ValidationError(
            message=f"Unknown post type {post_type!r}",
            field="post_type",
            value=post_type,
        )
    return POST_XP[post_type]


async def award_xp(
    store,
    user_id: str,
    amount: int,
    source_type: str,
    reason: Optional[str] = None
) -> Dict[str, Any]:
    """
    Award XP to user and check for level up

    The delta and the recomputed level are applied in one atomic store call.

    Args:
        store: Progress store
        user_id: User ID
        amount: Amount of XP to award (non-negative)
        source_type: Type of activity (post, ...)
        reason: Human-readable description

    Returns:
        {
            'xp_awarded': int,
            'old_total_xp': int,
            'new_total_xp': int,
            'old_level': int,
            'new_level': int,
            'leveled_up': bool
        }
    """
    if amount < 0:
        raise ValidationError(message="XP award must be non-negative", field="amount", value=amount, user_id=user_id)

    profile = await store.apply_xp_delta(user_id, amount)
    old_total_xp = profile.xp - amount
    old_level = level_for_xp(old_total_xp)
    leveled_up = profile.level > old_level

    logger.info(
        f"Awarded {amount} XP to user {user_id} for {source_type}"
        f"{f' ({reason})' if reason else ''}. "
        f"Total: {profile.xp} XP, Level: {profile.level}"
    )

    if leveled_up:
        logger.info(f"User {user_id} leveled up from {old_level} to {profile.level}!")

    return {
        "xp_awarded": amount,
        "old_total_xp": old_total_xp,
        "new_total_xp": profile.xp,
        "old_level": old_level,
        "new_level": profile.level,
        "leveled_up": leveled_up,
    }
