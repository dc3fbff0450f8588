"""
Achievement System

Unlocks catalog achievements of two kinds:
- XP threshold (total XP reaches the threshold)
- Post count (number of published posts reaches the threshold)

Unlocking is monotonic: an unlocked achievement is never re-evaluated or
revoked, so repeated checks with the same or lower inputs unlock nothing.
"""

from typing import Any, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)


async def check_and_unlock_achievements(
    store,
    user_id: str,
    current_xp: int,
    post_count: Optional[int] = None
) -> List[str]:
    """
    Check if user unlocked any achievements and record the unlocks

    Args:
        store: Progress store
        user_id: User ID
        current_xp: User's current XP total
        post_count: User's published post count; post achievements are
            skipped when it is None

    Returns:
        IDs of achievements newly unlocked by this call, in catalog order.
        Callers show a popup for the first one only.
    """
    newly_unlocked = []

    all_achievements = await store.list_achievements()
    unlocked_ids = await store.list_unlocked(user_id)

    for achievement in all_achievements:
        # Skip if already unlocked
        if achievement.id in unlocked_ids:
            continue

        if not achievement.is_satisfied(current_xp, post_count):
            continue

        # A concurrent check may have inserted the same pair first
        if not await store.insert_unlock(user_id, achievement.id):
            logger.debug(f"Achievement {achievement.id} already recorded for user {user_id}")
            continue

        newly_unlocked.append(achievement.id)
        logger.info(f"User {user_id} unlocked achievement: {achievement.name} ({achievement.id})")

    return newly_unlocked


async def get_user_achievements(store, user_id: str) -> Dict[str, Any]:
    """
    Get user's achievements split into unlocked and locked

    Returns:
        {
            'unlocked': [achievement dicts],
            'locked': [achievement dicts],
            'total_unlocked': int,
            'total_achievements': int
        }
    """
    all_achievements = await store.list_achievements()
    unlocked_ids = await store.list_unlocked(user_id)

    unlocked = []
    locked = []
    for achievement in all_achievements:
        entry = {
            "id": achievement.id,
            "name": achievement.name,
            "description": achievement.description,
            "icon": achievement.icon,
            "kind": achievement.kind.value,
            "threshold": achievement.threshold,
        }
        (unlocked if achievement.id in unlocked_ids else locked).append(entry)

    return {
        "unlocked": unlocked,
        "locked": locked,
        "total_unlocked": len(unlocked),
        "total_achievements": len(all_achievements),
    }
