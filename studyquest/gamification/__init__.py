"""
Gamification system for StudyQuest

This module implements the progression economy:
- XP and leveling
- Achievement unlocking
- Cosmetic shop (purchase, equip, unequip)
"""

from studyquest.gamification.xp_system import (
    award_xp,
    calculate_level_from_xp,
    level_for_xp,
    rank_for_level,
    xp_ceiling_for_level,
    xp_for_post,
)
from studyquest.gamification.achievement_system import check_and_unlock_achievements, get_user_achievements
from studyquest.gamification.shop import ShopEconomy

__all__ = [
    "award_xp",
    "calculate_level_from_xp",
    "level_for_xp",
    "rank_for_level",
    "xp_ceiling_for_level",
    "xp_for_post",
    "check_and_unlock_achievements",
    "get_user_achievements",
    "ShopEconomy",
]
