"""
Database queries - re-export all functions

Module organization:
- profile.py: Progress profiles, posts count, activity logs
- gamification.py: Achievements, shop items, purchases
- decks.py: Study decks, card items, shares, study sessions
"""

from studyquest.db.queries.profile import (
    get_profile,
    update_profile,
    apply_xp_delta,
    get_top_profiles,
    count_posts,
    add_activity_log,
)

from studyquest.db.queries.gamification import (
    get_all_achievements,
    get_unlocked_achievement_ids,
    unlock_achievement,
    get_shop_items,
    get_purchased_item_ids,
    add_purchase,
    commit_purchase,
)

from studyquest.db.queries.decks import (
    get_deck,
    get_card_items,
    has_shared_access,
    save_study_session,
)

__all__ = [
    "get_profile",
    "update_profile",
    "apply_xp_delta",
    "get_top_profiles",
    "count_posts",
    "add_activity_log",
    "get_all_achievements",
    "get_unlocked_achievement_ids",
    "unlock_achievement",
    "get_shop_items",
    "get_purchased_item_ids",
    "add_purchase",
    "commit_purchase",
    "get_deck",
    "get_card_items",
    "has_shared_access",
    "save_study_session",
]
