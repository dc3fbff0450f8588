"""
GamificationService - Gamification Business Logic

Handles post XP, achievement re-checks, progress summaries and leaderboards.
"""

import logging
from typing import Any, Dict, List, Optional

from studyquest.exceptions import StudyQuestError
from studyquest.gamification import (
    award_xp,
    calculate_level_from_xp,
    check_and_unlock_achievements,
    get_user_achievements,
    xp_for_post,
)

logger = logging.getLogger(__name__)


class GamificationService:
    """
    Service for gamification features.

    Responsibilities:
    - XP awarding for community posts
    - Achievement checking after XP changes
    - Progress and leaderboard views
    """

    def __init__(self, store):
        """
        Initialize GamificationService.

        Args:
            store: Progress store instance
        """
        self.store = store
        logger.debug("GamificationService initialized")

    async def process_post_created(self, user_id: str, post_type: str) -> Dict[str, Any]:
        """
        Process gamification for a published post.

        The post itself must already be stored, so the post count includes it.
        Failures are logged and reported as an empty result; publishing the
        post does not depend on them.

        Args:
            user_id: Author's user ID
            post_type: material, strategy or idea

        Returns:
            {
                'xp_awarded': int,
                'level_up': bool,
                'new_level': int,
                'achievements_unlocked': list,
                'message': str  # User-facing message
            }
        """
        try:
            result = self._empty_result()

            xp_result = await award_xp(
                self.store,
                user_id=user_id,
                amount=xp_for_post(post_type),
                source_type="post",
                reason=f"Shared a {post_type}"
            )

            result['xp_awarded'] = xp_result['xp_awarded']
            result['level_up'] = xp_result['leveled_up']
            result['new_level'] = xp_result['new_level']

            post_count = await self.store.count_posts(user_id)
            result['achievements_unlocked'] = await check_and_unlock_achievements(
                self.store,
                user_id,
                current_xp=xp_result['new_total_xp'],
                post_count=post_count
            )

            result['message'] = self._build_post_message(result)

            logger.info(
                f"Gamification processed for post: user={user_id}, type={post_type}, "
                f"xp={result['xp_awarded']}, achievements={len(result['achievements_unlocked'])}"
            )

            return result

        except StudyQuestError as e:
            logger.error(f"Error in post gamification: {e}", exc_info=True)
            return self._empty_result()

    async def get_progress_summary(self, user_id: str) -> Dict[str, Any]:
        """
        Get profile, level bar and achievements for a user.

        Returns:
            {
                'profile': ProgressProfile,
                'level': dict from calculate_level_from_xp,
                'achievements': dict from get_user_achievements
            }
        """
        profile = await self.store.get_profile(user_id)

        return {
            'profile': profile,
            'level': calculate_level_from_xp(profile.xp),
            'achievements': await get_user_achievements(self.store, user_id),
        }

    async def get_leaderboard(self, limit: int = 100, role: Optional[str] = None) -> List[Dict[str, Any]]:
        """Profiles ranked by XP, highest first"""
        profiles = await self.store.list_top_profiles(limit=limit, role=role)

        return [
            {
                'position': position,
                'user_id': profile.user_id,
                'full_name': profile.full_name,
                'xp': profile.xp,
                'level': profile.level,
                'border_style': profile.border_style,
                'name_color': profile.name_color,
            }
            for position, profile in enumerate(profiles, start=1)
        ]

    def _build_post_message(self, result: Dict) -> str:
        """Build simple post gamification message."""
        message_parts = [f"⭐ +{result['xp_awarded']} XP"]

        if result['level_up']:
            message_parts.append(f"🎉 Level {result['new_level']}!")

        if result['achievements_unlocked']:
            message_parts.append("🏆 Achievement unlocked!")

        return '\n'.join(message_parts)

    def _empty_result(self) -> Dict[str, Any]:
        """Return empty gamification result."""
        return {
            'xp_awarded': 0,
            'level_up': False,
            'new_level': 1,
            'achievements_unlocked': [],
            'message': ''
        }
