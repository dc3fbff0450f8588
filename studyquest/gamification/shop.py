"""
Shop Economy

Cosmetic items bought with XP. Each item occupies one of two equip slots
(avatar border, name color); a profile shows at most one value per slot.
Ownership is permanent and independent of what is currently equipped.
"""

import logging
from typing import Any, Dict, List

from studyquest.exceptions import InsufficientXPError, ItemNotOwnedError, StudyQuestError
from studyquest.gamification.achievement_system import check_and_unlock_achievements
from studyquest.models import ActivityLog, DEFAULT_SLOT, ProgressProfile, PurchaseResult, ShopItem

logger = logging.getLogger(__name__)


class ShopEconomy:
    """
    Purchase, equip and unequip of shop items.

    Responsibilities:
    - XP balance check and debit on first purchase
    - Level recompute after the debit (level may go down)
    - Slot updates on the progress profile
    - Achievement re-check after a purchase
    """

    def __init__(self, store):
        self.store = store

    async def purchase(self, user_id: str, item: ShopItem) -> PurchaseResult:
        """
        Buy an item, or equip it for free if the user already owns it.

        Raises:
            InsufficientXPError: profile XP is below the item's cost
        """
        if item.id in await self.store.list_purchases(user_id):
            profile = await self.equip(user_id, item)
            return self._result(item, profile, profile.level, already_owned=True)

        before = await self.store.get_profile(user_id)
        if before.xp < item.xp_cost:
            raise InsufficientXPError(
                required=item.xp_cost,
                available=before.xp,
                item_id=item.id,
                user_id=user_id,
                operation="purchase",
            )

        profile, newly_purchased = await self.store.commit_purchase(user_id, item)
        if not newly_purchased:
            # Another request bought it between our ownership check and the commit
            return self._result(item, profile, before.level, already_owned=True)

        logger.info(
            f"User {user_id} purchased {item.item_type.value} '{item.item_value}' "
            f"for {item.xp_cost} XP. Balance: {profile.xp} XP, Level: {profile.level}"
        )

        level_down = profile.level < before.level
        if level_down:
            await self._log_level_down(user_id, before, profile, item)

        unlocked = await self._recheck_achievements(user_id, profile)

        result = self._result(item, profile, before.level, already_owned=False)
        result.xp_spent = item.xp_cost
        result.level_down = level_down
        result.achievements_unlocked = unlocked
        return result

    async def equip(self, user_id: str, item: ShopItem) -> ProgressProfile:
        """Put an owned item in its slot. Idempotent, no XP effect."""
        await self._require_owned(user_id, item)
        profile = await self.store.update_profile(user_id, {item.slot_field: item.item_value})
        logger.info(f"User {user_id} equipped {item.slot_field}={item.item_value}")
        return profile

    async def unequip(self, user_id: str, item: ShopItem) -> ProgressProfile:
        """Reset an owned item's slot to the default look. No XP effect."""
        await self._require_owned(user_id, item)
        profile = await self.store.update_profile(user_id, {item.slot_field: DEFAULT_SLOT})
        logger.info(f"User {user_id} reset {item.slot_field} to default")
        return profile

    async def list_catalog(self, user_id: str) -> List[Dict[str, Any]]:
        """Shop items by cost, flagged for the user's shop tab"""
        items = await self.store.list_shop_items()
        owned = await self.store.list_purchases(user_id)
        profile = await self.store.get_profile(user_id)

        return [
            {
                "item": item,
                "owned": item.id in owned,
                "equipped": item.id in owned and getattr(profile, item.slot_field) == item.item_value,
                "affordable": item.id in owned or profile.xp >= item.xp_cost,
            }
            for item in items
        ]

    async def _require_owned(self, user_id: str, item: ShopItem) -> None:
        if item.id not in await self.store.list_purchases(user_id):
            raise ItemNotOwnedError(item_id=item.id, user_id=user_id)

    async def _log_level_down(
        self,
        user_id: str,
        before: ProgressProfile,
        after: ProgressProfile,
        item: ShopItem
    ) -> None:
        """Audit entry for a purchase that cost a level; never fails the purchase"""
        entry = ActivityLog(
            user_id=user_id,
            action="level_down",
            details={
                "old_level": before.level,
                "new_level": after.level,
                "xp_spent": item.xp_cost,
                "item_id": item.id,
            },
        )
        try:
            await self.store.insert_activity_log(entry)
        except StudyQuestError as e:
            logger.warning(f"Could not record level_down for user {user_id}: {e.message}")
        logger.info(f"User {user_id} dropped from level {before.level} to {after.level} after a purchase")

    async def _recheck_achievements(self, user_id: str, profile: ProgressProfile) -> List[str]:
        """Unlock achievements for the post-purchase balance; never fails the purchase"""
        try:
            post_count = await self.store.count_posts(user_id)
            return await check_and_unlock_achievements(self.store, user_id, profile.xp, post_count)
        except StudyQuestError as e:
            logger.warning(f"Achievement check after purchase failed for user {user_id}: {e.message}")
            return []

    @staticmethod
    def _result(
        item: ShopItem,
        profile: ProgressProfile,
        old_level: int,
        already_owned: bool
    ) -> PurchaseResult:
        return PurchaseResult(
            item_id=item.id,
            already_owned=already_owned,
            new_xp=profile.xp,
            new_level=profile.level,
            old_level=old_level,
            equipped_field=item.slot_field,
            equipped_value=getattr(profile, item.slot_field),
        )
