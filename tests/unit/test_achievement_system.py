"""Unit tests for Achievement System (studyquest/gamification/achievement_system.py)"""
import pytest
from unittest.mock import AsyncMock

from studyquest.gamification.achievement_system import (
    check_and_unlock_achievements,
    get_user_achievements,
)
from studyquest.models import Achievement, AchievementKind


# ============================================================================
# Achievement Model Tests
# ============================================================================

def test_from_row_with_kind():
    """Test rows carrying kind and threshold are used as is"""
    achievement = Achievement.from_row({
        "id": "a-1", "name": "Poster", "kind": "post_count", "threshold": 5, "xp_required": 0,
    })

    assert achievement.kind == AchievementKind.POST_COUNT
    assert achievement.threshold == 5


def test_from_row_legacy_xp():
    """Test legacy row with positive xp_required becomes an XP threshold"""
    achievement = Achievement.from_row({"id": 7, "name": "Dedicated", "xp_required": 500})

    assert achievement.id == "7"
    assert achievement.kind == AchievementKind.XP_THRESHOLD
    assert achievement.threshold == 500


@pytest.mark.parametrize("name,threshold", [("First Share", 1), ("Community Helper", 10)])
def test_from_row_legacy_post_milestones(name, threshold):
    """Test legacy zero-XP rows map to post milestones by name"""
    achievement = Achievement.from_row({"id": "a", "name": name, "xp_required": 0})

    assert achievement.kind == AchievementKind.POST_COUNT
    assert achievement.threshold == threshold


def test_from_row_legacy_unknown_never_unlocks():
    """Test an unknown zero-XP row can never be satisfied"""
    achievement = Achievement.from_row({"id": "a", "name": "Mystery", "xp_required": 0})

    assert achievement.threshold is None
    assert achievement.is_satisfied(10_000, 10_000) is False


def test_is_satisfied_post_count_requires_count():
    """Test post achievements are not satisfied without a post count"""
    achievement = Achievement(id="a", name="First Share", kind=AchievementKind.POST_COUNT, threshold=1)

    assert achievement.is_satisfied(0, None) is False
    assert achievement.is_satisfied(0, 1) is True


# ============================================================================
# Achievement Checking and Unlock Tests
# ============================================================================

@pytest.mark.asyncio
async def test_check_unlocks_xp_thresholds(seeded_store, test_user_id):
    """Test every reached XP threshold unlocks in catalog order"""
    result = await check_and_unlock_achievements(seeded_store, test_user_id, current_xp=600)

    assert result == ["xp-100", "xp-500"]
    assert await seeded_store.list_unlocked(test_user_id) == {"xp-100", "xp-500"}


@pytest.mark.asyncio
async def test_check_is_idempotent(seeded_store, test_user_id):
    """Test a second identical check unlocks nothing"""
    first = await check_and_unlock_achievements(seeded_store, test_user_id, current_xp=150, post_count=1)
    second = await check_and_unlock_achievements(seeded_store, test_user_id, current_xp=150, post_count=1)

    assert first == ["first-share", "xp-100"]
    assert second == []


@pytest.mark.asyncio
async def test_check_never_revokes(seeded_store, test_user_id):
    """Test lower XP later keeps earlier unlocks"""
    await check_and_unlock_achievements(seeded_store, test_user_id, current_xp=500)

    result = await check_and_unlock_achievements(seeded_store, test_user_id, current_xp=0)

    assert result == []
    assert await seeded_store.list_unlocked(test_user_id) == {"xp-100", "xp-500"}


@pytest.mark.asyncio
async def test_check_skips_post_achievements_without_count(seeded_store, test_user_id):
    """Test post achievements are skipped when post_count is None"""
    result = await check_and_unlock_achievements(seeded_store, test_user_id, current_xp=0)

    assert result == []


@pytest.mark.asyncio
async def test_check_post_milestones(seeded_store, test_user_id):
    """Test both post milestones unlock at 10 posts"""
    result = await check_and_unlock_achievements(seeded_store, test_user_id, current_xp=0, post_count=10)

    assert result == ["first-share", "community-helper"]


@pytest.mark.asyncio
async def test_check_concurrent_insert_not_reported(test_user_id):
    """Test an unlock already recorded by a concurrent check is not reported"""
    store = AsyncMock()
    store.list_achievements.return_value = [
        Achievement(id="xp-100", name="Getting Started", kind=AchievementKind.XP_THRESHOLD, threshold=100),
    ]
    store.list_unlocked.return_value = set()
    store.insert_unlock.return_value = False

    result = await check_and_unlock_achievements(store, test_user_id, current_xp=100)

    assert result == []
    store.insert_unlock.assert_awaited_once_with(test_user_id, "xp-100")


# ============================================================================
# Achievement Listing Tests
# ============================================================================

@pytest.mark.asyncio
async def test_get_user_achievements(seeded_store, test_user_id):
    """Test unlocked and locked split"""
    await check_and_unlock_achievements(seeded_store, test_user_id, current_xp=100)

    result = await get_user_achievements(seeded_store, test_user_id)

    assert result["total_unlocked"] == 1
    assert result["total_achievements"] == 5
    assert [a["id"] for a in result["unlocked"]] == ["xp-100"]
    assert len(result["locked"]) == 4
    assert result["unlocked"][0]["kind"] == "xp_threshold"
