"""Unit tests for the in-memory store (studyquest/db/memory_store.py)"""
from datetime import date, timedelta

import pytest

from studyquest.db.memory_store import InMemoryStore
from studyquest.exceptions import InsufficientXPError, ValidationError
from studyquest.models import StudySessionResult

DAY_1 = date(2026, 3, 2)


def session_on(user_id, day, xp=10, session_id=None):
    result = StudySessionResult(
        user_id=user_id,
        deck_id="deck-1",
        questions_answered=1,
        correct_answers=xp // 10,
        xp_earned=xp,
        session_date=day,
    )
    if session_id:
        result.session_id = session_id
    return result


# ============================================================================
# Profile Tests
# ============================================================================

@pytest.mark.asyncio
async def test_get_profile_creates_default(store):
    """Test unknown users get a default profile"""
    profile = await store.get_profile("new-user")

    assert profile.xp == 0
    assert profile.level == 1
    assert profile.border_style == "default"
    assert profile.name_color == "default"


@pytest.mark.asyncio
async def test_get_profile_returns_copy(store, test_user_id):
    """Test callers cannot mutate stored state"""
    profile = await store.get_profile(test_user_id)
    profile.xp = 999

    assert (await store.get_profile(test_user_id)).xp == 0


@pytest.mark.asyncio
async def test_update_profile_unknown_field(store, test_user_id):
    """Test patches are limited to profile fields"""
    with pytest.raises(ValidationError):
        await store.update_profile(test_user_id, {"is_admin": True})


@pytest.mark.asyncio
async def test_update_profile_negative_xp(store, test_user_id):
    """Test XP can never be stored negative"""
    with pytest.raises(ValidationError):
        await store.update_profile(test_user_id, {"xp": -5})


@pytest.mark.asyncio
async def test_update_profile_invalid_value(store, test_user_id):
    """Test a patch failing model validation raises the store's ValidationError"""
    with pytest.raises(ValidationError) as exc_info:
        await store.update_profile(test_user_id, {"level": 0})

    assert exc_info.value.field == "patch"
    profile = await store.get_profile(test_user_id)
    assert profile.level == 1


@pytest.mark.asyncio
async def test_apply_xp_delta_recomputes_level(store, test_user_id):
    """Test XP and level change together"""
    profile = await store.apply_xp_delta(test_user_id, 230)

    assert profile.xp == 230
    assert profile.level == 3


@pytest.mark.asyncio
async def test_apply_xp_delta_below_zero(store, test_user_id):
    """Test a delta that would go negative is rejected"""
    store.add_profile(test_user_id, xp=30)

    with pytest.raises(ValidationError):
        await store.apply_xp_delta(test_user_id, -31)

    assert (await store.get_profile(test_user_id)).xp == 30


@pytest.mark.asyncio
async def test_list_top_profiles(store):
    """Test leaderboard order, role filter and limit"""
    store.add_profile("a", xp=50)
    store.add_profile("b", xp=300, role="professional")
    store.add_profile("c", xp=120)

    assert [p.user_id for p in await store.list_top_profiles()] == ["b", "c", "a"]
    assert [p.user_id for p in await store.list_top_profiles(role="student")] == ["c", "a"]
    assert [p.user_id for p in await store.list_top_profiles(limit=1)] == ["b"]


# ============================================================================
# Unique Pair Tests
# ============================================================================

@pytest.mark.asyncio
async def test_insert_unlock_unique(store, test_user_id):
    """Test unlock pairs are stored once"""
    assert await store.insert_unlock(test_user_id, "a-1") is True
    assert await store.insert_unlock(test_user_id, "a-1") is False
    assert await store.list_unlocked(test_user_id) == {"a-1"}


@pytest.mark.asyncio
async def test_insert_purchase_unique(store, test_user_id):
    """Test purchase pairs are stored once"""
    assert await store.insert_purchase(test_user_id, "item-1") is True
    assert await store.insert_purchase(test_user_id, "item-1") is False


@pytest.mark.asyncio
async def test_commit_purchase_insufficient_writes_nothing(store, test_user_id, gold_border):
    """Test a short balance leaves ownership and profile untouched"""
    store.add_profile(test_user_id, xp=99)

    with pytest.raises(InsufficientXPError):
        await store.commit_purchase(test_user_id, gold_border)

    assert await store.list_purchases(test_user_id) == set()
    assert (await store.get_profile(test_user_id)).xp == 99


@pytest.mark.asyncio
async def test_commit_purchase_owned_is_free(store, test_user_id, gold_border):
    """Test committing an owned item only equips it"""
    store.add_profile(test_user_id, xp=0)
    await store.insert_purchase(test_user_id, gold_border.id)

    profile, newly_purchased = await store.commit_purchase(test_user_id, gold_border)

    assert newly_purchased is False
    assert profile.xp == 0
    assert profile.border_style == "gold"


# ============================================================================
# Study Session Trigger Tests
# ============================================================================

@pytest.mark.asyncio
async def test_session_rolls_into_profile(store, test_user_id):
    """Test a stored session adds XP and starts a streak"""
    assert await store.insert_session_result(session_on(test_user_id, DAY_1, xp=120)) is True

    profile = await store.get_profile(test_user_id)
    assert profile.xp == 120
    assert profile.level == 2
    assert profile.current_streak == 1
    assert profile.longest_streak == 1
    assert profile.last_study_date == DAY_1


@pytest.mark.asyncio
async def test_duplicate_session_counted_once(store, test_user_id):
    """Test a resubmitted session id is ignored"""
    await store.insert_session_result(session_on(test_user_id, DAY_1, session_id="s-1"))

    assert await store.insert_session_result(session_on(test_user_id, DAY_1, session_id="s-1")) is False
    assert (await store.get_profile(test_user_id)).xp == 10
    assert len(store.session_results) == 1


@pytest.mark.asyncio
async def test_streak_progression(store, test_user_id):
    """Test same day, next day and gap handling"""
    await store.insert_session_result(session_on(test_user_id, DAY_1))
    await store.insert_session_result(session_on(test_user_id, DAY_1))
    assert (await store.get_profile(test_user_id)).current_streak == 1

    await store.insert_session_result(session_on(test_user_id, DAY_1 + timedelta(days=1)))
    assert (await store.get_profile(test_user_id)).current_streak == 2

    await store.insert_session_result(session_on(test_user_id, DAY_1 + timedelta(days=3)))
    profile = await store.get_profile(test_user_id)
    assert profile.current_streak == 1
    assert profile.longest_streak == 2
    assert profile.last_study_date == DAY_1 + timedelta(days=3)


@pytest.mark.asyncio
async def test_late_session_keeps_last_date(store, test_user_id):
    """Test a session dated before the last study day does not move it back"""
    await store.insert_session_result(session_on(test_user_id, DAY_1 + timedelta(days=5)))

    await store.insert_session_result(session_on(test_user_id, DAY_1))

    profile = await store.get_profile(test_user_id)
    assert profile.last_study_date == DAY_1 + timedelta(days=5)
    assert profile.current_streak == 1
    assert profile.xp == 20


@pytest.mark.asyncio
async def test_trigger_emulation_disabled(test_user_id):
    """Test sessions are only logged when emulation is off"""
    store = InMemoryStore(emulate_session_trigger=False)

    await store.insert_session_result(session_on(test_user_id, DAY_1))

    assert (await store.get_profile(test_user_id)).xp == 0
    assert len(store.session_results) == 1
