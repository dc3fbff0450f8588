"""Global test fixtures and utilities for studyquest tests"""
import random

import pytest

from studyquest.db.memory_store import InMemoryStore
from studyquest.models import (
    Achievement,
    AchievementKind,
    CardItem,
    ItemType,
    ShopItem,
    StudyDeck,
)


# ============================================================================
# User Fixtures
# ============================================================================

@pytest.fixture
def test_user_id():
    """Standard test user ID"""
    return "user-1"


@pytest.fixture
def other_user_id():
    """A second user, never the owner of test decks"""
    return "user-2"


# ============================================================================
# Catalog Fixtures
# ============================================================================

@pytest.fixture
def sample_achievements():
    """Two post milestones and three XP thresholds"""
    return [
        Achievement(id="first-share", name="First Share", kind=AchievementKind.POST_COUNT, threshold=1),
        Achievement(id="community-helper", name="Community Helper", kind=AchievementKind.POST_COUNT, threshold=10),
        Achievement(id="xp-100", name="Getting Started", kind=AchievementKind.XP_THRESHOLD, threshold=100),
        Achievement(id="xp-500", name="Dedicated", kind=AchievementKind.XP_THRESHOLD, threshold=500),
        Achievement(id="xp-1000", name="Scholar", kind=AchievementKind.XP_THRESHOLD, threshold=1000),
    ]


@pytest.fixture
def gold_border():
    return ShopItem(id="gold-border", name="Gold Border", item_type=ItemType.BORDER, item_value="gold", xp_cost=100)


@pytest.fixture
def red_name():
    return ShopItem(id="red-name", name="Red Name", item_type=ItemType.NAME_COLOR, item_value="#ef4444", xp_cost=50)


# ============================================================================
# Deck Fixtures
# ============================================================================

@pytest.fixture
def capitals_deck(test_user_id):
    """Private deck owned by test_user_id"""
    return StudyDeck(id="deck-1", owner_id=test_user_id, title="Capitals")


@pytest.fixture
def capitals_cards():
    """Three cards, stored out of display order"""
    return [
        CardItem(id="card-3", deck_id="deck-1", front="Capital of Italy?", back="Rome", order_index=2),
        CardItem(id="card-1", deck_id="deck-1", front="Capital of France?", back="Paris", order_index=0),
        CardItem(id="card-2", deck_id="deck-1", front="2 + 3?", back="5", order_index=1),
    ]


# ============================================================================
# Store Fixtures
# ============================================================================

@pytest.fixture
def store():
    """Empty in-memory store"""
    return InMemoryStore()


@pytest.fixture
def seeded_store(store, test_user_id, sample_achievements, gold_border, red_name, capitals_deck, capitals_cards):
    """In-memory store with a profile, catalogs and one deck"""
    store.add_profile(test_user_id, xp=0)
    for achievement in sample_achievements:
        store.add_achievement(achievement)
    store.add_shop_item(gold_border)
    store.add_shop_item(red_name)
    store.add_deck(capitals_deck, capitals_cards)
    return store


@pytest.fixture
def rng():
    """Deterministic randomness source"""
    return random.Random(42)
