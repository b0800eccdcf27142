"""Shared fixtures: fake Redis, small EMA periods, wired state."""

import fakeredis
import pytest

from decision_service import BotState, PositionManager, PositionStore
from shared.config import Settings


@pytest.fixture
def rds():
    """A private in-memory Redis server per test."""
    return fakeredis.FakeRedis(server=fakeredis.FakeServer(), decode_responses=True)


@pytest.fixture
def settings():
    return Settings(
        symbol="BTCUSDT",
        interval="1m",
        entry_fast=2,
        entry_slow=3,
        exit_fast=2,
        exit_slow=3,
        window_margin=2,
        dry_run=False,
        key_prefix="test",
    )


@pytest.fixture
def store(rds, settings):
    return PositionStore(rds, settings.key_prefix)


@pytest.fixture
def state():
    return BotState()


@pytest.fixture
def manager(settings, state, store):
    return PositionManager(settings, state, store)
