"""Optimistic progress cache."""
from datetime import datetime, timezone

import pytest

from daily_challenge.challenge_core import ChallengeInfo
from daily_challenge.client.progress_store import ProgressStore, normalize_progress
from daily_challenge.client.render import render_goal_row

from tests.helpers import FakeApi, FakeClock

NOW = datetime(2025, 11, 21, 9, 0, tzinfo=timezone.utc)
TODAY = "2025-11-21"


@pytest.fixture
def api():
    return FakeApi()


@pytest.fixture
def store(api):
    return ProgressStore(api, clock=FakeClock(NOW))


@pytest.fixture
def challenge():
    return ChallengeInfo(
        id=7, name="Kickstart", duration=7, goals=["Water", "Walk", "Read"],
        created_at=NOW.isoformat(),
    )


def test_normalize_list_and_mapping():
    records = [
        {"goal_index": 0, "completed": True},
        {"goal_index": "2", "completed": 0},
        {"completed": True},
        "junk",
    ]
    assert normalize_progress(records) == {0: True, 2: False}
    assert normalize_progress({"0": True, "1": False, "x": True}) == {0: True, 1: False}
    assert normalize_progress(None) == {}


def test_today_progress_empty_before_init(store):
    assert store.today_progress() == {}
    assert not store.is_initialized()


async def test_init_today_seeds_and_overlays(api, store, challenge):
    api.progress[(7, TODAY)] = {"1": True, "9": True}

    progress = await store.init_today(challenge, api.user)

    assert progress == {0: False, 1: True, 2: False}
    assert store.today_progress() == progress
    assert store.is_initialized(challenge)


async def test_is_initialized_for_other_challenge(api, store, challenge):
    await store.init_today(challenge, api.user)
    other = ChallengeInfo(id=8, name="Other", duration=3, goals=["x"])
    assert not store.is_initialized(other)


async def test_load_failure_is_empty(api, store, challenge):
    api.failing.add("get_progress")
    progress = await store.init_today(challenge, api.user)
    assert progress == {0: False, 1: False, 2: False}


async def test_toggle_twice_restores_value(api, store, challenge):
    await store.init_today(challenge, api.user)

    assert await store.toggle(1)
    assert store.today_progress()[1] is True
    assert api.progress[(7, TODAY)] == {"1": True}

    assert await store.toggle(1)
    assert store.today_progress()[1] is False
    assert api.count("save_progress") == 2


async def test_failed_persist_reverts(api, store, challenge):
    await store.init_today(challenge, api.user)
    seen = []
    store.add_listener(lambda day, idx, done: seen.append((day, idx, done)))
    api.failing.add("save_progress")

    assert not await store.toggle(0)

    assert store.today_progress()[0] is False
    assert seen == [(TODAY, 0, True), (TODAY, 0, False)]
    _, goal_index, completed = seen[-1]
    assert render_goal_row(goal_index, "Water", completed)["points_label"] is None


async def test_toggle_without_challenge(api, store):
    assert not await store.toggle(0)
    assert api.count("save_progress") == 0


async def test_clear(api, store, challenge):
    await store.init_today(challenge, api.user)
    store.clear()
    assert store.challenge is None
    assert store.today_progress() == {}
