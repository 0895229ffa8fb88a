"""Snapshot reconciliation: sync, throttle, events and rendering."""
import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from daily_challenge.boost import Boost
from daily_challenge.challenge_core import ChallengeInfo, date_key
from daily_challenge.client import ProgressStore, StatsReconciler, StatsSnapshot, reduce_stats
from daily_challenge.client.render import render_dashboard, render_goal_row

from tests.helpers import FakeApi, FakeClock, FakeMonotonic

NOW = datetime.now(timezone.utc)
TODAY = date_key(NOW, timezone.utc)


def _record(challenge_id, days_ago, duration, goals=("Water", "Walk", "Read")):
    return {
        "id": challenge_id,
        "user_id": 1,
        "name": f"Challenge {challenge_id}",
        "duration": duration,
        "goals": list(goals),
        "created_at": (NOW - timedelta(days=days_ago)).isoformat(),
    }


@pytest.fixture
def api():
    fake = FakeApi()
    fake.challenges = [_record(1, 0, 7)]
    return fake


@pytest.fixture
def mono():
    return FakeMonotonic()


@pytest.fixture
def make_reconciler(api, mono):
    def _make(**kwargs):
        clock = FakeClock(NOW)
        store = ProgressStore(api, clock=clock)
        kwargs.setdefault("badge_refresh_delay", 0.01)
        return StatsReconciler(
            api, store, dict(api.user), clock=clock, monotonic=mono, throttle=1.0, **kwargs
        )

    return _make


def test_reduce_stats_returns_new_snapshot():
    before = StatsSnapshot()
    after = reduce_stats(before, total_points=5)
    assert after.total_points == 5
    assert before.total_points == 0
    assert after is not before


async def test_first_sync_and_toggle(api, make_reconciler):
    rec = make_reconciler()

    assert await rec.sync_all()
    snap = rec.snapshot
    assert snap.challenge_day == 1
    assert snap.challenge_progress == 14
    assert snap.today_completion == 0
    assert snap.daily_points == 0
    assert snap.badge_name == "Lil Bitch"
    assert snap.rank == 1
    assert snap.boost is None

    assert await rec.store.toggle(0)
    assert rec.snapshot.daily_points == 1
    assert rec.snapshot.today_completion == 33


async def test_sync_within_throttle_window_is_dropped(api, mono, make_reconciler):
    rec = make_reconciler()

    assert await rec.sync_all()
    before = rec.snapshot
    mono.advance(0.5)
    assert not await rec.sync_all()
    assert rec.snapshot is before
    assert api.count("get_user") == 1

    mono.advance(0.6)
    assert await rec.sync_all()
    assert api.count("get_user") == 2


async def test_data_freshness(mono, make_reconciler):
    rec = make_reconciler()
    assert not rec.is_data_fresh()
    await rec.sync_all()
    assert rec.is_data_fresh()
    mono.advance(1.5)
    assert not rec.is_data_fresh()


async def test_force_refresh_ignores_throttle(api, make_reconciler):
    rec = make_reconciler()
    await rec.sync_all()
    assert await rec.force_refresh()
    assert api.count("get_user") == 2


async def test_failed_sync_keeps_snapshot(api, mono, make_reconciler):
    rec = make_reconciler()
    await rec.sync_all()
    before = rec.snapshot

    seen = []
    rec.subscribe(seen.append)
    api.user["total_points"] = 50
    api.failing.add("get_leaderboard")
    mono.advance(2)

    assert not await rec.sync_all()
    assert rec.snapshot is before
    assert seen == []


async def test_newest_active_challenge_wins(api, make_reconciler):
    api.challenges = [
        _record(3, 1, 1),
        _record(2, 2, 7),
        _record(1, 20, 30),
    ]
    rec = make_reconciler()

    await rec.sync_all()

    assert rec.active_challenge.id == 2
    assert rec.snapshot.challenge_day == 3
    assert rec.store.challenge.id == 2


async def test_no_active_challenge(api, make_reconciler):
    api.challenges = [_record(1, 10, 3)]
    rec = make_reconciler()

    await rec.sync_all()

    assert rec.active_challenge is None
    assert rec.snapshot.challenge_day == 0
    assert rec.snapshot.daily_points == 0
    assert render_dashboard(rec.snapshot)["challenge_days"] == "No active challenge"


async def test_boost_scales_daily_points(api, make_reconciler):
    api.stats["rank"] = 2
    api.user["total_points"] = 4
    api.leaderboard = [{"name": "alex", "total_points": 10}, {"name": "sam", "total_points": 4}]
    api.progress[(1, TODAY)] = {"0": True, "1": True}
    rec = make_reconciler()

    await rec.sync_all()

    snap = rec.snapshot
    assert snap.boost == Boost(2.0, "1:1")
    assert snap.daily_points == 4
    assert snap.today_completion == 67
    assert snap.total_points == 4
    assert snap.max_leaderboard_points == 10
    assert render_dashboard(snap)["boost"] == "2.0x (1:1)"


async def test_theme_sets_badge(api, make_reconciler):
    api.theme = {"name": "WARRIOR", "icon": "⚡"}
    rec = make_reconciler()
    await rec.sync_all()
    assert rec.snapshot.badge_name == "WARRIOR"
    assert rec.snapshot.badge_icon == "⚡"


async def test_task_completed_syncs_in_background(api, mono, make_reconciler):
    rec = make_reconciler()
    await rec.sync_all()
    mono.advance(2)

    api.user["total_points"] = 1
    task = rec.on_task_completed()
    assert await task
    assert rec.snapshot.total_points == 1
    assert api.count("get_user") == 2


async def test_toggle_goal_updates_then_syncs(api, mono, make_reconciler):
    rec = make_reconciler()
    await rec.sync_all()
    mono.advance(2)

    assert await rec.toggle_goal(2)
    assert rec.snapshot.daily_points == 1

    await asyncio.sleep(0.01)
    assert api.count("get_user") == 2


async def test_badge_earned_repaints_after_delay(api, make_reconciler):
    rec = make_reconciler()
    await rec.sync_all()

    seen = []
    rec.subscribe(seen.append)

    await rec.on_badge_earned()
    assert api.count("get_user") == 2
    assert len(seen) == 1

    await asyncio.sleep(0.05)
    assert len(seen) == 2
    assert seen[1] is seen[0]


async def test_check_badges(api, make_reconciler):
    rec = make_reconciler()
    await rec.sync_all()

    assert await rec.check_badges() == []
    assert api.count("get_user") == 1

    api.new_badges = [{"name": "BEAST MODE", "icon": "🔥"}]
    earned = await rec.check_badges()
    assert [b["name"] for b in earned] == ["BEAST MODE"]
    assert api.count("get_user") == 2

    api.failing.add("check_badges")
    assert await rec.check_badges() == []
    await asyncio.sleep(0.05)


async def test_unsubscribe(make_reconciler):
    rec = make_reconciler()
    seen = []
    unsubscribe = rec.subscribe(seen.append)
    unsubscribe()
    await rec.sync_all()
    assert seen == []


async def test_create_challenge_becomes_active(api, make_reconciler):
    api.challenges = []
    rec = make_reconciler()
    await rec.sync_all()
    assert rec.active_challenge is None

    challenge = await rec.create_challenge("Fresh start", 5, ["Water", "Walk"])

    assert challenge.id == 100
    assert rec.active_challenge.id == 100
    assert rec.store.today_progress() == {0: False, 1: False}
    assert rec.snapshot.challenge_day == 1


async def test_archive_only_when_complete(api, make_reconciler):
    rec = make_reconciler()
    await rec.sync_all()

    assert await rec.archive_if_complete() is None
    assert api.count("archive_challenge") == 0

    api.challenges = []
    rec.active_challenge = ChallengeInfo.from_record(_record(1, 10, 3))
    archived = await rec.archive_if_complete()

    assert archived == {"challenge_id": 1}
    assert rec.active_challenge is None
    assert rec.snapshot.challenge_day == 0


def test_render_dashboard_with_challenge():
    challenge = ChallengeInfo(id=1, name="Kickstart", duration=7, goals=["a"])
    snap = StatsSnapshot(total_points=12, daily_points=2, challenge_day=3, challenge_progress=43,
                         today_completion=67, current_streak=4, rank=2)
    view = render_dashboard(snap, challenge)

    assert view["header_points"] == "12 points"
    assert view["today_points"] == "2"
    assert view["completion"] == "67%"
    assert view["challenge_days"] == "3"
    assert view["challenge_line"] == "Day 3 of 7 • 43% complete"
    assert view["streak"] == "Current streak: 4 days"
    assert view["rank"] == "#2"
    assert view["badge"] == {"name": "Lil Bitch", "icon": "🍆"}
    assert view["boost"] is None

    assert render_dashboard(StatsSnapshot())["rank"] == "#?"


def test_render_goal_row():
    assert render_goal_row(0, "Water", True)["points_label"] == "+1 point"
    row = render_goal_row(1, "Walk", False)
    assert row == {"goal_index": 1, "label": "Walk", "completed": False, "points_label": None}


async def test_close_cancels_pending_work(api, mono, make_reconciler):
    rec = make_reconciler()
    await rec.sync_all()

    seen = []
    rec.subscribe(seen.append)
    await rec.on_badge_earned()

    mono.advance(2)
    task = rec.on_task_completed()
    painted = len(seen)

    await rec.close()
    await asyncio.sleep(0.05)

    assert task.cancelled()
    assert len(seen) == painted
    assert api.count("get_user") == 2
