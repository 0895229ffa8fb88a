# daily_challenge/client/stats_reconciler.py
"""
Single writer of the displayed stats.

Each update builds a new frozen StatsSnapshot through ``reduce_stats`` and
hands it to every subscriber; nobody else computes points, days or
percentages for display.
"""
import asyncio
import logging
import time
from dataclasses import dataclass, replace
from datetime import datetime, timezone, tzinfo
from typing import Any, Callable, Dict, List, Optional

from config import Config

from ..boost import DEFAULT_TIER, Boost, badge_icon, boost_for
from ..challenge_core import (
    ChallengeInfo,
    challenge_day,
    challenge_progress_percent,
    completion_percent,
    daily_points,
    is_challenge_active,
    is_challenge_complete,
)
from .api_client import ApiClient, ApiError
from .progress_store import ProgressStore

logger = logging.getLogger(__name__)

Subscriber = Callable[["StatsSnapshot"], None]


@dataclass(frozen=True)
class StatsSnapshot:
    total_points: int = 0
    daily_points: int = 0
    challenge_day: int = 0
    challenge_progress: int = 0
    today_completion: int = 0
    badge_name: str = DEFAULT_TIER
    badge_icon: str = badge_icon(DEFAULT_TIER)
    current_streak: int = 0
    rank: int = 0
    total_challenges: int = 0
    completed_goals: int = 0
    max_leaderboard_points: int = 0
    boost: Optional[Boost] = None


def reduce_stats(snapshot: StatsSnapshot, **changes: Any) -> StatsSnapshot:
    return replace(snapshot, **changes)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StatsReconciler:
    def __init__(
        self,
        api: ApiClient,
        store: ProgressStore,
        user: Dict[str, Any],
        tz: tzinfo = timezone.utc,
        clock: Callable[[], datetime] = _utcnow,
        throttle: float = Config.STATS_SYNC_THROTTLE_SECONDS,
        badge_refresh_delay: float = Config.BADGE_REFRESH_DELAY_SECONDS,
        monotonic: Callable[[], float] = time.monotonic,
    ):
        self.api = api
        self.store = store
        self.user = user
        self.tz = tz
        self.clock = clock
        self.throttle = throttle
        self.badge_refresh_delay = badge_refresh_delay
        self._monotonic = monotonic

        self.active_challenge: Optional[ChallengeInfo] = None
        self._snapshot = StatsSnapshot(total_points=int(user.get("total_points") or 0))
        self._subscribers: List[Subscriber] = []
        self._last_sync: Optional[float] = None
        self._background: set = set()
        self._pending_refresh: Optional[asyncio.TimerHandle] = None

        store.add_listener(self._on_progress_changed)

    # ------------------------------
    # Snapshot / subscribers
    # ------------------------------
    @property
    def snapshot(self) -> StatsSnapshot:
        return self._snapshot

    def subscribe(self, subscriber: Subscriber) -> Callable[[], None]:
        self._subscribers.append(subscriber)

        def unsubscribe():
            if subscriber in self._subscribers:
                self._subscribers.remove(subscriber)

        return unsubscribe

    def _publish(self, snapshot: StatsSnapshot) -> None:
        self._snapshot = snapshot
        self._notify()

    def _notify(self) -> None:
        for subscriber in list(self._subscribers):
            subscriber(self._snapshot)

    def is_data_fresh(self) -> bool:
        if self._last_sync is None:
            return False
        return self._monotonic() - self._last_sync < self.throttle

    # ------------------------------
    # Derived values
    # ------------------------------
    def _derive_today(self, challenge: Optional[ChallengeInfo], boost: Optional[Boost]) -> Dict[str, int]:
        if challenge is None:
            return {
                "daily_points": 0,
                "today_completion": 0,
                "challenge_day": 0,
                "challenge_progress": 0,
            }

        now = self.clock()
        progress = self.store.today_progress()
        return {
            "daily_points": daily_points(progress, boost),
            "today_completion": completion_percent(progress, len(challenge.goals)),
            "challenge_day": challenge_day(challenge, now, self.tz),
            "challenge_progress": challenge_progress_percent(challenge, now, self.tz),
        }

    def _recompute_today(self) -> None:
        changes = self._derive_today(self.active_challenge, self._snapshot.boost)
        self._publish(reduce_stats(self._snapshot, **changes))

    def _on_progress_changed(self, _day: str, _goal_index: int, _completed: bool) -> None:
        self._recompute_today()

    # ------------------------------
    # Sync
    # ------------------------------
    async def _resolve_active_challenge(self) -> Optional[ChallengeInfo]:
        now = self.clock()
        if self.active_challenge and is_challenge_active(self.active_challenge, now, self.tz):
            return self.active_challenge

        # backend lists newest first; the newest still-running one wins
        records = await self.api.get_challenges(self.user["id"])
        for record in records:
            challenge = ChallengeInfo.from_record(record)
            if is_challenge_active(challenge, now, self.tz):
                self.active_challenge = challenge
                return challenge

        self.active_challenge = None
        return None

    async def sync_all(self, force: bool = False) -> bool:
        """
        Fetch, recompute, publish. Calls inside the throttle window are
        dropped unless ``force``. Returns whether a new snapshot was published.
        """
        if not force and self.is_data_fresh():
            logger.debug("sync_all skipped: last sync is still fresh")
            return False
        self._last_sync = self._monotonic()

        user_id = self.user["id"]
        try:
            challenge = await self._resolve_active_challenge()
            if challenge is None:
                self.store.clear()
            elif not self.store.is_initialized(challenge):
                await self.store.init_today(challenge, self.user)

            user_data, theme, stats, board = await asyncio.gather(
                self.api.get_user(user_id),
                self.api.get_current_theme(user_id),
                self.api.get_user_stats(user_id),
                self.api.get_leaderboard(),
            )
        except ApiError as e:
            logger.error("Failed to sync stats for user %s: %s", user_id, e)
            return False

        total_points = int(user_data.get("total_points") or 0)
        tier = (theme or {}).get("name") or DEFAULT_TIER
        rank = int(stats.get("rank") or 0)
        max_points = max((int(e.get("total_points") or 0) for e in board), default=0)
        boost = boost_for(rank, total_points, max_points, tier)

        self.user["total_points"] = total_points

        snapshot = reduce_stats(
            self._snapshot,
            total_points=total_points,
            badge_name=tier,
            badge_icon=(theme or {}).get("icon") or badge_icon(tier),
            current_streak=int(stats.get("current_streak") or 0),
            rank=rank,
            total_challenges=int(stats.get("total_challenges") or 0),
            completed_goals=int(stats.get("total_completed_goals") or 0),
            max_leaderboard_points=max_points,
            boost=boost,
            **self._derive_today(challenge, boost),
        )
        logger.debug("Stats synced: %s", snapshot)
        self._publish(snapshot)
        return True

    async def force_refresh(self) -> bool:
        self._last_sync = None
        return await self.sync_all()

    # ------------------------------
    # Events
    # ------------------------------
    def on_task_completed(self) -> asyncio.Task:
        """
        Immediate recompute from what is already loaded, then a full sync in
        the background. Must be called from inside the running loop.
        """
        self._recompute_today()

        task = asyncio.get_running_loop().create_task(self.sync_all())
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    async def on_badge_earned(self) -> None:
        await self.sync_all(force=True)

        # second paint a moment later for consumers that render late
        if self._pending_refresh is not None:
            self._pending_refresh.cancel()
        self._pending_refresh = asyncio.get_running_loop().call_later(
            self.badge_refresh_delay, self._notify
        )

    async def close(self) -> None:
        """Cancel the pending badge repaint and any background sync."""
        if self._pending_refresh is not None:
            self._pending_refresh.cancel()
            self._pending_refresh = None

        tasks = list(self._background)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._background.clear()

    async def on_challenge_changed(self, challenge: Optional[ChallengeInfo]) -> None:
        self.active_challenge = challenge
        if challenge is None:
            self.store.clear()
        else:
            await self.store.init_today(challenge, self.user)
        await self.sync_all(force=True)

    async def toggle_goal(self, goal_index: int) -> bool:
        saved = await self.store.toggle(goal_index)
        if saved:
            self.on_task_completed()
        return saved

    async def check_badges(self) -> List[Dict[str, Any]]:
        try:
            data = await self.api.check_badges(self.user["id"])
        except ApiError as e:
            logger.error("Badge check failed: %s", e)
            return []

        new_badges = (data or {}).get("newBadges") or []
        if new_badges:
            logger.info("New badges earned: %s", [b.get("name") for b in new_badges])
            await self.on_badge_earned()
        return new_badges

    async def create_challenge(self, name: str, duration: int, goals: List[str]) -> Optional[ChallengeInfo]:
        try:
            record = await self.api.create_challenge(self.user["id"], name, duration, goals)
        except ApiError as e:
            logger.error("Create challenge error: %s", e)
            return None

        challenge = ChallengeInfo.from_record(record)
        await self.on_challenge_changed(challenge)
        return challenge

    async def archive_if_complete(self) -> Optional[Dict[str, Any]]:
        challenge = self.active_challenge
        if challenge is None or not is_challenge_complete(challenge, self.clock(), self.tz):
            return None

        try:
            record = await self.api.archive_challenge(self.user["id"], challenge.id)
        except ApiError as e:
            logger.error("Error archiving challenge %s: %s", challenge.id, e)
            return None

        logger.info("Challenge %s archived", challenge.id)
        await self.on_challenge_changed(None)
        return record
