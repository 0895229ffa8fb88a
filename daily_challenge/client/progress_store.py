# daily_challenge/client/progress_store.py
"""
In-memory cache of daily progress: date key -> {goal_index: completed}.

Toggles are applied locally first, then persisted; a failed persist puts
the previous value back. Listeners hear about both the optimistic change
and the revert, so a goal row can be repainted either way.
"""
import logging
from datetime import datetime, timezone, tzinfo
from typing import Any, Callable, Dict, List, Optional

from ..challenge_core import ChallengeInfo, date_key
from .api_client import ApiClient, ApiError

logger = logging.getLogger(__name__)

ProgressListener = Callable[[str, int, bool], None]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_progress(payload: Any) -> Dict[int, bool]:
    """
    The backend may answer with a list of {goal_index, completed} records or
    with an already keyed mapping (JSON keys are strings).
    """
    progress: Dict[int, bool] = {}
    if isinstance(payload, list):
        for record in payload:
            if not isinstance(record, dict) or record.get("goal_index") is None:
                continue
            try:
                progress[int(record["goal_index"])] = bool(record.get("completed"))
            except (TypeError, ValueError):
                continue
    elif isinstance(payload, dict):
        for key, done in payload.items():
            try:
                progress[int(key)] = bool(done)
            except (TypeError, ValueError):
                continue
    return progress


class ProgressStore:
    def __init__(
        self,
        api: ApiClient,
        tz: tzinfo = timezone.utc,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.api = api
        self.tz = tz
        self.clock = clock
        self.by_date: Dict[str, Dict[int, bool]] = {}
        self.challenge: Optional[ChallengeInfo] = None
        self.user: Optional[Dict[str, Any]] = None
        self._listeners: List[ProgressListener] = []

    def add_listener(self, listener: ProgressListener) -> None:
        self._listeners.append(listener)

    def _notify(self, day: str, goal_index: int, completed: bool) -> None:
        for listener in list(self._listeners):
            listener(day, goal_index, completed)

    def today_key(self) -> str:
        return date_key(self.clock(), self.tz)

    def is_initialized(self, challenge: Optional[ChallengeInfo] = None) -> bool:
        if self.today_key() not in self.by_date:
            return False
        if challenge is not None and self.challenge is not None:
            return self.challenge.id == challenge.id
        return True

    async def load(self, user_id: int, challenge_id: int, day: str) -> Dict[int, bool]:
        try:
            payload = await self.api.get_progress(user_id, challenge_id, day)
        except ApiError as e:
            logger.error("Load progress error for challenge %s on %s: %s", challenge_id, day, e)
            return {}
        return normalize_progress(payload)

    async def init_today(self, challenge: ChallengeInfo, user: Dict[str, Any]) -> Dict[int, bool]:
        """
        Seed every goal index to False, then overlay what the backend has.
        Must run before today's progress is read.
        """
        self.challenge = challenge
        self.user = user

        today = self.today_key()
        progress = {i: False for i in range(len(challenge.goals))}
        persisted = await self.load(user["id"], challenge.id, today)
        for goal_index, done in persisted.items():
            if goal_index in progress:
                progress[goal_index] = done

        self.by_date[today] = progress
        return dict(progress)

    def today_progress(self) -> Dict[int, bool]:
        return dict(self.by_date.get(self.today_key(), {}))

    async def toggle(self, goal_index: int) -> bool:
        """
        Flip today's value for ``goal_index``. Returns True when the backend
        accepted it; on failure the previous value is restored.
        """
        if self.challenge is None or self.user is None:
            logger.warning("toggle(%s) ignored: no active challenge", goal_index)
            return False

        today = self.today_key()
        day_progress = self.by_date.setdefault(today, {})
        was_completed = day_progress.get(goal_index, False)
        now_completed = not was_completed

        day_progress[goal_index] = now_completed
        self._notify(today, goal_index, now_completed)

        try:
            await self.api.save_progress(
                self.user["id"], self.challenge.id, today, goal_index, now_completed
            )
        except ApiError as e:
            logger.error("Update progress error for goal %s: %s", goal_index, e)
            day_progress[goal_index] = was_completed
            self._notify(today, goal_index, was_completed)
            return False

        return True

    def clear(self) -> None:
        self.by_date.clear()
        self.challenge = None
