"""Test doubles for the client core."""
from datetime import datetime, timezone
from typing import Any, Dict, List

from daily_challenge.client.api_client import ApiError


def utc_today():
    return datetime.now(timezone.utc).date()


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class FakeMonotonic:
    def __init__(self, start: float = 1000.0):
        self.value = start

    def __call__(self) -> float:
        return self.value

    def advance(self, seconds: float) -> None:
        self.value += seconds


class FakeApi:
    """
    In-memory stand-in for ApiClient. Methods named in ``failing`` raise
    ApiError; every call is recorded in ``calls``.
    """

    def __init__(self):
        self.user = {"id": 1, "name": "sam", "total_points": 0}
        self.challenges: List[Dict[str, Any]] = []
        self.progress: Dict[Any, Any] = {}
        self.stats = {
            "rank": 1,
            "total_challenges": 0,
            "total_completed_goals": 0,
            "current_streak": 0,
        }
        self.theme = None
        self.leaderboard: List[Dict[str, Any]] = []
        self.new_badges: List[Dict[str, Any]] = []
        self.failing = set()
        self.calls: List[tuple] = []

    def _call(self, name, *args):
        self.calls.append((name,) + args)
        if name in self.failing:
            raise ApiError(f"{name} failed", status=500)

    def count(self, name) -> int:
        return sum(1 for c in self.calls if c[0] == name)

    async def get_user(self, user_id):
        self._call("get_user", user_id)
        return dict(self.user)

    async def get_user_stats(self, user_id):
        self._call("get_user_stats", user_id)
        return dict(self.stats)

    async def get_challenges(self, user_id):
        self._call("get_challenges", user_id)
        return [dict(c) for c in self.challenges]

    async def get_current_theme(self, user_id):
        self._call("get_current_theme", user_id)
        return self.theme

    async def get_leaderboard(self):
        self._call("get_leaderboard")
        return list(self.leaderboard)

    async def check_badges(self, user_id):
        self._call("check_badges", user_id)
        return {"newBadges": list(self.new_badges)}

    async def create_challenge(self, user_id, name, duration, goals):
        self._call("create_challenge", user_id, name, duration, goals)
        record = {
            "id": len(self.challenges) + 100,
            "user_id": user_id,
            "name": name,
            "duration": duration,
            "goals": list(goals),
            "created_at": datetime.now(timezone.utc).isoformat(),
        }
        self.challenges.insert(0, record)
        return record

    async def archive_challenge(self, user_id, challenge_id):
        self._call("archive_challenge", user_id, challenge_id)
        return {"challenge_id": challenge_id}

    async def get_progress(self, user_id, challenge_id, date_key):
        self._call("get_progress", user_id, challenge_id, date_key)
        return self.progress.get((challenge_id, date_key), {})

    async def save_progress(self, user_id, challenge_id, date_key, goal_index, completed):
        self._call("save_progress", user_id, challenge_id, date_key, goal_index, completed)
        day = self.progress.setdefault((challenge_id, date_key), {})
        day[str(goal_index)] = completed
        return {"success": True}
