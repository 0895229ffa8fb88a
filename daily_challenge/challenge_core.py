# daily_challenge/challenge_core.py
"""
Date, day and points arithmetic shared by the backend and the client core.

Everything here is pure: callers pass "now" and the timezone in.
"""
import logging
import math
from dataclasses import dataclass, field
from datetime import date, datetime, timezone, tzinfo
from typing import Any, Dict, List, Mapping, Optional
from zoneinfo import ZoneInfo

logger = logging.getLogger(__name__)

# status thresholds, as a fraction of the challenge duration
ALMOST_DONE_FRACTION = 0.8
HALFWAY_FRACTION = 0.5


@dataclass
class ChallengeInfo:
    """Client-side view of a challenge record."""

    id: int
    name: str
    duration: int
    goals: List[str] = field(default_factory=list)
    created_at: Any = None
    start_date: Any = None
    user_id: Optional[int] = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "ChallengeInfo":
        return cls(
            id=record.get("id"),
            name=record.get("name") or "",
            duration=int(record.get("duration") or 0),
            goals=list(record.get("goals") or []),
            created_at=record.get("created_at"),
            start_date=record.get("start_date"),
            user_id=record.get("user_id"),
        )


def get_timezone(name: Optional[str]) -> tzinfo:
    if not name:
        return timezone.utc
    return ZoneInfo(name)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _as_aware(dt: datetime) -> datetime:
    # naive timestamps are stored as UTC
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Accepts datetime, date or an ISO-8601 string (a trailing "Z" is fine).
    Returns an aware datetime, or None when the value can't be read.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return _as_aware(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return _as_aware(datetime.fromisoformat(text))
        except ValueError:
            return None
    return None


def local_date(moment: datetime, tz: tzinfo) -> date:
    return _as_aware(moment).astimezone(tz).date()


def date_key(moment: datetime, tz: tzinfo) -> str:
    """YYYY-MM-DD of ``moment`` in ``tz``. This is the progress join key."""
    return local_date(moment, tz).isoformat()


def parse_date_key(value: str) -> Optional[date]:
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        return None


def _start_of(challenge: Any) -> Optional[datetime]:
    raw = getattr(challenge, "start_date", None) or getattr(challenge, "created_at", None)
    return parse_timestamp(raw)


def elapsed_days(challenge: Any, now: datetime, tz: tzinfo = timezone.utc) -> Optional[int]:
    """Calendar days since the challenge started (0 on the first day)."""
    start = _start_of(challenge)
    if start is None:
        return None
    return (local_date(now, tz) - local_date(start, tz)).days


def challenge_day(challenge: Any, now: datetime, tz: tzinfo = timezone.utc) -> int:
    """1-based day within the challenge, clamped to [1, duration]."""
    elapsed = elapsed_days(challenge, now, tz)
    if elapsed is None:
        logger.warning(
            "challenge %s has no usable start date, assuming day 1",
            getattr(challenge, "id", None),
        )
        return 1
    duration = max(1, int(challenge.duration or 1))
    return min(max(elapsed + 1, 1), duration)


def challenge_progress_percent(challenge: Any, now: datetime, tz: tzinfo = timezone.utc) -> int:
    duration = max(1, int(challenge.duration or 1))
    day = challenge_day(challenge, now, tz)
    return min(round_half_up(day / duration * 100), 100)


def is_challenge_active(challenge: Any, now: datetime, tz: tzinfo = timezone.utc) -> bool:
    elapsed = elapsed_days(challenge, now, tz)
    if elapsed is None:
        return True
    return elapsed < int(challenge.duration or 0)


def is_challenge_complete(challenge: Any, now: datetime, tz: tzinfo = timezone.utc) -> bool:
    return not is_challenge_active(challenge, now, tz)


def challenge_status(challenge: Any, now: datetime, tz: tzinfo = timezone.utc) -> Dict[str, str]:
    if is_challenge_complete(challenge, now, tz):
        return {"status": "completed", "message": "Challenge Complete! 🎉"}

    day = challenge_day(challenge, now, tz)
    duration = int(challenge.duration or 0)
    if day > duration * ALMOST_DONE_FRACTION:
        return {"status": "almost-done", "message": "Almost there!"}
    if day > duration * HALFWAY_FRACTION:
        return {"status": "halfway", "message": "Halfway through!"}
    return {"status": "early", "message": "Keep going!"}


def days_until_end(challenge: Any, now: datetime, tz: tzinfo = timezone.utc) -> int:
    return max(0, int(challenge.duration or 0) - challenge_day(challenge, now, tz))


# -----------------------------
# Points / completion
# -----------------------------
def completed_count(progress: Mapping[int, bool]) -> int:
    return sum(1 for done in progress.values() if done)


def daily_points(progress: Mapping[int, bool], boost=None) -> int:
    """
    Points earned today: one per completed goal, scaled by the boost
    multiplier (floored) when a boost is active.
    """
    count = completed_count(progress)
    if boost is None:
        return count
    return int(math.floor(count * boost.multiplier))


def completion_percent(progress: Mapping[int, bool], goal_count: int) -> int:
    if not goal_count:
        return 0
    return round_half_up(100 * completed_count(progress) / goal_count)
