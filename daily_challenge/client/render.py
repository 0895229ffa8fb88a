# daily_challenge/client/render.py
"""Display values as a pure function of the stats snapshot."""
from typing import Any, Dict, Optional

from ..challenge_core import ChallengeInfo
from .stats_reconciler import StatsSnapshot


def format_boost(snapshot: StatsSnapshot) -> Optional[str]:
    boost = snapshot.boost
    if boost is None:
        return None
    if boost.ratio:
        return f"{boost.multiplier}x ({boost.ratio})"
    return f"{boost.multiplier}x"


def render_dashboard(snapshot: StatsSnapshot, challenge: Optional[ChallengeInfo] = None) -> Dict[str, Any]:
    if challenge is not None:
        challenge_days = str(snapshot.challenge_day)
        challenge_line = (
            f"Day {snapshot.challenge_day} of {challenge.duration}"
            f" • {snapshot.challenge_progress}% complete"
        )
    else:
        challenge_days = "No active challenge"
        challenge_line = None

    return {
        "header_points": f"{snapshot.total_points} points",
        "today_points": str(snapshot.daily_points),
        "completion": f"{snapshot.today_completion}%",
        "challenge_days": challenge_days,
        "challenge_line": challenge_line,
        "badge": {"name": snapshot.badge_name, "icon": snapshot.badge_icon},
        "streak": f"Current streak: {snapshot.current_streak} days",
        "rank": f"#{snapshot.rank}" if snapshot.rank else "#?",
        "boost": format_boost(snapshot),
    }


def render_goal_row(goal_index: int, text: str, completed: bool) -> Dict[str, Any]:
    return {
        "goal_index": goal_index,
        "label": text,
        "completed": completed,
        "points_label": "+1 point" if completed else None,
    }
