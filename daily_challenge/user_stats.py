# daily_challenge/user_stats.py
"""
Derived per-user numbers: rank, streaks, totals, weekly history, badges.

Nothing here is stored; every value is computed from users, challenges and
daily_progress rows. Calendar days use the APP_TIMEZONE config value, the
same one the client core uses for its date keys.
"""
from collections import defaultdict
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from flask import current_app
from sqlalchemy import func

from . import db
from .boost import DEFAULT_TIER, badge_icon
from .challenge_core import get_timezone, local_date, round_half_up
from .models.badge import Badge, UserBadge
from .models.challenge import Challenge, DailyProgress, PastChallenge
from .models.user import User

WEEKLY_HISTORY_WEEKS = 16


# ------------------------------
# Helpers
# ------------------------------
def app_timezone():
    return get_timezone(current_app.config.get("APP_TIMEZONE"))


def today_local(now: Optional[datetime] = None) -> date:
    return local_date(now or datetime.now(timezone.utc), app_timezone())


def _week_start(d: date) -> date:
    return d - timedelta(days=d.weekday())


def _completed_dates(user_id: int) -> List[date]:
    rows = (
        db.session.query(DailyProgress.date)
        .filter(
            DailyProgress.user_id == user_id,
            DailyProgress.completed.is_(True),
        )
        .distinct()
        .all()
    )
    return sorted(r[0] for r in rows)


# ------------------------------
# Rank / streak
# ------------------------------
def compute_rank(user: User) -> int:
    ahead = User.query.filter(User.total_points > int(user.total_points or 0)).count()
    return ahead + 1


def compute_current_streak(user_id: int, today: Optional[date] = None) -> int:
    """
    Consecutive days with at least one completed goal, ending today.
    If nothing is done yet today the run ending yesterday still counts.
    """
    today = today or today_local()
    active_days = set(_completed_dates(user_id))
    cursor = today if today in active_days else today - timedelta(days=1)

    streak = 0
    while cursor in active_days:
        streak += 1
        cursor -= timedelta(days=1)
    return streak


def compute_longest_streak(user_id: int) -> int:
    longest = run = 0
    previous = None
    for d in _completed_dates(user_id):
        run = run + 1 if previous and (d - previous).days == 1 else 1
        longest = max(longest, run)
        previous = d
    return longest


def user_stats(user: User, today: Optional[date] = None) -> Dict[str, Any]:
    total_challenges = Challenge.query.filter_by(user_id=user.id).count()
    total_completed_goals = DailyProgress.query.filter_by(
        user_id=user.id, completed=True
    ).count()

    return {
        "rank": compute_rank(user),
        "total_challenges": int(total_challenges),
        "total_completed_goals": int(total_completed_goals),
        "current_streak": compute_current_streak(user.id, today),
        "longest_streak": compute_longest_streak(user.id),
    }


# ------------------------------
# Badges
# ------------------------------
def current_badge(user_id: int) -> Optional[Badge]:
    return (
        db.session.query(Badge)
        .join(UserBadge, UserBadge.badge_id == Badge.id)
        .filter(UserBadge.user_id == user_id)
        .order_by(Badge.streak_days.desc())
        .first()
    )


def badge_name(user_id: int) -> str:
    badge = current_badge(user_id)
    return badge.name if badge else DEFAULT_TIER


def award_streak_badges(user: User, today: Optional[date] = None) -> List[Dict[str, Any]]:
    """
    Award every milestone the current streak reaches and the user doesn't
    own yet. Idempotent. Caller commits.
    """
    streak = compute_current_streak(user.id, today)
    owned = {
        ub.badge_id for ub in UserBadge.query.filter_by(user_id=user.id).all()
    }

    earned = []
    reachable = (
        Badge.query.filter(Badge.streak_days <= streak)
        .order_by(Badge.streak_days.asc())
        .all()
    )
    for badge in reachable:
        if badge.id in owned:
            continue
        db.session.add(UserBadge(user_id=user.id, badge_id=badge.id))
        earned.append(badge.to_dict())
    return earned


def theme_for(user_id: int) -> Optional[Dict[str, Any]]:
    badge = current_badge(user_id)
    if badge is None:
        return None
    payload = badge.to_dict()
    payload["icon"] = badge.icon or badge_icon(badge.name)
    return payload


# ------------------------------
# Leaderboard
# ------------------------------
def leaderboard(limit: int, today: Optional[date] = None) -> List[Dict[str, Any]]:
    users = (
        User.query.order_by(User.total_points.desc(), User.name.asc())
        .limit(limit)
        .all()
    )

    entries = []
    rank = 0
    previous_points = None
    for position, u in enumerate(users, start=1):
        points = int(u.total_points or 0)
        # ties share a rank
        if points != previous_points:
            rank = position
            previous_points = points
        entries.append(
            {
                "id": u.id,
                "name": u.name,
                "total_points": points,
                "rank": rank,
                "current_streak": compute_current_streak(u.id, today),
                "badge": badge_name(u.id),
            }
        )
    return entries


# ------------------------------
# Weekly history
# ------------------------------
def _possible_by_day(user_id: int, today: date) -> Dict[date, int]:
    tz = app_timezone()
    possible = defaultdict(int)
    for ch in Challenge.query.filter_by(user_id=user_id).all():
        goal_count = len(ch.goals or [])
        if not goal_count or not ch.created_at:
            continue
        start = local_date(ch.created_at, tz)
        end = min(start + timedelta(days=int(ch.duration) - 1), today)
        d = start
        while d <= end:
            possible[d] += goal_count
            d += timedelta(days=1)
    return possible


def weekly_stats(user: User, today: Optional[date] = None) -> Dict[str, List[Dict[str, Any]]]:
    """
    Returns:
    {
      "weekly":  [ last 16 weeks, newest first, zero-filled ],
      "allTime": [ every week with activity, newest first ]
    }
    each row: {week_start, points, goals_completed, completion_rate}
    """
    today = today or today_local()

    rows = (
        db.session.query(DailyProgress.date, func.count(DailyProgress.id))
        .filter(
            DailyProgress.user_id == user.id,
            DailyProgress.completed.is_(True),
        )
        .group_by(DailyProgress.date)
        .all()
    )

    completed_by_week = defaultdict(int)
    for d, n in rows:
        completed_by_week[_week_start(d)] += int(n)

    possible_by_week = defaultdict(int)
    for d, n in _possible_by_day(user.id, today).items():
        possible_by_week[_week_start(d)] += n

    def _row(week: date) -> Dict[str, Any]:
        done = completed_by_week.get(week, 0)
        possible = possible_by_week.get(week, 0)
        rate = min(100, round_half_up(100 * done / possible)) if possible else 0
        return {
            "week_start": week.isoformat(),
            "points": done,
            "goals_completed": done,
            "completion_rate": rate,
        }

    current_week = _week_start(today)
    weekly = [
        _row(current_week - timedelta(weeks=i)) for i in range(WEEKLY_HISTORY_WEEKS)
    ]

    active_weeks = set(completed_by_week) | set(possible_by_week)
    all_time = [_row(w) for w in sorted(active_weeks, reverse=True)]

    return {"weekly": weekly, "allTime": all_time}


# ------------------------------
# Archive
# ------------------------------
def archive_challenge(user: User, challenge: Challenge) -> PastChallenge:
    """Summarise a finished challenge into a past_challenges row. Caller commits."""
    tz = app_timezone()
    start = local_date(challenge.created_at, tz)
    end = start + timedelta(days=int(challenge.duration) - 1)

    points_earned = DailyProgress.query.filter(
        DailyProgress.user_id == user.id,
        DailyProgress.challenge_id == challenge.id,
        DailyProgress.completed.is_(True),
        DailyProgress.date >= start,
        DailyProgress.date <= end,
    ).count()
    points_possible = int(challenge.duration) * len(challenge.goals or [])
    completion = (
        round_half_up(100 * points_earned / points_possible) if points_possible else 0
    )

    past = PastChallenge(
        user_id=user.id,
        challenge_id=challenge.id,
        challenge_name=challenge.name,
        duration=challenge.duration,
        total_goals=len(challenge.goals or []),
        points_earned=points_earned,
        points_possible=points_possible,
        completion_percentage=completion,
        started_at=challenge.created_at,
    )
    db.session.add(past)
    return past
