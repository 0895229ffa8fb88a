# daily_challenge/routes/leaderboard_routes.py
from flask import Blueprint, jsonify, request

from ..user_stats import leaderboard
from .helpers import _safe_int

leaderboard_bp = Blueprint("leaderboard", __name__)

DEFAULT_LIMIT = 50
MAX_LIMIT = 100


@leaderboard_bp.route("", methods=["GET"])
def get_leaderboard():
    """
    Returns users ordered by total points (ties share a rank):
    [
      {
        "id": 2,
        "name": "alice",
        "total_points": 120,
        "rank": 1,
        "current_streak": 5,
        "badge": "BEAST MODE"
      },
      ...
    ]
    """
    limit = _safe_int(request.args.get("limit"), DEFAULT_LIMIT)
    limit = max(1, min(limit, MAX_LIMIT))
    return jsonify(leaderboard(limit)), 200
