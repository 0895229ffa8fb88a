# daily_challenge/routes/challenge_routes.py
from typing import Any, Dict, List

from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import jwt_required

from .. import db
from ..models.challenge import Challenge
from ..models.user import User
from .helpers import _safe_int_or_none, forbidden_unless_self

challenges_bp = Blueprint("challenges", __name__)

NAME_MIN, NAME_MAX = 2, 50
DURATION_MIN, DURATION_MAX = 1, 365
GOALS_MIN, GOALS_MAX = 1, 10


def validate_challenge(data: Dict[str, Any]) -> List[str]:
    errors = []

    name = (data.get("name") or "").strip()
    if not (NAME_MIN <= len(name) <= NAME_MAX):
        errors.append(f"Challenge name must be {NAME_MIN}-{NAME_MAX} characters")

    duration = data.get("duration")
    if (
        isinstance(duration, bool)
        or not isinstance(duration, int)
        or not (DURATION_MIN <= duration <= DURATION_MAX)
    ):
        errors.append(f"Duration must be {DURATION_MIN}-{DURATION_MAX} days")

    goals = data.get("goals")
    valid_goals = []
    if isinstance(goals, list):
        valid_goals = [g.strip() for g in goals if isinstance(g, str) and g.strip()]
    if not (GOALS_MIN <= len(valid_goals) <= GOALS_MAX):
        errors.append(f"Must have {GOALS_MIN}-{GOALS_MAX} valid goals")

    return errors


@challenges_bp.route("", methods=["POST"])
@jwt_required()
def create_challenge():
    """
    Body:
    {
      "user_id": 1,
      "name": "75 Hard",
      "duration": 75,
      "goals": ["Read 10 pages", "Drink a gallon of water"]
    }
    Blank goals are dropped; the remaining order is the goal index order.
    """
    data = request.get_json(silent=True) or {}

    user_id = _safe_int_or_none(data.get("user_id"))
    if not user_id:
        return jsonify({"message": "user_id is required"}), 400

    denied = forbidden_unless_self(user_id)
    if denied:
        return denied

    if not db.session.get(User, user_id):
        return jsonify({"message": "user not found"}), 404

    errors = validate_challenge(data)
    if errors:
        return jsonify({"message": "invalid challenge", "errors": errors}), 400

    goals = [g.strip() for g in data["goals"] if isinstance(g, str) and g.strip()]

    try:
        challenge = Challenge(
            user_id=user_id,
            name=data["name"].strip(),
            duration=int(data["duration"]),
            goals=goals,
        )
        db.session.add(challenge)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.exception(f"Create challenge error: {e}")
        return jsonify({"message": "Failed to create challenge"}), 500

    current_app.logger.info(
        f"[challenges] user_id={user_id} created challenge_id={challenge.id} "
        f"duration={challenge.duration} goals={len(goals)}"
    )
    return jsonify(challenge.to_dict()), 201


@challenges_bp.route("/<int:challenge_id>", methods=["GET"])
def get_challenge(challenge_id: int):
    challenge = db.session.get(Challenge, challenge_id)
    if not challenge:
        return jsonify({"message": "challenge not found"}), 404
    return jsonify(challenge.to_dict()), 200
