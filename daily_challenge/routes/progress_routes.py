# daily_challenge/routes/progress_routes.py
from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import jwt_required

from .. import db
from ..challenge_core import parse_date_key
from ..models.challenge import Challenge, DailyProgress
from ..models.user import User
from .helpers import _safe_int_or_none, forbidden_unless_self

progress_bp = Blueprint("progress", __name__)


@progress_bp.route("/<int:user_id>/<int:challenge_id>/<date_str>", methods=["GET"])
def get_daily_progress(user_id: int, challenge_id: int, date_str: str):
    """
    Returns a mapping of goal index -> completed for that calendar day:
    { "0": true, "2": false }
    Goals without a record are simply absent.
    """
    day = parse_date_key(date_str)
    if day is None:
        return jsonify({"message": "date must be YYYY-MM-DD"}), 400

    rows = DailyProgress.query.filter_by(
        user_id=user_id, challenge_id=challenge_id, date=day
    ).all()

    return jsonify({str(r.goal_index): bool(r.completed) for r in rows}), 200


@progress_bp.route("", methods=["POST"])
@jwt_required()
def update_daily_progress():
    """
    Body:
    {
      "user_id": 1,
      "challenge_id": 4,
      "date": "2025-11-21",
      "goal_index": 0,
      "completed": true
    }
    Points move by one only when the stored value actually flips.
    """
    data = request.get_json(silent=True) or {}

    user_id = _safe_int_or_none(data.get("user_id"))
    challenge_id = _safe_int_or_none(data.get("challenge_id"))
    goal_index = _safe_int_or_none(data.get("goal_index"))
    completed = data.get("completed")
    day = parse_date_key(data.get("date"))

    if not user_id or not challenge_id or goal_index is None:
        return jsonify({"message": "user_id, challenge_id and goal_index are required"}), 400
    if not isinstance(completed, bool):
        return jsonify({"message": "completed must be true or false"}), 400
    if day is None:
        return jsonify({"message": "date must be YYYY-MM-DD"}), 400

    denied = forbidden_unless_self(user_id)
    if denied:
        return denied

    user = db.session.get(User, user_id)
    if not user:
        return jsonify({"message": "user not found"}), 404

    challenge = Challenge.query.filter_by(id=challenge_id, user_id=user_id).first()
    if not challenge:
        return jsonify({"message": "challenge not found"}), 404

    if not (0 <= goal_index < len(challenge.goals or [])):
        return jsonify({"message": "goal_index out of range"}), 400

    try:
        row = DailyProgress.query.filter_by(
            user_id=user_id,
            challenge_id=challenge_id,
            date=day,
            goal_index=goal_index,
        ).first()

        was_completed = bool(row.completed) if row else False
        if row is None:
            row = DailyProgress(
                user_id=user_id,
                challenge_id=challenge_id,
                date=day,
                goal_index=goal_index,
            )
            db.session.add(row)
        row.completed = completed

        if completed != was_completed:
            user.add_points(1 if completed else -1)

        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.exception(f"Update progress error: {e}")
        return jsonify({"message": "Failed to update progress"}), 500

    return jsonify({"success": True, "total_points": int(user.total_points or 0)}), 200
