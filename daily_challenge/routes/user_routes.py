# daily_challenge/routes/user_routes.py
from datetime import datetime, timezone

from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import create_access_token, jwt_required

from .. import db
from ..challenge_core import is_challenge_complete
from ..models.challenge import Challenge, PastChallenge
from ..models.user import User
from ..user_stats import (
    app_timezone,
    archive_challenge,
    award_streak_badges,
    theme_for,
    user_stats,
    weekly_stats,
)
from .helpers import _safe_int_or_none, forbidden_unless_self

users_bp = Blueprint("users", __name__)

MAX_NAME_LENGTH = 255


def _user_or_404(user_id: int):
    user = db.session.get(User, user_id)
    if not user:
        return None, (jsonify({"message": "user not found"}), 404)
    return user, None


# -----------------------------
# Signup (name only)
# -----------------------------
@users_bp.route("", methods=["POST"])
def create_or_get_user():
    """
    Body: { "name": "..." }
    Returns the existing user with that name or a new one, plus a token:
    { "id": 1, "name": "...", "total_points": 0, "created_at": "...", "token": "..." }
    """
    data = request.get_json(silent=True) or {}
    name = (data.get("name") or "").strip()

    if not name:
        return jsonify({"message": "name is required"}), 400
    if len(name) > MAX_NAME_LENGTH:
        return jsonify({"message": "name is too long"}), 400

    user = User.query.filter_by(name=name).first()
    status = 200
    if not user:
        try:
            user = User(name=name, total_points=0)
            db.session.add(user)
            db.session.commit()
            status = 201
        except Exception as e:
            db.session.rollback()
            current_app.logger.exception(f"User creation error: {e}")
            return jsonify({"message": "Failed to create/get user"}), 500

    current_app.logger.info(f"[users] signed in user_id={user.id} name='{name}'")

    payload = user.to_dict()
    payload["token"] = create_access_token(identity=str(user.id))
    return jsonify(payload), status


@users_bp.route("/<int:user_id>", methods=["GET"])
def get_user(user_id: int):
    user, error = _user_or_404(user_id)
    if error:
        return error
    return jsonify(user.to_dict()), 200


@users_bp.route("/<int:user_id>/stats", methods=["GET"])
def get_user_stats(user_id: int):
    """
    Returns:
    {
      "rank": 2,
      "total_challenges": 3,
      "total_completed_goals": 41,
      "current_streak": 5,
      "longest_streak": 9
    }
    """
    user, error = _user_or_404(user_id)
    if error:
        return error
    return jsonify(user_stats(user)), 200


@users_bp.route("/<int:user_id>/challenges", methods=["GET"])
def get_user_challenges(user_id: int):
    # newest first: the client picks the first still-running one as active
    rows = (
        Challenge.query.filter_by(user_id=user_id)
        .order_by(Challenge.created_at.desc(), Challenge.id.desc())
        .all()
    )
    return jsonify([c.to_dict() for c in rows]), 200


# -----------------------------
# Badges / theme
# -----------------------------
@users_bp.route("/<int:user_id>/check-badges", methods=["POST"])
@jwt_required()
def check_badges(user_id: int):
    denied = forbidden_unless_self(user_id)
    if denied:
        return denied

    user, error = _user_or_404(user_id)
    if error:
        return error

    try:
        new_badges = award_streak_badges(user)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.exception(f"Badge check error: {e}")
        return jsonify({"message": "Failed to check badges"}), 500

    if new_badges:
        names = [b["name"] for b in new_badges]
        current_app.logger.info(f"[badges] user_id={user.id} earned {names}")

    return jsonify({"newBadges": new_badges}), 200


@users_bp.route("/<int:user_id>/current-theme", methods=["GET"])
def current_theme(user_id: int):
    user, error = _user_or_404(user_id)
    if error:
        return error
    return jsonify(theme_for(user.id)), 200


# -----------------------------
# History
# -----------------------------
@users_bp.route("/<int:user_id>/weekly-stats", methods=["GET"])
def get_weekly_stats(user_id: int):
    user, error = _user_or_404(user_id)
    if error:
        return error
    return jsonify(weekly_stats(user)), 200


@users_bp.route("/<int:user_id>/past-challenges", methods=["GET"])
def get_past_challenges(user_id: int):
    rows = (
        PastChallenge.query.filter_by(user_id=user_id)
        .order_by(PastChallenge.completed_at.desc(), PastChallenge.id.desc())
        .all()
    )
    return jsonify([p.to_dict() for p in rows]), 200


@users_bp.route("/<int:user_id>/archive-challenge", methods=["POST"])
@jwt_required()
def archive_completed_challenge(user_id: int):
    """
    Body: { "challengeId": 12 }
    Only a finished challenge can be archived; archiving twice returns the
    existing row.
    """
    denied = forbidden_unless_self(user_id)
    if denied:
        return denied

    user, error = _user_or_404(user_id)
    if error:
        return error

    data = request.get_json(silent=True) or {}
    challenge_id = _safe_int_or_none(data.get("challengeId") or data.get("challenge_id"))
    if not challenge_id:
        return jsonify({"message": "challengeId is required"}), 400

    challenge = Challenge.query.filter_by(id=challenge_id, user_id=user.id).first()
    if not challenge:
        return jsonify({"message": "challenge not found"}), 404

    existing = PastChallenge.query.filter_by(challenge_id=challenge.id).first()
    if existing:
        return jsonify(existing.to_dict()), 200

    if not is_challenge_complete(challenge, datetime.now(timezone.utc), app_timezone()):
        return jsonify({"message": "challenge is still running"}), 400

    try:
        past = archive_challenge(user, challenge)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.exception(f"Archive challenge error: {e}")
        return jsonify({"message": "Failed to archive challenge"}), 500

    return jsonify(past.to_dict()), 201
