# daily_challenge/routes/helpers.py
from typing import Any, Optional

from flask import jsonify
from flask_jwt_extended import get_jwt_identity


def _safe_int(v: Any, default: int = 0) -> int:
    try:
        return int(v)
    except (TypeError, ValueError):
        return default


def _safe_int_or_none(v: Any) -> Optional[int]:
    if v is None or isinstance(v, bool):
        return None
    try:
        return int(v)
    except (TypeError, ValueError):
        return None


def forbidden_unless_self(user_id: int):
    """
    Call inside a @jwt_required() view. Returns a 403 response when the
    token belongs to someone else, else None.
    """
    if _safe_int_or_none(get_jwt_identity()) != user_id:
        return jsonify({"message": "token does not match user"}), 403
    return None
