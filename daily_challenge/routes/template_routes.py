# daily_challenge/routes/template_routes.py
from flask import Blueprint, jsonify

templates_bp = Blueprint("templates", __name__)

# Starter challenges a user can copy instead of writing goals by hand.
CHALLENGE_TEMPLATES = {
    "75-hard": {
        "id": "75-hard",
        "name": "75 Hard",
        "description": "Transform your mind and body with zero compromises",
        "duration": 75,
        "difficulty": "EXTREME",
        "category": "Mind & Body",
        "icon": "🔥",
        "goals": [
            "Follow a diet (no cheat meals)",
            "Complete two 45-minute workouts (one must be outdoors)",
            "Drink 1 gallon of water",
            "Read 10 pages of non-fiction",
            "Take a progress photo",
            "No alcohol",
        ],
    },
    "shred-mode": {
        "id": "shred-mode",
        "name": "Shred Mode",
        "description": "Cut fat, reveal the beast within",
        "duration": 30,
        "difficulty": "HARD",
        "category": "Weight Loss",
        "icon": "⚡",
        "goals": [
            "Track all calories (deficit)",
            "Morning cardio (30 min fasted)",
            "Weight training (45 min)",
            "10,000 steps minimum",
            "No processed foods",
            "Sleep 8 hours",
        ],
    },
    "warrior-monk": {
        "id": "warrior-monk",
        "name": "Warrior Monk",
        "description": "Master your mind, forge your spirit",
        "duration": 21,
        "difficulty": "MEDIUM",
        "category": "Mental Toughness",
        "icon": "🧘",
        "goals": [
            "Morning meditation (15 min)",
            "Breathwork (10 min)",
            "Physical training (30 min)",
            "Read philosophy/stoicism",
            "Digital sunset at 8 PM",
        ],
    },
    "kickstart": {
        "id": "kickstart",
        "name": "Kickstart",
        "description": "Build momentum with simple daily wins",
        "duration": 7,
        "difficulty": "EASY",
        "category": "Beginner",
        "icon": "🚀",
        "goals": [
            "85oz of water",
            "Walk for 20 minutes",
            "No phone for first 90 min of day",
        ],
    },
    "morning-champion": {
        "id": "morning-champion",
        "name": "Morning Champion",
        "description": "Win your mornings, win your life",
        "duration": 14,
        "difficulty": "EASY",
        "category": "Routine Building",
        "icon": "☀️",
        "goals": [
            "Make your bed",
            "Stretch for 15 minutes",
            "Write 3 things you're grateful for",
        ],
    },
}


@templates_bp.route("", methods=["GET"])
def list_templates():
    """
    Public: list all challenge templates.

    GET /api/templates
    """
    return jsonify({"templates": list(CHALLENGE_TEMPLATES.values())}), 200


@templates_bp.route("/<template_id>", methods=["GET"])
def get_template(template_id):
    """
    Public: get a single template.

    GET /api/templates/<template_id>
    """
    template_id = (template_id or "").lower()
    template = CHALLENGE_TEMPLATES.get(template_id)
    if not template:
        return jsonify({"message": "Template not found"}), 404

    return jsonify({"template": template}), 200
