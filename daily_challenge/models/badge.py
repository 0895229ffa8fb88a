# daily_challenge/models/badge.py
from datetime import datetime
from .. import db


# Streak milestones. Seeded into the badges table on startup.
BADGE_MILESTONES = [
    {"code": "beast_mode", "name": "BEAST MODE", "icon": "🔥", "streak_days": 3},
    {"code": "warrior", "name": "WARRIOR", "icon": "⚡", "streak_days": 7},
    {"code": "savage", "name": "SAVAGE", "icon": "💀", "streak_days": 30},
    {"code": "legend", "name": "LEGEND", "icon": "👑", "streak_days": 100},
]


class Badge(db.Model):
    __tablename__ = "badges"

    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(50), unique=True, nullable=False)
    name = db.Column(db.String(100), nullable=False)
    icon = db.Column(db.String(16))
    streak_days = db.Column(db.Integer, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "code": self.code,
            "name": self.name,
            "icon": self.icon,
            "streak_days": self.streak_days,
        }


class UserBadge(db.Model):
    __tablename__ = "user_badges"
    __table_args__ = (
        db.UniqueConstraint("user_id", "badge_id", name="uq_user_badge"),
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    badge_id = db.Column(db.Integer, db.ForeignKey("badges.id"), nullable=False)
    earned_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    user = db.relationship("User", backref="user_badges")
    badge = db.relationship("Badge", backref="user_badges")


def seed_badges() -> None:
    """Insert any milestone badge missing from the table."""
    existing = {b.code for b in Badge.query.all()}
    added = False
    for milestone in BADGE_MILESTONES:
        if milestone["code"] in existing:
            continue
        db.session.add(Badge(**milestone))
        added = True
    if added:
        db.session.commit()
