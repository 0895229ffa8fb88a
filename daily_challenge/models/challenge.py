# daily_challenge/models/challenge.py
from datetime import datetime
from .. import db


class Challenge(db.Model):
    __tablename__ = "challenges"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    name = db.Column(db.String(255), nullable=False)
    duration = db.Column(db.Integer, nullable=False)
    # ordered; a goal is identified by its index
    goals = db.Column(db.JSON, nullable=False, default=list)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    user = db.relationship("User", backref="challenges")

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "duration": self.duration,
            "goals": list(self.goals or []),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class DailyProgress(db.Model):
    __tablename__ = "daily_progress"
    __table_args__ = (
        db.UniqueConstraint(
            "user_id", "challenge_id", "date", "goal_index",
            name="uq_daily_progress_goal_day",
        ),
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    challenge_id = db.Column(db.Integer, db.ForeignKey("challenges.id"), nullable=False)
    date = db.Column(db.Date, nullable=False)
    goal_index = db.Column(db.Integer, nullable=False)
    completed = db.Column(db.Boolean, nullable=False, default=False)

    challenge = db.relationship("Challenge", backref="progress_rows")


class PastChallenge(db.Model):
    __tablename__ = "past_challenges"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    challenge_id = db.Column(db.Integer, db.ForeignKey("challenges.id"), nullable=False, unique=True)
    challenge_name = db.Column(db.String(255), nullable=False)
    duration = db.Column(db.Integer, nullable=False)
    total_goals = db.Column(db.Integer, nullable=False)
    points_earned = db.Column(db.Integer, nullable=False, default=0)
    points_possible = db.Column(db.Integer, nullable=False, default=0)
    completion_percentage = db.Column(db.Integer, nullable=False, default=0)
    started_at = db.Column(db.DateTime)
    completed_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "challenge_id": self.challenge_id,
            "challenge_name": self.challenge_name,
            "duration": self.duration,
            "total_goals": self.total_goals,
            "points_earned": self.points_earned,
            "points_possible": self.points_possible,
            "completion_percentage": self.completion_percentage,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }
