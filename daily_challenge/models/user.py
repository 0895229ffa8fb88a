# daily_challenge/models/user.py
from datetime import datetime
from .. import db

class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), unique=True, nullable=False)
    total_points = db.Column(db.Integer, default=0, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def add_points(self, delta: int) -> None:
        # never below zero
        self.total_points = max(0, int(self.total_points or 0) + int(delta))

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "total_points": int(self.total_points or 0),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
