from datetime import datetime
from typing import Optional

from models import db
from savings_goals.calculations import (
    days_remaining,
    monthly_target,
    months_remaining,
    progress_percentage,
)
from timeutils import isoformat, utcnow


class SavingsGoal(db.Model):
    __tablename__ = "savings_goals"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), index=True, nullable=False)

    title = db.Column(db.String(100), nullable=False)
    description = db.Column(db.String(500), nullable=True)
    target_amount = db.Column(db.Float, nullable=False)
    current_amount = db.Column(db.Float, nullable=False, default=0.0)
    deadline = db.Column(db.DateTime, nullable=False)
    category = db.Column(db.String(20), nullable=False, default="other")
    status = db.Column(db.String(20), nullable=False, default="active")

    # Snapshot taken on create and on target/deadline changes
    monthly_target = db.Column(db.Float, nullable=False, default=0.0)

    # False once soft-deleted
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        db.Index("ix_goal_user_status", "user_id", "status"),
        db.Index("ix_goal_user_deadline", "user_id", "deadline"),
    )

    def recompute_monthly_target(self, now: Optional[datetime] = None) -> None:
        self.monthly_target = monthly_target(
            self.target_amount, self.current_amount or 0.0, self.deadline, now
        )

    def to_dict(self, now: Optional[datetime] = None) -> dict:
        now = now or utcnow()
        return {
            "id": str(self.id),
            "userId": str(self.user_id),
            "title": self.title,
            "description": self.description,
            "targetAmount": self.target_amount,
            "currentAmount": self.current_amount,
            "deadline": isoformat(self.deadline),
            "category": self.category,
            "status": self.status,
            "monthlyTarget": self.monthly_target,
            "isActive": self.is_active,
            "progressPercentage": progress_percentage(self.target_amount, self.current_amount),
            "daysRemaining": days_remaining(self.deadline, now),
            "monthsRemaining": months_remaining(self.deadline, now),
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }
