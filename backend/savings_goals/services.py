from __future__ import annotations

from typing import List

from sqlalchemy import update

from errors import NotFound
from models import db
from models.savings_goal_model import SavingsGoal
from timeutils import utcnow

from .calculations import summarize
from .schemas import GoalCreateSchema, GoalUpdateSchema

_FIELD_MAP = {
    "title": "title",
    "description": "description",
    "targetAmount": "target_amount",
    "currentAmount": "current_amount",
    "deadline": "deadline",
    "category": "category",
    "status": "status",
}

# changing either of these invalidates the stored monthly target
_TARGET_INPUTS = {"targetAmount", "deadline"}


def _visible_goals(user_id: int):
    return SavingsGoal.query.filter_by(user_id=user_id, is_active=True)


def list_goals(user_id: int) -> List[SavingsGoal]:
    return _visible_goals(user_id).order_by(
        SavingsGoal.created_at.desc(), SavingsGoal.id.desc()
    ).all()


def goal_stats(user_id: int) -> dict:
    return summarize(_visible_goals(user_id).all())


def get_goal(user_id: int, goal_id: int) -> SavingsGoal:
    goal = _visible_goals(user_id).filter_by(id=goal_id).first()
    if not goal:
        raise NotFound("Savings goal not found")
    return goal


def create_goal(user_id: int, data: GoalCreateSchema) -> SavingsGoal:
    goal = SavingsGoal(
        user_id=user_id,
        title=data.title,
        description=data.description,
        target_amount=data.targetAmount,
        current_amount=0.0,
        deadline=data.deadline,
        category=data.category,
        status="active",
    )
    goal.recompute_monthly_target()

    db.session.add(goal)
    db.session.commit()
    return goal


def update_goal(user_id: int, goal_id: int, data: GoalUpdateSchema) -> SavingsGoal:
    goal = get_goal(user_id, goal_id)

    changes = data.changes()
    for field, value in changes.items():
        setattr(goal, _FIELD_MAP[field], value)

    if _TARGET_INPUTS & changes.keys():
        goal.recompute_monthly_target()

    db.session.commit()
    return goal


def add_savings(user_id: int, goal_id: int, amount: float) -> SavingsGoal:
    goal = get_goal(user_id, goal_id)

    # increment in SQL so two concurrent deposits can't overwrite each other
    db.session.execute(
        update(SavingsGoal)
        .where(SavingsGoal.id == goal.id)
        .values(current_amount=SavingsGoal.current_amount + amount, updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    db.session.refresh(goal)

    if goal.current_amount >= goal.target_amount:
        goal.status = "completed"

    db.session.commit()
    return goal


def delete_goal(user_id: int, goal_id: int) -> None:
    goal = get_goal(user_id, goal_id)
    goal.is_active = False
    db.session.commit()
