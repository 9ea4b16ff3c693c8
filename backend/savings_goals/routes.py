from __future__ import annotations

from flask import Blueprint

from auth.session import current_user, session_required
from errors import ValidationError, json_body, parse_body, success

from .schemas import AddSavingsSchema, GoalCreateSchema, GoalUpdateSchema
from .services import (
    add_savings,
    create_goal,
    delete_goal,
    get_goal,
    goal_stats,
    list_goals,
    update_goal,
)


savings_goals_bp = Blueprint("savings_goals", __name__, url_prefix="/savings-goals")


def _json_fields() -> dict:
    data = json_body()
    return {k: v for k, v in data.items() if v is not None}


def _blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


@savings_goals_bp.route("", methods=["GET"])
@session_required
def list_all():
    goals = list_goals(current_user().id)
    return success({"savingsGoals": [g.to_dict() for g in goals], "count": len(goals)})


# registered before /<id> routes; the int converter keeps them apart anyway
@savings_goals_bp.route("/stats/summary", methods=["GET"])
@session_required
def stats_summary():
    return success({"stats": goal_stats(current_user().id)})


@savings_goals_bp.route("/<int:goal_id>", methods=["GET"])
@session_required
def get_one(goal_id: int):
    goal = get_goal(current_user().id, goal_id)
    return success({"savingsGoal": goal.to_dict()})


@savings_goals_bp.route("", methods=["POST"])
@session_required
def create():

    data = _json_fields()
    if any(_blank(data.get(f)) for f in ("title", "targetAmount", "deadline")):
        raise ValidationError("Title, target amount, and deadline are required")

    payload = parse_body(GoalCreateSchema, data)
    goal = create_goal(current_user().id, payload)

    return success({"savingsGoal": goal.to_dict()}, "Savings goal created successfully", 201)


@savings_goals_bp.route("/<int:goal_id>", methods=["PUT"])
@session_required
def update(goal_id: int):

    payload = parse_body(GoalUpdateSchema, _json_fields())
    goal = update_goal(current_user().id, goal_id, payload)

    return success({"savingsGoal": goal.to_dict()}, "Savings goal updated successfully")


@savings_goals_bp.route("/<int:goal_id>/add-savings", methods=["POST"])
@session_required
def deposit(goal_id: int):

    data = _json_fields()
    if _blank(data.get("amount")):
        raise ValidationError("Amount must be greater than 0")

    payload = parse_body(AddSavingsSchema, data)
    goal = add_savings(current_user().id, goal_id, payload.amount)

    return success({"savingsGoal": goal.to_dict()}, "Savings added successfully")


@savings_goals_bp.route("/<int:goal_id>", methods=["DELETE"])
@session_required
def delete(goal_id: int):
    delete_goal(current_user().id, goal_id)
    return success(message="Savings goal deleted successfully")
