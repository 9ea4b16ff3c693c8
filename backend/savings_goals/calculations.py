from __future__ import annotations

import math
from datetime import datetime, timedelta
from typing import Optional

from timeutils import utcnow

DAY = timedelta(days=1)
MONTH = timedelta(days=30)


def months_remaining(deadline: datetime, now: Optional[datetime] = None) -> int:
    """Whole 30-day periods left until the deadline, never less than 1."""
    now = now or utcnow()
    return max(1, math.ceil((deadline - now) / MONTH))


def days_remaining(deadline: datetime, now: Optional[datetime] = None) -> int:
    now = now or utcnow()
    return max(0, math.ceil((deadline - now) / DAY))


def monthly_target(
    target_amount: float,
    current_amount: float,
    deadline: datetime,
    now: Optional[datetime] = None,
) -> float:
    remaining = (target_amount or 0.0) - (current_amount or 0.0)
    return max(0.0, remaining / months_remaining(deadline, now))


def progress_percentage(target_amount: float, current_amount: float) -> float:
    if not target_amount or target_amount <= 0:
        return 0.0
    return min(100.0, (current_amount or 0.0) / target_amount * 100)


def summarize(goals) -> dict:
    """
    Totals over the goals a user can see (soft-deleted ones already excluded).
    Monthly targets only count goals still in the ``active`` state.
    """
    goals = list(goals)
    active = [g for g in goals if g.status == "active"]
    progress = [progress_percentage(g.target_amount, g.current_amount) for g in goals]
    return {
        "totalGoals": len(goals),
        "activeGoals": len(active),
        "completedGoals": sum(1 for g in goals if g.status == "completed"),
        "totalTargetAmount": sum(g.target_amount for g in goals),
        "totalCurrentAmount": sum(g.current_amount for g in goals),
        "totalMonthlyTarget": sum(g.monthly_target for g in active),
        "averageProgress": sum(progress) / len(progress) if progress else 0,
    }
