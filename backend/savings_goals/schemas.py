from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from timeutils import parse_datetime, utcnow

GoalCategory = Literal["emergency", "vacation", "house", "car", "education", "retirement", "other"]
GoalStatus = Literal["active", "completed", "paused", "cancelled"]


class _GoalFields(BaseModel):

    @field_validator("title", check_fields=False)
    @classmethod
    def strip_title(cls, v):
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Title cannot be empty")
        return v

    @field_validator("description", check_fields=False)
    @classmethod
    def strip_description(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("targetAmount", check_fields=False)
    @classmethod
    def positive_target(cls, v):
        if v is not None and v <= 0:
            raise ValueError("Target amount must be greater than 0")
        return v

    @field_validator("deadline", mode="before", check_fields=False)
    @classmethod
    def coerce_deadline(cls, v):
        return parse_datetime(v)

    @field_validator("deadline", check_fields=False)
    @classmethod
    def future_deadline(cls, v):
        if v is not None and v <= utcnow():
            raise ValueError("Deadline must be in the future")
        return v


class GoalCreateSchema(_GoalFields):
    title: str = Field(max_length=100)
    targetAmount: float = Field(allow_inf_nan=False)
    deadline: datetime
    description: Optional[str] = Field(default=None, max_length=500)
    category: GoalCategory = "other"


class GoalUpdateSchema(_GoalFields):
    title: Optional[str] = Field(default=None, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    targetAmount: Optional[float] = Field(default=None, allow_inf_nan=False)
    currentAmount: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    deadline: Optional[datetime] = None
    category: Optional[GoalCategory] = None
    status: Optional[GoalStatus] = None

    def changes(self) -> dict:
        return {name: getattr(self, name) for name in self.model_fields_set}


class AddSavingsSchema(BaseModel):
    amount: float = Field(allow_inf_nan=False)

    @field_validator("amount")
    @classmethod
    def positive_amount(cls, v):
        if v <= 0:
            raise ValueError("Amount must be greater than 0")
        return v
