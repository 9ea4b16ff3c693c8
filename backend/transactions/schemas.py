from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from timeutils import parse_datetime

TransactionType = Literal["income", "expense"]
PaymentMethod = Literal["cash", "card", "upi", "bank"]
TransactionStatus = Literal["completed", "pending", "cancelled"]


class _TransactionFields(BaseModel):

    @field_validator("currency", check_fields=False)
    @classmethod
    def normalize_currency(cls, v):
        if v is None:
            return v
        v = v.strip().upper()
        if len(v) != 3 or not v.isalpha():
            raise ValueError("Currency must be a 3-letter code")
        return v

    @field_validator("category", check_fields=False)
    @classmethod
    def strip_category(cls, v):
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Category cannot be empty")
        return v

    @field_validator("notes", check_fields=False)
    @classmethod
    def strip_notes(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("date", mode="before", check_fields=False)
    @classmethod
    def coerce_date(cls, v):
        return parse_datetime(v)


class TransactionCreateSchema(_TransactionFields):
    type: TransactionType
    amount: float = Field(gt=0, allow_inf_nan=False)
    category: str
    currency: str = "USD"
    date: Optional[datetime] = None
    paymentMethod: PaymentMethod = "cash"
    notes: str = ""
    status: TransactionStatus = "completed"


class TransactionUpdateSchema(_TransactionFields):
    """
    Partial update. Only the fields present in ``model_fields_set``
    were supplied by the client.
    """

    type: Optional[TransactionType] = None
    amount: Optional[float] = Field(default=None, gt=0, allow_inf_nan=False)
    category: Optional[str] = None
    currency: Optional[str] = None
    date: Optional[datetime] = None
    paymentMethod: Optional[PaymentMethod] = None
    notes: Optional[str] = None
    status: Optional[TransactionStatus] = None

    def changes(self) -> dict:
        return {name: getattr(self, name) for name in self.model_fields_set}


class TransactionListQuery:
    """Lenient query-string parsing: bad paging values fall back to defaults."""

    DEFAULT_PAGE = 1
    DEFAULT_LIMIT = 10

    def __init__(self, args):
        self.page = self._positive_int(args.get("page"), self.DEFAULT_PAGE)
        self.limit = self._positive_int(args.get("limit"), self.DEFAULT_LIMIT)
        self.type = args.get("type") or None
        self.status = args.get("status") or None
        self.category = (args.get("category") or "").strip() or None

    @staticmethod
    def _positive_int(value, default: int) -> int:
        try:
            number = int(value)
        except (TypeError, ValueError):
            return default
        return number if number > 0 else default
