from models import db
from timeutils import isoformat, utcnow


class Transaction(db.Model):
    """
    A single money movement owned by one user.
    The amount is stored exactly as submitted; only ``formatted_amount``
    applies the income/expense sign convention.
    """

    __tablename__ = "transactions"

    id = db.Column(db.Integer, primary_key=True)

    # Ownership (never reassigned after creation)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), index=True, nullable=False)

    type = db.Column(db.String(10), nullable=False)  # income | expense
    amount = db.Column(db.Float, nullable=False)
    currency = db.Column(db.String(3), nullable=False, default="USD")
    category = db.Column(db.String(120), nullable=False)
    date = db.Column(db.DateTime, nullable=False, default=utcnow)
    payment_method = db.Column(db.String(10), nullable=False, default="cash")
    notes = db.Column(db.Text, nullable=False, default="")
    status = db.Column(db.String(10), nullable=False, default="completed")

    # Public path of the stored file, e.g. /uploads/transactions/attachment-....pdf
    attachment = db.Column(db.String(500), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        db.Index("ix_txn_user_created", "user_id", "created_at"),
        db.Index("ix_txn_user_type", "user_id", "type"),
        db.Index("ix_txn_user_category", "user_id", "category"),
    )

    @property
    def formatted_amount(self) -> float:
        magnitude = abs(self.amount or 0.0)
        return -magnitude if self.type == "expense" else magnitude

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "userId": str(self.user_id),
            "type": self.type,
            "amount": self.amount,
            "formattedAmount": self.formatted_amount,
            "currency": self.currency or "USD",
            "category": self.category,
            "date": isoformat(self.date),
            "paymentMethod": self.payment_method,
            "notes": self.notes,
            "status": self.status,
            "attachment": self.attachment,
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }
