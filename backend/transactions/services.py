from __future__ import annotations

from typing import Optional

from sqlalchemy import case, func, select
from werkzeug.datastructures import FileStorage

from errors import NotFound
from models import db
from models.transaction_model import Transaction
from storage.uploads import remove_stored_file, save_attachment
from timeutils import utcnow

from .schemas import TransactionCreateSchema, TransactionListQuery, TransactionUpdateSchema

# request field -> model column
_FIELD_MAP = {
    "type": "type",
    "amount": "amount",
    "category": "category",
    "currency": "currency",
    "date": "date",
    "paymentMethod": "payment_method",
    "notes": "notes",
    "status": "status",
}


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def list_transactions(user_id: int, query: TransactionListQuery) -> dict:
    stmt = select(Transaction).where(Transaction.user_id == user_id)

    if query.type:
        stmt = stmt.where(Transaction.type == query.type)
    if query.status:
        stmt = stmt.where(Transaction.status == query.status)
    if query.category:
        stmt = stmt.where(
            Transaction.category.ilike(f"%{_escape_like(query.category)}%", escape="\\")
        )

    total = db.session.scalar(select(func.count()).select_from(stmt.subquery()))

    # page and limit are unbounded; keep OFFSET/LIMIT within what the table holds
    offset = (query.page - 1) * query.limit
    items = []
    if offset < total:
        stmt = stmt.order_by(Transaction.created_at.desc(), Transaction.id.desc())
        items = db.session.scalars(stmt.offset(offset).limit(min(query.limit, total - offset))).all()

    return {
        "transactions": [t.to_dict() for t in items],
        "pagination": {
            "currentPage": query.page,
            "totalPages": -(-total // query.limit),
            "totalItems": total,
            "itemsPerPage": query.limit,
        },
    }


def get_transaction(user_id: int, transaction_id: int) -> Transaction:
    # someone else's transaction is reported exactly like a missing one
    txn = Transaction.query.filter_by(id=transaction_id, user_id=user_id).first()
    if not txn:
        raise NotFound("Transaction not found")
    return txn


def create_transaction(
    user_id: int,
    data: TransactionCreateSchema,
    attachment: Optional[FileStorage] = None,
) -> Transaction:

    attachment_path = save_attachment(attachment) if attachment else None

    txn = Transaction(
        user_id=user_id,
        type=data.type,
        amount=data.amount,
        currency=data.currency,
        category=data.category,
        date=data.date or utcnow(),
        payment_method=data.paymentMethod,
        notes=data.notes,
        status=data.status,
        attachment=attachment_path,
    )
    db.session.add(txn)
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        remove_stored_file(attachment_path)
        raise
    return txn


def update_transaction(
    user_id: int,
    transaction_id: int,
    data: TransactionUpdateSchema,
    attachment: Optional[FileStorage] = None,
) -> Transaction:

    txn = get_transaction(user_id, transaction_id)

    for field, value in data.changes().items():
        setattr(txn, _FIELD_MAP[field], value)

    old_attachment = None
    if attachment:
        old_attachment = txn.attachment
        txn.attachment = save_attachment(attachment)

    db.session.commit()
    remove_stored_file(old_attachment)
    return txn


def delete_transaction(user_id: int, transaction_id: int) -> None:
    txn = get_transaction(user_id, transaction_id)
    attachment = txn.attachment
    db.session.delete(txn)
    db.session.commit()
    remove_stored_file(attachment)


def transaction_summary(user_id: int) -> dict:
    completed = Transaction.status == "completed"

    def completed_sum(kind: str):
        return func.coalesce(
            func.sum(case((completed & (Transaction.type == kind), Transaction.amount), else_=0)),
            0,
        )

    row = db.session.execute(
        select(
            completed_sum("income").label("income"),
            completed_sum("expense").label("expenses"),
            func.coalesce(func.sum(case((Transaction.status == "pending", 1), else_=0)), 0).label("pending"),
            func.count(Transaction.id).label("total"),
        ).where(Transaction.user_id == user_id)
    ).one()

    total_income = float(row.income)
    total_expenses = float(row.expenses)
    return {
        "totalIncome": total_income,
        "totalExpenses": total_expenses,
        "pendingTransactions": int(row.pending),
        "totalTransactions": int(row.total),
        "balance": total_income - total_expenses,
    }
