from __future__ import annotations

from flask import Blueprint, request

from auth.session import current_user, session_required
from errors import ValidationError, json_body, parse_body, success

from .schemas import TransactionCreateSchema, TransactionListQuery, TransactionUpdateSchema
from .services import (
    create_transaction,
    delete_transaction,
    get_transaction,
    list_transactions,
    transaction_summary,
    update_transaction,
)


transactions_bp = Blueprint("transactions", __name__, url_prefix="/transactions")


# an empty string here means "clear it", not "not supplied"
_CLEARABLE = {"notes"}


def _request_fields() -> dict:
    """
    Body fields from either a JSON request or a multipart form (the latter
    is used when an attachment is uploaded). JSON nulls and empty values
    count as "not supplied", except for clearable text fields.
    """
    if request.mimetype == "multipart/form-data" or request.form:
        data = request.form.to_dict()
    else:
        data = json_body()
    return {
        k: v for k, v in data.items()
        if v is not None and (v != "" or k in _CLEARABLE)
    }


def _attachment():
    f = request.files.get("attachment")
    return f if f and f.filename else None


@transactions_bp.route("", methods=["GET"])
@session_required
def list_all():
    query = TransactionListQuery(request.args)
    return success(list_transactions(current_user().id, query))


@transactions_bp.route("/stats/summary", methods=["GET"])
@session_required
def stats_summary():
    return success({"summary": transaction_summary(current_user().id)})


@transactions_bp.route("/<int:transaction_id>", methods=["GET"])
@session_required
def get_one(transaction_id: int):
    txn = get_transaction(current_user().id, transaction_id)
    return success({"transaction": txn.to_dict()})


@transactions_bp.route("", methods=["POST"])
@session_required
def create():

    data = _request_fields()
    if not all(data.get(f) for f in ("type", "amount", "category")):
        raise ValidationError("Please provide type, amount, and category")

    payload = parse_body(TransactionCreateSchema, data)
    txn = create_transaction(current_user().id, payload, _attachment())

    return success({"transaction": txn.to_dict()}, "Transaction created successfully", 201)


@transactions_bp.route("/<int:transaction_id>", methods=["PUT"])
@session_required
def update(transaction_id: int):

    payload = parse_body(TransactionUpdateSchema, _request_fields())
    txn = update_transaction(current_user().id, transaction_id, payload, _attachment())

    return success({"transaction": txn.to_dict()}, "Transaction updated successfully")


@transactions_bp.route("/<int:transaction_id>", methods=["DELETE"])
@session_required
def delete(transaction_id: int):
    delete_transaction(current_user().id, transaction_id)
    return success(message="Transaction deleted successfully")
