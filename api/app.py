"""Flask REST API exposing the expense store."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request
from flask_cors import CORS

from expense_store.config import default_data_dir
from expense_store.exceptions import (
    CategoryInUseError,
    DuplicateCategoryError,
    PersistenceError,
    RecordNotFoundError,
    ValidationError,
)
from expense_store.models import format_amount
from expense_store.storage import FileBlobStore
from expense_store.store import ExpenseStore, export_filename


def create_app(data_dir: Optional[Path] = None, store: Optional[ExpenseStore] = None) -> Flask:
    app = Flask(__name__)

    env_name = os.getenv("EXPENSE_TRACKER_ENV", "prod").lower()
    if env_name in {"dev", "development"}:
        CORS(app, resources={r"/*": {"origins": "*"}}, supports_credentials=True)
    else:
        allowed_origins = os.getenv("EXPENSE_TRACKER_ALLOWED_ORIGINS")
        if allowed_origins:
            origins = [origin.strip() for origin in allowed_origins.split(",") if origin.strip()]
            CORS(app, resources={r"/*": {"origins": origins}}, supports_credentials=True)
        else:
            CORS(app)

    if store is None:
        store = ExpenseStore(FileBlobStore(Path(data_dir or default_data_dir())))

    def _success(payload: Any, status: int = 200):
        if status == 204:
            return ("", status)
        return jsonify(payload), status

    def _handle_error(exc: Exception, status: int, message: str):
        app.logger.error("%s: %s", message, exc)
        return jsonify({"error": message, "details": str(exc)}), status

    @app.errorhandler(DuplicateCategoryError)
    def handle_duplicate_category(exc: DuplicateCategoryError):
        return _handle_error(exc, 409, "Category already exists")

    @app.errorhandler(CategoryInUseError)
    def handle_category_in_use(exc: CategoryInUseError):
        return _handle_error(exc, 409, "Category in use")

    @app.errorhandler(ValidationError)
    def handle_validation_error(exc: ValidationError):
        return _handle_error(exc, 400, "Validation error")

    @app.errorhandler(RecordNotFoundError)
    def handle_not_found(exc: RecordNotFoundError):
        return _handle_error(exc, 404, "Record not found")

    @app.errorhandler(PersistenceError)
    def handle_persistence_error(exc: PersistenceError):
        return _handle_error(exc, 500, "Persistence error")

    def _json_body() -> Dict[str, Any]:
        if not request.is_json:
            raise ValidationError("Request content must be application/json")
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError("Malformed JSON body")
        return data

    @app.get("/transactions")
    def list_transactions():
        transactions = store.get_transactions(
            kind=request.args.get("type") or request.args.get("kind"),
            category=request.args.get("category"),
            date_from=request.args.get("date_from"),
            date_to=request.args.get("date_to"),
        )
        return _success({
            "items": [transaction.to_dict() for transaction in transactions],
            "balance": format_amount(store.get_balance(transactions)),
        })

    @app.post("/transactions")
    def create_transaction():
        payload = _json_body()
        if not payload.get("date"):
            payload["date"] = store.today()
        transaction = store.add_transaction(payload)
        return _success(transaction.to_dict(), 201)

    @app.delete("/transactions")
    def clear_transactions():
        store.clear_all_data()
        return _success({}, 204)

    @app.get("/transactions/<transaction_id>")
    def get_transaction(transaction_id: str):
        return _success(store.get_transaction(transaction_id).to_dict())

    @app.delete("/transactions/<transaction_id>")
    def delete_transaction(transaction_id: str):
        store.delete_transaction(transaction_id)
        return _success({}, 204)

    @app.get("/categories")
    def list_categories():
        return _success({
            "items": [
                {**category.to_dict(), "in_use": store.is_category_in_use(category.name)}
                for category in store.categories
            ]
        })

    @app.post("/categories")
    def create_category():
        category = store.add_category(_json_body())
        return _success(category.to_dict(), 201)

    @app.delete("/categories/<name>")
    def delete_category(name: str):
        store.delete_category(name)
        return _success({}, 204)

    @app.get("/summary")
    def summary():
        period = request.args.get("period", "all")
        return _success({
            **store.get_period_summary(period).to_dict(),
            "recent": [transaction.to_dict() for transaction in store.get_recent_transactions()],
        })

    @app.get("/reports/monthly")
    def monthly_report():
        return _success({"items": [month.to_dict() for month in store.get_monthly_data()]})

    @app.get("/reports/daily")
    def daily_report():
        return _success({"items": [day.to_dict() for day in store.get_daily_balance_trend()]})

    @app.get("/export")
    def export():
        filename = export_filename(store.today())
        return (
            store.export_data(),
            200,
            {
                "Content-Type": "application/json",
                "Content-Disposition": f'attachment; filename="{filename}"',
            },
        )

    @app.post("/import")
    def import_data():
        if not store.import_data(request.get_data(as_text=True)):
            raise ValidationError("Import document is not a valid export")
        return _success({
            "transactions": len(store.transactions),
            "categories": len(store.categories),
        })

    return app
