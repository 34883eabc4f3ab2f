"""Flask REST API exposing the expense tracker services."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request
from flask_cors import CORS

from expense_core.analytics import total_sum
from expense_core.exceptions import NotFoundError, PersistenceError, ValidationError
from expense_core.filters import FilterCriteria
from expense_core.models import EXPENSE_CATEGORIES, category_color, category_label
from expense_core.services import DashboardService, ExpenseService
from expense_core.storage import JSONStorage
from expense_core.validators import validate_optional_date


def create_app(data_dir: Optional[Path] = None) -> Flask:
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

    root = data_dir or os.getenv("EXPENSE_TRACKER_DATA_DIR", "data")
    storage = JSONStorage(Path(root))
    expense_service = ExpenseService(storage)
    dashboard = DashboardService(expense_service)
    for payload, reason in expense_service.invalid_records:
        app.logger.warning("Ignoring stored expense %r: %s", payload, reason)

    def _success(payload: Any, status: int = 200):
        if status == 204:
            return ("", status)
        return jsonify(payload), status

    def _handle_error(exc: Exception, status: int, message: str):
        app.logger.error("%s: %s", message, exc)
        return jsonify({"error": message, "details": str(exc)}), status

    @app.errorhandler(ValidationError)
    def handle_validation_error(exc: ValidationError):
        return _handle_error(exc, 400, "Validation error")

    @app.errorhandler(NotFoundError)
    def handle_not_found(exc: NotFoundError):
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

    def _criteria() -> FilterCriteria:
        return FilterCriteria.from_mapping({
            "category": request.args.get("category"),
            "date_from": request.args.get("date_from"),
            "date_to": request.args.get("date_to"),
        })

    @app.get("/categories")
    def list_categories():
        items = [
            {"name": name, "label": category_label(name), "color": category_color(name)}
            for name in EXPENSE_CATEGORIES
        ]
        return _success({"items": items})

    @app.get("/expenses")
    def list_expenses():
        expenses = expense_service.list(_criteria())
        total = total_sum(expenses)
        return _success({
            "items": [expense.to_dict() for expense in expenses],
            "total": f"{total:.2f}",
        })

    @app.post("/expenses")
    def create_expense():
        payload = _json_body()
        expense = expense_service.add(payload)
        return _success(expense.to_dict(), 201)

    @app.get("/expenses/<expense_id>")
    def get_expense(expense_id: str):
        expense = expense_service.get(expense_id)
        return _success(expense.to_dict())

    @app.put("/expenses/<expense_id>")
    def update_expense(expense_id: str):
        payload = _json_body()
        expense = expense_service.update(expense_id, payload)
        return _success(expense.to_dict())

    @app.delete("/expenses/<expense_id>")
    def delete_expense(expense_id: str):
        expense_service.delete(expense_id)
        return _success({}, 204)

    @app.get("/dashboard")
    def dashboard_view():
        as_of = validate_optional_date(request.args.get("as_of"), "as_of")
        return _success(dashboard.snapshot(_criteria(), now=as_of))

    return app
