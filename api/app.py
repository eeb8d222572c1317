"""Flask REST API exposing the expense ledger."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from flask import Blueprint, Flask, Response, jsonify, request
from flask_cors import CORS

from piggy_core.exceptions import PersistenceError, RecordNotFoundError, ValidationError
from piggy_core.exporter import export_csv
from piggy_core.ledger import LedgerStore
from piggy_core.predicates import FilterSpec
from piggy_core.stats import StatsService
from piggy_core.storage import JSONStorage
from piggy_core.validators import require_valid

FILTER_PARAMS = ("category", "startDate", "endDate", "sortBy")


def create_app(data_dir: Optional[Path] = None, url_prefix: Optional[str] = None) -> Flask:
    app = Flask(__name__)

    env_name = os.getenv("SAFE_PIGGY_ENV", "prod").lower()
    if env_name in {"dev", "development"}:
        CORS(app, resources={r"/*": {"origins": "*"}}, supports_credentials=True)
    else:
        allowed_origins = os.getenv("SAFE_PIGGY_ALLOWED_ORIGINS")
        if allowed_origins:
            origins = [origin.strip() for origin in allowed_origins.split(",") if origin.strip()]
            CORS(app, resources={r"/*": {"origins": origins}}, supports_credentials=True)
        else:
            CORS(app)

    storage = JSONStorage(Path(data_dir or os.getenv("SAFE_PIGGY_DATA_DIR", "data")))
    store = LedgerStore(storage)
    stats_service = StatsService(store)
    if url_prefix is None:
        url_prefix = os.getenv("SAFE_PIGGY_API_PREFIX", "/api")

    api = Blueprint("expenses", __name__)

    def _success(payload: Any, status: int = 200):
        if status == 204:
            return ("", status)
        return jsonify(payload), status

    @app.errorhandler(ValidationError)
    def handle_validation_error(exc: ValidationError):
        app.logger.info("Validation error: %s", exc)
        return jsonify({"errors": exc.errors}), 400

    @app.errorhandler(RecordNotFoundError)
    def handle_not_found(exc: RecordNotFoundError):
        app.logger.info("Record not found: %s", exc)
        return jsonify({"error": "Expense not found"}), 404

    @app.errorhandler(PersistenceError)
    def handle_persistence_error(exc: PersistenceError):
        app.logger.error("Persistence error", exc_info=exc)
        return jsonify({"error": "Internal server error"}), 500

    # Flask has already logged the traceback of unhandled errors.
    @app.errorhandler(500)
    def handle_internal_error(exc):
        return jsonify({"error": "Internal server error"}), 500

    def _json_body() -> Dict[str, Any]:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError(["Request body must be a JSON object."])
        return data

    def _filters() -> FilterSpec:
        return FilterSpec.from_params({key: request.args.get(key) for key in FILTER_PARAMS})

    @app.get("/")
    def index():
        return _success({"message": "Expense Tracker API is running"})

    @api.get("/expenses")
    def list_expenses():
        spec = _filters()
        predicate = spec.predicate()
        expenses = store.query(predicate, spec.sort_by)
        total = store.sum(predicate)
        return _success({
            "expenses": [expense.to_dict() for expense in expenses],
            "total": total,
        })

    @api.post("/expenses")
    def create_expense():
        data = require_valid(_json_body())
        expense = store.insert(data)
        return _success(expense.to_dict(), 201)

    @api.get("/expenses/<int:expense_id>")
    def get_expense(expense_id: int):
        expense = store.get(expense_id)
        return _success(expense.to_dict())

    @api.put("/expenses/<int:expense_id>")
    def update_expense(expense_id: int):
        data = require_valid(_json_body())
        expense = store.update(expense_id, data)
        return _success(expense.to_dict())

    @api.delete("/expenses/<int:expense_id>")
    def delete_expense(expense_id: int):
        if not store.delete(expense_id):
            raise RecordNotFoundError(f"Expense {expense_id} not found")
        return _success({}, 204)

    @api.get("/expenses/export/csv")
    def export_expenses_csv():
        spec = _filters()
        expenses = store.query(spec.predicate(), spec.sort_by)
        return Response(
            export_csv(expenses),
            mimetype="text/csv",
            headers={"Content-Disposition": 'attachment; filename="expenses.csv"'},
        )

    @api.get("/stats/month")
    def monthly_stats():
        return _success(stats_service.monthly_stats().to_dict())

    app.register_blueprint(api, url_prefix=url_prefix or None)
    return app


def main() -> None:
    load_dotenv()
    logging.basicConfig(
        level=os.getenv("SAFE_PIGGY_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )
    app = create_app()
    app.run(host=os.getenv("HOST", "127.0.0.1"), port=int(os.getenv("PORT", "4000")))


if __name__ == "__main__":
    main()
