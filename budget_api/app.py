"""Flask REST API exposing the budget tracker services."""

from __future__ import annotations

import time
from pathlib import Path
from typing import Any, Dict, List, Optional

from flask import Flask, g, jsonify, request
from flask_cors import CORS

from budget.exceptions import PersistenceError, RecordNotFoundError, ValidationError
from budget.projection import sum_amounts
from budget.services import (
    AccountBalanceService,
    BudgetService,
    DeductionService,
    IncomeService,
    ProjectionDateService,
)
from budget.storage import JSONStorage
from budget.validators import parse_bool, parse_non_negative_amount, validate_day_of_month

from .config import Settings

LOG_LINE_LIMIT = 80


def create_app(data_dir: Optional[Path] = None, settings: Optional[Settings] = None) -> Flask:
    app = Flask(__name__)
    settings = settings or Settings.from_env()

    if settings.is_dev:
        CORS(app, resources={r"/*": {"origins": "*"}}, supports_credentials=True)
    elif settings.allowed_origins:
        CORS(app, resources={r"/*": {"origins": settings.allowed_origins}}, supports_credentials=True)
    else:
        CORS(app)

    storage = JSONStorage(Path(data_dir or settings.data_dir))
    income_service = IncomeService(storage)
    deduction_service = DeductionService(storage)
    balance_service = AccountBalanceService(storage)
    date_service = ProjectionDateService(storage)
    budget = BudgetService(income_service, deduction_service, date_service)

    services = {
        "incomes": income_service,
        "deductions": deduction_service,
        "account-balances": balance_service,
    }

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

    @app.errorhandler(RecordNotFoundError)
    def handle_not_found(exc: RecordNotFoundError):
        return _handle_error(exc, 404, "Record not found")

    @app.errorhandler(PersistenceError)
    def handle_persistence_error(exc: PersistenceError):
        return _handle_error(exc, 500, "Persistence error")

    @app.before_request
    def start_timer():
        g.request_started = time.perf_counter()

    @app.after_request
    def log_api_request(response):
        if request.path.startswith("/api"):
            elapsed = (time.perf_counter() - g.get("request_started", time.perf_counter())) * 1000
            line = f"{request.method} {request.path} {response.status_code} in {elapsed:.0f}ms"
            if response.is_json:
                line += f" :: {response.get_data(as_text=True).strip()}"
            if len(line) > LOG_LINE_LIMIT:
                line = line[: LOG_LINE_LIMIT - 1] + "…"
            app.logger.info(line)
        return response

    def _json_body() -> Dict[str, Any]:
        if not request.is_json:
            raise ValidationError("Request content must be application/json")
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError("Malformed JSON body")
        return data

    def _service(kind: str):
        try:
            return services[kind]
        except KeyError as exc:
            raise RecordNotFoundError(f"Unknown resource {kind}") from exc

    def _label(kind: str) -> str:
        return kind.rstrip("s").replace("-", " ").capitalize()

    def _current_day() -> Optional[int]:
        raw = request.args.get("day")
        if raw in (None, ""):
            return None
        return validate_day_of_month(raw, "day")

    def _dates_arg() -> Optional[List[str]]:
        raw = request.args.get("dates")
        if raw is None:
            return None
        return [part.strip() for part in raw.split(",") if part.strip()]

    @app.get("/api/<any(incomes, deductions, 'account-balances'):kind>")
    def list_records(kind: str):
        service = _service(kind)
        records = service.list()
        payload: Dict[str, Any] = {"items": [record.to_dict() for record in records]}
        if kind != "account-balances":
            total = sum_amounts(records)
            payload["total"] = f"{total:.2f}"
        return _success(payload)

    @app.post("/api/<any(incomes, deductions, 'account-balances'):kind>")
    def create_record(kind: str):
        payload = _json_body()
        record = _service(kind).add(payload)
        return _success(record.to_dict(), 201)

    @app.get("/api/<any(incomes, deductions, 'account-balances'):kind>/<record_id>")
    def get_record(kind: str, record_id: str):
        record = _service(kind).get(record_id)
        if record is None:
            raise RecordNotFoundError(f"{_label(kind)} {record_id} not found")
        return _success(record.to_dict())

    @app.put("/api/<any(incomes, deductions, 'account-balances'):kind>/<record_id>")
    def update_record(kind: str, record_id: str):
        payload = _json_body()
        payload.pop("id", None)
        record = _service(kind).update(record_id, payload)
        if record is None:
            raise RecordNotFoundError(f"{_label(kind)} {record_id} not found")
        return _success(record.to_dict())

    @app.delete("/api/<any(incomes, deductions, 'account-balances'):kind>/<record_id>")
    def delete_record(kind: str, record_id: str):
        if not _service(kind).delete(record_id):
            raise RecordNotFoundError(f"{_label(kind)} {record_id} not found")
        return _success({}, 204)

    @app.get("/api/projection-dates")
    def list_projection_dates():
        return _success({"dates": date_service.list()})

    @app.post("/api/projection-dates")
    def add_projection_date():
        payload = _json_body()
        # Out-of-range or duplicate days are ignored rather than rejected.
        return _success({"dates": date_service.add(payload.get("day"))})

    @app.delete("/api/projection-dates/<int:day>")
    def remove_projection_date(day: int):
        return _success({"dates": date_service.remove(day)})

    @app.get("/api/summary")
    def summary():
        raw_enabled = request.args.get("overdraft_enabled")
        raw_limit = request.args.get("overdraft_limit")
        enabled = (
            parse_bool(raw_enabled, "overdraft_enabled")
            if raw_enabled not in (None, "")
            else settings.overdraft_enabled
        )
        limit = (
            parse_non_negative_amount(raw_limit, "overdraft_limit")
            if raw_limit not in (None, "")
            else settings.overdraft_limit
        )
        return _success(
            budget.summary(_current_day(), overdraft_enabled=enabled, overdraft_limit=limit)
        )

    @app.get("/api/budget-at/<target>")
    def budget_at(target: str):
        target_date = validate_day_of_month(target, "target_date")
        current_day = budget.current_day(_current_day())
        value = budget.budget_at(target_date, current_day)
        return _success({
            "target_date": target_date,
            "effective_date": min(target_date, current_day),
            "current_day": current_day,
            "budget": f"{value:.2f}",
        })

    @app.get("/api/projection")
    def projection_series():
        current_day = budget.current_day(_current_day())
        points = budget.series(_dates_arg(), current_day)
        return _success({
            "current_day": current_day,
            "points": [point.to_dict() for point in points],
        })

    return app


if __name__ == "__main__":  # pragma: no cover - manual dev server
    import logging

    logging.basicConfig(level=logging.INFO)
    config = Settings.from_env()
    create_app(settings=config).run(host="0.0.0.0", port=config.port, debug=config.is_dev)
