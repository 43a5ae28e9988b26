"""Framework-agnostic business services for the budget tracker."""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Callable, Dict, Generic, Iterable, List, Optional, Type, TypeVar
from uuid import uuid4

from . import projection
from .exceptions import PersistenceError
from .models import AccountBalance, Deduction, Income
from .projection import ZERO
from .storage import JSONStorage
from .validators import (
    DEDUCTION_CATEGORIES,
    DEFAULT_FREQUENCY,
    FREQUENCIES,
    parse_amount,
    parse_signed_amount,
    validate_datetime,
    validate_day_of_month,
    validate_enum,
    validate_required_str,
)

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", Income, Deduction, AccountBalance)


class RecordService(Generic[RecordT]):
    """Create/read/update/delete for one record kind, persisted as a JSON list.

    Lookups of unknown ids return ``None`` (or ``False`` for deletes); turning
    that into a user-facing error is left to the caller.
    """

    model: Type[RecordT]
    label = "record"
    resource = "records.json"

    def __init__(self, storage: JSONStorage, resource: Optional[str] = None) -> None:
        self._storage = storage
        self._resource = resource or self.resource
        self._records: Dict[str, RecordT] = {}
        self.load()  # Hydrate in-memory cache from persistence on construction.

    # Public API -----------------------------------------------------------
    def add(self, payload: Dict[str, object]) -> RecordT:
        data = self._validate_payload(payload)
        record = self.model(**data)
        self._records[record.id] = record
        self._persist()
        logger.info("Added %s %s", self.label, record.id)
        return record

    def update(self, record_id: str, changes: Dict[str, object]) -> Optional[RecordT]:
        existing = self._records.get(record_id)
        if existing is None:
            return None
        # Merge existing serialised data with incoming changes to support partial updates.
        merged_payload = {**existing.to_dict(), **changes}
        data = self._validate_payload(merged_payload, current=existing)
        updated = self.model(**data)
        self._records[record_id] = updated
        self._persist()
        logger.info("Updated %s %s", self.label, record_id)
        return updated

    def delete(self, record_id: str) -> bool:
        if self._records.pop(record_id, None) is None:
            return False
        self._persist()
        logger.info("Deleted %s %s", self.label, record_id)
        return True

    def get(self, record_id: str) -> Optional[RecordT]:
        return self._records.get(record_id)

    def list(self) -> List[RecordT]:
        return sorted(self._records.values(), key=self._sort_key)

    def load(self) -> None:
        raw_records = self._storage.load(self._resource)
        records: Dict[str, RecordT] = {}
        try:
            for payload in raw_records:
                stored = self.model.from_dict(payload)
                # Stored files can be edited by hand; hold them to the same rules as new input.
                data = self._validate_payload(stored.to_dict(), current=stored)
                records[stored.id] = self.model(**data)
        except (KeyError, TypeError, ValueError, ArithmeticError) as exc:
            raise PersistenceError(f"Malformed {self.label} data in {self._resource}") from exc
        self._records = records

    # Internal helpers -----------------------------------------------------
    def _persist(self) -> None:
        self._storage.save(self._resource, [record.to_dict() for record in self._records.values()])

    def _new_id(self, current: Optional[RecordT]) -> str:
        return current.id if current else str(uuid4())

    def _validate_payload(
        self, payload: Dict[str, object], *, current: Optional[RecordT] = None
    ) -> Dict[str, object]:
        raise NotImplementedError


class IncomeService(RecordService[Income]):
    """Manages recurring income records."""

    model = Income
    label = "income"
    resource = "incomes.json"

    def _sort_key(self, record: Income) -> Any:
        return (record.income_date, record.description.lower(), record.id)

    def _validate_payload(
        self, payload: Dict[str, object], *, current: Optional[Income] = None
    ) -> Dict[str, object]:
        frequency = payload.get("frequency")
        return {
            "id": self._new_id(current),
            "description": validate_required_str(payload.get("description"), "description", 100),
            "amount": parse_amount(payload.get("amount"), "amount"),
            "frequency": validate_enum(
                DEFAULT_FREQUENCY if frequency is None else frequency, "frequency", FREQUENCIES
            ),
            "income_date": validate_day_of_month(payload.get("income_date"), "income_date"),
        }


class DeductionService(RecordService[Deduction]):
    """Manages recurring deduction (expense) records."""

    model = Deduction
    label = "deduction"
    resource = "deductions.json"

    def _sort_key(self, record: Deduction) -> Any:
        return (record.deduction_date, record.description.lower(), record.id)

    def _validate_payload(
        self, payload: Dict[str, object], *, current: Optional[Deduction] = None
    ) -> Dict[str, object]:
        return {
            "id": self._new_id(current),
            "description": validate_required_str(payload.get("description"), "description", 100),
            "amount": parse_amount(payload.get("amount"), "amount"),
            "category": validate_enum(payload.get("category"), "category", DEDUCTION_CATEGORIES),
            "deduction_date": validate_day_of_month(
                payload.get("deduction_date"), "deduction_date"
            ),
        }


class AccountBalanceService(RecordService[AccountBalance]):
    """Manages observed bank balances keyed by day of month."""

    model = AccountBalance
    label = "account balance"
    resource = "account_balances.json"

    def _sort_key(self, record: AccountBalance) -> Any:
        return (record.balance_date, record.created_at, record.id)

    def _validate_payload(
        self, payload: Dict[str, object], *, current: Optional[AccountBalance] = None
    ) -> Dict[str, object]:
        if current is not None:
            created_at = current.created_at
        elif payload.get("created_at") is not None:
            created_at = validate_datetime(payload["created_at"], "created_at")
        else:
            created_at = datetime.now(timezone.utc).replace(microsecond=0)
        return {
            "id": self._new_id(current),
            "amount": parse_signed_amount(payload.get("amount"), "amount"),
            "balance_date": validate_day_of_month(payload.get("balance_date"), "balance_date"),
            "created_at": created_at,
        }


class ProjectionDateService:
    """Persists the user's projection-date set."""

    def __init__(self, storage: JSONStorage, resource: str = "projection_dates.json") -> None:
        self._storage = storage
        self._resource = resource
        self._dates: List[int] = []
        self.load()

    def list(self) -> List[int]:
        return list(self._dates)

    def add(self, day: object) -> List[int]:
        updated = projection.add_projection_date(self._dates, day)
        if updated != self._dates:
            self._dates = updated
            self._persist()
        return self.list()

    def remove(self, day: object) -> List[int]:
        updated = projection.remove_projection_date(self._dates, day)
        if updated != self._dates:
            self._dates = updated
            self._persist()
        return self.list()

    def load(self) -> None:
        dates: List[int] = []
        for raw in self._storage.load(self._resource):
            dates = projection.add_projection_date(dates, raw)
        self._dates = dates

    def _persist(self) -> None:
        self._storage.save(self._resource, self._dates)


class BudgetService:
    """Feeds record snapshots to the projection functions.

    This is the only place the calendar is consulted: when ``current_day`` is
    not supplied it defaults to today's day of the month.
    """

    def __init__(
        self,
        income_service: IncomeService,
        deduction_service: DeductionService,
        date_service: Optional[ProjectionDateService] = None,
        *,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._incomes = income_service
        self._deductions = deduction_service
        self._dates = date_service
        self._today = today

    def current_day(self, current_day: Optional[int] = None) -> int:
        if current_day is None:
            return self._today().day
        return validate_day_of_month(current_day, "current_day")

    def totals(self) -> projection.Totals:
        return projection.compute_totals(self._incomes.list(), self._deductions.list())

    def tracking(self, current_day: Optional[int] = None) -> projection.Tracking:
        day = self.current_day(current_day)
        return projection.monthly_tracking(self._incomes.list(), self._deductions.list(), day)

    def budget_at(self, target_date: object, current_day: Optional[int] = None) -> Decimal:
        target = validate_day_of_month(target_date, "target_date")
        day = self.current_day(current_day)
        return projection.budget_at_date(
            self._incomes.list(), self._deductions.list(), day, target
        )

    def series(
        self, dates: Optional[Iterable[object]] = None, current_day: Optional[int] = None
    ) -> List[projection.ProjectionPoint]:
        day = self.current_day(current_day)
        if dates is None:
            days = self._dates.list() if self._dates is not None else []
        else:
            days = [validate_day_of_month(raw, "dates") for raw in dates]
        return projection.projection_series(
            self._incomes.list(), self._deductions.list(), day, days
        )

    def summary(
        self,
        current_day: Optional[int] = None,
        *,
        overdraft_enabled: bool = False,
        overdraft_limit: Decimal = ZERO,
    ) -> Dict[str, Any]:
        """Dashboard (whole month) and monthly tracking (as of today) side by side."""
        day = self.current_day(current_day)
        incomes = self._incomes.list()
        deductions = self._deductions.list()
        totals = projection.compute_totals(incomes, deductions)
        tracking = projection.monthly_tracking(incomes, deductions, day)
        dashboard = projection.availability(
            totals.remaining_budget, overdraft_enabled, overdraft_limit
        )
        monthly = projection.availability(tracking.raw_budget, overdraft_enabled, overdraft_limit)
        return {
            "current_day": day,
            "overdraft": {
                "enabled": overdraft_enabled,
                "limit": f"{overdraft_limit:.2f}",
            },
            "totals": totals.to_dict(),
            "dashboard": dashboard.to_dict(),
            "tracking": {
                "processed_income": f"{tracking.processed_income:.2f}",
                "processed_deductions": f"{tracking.processed_deductions:.2f}",
                "raw_budget": f"{tracking.raw_budget:.2f}",
                "incomes": _split_to_dict(tracking.incomes),
                "deductions": _split_to_dict(tracking.deductions),
                **monthly.to_dict(),
            },
        }

    def refresh(self) -> None:
        """Reload data from persistence for every service."""
        self._incomes.load()
        self._deductions.load()
        if self._dates is not None:
            self._dates.load()

    def snapshot(self) -> Dict[str, List[Any]]:
        """Return serialisable snapshot useful for testing or exports."""
        return {
            "incomes": [income.to_dict() for income in self._incomes.list()],
            "deductions": [deduction.to_dict() for deduction in self._deductions.list()],
            "projection_dates": self._dates.list() if self._dates is not None else [],
        }


def _split_to_dict(split: projection.Split) -> Dict[str, List[Dict[str, Any]]]:
    return {
        "processed": [record.to_dict() for record in split.processed],
        "pending": [record.to_dict() for record in split.pending],
    }
