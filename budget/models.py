"""Record types for the budget tracker domain."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict

__all__ = ["AccountBalance", "Deduction", "Income", "isoformat_utc", "parse_datetime"]


def isoformat_utc(dt: datetime) -> str:
    """Return an ISO 8601 string with trailing Z for UTC-aware datetimes."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    else:
        dt = dt.astimezone(timezone.utc)
    return dt.isoformat(timespec="seconds").replace("+00:00", "Z")


def parse_datetime(value: str) -> datetime:
    """Parse ISO 8601 datetime strings with optional trailing Z into UTC-aware datetime."""
    value = value.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


@dataclass(frozen=True)
class Income:
    id: str
    description: str
    amount: Decimal
    income_date: int
    frequency: str = "monthly"

    def to_dict(self) -> Dict[str, Any]:
        """Serialise the income to JSON-friendly natives."""
        return {
            "id": self.id,
            "description": self.description,
            "amount": f"{self.amount:.2f}",
            "frequency": self.frequency,
            "income_date": self.income_date,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Income":
        return cls(
            id=data["id"],
            description=data["description"],
            amount=Decimal(str(data["amount"])),
            income_date=int(data["income_date"]),
            frequency=data.get("frequency", "monthly"),
        )


@dataclass(frozen=True)
class Deduction:
    id: str
    description: str
    amount: Decimal
    category: str
    deduction_date: int

    def to_dict(self) -> Dict[str, Any]:
        """Serialise the deduction to JSON-friendly natives."""
        return {
            "id": self.id,
            "description": self.description,
            "amount": f"{self.amount:.2f}",
            "category": self.category,
            "deduction_date": self.deduction_date,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Deduction":
        return cls(
            id=data["id"],
            description=data["description"],
            amount=Decimal(str(data["amount"])),
            category=data["category"],
            deduction_date=int(data["deduction_date"]),
        )


@dataclass(frozen=True)
class AccountBalance:
    """Bank balance observed on a given day of the month."""

    id: str
    amount: Decimal
    balance_date: int
    created_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "amount": f"{self.amount:.2f}",
            "balance_date": self.balance_date,
            "created_at": isoformat_utc(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AccountBalance":
        return cls(
            id=data["id"],
            amount=Decimal(str(data["amount"])),
            balance_date=int(data["balance_date"]),
            created_at=parse_datetime(data["created_at"]),
        )
