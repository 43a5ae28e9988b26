"""Environment-driven settings for the budget tracker API."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import List, Mapping, Optional

from budget.exceptions import ValidationError
from budget.validators import parse_bool, parse_non_negative_amount

MIN_PORT = 1
MAX_PORT = 65535


def _parse_port(raw: str) -> int:
    try:
        port = int(raw.strip())
    except ValueError as exc:
        raise ValidationError("PORT must be an integer") from exc
    if not MIN_PORT <= port <= MAX_PORT:
        raise ValidationError(f"PORT must be between {MIN_PORT} and {MAX_PORT}")
    return port


@dataclass(frozen=True)
class Settings:
    env: str = "prod"
    data_dir: Path = Path("data")
    allowed_origins: List[str] = field(default_factory=list)
    overdraft_enabled: bool = False
    overdraft_limit: Decimal = Decimal("0.00")
    port: int = 5000

    @property
    def is_dev(self) -> bool:
        return self.env in {"dev", "development"}

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        origins = env.get("BUDGET_TRACKER_ALLOWED_ORIGINS", "")
        return cls(
            env=env.get("BUDGET_TRACKER_ENV", "prod").lower(),
            data_dir=Path(env.get("BUDGET_TRACKER_DATA_DIR", "data")),
            allowed_origins=[origin.strip() for origin in origins.split(",") if origin.strip()],
            overdraft_enabled=parse_bool(
                env.get("BUDGET_TRACKER_OVERDRAFT_ENABLED", "false"),
                "BUDGET_TRACKER_OVERDRAFT_ENABLED",
            ),
            overdraft_limit=parse_non_negative_amount(
                env.get("BUDGET_TRACKER_OVERDRAFT_LIMIT", "0"), "BUDGET_TRACKER_OVERDRAFT_LIMIT"
            ),
            port=_parse_port(env.get("PORT", "5000")),
        )
