"""JSON files backing the budget tracker.

Each record kind lives in its own file under the data directory
(``incomes.json``, ``deductions.json``, ``account_balances.json``) holding a
list of serialised records; ``projection_dates.json`` holds a plain list of
days of month.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, List

from .exceptions import PersistenceError

logger = logging.getLogger(__name__)

TEMP_SUFFIX = ".tmp"


class JSONStorage:
    """One JSON list per resource file, replaced atomically on every save."""

    def __init__(self, base_path: Path) -> None:
        self._base_path = Path(base_path)
        try:
            self._base_path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise PersistenceError(f"Unable to create data directory {self._base_path}") from exc

    def load(self, resource: str) -> List[Any]:
        path = self._path_for(resource)
        if not path.exists():
            logger.debug("No %s yet, starting empty", resource)
            return []
        try:
            with path.open("r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except json.JSONDecodeError as exc:
            raise PersistenceError(f"Corrupted JSON data in {path}") from exc
        except OSError as exc:
            raise PersistenceError(f"Unable to read from {path}") from exc

        if not isinstance(payload, list):
            raise PersistenceError(f"Expected a list of records in {path}")
        return payload

    def save(self, resource: str, records: Iterable[Any]) -> None:
        path = self._path_for(resource)
        temp_path = path.with_suffix(path.suffix + TEMP_SUFFIX)
        payload = list(records)
        try:
            with temp_path.open("w", encoding="utf-8") as handle:
                json.dump(payload, handle, indent=2)
                handle.flush()
            temp_path.replace(path)
        except OSError as exc:
            # A half-written temp file would otherwise linger next to the real one.
            temp_path.unlink(missing_ok=True)
            raise PersistenceError(f"Unable to write to {path}") from exc
        logger.debug("Saved %d entries to %s", len(payload), resource)

    def _path_for(self, resource: str) -> Path:
        # Resources are bare file names inside the data directory.
        if Path(resource).name != resource or not resource.endswith(".json"):
            raise PersistenceError(f"Invalid resource name {resource!r}")
        return self._base_path / resource

    @property
    def base_path(self) -> Path:
        return self._base_path
