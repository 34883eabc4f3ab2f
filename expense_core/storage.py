"""Persistence utilities for the expense tracker core services."""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, Iterable, List

from .exceptions import PersistenceError

logger = logging.getLogger(__name__)

KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]{1,100}$")


class JSONStorage:
    """Key-value store keeping one JSON document per key, with crash-safe writes."""

    def __init__(self, base_path: Path) -> None:
        self._base_path = Path(base_path)
        try:
            self._base_path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise PersistenceError(f"Unable to create data directory {self._base_path}") from exc

    def load(self, key: str) -> List[Any]:
        """Return the list stored under ``key``, or an empty list when absent."""
        path = self._path_for(key)
        if not path.exists():
            logger.debug("No stored data for %s at %s", key, path)
            return []
        try:
            with path.open("r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except json.JSONDecodeError as exc:
            raise PersistenceError(f"Corrupted JSON data in {path}") from exc
        except OSError as exc:
            raise PersistenceError(f"Unable to read from {path}") from exc

        if payload is None:
            return []
        if not isinstance(payload, list):
            raise PersistenceError(f"Expected list payload in {path}")
        return payload

    def save(self, key: str, records: Iterable[Any]) -> None:
        """Overwrite the value stored under ``key`` with ``records``."""
        path = self._path_for(key)
        temp_path = path.with_suffix(path.suffix + ".tmp")
        items = list(records)
        try:
            with temp_path.open("w", encoding="utf-8") as handle:
                json.dump(items, handle, indent=2)
                handle.flush()
            # Path.replace is an atomic rename on POSIX.
            temp_path.replace(path)
        except OSError as exc:
            raise PersistenceError(f"Unable to write to {path}") from exc
        logger.debug("Saved %d records for %s", len(items), key)

    def exists(self, key: str) -> bool:
        return self._path_for(key).exists()

    def _path_for(self, key: str) -> Path:
        if not isinstance(key, str) or not KEY_PATTERN.fullmatch(key) or key.startswith("."):
            raise PersistenceError(f"Invalid storage key: {key!r}")
        return self._base_path / f"{key}.json"
