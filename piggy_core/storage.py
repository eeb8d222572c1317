"""Persistence utilities for the expense ledger."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict

from filelock import FileLock

from .exceptions import PersistenceError

LOCK_TIMEOUT = 10.0


class JSONStorage:
    """Simple file-based JSON document storage with crash-safe writes."""

    def __init__(self, base_path: Path) -> None:
        self._base_path = Path(base_path)
        try:
            self._base_path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise PersistenceError(f"Unable to create data directory {self._base_path}") from exc

    def load(self, resource: str) -> Dict[str, Any]:
        """Return the stored document, or an empty one if nothing was saved yet."""
        path = self._base_path / resource
        if not path.exists():
            return {}
        try:
            with path.open("r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except json.JSONDecodeError as exc:
            raise PersistenceError(f"Corrupted JSON data in {path}") from exc
        except OSError as exc:
            raise PersistenceError(f"Unable to read from {path}") from exc

        if not isinstance(payload, dict):
            raise PersistenceError(f"Expected object payload in {path}")
        return payload

    def save(self, resource: str, document: Dict[str, Any]) -> None:
        path = self._base_path / resource
        temp_path = path.with_suffix(path.suffix + ".tmp")
        try:
            with temp_path.open("w", encoding="utf-8") as handle:
                json.dump(document, handle, indent=2)
                handle.flush()
                os.fsync(handle.fileno())
            # Atomic move on POSIX: readers see the old or the new file, never half of one.
            temp_path.replace(path)
        except OSError as exc:
            raise PersistenceError(f"Unable to write to {path}") from exc

    def lock(self, resource: str, timeout: float = LOCK_TIMEOUT) -> FileLock:
        """Return the inter-process lock guarding ``resource``."""
        return FileLock(str(self._base_path / f"{resource}.lock"), timeout=timeout)

    @property
    def base_path(self) -> Path:
        return self._base_path
