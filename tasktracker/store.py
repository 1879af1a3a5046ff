"""Durable store: named JSON documents in a data directory.

Persistence is best effort. A failed load falls back to the caller's
default and a failed save is logged, leaving the mutation in memory only
until the next successful save.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from loguru import logger

from tasktracker.errors import PersistenceError

USERS = "users"
TASKS = "tasks"
SESSIONS = "sessions"
LAST_IDS = "lastIDs"


class JsonStore:
    def __init__(self, data_dir):
        self.data_dir = Path(data_dir)

    def path_for(self, name: str) -> Path:
        return self.data_dir / f"{name}.json"

    def load(self, name: str, default: Any) -> Any:
        path = self.path_for(name)
        try:
            with path.open("r", encoding="utf-8") as fh:
                value = json.load(fh)
        except FileNotFoundError:
            logger.info(f"store: {path} not found, starting with default")
            return default
        except (OSError, ValueError) as exc:
            logger.error(f"store: failed to load {path}: {exc}")
            return default
        if default is not None and not isinstance(value, type(default)):
            logger.error(
                f"store: {path} holds {type(value).__name__}, expected {type(default).__name__}; using default"
            )
            return default
        logger.debug(f"store: loaded {path}")
        return value

    def save(self, name: str, value: Any) -> None:
        try:
            self._write(name, value)
        except PersistenceError as exc:
            logger.error(f"store: {exc}")

    def _write(self, name: str, value: Any) -> None:
        path = self.path_for(name)
        try:
            data = json.dumps(value, indent=2)
        except (TypeError, ValueError) as exc:
            raise PersistenceError(f"cannot serialize {name}: {exc}") from exc

        tmp_name = None
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.data_dir, prefix=f".{name}.", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(data)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, path)
        except OSError as exc:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise PersistenceError(f"cannot write {path}: {exc}") from exc
        logger.debug(f"store: wrote {path} size={len(data)}")
