"""Flat key/value storage backed by a single JSON file."""

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any

from facility_assistant.config import get_settings

logger = logging.getLogger(__name__)


class FlatStore:
    """
    Minimal persistent key/value store.

    The whole mapping is held in memory and rewritten to disk synchronously
    after every ``set``. Writes are best effort: a failed write is logged and
    the in-memory mapping stays authoritative for the rest of the process.
    Unreadable or malformed files are logged and treated as empty so a corrupt
    store never prevents startup.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._data: dict[str, Any] = self._load()

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            logger.exception("Failed to read flat store at %s, starting empty", self.path)
            return {}
        if not isinstance(data, dict):
            logger.error("Flat store at %s is not a JSON object, starting empty", self.path)
            return {}
        return data

    def _flush(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(self._data, ensure_ascii=False, indent=2), encoding="utf-8")
        tmp_path.replace(self.path)

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Update ``key`` and write the store. A failed write is logged, not raised."""
        self._data[key] = value
        try:
            self._flush()
        except OSError:
            logger.exception("Failed to write flat store at %s, keeping changes in memory", self.path)

    def __contains__(self, key: str) -> bool:
        return key in self._data


@lru_cache
def get_flat_store() -> FlatStore:
    """Get the process-wide flat store configured by settings."""
    return FlatStore(get_settings().data_file)
