"""JSON file backed key-value store mirroring browser local storage."""

import json
import logging
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass
class JsonFileStore:
    """Stores string values under string keys in one JSON document."""

    path: Path

    def _read(self) -> dict[str, str]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Ignoring unreadable local storage file %s", self.path)
            return {}
        if not isinstance(data, dict):
            return {}
        return {
            str(key): value for key, value in data.items() if isinstance(value, str)
        }

    def _write(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(data), encoding="utf-8")
        tmp_path.replace(self.path)

    def get_item(self, key: str) -> str | None:
        """Return the value stored under a key."""
        return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        """Store a value under a key."""
        data = self._read()
        data[key] = value
        self._write(data)

    def remove_item(self, key: str) -> None:
        """Remove a key."""
        data = self._read()
        if data.pop(key, None) is not None:
            self._write(data)
