"""Durable client-side key/value storage backed by a JSON file."""

import json
import logging
import os
from pathlib import Path
from typing import Optional

from config.settings import settings

logger = logging.getLogger(__name__)


class ClientStorage:
    """
    A small string-to-string store persisted on disk.

    Every write rewrites the whole file through a temporary sibling and an
    atomic rename, so a crash never leaves a half-written file behind.
    """

    def __init__(self, path: Path):
        self.path = Path(path).expanduser()

    def _read(self) -> dict[str, str]:
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except json.JSONDecodeError:
            logger.warning(f"Ignoring corrupt client storage file: {self.path}")
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with tmp_path.open("w", encoding="utf-8") as f:
            json.dump(data, f)
        os.replace(tmp_path, self.path)

    def get_item(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove_item(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)


def default_storage() -> ClientStorage:
    """Storage at the configured CLIENT_STORAGE_PATH."""
    return ClientStorage(settings.CLIENT_STORAGE_PATH)
