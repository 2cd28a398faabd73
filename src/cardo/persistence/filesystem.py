"""Key-value persistence port with in-memory and JSON file implementations."""

from __future__ import annotations

import json
import logging
import re
import threading
from pathlib import Path
from typing import Any, Protocol

from ..config import settings

logger = logging.getLogger(__name__)

_SAFE_KEY = re.compile(r"[^A-Za-z0-9_.-]")


class KeyValueStore(Protocol):
    """Minimal storage port for caches and drafts (get/set/remove by key)."""

    def get(self, key: str) -> Any | None: ...

    def set(self, key: str, value: Any) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryKeyValueStore:
    def __init__(self) -> None:
        self._values: dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Any | None:
        with self._lock:
            raw = self._values.get(key)
        return json.loads(raw) if raw is not None else None

    def set(self, key: str, value: Any) -> None:
        # Stored serialized so callers never share mutable state with the store.
        encoded = json.dumps(value, ensure_ascii=False)
        with self._lock:
            self._values[key] = encoded

    def remove(self, key: str) -> None:
        with self._lock:
            self._values.pop(key, None)


class JsonFileStore:
    """One JSON document per key under a cache directory."""

    def __init__(self, root: Path | None = None) -> None:
        self.root = (root or settings.resolved_cache_dir).resolve()
        self._lock = threading.Lock()

    def path_for(self, key: str) -> Path:
        return self.root / f"{_SAFE_KEY.sub('_', key)}.json"

    def get(self, key: str) -> Any | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            with path.open("r", encoding="utf-8") as handle:
                return json.load(handle)
        except (json.JSONDecodeError, OSError) as exc:
            logger.warning(f"Ignoring unreadable cache entry '{key}' at {path}: {exc}")
            return None

    def set(self, key: str, value: Any) -> None:
        path = self.path_for(key)
        tmp_path = path.with_suffix(".json.tmp")
        with self._lock:
            self.root.mkdir(parents=True, exist_ok=True)
            with tmp_path.open("w", encoding="utf-8") as handle:
                json.dump(value, handle, ensure_ascii=False, indent=2)
            tmp_path.replace(path)

    def remove(self, key: str) -> None:
        with self._lock:
            self.path_for(key).unlink(missing_ok=True)
