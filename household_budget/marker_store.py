"""Storage for the "last auto-registration check" marker.

The orchestrator only needs ``get``/``set`` of a single string per key.  Two
implementations are provided: an in-memory store for tests and short-lived
processes, and a JSON file store keyed per user/browser context.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Optional, Protocol

from .config import MARKER_PATH


class MarkerStore(Protocol):
    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class InMemoryMarkerStore:
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._values: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value


class JsonMarkerStore:
    """Markers persisted to a small JSON document on disk."""

    def __init__(self, path: Path | None = None):
        self.path = Path(path) if path is not None else MARKER_PATH

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open('r', encoding='utf-8') as handle:
                data = json.load(handle)
        except (json.JSONDecodeError, OSError):
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def get(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open('w', encoding='utf-8') as handle:
            json.dump(data, handle, indent=2, sort_keys=True)
