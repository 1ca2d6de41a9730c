"""Key-value persistence used for the source text and its edit history."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Optional, Protocol

from norma_studio.runtime import telemetry


class Storage(Protocol):
    """String key-value store; a missing key reads as ``None``."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class MemoryStorage:
    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._values: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value


class JsonFileStorage:
    """Keeps every key in a single JSON object on disk.

    A missing, unreadable or malformed file reads as empty. Failed writes are
    logged and dropped so editing never blocks on the disk.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path).expanduser()

    def _load(self) -> Dict[str, str]:
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as exc:
            telemetry.record_event(
                "storage.read_failed",
                level="warning",
                data={"path": str(self.path), "error": str(exc)},
            )
            return {}
        if not isinstance(raw, dict):
            return {}
        return {str(k): v for k, v in raw.items() if isinstance(v, str)}

    def get(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        values = self._load()
        values[key] = value
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(values, indent=2), encoding="utf-8")
        except OSError as exc:
            telemetry.record_event(
                "storage.write_failed",
                level="warning",
                data={"path": str(self.path), "key": key, "error": str(exc)},
            )


__all__ = ["Storage", "MemoryStorage", "JsonFileStorage"]
