"""Environment-driven settings for the studio."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

ENV_PREFIX = "NORMA_STUDIO_"

DEFAULT_HISTORY_LIMIT = 500
DEFAULT_DELAY_MS = 10
DEFAULT_RUN_BATCH = 10_000
DEFAULT_STORAGE_PATH = "~/.norma_studio.json"
DEFAULT_CODE_KEY = "norma_studio.userCode"
DEFAULT_HISTORY_KEY = "norma_studio.userCodeHist"


def _env_int(env: Mapping[str, str], key: str, fallback: int) -> int:
    value = env.get(f"{ENV_PREFIX}{key}")
    if value is None:
        return fallback
    try:
        parsed = int(value)
    except ValueError:
        return fallback
    return parsed if parsed >= 0 else fallback


@dataclass(slots=True)
class StudioConfig:
    history_limit: int = DEFAULT_HISTORY_LIMIT
    default_delay_ms: int = DEFAULT_DELAY_MS
    run_batch: int = DEFAULT_RUN_BATCH
    storage_path: str = DEFAULT_STORAGE_PATH
    code_key: str = DEFAULT_CODE_KEY
    history_key: str = DEFAULT_HISTORY_KEY
    input_value: str = "0"

    def __post_init__(self) -> None:
        if self.history_limit < 1:
            raise ValueError("history_limit must be at least 1")
        if self.default_delay_ms < 0:
            raise ValueError("default_delay_ms cannot be negative")
        if self.run_batch < 1:
            raise ValueError("run_batch must be at least 1")

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "StudioConfig":
        """Build a config from ``NORMA_STUDIO_*`` variables.

        Unparsable or negative numbers fall back to the defaults.
        """

        source = os.environ if env is None else env
        return cls(
            history_limit=max(1, _env_int(source, "HISTORY_LIMIT", DEFAULT_HISTORY_LIMIT)),
            default_delay_ms=_env_int(source, "DELAY_MS", DEFAULT_DELAY_MS),
            run_batch=max(1, _env_int(source, "RUN_BATCH", DEFAULT_RUN_BATCH)),
            storage_path=source.get(f"{ENV_PREFIX}STORAGE", DEFAULT_STORAGE_PATH),
            code_key=source.get(f"{ENV_PREFIX}CODE_KEY", DEFAULT_CODE_KEY),
            history_key=source.get(f"{ENV_PREFIX}HISTORY_KEY", DEFAULT_HISTORY_KEY),
            input_value=source.get(f"{ENV_PREFIX}INPUT", "0"),
        )


__all__ = ["StudioConfig", "ENV_PREFIX"]
