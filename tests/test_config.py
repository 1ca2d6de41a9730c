from __future__ import annotations

import pytest

from norma_studio.config import StudioConfig


def test_defaults() -> None:
    config = StudioConfig.from_env({})

    assert config.history_limit == 500
    assert config.default_delay_ms == 10
    assert config.run_batch == 10_000
    assert config.code_key == "norma_studio.userCode"
    assert config.history_key == "norma_studio.userCodeHist"
    assert config.input_value == "0"


def test_environment_overrides() -> None:
    config = StudioConfig.from_env(
        {
            "NORMA_STUDIO_HISTORY_LIMIT": "20",
            "NORMA_STUDIO_DELAY_MS": "0",
            "NORMA_STUDIO_RUN_BATCH": "50",
            "NORMA_STUDIO_STORAGE": "/tmp/code.json",
            "NORMA_STUDIO_INPUT": "7",
        }
    )

    assert config.history_limit == 20
    assert config.default_delay_ms == 0
    assert config.run_batch == 50
    assert config.storage_path == "/tmp/code.json"
    assert config.input_value == "7"


def test_bad_numbers_fall_back_to_defaults() -> None:
    config = StudioConfig.from_env(
        {
            "NORMA_STUDIO_HISTORY_LIMIT": "lots",
            "NORMA_STUDIO_DELAY_MS": "-5",
            "NORMA_STUDIO_RUN_BATCH": "0",
        }
    )

    assert config.history_limit == 500
    assert config.default_delay_ms == 10
    assert config.run_batch == 1


def test_direct_construction_is_validated() -> None:
    with pytest.raises(ValueError):
        StudioConfig(history_limit=0)
    with pytest.raises(ValueError):
        StudioConfig(default_delay_ms=-1)
