"""Shared test fixtures for all test modules."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from pod_failure_operator.config import CONFIG_PATH_ENV, ENV_VARS, OperatorConfig


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> Iterator[pytest.MonkeyPatch]:
    """Unset every operator environment variable and point the config file at an empty dir."""
    for env_var in ENV_VARS.values():
        monkeypatch.delenv(env_var, raising=False)
    monkeypatch.setenv(CONFIG_PATH_ENV, str(tmp_path / "operator.yaml"))
    yield monkeypatch


@pytest.fixture
def operator_config(clean_env: pytest.MonkeyPatch) -> OperatorConfig:
    """Default configuration with short timings suitable for tests."""
    return OperatorConfig(
        workers=2,
        watch_timeout_seconds=1,
        watch_retry_seconds=0.01,
        requeue_base_delay=0.01,
        requeue_max_delay=0.1,
    )
