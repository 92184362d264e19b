"""Operator configuration with YAML file and environment variable overrides."""

from __future__ import annotations

import os
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from pod_failure_operator.validation import validate_log_format, validate_namespace, validate_positive

CONFIG_PATH_ENV = "POD_FAILURE_OPERATOR_CONFIG"
DEFAULT_CONFIG_PATH = "operator.yaml"

# Config field -> environment variable that overrides it.
ENV_VARS = {
    "kubeconfig_context": "POD_FAILURE_OPERATOR_KUBE_CONTEXT",
    "watch_namespace": "POD_FAILURE_OPERATOR_WATCH_NAMESPACE",
    "workers": "POD_FAILURE_OPERATOR_WORKERS",
    "watch_timeout_seconds": "POD_FAILURE_OPERATOR_WATCH_TIMEOUT_SECONDS",
    "watch_retry_seconds": "POD_FAILURE_OPERATOR_WATCH_RETRY_SECONDS",
    "requeue_base_delay": "POD_FAILURE_OPERATOR_REQUEUE_BASE_DELAY",
    "requeue_max_delay": "POD_FAILURE_OPERATOR_REQUEUE_MAX_DELAY",
    "log_format": "POD_FAILURE_OPERATOR_LOG_FORMAT",
}


def _optional_str(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def _int_value(value: Any) -> int:
    if isinstance(value, bool):
        msg = f"expected an integer, got {value!r}"
        raise TypeError(msg)
    if isinstance(value, float) and not value.is_integer():
        msg = f"expected an integer, got {value!r}"
        raise ValueError(msg)
    return int(value)


def _float_value(value: Any) -> float:
    if isinstance(value, bool):
        msg = f"expected a number, got {value!r}"
        raise TypeError(msg)
    return float(value)


_CONVERTERS: dict[str, Callable[[Any], Any]] = {
    "kubeconfig_context": _optional_str,
    "watch_namespace": _optional_str,
    "workers": _int_value,
    "watch_timeout_seconds": _int_value,
    "watch_retry_seconds": _float_value,
    "requeue_base_delay": _float_value,
    "requeue_max_delay": _float_value,
    "log_format": str,
}


@dataclass(frozen=True)
class OperatorConfig:
    """Runtime settings for the pod failure operator.

    Each field defaults to its environment variable (see ENV_VARS) and falls back
    to a built-in default when the variable is unset.
    """

    # None means in-cluster service account, or the current kubeconfig context.
    kubeconfig_context: str | None = field(
        default_factory=lambda: _optional_str(os.environ.get(ENV_VARS["kubeconfig_context"]))
    )
    # None watches every namespace.
    watch_namespace: str | None = field(
        default_factory=lambda: _optional_str(os.environ.get(ENV_VARS["watch_namespace"]))
    )
    workers: int = field(default_factory=lambda: int(os.environ.get(ENV_VARS["workers"], "4")))
    watch_timeout_seconds: int = field(
        default_factory=lambda: int(os.environ.get(ENV_VARS["watch_timeout_seconds"], "300"))
    )
    watch_retry_seconds: float = field(
        default_factory=lambda: float(os.environ.get(ENV_VARS["watch_retry_seconds"], "5"))
    )
    requeue_base_delay: float = field(
        default_factory=lambda: float(os.environ.get(ENV_VARS["requeue_base_delay"], "0.005"))
    )
    requeue_max_delay: float = field(
        default_factory=lambda: float(os.environ.get(ENV_VARS["requeue_max_delay"], "300"))
    )
    log_format: str = field(default_factory=lambda: os.environ.get(ENV_VARS["log_format"], "auto"))


def _load_config_file(path: Path) -> dict[str, Any]:
    """Parse a YAML operator configuration file into typed field values.

    Args:
        path: Path to the YAML configuration file.

    Returns:
        A dict of field name to converted value. Empty when the file does not exist.

    Raises:
        ValueError: If the file is not a mapping, names unknown settings, or holds
            values that cannot be converted.
    """
    if not path.exists():
        return {}

    raw = yaml.safe_load(path.read_text())
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        msg = f"Operator config file {path} must contain a mapping, got {type(raw).__name__}."
        raise ValueError(msg)

    unknown = sorted(str(key) for key in raw if key not in _CONVERTERS)
    if unknown:
        msg = f"Operator config file {path} has unknown settings: {', '.join(unknown)}."
        raise ValueError(msg)

    values: dict[str, Any] = {}
    for key, value in raw.items():
        try:
            values[key] = _CONVERTERS[key](value)
        except (TypeError, ValueError) as e:
            msg = f"Operator config file {path} has an invalid value for {key!r}: {value!r}."
            raise ValueError(msg) from e
    return values


def load_operator_config() -> OperatorConfig:
    """Build and validate the operator configuration.

    Reads the YAML file named by ``POD_FAILURE_OPERATOR_CONFIG`` (default
    ``operator.yaml`` in the working directory) when it exists. A setting whose
    environment variable is set keeps the environment value; the file only fills
    in the rest.
    """
    path = Path(os.environ.get(CONFIG_PATH_ENV, DEFAULT_CONFIG_PATH))
    file_values = _load_config_file(path)
    overrides = {key: value for key, value in file_values.items() if ENV_VARS[key] not in os.environ}
    config = OperatorConfig(**overrides)
    validate_operator_config(config)
    return config


def validate_operator_config(config: OperatorConfig) -> None:
    """Validate setting ranges.

    Raises ValueError naming the first invalid setting.
    """
    validate_namespace(config.watch_namespace)
    validate_log_format(config.log_format)
    validate_positive("workers", config.workers)
    validate_positive("watch_timeout_seconds", config.watch_timeout_seconds)
    validate_positive("watch_retry_seconds", config.watch_retry_seconds)
    validate_positive("requeue_base_delay", config.requeue_base_delay)
    validate_positive("requeue_max_delay", config.requeue_max_delay)
    if config.requeue_max_delay < config.requeue_base_delay:
        msg = (
            f"Invalid requeue_max_delay: {config.requeue_max_delay!r}. "
            f"Must not be less than requeue_base_delay ({config.requeue_base_delay!r})."
        )
        raise ValueError(msg)
