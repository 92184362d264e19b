"""Input validation helpers for operator configuration values."""

from __future__ import annotations

import re

# RFC 1123 label: lowercase alphanumeric and hyphens, 1-63 chars, starts/ends with alphanumeric
_NAMESPACE_RE = re.compile(r"^[a-z0-9]([a-z0-9\-]{0,61}[a-z0-9])?$")

_VALID_LOG_FORMATS = {"auto", "json", "console"}


def validate_namespace(namespace: str | None) -> None:
    """Validate a Kubernetes namespace name against RFC 1123."""
    if namespace is None:
        return
    if not _NAMESPACE_RE.match(namespace):
        msg = f"Invalid namespace: {namespace!r}. Must be a valid RFC 1123 label."
        raise ValueError(msg)


def validate_log_format(log_format: str) -> None:
    """Validate the log renderer selection."""
    if log_format not in _VALID_LOG_FORMATS:
        valid = ", ".join(sorted(_VALID_LOG_FORMATS))
        msg = f"Invalid log_format: {log_format!r}. Must be one of: {valid}"
        raise ValueError(msg)


def validate_positive(name: str, value: float) -> None:
    """Validate that a numeric setting is strictly positive."""
    if value <= 0:
        msg = f"Invalid {name}: {value!r}. Must be greater than zero."
        raise ValueError(msg)
