"""Namespace exclusion for platform-reserved namespaces."""

from __future__ import annotations

# Core control-plane namespaces plus the kind local-storage provisioner.
SYSTEM_NAMESPACES = frozenset(
    {
        "kube-system",
        "kube-public",
        "kube-node-lease",
        "local-path-storage",
    }
)


def is_system_namespace(namespace: str) -> bool:
    """Return True if pods in this namespace belong to the platform, not an application."""
    return namespace in SYSTEM_NAMESPACES
