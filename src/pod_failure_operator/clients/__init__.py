"""Client wrappers for the Kubernetes API."""

from __future__ import annotations

import os

from kubernetes import client as k8s_client
from kubernetes.config import load_incluster_config, new_client_from_config


def load_k8s_api_client(context: str | None = None) -> k8s_client.ApiClient:
    """Create an isolated Kubernetes API client.

    Inside a cluster with no explicit context, the pod's service account is used.
    Otherwise the client is built from the kubeconfig, for the given context or the
    current one. Neither path mutates the global K8s SDK configuration.
    """
    if context is None and os.environ.get("KUBERNETES_SERVICE_HOST"):
        configuration = k8s_client.Configuration()
        load_incluster_config(client_configuration=configuration)
        return k8s_client.ApiClient(configuration)
    return new_client_from_config(context=context)
