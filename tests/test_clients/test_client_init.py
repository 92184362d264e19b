"""Tests for API client construction and lazy API loading."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from pod_failure_operator.clients import load_k8s_api_client
from pod_failure_operator.clients.k8s_pods import K8sPodClient


class TestLoadK8sApiClient:
    def test_kubeconfig_context(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("KUBERNETES_SERVICE_HOST", "10.0.0.1")
        with patch("pod_failure_operator.clients.new_client_from_config") as mock_new:
            result = load_k8s_api_client("kind-dev")
        mock_new.assert_called_once_with(context="kind-dev")
        assert result is mock_new.return_value

    def test_current_context_outside_cluster(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("KUBERNETES_SERVICE_HOST", raising=False)
        with (
            patch("pod_failure_operator.clients.new_client_from_config") as mock_new,
            patch("pod_failure_operator.clients.load_incluster_config") as mock_incluster,
        ):
            load_k8s_api_client()
        mock_new.assert_called_once_with(context=None)
        mock_incluster.assert_not_called()

    def test_in_cluster_uses_private_configuration(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("KUBERNETES_SERVICE_HOST", "10.0.0.1")
        with (
            patch("pod_failure_operator.clients.new_client_from_config") as mock_new,
            patch("pod_failure_operator.clients.load_incluster_config") as mock_incluster,
            patch("pod_failure_operator.clients.k8s_client") as mock_k8s,
        ):
            result = load_k8s_api_client()
        mock_new.assert_not_called()
        configuration = mock_k8s.Configuration.return_value
        mock_incluster.assert_called_once_with(client_configuration=configuration)
        mock_k8s.ApiClient.assert_called_once_with(configuration)
        assert result is mock_k8s.ApiClient.return_value


class TestK8sPodClientInit:
    def test_lazy_api_creation(self) -> None:
        client = K8sPodClient("kind-dev")
        assert client._api is None

    def test_get_api_creates_once(self) -> None:
        client = K8sPodClient("kind-dev")
        with patch("pod_failure_operator.clients.k8s_pods.load_k8s_api_client") as mock_load:
            mock_load.return_value = MagicMock()
            api1 = client._get_api()
            api2 = client._get_api()
        assert api1 is api2
        mock_load.assert_called_once_with("kind-dev")
