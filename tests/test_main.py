"""Tests for the operator entry point."""

from __future__ import annotations

import asyncio
import signal
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import structlog

from pod_failure_operator.config import OperatorConfig
from pod_failure_operator.controller.manager import PodManager
from pod_failure_operator.main import build_manager, configure_logging, main, run


@pytest.fixture(autouse=True)
def _reset_structlog():
    yield
    structlog.reset_defaults()


class TestConfigureLogging:
    def test_json_renderer(self) -> None:
        configure_logging("json")
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)
        assert structlog.contextvars.merge_contextvars in processors

    def test_console_renderer(self) -> None:
        configure_logging("console")
        assert isinstance(structlog.get_config()["processors"][-1], structlog.dev.ConsoleRenderer)

    def test_auto_uses_json_when_not_a_tty(self) -> None:
        with patch("pod_failure_operator.main.sys.stderr") as mock_stderr:
            mock_stderr.isatty.return_value = False
            configure_logging("auto")
        assert isinstance(structlog.get_config()["processors"][-1], structlog.processors.JSONRenderer)


class TestBuildManager:
    def test_wires_manager(self, operator_config: OperatorConfig) -> None:
        with patch("pod_failure_operator.main.K8sPodClient") as mock_client_cls:
            manager = build_manager(operator_config)
        assert isinstance(manager, PodManager)
        mock_client_cls.assert_called_once_with(operator_config.kubeconfig_context)


class TestMain:
    def test_loads_config_and_runs(self, operator_config: OperatorConfig) -> None:
        with (
            patch("pod_failure_operator.main.load_operator_config", return_value=operator_config),
            patch("pod_failure_operator.main.configure_logging") as mock_configure,
            patch("pod_failure_operator.main.run", new_callable=MagicMock) as mock_run,
            patch("pod_failure_operator.main.asyncio.run") as mock_asyncio_run,
        ):
            main()
        mock_configure.assert_called_once_with(operator_config.log_format)
        mock_run.assert_called_once_with(operator_config)
        mock_asyncio_run.assert_called_once_with(mock_run.return_value)

    def test_invalid_config_fails_before_running(self) -> None:
        with (
            patch("pod_failure_operator.main.load_operator_config", side_effect=ValueError("Invalid workers")),
            patch("pod_failure_operator.main.asyncio.run") as mock_asyncio_run,
        ):
            with pytest.raises(ValueError, match="Invalid workers"):
                main()
        mock_asyncio_run.assert_not_called()


class TestRun:
    async def test_run_registers_signal_handlers_and_runs_manager(self, operator_config: OperatorConfig) -> None:
        manager = MagicMock()
        manager.run = AsyncMock()
        loop = asyncio.get_running_loop()
        with (
            patch("pod_failure_operator.main.build_manager", return_value=manager),
            patch.object(loop, "add_signal_handler") as mock_add_handler,
        ):
            await run(operator_config)

        registered = {c.args[0] for c in mock_add_handler.call_args_list}
        assert registered == {signal.SIGINT, signal.SIGTERM}
        assert all(c.args[1] is manager.stop for c in mock_add_handler.call_args_list)
        manager.run.assert_awaited_once()
