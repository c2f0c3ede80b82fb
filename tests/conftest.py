import logging
from typing import Any, Dict, List, Optional

import pytest
from typer.testing import CliRunner
from unittest.mock import MagicMock

from bingads.domain.errors import StructuredFault
from bingads.domain.interfaces.transport import RpcTransport
from bingads.infrastructure.config import settings


@pytest.fixture(scope="session")
def runner():
    """Provides a Typer CliRunner instance."""
    return CliRunner()


@pytest.fixture
def transport():
    """A mock transport; set ``invoke.side_effect`` / ``return_value`` per test."""
    return MagicMock(spec=RpcTransport)


@pytest.fixture
def sleeps() -> List[float]:
    return []


@pytest.fixture
def fake_sleep(sleeps):
    """Records requested waits instead of blocking."""
    def _sleep(seconds: float) -> None:
        sleeps.append(seconds)
    return _sleep


@pytest.fixture
def fake_async_sleep(sleeps):
    async def _sleep(seconds: float) -> None:
        sleeps.append(seconds)
    return _sleep


@pytest.fixture
def make_fault():
    """Builds a StructuredFault shaped like a parsed Bing Ads SOAP fault."""
    def _make(
        error_code: Optional[str] = None,
        operation_error_code: Optional[str] = None,
        detail_key: str = "ad_api_fault_detail",
        extra: Optional[Dict[str, Any]] = None,
    ) -> StructuredFault:
        payload: Dict[str, Any] = {"tracking_id": "5f0a2c3e-tracking"}
        if error_code:
            payload["errors"] = {
                "ad_api_error": {"code": "117", "error_code": error_code, "message": "Call failed."}
            }
        if operation_error_code:
            payload["operation_errors"] = {
                "operation_error": {"code": "4204", "error_code": operation_error_code}
            }
        payload.update(extra or {})
        fault = {
            "faultcode": "s:Server",
            "faultstring": "Invalid client data. Check the SOAP fault details for more information.",
            "detail": {detail_key: payload},
        }
        return StructuredFault(fault["faultstring"], fault)
    return _make


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Keeps the module-level configuration store clean between tests."""
    monkeypatch.setattr(settings, "_config", {})
    monkeypatch.setattr(settings, "_loaded", True)
    for key in ("environment", "retry_attempts", "authentication_token", "endpoints.file"):
        monkeypatch.delenv(settings.env_var_name(key), raising=False)
    yield
    settings.clear_test_config()


@pytest.fixture(autouse=True)
def restore_root_logging():
    """The CLI reconfigures the root logger; undo that after each test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
