import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from bingads.main import app

# These fixtures are defined in tests/conftest.py:
# runner: CliRunner
# isolated_settings: clean configuration store (autouse)


@pytest.fixture
def fault_file(tmp_path: Path):
    def _write(fault) -> Path:
        path = tmp_path / "fault.json"
        path.write_text(json.dumps(fault))
        return path
    return _write


def test_endpoint_command_prints_url(runner: CliRunner):
    result = runner.invoke(app, ["endpoint", "reporting", "--environment", "sandbox"])

    assert result.exit_code == 0, result.output
    assert result.output.strip() == (
        "https://reporting.api.sandbox.bingads.microsoft.com/Api/Advertiser/Reporting/v13/"
        "ReportingService.svc?singleWsdl"
    )


def test_endpoint_command_uses_configured_environment(runner: CliRunner, monkeypatch):
    monkeypatch.setenv("BINGADS_ENVIRONMENT", "sandbox")
    result = runner.invoke(app, ["endpoint", "bulk"])
    assert result.exit_code == 0, result.output
    assert "bulk.api.sandbox.bingads" in result.output


def test_endpoint_command_unknown_service(runner: CliRunner):
    result = runner.invoke(app, ["endpoint", "billing"])
    assert result.exit_code == 1
    assert "Unknown service" in result.output


def test_endpoints_file_option(runner: CliRunner, tmp_path: Path):
    catalog = tmp_path / "endpoints.yaml"
    catalog.write_text("production:\n  bulk: http://localhost:9000/Bulk.svc\n")

    result = runner.invoke(app, ["--endpoints-file", str(catalog), "endpoint", "bulk"])

    assert result.exit_code == 0, result.output
    assert result.output.strip() == "http://localhost:9000/Bulk.svc"


def test_services_command_lists_catalog(runner: CliRunner):
    result = runner.invoke(app, ["services", "-e", "production"])

    assert result.exit_code == 0, result.output
    for name in ("ad_insight", "bulk", "campaign_management", "reporting"):
        assert name in result.output


def test_classify_rate_limit(runner: CliRunner, fault_file):
    path = fault_file({"fault": {
        "faultcode": "s:Server",
        "faultstring": "Invalid client data.",
        "detail": {"ad_api_fault_detail": {
            "errors": {"ad_api_error": {"code": "117", "error_code": "CallRateExceeded"}},
        }},
    }})

    result = runner.invoke(app, ["classify", str(path), "--operation", "get_campaigns"])

    assert result.exit_code == 0, result.output
    assert "RateLimited" in result.output
    assert "rate_limited" in result.output
    assert "60-240s" in result.output


def test_classify_expired_token(runner: CliRunner, fault_file):
    path = fault_file({
        "faultcode": "s:Server",
        "detail": {"api_fault_detail": {
            "errors": {"ad_api_error": {"error_code": "AuthenticationTokenExpired"}},
        }},
    })

    result = runner.invoke(app, ["classify", str(path)])

    assert result.exit_code == 0, result.output
    assert "AuthenticationExpired" in result.output
    assert "authentication_expired" in result.output
    assert "Wait range" not in result.output


def test_classify_unrecognized_layout(runner: CliRunner, fault_file):
    path = fault_file({"faultcode": "s:Client", "faultstring": "Bad request"})

    result = runner.invoke(app, ["classify", str(path)])

    assert result.exit_code == 0, result.output
    assert "Unrecognized fault layout" in result.output
