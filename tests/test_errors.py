"""Tests for the error taxonomy and settings defaults."""

from config import Settings
from errors import (
    ErrorKind,
    ResponseParseError,
    ScanTimeout,
    UpstreamFailure,
    UpstreamUnavailable,
    ValidationFailure,
)


def test_error_payload():
    error = UpstreamFailure("Failed to fetch page content", details="connection refused")
    assert error.to_dict() == {
        "success": False,
        "kind": "upstream_failure",
        "message": "Failed to fetch page content",
        "details": "connection refused",
    }


def test_details_omitted_when_absent():
    assert "details" not in ValidationFailure("URL is required").to_dict()


def test_status_codes_and_kinds():
    assert (ValidationFailure.status_code, ValidationFailure.kind) == (400, ErrorKind.VALIDATION)
    assert (UpstreamUnavailable.status_code, UpstreamUnavailable.kind) == (503, ErrorKind.UPSTREAM_UNAVAILABLE)
    assert (ScanTimeout.status_code, ScanTimeout.kind) == (504, ErrorKind.UPSTREAM_FAILURE)
    assert (ResponseParseError.status_code, ResponseParseError.kind) == (500, ErrorKind.PARSE_FAILURE)


def test_settings_defaults(monkeypatch):
    monkeypatch.delenv("ANTHROPIC_MODEL", raising=False)
    monkeypatch.delenv("SCAN_LOAD_TIMEOUT", raising=False)
    settings = Settings(_env_file=None)
    assert settings.SCAN_LOAD_TIMEOUT == 10
    assert settings.ANALYSIS_MAX_TOKENS == 500
    assert settings.CSS_FIX_MAX_TOKENS == 1000


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("BROWSER_POOL_SIZE", "5")
    assert Settings(_env_file=None).BROWSER_POOL_SIZE == 5
