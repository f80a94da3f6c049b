"""
Error taxonomy for Responsive Tester

Every failure surfaced by a service carries an ErrorKind so callers can tell
a bad request from an unavailable upstream, a failed upstream call, or an
unusable completion response, without reading message text.
"""

from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    UPSTREAM_UNAVAILABLE = "upstream_unavailable"
    UPSTREAM_FAILURE = "upstream_failure"
    PARSE_FAILURE = "parse_failure"


class AnalyzerError(Exception):
    """Base class for failures reported to API callers."""

    kind: ErrorKind = ErrorKind.UPSTREAM_FAILURE
    status_code: int = 500

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        body = {
            "success": False,
            "kind": self.kind.value,
            "message": self.message,
        }
        if self.details is not None:
            body["details"] = self.details
        return body


class ValidationFailure(AnalyzerError):
    kind = ErrorKind.VALIDATION
    status_code = 400


class UpstreamUnavailable(AnalyzerError):
    """An external dependency is not configured (e.g. missing API key)."""

    kind = ErrorKind.UPSTREAM_UNAVAILABLE
    status_code = 503


class UpstreamFailure(AnalyzerError):
    """A call to the target site, the browser, or the completion service failed."""

    kind = ErrorKind.UPSTREAM_FAILURE
    status_code = 500


class ScanTimeout(UpstreamFailure):
    """The scanned page never signalled load completion."""

    status_code = 504


class ResponseParseError(AnalyzerError):
    """The completion service answered, but not with the expected JSON shape."""

    kind = ErrorKind.PARSE_FAILURE
    status_code = 500
