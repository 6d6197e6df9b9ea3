"""
Error kinds raised by the dashboard core.

  CredentialError        no usable API key — raised before any backend call
  BackendError           transport / auth / quota failure from the completion call
  MalformedPayloadError  isolated JSON failed to parse, or had the wrong shape
  EmptyResultWarning     not an exception — emitted via warnings.warn when
                         extraction produced zero usable records
"""
from __future__ import annotations

from typing import Literal, Optional

ATTEMPTED_TEXT_LIMIT = 100

PayloadFailure = Literal["no_payload", "invalid_json", "wrong_shape"]


class DashboardError(Exception):
    """Base class for every error the core raises."""


class CredentialError(DashboardError):
    """No usable Gemini API key is configured."""

    def __init__(self, message: str = "Gemini API key is missing or invalid. Set a key and try again."):
        super().__init__(message)


class BackendError(DashboardError):
    """The completion call failed. Carries the backend's own detail verbatim."""


class MalformedPayloadError(DashboardError):
    def __init__(
        self,
        message: str,
        attempted: str = "",
        reason: PayloadFailure = "invalid_json",
        cause: Optional[BaseException] = None,
    ):
        self.attempted = attempted[:ATTEMPTED_TEXT_LIMIT]
        self.reason = reason
        self.cause = cause
        detail = f"{message} (attempted: '{self.attempted}...')" if attempted else message
        super().__init__(detail)


class EmptyResultWarning(UserWarning):
    """Extraction produced no usable records — partial AI output, not a fault."""
