"""Centralized error types for the rundap launch bridge.

This module provides a small hierarchy of exceptions for the failures the
bridge can observe (configuration, process spawn, protocol, transport), along
with a helper that turns any of them into a failed DAP response.
"""

from __future__ import annotations

import logging
from typing import Any

logger = logging.getLogger(__name__)


class RunnerError(Exception):
    """Base exception for all rundap errors.

    Subclasses fill ``details`` with structured context so the error can be
    logged or reported without parsing the message.
    """

    def __init__(
        self,
        message: str,
        *,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        self.cause = cause

    def to_dict(self) -> dict[str, Any]:
        """Convert error to a dictionary for DAP response bodies."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message} (caused by: {self.cause!s})"
        return self.message


class ConfigurationError(RunnerError):
    """Raised when a launch or runner configuration is unusable."""

    def __init__(
        self,
        message: str,
        config_key: str | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if config_key:
            details["config_key"] = config_key
        super().__init__(message, error_code="ConfigurationError", details=details, **kwargs)
        self.config_key = config_key


class LaunchError(RunnerError):
    """Raised when the runtime process cannot be spawned."""

    def __init__(
        self,
        message: str,
        *,
        binary: str | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if binary:
            details["binary"] = binary
        super().__init__(message, error_code="LaunchError", details=details, **kwargs)
        self.binary = binary


class ProtocolError(RunnerError):
    """Raised for malformed or out-of-sequence DAP traffic."""

    def __init__(
        self,
        message: str,
        *,
        command: str | None = None,
        sequence: int | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if command:
            details["command"] = command
        if sequence is not None:
            details["sequence"] = sequence
        super().__init__(message, error_code="ProtocolError", details=details, **kwargs)
        self.command = command
        self.sequence = sequence


class TransportError(RunnerError):
    """Raised when the session transport is missing or broken."""

    def __init__(
        self,
        message: str,
        *,
        endpoint: str | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if endpoint:
            details["endpoint"] = endpoint
        super().__init__(message, error_code="TransportError", details=details, **kwargs)
        self.endpoint = endpoint


def create_dap_response(
    error: Exception,
    request_seq: int,
    command: str,
    *,
    context: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Create a failed DAP response for ``error``.

    The ``seq`` field is left at 0; the outbound channel stamps the real
    sequence number when the message is queued.
    """
    if isinstance(error, RunnerError):
        info = error.to_dict()
    else:
        info = {
            "error": error.__class__.__name__,
            "message": str(error),
            "details": {},
        }

    if context:
        logger.error("%s failed: %s (context: %s)", command, error, context)
    else:
        logger.error("%s failed: %s", command, error)

    return {
        "seq": 0,
        "type": "response",
        "request_seq": request_seq,
        "success": False,
        "command": command,
        "message": info.get("message", "Unknown error"),
        "body": {
            "error": info.get("error"),
            "details": info.get("details", {}),
        },
    }
