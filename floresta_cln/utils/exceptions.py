"""
Exception hierarchy and error handling utilities for floresta-cln.

Provides:
- Bridge exception classes with error codes
- Error categorization (validation, retryable, fatal, ...)
- Safe error message formatting (no credential leak to the host or logs)
"""

from __future__ import annotations

import asyncio
import json
import re
from enum import Enum
from typing import Any

import httpx


class ErrorCategory(Enum):
    """Error categories for classification."""
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    RETRYABLE = "retryable"
    TIMEOUT = "timeout"
    FATAL = "fatal"


class BridgeError(Exception):
    """Base exception for all floresta-cln errors."""

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        category: ErrorCategory = ErrorCategory.FATAL,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.code,
            "message": self.message,
            "category": self.category.value,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class BadRequestError(BridgeError):
    """A host-supplied parameter is missing or invalid."""

    def __init__(self, message: str, field: str | None = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="BAD_REQUEST", category=ErrorCategory.VALIDATION, details=details)


class MethodNotFoundError(BridgeError):
    """The host asked for a method this plugin does not register."""

    def __init__(self, method: str):
        super().__init__(
            f"unknown method: {method}",
            code="METHOD_NOT_FOUND",
            category=ErrorCategory.NOT_FOUND,
            details={"method": method},
        )


class TransportError(BridgeError):
    """The backend could not be reached or its body could not be read."""

    def __init__(
        self,
        message: str,
        *,
        method: str | None = None,
        timeout: bool = False,
    ):
        details: dict[str, Any] = {"timeout": timeout}
        if method:
            details["method"] = method
        super().__init__(
            message,
            code="TRANSPORT_ERROR",
            category=ErrorCategory.TIMEOUT if timeout else ErrorCategory.RETRYABLE,
            details=details,
        )


class MalformedResponseError(BridgeError):
    """The backend reply does not parse into the expected shape."""

    def __init__(self, message: str, *, method: str | None = None, backend_error: Any = None):
        details: dict[str, Any] = {}
        if method:
            details["method"] = method
        if backend_error is not None:
            details["backend_error"] = backend_error
        super().__init__(message, code="MALFORMED_RESPONSE", category=ErrorCategory.FATAL, details=details)


class PluginNotReadyError(BridgeError):
    """A method was invoked before lightningd sent `init`."""

    def __init__(self, method: str):
        super().__init__(
            f"plugin is not initialized yet, cannot run {method}",
            code="PLUGIN_NOT_READY",
            category=ErrorCategory.RETRYABLE,
            details={"method": method},
        )


_SENSITIVE_PATTERNS = [
    re.compile(r"(?<=://)[^/\s:@]+:[^/\s@]+@"),
    re.compile(r"(rpcpassword|rpcuser|password|token|secret|auth)[=:]\s*['\"]?([^\s'\"]+)['\"]?", re.IGNORECASE),
    re.compile(r"bearer\s+[a-zA-Z0-9\-._~+/]+=*", re.IGNORECASE),
]


def sanitize_error_message(message: str, replacement: str = "[REDACTED]") -> str:
    """Remove credentials from error messages."""
    sanitized = message
    for pattern in _SENSITIVE_PATTERNS:
        sanitized = pattern.sub(replacement, sanitized)
    return sanitized


def classify_exception(exc: Exception) -> tuple[str, ErrorCategory]:
    """Classify an exception and return (error_code, category)."""
    if isinstance(exc, BridgeError):
        return exc.code, exc.category

    if isinstance(exc, (asyncio.TimeoutError, httpx.TimeoutException)):
        return "TIMEOUT", ErrorCategory.TIMEOUT

    if isinstance(exc, (ConnectionError, httpx.TransportError)):
        return "CONNECTION_ERROR", ErrorCategory.RETRYABLE

    if isinstance(exc, json.JSONDecodeError):
        return "JSON_PARSE_ERROR", ErrorCategory.VALIDATION

    if isinstance(exc, (ValueError, KeyError, TypeError)):
        return "INVALID_VALUE", ErrorCategory.VALIDATION

    return "INTERNAL_ERROR", ErrorCategory.FATAL
