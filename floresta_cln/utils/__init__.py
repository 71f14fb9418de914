"""Utility functions for floresta-cln."""

from floresta_cln.utils.exceptions import (
    BridgeError,
    BadRequestError,
    MethodNotFoundError,
    TransportError,
    MalformedResponseError,
    PluginNotReadyError,
    ErrorCategory,
    classify_exception,
    sanitize_error_message,
)

__all__ = [
    "BridgeError",
    "BadRequestError",
    "MethodNotFoundError",
    "TransportError",
    "MalformedResponseError",
    "PluginNotReadyError",
    "ErrorCategory",
    "classify_exception",
    "sanitize_error_message",
]
