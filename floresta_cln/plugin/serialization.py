"""Serialization helpers for lightningd frames."""

from __future__ import annotations

import json
from typing import Any

from .protocol import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    JSONRPC_VERSION,
    METHOD_NOT_FOUND,
    HostError,
    HostNotification,
    HostRequest,
    HostResponse,
    RequestId,
)
from floresta_cln.utils.exceptions import (
    BadRequestError,
    BridgeError,
    MethodNotFoundError,
    classify_exception,
    sanitize_error_message,
)


class FrameError(ValueError):
    """Raised when an incoming line is not a usable request frame.

    `request_id` is set when the frame still carried a valid id, so the
    caller can answer it with an invalid-request error.
    """

    def __init__(self, message: str, request_id: RequestId | None = None):
        super().__init__(message)
        self.request_id = request_id


def safe_dict(value: Any) -> dict[str, Any]:
    """Return the value when dict-like, otherwise an empty dict."""
    return value if isinstance(value, dict) else {}


def decode_request_line(line: str) -> HostRequest:
    """Decode one line received from lightningd."""
    try:
        payload = json.loads(line)
    except json.JSONDecodeError as exc:
        raise FrameError(f"invalid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise FrameError("frame is not a JSON object")
    req_id = payload.get("id")
    if req_id is not None and (isinstance(req_id, bool) or not isinstance(req_id, (int, str))):
        raise FrameError("id must be a number or a string")
    method = payload.get("method")
    if not isinstance(method, str) or not method:
        raise FrameError("frame has no method", req_id)
    params = payload.get("params")
    if params is None:
        params = {}
    if not isinstance(params, (dict, list)):
        raise FrameError("params must be an object or an array", req_id)
    return HostRequest(method=method, params=params, id=req_id)


def encode_response(response: HostResponse) -> str:
    """Encode a response frame into one line of JSON."""
    payload: dict[str, Any] = {"jsonrpc": JSONRPC_VERSION, "id": response.id}
    if response.error is not None:
        error: dict[str, Any] = {"code": response.error.code, "message": response.error.message}
        if response.error.data is not None:
            error["data"] = response.error.data
        payload["error"] = error
    else:
        payload["result"] = response.result
    return json.dumps(payload, ensure_ascii=False)


def encode_notification(notification: HostNotification) -> str:
    """Encode a notification frame into one line of JSON."""
    payload = {"jsonrpc": JSONRPC_VERSION, "method": notification.method, "params": notification.params}
    return json.dumps(payload, ensure_ascii=False)


def to_host_error(exc: Exception) -> HostError:
    """Map a handler failure to the error object lightningd receives."""
    if isinstance(exc, BadRequestError):
        return HostError(INVALID_PARAMS, exc.message, {"code": exc.code, **exc.details})
    if isinstance(exc, MethodNotFoundError):
        return HostError(METHOD_NOT_FOUND, exc.message, {"code": exc.code})
    if isinstance(exc, BridgeError):
        return HostError(
            INTERNAL_ERROR,
            sanitize_error_message(exc.message),
            {"code": exc.code, "category": exc.category.value},
        )
    code, category = classify_exception(exc)
    return HostError(
        INTERNAL_ERROR,
        sanitize_error_message(str(exc)) or code,
        {"code": code, "category": category.value},
    )
