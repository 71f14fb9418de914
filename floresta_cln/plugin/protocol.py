"""lightningd-facing JSON-RPC frame models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

JSONRPC_VERSION = "2.0"

# JSON-RPC 2.0 error codes used towards lightningd.
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

RequestId = int | str


@dataclass(slots=True)
class HostError:
    """Error object returned to lightningd."""

    code: int
    message: str
    data: dict[str, Any] | None = None


@dataclass(slots=True)
class HostRequest:
    """Request (or notification when `id` is None) received from lightningd."""

    method: str
    params: dict[str, Any] | list[Any] = field(default_factory=dict)
    id: RequestId | None = None

    @property
    def is_notification(self) -> bool:
        return self.id is None


@dataclass(slots=True)
class HostResponse:
    """Response frame sent back to lightningd."""

    id: RequestId | None
    result: Any = None
    error: HostError | None = None


@dataclass(slots=True)
class HostNotification:
    """Notification sent to lightningd (e.g. `log`)."""

    method: str
    params: dict[str, Any]
