"""Pytest fixtures: an in-process fake florestad behind httpx.MockTransport."""

from __future__ import annotations

import json
import sys
from typing import Any, Callable, Iterator

import httpx
import pytest
from loguru import logger

from floresta_cln.backend.client import BackendRpcClient
from floresta_cln.config.schema import BackendConfig

Reply = dict[str, Any] | Callable[[dict[str, Any]], dict[str, Any]]


class FakeFloresta:
    """Answers JSON-RPC posts per method and records every request payload."""

    def __init__(self) -> None:
        self.replies: dict[str, Reply] = {}
        self.requests: list[dict[str, Any]] = []

    def on(self, method: str, *, result: Any = None, error: Any = None) -> None:
        body: dict[str, Any] = {"result": result}
        if error is not None:
            body = {"error": error, "result": None}
        self.replies[method] = body

    def on_call(self, method: str, reply: Callable[[dict[str, Any]], dict[str, Any]]) -> None:
        self.replies[method] = reply

    def methods_called(self) -> list[str]:
        return [payload["method"] for payload in self.requests]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        self.requests.append(payload)
        reply = self.replies.get(payload["method"])
        if reply is None:
            body: dict[str, Any] = {"error": {"code": -32601, "message": "Method not found"}}
        elif callable(reply):
            body = reply(payload)
        else:
            body = dict(reply)
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": payload["id"], **body})


@pytest.fixture
def floresta() -> FakeFloresta:
    return FakeFloresta()


@pytest.fixture
def make_client() -> Callable[..., BackendRpcClient]:
    def _make(handler: Any, **backend: Any) -> BackendRpcClient:
        return BackendRpcClient(BackendConfig(**backend), transport=httpx.MockTransport(handler))

    return _make


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Keep tests away from the user's ~/.floresta-cln and FLORESTA_CLN_* env."""
    monkeypatch.setenv("FLORESTA_CLN_CONFIG", str(tmp_path / "missing-config.json"))
    monkeypatch.delenv("FLORESTA_CLN_BACKEND__URL", raising=False)
    monkeypatch.delenv("FLORESTA_CLN_BACKEND__TIMEOUT_SECONDS", raising=False)


@pytest.fixture(autouse=True)
def _restore_loguru() -> Iterator[None]:
    """CLI commands reconfigure loguru; put the default stderr sink back."""
    yield
    logger.remove()
    logger.add(sys.stderr)
