"""Async JSON-RPC client for florestad."""

from __future__ import annotations

import itertools
import json
import threading
from typing import Any, TypeVar

import httpx
from loguru import logger

from floresta_cln.backend.codec import decode_envelope
from floresta_cln.backend.models import Envelope
from floresta_cln.config.schema import BackendConfig
from floresta_cln.utils.exceptions import MalformedResponseError, TransportError, sanitize_error_message

R = TypeVar("R")


class BackendRpcClient:
    """
    Frames JSON-RPC 2.0 requests and posts them to florestad.

    One instance is shared by every handler for the life of the plugin.
    Request ids come from a lock-guarded counter, so concurrent calls never
    reuse an id and each reply can be matched to its request.
    """

    def __init__(
        self,
        config: BackendConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config or BackendConfig()
        self._ids = itertools.count()
        self._id_lock = threading.Lock()
        self._client = httpx.AsyncClient(
            timeout=self.config.timeout_seconds,
            headers={"User-Agent": self.config.user_agent},
            transport=transport,
        )

    @property
    def url(self) -> str:
        return self.config.url

    def next_request_id(self) -> int:
        with self._id_lock:
            return next(self._ids)

    def build_request(self, method: str, params: list[Any], request_id: int) -> dict[str, Any]:
        """Build the request envelope; params are always positional."""
        return {"jsonrpc": "2.0", "id": request_id, "method": method, "params": list(params)}

    async def call(self, method: str, params: list[Any] | None = None) -> str:
        """
        Send one request and return the raw response body.

        Raises:
            TransportError: request could not be sent, timed out, or the body
                could not be read.
        """
        body, _ = await self._post(method, params or [])
        return body

    async def call_envelope(
        self,
        method: str,
        params: list[Any] | None,
        result_type: type[R] | Any,
    ) -> Envelope[R]:
        """Call and decode in one step, checking the reply id against the request id."""
        body, request_id = await self._post(method, params or [])
        envelope = decode_envelope(body, result_type, method=method)
        if envelope.id is not None and envelope.id != request_id:
            raise MalformedResponseError(
                f"reply id {envelope.id} does not match request id {request_id}",
                method=method,
            )
        return envelope

    async def _post(self, method: str, params: list[Any]) -> tuple[str, int]:
        request_id = self.next_request_id()
        payload = self.build_request(method, params, request_id)
        logger.debug("florestad -> {} id={} params={}", method, request_id, params)
        try:
            resp = await self._client.post(
                self.config.url,
                content=json.dumps(payload),
                headers={"Content-Type": "application/json"},
            )
            body = resp.text
        except httpx.TimeoutException as exc:
            raise TransportError(
                f"florestad timed out after {self.config.timeout_seconds}s on {method}",
                method=method,
                timeout=True,
            ) from exc
        except httpx.HTTPError as exc:
            raise TransportError(
                sanitize_error_message(f"florestad unreachable on {method}: {exc}"),
                method=method,
            ) from exc
        except UnicodeDecodeError as exc:
            raise TransportError(f"unreadable florestad reply on {method}", method=method) from exc
        if resp.status_code >= 400:
            logger.debug("florestad <- {} id={} HTTP {}", method, request_id, resp.status_code)
        if not body:
            raise TransportError(
                f"empty florestad reply on {method} (HTTP {resp.status_code})",
                method=method,
            )
        return body, request_id

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "BackendRpcClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
