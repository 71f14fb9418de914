"""Decoding helpers for Floresta JSON-RPC replies."""

from __future__ import annotations

import json
from typing import Any, TypeVar

from pydantic import TypeAdapter, ValidationError

from floresta_cln.backend.models import Envelope, RawBlock
from floresta_cln.utils.exceptions import MalformedResponseError

R = TypeVar("R")

_ADAPTERS: dict[Any, TypeAdapter[Any]] = {}


def _envelope_adapter(result_type: Any) -> TypeAdapter[Any]:
    adapter = _ADAPTERS.get(result_type)
    if adapter is None:
        adapter = TypeAdapter(Envelope[result_type])  # type: ignore[valid-type]
        _ADAPTERS[result_type] = adapter
    return adapter


def decode_envelope(raw: str | bytes, result_type: type[R] | Any, *, method: str | None = None) -> Envelope[R]:
    """
    Decode a raw response body into ``Envelope[result_type]``.

    Backend errors are not raised; they stay in ``envelope.error`` for the
    caller to inspect.

    Raises:
        MalformedResponseError: body is not JSON or does not match the shape.
    """
    try:
        payload = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise MalformedResponseError(f"backend reply is not valid JSON: {exc}", method=method) from exc
    if not isinstance(payload, dict):
        raise MalformedResponseError("backend reply is not a JSON object", method=method)
    try:
        return _envelope_adapter(result_type).validate_python(payload)
    except ValidationError as exc:
        first = exc.errors()[0] if exc.errors() else {}
        location = ".".join(str(part) for part in first.get("loc", ()))
        detail = first.get("msg", "invalid shape")
        raise MalformedResponseError(
            f"unexpected backend reply shape at {location or '<root>'}: {detail}",
            method=method,
        ) from exc


def describe_backend_error(error: Any) -> str:
    """Render an opaque backend error value as text for lightningd."""
    if isinstance(error, str):
        return error
    if isinstance(error, dict):
        message = error.get("message")
        if isinstance(message, str) and message.strip():
            return message.strip()
    return json.dumps(error, separators=(",", ":"), sort_keys=True)


def decode_block_bytes(result: RawBlock, *, method: str = "getblock") -> bytes:
    """Turn a `getblock` verbosity 0 result into bytes."""
    if isinstance(result, str):
        try:
            return bytes.fromhex(result)
        except ValueError as exc:
            raise MalformedResponseError("block is not valid hex", method=method) from exc
    try:
        return bytes(result)
    except ValueError as exc:
        raise MalformedResponseError("block byte out of range", method=method) from exc
