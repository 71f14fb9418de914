"""Handlers for the methods lightningd calls on a Bitcoin backend plugin.

Each handler maps lightningd params to one or two florestad calls and shapes
the reply the way lightningd expects it. Backend-side "nothing found" is a
normal answer with null fields, never an exception.
"""

from __future__ import annotations

from typing import Any, Protocol, TypeVar

from loguru import logger

from floresta_cln.backend.codec import decode_block_bytes, describe_backend_error
from floresta_cln.backend.models import Envelope, GetBlockchainInfo, GetUtxoResult, RawBlock
from floresta_cln.utils.exceptions import BadRequestError, MalformedResponseError

R = TypeVar("R")

# Placeholder fee table in sats/KWU: florestad has no mempool to estimate from.
FEERATE_FLOOR = 1_000
FEERATE_TARGETS = (2, 6, 12, 100)

# `getblock` verbosity returning the serialized block.
RAW_BLOCK_VERBOSITY = 0


class BackendCaller(Protocol):
    async def call_envelope(self, method: str, params: list[Any] | None, result_type: Any) -> Envelope[Any]: ...


def _require(params: dict[str, Any], name: str) -> Any:
    value = params.get(name)
    if value is None:
        raise BadRequestError(f"missing required parameter: {name}", field=name)
    return value


def _require_str(params: dict[str, Any], name: str) -> str:
    value = _require(params, name)
    if not isinstance(value, str) or not value.strip():
        raise BadRequestError(f"{name} must be a non-empty string", field=name)
    return value.strip()


def _require_uint(params: dict[str, Any], name: str) -> int:
    value = _require(params, name)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise BadRequestError(f"{name} must be a non-negative integer", field=name)
    return value


async def get_chain_info(client: BackendCaller, params: dict[str, Any]) -> dict[str, Any]:
    """Return chain name, header/block counts and IBD state."""
    envelope = await client.call_envelope("getblockchaininfo", [], GetBlockchainInfo)
    info = envelope.result
    if info is None:
        raise MalformedResponseError(
            "florestad returned no chain info",
            method="getblockchaininfo",
            backend_error=envelope.error,
        )
    return {
        "chain": info.chain,
        "headercount": info.height,
        "blockcount": info.validated,
        "ibd": info.ibd,
    }


async def send_raw_transaction(client: BackendCaller, params: dict[str, Any]) -> dict[str, Any]:
    """Broadcast a hex transaction; rejection is reported in the result, not raised."""
    tx = _require_str(params, "tx")
    envelope = await client.call_envelope("sendrawtransaction", [tx], str)
    if envelope.error is not None:
        errmsg = describe_backend_error(envelope.error)
        logger.info("florestad rejected transaction: {}", errmsg)
        return {"success": False, "errmsg": errmsg}
    return {"success": True, "errmsg": None}


async def get_utxout(client: BackendCaller, params: dict[str, Any]) -> dict[str, Any]:
    """Return amount and script of an unspent output, nulls when spent or unknown."""
    txid = _require_str(params, "txid")
    vout = _require_uint(params, "vout")
    envelope = await client.call_envelope("gettxout", [txid, vout], GetUtxoResult)
    if envelope.result is None or envelope.result.txout is None:
        return {"amount": None, "script": None}
    txout = envelope.result.txout
    return {"amount": txout.value, "script": txout.script_pubkey}


async def estimate_fees(client: BackendCaller, params: dict[str, Any]) -> dict[str, Any]:
    """Fixed fee table; no backend call is made."""
    return {
        "feerate_floor": FEERATE_FLOOR,
        "feerates": [{"blocks": blocks, "feerate": FEERATE_FLOOR} for blocks in FEERATE_TARGETS],
    }


async def get_raw_block_by_height(client: BackendCaller, params: dict[str, Any]) -> dict[str, Any]:
    """Resolve height -> hash -> raw block; any miss yields nulls."""
    height = _require_uint(params, "height")
    missing = {"blockhash": None, "block": None}

    hash_envelope = await client.call_envelope("getblockhash", [height], str)
    block_hash = hash_envelope.result
    if not block_hash:
        logger.debug("no block hash for height {}", height)
        return missing

    block_envelope = await client.call_envelope("getblock", [block_hash, RAW_BLOCK_VERBOSITY], RawBlock)
    if not block_envelope.result:
        logger.debug("florestad has no block {} at height {}", block_hash, height)
        return missing

    block = decode_block_bytes(block_envelope.result)
    return {"blockhash": block_hash, "block": block.hex()}
