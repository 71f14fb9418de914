"""Pydantic models for the Floresta JSON-RPC dialect.

These mirror what florestad returns. They are kept apart from the lightningd
frame types in `floresta_cln.plugin.protocol` so either side can change
without touching the other.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

R = TypeVar("R")


class Envelope(BaseModel, Generic[R]):
    """JSON-RPC 2.0 response envelope with a typed result."""

    model_config = ConfigDict(extra="ignore")

    jsonrpc: str = "2.0"
    error: Any | None = None
    result: R | None = None
    id: int | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None


class TxOut(BaseModel):
    """Unspent transaction output as reported by `gettxout`."""

    model_config = ConfigDict(extra="ignore")

    value: int = Field(ge=0)  # satoshis
    script_pubkey: str


class GetUtxoResult(BaseModel):
    """`gettxout` result; `txout` is absent when the output is spent or unknown."""

    model_config = ConfigDict(extra="ignore")

    txout: TxOut | None = None


class GetBlockchainInfo(BaseModel):
    """`getblockchaininfo` result.

    Only chain, height, validated and ibd reach lightningd; the rest is parsed
    leniently so newer florestad versions do not break decoding.
    """

    model_config = ConfigDict(extra="ignore")

    chain: str
    height: int
    validated: int
    ibd: bool
    best_block: str | None = None
    difficulty: int | None = None
    latest_block_time: int | None = None
    latest_work: str | None = None
    leaf_count: int | None = None
    progress: float | None = None
    root_count: int | None = None
    root_hashes: list[str] = Field(default_factory=list)


# `getblock <hash> 0` answers either with a byte array or a hex string.
RawBlock = list[int] | str
