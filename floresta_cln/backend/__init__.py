"""Floresta backend: JSON-RPC client, envelope codec and result models."""

from .client import BackendRpcClient
from .codec import decode_block_bytes, decode_envelope, describe_backend_error
from .models import Envelope, GetBlockchainInfo, GetUtxoResult, RawBlock, TxOut

__all__ = [
    "BackendRpcClient",
    "Envelope",
    "GetBlockchainInfo",
    "GetUtxoResult",
    "RawBlock",
    "TxOut",
    "decode_block_bytes",
    "decode_envelope",
    "describe_backend_error",
]
