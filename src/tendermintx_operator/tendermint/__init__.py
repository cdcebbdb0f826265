"""Source chain (Tendermint) access: header source protocol, RPC client, skip rules."""

from .rpc import TendermintRpcClient
from .source import HeaderSource, SignedHeaderInfo, Validator
from .validators import BLOCK_ID_FLAG_COMMIT, is_valid_skip

__all__ = [
    "BLOCK_ID_FLAG_COMMIT",
    "HeaderSource",
    "SignedHeaderInfo",
    "TendermintRpcClient",
    "Validator",
    "is_valid_skip",
]
