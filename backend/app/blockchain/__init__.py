from app.blockchain.base import (
    BlockchainType,
    TokenLedger,
)
from app.blockchain.registry import blockchain_registry

__all__ = [
    "BlockchainType",
    "TokenLedger",
    "blockchain_registry",
]
