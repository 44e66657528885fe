"""
Token ledger registry.

This module provides a central registry for token ledger implementations.
Ledgers are registered here and can be accessed by type.
"""

import logging
from typing import Dict

from app.blockchain.base import BlockchainType, TokenLedger
from app.core.config import settings

logger = logging.getLogger(__name__)


class BlockchainRegistry:
    """
    Registry for token ledger implementations.

    Usage:
        registry.register(BlockchainType.MEMORY, InMemoryTokenLedger(...))
        ledger = registry.get_token_ledger(BlockchainType.MEMORY)
    """

    def __init__(self):
        self._ledgers: Dict[BlockchainType, TokenLedger] = {}

    def register(self, chain_type: BlockchainType, ledger: TokenLedger) -> None:
        """Register (or replace) the ledger for a chain type."""
        self._ledgers[chain_type] = ledger

    def is_registered(self, chain_type: BlockchainType) -> bool:
        return chain_type in self._ledgers

    def get_token_ledger(self, chain_type: BlockchainType) -> TokenLedger:
        """Get the token ledger for a chain type."""
        if not self.is_registered(chain_type):
            raise ValueError(f"Token ledger {chain_type.value} is not registered")
        return self._ledgers[chain_type]

    def get_supported_chains(self) -> list[BlockchainType]:
        return list(self._ledgers)


# Global registry instance
blockchain_registry = BlockchainRegistry()


def register_chains() -> None:
    """
    Register the token ledger selected by settings.

    Called lazily the first time the sale is built.
    """
    chain_type = BlockchainType(settings.token_chain)
    if blockchain_registry.is_registered(chain_type):
        return

    if chain_type is BlockchainType.SOLANA:
        from app.blockchain.chains.solana import SolanaTokenLedger

        blockchain_registry.register(chain_type, SolanaTokenLedger())
    else:
        from app.blockchain.chains.memory import InMemoryTokenLedger

        blockchain_registry.register(
            chain_type,
            InMemoryTokenLedger(
                address=settings.token_address,
                supply=settings.token_supply,
            ),
        )
    logger.info(f"registered token ledger: {chain_type.value}")
