"""
Abstract base class for the token ledger the sale delivers through.

The sale never moves balances itself. It asks a ``TokenLedger`` to transfer
tokens to a buyer and, once the sale is over, to burn whatever is left.
To add support for a new ledger:
1. Create a new module in app/blockchain/chains/
2. Implement the abstract class defined here
3. Register the implementation in the blockchain registry
"""

from abc import ABC, abstractmethod
from enum import Enum


class BlockchainType(str, Enum):
    """Supported token ledgers."""
    MEMORY = "memory"
    SOLANA = "solana"


class TokenLedger(ABC):
    """
    Token boundary consumed by the sale.

    Both operations are fallible and report failure by returning False;
    the sale turns that into ``ExternalFailure``.
    """

    @property
    @abstractmethod
    def chain_type(self) -> BlockchainType:
        """Return the ledger type."""
        pass

    @property
    @abstractmethod
    def address(self) -> str:
        """Identity of the token (mint or contract address)."""
        pass

    @abstractmethod
    def transfer(self, to: str, amount: int) -> bool:
        """Move ``amount`` smallest units from the sale's holdings to ``to``."""
        pass

    @abstractmethod
    def burn_unsold_tokens(self) -> bool:
        """Retire every token still held by the sale."""
        pass

    @abstractmethod
    def is_connected(self) -> bool:
        """Check if the ledger backend is reachable."""
        pass
