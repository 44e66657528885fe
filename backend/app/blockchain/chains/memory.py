"""
In-process token ledger.

Balances live in a dict. The sale's vault starts with the whole supply;
transfers debit it and burning retires what is left. Used for local runs and
tests, where no chain is available.
"""

import logging
import threading
from typing import Dict

from app.blockchain.base import BlockchainType, TokenLedger
from app.core.constants import is_null_address

logger = logging.getLogger(__name__)

SALE_VAULT = "sale-vault"


class InMemoryTokenLedger(TokenLedger):
    """Token ledger backed by a dict of balances."""

    def __init__(self, address: str, supply: int, vault: str = SALE_VAULT):
        self._address = address
        self._vault = vault
        self._lock = threading.Lock()
        self.total_supply = supply
        self.balances: Dict[str, int] = {vault: supply}
        self.burned = 0

    @property
    def chain_type(self) -> BlockchainType:
        return BlockchainType.MEMORY

    @property
    def address(self) -> str:
        return self._address

    @property
    def vault(self) -> str:
        return self._vault

    def balance_of(self, owner: str) -> int:
        return self.balances.get(owner, 0)

    def transfer(self, to: str, amount: int) -> bool:
        with self._lock:
            available = self.balance_of(self._vault)
            if is_null_address(to) or amount <= 0 or amount > available:
                logger.warning(
                    f"memory ledger: transfer of {amount} to {to} rejected "
                    f"(vault balance {available})"
                )
                return False
            self.balances[self._vault] = available - amount
            self.balances[to] = self.balance_of(to) + amount
            return True

    def burn_unsold_tokens(self) -> bool:
        with self._lock:
            remaining = self.balance_of(self._vault)
            self.balances[self._vault] = 0
            self.total_supply -= remaining
            self.burned += remaining
            logger.info(f"memory ledger: burned {remaining} unsold tokens")
            return True

    def is_connected(self) -> bool:
        return True
