"""
Process-wide sale instance.

The sale is built lazily from settings the first time it is needed, using the
token ledger registered for ``settings.token_chain``.
"""

import logging
from typing import Optional

from app.blockchain import BlockchainType, blockchain_registry
from app.blockchain.registry import register_chains
from app.core.config import settings
from app.sale.crowdsale import Crowdsale

logger = logging.getLogger(__name__)


class SaleService:
    """Holds the one ``Crowdsale`` the API and workers operate on."""

    def __init__(self):
        self._crowdsale: Optional[Crowdsale] = None

    @property
    def crowdsale(self) -> Crowdsale:
        if self._crowdsale is None:
            register_chains()
            ledger = blockchain_registry.get_token_ledger(BlockchainType(settings.token_chain))
            self._crowdsale = Crowdsale(owner=settings.owner_address, token=ledger)
            logger.info(
                f"sale initialized: owner={settings.owner_address} "
                f"token={ledger.address} chain={ledger.chain_type.value}"
            )
        return self._crowdsale

    def use(self, crowdsale: Optional[Crowdsale]) -> None:
        """Replace the held sale (None rebuilds from settings on next access)."""
        self._crowdsale = crowdsale


# Singleton instance
sale_service = SaleService()
