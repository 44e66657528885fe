"""Persist sale events to the audit tables."""

import logging
from typing import List, Optional

from app.models.sale import AllocationRecord, OwnershipRecord
from app.sale.crowdsale import AllocationReceipt
from app.sale.events import OwnershipTransferred

logger = logging.getLogger(__name__)


async def record_allocation(receipt: AllocationReceipt) -> None:
    event = receipt.event
    await AllocationRecord.create(
        stage=receipt.stage.name,
        purchaser=event.purchaser,
        beneficiary=event.beneficiary,
        value=str(event.value),
        amount=str(event.amount),
        sold_after=str(receipt.sold),
    )


async def record_ownership_change(event: OwnershipTransferred) -> None:
    await OwnershipRecord.create(previous_owner=event.previous, new_owner=event.next)


async def list_allocations(beneficiary: Optional[str] = None, limit: int = 100) -> List[AllocationRecord]:
    query = AllocationRecord.all()
    if beneficiary:
        query = query.filter(beneficiary=beneficiary)
    return await query.limit(limit)
