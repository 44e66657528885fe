import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.concurrency import run_in_threadpool

from app.schemas.sale import AllocationRecordResponse, AllocationRequest, AllocationResponse
from app.services import audit
from app.services.auth import signed_caller

from .common import get_crowdsale

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post(
    "/allocations",
    response_model=AllocationResponse,
    summary="Allocate tokens in the current stage (owner only)",
)
async def create_allocation(
    body: AllocationRequest,
    caller: str = Depends(signed_caller),
) -> AllocationResponse:
    """Allocate against the current stage's cap and deliver through the token ledger."""
    crowdsale = get_crowdsale()
    receipt = await run_in_threadpool(
        crowdsale.allocate, caller, body.recipient, body.quantity, body.value
    )

    try:
        await audit.record_allocation(receipt)
    except Exception as e:
        # The allocation is committed; only the history row is missing
        logger.error(f"failed to record allocation to {receipt.recipient}: {e}")

    return AllocationResponse(
        stage=receipt.stage,
        purchaser=receipt.event.purchaser,
        beneficiary=receipt.event.beneficiary,
        value=receipt.event.value,
        amount=receipt.event.amount,
        sold=receipt.sold,
        hard_cap=crowdsale.stage_details(receipt.stage).hard_cap,
    )


@router.get(
    "/allocations",
    response_model=list[AllocationRecordResponse],
    summary="List recorded allocations",
)
async def list_allocations(
    beneficiary: Optional[str] = None,
    limit: int = Query(100, ge=1, le=1000),
) -> list[AllocationRecordResponse]:
    records = await audit.list_allocations(beneficiary=beneficiary, limit=limit)
    return [
        AllocationRecordResponse(
            stage=r.stage,
            purchaser=r.purchaser,
            beneficiary=r.beneficiary,
            value=int(r.value),
            amount=int(r.amount),
            sold_after=int(r.sold_after),
            created_at=r.created_at,
        )
        for r in records
    ]
