import logging

from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool

from app.sale.events import OwnershipTransferred
from app.schemas.sale import (
    OwnershipResponse,
    SignedRequest,
    TerminateResponse,
    TransferOwnershipRequest,
)
from app.services import audit
from app.services.auth import signed_caller

from .common import get_crowdsale

logger = logging.getLogger(__name__)
router = APIRouter()


async def _record_ownership(event: OwnershipTransferred) -> None:
    try:
        await audit.record_ownership_change(event)
    except Exception as e:
        logger.error(f"failed to record ownership change {event}: {e}")


@router.post(
    "/terminate",
    response_model=TerminateResponse,
    summary="End the sale and burn unsold tokens (owner only)",
)
async def terminate_sale(
    body: SignedRequest,
    caller: str = Depends(signed_caller),
) -> TerminateResponse:
    crowdsale = get_crowdsale()
    await run_in_threadpool(crowdsale.terminate, caller)
    return TerminateResponse(sale_over=crowdsale.sale_over, terminated_at=crowdsale.now())


@router.post(
    "/ownership/transfer",
    response_model=OwnershipResponse,
    summary="Transfer sale ownership (owner only)",
)
async def transfer_ownership(
    body: TransferOwnershipRequest,
    caller: str = Depends(signed_caller),
) -> OwnershipResponse:
    crowdsale = get_crowdsale()
    await run_in_threadpool(crowdsale.transfer_ownership, caller, body.new_owner)

    event = OwnershipTransferred(previous=caller, next=crowdsale.owner)
    await _record_ownership(event)
    return OwnershipResponse(previous_owner=caller, owner=crowdsale.owner)


@router.post(
    "/ownership/renounce",
    response_model=OwnershipResponse,
    summary="Renounce sale ownership (owner only)",
)
async def renounce_ownership(
    body: SignedRequest,
    caller: str = Depends(signed_caller),
) -> OwnershipResponse:
    crowdsale = get_crowdsale()
    await run_in_threadpool(crowdsale.renounce_ownership, caller)

    event = OwnershipTransferred(previous=caller, next=crowdsale.owner)
    await _record_ownership(event)
    return OwnershipResponse(previous_owner=caller, owner=crowdsale.owner)
