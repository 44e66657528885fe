import logging

from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool

from app.sale.stages import Boundary, Stage
from app.schemas.sale import (
    SaleStatusResponse,
    StageDateUpdateRequest,
    StageDateUpdateResponse,
    StageListResponse,
)
from app.services.auth import signed_caller

from .common import StageSlug, get_crowdsale, stage_response

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get(
    "/status",
    response_model=SaleStatusResponse,
    summary="Get the current stage",
)
async def get_sale_status() -> SaleStatusResponse:
    """Current stage, price, cap, sold and discount from one clock reading."""
    crowdsale = get_crowdsale()
    snap = crowdsale.snapshot()
    return SaleStatusResponse(
        now=snap.now,
        stage=snap.stage,
        name=snap.name,
        price=snap.price,
        hard_cap=snap.hard_cap,
        sold=snap.sold,
        discount=snap.discount,
        sale_active=snap.sale_active,
        sale_over=snap.sale_over,
        owner=crowdsale.owner,
        token_address=crowdsale.token.address,
    )


@router.get(
    "/stages",
    response_model=StageListResponse,
    summary="List all stages",
)
async def list_stages() -> StageListResponse:
    crowdsale = get_crowdsale()
    return StageListResponse(
        stages=[stage_response(stage, crowdsale.stage_details(stage)) for stage in Stage]
    )


@router.put(
    "/stages/{stage}/{boundary}",
    response_model=StageDateUpdateResponse,
    summary="Move a stage boundary (owner only)",
)
async def update_stage_date(
    stage: StageSlug,
    boundary: Boundary,
    body: StageDateUpdateRequest,
    caller: str = Depends(signed_caller),
) -> StageDateUpdateResponse:
    """Move a start or end date that has not been reached yet."""
    crowdsale = get_crowdsale()
    await run_in_threadpool(crowdsale.set_stage_date, caller, stage.stage, boundary, body.value)

    details = crowdsale.stage_details(stage.stage)
    return StageDateUpdateResponse(
        stage=stage.stage,
        boundary=boundary,
        start_date=details.start_date,
        end_date=details.end_date,
    )
