from fastapi import APIRouter

from app.api.sale_endpoints.admin import router as admin_router
from app.api.sale_endpoints.allocations import router as allocations_router
from app.api.sale_endpoints.stages import router as stages_router
from app.schemas.sale import ErrorResponse

router = APIRouter(
    prefix="/sale",
    tags=["sale"],
    responses={
        400: {"model": ErrorResponse, "description": "Invalid argument"},
        403: {"model": ErrorResponse, "description": "Caller is not the owner"},
        409: {"model": ErrorResponse, "description": "Sale state does not allow the operation"},
        502: {"model": ErrorResponse, "description": "Token ledger call failed"},
    },
)

router.include_router(stages_router)
router.include_router(allocations_router)
router.include_router(admin_router)
