from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

from app.sale.stages import Boundary, Stage


class SignedRequest(BaseModel):
    """Base for bodies of signed admin requests."""
    issued_at: int = Field(..., description="Unix seconds when the request was signed")
    nonce: str = Field(..., min_length=1, max_length=64, description="Single-use value chosen by the signer")


class StageDateUpdateRequest(SignedRequest):
    value: int = Field(..., ge=0, description="New boundary timestamp (unix seconds)")


class AllocationRequest(SignedRequest):
    recipient: str = Field(..., description="Beneficiary public key")
    quantity: int = Field(..., description="Token amount in smallest units")
    value: int = Field(0, ge=0, description="Informational payment value")


class TransferOwnershipRequest(SignedRequest):
    new_owner: str = Field(..., description="Public key of the new owner")


class StageResponse(BaseModel):
    stage: Stage
    name: str
    price: int
    hard_cap: int
    sold: int
    discount: int
    start_date: int
    end_date: int


class SaleStatusResponse(BaseModel):
    """Current stage values, all from one resolution of the clock."""
    now: int
    stage: Stage
    name: str
    price: int
    hard_cap: int
    sold: int
    discount: int
    sale_active: bool
    sale_over: bool
    owner: str
    token_address: str


class StageListResponse(BaseModel):
    stages: list[StageResponse]


class StageDateUpdateResponse(BaseModel):
    stage: Stage
    boundary: Boundary
    start_date: int
    end_date: int


class AllocationResponse(BaseModel):
    stage: Stage
    purchaser: str
    beneficiary: str
    value: int
    amount: int
    sold: int
    hard_cap: int


class AllocationRecordResponse(BaseModel):
    stage: str
    purchaser: str
    beneficiary: str
    value: int
    amount: int
    sold_after: int
    created_at: datetime


class OwnershipResponse(BaseModel):
    previous_owner: str
    owner: str


class TerminateResponse(BaseModel):
    sale_over: bool
    terminated_at: int


class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str
    detail: Optional[str] = None
    reason: Optional[str] = None
