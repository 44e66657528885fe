from app.sale.crowdsale import AllocationReceipt, Crowdsale, StageSnapshot
from app.sale.events import EventLog, OwnershipTransferred, TokensPurchased
from app.sale.stages import ACTIVE_STAGES, Boundary, Stage, StageConfig, StageDetails

__all__ = [
    "ACTIVE_STAGES",
    "AllocationReceipt",
    "Boundary",
    "Crowdsale",
    "EventLog",
    "OwnershipTransferred",
    "Stage",
    "StageConfig",
    "StageDetails",
    "StageSnapshot",
    "TokensPurchased",
]
