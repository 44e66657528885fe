from enum import Enum

from app.sale.crowdsale import Crowdsale
from app.sale.stages import Stage, StageDetails
from app.schemas.sale import StageResponse
from app.services.sale import sale_service


class StageSlug(str, Enum):
    """Path names of the stages whose dates can be edited."""
    PRIVATE_SALE = "private_sale"
    PRE_SALE = "pre_sale"
    MAIN_SALE = "main_sale"

    @property
    def stage(self) -> Stage:
        return Stage[self.name]


def get_crowdsale() -> Crowdsale:
    return sale_service.crowdsale


def stage_response(stage: Stage, details: StageDetails) -> StageResponse:
    return StageResponse(
        stage=stage,
        name=details.name,
        price=details.price,
        hard_cap=details.hard_cap,
        sold=details.sold,
        discount=details.discount,
        start_date=details.start_date,
        end_date=details.end_date,
    )
