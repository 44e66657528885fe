"""
Stage schedule.

The sale runs through five stages in a fixed order. ``Inactive`` and
``SaleIsOver`` carry no economics; the three active stages get their price,
hard cap, discount and time window once, at construction. Only the start and
end dates of the active stages can change afterwards (see ``Crowdsale``).
"""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Dict

from app.core.constants import UINT8_MAX, UINT256_MAX
from app.core.errors import InvalidArgument


class Stage(IntEnum):
    """Sale stages, ordered by time."""
    INACTIVE = 0
    PRIVATE_SALE = 1
    PRE_SALE = 2
    MAIN_SALE = 3
    SALE_IS_OVER = 4


class Boundary(str, Enum):
    START = "start"
    END = "end"


ACTIVE_STAGES = (Stage.PRIVATE_SALE, Stage.PRE_SALE, Stage.MAIN_SALE)

STAGE_NAMES: Dict[Stage, str] = {
    Stage.INACTIVE: "Inactive",
    Stage.PRIVATE_SALE: "Private Sale",
    Stage.PRE_SALE: "Pre-Sale",
    Stage.MAIN_SALE: "Main Sale",
    Stage.SALE_IS_OVER: "Sale Is Over",
}


@dataclass(frozen=True, slots=True)
class StageConfig:
    """Construction-time economics for one active stage."""
    price: int          # per 1000 tokens, reference currency unit
    hard_cap: int       # smallest token units
    discount: int       # percent (u8)
    start_date: int     # unix seconds
    end_date: int       # unix seconds


@dataclass(slots=True)
class StageDetails:
    name: str
    price: int = 0
    hard_cap: int = 0
    discount: int = 0
    start_date: int = 0
    end_date: int = 0
    sold: int = 0

    def boundary(self, which: Boundary) -> int:
        return self.start_date if which is Boundary.START else self.end_date


Schedule = Dict[Stage, StageDetails]


def build_schedule(
    private_sale: StageConfig,
    pre_sale: StageConfig,
    main_sale: StageConfig,
) -> Schedule:
    """Create the five stage records and validate their ordering."""
    schedule: Schedule = {
        Stage.INACTIVE: StageDetails(name=STAGE_NAMES[Stage.INACTIVE]),
        Stage.SALE_IS_OVER: StageDetails(name=STAGE_NAMES[Stage.SALE_IS_OVER]),
    }
    for stage, cfg in (
        (Stage.PRIVATE_SALE, private_sale),
        (Stage.PRE_SALE, pre_sale),
        (Stage.MAIN_SALE, main_sale),
    ):
        schedule[stage] = StageDetails(
            name=STAGE_NAMES[stage],
            price=cfg.price,
            hard_cap=cfg.hard_cap,
            discount=cfg.discount,
            start_date=cfg.start_date,
            end_date=cfg.end_date,
        )
    validate_schedule(schedule)
    return dict(sorted(schedule.items()))


def validate_schedule(schedule: Schedule) -> None:
    """Raise InvalidArgument unless the schedule respects range and ordering rules."""
    for stage in ACTIVE_STAGES:
        details = schedule[stage]
        for field in ("price", "hard_cap", "start_date", "end_date"):
            value = getattr(details, field)
            if value < 0 or value > UINT256_MAX:
                raise InvalidArgument(f"{details.name}: {field} out of range")
        if details.discount < 0 or details.discount > UINT8_MAX:
            raise InvalidArgument(f"{details.name}: discount must fit in a u8")
        if details.sold > details.hard_cap:
            raise InvalidArgument(f"{details.name}: sold exceeds hard cap")
        if details.start_date >= details.end_date:
            raise InvalidArgument(f"{details.name}: start date must be before end date")

    private = schedule[Stage.PRIVATE_SALE]
    pre = schedule[Stage.PRE_SALE]
    main = schedule[Stage.MAIN_SALE]
    if not private.end_date < pre.start_date:
        raise InvalidArgument("Pre-Sale must start after the Private Sale ends")
    if not pre.end_date < main.start_date:
        raise InvalidArgument("Main Sale must start after the Pre-Sale ends")


def default_schedule(settings) -> Schedule:
    """Build the schedule from the deployment settings."""
    return build_schedule(
        StageConfig(
            price=settings.private_sale_price,
            hard_cap=settings.private_sale_cap,
            discount=settings.private_sale_discount,
            start_date=settings.private_sale_start,
            end_date=settings.private_sale_end,
        ),
        StageConfig(
            price=settings.pre_sale_price,
            hard_cap=settings.pre_sale_cap,
            discount=settings.pre_sale_discount,
            start_date=settings.pre_sale_start,
            end_date=settings.pre_sale_end,
        ),
        StageConfig(
            price=settings.main_sale_price,
            hard_cap=settings.main_sale_cap,
            discount=settings.main_sale_discount,
            start_date=settings.main_sale_start,
            end_date=settings.main_sale_end,
        ),
    )
