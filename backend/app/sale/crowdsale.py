"""
Staged crowdsale.

A ``Crowdsale`` owns one ``SaleState``: the five stage records, the token
ledger and the ``sale_over`` flag. The active stage is never stored; every
call resolves it from the clock. All operations run under one lock, check
every guard before touching state, and either commit all their effects or
none.
"""

import copy
import logging
import threading
import time
from dataclasses import dataclass, replace
from typing import Callable, List, Optional

from app.blockchain.base import TokenLedger
from app.core import safe_math
from app.core.config import settings
from app.core.constants import UINT256_MAX, is_null_address
from app.core.errors import (
    AlreadyOver,
    CapExceeded,
    EditGuard,
    ExternalFailure,
    InvalidArgument,
    InvalidQuantity,
    InvalidRecipient,
    NotOver,
    PreconditionFailed,
    StageNotSellable,
    TooEarly,
)
from app.sale.events import EventLog, TokensPurchased
from app.sale.ownable import Ownable
from app.sale.resolver import resolve
from app.sale.stages import (
    ACTIVE_STAGES,
    Boundary,
    Schedule,
    Stage,
    StageDetails,
    default_schedule,
    validate_schedule,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], int]

# Neighbours checked when a boundary moves
_PREVIOUS_STAGE = {Stage.PRE_SALE: Stage.PRIVATE_SALE, Stage.MAIN_SALE: Stage.PRE_SALE}
_NEXT_STAGE = {Stage.PRIVATE_SALE: Stage.PRE_SALE, Stage.PRE_SALE: Stage.MAIN_SALE}


def system_clock() -> int:
    return int(time.time())


@dataclass
class SaleState:
    token: TokenLedger
    stages: Schedule
    sale_over: bool = False


@dataclass(frozen=True, slots=True)
class StageSnapshot:
    """Every current-stage value, taken from a single resolution."""
    now: int
    stage: Stage
    name: str
    price: int
    hard_cap: int
    sold: int
    discount: int
    sale_active: bool
    sale_over: bool


@dataclass(frozen=True, slots=True)
class AllocationReceipt:
    stage: Stage
    recipient: str
    quantity: int
    sold: int
    event: TokensPurchased


class Crowdsale:
    """Time-gated, multi-stage token sale with a single owner."""

    def __init__(
        self,
        owner: str,
        token: Optional[TokenLedger],
        schedule: Optional[Schedule] = None,
        clock: Optional[Clock] = None,
        events: Optional[EventLog] = None,
    ):
        if is_null_address(owner):
            raise InvalidArgument("Owner must not be the null address")
        if token is None or is_null_address(token.address):
            raise InvalidArgument("Token ledger must have a non-null address")

        if schedule is None:
            schedule = default_schedule(settings)
        else:
            validate_schedule(schedule)
            schedule = copy.deepcopy(schedule)

        self._lock = threading.RLock()
        self._clock = clock or system_clock
        self.events = events if events is not None else EventLog()
        self.ownership = Ownable(owner, self.events)
        self._state = SaleState(token=token, stages=schedule)

    # --- Read-only accessors ---

    @property
    def owner(self) -> str:
        return self.ownership.owner

    @property
    def token(self) -> TokenLedger:
        return self._state.token

    @property
    def sale_over(self) -> bool:
        return self._state.sale_over

    def now(self) -> int:
        return self._clock()

    def snapshot(self) -> StageSnapshot:
        with self._lock:
            now = self.now()
            stage = resolve(self._state.stages, now)
            details = self._state.stages[stage]
            return StageSnapshot(
                now=now,
                stage=stage,
                name=details.name,
                price=details.price,
                hard_cap=details.hard_cap,
                sold=details.sold,
                discount=details.discount,
                sale_active=stage in ACTIVE_STAGES,
                sale_over=self._state.sale_over,
            )

    def current_stage(self) -> Stage:
        with self._lock:
            return resolve(self._state.stages, self.now())

    def current_price(self) -> int:
        return self.snapshot().price

    def current_hard_cap(self) -> int:
        return self.snapshot().hard_cap

    def current_sold(self) -> int:
        return self.snapshot().sold

    def current_discount(self) -> int:
        return self.snapshot().discount

    def current_stage_name(self) -> str:
        return self.snapshot().name

    def sale_active(self) -> bool:
        return self.snapshot().sale_active

    def stage_details(self, stage: Stage) -> StageDetails:
        """Return a copy of one stage record."""
        with self._lock:
            return replace(self._state.stages[stage])

    def stages(self) -> List[StageDetails]:
        with self._lock:
            return [replace(details) for details in self._state.stages.values()]

    def start_date(self, stage: Stage) -> int:
        with self._lock:
            return self._state.stages[stage].start_date

    def end_date(self, stage: Stage) -> int:
        with self._lock:
            return self._state.stages[stage].end_date

    # --- Access control ---

    def transfer_ownership(self, caller: str, new_owner: str) -> None:
        with self._lock:
            self.ownership.transfer_ownership(caller, new_owner)

    def renounce_ownership(self, caller: str) -> None:
        with self._lock:
            self.ownership.renounce_ownership(caller)

    # --- Schedule edits ---

    def set_stage_date(self, caller: str, stage: Stage, boundary: Boundary, value: int) -> None:
        """
        Move one boundary of an active stage.

        Refused once the boundary has passed, when the new value is not in the
        future, or when it would cross the adjacent boundary.
        """
        with self._lock:
            self.ownership.require_owner(caller)
            if stage not in ACTIVE_STAGES:
                raise InvalidArgument(f"{stage.name} has no editable dates")
            if value > UINT256_MAX:
                raise InvalidArgument("Date out of range")

            stages = self._state.stages
            details = stages[stage]
            now = self.now()

            if not now < details.boundary(boundary):
                raise PreconditionFailed(EditGuard.BOUNDARY_PASSED)
            if not now < value:
                raise PreconditionFailed(EditGuard.NOT_IN_FUTURE)

            if boundary is Boundary.START:
                previous = _PREVIOUS_STAGE.get(stage)
                if previous is not None and not value > stages[previous].end_date:
                    raise PreconditionFailed(EditGuard.BEFORE_PREVIOUS_STAGE)
                if not value < details.end_date:
                    raise PreconditionFailed(EditGuard.AFTER_OWN_END)
                old = details.start_date
                details.start_date = value
            else:
                if not value > details.start_date:
                    raise PreconditionFailed(EditGuard.BEFORE_OWN_START)
                following = _NEXT_STAGE.get(stage)
                if following is not None and not value < stages[following].start_date:
                    raise PreconditionFailed(EditGuard.AFTER_NEXT_STAGE)
                old = details.end_date
                details.end_date = value

            logger.info(f"{details.name} {boundary.value} date moved: {old} -> {value}")

    def set_private_sale_start(self, caller: str, value: int) -> None:
        self.set_stage_date(caller, Stage.PRIVATE_SALE, Boundary.START, value)

    def set_private_sale_end(self, caller: str, value: int) -> None:
        self.set_stage_date(caller, Stage.PRIVATE_SALE, Boundary.END, value)

    def set_pre_sale_start(self, caller: str, value: int) -> None:
        self.set_stage_date(caller, Stage.PRE_SALE, Boundary.START, value)

    def set_pre_sale_end(self, caller: str, value: int) -> None:
        self.set_stage_date(caller, Stage.PRE_SALE, Boundary.END, value)

    def set_main_sale_start(self, caller: str, value: int) -> None:
        self.set_stage_date(caller, Stage.MAIN_SALE, Boundary.START, value)

    def set_main_sale_end(self, caller: str, value: int) -> None:
        self.set_stage_date(caller, Stage.MAIN_SALE, Boundary.END, value)

    # --- Allocation ---

    def allocate(self, caller: str, recipient: str, quantity: int, value: int = 0) -> AllocationReceipt:
        """
        Allocate ``quantity`` tokens of the current stage to ``recipient``.

        The ledger transfer happens before ``sold`` is committed, so a failed
        transfer leaves the stage untouched. ``value`` is recorded on the
        event only.
        """
        with self._lock:
            self.ownership.require_owner(caller)
            if self._state.sale_over:
                raise NotOver()

            stage = resolve(self._state.stages, self.now())
            if stage not in ACTIVE_STAGES:
                raise StageNotSellable(f"Stage {self._state.stages[stage].name} does not accept allocations")
            if is_null_address(recipient):
                raise InvalidRecipient()
            if quantity <= 0:
                raise InvalidQuantity()
            if value < 0:
                raise InvalidArgument("Value must not be negative")

            details = self._state.stages[stage]
            new_sold = safe_math.add(details.sold, quantity)
            if new_sold > details.hard_cap:
                raise CapExceeded(
                    f"{details.name}: {quantity} exceeds remaining cap "
                    f"{details.hard_cap - details.sold}"
                )

            if not self._state.token.transfer(recipient, quantity):
                logger.error(f"allocation of {quantity} to {recipient} failed at the token ledger")
                raise ExternalFailure(f"Token transfer to {recipient} failed")

            details.sold = new_sold
            event = TokensPurchased(
                purchaser=caller,
                beneficiary=recipient,
                value=value,
                amount=quantity,
            )
            logger.info(f"{details.name}: allocated {quantity} to {recipient}, sold={new_sold}/{details.hard_cap}")
            self.events.emit(event)
            return AllocationReceipt(
                stage=stage,
                recipient=recipient,
                quantity=quantity,
                sold=new_sold,
                event=event,
            )

    # --- Termination ---

    def terminate(self, caller: str) -> None:
        """End the sale and burn unsold tokens. Succeeds at most once."""
        with self._lock:
            self.ownership.require_owner(caller)
            if self._state.sale_over:
                raise AlreadyOver()
            if resolve(self._state.stages, self.now()) is not Stage.SALE_IS_OVER:
                raise TooEarly()

            if not self._state.token.burn_unsold_tokens():
                logger.error("terminate: burning unsold tokens failed")
                raise ExternalFailure("Burning unsold tokens failed")

            self._state.sale_over = True
            logger.info("sale terminated, unsold tokens burned")
