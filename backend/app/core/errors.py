"""
Sale error hierarchy.

Every guard in the sale raises one of these. Each class carries a stable
``code`` that the API returns to clients.
"""

from enum import Enum
from typing import Optional


class SaleError(Exception):
    """Base class for all sale failures."""

    code = "sale_error"
    default_message = "Sale operation failed"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class Unauthorized(SaleError):
    code = "unauthorized"
    default_message = "Caller is not the owner"


class InvalidArgument(SaleError):
    code = "invalid_argument"
    default_message = "Invalid argument"


class EditGuard(str, Enum):
    """Reasons a stage boundary edit can be refused."""
    BOUNDARY_PASSED = "boundary_passed"
    NOT_IN_FUTURE = "not_in_future"
    BEFORE_PREVIOUS_STAGE = "before_previous_stage"
    AFTER_OWN_END = "after_own_end"
    BEFORE_OWN_START = "before_own_start"
    AFTER_NEXT_STAGE = "after_next_stage"


_EDIT_GUARD_MESSAGES = {
    EditGuard.BOUNDARY_PASSED: "Boundary has already passed",
    EditGuard.NOT_IN_FUTURE: "New value must be in the future",
    EditGuard.BEFORE_PREVIOUS_STAGE: "Start date must be after the previous stage's end date",
    EditGuard.AFTER_OWN_END: "Start date must be before the stage's end date",
    EditGuard.BEFORE_OWN_START: "End date must be after the stage's start date",
    EditGuard.AFTER_NEXT_STAGE: "End date must be before the next stage's start date",
}


class PreconditionFailed(SaleError):
    code = "precondition_failed"

    def __init__(self, reason: EditGuard):
        self.reason = reason
        super().__init__(_EDIT_GUARD_MESSAGES[reason])


class NotOver(SaleError):
    # Raised by allocation once the sale has been terminated
    code = "sale_over"
    default_message = "Sale is over"


class StageNotSellable(SaleError):
    code = "stage_not_sellable"
    default_message = "Current stage does not accept allocations"


class InvalidRecipient(SaleError):
    code = "invalid_recipient"
    default_message = "Recipient must not be the null address"


class InvalidQuantity(SaleError):
    code = "invalid_quantity"
    default_message = "Quantity must be greater than zero"


class CapExceeded(SaleError):
    code = "cap_exceeded"
    default_message = "Allocation exceeds the stage hard cap"


class AlreadyOver(SaleError):
    code = "already_over"
    default_message = "Sale has already been terminated"


class TooEarly(SaleError):
    code = "too_early"
    default_message = "Sale can only be terminated after the main sale has ended"


class ExternalFailure(SaleError):
    code = "external_failure"
    default_message = "Token ledger call failed"


class Overflow(SaleError):
    code = "overflow"
    default_message = "Arithmetic overflow"


class DivideByZero(SaleError):
    code = "divide_by_zero"
    default_message = "Division by zero"
