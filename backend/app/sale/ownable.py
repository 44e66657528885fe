"""Single-owner access control."""

import logging
from typing import Optional

from app.core.constants import NULL_ADDRESS, is_null_address
from app.core.errors import InvalidArgument, Unauthorized
from app.sale.events import EventLog, OwnershipTransferred

logger = logging.getLogger(__name__)


class Ownable:
    """
    Holds the owner identity and gates privileged calls.

    After ``renounce_ownership`` the owner is the null identity and no caller
    can pass ``require_owner`` again.
    """

    def __init__(self, owner: str, events: Optional[EventLog] = None):
        if is_null_address(owner):
            raise InvalidArgument("Owner must not be the null address")
        self._owner = owner
        self._events = events if events is not None else EventLog()
        self._events.emit(OwnershipTransferred(previous=NULL_ADDRESS, next=owner))

    @property
    def owner(self) -> str:
        return self._owner

    def is_owner(self, caller: Optional[str]) -> bool:
        return not is_null_address(self._owner) and caller == self._owner

    def require_owner(self, caller: Optional[str]) -> None:
        if not self.is_owner(caller):
            raise Unauthorized()

    def transfer_ownership(self, caller: str, new_owner: str) -> None:
        self.require_owner(caller)
        if is_null_address(new_owner):
            raise InvalidArgument("New owner must not be the null address")
        self._set_owner(new_owner)

    def renounce_ownership(self, caller: str) -> None:
        self.require_owner(caller)
        self._set_owner(NULL_ADDRESS)

    def _set_owner(self, new_owner: str) -> None:
        previous = self._owner
        self._owner = new_owner
        logger.info(f"ownership transferred: {previous} -> {new_owner}")
        self._events.emit(OwnershipTransferred(previous=previous, next=new_owner))
