"""
Events emitted by the sale.

Listeners subscribed to an ``EventLog`` are called synchronously, inside the
operation that produced the event, after its state change has been committed.
A listener that raises is logged and skipped; the operation still succeeds.
The log keeps only the most recent ``max_events`` entries; the audit tables
hold the full history.
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Deque, List, Union

logger = logging.getLogger(__name__)

DEFAULT_MAX_EVENTS = 1000


@dataclass(frozen=True, slots=True)
class OwnershipTransferred:
    previous: str
    next: str


@dataclass(frozen=True, slots=True)
class TokensPurchased:
    purchaser: str
    beneficiary: str
    value: int
    amount: int


SaleEvent = Union[OwnershipTransferred, TokensPurchased]
Listener = Callable[[SaleEvent], None]


@dataclass
class EventLog:
    """Bounded in-process record of emitted events."""
    max_events: int = DEFAULT_MAX_EVENTS
    events: Deque[SaleEvent] = field(init=False)
    _listeners: List[Listener] = field(default_factory=list)

    def __post_init__(self):
        self.events = deque(maxlen=self.max_events)

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def emit(self, event: SaleEvent) -> None:
        self.events.append(event)
        logger.info(f"event: {event}")
        for listener in self._listeners:
            try:
                listener(event)
            except Exception:
                logger.exception(f"event listener {listener!r} failed on {event}")

    def of_type(self, event_type: type) -> List[SaleEvent]:
        return [e for e in self.events if isinstance(e, event_type)]
