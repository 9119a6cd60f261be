"""
Notification sinks for ledger events.
Delivery is best-effort: a failing sink never changes the outcome of the
operation that produced the event.
"""

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

ASSET_CREATED = "asset_created"
PURCHASE = "purchase"
SALE = "sale"
TRANSFER = "transfer"


@dataclass
class LedgerEvent:
    """A committed ledger mutation."""
    kind: str  # "asset_created", "purchase", "sale", "transfer"
    asset_id: int
    payload: Dict[str, Any]
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class NotificationSink:
    """Base sink. Subclasses override publish()."""

    def publish(self, event: LedgerEvent) -> None:
        raise NotImplementedError


class LoggingNotificationSink(NotificationSink):
    """Writes every event to the log at INFO."""

    def __init__(self, logger_name: Optional[str] = None):
        self._logger = logging.getLogger(logger_name) if logger_name else logger

    def publish(self, event: LedgerEvent) -> None:
        self._logger.info(f"[{event.kind}] asset={event.asset_id} {event.payload}")


class MemoryNotificationSink(NotificationSink):
    """Keeps events in an append-only list. Used by tests and embedders."""

    def __init__(self):
        self._lock = threading.Lock()
        self._events: List[LedgerEvent] = []

    def publish(self, event: LedgerEvent) -> None:
        with self._lock:
            self._events.append(event)

    @property
    def events(self) -> List[LedgerEvent]:
        with self._lock:
            return list(self._events)

    def of_kind(self, kind: str) -> List[LedgerEvent]:
        return [e for e in self.events if e.kind == kind]


def notify(sink: Optional[NotificationSink], kind: str, asset_id: int, **payload: Any) -> None:
    """
    Publish an event, logging and dropping any sink failure.

    Args:
        sink: Destination sink, or None to skip
        kind: Event kind
        asset_id: Asset the event concerns
        **payload: Event attributes
    """
    if sink is None:
        return
    try:
        sink.publish(LedgerEvent(kind=kind, asset_id=asset_id, payload=payload))
    except Exception as e:
        logger.warning(f"Notification sink failed for {kind} on asset {asset_id}: {e}")
