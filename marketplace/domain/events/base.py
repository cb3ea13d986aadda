import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict

from django.db import transaction
from django.utils import timezone


logger = logging.getLogger(__name__)


@dataclass
class DomainEvent:
    """Base class for all domain events."""

    event_type: str
    occurred_at: datetime = field(default_factory=timezone.now)
    payload: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"event_type": self.event_type, "occurred_at": self.occurred_at.isoformat(), "payload": self.payload}


def publish_on_commit(event_bus, event: DomainEvent) -> None:
    """
    Publish ``event`` once the surrounding transaction commits.

    Outside a transaction the event is published immediately. A rolled back
    transaction publishes nothing.
    """

    def _publish():
        event_bus.publish(event.event_type, event.payload)
        logger.info(f"Published event: {event.to_dict()}")

    transaction.on_commit(_publish)
