"""Orchestration events - Event, EventMetadata."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class EventMetadata:
    """Metadata for an event."""

    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    source: str = "freshcart"
    timestamp: datetime = field(default_factory=datetime.utcnow)


@dataclass
class Event:
    """Message travelling through the bus, addressed by topic name."""

    name: str
    payload: dict[str, object]
    metadata: EventMetadata = field(default_factory=EventMetadata)
