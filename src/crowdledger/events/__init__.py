"""Domain events emitted after ledger commands commit."""

from .schema import DonationRecorded, DonationRejected, EventEnvelope, ProjectCreated
from .bus import EventBus

__all__ = ["DonationRecorded", "DonationRejected", "EventBus", "EventEnvelope", "ProjectCreated"]
