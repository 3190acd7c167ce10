from __future__ import annotations

from typing import List, Literal, Optional, Union
from pydantic import BaseModel, Field


# ---- Base ----

class BaseEvent(BaseModel):
    event_type: str
    ts: int
    project_id: int
    actor: str
    # Ledger commit order, assigned under the ledger lock; 0 when unassigned
    sequence: int = 0
    tags: List[str] = []


# ---- Event types ----

class ProjectCreated(BaseEvent):
    event_type: Literal["project_created"] = "project_created"
    title: str
    description: str = ""


class DonationRecorded(BaseEvent):
    event_type: Literal["donation_recorded"] = "donation_recorded"
    amount: int = Field(gt=0)
    donor_amount: int = Field(ge=0)
    total_raised: int = Field(ge=0)
    first_donation: bool = False


class DonationRejected(BaseEvent):
    event_type: Literal["donation_rejected"] = "donation_rejected"
    reason: str
    amount: Optional[int] = None


AnyEvent = Union[
    ProjectCreated,
    DonationRecorded,
    DonationRejected,
]


# ---- Envelope ----

class EventEnvelope(BaseModel):
    schema_version: str = "v1"
    correlation_id: str
    sequence: int = 0
    event: AnyEvent = Field(discriminator="event_type")
