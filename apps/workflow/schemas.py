from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, constr
from pydantic.alias_generators import to_camel


Notes = constr(strip_whitespace=True, max_length=2000)


class TransitionRequest(BaseModel):
    """
    Optional reviewer notes for begin-review, request-documents, request-verification,
    resume-review and approve.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    notes: Optional[Notes] = None


class RejectRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    # Emptiness is reported by the service after the transition itself is checked
    reason: Optional[Notes] = None
    notes: Optional[Notes] = None


class StandingRequest(BaseModel):
    """
    Body of suspend / blacklist.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    reason: Optional[Notes] = None


class ApprovalLogOut(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: uuid.UUID
    vendor_registration_id: uuid.UUID
    document_id: Optional[uuid.UUID] = None
    action: str
    performed_by: Optional[str] = None
    notes: Optional[str] = None
    previous_status: Optional[str] = None
    new_status: Optional[str] = None
    created_at: datetime
