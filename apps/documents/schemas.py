from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, constr
from pydantic.alias_generators import to_camel


# -------------------------------
# Document schemas
# -------------------------------

class DocumentOut(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: uuid.UUID
    vendor_registration_id: uuid.UUID
    document_type: str
    document_name: str
    document_url: str
    file_size: int
    mime_type: str
    issue_date: Optional[date] = None
    expiry_date: Optional[date] = None
    verification_status: str
    verified_by: Optional[str] = None
    verified_at: Optional[datetime] = None
    verification_notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class DocumentDecision(BaseModel):
    """
    Body of verify / reject. Notes are mandatory for a rejection; the service enforces it.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    notes: Optional[constr(strip_whitespace=True, max_length=2000)] = None


class ExpireDocumentsRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    as_of: Optional[date] = None


class ExpireDocumentsResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    expired: int
    document_ids: List[uuid.UUID]
