from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from apps.documents.schemas import DocumentOut
from apps.registrations.schemas import RegistrationOut


class Pagination(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    page: int
    size: int
    total: int
    total_pages: int


class AdminRegistrationOut(RegistrationOut):
    internal_notes: Optional[str] = None


class RegistrationListResponse(BaseModel):
    items: List[AdminRegistrationOut]
    pagination: Pagination


class RegistrationDetailResponse(BaseModel):
    registration: AdminRegistrationOut
    documents: List[DocumentOut]


class RegistrationStats(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total: int
    by_status: Dict[str, int]
    by_category: Dict[str, int]
