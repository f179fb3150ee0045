from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from apps.documents.schemas import DocumentOut
from apps.review.schemas import (
    AdminRegistrationOut,
    Pagination,
    RegistrationDetailResponse,
    RegistrationListResponse,
    RegistrationStats,
)
from apps.review.service import RegistrationFilters, ReviewService
from constants.roles import ADMIN, STAFF
from models.base import get_db
from security.auth_backend import require_roles

router = APIRouter(
    prefix="/api/admin/vendor-registrations",
    tags=["Vendor Review Queue"],
    dependencies=[Depends(require_roles(ADMIN, STAFF))],
)


@router.get("", response_model=RegistrationListResponse)
async def list_registrations(
    status: Optional[str] = Query(default=None),
    category: Optional[str] = Query(default=None),
    city: Optional[str] = Query(default=None),
    state: Optional[str] = Query(default=None),
    search: Optional[str] = Query(default=None, max_length=200),
    created_from: Optional[date] = Query(default=None, alias="createdFrom"),
    created_to: Optional[date] = Query(default=None, alias="createdTo"),
    sort_by: str = Query(default="createdAt", alias="sortBy"),
    sort_order: str = Query(default="desc", alias="sortOrder"),
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    filters = RegistrationFilters(
        status=status,
        category=category,
        city=city,
        state=state,
        search=search,
        created_from=created_from,
        created_to=created_to,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        size=size,
    )
    items, pagination = await ReviewService.list_registrations(db, filters)
    return RegistrationListResponse(
        items=[AdminRegistrationOut.model_validate(i) for i in items],
        pagination=Pagination(**pagination),
    )


# Declared before /{registration_id} so "stats" is not taken for an id
@router.get("/stats", response_model=RegistrationStats)
async def registration_stats(db: AsyncSession = Depends(get_db)):
    stats = await ReviewService.stats(db)
    return RegistrationStats(**stats)


@router.get("/{registration_id}", response_model=RegistrationDetailResponse)
async def get_registration(registration_id: str, db: AsyncSession = Depends(get_db)):
    registration, documents = await ReviewService.get_registration_detail(db, registration_id)
    return RegistrationDetailResponse(
        registration=AdminRegistrationOut.model_validate(registration),
        documents=[DocumentOut.model_validate(d) for d in documents],
    )
