import logging
from collections import Counter
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import String, and_, asc, cast, desc, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from apps.documents.service import DocumentService
from apps.workflow.service import IdLike, as_uuid
from common.errors import NotFoundError, ValidationError
from common.pagination import paginate_select
from constants.statuses import DRAFT, REGISTRATION_STATUS_VALUES
from models.vendor_document import VendorDocument
from models.vendor_registration import VendorRegistration

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = {
    "createdAt": VendorRegistration.created_at,
    "updatedAt": VendorRegistration.updated_at,
    "submittedAt": VendorRegistration.submitted_at,
    "businessName": VendorRegistration.business_name,
    "status": VendorRegistration.status,
}

_SEARCH_COLUMNS = (
    VendorRegistration.business_name,
    VendorRegistration.brand_name,
    VendorRegistration.contact_person_name,
    VendorRegistration.contact_email,
    VendorRegistration.contact_phone,
)


@dataclass
class RegistrationFilters:
    """
    Reusable filter/sort/paging parameters for the review queue.
    """
    status: Optional[str] = None
    category: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    search: Optional[str] = None
    created_from: Optional[date] = None
    created_to: Optional[date] = None
    sort_by: str = "createdAt"
    sort_order: str = "desc"
    page: int = 1
    size: int = 20


def _like_literal(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _day_start(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def _conditions(filters: RegistrationFilters) -> List[Any]:
    # Drafts belong to the applicant until they are submitted
    conditions: List[Any] = [VendorRegistration.status != DRAFT]

    if filters.status:
        conditions.append(VendorRegistration.status == filters.status)
    if filters.category:
        # categories is a JSON list of slugs; match the quoted slug in its text form
        conditions.append(
            or_(
                VendorRegistration.primary_category == filters.category,
                cast(VendorRegistration.categories, String).like(
                    f'%"{_like_literal(filters.category)}"%', escape="\\"
                ),
            )
        )
    if filters.city:
        city = filters.city.strip().lower()
        conditions.append(
            or_(
                func.lower(VendorRegistration.registered_city) == city,
                func.lower(VendorRegistration.operational_city) == city,
            )
        )
    if filters.state:
        state = filters.state.strip().lower()
        conditions.append(
            or_(
                func.lower(VendorRegistration.registered_state) == state,
                func.lower(VendorRegistration.operational_state) == state,
            )
        )
    if filters.search:
        pattern = f"%{_like_literal(filters.search.strip())}%"
        conditions.append(or_(*[column.ilike(pattern, escape="\\") for column in _SEARCH_COLUMNS]))
    if filters.created_from:
        conditions.append(VendorRegistration.created_at >= _day_start(filters.created_from))
    if filters.created_to:
        conditions.append(VendorRegistration.created_at < _day_start(filters.created_to + timedelta(days=1)))
    return conditions


def _check_filters(filters: RegistrationFilters) -> None:
    issues: List[Tuple[str, str]] = []
    if filters.status and filters.status not in REGISTRATION_STATUS_VALUES:
        issues.append(("status", f"Unknown status: {filters.status}"))
    if filters.sort_by not in SORTABLE_FIELDS:
        issues.append(("sortBy", f"Cannot sort by {filters.sort_by}"))
    if filters.sort_order.lower() not in ("asc", "desc"):
        issues.append(("sortOrder", "Sort order must be 'asc' or 'desc'"))
    if filters.created_from and filters.created_to and filters.created_from > filters.created_to:
        issues.append(("createdFrom", "Start date must not be after end date"))
    if issues:
        raise ValidationError(issues, "Invalid filters")


class ReviewService:
    """
    Read-only views of submitted registrations for the admin review queue.
    """

    @staticmethod
    async def list_registrations(
        db: AsyncSession, filters: RegistrationFilters
    ) -> Tuple[List[VendorRegistration], Dict[str, int]]:
        _check_filters(filters)
        where = and_(*_conditions(filters))

        column = SORTABLE_FIELDS[filters.sort_by]
        direction = desc if filters.sort_order.lower() == "desc" else asc
        base_stmt = select(VendorRegistration).where(where).order_by(direction(column), VendorRegistration.id)
        count_stmt = select(func.count()).select_from(VendorRegistration).where(where)
        return await paginate_select(db, base_stmt, count_stmt, filters.page, filters.size)

    @staticmethod
    async def get_registration_detail(
        db: AsyncSession, registration_id: IdLike
    ) -> Tuple[VendorRegistration, List[VendorDocument]]:
        stmt = select(VendorRegistration).where(
            VendorRegistration.id == as_uuid(registration_id),
            VendorRegistration.status != DRAFT,
        )
        res = await db.execute(stmt)
        registration = res.scalar_one_or_none()
        if not registration:
            raise NotFoundError("Registration not found.")
        documents = await DocumentService.list_documents(db, registration.id)
        return registration, documents

    @staticmethod
    async def stats(db: AsyncSession) -> Dict[str, Any]:
        """
        Totals over submitted (non-draft) registrations, by status and by category.
        """
        status_stmt = (
            select(VendorRegistration.status, func.count())
            .where(VendorRegistration.status != DRAFT)
            .group_by(VendorRegistration.status)
        )
        res = await db.execute(status_stmt)
        by_status = {status: 0 for status in REGISTRATION_STATUS_VALUES if status != DRAFT}
        for status, count in res.all():
            by_status[status] = int(count)

        category_res = await db.execute(
            select(VendorRegistration.categories).where(VendorRegistration.status != DRAFT)
        )
        by_category: Counter = Counter()
        for (categories,) in category_res.all():
            by_category.update(set(categories or []))

        return {
            "total": sum(by_status.values()),
            "by_status": by_status,
            "by_category": dict(sorted(by_category.items())),
        }
