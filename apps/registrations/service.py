import logging
from typing import Any, Dict, Optional

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from apps.catalog.service import get_catalog
from apps.registrations.schemas import RegistrationFields
from apps.registrations.validation import (
    collect_format_issues,
    collect_submission_issues,
    normalize_fields,
    raise_for_issues,
)
from apps.workflow.service import IdLike, WorkflowService, utcnow
from common.errors import ImmutableStateError
from constants.statuses import DRAFT, EDITABLE_STATUSES
from models.vendor_registration import VendorRegistration

logger = logging.getLogger(__name__)

# Columns the applicant may write through create/update
EDITABLE_FIELDS = frozenset(RegistrationFields.model_fields.keys())
_LIST_FIELDS = ("categories", "service_cities", "service_states")
_FLAG_FIELDS = (
    "pan_india_service",
    "has_no_pending_litigation",
    "has_never_blacklisted",
    "has_liability_insurance",
    "has_fire_safety_certificate",
    "has_pollution_certificate",
    "agrees_to_terms",
    "agrees_to_nda",
)


def _snapshot(registration: VendorRegistration) -> Dict[str, Any]:
    return {field: getattr(registration, field) for field in EDITABLE_FIELDS}


class RegistrationService:
    @staticmethod
    async def create_draft(db: AsyncSession, payload: RegistrationFields) -> VendorRegistration:
        """
        Persist a new (possibly incomplete) application in `draft`.
        Only format checks apply; completeness is enforced by submit().
        """
        data = normalize_fields(payload.model_dump(exclude_unset=True))
        data = {k: v for k, v in data.items() if v is not None}
        raise_for_issues(collect_format_issues(data, get_catalog()))

        registration = VendorRegistration(status=DRAFT, **data)
        for list_field in _LIST_FIELDS:
            if getattr(registration, list_field) is None:
                setattr(registration, list_field, [])
        db.add(registration)
        try:
            await db.commit()
        except SQLAlchemyError:
            await db.rollback()
            raise
        await db.refresh(registration)
        logger.info("Created draft registration %s", registration.id)
        return registration

    @staticmethod
    async def get(db: AsyncSession, registration_id: IdLike) -> VendorRegistration:
        return await WorkflowService.load_registration(db, registration_id)

    @staticmethod
    async def update_draft(db: AsyncSession, registration_id: IdLike, payload: RegistrationFields) -> VendorRegistration:
        """
        Merge a client snapshot into an editable registration. Last write wins.
        """
        registration = await WorkflowService.load_registration(db, registration_id)
        if registration.status not in EDITABLE_STATUSES:
            raise ImmutableStateError(
                f"Registration can no longer be edited (status '{registration.status}').",
                {"currentStatus": registration.status},
            )

        changes = normalize_fields(payload.model_dump(exclude_unset=True))
        for field in changes:
            if changes[field] is None and field in _LIST_FIELDS:
                changes[field] = []
            elif changes[field] is None and field in _FLAG_FIELDS:
                changes[field] = False
        merged = {**_snapshot(registration), **changes}
        if registration.status == DRAFT:
            raise_for_issues(collect_format_issues(merged, get_catalog()))
        else:
            # Already submitted once; every edit must keep it submittable
            raise_for_issues(collect_submission_issues(merged, get_catalog()), "Registration is incomplete")

        # Guard on the status we checked so an edit cannot land after review has started
        stmt = (
            update(VendorRegistration)
            .where(VendorRegistration.id == registration.id, VendorRegistration.status == registration.status)
            .values(**changes, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        try:
            res = await db.execute(stmt)
            if res.rowcount != 1:
                await db.rollback()
                raise ImmutableStateError("Registration changed while it was being edited; reload and retry.")
            await db.commit()
        except SQLAlchemyError:
            await db.rollback()
            raise
        await db.refresh(registration)
        return registration

    @staticmethod
    async def submit(db: AsyncSession, registration_id: IdLike, actor_id: Optional[str] = None) -> VendorRegistration:
        """
        draft -> submitted, once every mandatory field is present and well-formed.
        """
        registration = await WorkflowService.load_registration(db, registration_id)
        WorkflowService.ensure_allowed(registration, "submit")
        raise_for_issues(
            collect_submission_issues(_snapshot(registration), get_catalog()),
            "Registration is incomplete",
        )
        return await WorkflowService.apply(
            db,
            registration,
            "submit",
            actor_id,
            notes="Registration submitted for review",
            changes={"submitted_at": utcnow()},
        )
