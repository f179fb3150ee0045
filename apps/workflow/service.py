import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, FrozenSet, List, Optional, Protocol, Union

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from common.errors import InvalidTransitionError, NotFoundError, ValidationError
from constants.statuses import (
    ACTION_APPROVED,
    ACTION_REJECTED,
    ACTION_STATUS_CHANGED,
    ACTION_SUBMITTED,
    APPROVED,
    BLACKLISTED,
    DOCUMENTS_PENDING,
    DRAFT,
    REJECTED,
    SUBMITTED,
    SUSPENDED,
    UNDER_REVIEW,
    VERIFICATION_PENDING,
)
from models.vendor_approval_log import VendorApprovalLog
from models.vendor_registration import VendorRegistration

logger = logging.getLogger(__name__)

IdLike = Union[uuid.UUID, str]


@dataclass(frozen=True)
class Transition:
    sources: FrozenSet[str]
    target: str
    action: str


_DECIDABLE = frozenset({SUBMITTED, UNDER_REVIEW, VERIFICATION_PENDING})

# The complete set of legal status changes; anything else is rejected.
TRANSITIONS: Dict[str, Transition] = {
    "submit": Transition(frozenset({DRAFT}), SUBMITTED, ACTION_SUBMITTED),
    "begin_review": Transition(frozenset({SUBMITTED}), UNDER_REVIEW, ACTION_STATUS_CHANGED),
    "request_documents": Transition(frozenset({UNDER_REVIEW}), DOCUMENTS_PENDING, ACTION_STATUS_CHANGED),
    "request_verification": Transition(frozenset({UNDER_REVIEW}), VERIFICATION_PENDING, ACTION_STATUS_CHANGED),
    "resume_review": Transition(frozenset({DOCUMENTS_PENDING}), UNDER_REVIEW, ACTION_STATUS_CHANGED),
    "approve": Transition(_DECIDABLE, APPROVED, ACTION_APPROVED),
    "reject": Transition(_DECIDABLE, REJECTED, ACTION_REJECTED),
    "suspend": Transition(frozenset({APPROVED}), SUSPENDED, ACTION_STATUS_CHANGED),
    "blacklist": Transition(frozenset({APPROVED}), BLACKLISTED, ACTION_STATUS_CHANGED),
}


class Notifier(Protocol):
    def dispatch(self, event: str, registration: VendorRegistration) -> None:
        ...


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_uuid(value: IdLike, what: str = "Registration") -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError) as exc:
        raise NotFoundError(f"{what} not found.") from exc


def require_text(field: str, value: Optional[str], message: str) -> str:
    text = (value or "").strip()
    if not text:
        raise ValidationError([(field, message)])
    return text


class ApprovalLogService:
    @staticmethod
    def record(
        db: AsyncSession,
        registration_id: uuid.UUID,
        action: str,
        performed_by: Optional[str],
        previous_status: Optional[str],
        new_status: Optional[str],
        notes: Optional[str] = None,
        document_id: Optional[uuid.UUID] = None,
    ) -> VendorApprovalLog:
        """
        Stage an audit row in the caller's transaction. The caller commits it together
        with the change it describes.
        """
        log = VendorApprovalLog(
            id=uuid.uuid4(),
            vendor_registration_id=registration_id,
            document_id=document_id,
            action=action,
            performed_by=performed_by,
            notes=notes,
            previous_status=previous_status,
            new_status=new_status,
            created_at=utcnow(),
        )
        db.add(log)
        return log

    @staticmethod
    async def history(db: AsyncSession, registration_id: IdLike) -> List[VendorApprovalLog]:
        reg_id = as_uuid(registration_id)
        await WorkflowService.load_registration(db, reg_id)
        stmt = (
            select(VendorApprovalLog)
            .where(VendorApprovalLog.vendor_registration_id == reg_id)
            .order_by(VendorApprovalLog.created_at.desc(), VendorApprovalLog.id)
        )
        res = await db.execute(stmt)
        return list(res.scalars().all())


class WorkflowService:
    """
    The only writer of VendorRegistration.status.

    Every transition is a status-conditioned UPDATE plus one approval-log INSERT committed
    together. If another writer changed the status since we read it, the UPDATE matches no
    row and the caller gets InvalidTransitionError.
    """

    @staticmethod
    async def load_registration(db: AsyncSession, registration_id: IdLike) -> VendorRegistration:
        stmt = (
            select(VendorRegistration)
            .where(VendorRegistration.id == as_uuid(registration_id))
            .execution_options(populate_existing=True)
        )
        res = await db.execute(stmt)
        registration = res.scalar_one_or_none()
        if not registration:
            raise NotFoundError("Registration not found.")
        return registration

    @staticmethod
    def ensure_allowed(registration: VendorRegistration, operation: str) -> Transition:
        transition = TRANSITIONS[operation]
        if registration.status not in transition.sources:
            raise InvalidTransitionError(
                f"Cannot {operation.replace('_', ' ')} a registration in status '{registration.status}'.",
                current_status=registration.status,
                operation=operation,
            )
        return transition

    @staticmethod
    async def apply(
        db: AsyncSession,
        registration: VendorRegistration,
        operation: str,
        actor_id: Optional[str],
        notes: Optional[str] = None,
        changes: Optional[Dict[str, Any]] = None,
    ) -> VendorRegistration:
        """
        Move `registration` along `operation` and write its log row atomically.
        """
        transition = WorkflowService.ensure_allowed(registration, operation)
        registration_id = registration.id
        previous = registration.status

        values: Dict[str, Any] = dict(changes or {})
        values["status"] = transition.target
        values["updated_at"] = utcnow()

        stmt = (
            update(VendorRegistration)
            .where(VendorRegistration.id == registration_id, VendorRegistration.status == previous)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        try:
            res = await db.execute(stmt)
            if res.rowcount != 1:
                await db.rollback()
                logger.warning(
                    "Lost race on registration %s: %s expected status '%s'", registration_id, operation, previous
                )
                current = await WorkflowService.load_registration(db, registration_id)
                raise InvalidTransitionError(
                    f"Registration changed concurrently; it is now '{current.status}'.",
                    current_status=current.status,
                    operation=operation,
                )
            ApprovalLogService.record(
                db,
                registration_id,
                transition.action,
                actor_id,
                previous,
                transition.target,
                notes,
            )
            await db.commit()
        except SQLAlchemyError:
            await db.rollback()
            logger.exception("Transition %s failed for registration %s; rolled back", operation, registration_id)
            raise

        await db.refresh(registration)
        logger.info(
            "Registration %s: %s -> %s (%s by %s)", registration_id, previous, transition.target, operation, actor_id
        )
        return registration

    @staticmethod
    def _notify(notifier: Optional[Notifier], event: str, registration: VendorRegistration) -> None:
        if notifier is None:
            return
        try:
            notifier.dispatch(event, registration)
        except Exception:
            # The transition is already committed; a notification problem must not surface as its failure.
            logger.exception("Could not dispatch %s notification for registration %s", event, registration.id)

    # -------------------------------
    # Admin operations
    # -------------------------------

    @staticmethod
    async def _simple(
        db: AsyncSession, registration_id: IdLike, operation: str, actor_id: str, notes: Optional[str]
    ) -> VendorRegistration:
        registration = await WorkflowService.load_registration(db, registration_id)
        WorkflowService.ensure_allowed(registration, operation)
        actor = require_text("actorId", actor_id, "Actor id is required")
        return await WorkflowService.apply(db, registration, operation, actor, notes)

    @staticmethod
    async def begin_review(
        db: AsyncSession, registration_id: IdLike, actor_id: str, notes: Optional[str] = None
    ) -> VendorRegistration:
        registration = await WorkflowService.load_registration(db, registration_id)
        WorkflowService.ensure_allowed(registration, "begin_review")
        actor = require_text("actorId", actor_id, "Actor id is required")
        changes = {"reviewed_at": utcnow(), "reviewed_by": actor}
        return await WorkflowService.apply(db, registration, "begin_review", actor, notes, changes)

    @staticmethod
    async def request_documents(
        db: AsyncSession, registration_id: IdLike, actor_id: str, notes: Optional[str] = None
    ) -> VendorRegistration:
        return await WorkflowService._simple(db, registration_id, "request_documents", actor_id, notes)

    @staticmethod
    async def request_verification(
        db: AsyncSession, registration_id: IdLike, actor_id: str, notes: Optional[str] = None
    ) -> VendorRegistration:
        return await WorkflowService._simple(db, registration_id, "request_verification", actor_id, notes)

    @staticmethod
    async def resume_review(
        db: AsyncSession, registration_id: IdLike, actor_id: str, notes: Optional[str] = None
    ) -> VendorRegistration:
        return await WorkflowService._simple(db, registration_id, "resume_review", actor_id, notes)

    @staticmethod
    async def approve(
        db: AsyncSession,
        registration_id: IdLike,
        actor_id: str,
        notes: Optional[str] = None,
        notifier: Optional[Notifier] = None,
    ) -> VendorRegistration:
        registration = await WorkflowService.load_registration(db, registration_id)
        WorkflowService.ensure_allowed(registration, "approve")
        actor = require_text("actorId", actor_id, "Actor id is required")
        changes = {
            "approved_at": utcnow(),
            "approved_by": actor,
            "rejection_reason": None,
            "rejection_notes": None,
        }
        if notes:
            changes["internal_notes"] = notes
        registration = await WorkflowService.apply(db, registration, "approve", actor, notes, changes)
        WorkflowService._notify(notifier, APPROVED, registration)
        return registration

    @staticmethod
    async def reject(
        db: AsyncSession,
        registration_id: IdLike,
        actor_id: str,
        reason: str,
        notes: Optional[str] = None,
        notifier: Optional[Notifier] = None,
    ) -> VendorRegistration:
        registration = await WorkflowService.load_registration(db, registration_id)
        WorkflowService.ensure_allowed(registration, "reject")
        actor = require_text("actorId", actor_id, "Actor id is required")
        reason = require_text("reason", reason, "A rejection reason is required")
        changes = {
            "rejection_reason": reason,
            "rejection_notes": notes,
            "reviewed_at": utcnow(),
            "reviewed_by": actor,
        }
        log_notes = f"Reason: {reason}" + (f". {notes}" if notes else "")
        registration = await WorkflowService.apply(db, registration, "reject", actor, log_notes, changes)
        WorkflowService._notify(notifier, REJECTED, registration)
        return registration

    @staticmethod
    async def _downgrade(
        db: AsyncSession, registration_id: IdLike, operation: str, actor_id: str, reason: str
    ) -> VendorRegistration:
        registration = await WorkflowService.load_registration(db, registration_id)
        WorkflowService.ensure_allowed(registration, operation)
        actor = require_text("actorId", actor_id, "Actor id is required")
        reason = require_text("reason", reason, "A reason is required")
        # approved_at / approved_by only describe a currently approved vendor
        changes = {"standing_reason": reason, "approved_at": None, "approved_by": None}
        return await WorkflowService.apply(db, registration, operation, actor, reason, changes)

    @staticmethod
    async def suspend(db: AsyncSession, registration_id: IdLike, actor_id: str, reason: str) -> VendorRegistration:
        return await WorkflowService._downgrade(db, registration_id, "suspend", actor_id, reason)

    @staticmethod
    async def blacklist(db: AsyncSession, registration_id: IdLike, actor_id: str, reason: str) -> VendorRegistration:
        return await WorkflowService._downgrade(db, registration_id, "blacklist", actor_id, reason)
