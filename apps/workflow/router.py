from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from apps.registrations.schemas import RegistrationOut
from apps.workflow.schemas import ApprovalLogOut, RejectRequest, StandingRequest, TransitionRequest
from apps.workflow.service import ApprovalLogService, WorkflowService
from constants.roles import ADMIN, STAFF
from email_services.notifier import RegistrationNotifier, get_notifier
from models.base import get_db
from security.auth_backend import Actor, require_roles

router = APIRouter(prefix="/api/admin/vendor-registrations", tags=["Vendor Approval Workflow"])


def _notes(payload: Optional[TransitionRequest]) -> Optional[str]:
    return payload.notes if payload else None


@router.post("/{registration_id}/begin-review", response_model=RegistrationOut)
async def begin_review(
    registration_id: str,
    payload: Optional[TransitionRequest] = None,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(require_roles(ADMIN, STAFF)),
):
    registration = await WorkflowService.begin_review(db, registration_id, actor.id, _notes(payload))
    return RegistrationOut.model_validate(registration)


@router.post("/{registration_id}/request-documents", response_model=RegistrationOut)
async def request_documents(
    registration_id: str,
    payload: Optional[TransitionRequest] = None,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(require_roles(ADMIN, STAFF)),
):
    registration = await WorkflowService.request_documents(db, registration_id, actor.id, _notes(payload))
    return RegistrationOut.model_validate(registration)


@router.post("/{registration_id}/request-verification", response_model=RegistrationOut)
async def request_verification(
    registration_id: str,
    payload: Optional[TransitionRequest] = None,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(require_roles(ADMIN, STAFF)),
):
    registration = await WorkflowService.request_verification(db, registration_id, actor.id, _notes(payload))
    return RegistrationOut.model_validate(registration)


@router.post("/{registration_id}/resume-review", response_model=RegistrationOut)
async def resume_review(
    registration_id: str,
    payload: Optional[TransitionRequest] = None,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(require_roles(ADMIN, STAFF)),
):
    registration = await WorkflowService.resume_review(db, registration_id, actor.id, _notes(payload))
    return RegistrationOut.model_validate(registration)


# Final decisions are reserved for admins
@router.post("/{registration_id}/approve", response_model=RegistrationOut)
async def approve(
    registration_id: str,
    payload: Optional[TransitionRequest] = None,
    db: AsyncSession = Depends(get_db),
    notifier: RegistrationNotifier = Depends(get_notifier),
    actor: Actor = Depends(require_roles(ADMIN)),
):
    registration = await WorkflowService.approve(db, registration_id, actor.id, _notes(payload), notifier=notifier)
    return RegistrationOut.model_validate(registration)


@router.post("/{registration_id}/reject", response_model=RegistrationOut)
async def reject(
    registration_id: str,
    payload: RejectRequest,
    db: AsyncSession = Depends(get_db),
    notifier: RegistrationNotifier = Depends(get_notifier),
    actor: Actor = Depends(require_roles(ADMIN)),
):
    registration = await WorkflowService.reject(
        db, registration_id, actor.id, payload.reason or "", payload.notes, notifier=notifier
    )
    return RegistrationOut.model_validate(registration)


@router.post("/{registration_id}/suspend", response_model=RegistrationOut)
async def suspend(
    registration_id: str,
    payload: StandingRequest,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(require_roles(ADMIN)),
):
    registration = await WorkflowService.suspend(db, registration_id, actor.id, payload.reason or "")
    return RegistrationOut.model_validate(registration)


@router.post("/{registration_id}/blacklist", response_model=RegistrationOut)
async def blacklist(
    registration_id: str,
    payload: StandingRequest,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(require_roles(ADMIN)),
):
    registration = await WorkflowService.blacklist(db, registration_id, actor.id, payload.reason or "")
    return RegistrationOut.model_validate(registration)


@router.get("/{registration_id}/logs", response_model=List[ApprovalLogOut])
async def list_logs(
    registration_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(require_roles(ADMIN, STAFF)),
):
    logs = await ApprovalLogService.history(db, registration_id)
    return [ApprovalLogOut.model_validate(log) for log in logs]
