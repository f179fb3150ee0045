from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from apps.registrations.schemas import (
    RegistrationCreated,
    RegistrationDraftCreate,
    RegistrationDraftUpdate,
    RegistrationOut,
)
from apps.registrations.service import RegistrationService
from models.base import get_db


# Public applicant endpoints; the registration id acts as the applicant's handle
router = APIRouter(prefix="/api/vendor-registrations", tags=["Vendor Registrations"])


@router.post("", response_model=RegistrationCreated, status_code=status.HTTP_201_CREATED)
async def create_registration(payload: RegistrationDraftCreate, db: AsyncSession = Depends(get_db)):
    """
    Start a registration. Partial data is fine; it is saved as a draft.
    """
    registration = await RegistrationService.create_draft(db, payload)
    return RegistrationCreated(id=registration.id, status=registration.status)


@router.get("/{registration_id}", response_model=RegistrationOut)
async def get_registration(registration_id: str, db: AsyncSession = Depends(get_db)):
    registration = await RegistrationService.get(db, registration_id)
    return RegistrationOut.model_validate(registration)


@router.put("/{registration_id}", response_model=RegistrationOut)
async def update_registration(
    registration_id: str,
    payload: RegistrationDraftUpdate,
    db: AsyncSession = Depends(get_db),
):
    """
    Autosave: write the fields carried by this snapshot.
    """
    registration = await RegistrationService.update_draft(db, registration_id, payload)
    return RegistrationOut.model_validate(registration)


@router.post("/{registration_id}/submit", response_model=RegistrationOut)
async def submit_registration(registration_id: str, db: AsyncSession = Depends(get_db)):
    registration = await RegistrationService.submit(db, registration_id)
    return RegistrationOut.model_validate(registration)
