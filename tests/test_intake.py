import uuid

import pytest
from sqlalchemy import func, select

from apps.registrations.schemas import RegistrationDraftCreate, RegistrationDraftUpdate
from apps.registrations.service import RegistrationService
from apps.workflow.service import ApprovalLogService, WorkflowService
from common.errors import ImmutableStateError, InvalidTransitionError, NotFoundError, ValidationError
from conftest import complete_fields, registration_in
from constants.statuses import ACTION_SUBMITTED, DRAFT, SUBMITTED, UNDER_REVIEW
from models.vendor_registration import VendorRegistration


async def _draft(db, **fields):
    return await RegistrationService.create_draft(db, RegistrationDraftCreate(**fields))


class TestCreateDraft:
    async def test_partial_draft_is_saved(self, db):
        registration = await _draft(db, business_name="Acme Events")
        assert registration.status == DRAFT
        assert registration.business_name == "Acme Events"
        assert registration.categories == []
        assert registration.agrees_to_terms is False

    async def test_accepts_camel_case_payload(self, db):
        payload = RegistrationDraftCreate.model_validate({"businessName": "Acme", "contactPhone": "9876543210"})
        registration = await RegistrationService.create_draft(db, payload)
        assert registration.contact_phone == "9876543210"

    async def test_bad_formats_fail_without_writing(self, db):
        with pytest.raises(ValidationError) as exc:
            await _draft(db, pan_number="BAD", contact_email="nope")
        assert set(exc.value.fields) == {"panNumber", "contactEmail"}
        count = (await db.execute(select(func.count()).select_from(VendorRegistration))).scalar_one()
        assert count == 0


class TestUpdateDraft:
    async def test_last_write_wins(self, db):
        registration = await _draft(db, business_name="Acme")
        await RegistrationService.update_draft(db, registration.id, RegistrationDraftUpdate(business_name="Acme 2"))
        updated = await RegistrationService.update_draft(
            db, registration.id, RegistrationDraftUpdate(business_name="Acme 3", categories=["catering"])
        )
        assert updated.business_name == "Acme 3"
        assert updated.categories == ["catering"]

    async def test_unset_fields_are_left_alone(self, db):
        registration = await _draft(db, business_name="Acme", brand_name="Acme Co")
        updated = await RegistrationService.update_draft(db, registration.id, RegistrationDraftUpdate(brand_name="New"))
        assert updated.business_name == "Acme"
        assert updated.brand_name == "New"

    async def test_unknown_id(self, db):
        with pytest.raises(NotFoundError):
            await RegistrationService.update_draft(db, uuid.uuid4(), RegistrationDraftUpdate(business_name="x"))

    async def test_submitted_registration_is_still_editable(self, db):
        registration = await _draft(db, **complete_fields())
        await RegistrationService.submit(db, registration.id)
        updated = await RegistrationService.update_draft(
            db, registration.id, RegistrationDraftUpdate(brand_name="Acme Luxe")
        )
        assert updated.brand_name == "Acme Luxe"
        assert updated.status == SUBMITTED

    async def test_submitted_registration_must_stay_complete(self, db):
        registration = await _draft(db, **complete_fields())
        await RegistrationService.submit(db, registration.id)
        with pytest.raises(ValidationError) as exc:
            await RegistrationService.update_draft(
                db,
                registration.id,
                RegistrationDraftUpdate(business_name="", contact_email=None, categories=[], agrees_to_terms=False),
            )
        assert set(exc.value.fields) == {"businessName", "contactEmail", "categories", "agreesToTerms"}

        reloaded = await RegistrationService.get(db, registration.id)
        assert reloaded.status == SUBMITTED
        assert reloaded.business_name == "Acme Events"
        assert reloaded.contact_email == "asha@acmeevents.in"
        assert reloaded.categories == ["catering"]
        assert reloaded.agrees_to_terms is True

    async def test_documents_pending_edit_keeps_terms_agreed(self, db):
        registration = await registration_in(db, "documents_pending")
        with pytest.raises(ValidationError) as exc:
            await RegistrationService.update_draft(
                db, registration.id, RegistrationDraftUpdate(agrees_to_terms=False)
            )
        assert exc.value.fields == ["agreesToTerms"]
        assert (await RegistrationService.get(db, registration.id)).agrees_to_terms is True

    async def test_draft_may_be_emptied_again(self, db):
        registration = await _draft(db, **complete_fields())
        updated = await RegistrationService.update_draft(
            db, registration.id, RegistrationDraftUpdate(business_name="", agrees_to_terms=False)
        )
        assert updated.business_name is None
        assert updated.agrees_to_terms is False

    async def test_under_review_is_immutable(self, db):
        registration = await _draft(db, **complete_fields())
        await RegistrationService.submit(db, registration.id)
        await WorkflowService.begin_review(db, registration.id, "admin-1")
        with pytest.raises(ImmutableStateError):
            await RegistrationService.update_draft(db, registration.id, RegistrationDraftUpdate(brand_name="x"))
        reloaded = await RegistrationService.get(db, registration.id)
        assert reloaded.status == UNDER_REVIEW
        assert reloaded.brand_name is None


class TestSubmit:
    async def test_incomplete_draft_lists_every_problem(self, db):
        registration = await _draft(db, business_name="Acme")
        with pytest.raises(ValidationError) as exc:
            await RegistrationService.submit(db, registration.id)
        assert set(exc.value.fields) == {
            "entityType",
            "contactPersonName",
            "contactEmail",
            "contactPhone",
            "agreesToTerms",
            "categories",
        }
        reloaded = await RegistrationService.get(db, registration.id)
        assert reloaded.status == DRAFT
        assert await ApprovalLogService.history(db, registration.id) == []

    async def test_submit_stamps_and_logs(self, db):
        registration = await _draft(db, **complete_fields())
        submitted = await RegistrationService.submit(db, registration.id)
        assert submitted.status == SUBMITTED
        assert submitted.submitted_at is not None

        logs = await ApprovalLogService.history(db, registration.id)
        assert len(logs) == 1
        assert logs[0].action == ACTION_SUBMITTED
        assert (logs[0].previous_status, logs[0].new_status) == (DRAFT, SUBMITTED)

    async def test_second_submit_is_an_invalid_transition(self, db):
        registration = await _draft(db, **complete_fields())
        await RegistrationService.submit(db, registration.id)
        with pytest.raises(InvalidTransitionError):
            await RegistrationService.submit(db, registration.id)
        assert len(await ApprovalLogService.history(db, registration.id)) == 1
