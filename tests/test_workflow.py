import asyncio
import itertools
import logging

import pytest
from sqlalchemy.exc import OperationalError

from apps.workflow.service import TRANSITIONS, ApprovalLogService, WorkflowService
from common.errors import InvalidTransitionError, ValidationError
from conftest import ExplodingNotifier, FakeNotifier, registration_in, run
from constants.statuses import (
    ACTION_APPROVED,
    ACTION_REJECTED,
    APPROVED,
    BLACKLISTED,
    DOCUMENTS_PENDING,
    REGISTRATION_STATUS_VALUES,
    REJECTED,
    SUBMITTED,
    SUSPENDED,
    UNDER_REVIEW,
    VERIFICATION_PENDING,
)


@pytest.mark.parametrize(
    "status, operation",
    list(itertools.product(REGISTRATION_STATUS_VALUES, sorted(TRANSITIONS))),
)
async def test_transition_legality(db, status, operation):
    registration = await registration_in(db, status)
    before = len(await ApprovalLogService.history(db, registration.id))
    transition = TRANSITIONS[operation]

    if status in transition.sources:
        result = await run(db, operation, registration.id)
        assert result.status == transition.target
        logs = await ApprovalLogService.history(db, registration.id)
        assert len(logs) == before + 1
        assert (logs[0].previous_status, logs[0].new_status) == (status, transition.target)
    else:
        with pytest.raises(InvalidTransitionError):
            await run(db, operation, registration.id)
        reloaded = await WorkflowService.load_registration(db, registration.id)
        assert reloaded.status == status
        assert len(await ApprovalLogService.history(db, registration.id)) == before


async def test_happy_path_approval(db):
    notifier = FakeNotifier()
    registration = await registration_in(db, "submitted")
    await WorkflowService.begin_review(db, registration.id, "admin-1")
    approved = await WorkflowService.approve(db, registration.id, "admin-1", notifier=notifier)

    assert approved.status == APPROVED
    assert approved.approved_by == "admin-1"
    assert approved.approved_at is not None
    assert approved.rejection_reason is None

    logs = await ApprovalLogService.history(db, registration.id)
    assert [log.action for log in logs][0] == ACTION_APPROVED
    assert [(log.previous_status, log.new_status) for log in reversed(logs)] == [
        ("draft", SUBMITTED),
        (SUBMITTED, UNDER_REVIEW),
        (UNDER_REVIEW, APPROVED),
    ]
    assert notifier.events == [(APPROVED, registration.id)]


async def test_reject_requires_reason(db):
    registration = await registration_in(db, "under_review")
    with pytest.raises(ValidationError) as exc:
        await WorkflowService.reject(db, registration.id, "admin-1", "   ")
    assert exc.value.fields == ["reason"]
    assert (await WorkflowService.load_registration(db, registration.id)).status == UNDER_REVIEW


async def test_reject_records_reason(db):
    notifier = FakeNotifier()
    registration = await registration_in(db, "verification_pending")
    rejected = await WorkflowService.reject(
        db, registration.id, "admin-2", "GST mismatch", notes="Re-apply with correct GSTIN", notifier=notifier
    )
    assert rejected.status == REJECTED
    assert rejected.rejection_reason == "GST mismatch"
    assert rejected.reviewed_by == "admin-2"

    latest = (await ApprovalLogService.history(db, registration.id))[0]
    assert latest.action == ACTION_REJECTED
    assert "GST mismatch" in latest.notes
    assert notifier.events == [(REJECTED, registration.id)]


async def test_legality_is_checked_before_reason(db):
    registration = await registration_in(db, "approved")
    with pytest.raises(InvalidTransitionError):
        await WorkflowService.reject(db, registration.id, "admin-1", "")


async def test_repeated_approve_fails(db):
    registration = await registration_in(db, "under_review")
    await WorkflowService.approve(db, registration.id, "admin-1")
    with pytest.raises(InvalidTransitionError) as exc:
        await WorkflowService.approve(db, registration.id, "admin-1")
    assert exc.value.current_status == APPROVED
    actions = [log.action for log in await ApprovalLogService.history(db, registration.id)]
    assert actions.count(ACTION_APPROVED) == 1


async def test_documents_pending_round_trip(db):
    registration = await registration_in(db, "documents_pending")
    resumed = await WorkflowService.resume_review(db, registration.id, "admin-1", notes="New GST cert uploaded")
    assert resumed.status == UNDER_REVIEW
    assert (await ApprovalLogService.history(db, registration.id))[0].notes == "New GST cert uploaded"


@pytest.mark.parametrize("operation, target", [("suspend", SUSPENDED), ("blacklist", BLACKLISTED)])
async def test_downgrade_clears_approval(db, operation, target):
    registration = await registration_in(db, "approved")
    downgraded = await getattr(WorkflowService, operation)(db, registration.id, "admin-1", "Repeated no-shows")
    assert downgraded.status == target
    assert downgraded.approved_at is None
    assert downgraded.approved_by is None
    assert downgraded.standing_reason == "Repeated no-shows"


async def test_downgrade_requires_reason(db):
    registration = await registration_in(db, "approved")
    with pytest.raises(ValidationError):
        await WorkflowService.suspend(db, registration.id, "admin-1", "")
    assert (await WorkflowService.load_registration(db, registration.id)).status == APPROVED


async def test_suspended_vendor_cannot_be_reapproved(db):
    registration = await registration_in(db, "suspended")
    with pytest.raises(InvalidTransitionError):
        await WorkflowService.approve(db, registration.id, "admin-1")


async def test_notifier_failure_does_not_undo_approval(db, caplog):
    registration = await registration_in(db, "under_review")
    with caplog.at_level(logging.ERROR):
        approved = await WorkflowService.approve(db, registration.id, "admin-1", notifier=ExplodingNotifier())
    assert approved.status == APPROVED
    assert "Could not dispatch" in caplog.text


async def test_failed_log_write_rolls_back_status(db, session_factory, monkeypatch):
    registration = await registration_in(db, "under_review")
    registration_id = registration.id
    before = len(await ApprovalLogService.history(db, registration_id))

    def broken_record(*args, **kwargs):
        raise OperationalError("INSERT INTO vendor_approval_logs", {}, Exception("disk full"))

    monkeypatch.setattr(ApprovalLogService, "record", staticmethod(broken_record))
    with pytest.raises(OperationalError):
        await WorkflowService.approve(db, registration_id, "admin-1")
    monkeypatch.undo()

    async with session_factory() as fresh:
        reloaded = await WorkflowService.load_registration(fresh, registration_id)
        assert reloaded.status == UNDER_REVIEW
        assert reloaded.approved_at is None
        assert len(await ApprovalLogService.history(fresh, registration_id)) == before


async def test_concurrent_decisions_have_one_winner(db, session_factory):
    registration = await registration_in(db, "under_review")

    async def approve():
        async with session_factory() as session:
            return await WorkflowService.approve(session, registration.id, "admin-1")

    async def reject():
        async with session_factory() as session:
            return await WorkflowService.reject(session, registration.id, "admin-2", "Incomplete portfolio")

    results = await asyncio.gather(approve(), reject(), return_exceptions=True)
    failures = [r for r in results if isinstance(r, Exception)]
    assert len(failures) == 1
    assert isinstance(failures[0], InvalidTransitionError)

    async with session_factory() as fresh:
        final = await WorkflowService.load_registration(fresh, registration.id)
        assert final.status in (APPROVED, REJECTED)
        logs = await ApprovalLogService.history(fresh, registration.id)
        decisions = [log for log in logs if log.action in (ACTION_APPROVED, ACTION_REJECTED)]
        assert len(decisions) == 1
        assert decisions[0].new_status == final.status
        assert decisions[0].previous_status == UNDER_REVIEW


async def test_history_is_newest_first(db):
    registration = await registration_in(db, "documents_pending")
    logs = await ApprovalLogService.history(db, registration.id)
    assert [log.new_status for log in logs] == [DOCUMENTS_PENDING, UNDER_REVIEW, SUBMITTED]
    assert all(a.created_at >= b.created_at for a, b in zip(logs, logs[1:]))


async def test_history_reads_do_not_change_state(db):
    registration = await registration_in(db, "verification_pending")
    await ApprovalLogService.history(db, registration.id)
    assert (await WorkflowService.load_registration(db, registration.id)).status == VERIFICATION_PENDING
