"""Shared fixtures: a fresh SQLite database per test, fake collaborators and an HTTP client."""

import os
import sys
from pathlib import Path

# Settings are read once and cached, so the test environment must be in place before any app import
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ENABLE_RATE_LIMITER"] = "false"
os.environ["NOTIFICATIONS_ENABLED"] = "false"
os.environ["STORAGE_BACKEND"] = "local"
os.environ["CREATE_TABLES_ON_STARTUP"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import httpx
import pytest
from sqlalchemy.ext.asyncio import create_async_engine

from apps.registrations.schemas import RegistrationDraftCreate
from apps.registrations.service import RegistrationService
from apps.storage.service import LocalFileStore, get_file_store
from apps.workflow.service import WorkflowService
from common.jwt import create_access_token
from constants.roles import ADMIN, STAFF
from email_services.notifier import get_notifier
from models.base import Base, get_db, make_session_factory
from models import vendor_approval_log, vendor_document, vendor_registration  # noqa: F401

pytest_plugins = ('pytest_asyncio',)


class FakeNotifier:
    """Records dispatched events instead of sending email"""

    def __init__(self):
        self.events = []

    def dispatch(self, event, registration):
        self.events.append((event, registration.id))


class ExplodingNotifier:
    def dispatch(self, event, registration):
        raise RuntimeError("SMTP relay is down")


def complete_fields(**overrides):
    """A registration payload that passes every submission rule."""
    data = {
        "business_name": "Acme Events",
        "entity_type": "private_limited",
        "contact_person_name": "Asha Rao",
        "contact_email": "asha@acmeevents.in",
        "contact_phone": "9876543210",
        "categories": ["catering"],
        "agrees_to_terms": True,
    }
    data.update(overrides)
    return data


# Shortest route from draft to each status
PATHS = {
    "draft": [],
    "submitted": ["submit"],
    "under_review": ["submit", "begin_review"],
    "documents_pending": ["submit", "begin_review", "request_documents"],
    "verification_pending": ["submit", "begin_review", "request_verification"],
    "approved": ["submit", "approve"],
    "rejected": ["submit", "reject"],
    "suspended": ["submit", "approve", "suspend"],
    "blacklisted": ["submit", "approve", "blacklist"],
}


async def run(db, operation, registration_id, actor="admin-1", reason="Does not meet requirements", notifier=None):
    if operation == "submit":
        return await RegistrationService.submit(db, registration_id)
    if operation == "approve":
        return await WorkflowService.approve(db, registration_id, actor, notifier=notifier)
    if operation == "reject":
        return await WorkflowService.reject(db, registration_id, actor, reason, notifier=notifier)
    if operation in ("suspend", "blacklist"):
        return await getattr(WorkflowService, operation)(db, registration_id, actor, reason)
    return await getattr(WorkflowService, operation)(db, registration_id, actor)


async def registration_in(db, status, **fields):
    registration = await RegistrationService.create_draft(db, RegistrationDraftCreate(**complete_fields(**fields)))
    for operation in PATHS[status]:
        registration = await run(db, operation, registration.id)
    assert registration.status == status
    return registration


@pytest.fixture
async def engine(tmp_path):
    eng = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'vendors.db'}")
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def file_store(tmp_path):
    return LocalFileStore(root=str(tmp_path / "uploads"))


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
async def client(session_factory, file_store, notifier):
    from main import app

    async def _get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_file_store] = lambda: file_store
    app.dependency_overrides[get_notifier] = lambda: notifier
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {create_access_token('admin-1', roles=[ADMIN])}"}


@pytest.fixture
def staff_headers():
    return {"Authorization": f"Bearer {create_access_token('staff-1', roles=[STAFF])}"}
