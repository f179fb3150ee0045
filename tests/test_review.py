from datetime import date, timedelta

import pytest

from apps.documents.service import DocumentService, UploadedFile
from apps.registrations.schemas import RegistrationDraftCreate
from apps.registrations.service import RegistrationService
from apps.review.service import RegistrationFilters, ReviewService
from common.errors import NotFoundError, ValidationError
from conftest import complete_fields, registration_in


@pytest.fixture
async def queue(db):
    """A draft plus three submitted vendors spread across cities and categories."""
    draft = await RegistrationService.create_draft(
        db, RegistrationDraftCreate(**complete_fields(business_name="Hidden Draft Caterers"))
    )
    caterer = await registration_in(
        db, "submitted", business_name="Spice Route Caterers", registered_city="Bengaluru",
        registered_state="Karnataka", categories=["catering", "decoration"],
    )
    decorator = await registration_in(
        db, "under_review", business_name="Marigold Decor", operational_city="Mumbai",
        operational_state="Maharashtra", categories=["decoration"], contact_email="hello@marigold.in",
    )
    dj = await registration_in(
        db, "approved", business_name="Bassline DJs", registered_city="Pune",
        registered_state="Maharashtra", categories=["catering"], brand_name="Bassline",
    )
    return {"draft": draft, "caterer": caterer, "decorator": decorator, "dj": dj}


async def _names(db, **kwargs):
    items, pagination = await ReviewService.list_registrations(db, RegistrationFilters(**kwargs))
    return {r.business_name for r in items}, pagination


async def test_drafts_never_reach_the_queue(db, queue):
    names, pagination = await _names(db)
    assert names == {"Spice Route Caterers", "Marigold Decor", "Bassline DJs"}
    assert pagination["total"] == 3


async def test_filter_by_status(db, queue):
    names, _ = await _names(db, status="under_review")
    assert names == {"Marigold Decor"}
    names, _ = await _names(db, status="draft")
    assert names == set()


async def test_filter_by_category(db, queue):
    names, _ = await _names(db, category="decoration")
    assert names == {"Spice Route Caterers", "Marigold Decor"}


async def test_filter_by_city_matches_either_address(db, queue):
    assert (await _names(db, city="mumbai"))[0] == {"Marigold Decor"}
    assert (await _names(db, city="Bengaluru"))[0] == {"Spice Route Caterers"}


async def test_filter_by_state(db, queue):
    names, _ = await _names(db, state="Maharashtra")
    assert names == {"Marigold Decor", "Bassline DJs"}


async def test_search_covers_contact_fields(db, queue):
    assert (await _names(db, search="marigold.in"))[0] == {"Marigold Decor"}
    assert (await _names(db, search="bassline"))[0] == {"Bassline DJs"}


async def test_wildcards_in_filters_are_literal(db, queue):
    assert (await _names(db, search="%"))[0] == set()
    assert (await _names(db, search="_"))[0] == set()
    assert (await _names(db, search="Spice%Caterers"))[0] == set()
    assert (await _names(db, category="cater%"))[0] == set()
    assert (await _names(db, category="_atering"))[0] == set()


async def test_underscore_matches_itself(db, queue):
    await registration_in(db, "submitted", business_name="Under_Score Events")
    assert (await _names(db, search="r_s"))[0] == {"Under_Score Events"}


async def test_created_range(db, queue):
    today = date.today()
    names, _ = await _names(db, created_from=today - timedelta(days=1), created_to=today + timedelta(days=1))
    assert len(names) == 3
    names, _ = await _names(db, created_to=today - timedelta(days=2))
    assert names == set()


async def test_sort_and_paginate(db, queue):
    items, pagination = await ReviewService.list_registrations(
        db, RegistrationFilters(sort_by="businessName", sort_order="asc", page=2, size=2)
    )
    assert [r.business_name for r in items] == ["Spice Route Caterers"]
    assert pagination == {"page": 2, "size": 2, "total": 3, "totalPages": 2}


@pytest.mark.parametrize(
    "kwargs, field",
    [
        ({"status": "pending"}, "status"),
        ({"sort_by": "password"}, "sortBy"),
        ({"sort_order": "sideways"}, "sortOrder"),
        ({"created_from": date(2025, 2, 1), "created_to": date(2025, 1, 1)}, "createdFrom"),
    ],
)
async def test_bad_filters(db, kwargs, field):
    with pytest.raises(ValidationError) as exc:
        await ReviewService.list_registrations(db, RegistrationFilters(**kwargs))
    assert exc.value.fields == [field]


async def test_detail_includes_documents(db, queue, file_store):
    caterer = queue["caterer"]
    upload = UploadedFile(filename="gst.pdf", content_type="application/pdf", data=b"%PDF gst")
    await DocumentService.upload_document(db, caterer.id, "gst_certificate", upload, file_store=file_store)

    registration, documents = await ReviewService.get_registration_detail(db, caterer.id)
    assert registration.id == caterer.id
    assert [d.document_type for d in documents] == ["gst_certificate"]


async def test_detail_hides_drafts(db, queue):
    with pytest.raises(NotFoundError):
        await ReviewService.get_registration_detail(db, queue["draft"].id)


async def test_stats(db, queue):
    stats = await ReviewService.stats(db)
    assert stats["total"] == 3
    assert stats["by_status"]["submitted"] == 1
    assert stats["by_status"]["under_review"] == 1
    assert stats["by_status"]["approved"] == 1
    assert stats["by_status"]["rejected"] == 0
    assert "draft" not in stats["by_status"]
    assert stats["by_category"] == {"catering": 2, "decoration": 2}
