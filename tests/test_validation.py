import pytest

from apps.catalog.service import get_catalog
from apps.registrations.validation import (
    collect_format_issues,
    collect_submission_issues,
    is_valid_phone,
    normalize_fields,
)
from conftest import complete_fields


@pytest.fixture
def catalog():
    return get_catalog()


def test_normalize_uppercases_statutory_codes():
    data = normalize_fields({"pan_number": " abcde-1234f ", "gst_number": "27abcde1234f1z5", "business_name": "  "})
    assert data["pan_number"] == "ABCDE1234F"
    assert data["gst_number"] == "27ABCDE1234F1Z5"
    assert data["business_name"] is None


def test_normalize_cleans_lists():
    assert normalize_fields({"categories": [" catering ", "", "decor"]})["categories"] == ["catering", "decor"]


@pytest.mark.parametrize(
    "phone, ok",
    [
        ("9876543210", True),
        ("+91 98765 43210", True),
        ("09876543210", True),
        ("5876543210", False),
        ("98765", False),
    ],
)
def test_phone_rules(phone, ok):
    assert is_valid_phone(phone) is ok


def test_valid_formats_have_no_issues(catalog):
    data = normalize_fields(
        {
            "pan_number": "ABCDE1234F",
            "gst_number": "27ABCDE1234F1Z5",
            "ifsc_code": "HDFC0001234",
            "registered_pincode": "560001",
            "contact_email": "ops@shaadicaterers.in",
            "contact_phone": "9876543210",
            "registered_state": "Karnataka",
            "categories": ["catering"],
            "primary_category": "catering",
        }
    )
    assert collect_format_issues(data, catalog) == []


def test_every_bad_format_is_reported(catalog):
    data = {
        "pan_number": "ABCD1234F",
        "gst_number": "XX",
        "ifsc_code": "HDFC1001234",
        "registered_pincode": "012345",
        "contact_email": "not-an-email",
        "contact_phone": "12345",
    }
    fields = {field for field, _ in collect_format_issues(data, catalog)}
    assert fields == {"panNumber", "gstNumber", "ifscCode", "registeredPincode", "contactEmail", "contactPhone"}


def test_unknown_vocabulary_values(catalog):
    data = {"entity_type": "guild", "categories": ["catering", "teleportation"], "service_states": ["Atlantis"]}
    fields = {field for field, _ in collect_format_issues(data, catalog)}
    assert fields == {"entityType", "categories", "serviceStates"}


def test_primary_category_must_be_selected(catalog):
    issues = collect_format_issues({"categories": ["catering"], "primary_category": "decoration"}, catalog)
    assert [f for f, _ in issues] == ["primaryCategory"]


def test_submission_lists_every_missing_field(catalog):
    issues = collect_submission_issues({}, catalog)
    fields = [f for f, _ in issues]
    assert set(fields) == {
        "businessName",
        "entityType",
        "contactPersonName",
        "contactEmail",
        "contactPhone",
        "agreesToTerms",
        "categories",
    }


def test_complete_submission_passes(catalog):
    assert collect_submission_issues(complete_fields(), catalog) == []


def test_missing_field_is_not_reported_twice(catalog):
    issues = collect_submission_issues(complete_fields(contact_email=None), catalog)
    assert [f for f, _ in issues] == ["contactEmail"]
