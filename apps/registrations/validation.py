"""
Format and completeness rules for vendor registrations.

Rules only report problems; they never stop at the first one, so the applicant can
fix every field in one pass.
"""

import re
from datetime import date
from typing import Any, Dict, List, Mapping, Tuple

from email_validator import EmailNotValidError, validate_email
from pydantic.alias_generators import to_camel

from apps.catalog.service import VendorCatalog
from common.errors import ValidationError

PAN_PATTERN = re.compile(r"^[A-Z]{5}[0-9]{4}[A-Z]$")
GST_PATTERN = re.compile(r"^[0-9]{2}[A-Z]{5}[0-9]{4}[A-Z][1-9A-Z]Z[0-9A-Z]$")
IFSC_PATTERN = re.compile(r"^[A-Z]{4}0[A-Z0-9]{6}$")
PINCODE_PATTERN = re.compile(r"^[1-9][0-9]{5}$")

# Statutory codes are stored uppercase without separators
_CODE_FIELDS = ("pan_number", "gst_number", "ifsc_code")

REQUIRED_FOR_SUBMISSION = (
    "business_name",
    "entity_type",
    "contact_person_name",
    "contact_email",
    "contact_phone",
)

Issue = Tuple[str, str]


def api_name(field: str) -> str:
    """camelCase name of a registration attribute, as the client knows it."""
    return to_camel(field)


def normalize_fields(data: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Canonicalize statutory codes and drop blank strings so they read as "not provided".
    """
    cleaned: Dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, str):
            value = value.strip()
            if key in _CODE_FIELDS:
                value = re.sub(r"[^A-Z0-9]", "", value.upper())
            if value == "":
                value = None
        elif isinstance(value, list):
            value = [v.strip() for v in value if isinstance(v, str) and v.strip()]
        cleaned[key] = value
    return cleaned


def is_valid_phone(value: str) -> bool:
    """
    Indian mobile numbers: 10 digits starting 6-9, optionally prefixed with 91 / +91 / 0.
    """
    digits = re.sub(r"\D", "", value)
    if len(digits) == 12 and digits.startswith("91"):
        digits = digits[2:]
    elif len(digits) == 11 and digits.startswith("0"):
        digits = digits[1:]
    return len(digits) == 10 and digits[0] in "6789"


def _check_email(field: str, value: str, issues: List[Issue]) -> None:
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        issues.append((api_name(field), "Invalid email address"))


def _check_member(field: str, value: Any, allowed, label: str, issues: List[Issue]) -> None:
    if value is not None and value not in allowed:
        issues.append((api_name(field), f"Unknown {label}: {value}"))


def collect_format_issues(data: Mapping[str, Any], catalog: VendorCatalog) -> List[Issue]:
    """
    Check the format of every provided (non-empty) field.
    Missing values are fine here; completeness is only enforced on submission.
    """
    issues: List[Issue] = []

    pan = data.get("pan_number")
    if pan and not PAN_PATTERN.match(pan):
        issues.append((api_name("pan_number"), "Invalid PAN format (expected: AAAAA0000A)"))

    gst = data.get("gst_number")
    if gst and not GST_PATTERN.match(gst):
        issues.append((api_name("gst_number"), "Invalid GST format"))

    ifsc = data.get("ifsc_code")
    if ifsc and not IFSC_PATTERN.match(ifsc):
        issues.append((api_name("ifsc_code"), "Invalid IFSC format"))

    for field in ("registered_pincode", "operational_pincode"):
        value = data.get(field)
        if value and not PINCODE_PATTERN.match(value):
            issues.append((api_name(field), "Pincode must be 6 digits"))

    for field in ("contact_email", "secondary_contact_email"):
        value = data.get(field)
        if value:
            _check_email(field, value, issues)

    for field in ("contact_phone", "contact_whatsapp", "secondary_contact_phone"):
        value = data.get(field)
        if value and not is_valid_phone(value):
            issues.append((api_name(field), "Invalid phone number"))

    year = data.get("year_established")
    if year is not None and year > date.today().year:
        issues.append((api_name("year_established"), "Year established cannot be in the future"))

    _check_member("entity_type", data.get("entity_type"), catalog.entity_types, "entity type", issues)
    _check_member("employee_count", data.get("employee_count"), catalog.employee_counts, "employee count", issues)
    _check_member("annual_turnover", data.get("annual_turnover"), catalog.annual_turnovers, "annual turnover", issues)
    _check_member("pricing_tier", data.get("pricing_tier"), catalog.pricing_tiers, "pricing tier", issues)
    _check_member("registered_state", data.get("registered_state"), catalog.states, "state", issues)
    _check_member("operational_state", data.get("operational_state"), catalog.states, "state", issues)

    categories = data.get("categories") or []
    unknown = [c for c in categories if c not in catalog.categories]
    if unknown:
        issues.append((api_name("categories"), f"Unknown categories: {', '.join(unknown)}"))

    primary = data.get("primary_category")
    if primary is not None:
        if primary not in catalog.categories:
            issues.append((api_name("primary_category"), f"Unknown category: {primary}"))
        elif "categories" in data and primary not in categories:
            issues.append((api_name("primary_category"), "Primary category must be one of the selected categories"))

    unknown_states = [s for s in (data.get("service_states") or []) if s not in catalog.states]
    if unknown_states:
        issues.append((api_name("service_states"), f"Unknown states: {', '.join(unknown_states)}"))

    return issues


def collect_submission_issues(data: Mapping[str, Any], catalog: VendorCatalog) -> List[Issue]:
    """
    Completeness + format rules a registration must satisfy before it can be submitted.
    """
    issues: List[Issue] = []
    for field in REQUIRED_FOR_SUBMISSION:
        if not data.get(field):
            issues.append((api_name(field), "This field is required"))
    if data.get("agrees_to_terms") is not True:
        issues.append((api_name("agrees_to_terms"), "You must agree to the terms"))
    if not data.get("categories"):
        issues.append((api_name("categories"), "At least one category is required"))

    already_flagged = {field for field, _ in issues}
    for field, message in collect_format_issues(data, catalog):
        if field not in already_flagged:
            issues.append((field, message))
    return issues


def raise_for_issues(issues: List[Issue], message: str = "Validation failed") -> None:
    if issues:
        raise ValidationError(issues, message)
