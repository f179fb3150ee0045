from __future__ import annotations

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, conint, constr
from pydantic.alias_generators import to_camel


# -------------------------------
# Registration field set
# -------------------------------

ShortText = constr(strip_whitespace=True, max_length=255)
LongText = constr(strip_whitespace=True, max_length=5000)
Url = constr(strip_whitespace=True, max_length=500)


class RegistrationFields(BaseModel):
    """
    Every applicant-editable field of a vendor registration.
    Attribute names match the ORM columns; the API speaks camelCase.
    All fields are optional so partial drafts can be saved.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    # Business
    business_name: Optional[ShortText] = None
    brand_name: Optional[ShortText] = None
    entity_type: Optional[constr(strip_whitespace=True, max_length=50)] = None
    year_established: Optional[conint(ge=1800, le=2100)] = None
    employee_count: Optional[constr(strip_whitespace=True, max_length=20)] = None
    annual_turnover: Optional[constr(strip_whitespace=True, max_length=20)] = None

    # Statutory identifiers
    pan_number: Optional[constr(strip_whitespace=True, max_length=20)] = None
    gst_number: Optional[constr(strip_whitespace=True, max_length=20)] = None
    msme_number: Optional[constr(strip_whitespace=True, max_length=50)] = None
    fssai_number: Optional[constr(strip_whitespace=True, max_length=50)] = None
    cin_number: Optional[constr(strip_whitespace=True, max_length=50)] = None

    # Contacts
    contact_person_name: Optional[ShortText] = None
    contact_person_designation: Optional[constr(strip_whitespace=True, max_length=100)] = None
    contact_email: Optional[ShortText] = None
    contact_phone: Optional[constr(strip_whitespace=True, max_length=20)] = None
    contact_whatsapp: Optional[constr(strip_whitespace=True, max_length=20)] = None
    secondary_contact_name: Optional[ShortText] = None
    secondary_contact_email: Optional[ShortText] = None
    secondary_contact_phone: Optional[constr(strip_whitespace=True, max_length=20)] = None

    # Addresses
    registered_address: Optional[LongText] = None
    registered_city: Optional[constr(strip_whitespace=True, max_length=100)] = None
    registered_state: Optional[constr(strip_whitespace=True, max_length=100)] = None
    registered_pincode: Optional[constr(strip_whitespace=True, max_length=10)] = None
    operational_address: Optional[LongText] = None
    operational_city: Optional[constr(strip_whitespace=True, max_length=100)] = None
    operational_state: Optional[constr(strip_whitespace=True, max_length=100)] = None
    operational_pincode: Optional[constr(strip_whitespace=True, max_length=10)] = None

    # Service profile
    categories: Optional[List[constr(strip_whitespace=True, max_length=50)]] = None
    primary_category: Optional[constr(strip_whitespace=True, max_length=50)] = None
    service_description: Optional[LongText] = None
    service_cities: Optional[List[constr(strip_whitespace=True, max_length=100)]] = None
    service_states: Optional[List[constr(strip_whitespace=True, max_length=100)]] = None
    pan_india_service: Optional[bool] = None
    pricing_tier: Optional[constr(strip_whitespace=True, max_length=20)] = None
    minimum_budget: Optional[conint(ge=0)] = None
    average_event_value: Optional[conint(ge=0)] = None

    # Banking
    bank_name: Optional[ShortText] = None
    bank_branch: Optional[ShortText] = None
    account_number: Optional[constr(strip_whitespace=True, max_length=30)] = None
    ifsc_code: Optional[constr(strip_whitespace=True, max_length=20)] = None
    account_holder_name: Optional[ShortText] = None
    upi_id: Optional[constr(strip_whitespace=True, max_length=100)] = None

    # Online presence
    website_url: Optional[Url] = None
    instagram_url: Optional[Url] = None
    facebook_url: Optional[Url] = None
    youtube_url: Optional[Url] = None

    # Declarations
    has_no_pending_litigation: Optional[bool] = None
    has_never_blacklisted: Optional[bool] = None
    has_liability_insurance: Optional[bool] = None
    has_fire_safety_certificate: Optional[bool] = None
    has_pollution_certificate: Optional[bool] = None
    agrees_to_terms: Optional[bool] = None
    agrees_to_nda: Optional[bool] = None


class RegistrationDraftCreate(RegistrationFields):
    pass


class RegistrationDraftUpdate(RegistrationFields):
    """
    Snapshot pushed by the client's autosave; only the fields it carries are written.
    """


class RegistrationOut(RegistrationFields):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True, extra="ignore"
    )

    id: uuid.UUID
    status: str
    submitted_at: Optional[datetime] = None
    reviewed_at: Optional[datetime] = None
    reviewed_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    approved_by: Optional[str] = None
    rejection_reason: Optional[str] = None
    rejection_notes: Optional[str] = None
    standing_reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class RegistrationCreated(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: uuid.UUID
    status: str
