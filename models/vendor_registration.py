import uuid
from sqlalchemy import Column, String, Text, Integer, Boolean, DateTime, JSON, Index, Uuid, func

from constants.statuses import DRAFT
from models.base import Base


class VendorRegistration(Base):
    """
    A vendor's onboarding application and its current approval status.
    `status` is only ever changed by the workflow service, always together with a
    VendorApprovalLog row.
    """
    __tablename__ = "vendor_registrations"
    __table_args__ = (
        Index("ix_vendor_reg_status", "status"),
        Index("ix_vendor_reg_created", "created_at"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # Business
    business_name = Column(String(255), nullable=True, index=True)
    brand_name = Column(String(255), nullable=True)
    entity_type = Column(String(50), nullable=True)
    year_established = Column(Integer, nullable=True)
    employee_count = Column(String(20), nullable=True)
    annual_turnover = Column(String(20), nullable=True)

    # Statutory identifiers
    pan_number = Column(String(10), nullable=True)
    gst_number = Column(String(15), nullable=True)
    msme_number = Column(String(50), nullable=True)
    fssai_number = Column(String(50), nullable=True)
    cin_number = Column(String(50), nullable=True)

    # Contacts
    contact_person_name = Column(String(255), nullable=True)
    contact_person_designation = Column(String(100), nullable=True)
    contact_email = Column(String(255), nullable=True, index=True)
    contact_phone = Column(String(20), nullable=True)
    contact_whatsapp = Column(String(20), nullable=True)
    secondary_contact_name = Column(String(255), nullable=True)
    secondary_contact_email = Column(String(255), nullable=True)
    secondary_contact_phone = Column(String(20), nullable=True)

    # Addresses
    registered_address = Column(Text, nullable=True)
    registered_city = Column(String(100), nullable=True)
    registered_state = Column(String(100), nullable=True)
    registered_pincode = Column(String(6), nullable=True)
    operational_address = Column(Text, nullable=True)
    operational_city = Column(String(100), nullable=True)
    operational_state = Column(String(100), nullable=True)
    operational_pincode = Column(String(6), nullable=True)

    # Service profile
    categories = Column(JSON, nullable=False, default=list)
    primary_category = Column(String(50), nullable=True)
    service_description = Column(Text, nullable=True)
    service_cities = Column(JSON, nullable=False, default=list)
    service_states = Column(JSON, nullable=False, default=list)
    pan_india_service = Column(Boolean, nullable=False, default=False, server_default="false")
    pricing_tier = Column(String(20), nullable=True)
    minimum_budget = Column(Integer, nullable=True)
    average_event_value = Column(Integer, nullable=True)

    # Banking (used for payouts later)
    bank_name = Column(String(255), nullable=True)
    bank_branch = Column(String(255), nullable=True)
    account_number = Column(String(30), nullable=True)
    ifsc_code = Column(String(11), nullable=True)
    account_holder_name = Column(String(255), nullable=True)
    upi_id = Column(String(100), nullable=True)

    # Online presence
    website_url = Column(String(500), nullable=True)
    instagram_url = Column(String(500), nullable=True)
    facebook_url = Column(String(500), nullable=True)
    youtube_url = Column(String(500), nullable=True)

    # Declarations
    has_no_pending_litigation = Column(Boolean, nullable=False, default=False, server_default="false")
    has_never_blacklisted = Column(Boolean, nullable=False, default=False, server_default="false")
    has_liability_insurance = Column(Boolean, nullable=False, default=False, server_default="false")
    has_fire_safety_certificate = Column(Boolean, nullable=False, default=False, server_default="false")
    has_pollution_certificate = Column(Boolean, nullable=False, default=False, server_default="false")
    agrees_to_terms = Column(Boolean, nullable=False, default=False, server_default="false")
    agrees_to_nda = Column(Boolean, nullable=False, default=False, server_default="false")

    # Workflow
    status = Column(String(30), nullable=False, default=DRAFT, server_default=DRAFT)
    submitted_at = Column(DateTime(timezone=True), nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    reviewed_by = Column(String(64), nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    approved_by = Column(String(64), nullable=True)
    rejection_reason = Column(Text, nullable=True)  # only while status == rejected
    rejection_notes = Column(Text, nullable=True)
    standing_reason = Column(Text, nullable=True)  # suspension / blacklisting reason
    internal_notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
