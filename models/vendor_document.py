import uuid
from sqlalchemy import Column, String, Text, Integer, Date, DateTime, ForeignKey, Index, Uuid, func

from constants.statuses import DOC_PENDING
from models.base import Base


class VendorDocument(Base):
    """
    One uploaded verification document attached to a vendor registration.
    Each document is adjudicated independently of the registration status.
    """
    __tablename__ = "vendor_documents"
    __table_args__ = (
        Index("ix_vendor_doc_registration", "vendor_registration_id"),
        Index("ix_vendor_doc_status", "verification_status"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    vendor_registration_id = Column(
        Uuid(as_uuid=True), ForeignKey("vendor_registrations.id", ondelete="CASCADE"), nullable=False
    )

    document_type = Column(String(50), nullable=False)
    document_name = Column(String(255), nullable=False)
    document_url = Column(String(1000), nullable=False)  # opaque pointer into the file store
    file_size = Column(Integer, nullable=False)
    mime_type = Column(String(100), nullable=False)
    issue_date = Column(Date, nullable=True)
    expiry_date = Column(Date, nullable=True)

    # pending -> verified | rejected, verified/pending -> expired
    verification_status = Column(String(20), nullable=False, default=DOC_PENDING, server_default=DOC_PENDING)
    verified_by = Column(String(64), nullable=True)
    verified_at = Column(DateTime(timezone=True), nullable=True)
    verification_notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
