import uuid
from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Index, Uuid, func

from models.base import Base


class VendorApprovalLog(Base):
    """
    Append-only audit trail of registration status changes and document decisions.
    Rows are inserted in the same transaction as the change they describe and are never
    updated or deleted afterwards.
    """
    __tablename__ = "vendor_approval_logs"
    __table_args__ = (
        Index("ix_vendor_log_registration_created", "vendor_registration_id", "created_at"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    vendor_registration_id = Column(
        Uuid(as_uuid=True), ForeignKey("vendor_registrations.id", ondelete="RESTRICT"), nullable=False
    )
    document_id = Column(Uuid(as_uuid=True), ForeignKey("vendor_documents.id", ondelete="SET NULL"), nullable=True)

    action = Column(String(50), nullable=False)
    performed_by = Column(String(64), nullable=True)
    notes = Column(Text, nullable=True)
    previous_status = Column(String(30), nullable=True)
    new_status = Column(String(30), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
