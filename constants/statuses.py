"""
Status constants for vendor registrations, their documents and the approval log.
Stored in lowercase snake_case, matching the values persisted in the database.
"""

# Registration workflow states
DRAFT = "draft"
SUBMITTED = "submitted"
UNDER_REVIEW = "under_review"
DOCUMENTS_PENDING = "documents_pending"
VERIFICATION_PENDING = "verification_pending"
APPROVED = "approved"
REJECTED = "rejected"
SUSPENDED = "suspended"
BLACKLISTED = "blacklisted"

REGISTRATION_STATUS_VALUES = (
    DRAFT,
    SUBMITTED,
    UNDER_REVIEW,
    DOCUMENTS_PENDING,
    VERIFICATION_PENDING,
    APPROVED,
    REJECTED,
    SUSPENDED,
    BLACKLISTED,
)

# States in which the applicant may still change their answers
EDITABLE_STATUSES = frozenset({DRAFT, SUBMITTED, DOCUMENTS_PENDING})

# No further uploads are accepted once a vendor is turned away
UPLOAD_LOCKED_STATUSES = frozenset({REJECTED, BLACKLISTED})

# Document verification states
DOC_PENDING = "pending"
DOC_VERIFIED = "verified"
DOC_REJECTED = "rejected"
DOC_EXPIRED = "expired"

DOCUMENT_STATUS_VALUES = (DOC_PENDING, DOC_VERIFIED, DOC_REJECTED, DOC_EXPIRED)

# Approval log actions
ACTION_SUBMITTED = "submitted"
ACTION_APPROVED = "approved"
ACTION_REJECTED = "rejected"
ACTION_STATUS_CHANGED = "status_changed"
ACTION_DOCUMENT_VERIFIED = "document_verified"
ACTION_DOCUMENT_REJECTED = "document_rejected"
ACTION_DOCUMENT_EXPIRED = "document_expired"
ACTION_DOCUMENT_DELETED = "document_deleted"
