import logging
import uuid
from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Tuple

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from apps.catalog.service import get_catalog
from apps.storage.service import FileStore, get_file_store
from apps.workflow.service import ApprovalLogService, IdLike, WorkflowService, require_text, as_uuid, utcnow
from common.errors import (
    DependencyError,
    ImmutableStateError,
    InvalidTransitionError,
    NotFoundError,
    PayloadTooLargeError,
    UnsupportedMediaTypeError,
    ValidationError,
)
from constants.statuses import (
    ACTION_DOCUMENT_DELETED,
    ACTION_DOCUMENT_EXPIRED,
    ACTION_DOCUMENT_REJECTED,
    ACTION_DOCUMENT_VERIFIED,
    DOC_EXPIRED,
    DOC_PENDING,
    DOC_REJECTED,
    DOC_VERIFIED,
    EDITABLE_STATUSES,
    UPLOAD_LOCKED_STATUSES,
)
from models.vendor_document import VendorDocument
from models.vendor_registration import VendorRegistration
from settings.config import get_settings

logger = logging.getLogger(__name__)


@dataclass
class UploadedFile:
    filename: str
    content_type: Optional[str]
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


class DocumentService:
    """
    Upload and adjudication of vendor documents.

    A document's verification status moves independently of its registration's status;
    every decision still lands in the registration's approval log.
    """

    @staticmethod
    async def get_document(db: AsyncSession, document_id: IdLike) -> VendorDocument:
        stmt = (
            select(VendorDocument)
            .where(VendorDocument.id == as_uuid(document_id, "Document"))
            .execution_options(populate_existing=True)
        )
        res = await db.execute(stmt)
        document = res.scalar_one_or_none()
        if not document:
            raise NotFoundError("Document not found.")
        return document

    @staticmethod
    async def list_documents(db: AsyncSession, registration_id: IdLike) -> List[VendorDocument]:
        registration = await WorkflowService.load_registration(db, registration_id)
        stmt = (
            select(VendorDocument)
            .where(VendorDocument.vendor_registration_id == registration.id)
            .order_by(VendorDocument.document_type, VendorDocument.created_at)
        )
        res = await db.execute(stmt)
        return list(res.scalars().all())

    @staticmethod
    async def upload_document(
        db: AsyncSession,
        registration_id: IdLike,
        document_type: str,
        upload: UploadedFile,
        expiry_date: Optional[date] = None,
        issue_date: Optional[date] = None,
        document_name: Optional[str] = None,
        file_store: Optional[FileStore] = None,
    ) -> VendorDocument:
        """
        Validate, store and record a new document in `pending`.
        Nothing is written if any check or the file store fails.
        """
        settings = get_settings()
        registration = await WorkflowService.load_registration(db, registration_id)
        if registration.status in UPLOAD_LOCKED_STATUSES:
            raise ImmutableStateError(
                f"Documents cannot be added to a registration in status '{registration.status}'.",
                {"currentStatus": registration.status},
            )

        document_type = (document_type or "").strip()
        if document_type not in get_catalog().document_types:
            raise ValidationError([("documentType", f"Unknown document type: {document_type or '(empty)'}")])

        mime_type = (upload.content_type or "").split(";")[0].strip().lower()
        if mime_type not in settings.allowed_document_mime_types:
            logger.warning("Rejected upload for %s: unsupported type %r", registration.id, mime_type)
            raise UnsupportedMediaTypeError(
                f"Unsupported file type '{mime_type or 'unknown'}'.",
                {"allowed": settings.allowed_document_mime_types},
            )
        if upload.size > settings.DOCUMENT_MAX_BYTES:
            logger.warning("Rejected upload for %s: %d bytes", registration.id, upload.size)
            raise PayloadTooLargeError(
                f"File exceeds the {settings.DOCUMENT_MAX_BYTES} byte limit.",
                {"maxBytes": settings.DOCUMENT_MAX_BYTES},
            )
        if expiry_date and issue_date and expiry_date < issue_date:
            raise ValidationError([("expiryDate", "Expiry date cannot be before the issue date")])

        store = file_store or get_file_store()
        stored = await store.store(
            upload.data, upload.filename, mime_type, key_prefix=f"vendor-registrations/{registration.id}"
        )

        document = VendorDocument(
            id=uuid.uuid4(),
            vendor_registration_id=registration.id,
            document_type=document_type,
            document_name=(document_name or upload.filename or document_type)[:255],
            document_url=stored.url,
            file_size=stored.size,
            mime_type=stored.mime_type,
            issue_date=issue_date,
            expiry_date=expiry_date,
            verification_status=DOC_PENDING,
        )
        db.add(document)
        try:
            await db.commit()
        except SQLAlchemyError:
            await db.rollback()
            logger.exception("Could not record document for registration %s; removing stored file", registration_id)
            try:
                await store.delete(stored.url)
            except DependencyError:
                logger.exception("Orphaned stored file %s could not be removed", stored.url)
            raise
        await db.refresh(document)
        logger.info("Uploaded %s document %s for registration %s", document_type, document.id, document.vendor_registration_id)
        return document

    @staticmethod
    async def delete_document(
        db: AsyncSession, registration_id: IdLike, document_id: IdLike, file_store: Optional[FileStore] = None
    ) -> None:
        """
        Withdraw a document that has not been adjudicated yet.
        Only the applicant's editable states allow it; the row and its log entry go in one commit
        and the stored file is removed afterwards.
        """
        registration = await WorkflowService.load_registration(db, registration_id)
        document = await DocumentService.get_document(db, document_id)
        if document.vendor_registration_id != registration.id:
            raise NotFoundError("Document not found.")
        if registration.status not in EDITABLE_STATUSES:
            raise ImmutableStateError(
                f"Documents cannot be removed from a registration in status '{registration.status}'.",
                {"currentStatus": registration.status},
            )
        DocumentService._ensure_pending(document, "delete")

        document_key = document.id
        document_url = document.document_url
        # The log row outlives the document, so it names the file instead of referencing it
        notes = f"{document.document_type} '{document.document_name}' ({document_key}) withdrawn"
        stmt = (
            delete(VendorDocument)
            .where(VendorDocument.id == document_key, VendorDocument.verification_status == DOC_PENDING)
            .execution_options(synchronize_session=False)
        )
        try:
            res = await db.execute(stmt)
            if res.rowcount != 1:
                await db.rollback()
                current = await DocumentService.get_document(db, document_key)
                raise InvalidTransitionError(
                    f"Document changed concurrently; it is now '{current.verification_status}'.",
                    current_status=current.verification_status,
                    operation="delete_document",
                )
            ApprovalLogService.record(
                db,
                registration.id,
                ACTION_DOCUMENT_DELETED,
                None,
                registration.status,
                registration.status,
                notes,
            )
            await db.commit()
        except SQLAlchemyError:
            await db.rollback()
            logger.exception("Could not delete document %s; rolled back", document_key)
            raise

        store = file_store or get_file_store()
        try:
            await store.delete(document_url)
        except DependencyError:
            logger.exception("Deleted document %s but its stored file %s could not be removed", document_key, document_url)
        logger.info("Document %s withdrawn from registration %s", document_key, registration.id)

    @staticmethod
    def _ensure_pending(document: VendorDocument, operation: str) -> None:
        if document.verification_status != DOC_PENDING:
            raise InvalidTransitionError(
                f"Cannot {operation} a document in status '{document.verification_status}'.",
                current_status=document.verification_status,
                operation=f"{operation}_document",
            )

    @staticmethod
    async def _decide(
        db: AsyncSession,
        document: VendorDocument,
        operation: str,
        target: str,
        action: str,
        actor: str,
        notes: Optional[str],
    ) -> VendorDocument:
        document_id = document.id
        registration = await WorkflowService.load_registration(db, document.vendor_registration_id)
        now = utcnow()
        stmt = (
            update(VendorDocument)
            .where(VendorDocument.id == document_id, VendorDocument.verification_status == DOC_PENDING)
            .values(
                verification_status=target,
                verified_by=actor,
                verified_at=now,
                verification_notes=notes,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        try:
            res = await db.execute(stmt)
            if res.rowcount != 1:
                await db.rollback()
                current = await DocumentService.get_document(db, document_id)
                raise InvalidTransitionError(
                    f"Document changed concurrently; it is now '{current.verification_status}'.",
                    current_status=current.verification_status,
                    operation=f"{operation}_document",
                )
            # The registration's own status does not move; the row records it as-is
            ApprovalLogService.record(
                db,
                registration.id,
                action,
                actor,
                registration.status,
                registration.status,
                notes,
                document_id=document_id,
            )
            await db.commit()
        except SQLAlchemyError:
            await db.rollback()
            logger.exception("Could not %s document %s; rolled back", operation, document_id)
            raise
        await db.refresh(document)
        logger.info("Document %s %s by %s", document_id, target, actor)
        return document

    @staticmethod
    async def verify_document(
        db: AsyncSession, document_id: IdLike, actor_id: str, notes: Optional[str] = None
    ) -> VendorDocument:
        document = await DocumentService.get_document(db, document_id)
        DocumentService._ensure_pending(document, "verify")
        actor = require_text("actorId", actor_id, "Actor id is required")
        notes = (notes or "").strip() or None
        return await DocumentService._decide(
            db, document, "verify", DOC_VERIFIED, ACTION_DOCUMENT_VERIFIED, actor, notes
        )

    @staticmethod
    async def reject_document(db: AsyncSession, document_id: IdLike, actor_id: str, notes: str) -> VendorDocument:
        document = await DocumentService.get_document(db, document_id)
        DocumentService._ensure_pending(document, "reject")
        actor = require_text("actorId", actor_id, "Actor id is required")
        notes = require_text("notes", notes, "Rejection notes are required")
        return await DocumentService._decide(
            db, document, "reject", DOC_REJECTED, ACTION_DOCUMENT_REJECTED, actor, notes
        )

    @staticmethod
    async def expire_documents(db: AsyncSession, actor_id: str, as_of: Optional[date] = None) -> List[VendorDocument]:
        """
        Mark every pending/verified document whose expiry date is before `as_of` as expired.
        All rows and their log entries are committed together.
        """
        actor = require_text("actorId", actor_id, "Actor id is required")
        as_of = as_of or utcnow().date()

        stmt = (
            select(VendorDocument, VendorRegistration.status)
            .join(VendorRegistration, VendorRegistration.id == VendorDocument.vendor_registration_id)
            .where(
                VendorDocument.expiry_date.is_not(None),
                VendorDocument.expiry_date < as_of,
                VendorDocument.verification_status.in_((DOC_PENDING, DOC_VERIFIED)),
            )
            .order_by(VendorDocument.expiry_date, VendorDocument.id)
            .execution_options(populate_existing=True)
        )
        res = await db.execute(stmt)
        candidates: List[Tuple[VendorDocument, str]] = [(row[0], row[1]) for row in res.all()]

        expired: List[VendorDocument] = []
        now = utcnow()
        try:
            for document, registration_status in candidates:
                previous = document.verification_status
                upd = (
                    update(VendorDocument)
                    .where(VendorDocument.id == document.id, VendorDocument.verification_status == previous)
                    .values(verification_status=DOC_EXPIRED, updated_at=now)
                    .execution_options(synchronize_session=False)
                )
                result = await db.execute(upd)
                if result.rowcount != 1:
                    # Adjudicated by someone else in the meantime; leave it alone
                    continue
                ApprovalLogService.record(
                    db,
                    document.vendor_registration_id,
                    ACTION_DOCUMENT_EXPIRED,
                    actor,
                    registration_status,
                    registration_status,
                    f"{document.document_type} expired on {document.expiry_date.isoformat()}",
                    document_id=document.id,
                )
                expired.append(document)
            await db.commit()
        except SQLAlchemyError:
            await db.rollback()
            logger.exception("Document expiry sweep failed; rolled back")
            raise

        for document in expired:
            await db.refresh(document)
        logger.info("Expired %d document(s) as of %s", len(expired), as_of.isoformat())
        return expired

    @staticmethod
    async def fetch_document_content(
        db: AsyncSession, document_id: IdLike, file_store: Optional[FileStore] = None
    ) -> Tuple[VendorDocument, bytes]:
        document = await DocumentService.get_document(db, document_id)
        store = file_store or get_file_store()
        data = await store.fetch(document.document_url)
        return document, data
