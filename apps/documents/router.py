from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from apps.documents.schemas import (
    DocumentDecision,
    DocumentOut,
    ExpireDocumentsRequest,
    ExpireDocumentsResponse,
)
from apps.documents.service import DocumentService, UploadedFile
from apps.storage.service import FileStore, get_file_store
from constants.roles import ADMIN, STAFF
from models.base import get_db
from security.auth_backend import Actor, require_roles
from settings.config import get_settings

# Applicant side: uploads hang off the registration they belong to
applicant_router = APIRouter(prefix="/api/vendor-registrations", tags=["Vendor Documents"])

# Admin side: adjudication addressed by document id
admin_router = APIRouter(prefix="/api/admin/vendor-documents", tags=["Vendor Documents (Admin)"])


@applicant_router.post(
    "/{registration_id}/documents",
    response_model=DocumentOut,
    status_code=status.HTTP_201_CREATED,
)
async def upload_document(
    registration_id: str,
    document_type: str = Form(..., alias="documentType"),
    file: UploadFile = File(...),
    expiry_date: Optional[date] = Form(default=None, alias="expiryDate"),
    issue_date: Optional[date] = Form(default=None, alias="issueDate"),
    document_name: Optional[str] = Form(default=None, alias="documentName"),
    db: AsyncSession = Depends(get_db),
    file_store: FileStore = Depends(get_file_store),
):
    # Read one byte past the cap so oversized files are detected without buffering them whole
    limit = get_settings().DOCUMENT_MAX_BYTES
    data = await file.read(limit + 1)
    upload = UploadedFile(filename=file.filename or "upload", content_type=file.content_type, data=data)
    document = await DocumentService.upload_document(
        db,
        registration_id,
        document_type,
        upload,
        expiry_date=expiry_date,
        issue_date=issue_date,
        document_name=document_name,
        file_store=file_store,
    )
    return DocumentOut.model_validate(document)


@applicant_router.get("/{registration_id}/documents", response_model=List[DocumentOut])
async def list_documents(registration_id: str, db: AsyncSession = Depends(get_db)):
    documents = await DocumentService.list_documents(db, registration_id)
    return [DocumentOut.model_validate(d) for d in documents]


@applicant_router.delete("/{registration_id}/documents/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_document(
    registration_id: str,
    document_id: str,
    db: AsyncSession = Depends(get_db),
    file_store: FileStore = Depends(get_file_store),
):
    await DocumentService.delete_document(db, registration_id, document_id, file_store=file_store)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@admin_router.post("/expire", response_model=ExpireDocumentsResponse)
async def expire_documents(
    payload: Optional[ExpireDocumentsRequest] = None,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(require_roles(ADMIN)),
):
    as_of = payload.as_of if payload else None
    expired = await DocumentService.expire_documents(db, actor.id, as_of)
    return ExpireDocumentsResponse(expired=len(expired), document_ids=[d.id for d in expired])


@admin_router.post("/{document_id}/verify", response_model=DocumentOut)
async def verify_document(
    document_id: str,
    payload: Optional[DocumentDecision] = None,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(require_roles(ADMIN, STAFF)),
):
    notes = payload.notes if payload else None
    document = await DocumentService.verify_document(db, document_id, actor.id, notes)
    return DocumentOut.model_validate(document)


@admin_router.post("/{document_id}/reject", response_model=DocumentOut)
async def reject_document(
    document_id: str,
    payload: DocumentDecision,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(require_roles(ADMIN, STAFF)),
):
    document = await DocumentService.reject_document(db, document_id, actor.id, payload.notes or "")
    return DocumentOut.model_validate(document)


@admin_router.get("/{document_id}/content")
async def get_document_content(
    document_id: str,
    db: AsyncSession = Depends(get_db),
    file_store: FileStore = Depends(get_file_store),
    actor: Actor = Depends(require_roles(ADMIN, STAFF)),
):
    """
    Stream the stored file back for in-browser preview.
    """
    document, data = await DocumentService.fetch_document_content(db, document_id, file_store)
    safe_name = document.document_name.replace('"', "")
    return Response(
        content=data,
        media_type=document.mime_type,
        headers={"Content-Disposition": f'inline; filename="{safe_name}"'},
    )
