"""Compliance router - Worker compliance document endpoints"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session

from ...auth import get_current_worker
from ...database import get_db
from ...models import User
from ...rate_limiter import rate_limit_db_write
from ...utils.storage import R2DocumentStorage, get_storage
from .schemas import DocumentDeleteResponse, DocumentUploadResponse, WorkerDocumentResponse
from .service import ComplianceService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/worker/compliance", tags=["Compliance"])


def get_compliance_service(
    db: Session = Depends(get_db), storage: R2DocumentStorage = Depends(get_storage)
) -> ComplianceService:
    """Dependency injection for ComplianceService"""
    return ComplianceService(db, storage)


@router.post("/documents", response_model=DocumentUploadResponse)
async def upload_compliance_document(
    file: UploadFile = File(...),
    documentType: Optional[str] = Form(None),
    documentName: Optional[str] = Form(None),
    expiryDate: Optional[str] = Form(None),
    current_user: User = Depends(get_current_worker),
    service: ComplianceService = Depends(get_compliance_service),
    _: None = Depends(rate_limit_db_write),
):
    """Upload (or replace) a compliance document"""
    content = await file.read()
    return service.upload_compliance_document(
        current_user,
        filename=file.filename or "document",
        content=content,
        content_type=file.content_type,
        document_type=documentType,
        document_name=documentName,
        expiry_date=expiryDate,
    )


@router.get("/documents", response_model=list[WorkerDocumentResponse])
async def list_worker_documents(
    current_user: User = Depends(get_current_worker),
    service: ComplianceService = Depends(get_compliance_service),
):
    return service.list_worker_documents(current_user)


@router.delete("/documents/{document_id}", response_model=DocumentDeleteResponse)
async def delete_compliance_document(
    document_id: str,
    current_user: User = Depends(get_current_worker),
    service: ComplianceService = Depends(get_compliance_service),
):
    """Delete one of the current worker's documents"""
    return service.delete_compliance_document(current_user, document_id)
