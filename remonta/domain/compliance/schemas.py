"""Compliance domain schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class DocumentUploadResponse(BaseModel):
    id: str
    documentUrl: Optional[str] = None
    documentType: str
    documentName: str
    uploadedAt: Optional[datetime] = None


class DocumentDeleteResponse(BaseModel):
    documentType: str


class WorkerDocumentResponse(BaseModel):
    """A worker's own view of an uploaded document"""

    id: str
    requirementType: str
    requirementName: str
    documentCategory: Optional[str] = None
    isRequired: bool = False
    status: str
    documentUrl: Optional[str] = None
    documentUploadedAt: Optional[datetime] = None
    submittedAt: Optional[datetime] = None
    reviewedAt: Optional[datetime] = None
    approvedAt: Optional[datetime] = None
    rejectedAt: Optional[datetime] = None
    rejectionReason: Optional[str] = None
    expiresAt: Optional[datetime] = None
    metadata: Optional[dict] = None
