"""Compliance service - Worker compliance document upload, listing and deletion"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import (
    RequirementStatus,
    User,
    VerificationRequirement,
    VerificationStatus,
    WorkerProfile,
    utcnow,
)
from ...shared.validators import parse_datetime
from ...utils.storage import R2DocumentStorage, build_document_key, validate_document_file
from ..progress.service import refresh_progress
from .document_types import get_document_config
from .repository import ComplianceRepository

logger = logging.getLogger(__name__)

COMPLIANCE_SECTIONS = ["compliance", "trainings"]


def format_requirement(requirement: VerificationRequirement, storage: R2DocumentStorage) -> dict:
    """Worker-facing view of a stored document"""
    return {
        "id": requirement.id,
        "requirementType": requirement.requirement_type,
        "requirementName": requirement.requirement_name,
        "documentCategory": requirement.document_category,
        "isRequired": requirement.is_required,
        "status": requirement.status,
        "documentUrl": storage.presigned_url(requirement.document_url),
        "documentUploadedAt": requirement.document_uploaded_at,
        "submittedAt": requirement.submitted_at,
        "reviewedAt": requirement.reviewed_at,
        "approvedAt": requirement.approved_at,
        "rejectedAt": requirement.rejected_at,
        "rejectionReason": requirement.rejection_reason,
        "expiresAt": requirement.expires_at,
        "metadata": requirement.meta,
    }


def mark_resubmitted(requirement: VerificationRequirement, key: str, now) -> None:
    """A fresh upload goes back to SUBMITTED and loses its previous review"""
    requirement.document_url = key
    requirement.document_uploaded_at = now
    requirement.status = RequirementStatus.SUBMITTED
    requirement.submitted_at = now
    requirement.reviewed_at = None
    requirement.reviewed_by = None
    requirement.approved_at = None
    requirement.rejected_at = None
    requirement.rejection_reason = None


class ComplianceService:
    """Service layer for compliance documents"""

    def __init__(self, db: Session, storage: R2DocumentStorage):
        self.db = db
        self.storage = storage
        self.repo = ComplianceRepository()

    def _get_profile(self, user: User) -> WorkerProfile:
        profile = self.repo.get_profile_by_user_id(self.db, user.id)
        if not profile:
            raise HTTPException(status_code=404, detail="Worker profile not found")
        return profile

    def upload_to_storage(self, content: bytes, key: str, content_type: str) -> None:
        try:
            self.storage.upload(content, key, content_type)
        except Exception as e:
            logger.error(f"❌ Failed to upload document {key}: {e}")
            raise HTTPException(status_code=500, detail="Failed to upload document") from e

    def delete_from_storage(self, key: Optional[str]) -> None:
        """Remove a blob; failures are logged and never block the row deletion"""
        if not key:
            return
        try:
            self.storage.delete(key)
        except Exception as e:
            logger.warning(f"⚠️ Failed to delete blob {key}: {e}")

    def upload_compliance_document(
        self,
        user: User,
        filename: str,
        content: bytes,
        content_type: Optional[str],
        document_type: Optional[str],
        document_name: Optional[str] = None,
        expiry_date: Optional[str] = None,
    ) -> dict:
        """
        Store a compliance document and upsert its requirement row.

        The worker is moved to PENDING_REVIEW in the same transaction; the
        compliance and trainings sections are recomputed afterwards.
        """
        error = validate_document_file(len(content or b""), content_type)
        if error:
            raise HTTPException(status_code=400, detail=error)
        if not document_type or not document_type.strip():
            raise HTTPException(status_code=400, detail="Document type is required")
        document_type = document_type.strip()

        expires_at = parse_datetime(expiry_date)
        if expiry_date and expiry_date.strip() and expires_at is None:
            raise HTTPException(status_code=422, detail="Invalid expiry date")

        profile = self._get_profile(user)
        config = get_document_config(document_type, document_name)

        key = build_document_key(config["folder"], user.id, document_type, filename)
        logger.info(f"📤 Uploading {document_type} for worker {profile.id}")
        self.upload_to_storage(content, key, content_type)

        now = utcnow()
        requirement = self.repo.get_by_type(self.db, profile.id, document_type)
        try:
            if requirement:
                old_key = requirement.document_url
                mark_resubmitted(requirement, key, now)
                requirement.expires_at = expires_at
            else:
                old_key = None
                requirement = VerificationRequirement(
                    worker_profile_id=profile.id,
                    requirement_type=document_type,
                    requirement_name=(document_name or "").strip() or config["name"],
                    document_category=config["category"],
                    is_required=config["isRequired"],
                    status=RequirementStatus.SUBMITTED,
                    document_url=key,
                    document_uploaded_at=now,
                    submitted_at=now,
                    expires_at=expires_at,
                )
                self.db.add(requirement)

            profile.verification_status = VerificationStatus.PENDING_REVIEW
            self.db.commit()
            self.db.refresh(requirement)
        except Exception:
            self.db.rollback()
            self.delete_from_storage(key)
            raise

        if old_key and old_key != key:
            self.delete_from_storage(old_key)

        refresh_progress(self.db, profile, COMPLIANCE_SECTIONS)
        logger.info(f"✅ Saved {document_type} ({requirement.id}) for worker {profile.id}")

        return {
            "id": requirement.id,
            "documentUrl": self.storage.presigned_url(key),
            "documentType": document_type,
            "documentName": requirement.requirement_name,
            "uploadedAt": requirement.document_uploaded_at,
        }

    def delete_compliance_document(self, user: User, document_id: str) -> dict:
        """Delete one of the caller's documents (blob then row) and recompute progress"""
        profile = self._get_profile(user)
        requirement = self.repo.get_for_worker(self.db, profile.id, document_id)
        if not requirement:
            raise HTTPException(status_code=404, detail="Document not found")

        document_type = requirement.requirement_type
        self.delete_from_storage(requirement.document_url)
        self.repo.delete(self.db, requirement)
        logger.info(f"🗑️ Deleted {document_type} for worker {profile.id}")

        refresh_progress(self.db, profile, COMPLIANCE_SECTIONS)
        return {"documentType": document_type}

    def list_worker_documents(self, user: User) -> list[dict]:
        profile = self._get_profile(user)
        return [format_requirement(r, self.storage) for r in self.repo.list_for_worker(self.db, profile.id)]
