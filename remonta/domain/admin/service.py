"""Admin service - Contractor search, compliance review and publishing"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...config import ADMIN_FALLBACK_EMAIL
from ...geocoding import geocode_address
from ...models import (
    RequirementStatus,
    User,
    UserStatus,
    VerificationRequirement,
    WorkerProfile,
    utcnow,
)
from ...shared.validators import calculate_age, parse_datetime
from ...utils.storage import R2DocumentStorage
from ..accounts.repository import AccountRepository
from ..compliance.document_types import DOCUMENT_BUCKETS, categorize_document
from ..compliance.repository import ComplianceRepository
from ..progress.service import refresh_progress
from ..workers.service import format_profile, group_services
from .filters import (
    build_filter_clauses,
    build_order_by,
    build_pagination,
    get_applied_filters,
    get_bounding_box,
    haversine_distance,
    radius_km,
)
from .repository import AdminRepository
from .schemas import ContractorSearchParams

logger = logging.getLogger(__name__)

REVIEW_SECTIONS = ["compliance", "trainings", "services"]

# Identity and ABN documents are not offered as requirement-type filters
FILTER_EXCLUDED_DOCUMENT_IDS = [
    "identity-points-100",
    "identity-passport",
    "identity-birth-certificate",
    "identity-drivers-license",
    "identity-medicare-card",
    "identity-utility-bill",
    "identity-bank-statement",
    "business-abn",
    "abn",
    "abn-contractor",
]

STATUS_COUNT_KEYS = {
    RequirementStatus.PENDING: "pending",
    RequirementStatus.SUBMITTED: "submitted",
    RequirementStatus.APPROVED: "approved",
    RequirementStatus.REJECTED: "rejected",
    RequirementStatus.EXPIRED: "expired",
}


def worker_languages(profile: WorkerProfile) -> list[str]:
    """Additional-info languages when present, otherwise the profile's"""
    if profile.additional_info and profile.additional_info.languages:
        return list(profile.additional_info.languages)
    return list(profile.languages or [])


def worker_age(profile: WorkerProfile) -> Optional[int]:
    age = calculate_age(profile.date_of_birth) if profile.date_of_birth else None
    return age if age is not None else profile.age


def format_worker_row(profile: WorkerProfile) -> dict:
    """Search-result row; the raw date of birth stays internal"""
    return {
        "id": profile.id,
        "userId": profile.user_id,
        "firstName": profile.first_name,
        "lastName": profile.last_name,
        "email": profile.user.email if profile.user else None,
        "mobile": profile.mobile,
        "gender": profile.gender,
        "age": worker_age(profile),
        "languages": worker_languages(profile),
        "services": list(dict.fromkeys(ws.category_name for ws in profile.services)),
        "city": profile.city,
        "state": profile.state,
        "postalCode": profile.postal_code,
        "latitude": profile.latitude,
        "longitude": profile.longitude,
        "experience": profile.experience,
        "introduction": profile.introduction,
        "photos": profile.photos or [],
        "isPublished": profile.is_published,
        "createdAt": profile.created_at,
        "updatedAt": profile.updated_at,
    }


def format_admin_document(requirement: VerificationRequirement, storage: R2DocumentStorage) -> dict:
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
        "reviewedBy": requirement.reviewed_by,
        "approvedAt": requirement.approved_at,
        "rejectedAt": requirement.rejected_at,
        "rejectionReason": requirement.rejection_reason,
        "expiresAt": requirement.expires_at,
        "notes": requirement.notes,
        "metadata": requirement.meta,
        "createdAt": requirement.created_at,
        "updatedAt": requirement.updated_at,
    }


def count_by_status(requirements) -> dict:
    stats = {"total": len(requirements), **{key: 0 for key in STATUS_COUNT_KEYS.values()}}
    for req in requirements:
        key = STATUS_COUNT_KEYS.get(req.status)
        if key:
            stats[key] += 1
    return stats


def format_label(value: str) -> str:
    """WORKING_RIGHTS -> Working Rights"""
    return " ".join(word.capitalize() for word in value.replace("_", " ").split())


class AdminService:
    """Service layer for the admin back-office"""

    def __init__(self, db: Session, storage: R2DocumentStorage):
        self.db = db
        self.storage = storage
        self.repo = AdminRepository()
        self.compliance_repo = ComplianceRepository()

    def _get_worker(self, worker_id: str) -> WorkerProfile:
        worker = self.repo.get_worker(self.db, worker_id)
        if not worker:
            raise HTTPException(status_code=404, detail="Worker not found")
        return worker

    def _get_document(self, worker_id: str, document_id: str) -> VerificationRequirement:
        document = self.compliance_repo.get_for_worker(self.db, worker_id, document_id)
        if not document:
            raise HTTPException(status_code=404, detail="Document not found")
        return document

    def _audit(self, admin: User, action: str, metadata: dict) -> None:
        AccountRepository.add_audit_log(self.db, admin.id, action, metadata)

    def _refresh_worker(self, worker_id: str) -> None:
        worker = self.db.query(WorkerProfile).filter(WorkerProfile.id == worker_id).first()
        if worker:
            refresh_progress(self.db, worker, REVIEW_SECTIONS)

    # ========================================================================
    # SEARCH
    # ========================================================================

    async def search_contractors(self, params: ContractorSearchParams) -> dict:
        """Filtered, paginated contractor search; a location switches to distance search"""
        if params.location and params.location.strip():
            return await self.search_with_distance(params)
        return self.search_standard(params)

    def search_standard(self, params: ContractorSearchParams) -> dict:
        clauses = build_filter_clauses(params)
        offset = (params.page - 1) * params.pageSize
        total, workers = self.repo.search_workers(
            self.db, clauses, build_order_by(params.sortBy, params.sortOrder), offset, params.pageSize
        )
        logger.info(f"🔎 Contractor search: {total} match(es), {len(clauses)} active filter(s)")
        return {
            "data": [format_worker_row(w) for w in workers],
            "pagination": build_pagination(total, params.page, params.pageSize),
            "appliedFilters": get_applied_filters(params),
        }

    async def search_with_distance(self, params: ContractorSearchParams) -> dict:
        """
        Distance search around the geocoded location.

        A bounding box narrows candidates in SQL; the haversine distance then
        drops the box corners and orders results nearest first. Falls back to
        the standard search when the location cannot be geocoded.
        """
        coords = await geocode_address(params.location)
        if not coords:
            logger.warning(f"⚠️ Could not geocode '{params.location}', running standard search")
            return self.search_standard(params.model_copy(update={"within": "none"}))

        radius = radius_km(params.within)
        lat, lng = coords["latitude"], coords["longitude"]
        candidates = self.repo.find_workers_in_box(
            self.db, build_filter_clauses(params), get_bounding_box(lat, lng, radius)
        )

        rows = []
        for worker in candidates:
            distance = haversine_distance(lat, lng, worker.latitude, worker.longitude)
            if distance <= radius:
                row = format_worker_row(worker)
                row["distance"] = distance
                rows.append(row)
        rows.sort(key=lambda r: r["distance"])

        offset = (params.page - 1) * params.pageSize
        logger.info(f"📍 Distance search within {radius}km of '{params.location}': {len(rows)} match(es)")
        return {
            "data": rows[offset:offset + params.pageSize],
            "pagination": build_pagination(len(rows), params.page, params.pageSize),
            "appliedFilters": get_applied_filters(params),
        }

    def list_inactive_contractors(self, page: int, page_size: int) -> dict:
        """Suspended workers, most recently updated first"""
        page = max(1, page)
        page_size = max(1, min(100, page_size))
        total, workers = self.repo.list_suspended_workers(self.db, (page - 1) * page_size, page_size)
        data = []
        for worker in workers:
            row = format_worker_row(worker)
            row["isActive"] = False
            data.append(row)
        return {"data": data, "pagination": build_pagination(total, page, page_size)}

    # ========================================================================
    # WORKER DETAIL
    # ========================================================================

    def get_contractor(self, worker_id: str) -> dict:
        worker = self._get_worker(worker_id)
        detail = format_profile(worker)
        detail["services"] = group_services(worker.services)
        detail["serviceNames"] = list(dict.fromkeys(ws.category_name for ws in worker.services))
        detail["userStatus"] = worker.user.status if worker.user else None
        detail["isActive"] = bool(worker.user and worker.user.status == UserStatus.ACTIVE)
        return detail

    def get_contractor_compliance(self, worker_id: str) -> dict:
        """All of a worker's documents, bucketed for review, with per-status counts"""
        worker = self._get_worker(worker_id)
        requirements = self.compliance_repo.list_for_worker(self.db, worker.id)

        grouped = {bucket: [] for bucket in DOCUMENT_BUCKETS}
        bucket_members = {bucket: [] for bucket in DOCUMENT_BUCKETS}
        documents = []
        for req in requirements:
            bucket = categorize_document(req.requirement_type, req.document_category)
            formatted = format_admin_document(req, self.storage)
            documents.append(formatted)
            grouped[bucket].append(formatted)
            bucket_members[bucket].append(req)

        category_stats = {
            bucket: {
                "total": len(members),
                "approved": sum(1 for r in members if r.status == RequirementStatus.APPROVED),
            }
            for bucket, members in bucket_members.items()
        }

        return {
            "workerId": worker.id,
            "documents": documents,
            "groupedDocuments": grouped,
            "stats": count_by_status(requirements),
            "categoryStats": category_stats,
        }

    # ========================================================================
    # REVIEW ACTIONS
    # ========================================================================

    def approve_document(self, admin: User, worker_id: str, document_id: str) -> dict:
        document = self._get_document(worker_id, document_id)

        if document.status == RequirementStatus.APPROVED:
            return {"message": "Document is already approved", "document": format_admin_document(document, self.storage)}

        if document.status not in (RequirementStatus.SUBMITTED, RequirementStatus.REJECTED):
            raise HTTPException(
                status_code=400, detail=f"Document cannot be approved from {document.status} status"
            )

        now = utcnow()
        document.status = RequirementStatus.APPROVED
        document.approved_at = now
        document.reviewed_at = now
        document.reviewed_by = admin.email or ADMIN_FALLBACK_EMAIL
        document.rejected_at = None
        document.rejection_reason = None
        self.db.commit()
        self.db.refresh(document)

        self._audit(admin, "DOCUMENT_APPROVED", {"workerId": worker_id, "documentId": document_id,
                                                 "requirementType": document.requirement_type})
        self._refresh_worker(worker_id)
        logger.info(f"✅ Document {document_id} approved for worker {worker_id}")
        return {"message": "Document approved successfully", "document": format_admin_document(document, self.storage)}

    def reject_document(self, admin: User, worker_id: str, document_id: str, reason: Optional[str]) -> dict:
        if not reason or not reason.strip():
            raise HTTPException(status_code=400, detail="Rejection reason is required")

        document = self._get_document(worker_id, document_id)

        if document.status == RequirementStatus.REJECTED:
            return {"message": "Document is already rejected", "document": format_admin_document(document, self.storage)}

        if document.status not in (RequirementStatus.SUBMITTED, RequirementStatus.APPROVED):
            raise HTTPException(
                status_code=400, detail=f"Document cannot be rejected from {document.status} status"
            )

        now = utcnow()
        document.status = RequirementStatus.REJECTED
        document.rejected_at = now
        document.reviewed_at = now
        document.reviewed_by = admin.email or ADMIN_FALLBACK_EMAIL
        document.rejection_reason = reason.strip()
        document.approved_at = None
        self.db.commit()
        self.db.refresh(document)

        self._audit(admin, "DOCUMENT_REJECTED", {"workerId": worker_id, "documentId": document_id,
                                                 "reason": document.rejection_reason})
        self._refresh_worker(worker_id)
        logger.info(f"🚫 Document {document_id} rejected for worker {worker_id}")
        return {"message": "Document rejected", "document": format_admin_document(document, self.storage)}

    def reset_document(self, admin: User, worker_id: str, document_id: str) -> dict:
        """Send a reviewed document back to the review queue"""
        document = self._get_document(worker_id, document_id)

        if document.status not in (RequirementStatus.APPROVED, RequirementStatus.REJECTED):
            raise HTTPException(
                status_code=400, detail=f"Document cannot be reset from {document.status} status"
            )

        now = utcnow()
        reviewer = admin.email or ADMIN_FALLBACK_EMAIL
        previous_status = document.status
        note = f"[{now.isoformat()}] Reset to review by {reviewer}"

        document.status = RequirementStatus.SUBMITTED
        document.reviewed_at = now
        document.reviewed_by = reviewer
        document.approved_at = None
        document.rejected_at = None
        document.rejection_reason = None
        document.notes = f"{document.notes}\n{note}" if document.notes else note
        self.db.commit()
        self.db.refresh(document)

        self._audit(admin, "DOCUMENT_RESET", {"workerId": worker_id, "documentId": document_id,
                                              "previousStatus": previous_status})
        self._refresh_worker(worker_id)
        logger.info(f"🔄 Document {document_id} reset to review ({previous_status} -> SUBMITTED)")
        return {"message": "Document reset to review", "document": format_admin_document(document, self.storage)}

    def update_document_expiry(self, admin: User, worker_id: str, document_id: str,
                               expires_at: Optional[str]) -> dict:
        document = self._get_document(worker_id, document_id)

        expiry = None
        if expires_at:
            expiry = parse_datetime(expires_at)
            if expiry is None:
                raise HTTPException(status_code=422, detail="Invalid expiry date")

        document.expires_at = expiry
        self.db.commit()
        self.db.refresh(document)

        self._audit(admin, "DOCUMENT_EXPIRY_UPDATED", {
            "workerId": worker_id,
            "documentId": document_id,
            "expiresAt": expiry.isoformat() if expiry else None,
        })
        logger.info(f"📅 Expiry for document {document_id} set to {expiry}")
        return {
            "id": document.id,
            "requirementName": document.requirement_name,
            "expiresAt": document.expires_at,
            "updatedAt": document.updated_at,
        }

    # ========================================================================
    # QUEUES & PUBLISHING
    # ========================================================================

    def list_pending_compliance(self) -> dict:
        """Unpublished workers waiting on review, busiest and longest-waiting first"""
        workers = []
        for worker in self.repo.list_pending_workers(self.db):
            submitted = sorted(
                (r for r in worker.requirements if r.status == RequirementStatus.SUBMITTED),
                key=lambda r: r.submitted_at or r.created_at,
                reverse=True,
            )
            workers.append({
                "id": worker.id,
                "firstName": worker.first_name,
                "lastName": worker.last_name,
                "email": worker.user.email if worker.user else None,
                "mobile": worker.mobile,
                "photos": worker.photos or [],
                "isPublished": worker.is_published,
                "createdAt": worker.created_at,
                "totalDocuments": len(worker.requirements),
                "submittedCount": len(submitted),
                "submittedDocuments": [
                    {
                        "id": r.id,
                        "requirementName": r.requirement_name,
                        "requirementType": r.requirement_type,
                        "submittedAt": r.submitted_at,
                    }
                    for r in submitted
                ],
                "oldestSubmission": submitted[-1].submitted_at if submitted else None,
                "newestSubmission": submitted[0].submitted_at if submitted else None,
            })

        # Missing submission times sort last within the same count
        workers.sort(key=lambda w: (
            -w["submittedCount"],
            w["oldestSubmission"] is None,
            w["oldestSubmission"] or utcnow(),
        ))
        return {
            "workers": workers,
            "total": len(workers),
            "totalSubmittedDocuments": sum(w["submittedCount"] for w in workers),
        }

    def list_compliant_workers(self) -> dict:
        workers = [
            {
                "id": worker.id,
                "firstName": worker.first_name,
                "lastName": worker.last_name,
                "email": worker.user.email if worker.user else None,
                "mobile": worker.mobile,
                "photos": worker.photos or [],
                "isPublished": worker.is_published,
                "createdAt": worker.created_at,
                "publishedAt": worker.updated_at,
                "totalDocuments": len(worker.requirements),
                "approvedDocuments": sum(1 for r in worker.requirements if r.status == RequirementStatus.APPROVED),
            }
            for worker in self.repo.list_published_workers(self.db)
        ]
        return {"workers": workers, "total": len(workers)}

    def set_published(self, admin: User, worker_id: str, is_published: bool) -> dict:
        worker = self._get_worker(worker_id)
        worker.is_published = is_published
        self.db.commit()
        self._audit(admin, "WORKER_PUBLISHED" if is_published else "WORKER_UNPUBLISHED", {"workerId": worker_id})
        logger.info(f"📢 Worker {worker_id} {'published' if is_published else 'unpublished'}")
        return {"id": worker.id, "isPublished": worker.is_published}

    def set_account_status(self, admin: User, worker_id: str, is_active: bool) -> dict:
        """Activate or suspend the worker's user account"""
        worker = self._get_worker(worker_id)
        user = worker.user
        user.status = UserStatus.ACTIVE if is_active else UserStatus.SUSPENDED
        self.db.commit()
        self._audit(admin, "ACCOUNT_STATUS_CHANGED", {"workerId": worker_id, "status": user.status})
        logger.info(f"🔐 User {user.id} status set to {user.status}")
        return {"userId": user.id, "isActive": user.status == UserStatus.ACTIVE}

    # ========================================================================
    # FILTER OPTIONS
    # ========================================================================

    def get_filter_options(self) -> dict:
        stats = self.repo.submission_stats(self.db)
        with_docs = stats["profilesWithDocuments"]
        without_docs = stats["totalProfiles"] - with_docs

        def submission_filter(value: str, label: str, count: int) -> dict:
            return {"value": value, "label": f"{label} ({count})", "count": count}

        return {
            "documentCategories": [
                {"value": category, "label": format_label(category)}
                for category in self.repo.distinct_document_categories(self.db)
            ],
            "documentStatuses": [
                {"value": status, "label": status.capitalize()}
                for status in self.repo.distinct_requirement_statuses(self.db)
            ],
            "requirementTypes": [
                {"value": doc.id, "label": doc.name, "category": doc.category}
                for doc in self.repo.list_documents_excluding(self.db, FILTER_EXCLUDED_DOCUMENT_IDS)
            ],
            "documentSubmissionFilters": [
                submission_filter("has_documents", "Has Documents", with_docs),
                submission_filter("no_documents", "No Documents", without_docs),
                submission_filter("all_approved", "All Approved", stats["profilesWithAllApproved"]),
                submission_filter("any_rejected", "Has Rejected", stats["profilesWithAnyRejected"]),
                submission_filter("pending_review", "Pending Review", stats["profilesWithPending"]),
            ],
            "stats": stats,
        }
