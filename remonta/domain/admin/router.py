"""Admin router - Back-office endpoints for contractor search, compliance review and publishing"""

import logging

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from ...auth import get_current_admin
from ...database import get_db
from ...models import User
from ...services.expiry_automation import expire_documents
from ...utils.storage import R2DocumentStorage, get_storage
from .filters import parse_filter_params
from .schemas import (
    ContractorSearchResponse,
    ExpiryUpdate,
    PublishResponse,
    PublishUpdate,
    RejectRequest,
    StatusResponse,
    StatusUpdate,
)
from .service import AdminService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])


def get_admin_service(
    db: Session = Depends(get_db), storage: R2DocumentStorage = Depends(get_storage)
) -> AdminService:
    """Dependency injection for AdminService"""
    return AdminService(db, storage)


# ============================================================================
# CONTRACTORS
# ============================================================================


@router.get("/contractors", response_model=ContractorSearchResponse)
async def search_contractors(
    request: Request,
    admin: User = Depends(get_current_admin),
    service: AdminService = Depends(get_admin_service),
):
    """
    Search workers with advanced filtering

    Query params: page, pageSize, search, sortBy, sortOrder, location, within,
    typeOfSupport, gender, age, and comma lists for languages,
    therapeuticSubcategories, documentCategories, documentStatuses,
    requirementTypes.
    """
    params = parse_filter_params(request.query_params)
    return await service.search_contractors(params)


@router.get("/contractors/inactive")
async def list_inactive_contractors(
    page: int = Query(1),
    pageSize: int = Query(20),
    admin: User = Depends(get_current_admin),
    service: AdminService = Depends(get_admin_service),
):
    return service.list_inactive_contractors(page, pageSize)


@router.get("/contractors/{worker_id}")
async def get_contractor(
    worker_id: str,
    admin: User = Depends(get_current_admin),
    service: AdminService = Depends(get_admin_service),
):
    return service.get_contractor(worker_id)


@router.patch("/contractors/{worker_id}/status", response_model=StatusResponse)
async def update_contractor_status(
    worker_id: str,
    data: StatusUpdate,
    admin: User = Depends(get_current_admin),
    service: AdminService = Depends(get_admin_service),
):
    """Activate or suspend a worker's account"""
    return service.set_account_status(admin, worker_id, data.isActive)


# ============================================================================
# DOCUMENT REVIEW
# ============================================================================


@router.get("/contractors/{worker_id}/compliance")
async def get_contractor_compliance(
    worker_id: str,
    admin: User = Depends(get_current_admin),
    service: AdminService = Depends(get_admin_service),
):
    return service.get_contractor_compliance(worker_id)


@router.post("/contractors/{worker_id}/compliance/{document_id}/approve")
async def approve_document(
    worker_id: str,
    document_id: str,
    admin: User = Depends(get_current_admin),
    service: AdminService = Depends(get_admin_service),
):
    return service.approve_document(admin, worker_id, document_id)


@router.post("/contractors/{worker_id}/compliance/{document_id}/reject")
async def reject_document(
    worker_id: str,
    document_id: str,
    data: RejectRequest,
    admin: User = Depends(get_current_admin),
    service: AdminService = Depends(get_admin_service),
):
    return service.reject_document(admin, worker_id, document_id, data.reason)


@router.post("/contractors/{worker_id}/compliance/{document_id}/reset")
async def reset_document(
    worker_id: str,
    document_id: str,
    admin: User = Depends(get_current_admin),
    service: AdminService = Depends(get_admin_service),
):
    """Move an approved or rejected document back to review"""
    return service.reset_document(admin, worker_id, document_id)


@router.post("/contractors/{worker_id}/compliance/{document_id}/update-expiry")
async def update_document_expiry(
    worker_id: str,
    document_id: str,
    data: ExpiryUpdate,
    admin: User = Depends(get_current_admin),
    service: AdminService = Depends(get_admin_service),
):
    return service.update_document_expiry(admin, worker_id, document_id, data.expiresAt)


# ============================================================================
# COMPLIANCE QUEUES
# ============================================================================


@router.get("/compliance/pending")
async def list_pending_compliance(
    admin: User = Depends(get_current_admin),
    service: AdminService = Depends(get_admin_service),
):
    """Unpublished workers with documents waiting on review"""
    return service.list_pending_compliance()


@router.get("/compliance/compliant")
async def list_compliant_workers(
    admin: User = Depends(get_current_admin),
    service: AdminService = Depends(get_admin_service),
):
    return service.list_compliant_workers()


@router.post("/compliance/expire")
async def run_document_expiry(
    admin: User = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    """Expire documents now instead of waiting for the nightly job"""
    logger.info(f"⏰ Document expiry triggered by admin {admin.id}")
    return expire_documents(db)


@router.post("/compliance/{worker_id}/publish", response_model=PublishResponse)
async def publish_worker(
    worker_id: str,
    data: PublishUpdate,
    admin: User = Depends(get_current_admin),
    service: AdminService = Depends(get_admin_service),
):
    return service.set_published(admin, worker_id, data.isPublished)


# ============================================================================
# FILTER OPTIONS
# ============================================================================


@router.get("/filters")
async def get_filter_options(
    admin: User = Depends(get_current_admin),
    service: AdminService = Depends(get_admin_service),
):
    """Filter options built from the data actually stored"""
    return service.get_filter_options()
