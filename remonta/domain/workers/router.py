"""Worker router - Endpoints for the worker's own profile, services and service documents"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.orm import Session

from ...auth import get_current_worker
from ...database import get_db
from ...models import User
from ...rate_limiter import rate_limit_db_write
from ...utils.storage import R2DocumentStorage, get_storage
from .schemas import (
    AbnUpdate,
    AdditionalInfoUpdate,
    BulkServiceUpdate,
    ServiceToggle,
    ServiceToggleResponse,
    WorkerProfileResponse,
    WorkerProfileUpdate,
    WorkerServiceGroup,
)
from .service import WorkerProfileService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/worker", tags=["Worker"])


def get_worker_service(
    db: Session = Depends(get_db), storage: R2DocumentStorage = Depends(get_storage)
) -> WorkerProfileService:
    """Dependency injection for WorkerProfileService"""
    return WorkerProfileService(db, storage)


# ============================================================================
# PROFILE
# ============================================================================


@router.get("/profile", response_model=WorkerProfileResponse)
async def get_profile(
    current_user: User = Depends(get_current_worker),
    service: WorkerProfileService = Depends(get_worker_service),
):
    return service.get_profile(current_user)


@router.patch("/profile", response_model=WorkerProfileResponse)
async def update_profile(
    data: WorkerProfileUpdate,
    current_user: User = Depends(get_current_worker),
    service: WorkerProfileService = Depends(get_worker_service),
    _: None = Depends(rate_limit_db_write),
):
    """Update profile fields; a new location is geocoded"""
    return await service.update_profile(current_user, data)


@router.put("/additional-info")
async def update_additional_info(
    data: AdditionalInfoUpdate,
    current_user: User = Depends(get_current_worker),
    service: WorkerProfileService = Depends(get_worker_service),
):
    return service.update_additional_info(current_user, data)


@router.put("/abn")
async def update_abn(
    data: AbnUpdate,
    current_user: User = Depends(get_current_worker),
    service: WorkerProfileService = Depends(get_worker_service),
):
    """Save the worker's ABN (blank clears it)"""
    return service.update_abn(current_user, data.abn)


# ============================================================================
# SERVICES
# ============================================================================


@router.get("/services", response_model=list[WorkerServiceGroup])
async def list_services(
    current_user: User = Depends(get_current_worker),
    service: WorkerProfileService = Depends(get_worker_service),
):
    return service.list_services(current_user)


@router.post("/services/toggle", response_model=ServiceToggleResponse)
async def toggle_service(
    data: ServiceToggle,
    current_user: User = Depends(get_current_worker),
    service: WorkerProfileService = Depends(get_worker_service),
):
    """Add or remove a single category/subcategory"""
    return service.toggle_service(current_user, data.categoryId, data.subcategoryId)


@router.put("/services/bulk", response_model=list[WorkerServiceGroup])
async def bulk_update_services(
    data: BulkServiceUpdate,
    current_user: User = Depends(get_current_worker),
    service: WorkerProfileService = Depends(get_worker_service),
):
    """Replace the worker's subcategory selection for one category"""
    return service.bulk_update_services(current_user, data.categoryId, data.subcategoryIds)


# ============================================================================
# SERVICE DOCUMENTS
# ============================================================================


@router.get("/service-requirements")
async def get_service_requirements(
    serviceTitle: Optional[str] = Query(None),
    current_user: User = Depends(get_current_worker),
    service: WorkerProfileService = Depends(get_worker_service),
):
    """Document rules for a service plus what the worker has uploaded for it"""
    return service.get_service_requirements(current_user, serviceTitle)


@router.post("/service-documents")
async def upload_service_document(
    file: UploadFile = File(...),
    serviceTitle: Optional[str] = Form(None),
    requirementType: Optional[str] = Form(None),
    current_user: User = Depends(get_current_worker),
    service: WorkerProfileService = Depends(get_worker_service),
    _: None = Depends(rate_limit_db_write),
):
    content = await file.read()
    return service.upload_service_document(
        current_user,
        filename=file.filename or "document",
        content=content,
        content_type=file.content_type,
        service_title=serviceTitle,
        requirement_type=requirementType,
    )


@router.delete("/service-documents")
async def delete_service_document(
    requirementType: Optional[str] = Query(None),
    current_user: User = Depends(get_current_worker),
    service: WorkerProfileService = Depends(get_worker_service),
):
    """Delete a service document by its stored requirement type"""
    return service.delete_service_document(current_user, requirementType)
