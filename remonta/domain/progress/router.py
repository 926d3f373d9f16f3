"""Progress router - Worker setup progress endpoints"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_worker
from ...database import get_db
from ...models import User
from .schemas import (
    CurrentSectionUpdate,
    SectionCompletionResponse,
    SectionCompletionUpdate,
    SetupProgressResponse,
)
from .service import ProgressService

router = APIRouter(prefix="/worker/setup-progress", tags=["Setup Progress"])


def get_progress_service(db: Session = Depends(get_db)) -> ProgressService:
    """Dependency injection for ProgressService"""
    return ProgressService(db)


@router.get("", response_model=SetupProgressResponse)
async def get_setup_progress(
    current_user: User = Depends(get_current_worker),
    service: ProgressService = Depends(get_progress_service),
):
    """Current section, section flags, verification status and percentage"""
    return service.get_setup_progress(current_user)


@router.put("/current-section")
async def update_current_section(
    data: CurrentSectionUpdate,
    current_user: User = Depends(get_current_worker),
    service: ProgressService = Depends(get_progress_service),
):
    return service.update_current_section(current_user, data.section)


@router.put("/sections/{section}", response_model=SectionCompletionResponse)
async def update_section_completion(
    section: str,
    data: SectionCompletionUpdate,
    current_user: User = Depends(get_current_worker),
    service: ProgressService = Depends(get_progress_service),
):
    """Mark a section complete or incomplete"""
    return service.update_section_completion(current_user, section, data.completed)


@router.post("/refresh", response_model=SetupProgressResponse)
async def refresh_setup_progress(
    current_user: User = Depends(get_current_worker),
    service: ProgressService = Depends(get_progress_service),
):
    """Recompute every section from the worker's current data"""
    return service.refresh_all(current_user)
