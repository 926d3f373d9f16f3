"""Catalog router - Public service catalog endpoint"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...database import get_db
from .schemas import CategoryResponse
from .service import CatalogService

router = APIRouter(prefix="/categories", tags=["Catalog"])


def get_catalog_service(db: Session = Depends(get_db)) -> CatalogService:
    """Dependency injection for CatalogService"""
    return CatalogService(db)


@router.get("", response_model=list[CategoryResponse])
async def list_categories(service: CatalogService = Depends(get_catalog_service)):
    """Service categories with their document requirements, in display order"""
    return service.list_categories()
