"""Admin domain schemas - Search parameters and review payloads"""

from typing import Literal, Optional

from pydantic import BaseModel, StrictBool, field_validator


class ContractorSearchParams(BaseModel):
    """Parsed query string of the contractor search"""

    page: int = 1
    pageSize: int = 20
    search: Optional[str] = None
    sortBy: str = "createdAt"
    sortOrder: Literal["asc", "desc"] = "desc"
    location: Optional[str] = None
    typeOfSupport: Optional[str] = None
    gender: Optional[str] = None
    age: Optional[str] = None
    within: str = "none"
    languages: list[str] = []
    therapeuticSubcategories: list[str] = []
    documentCategories: list[str] = []
    documentStatuses: list[str] = []
    requirementTypes: list[str] = []


class RejectRequest(BaseModel):
    reason: Optional[str] = None


class ExpiryUpdate(BaseModel):
    """ISO date or datetime; null or blank clears the expiry"""

    expiresAt: Optional[str] = None

    @field_validator("expiresAt")
    @classmethod
    def blank_to_none(cls, v):
        if v is not None and not v.strip():
            return None
        return v


class PublishUpdate(BaseModel):
    isPublished: StrictBool


class StatusUpdate(BaseModel):
    isActive: StrictBool


class PaginationInfo(BaseModel):
    total: int
    page: int
    pageSize: int
    totalPages: int
    hasNext: bool
    hasPrev: bool


class ContractorSearchResponse(BaseModel):
    data: list[dict]
    pagination: PaginationInfo
    appliedFilters: dict


class StatusResponse(BaseModel):
    userId: str
    isActive: bool


class PublishResponse(BaseModel):
    id: str
    isPublished: bool
