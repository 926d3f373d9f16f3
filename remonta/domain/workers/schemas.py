"""Worker domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import normalize_abn, to_title_case, validate_au_mobile


class WorkerProfileUpdate(BaseModel):
    """Schema for updating the worker's own profile (all fields optional)"""

    firstName: Optional[str] = None
    lastName: Optional[str] = None
    mobile: Optional[str] = None
    location: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postalCode: Optional[str] = None
    age: Optional[int] = None
    dateOfBirth: Optional[str] = None
    gender: Optional[str] = None
    languages: Optional[list[str]] = None
    photos: Optional[list[str]] = None
    introduction: Optional[str] = None
    experience: Optional[str] = None
    hasVehicle: Optional[bool] = None

    @field_validator("mobile")
    @classmethod
    def validate_mobile(cls, v):
        if v is not None:
            return validate_au_mobile(v)
        return v

    @field_validator("gender")
    @classmethod
    def normalize_gender(cls, v):
        if v:
            return to_title_case(v.strip())
        return v

    @field_validator("age")
    @classmethod
    def validate_age(cls, v):
        if v is not None and (v < 0 or v > 120):
            raise ValueError("Age must be between 0 and 120")
        return v


class AdditionalInfoUpdate(BaseModel):
    languages: Optional[list[str]] = None
    culturalBackground: Optional[str] = None
    religion: Optional[str] = None
    interests: Optional[list[str]] = None
    personality: Optional[str] = None


class AbnUpdate(BaseModel):
    """ABN is optional; blank clears it"""

    abn: Optional[str] = None

    @field_validator("abn")
    @classmethod
    def validate_abn(cls, v):
        return normalize_abn(v)


class ServiceToggle(BaseModel):
    categoryId: str
    subcategoryId: Optional[str] = None


class BulkServiceUpdate(BaseModel):
    categoryId: str
    subcategoryIds: list[str] = []


class SubcategoryRef(BaseModel):
    id: str
    name: str


class WorkerServiceGroup(BaseModel):
    categoryId: str
    categoryName: str
    subcategories: list[SubcategoryRef] = []


class ServiceToggleResponse(BaseModel):
    action: str
    services: list[WorkerServiceGroup]


class WorkerProfileResponse(BaseModel):
    """Schema for the worker's profile"""

    id: str
    userId: str
    email: Optional[str] = None
    firstName: str
    lastName: str
    mobile: str
    location: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postalCode: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    age: Optional[int] = None
    dateOfBirth: Optional[str] = None
    gender: Optional[str] = None
    languages: list[str] = []
    photos: list[str] = []
    introduction: Optional[str] = None
    experience: Optional[str] = None
    abn: Optional[str] = None
    hasVehicle: bool = False
    isPublished: bool = False
    verificationStatus: str
    setupProgress: dict
    additionalInfo: Optional[dict] = None
    createdAt: Optional[datetime] = None
