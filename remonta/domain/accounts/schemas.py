"""Account domain schemas - Registration and login payloads"""

from typing import Literal, Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_au_mobile, validate_email, validate_password

FundingType = Literal["NDIS", "AGED_CARE", "INSURANCE", "PRIVATE", "OTHER"]
RelationshipType = Literal["PARENT", "LEGAL_GUARDIAN", "SPOUSE_PARTNER", "CHILDREN", "OTHER"]


class SubCategorySelection(BaseModel):
    id: str
    name: str


class ServiceCategorySelection(BaseModel):
    categoryName: str
    subCategories: list[SubCategorySelection] = []


class AccountFields(BaseModel):
    """Fields shared by every registration form"""

    email: str
    password: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return validate_email(v)

    @field_validator("password")
    @classmethod
    def check_password(cls, v):
        return validate_password(v)


class PersonFields(AccountFields):
    firstName: str
    lastName: str
    mobile: str

    @field_validator("firstName", "lastName")
    @classmethod
    def require_name(cls, v):
        if not v or not v.strip():
            raise ValueError("Name is required")
        return v.strip()

    @field_validator("mobile")
    @classmethod
    def validate_mobile(cls, v):
        return validate_au_mobile(v)


class ClientRegistration(PersonFields):
    """Schema for a client (self-managed or representative) registration"""

    isSelfManaged: bool
    fundingType: FundingType
    relationshipToClient: RelationshipType = "OTHER"
    dateOfBirth: Optional[str] = None
    clientFirstName: Optional[str] = None
    clientLastName: Optional[str] = None
    servicesRequested: dict[str, ServiceCategorySelection] = {}
    additionalInfo: Optional[str] = None
    location: str
    consent: Literal[True]

    @field_validator("location")
    @classmethod
    def require_location(cls, v):
        if not v or not v.strip():
            raise ValueError("Location is required")
        return v.strip()


class CoordinatorRegistration(PersonFields):
    """Schema for a support coordinator registering on behalf of a participant"""

    organization: Optional[str] = None
    clientTypes: list[str]
    clientFirstName: str
    clientLastName: str
    clientDateOfBirth: str
    servicesRequested: dict[str, ServiceCategorySelection] = {}
    additionalInfo: Optional[str] = None
    location: str
    consent: Literal[True]

    @field_validator("clientTypes")
    @classmethod
    def require_client_type(cls, v):
        if not v:
            raise ValueError("Please select at least one client type")
        return v

    @field_validator("clientFirstName", "clientLastName", "clientDateOfBirth", "location")
    @classmethod
    def require_value(cls, v):
        if not v or not v.strip():
            raise ValueError("This field is required")
        return v.strip()


class WorkerServiceSelection(BaseModel):
    categoryId: str
    subcategoryId: Optional[str] = None


class WorkerRegistration(PersonFields):
    """Schema for a worker (contractor) registration"""

    location: Optional[str] = None
    age: Optional[int] = None
    dateOfBirth: Optional[str] = None
    gender: Optional[str] = None
    languages: list[str] = []
    photos: list[str] = []
    introduction: Optional[str] = None
    experience: Optional[str] = None
    hasVehicle: bool = False
    services: list[WorkerServiceSelection] = []


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return (v or "").strip().lower()


class UserResponse(BaseModel):
    id: str
    email: str
    role: str
    status: str

    class Config:
        from_attributes = True


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse
