import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from .database import Base


def generate_id():
    """Generate a string UUID primary key"""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Naive UTC timestamp, matching how DateTime columns are stored"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


# Enumerations are stored as plain strings
class UserRole:
    WORKER = "WORKER"
    CLIENT = "CLIENT"
    COORDINATOR = "COORDINATOR"
    ADMIN = "ADMIN"


class UserStatus:
    ACTIVE = "ACTIVE"
    SUSPENDED = "SUSPENDED"


class VerificationStatus:
    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    PENDING_REVIEW = "PENDING_REVIEW"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class RequirementStatus:
    PENDING = "PENDING"
    SUBMITTED = "SUBMITTED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    EXPIRED = "EXPIRED"


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=generate_id)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, index=True)  # WORKER, CLIENT, COORDINATOR, ADMIN
    status = Column(String(20), default=UserStatus.ACTIVE, nullable=False)  # ACTIVE, SUSPENDED
    last_login_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    worker_profile = relationship(
        "WorkerProfile", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )
    client_profile = relationship(
        "ClientProfile", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )
    coordinator_profile = relationship(
        "CoordinatorProfile", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )
    participants = relationship("Participant", back_populates="user", cascade="all, delete-orphan")
    service_requests = relationship(
        "ServiceRequest", back_populates="requester", cascade="all, delete-orphan"
    )


class WorkerProfile(Base):
    __tablename__ = "worker_profiles"

    id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(String(36), ForeignKey("users.id"), unique=True, nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    mobile = Column(String(20), nullable=False)
    location = Column(String(255), nullable=True)  # Free text as entered at registration
    city = Column(String(100), nullable=True)
    state = Column(String(50), nullable=True)
    postal_code = Column(String(10), nullable=True)
    latitude = Column(Float, nullable=True, index=True)
    longitude = Column(Float, nullable=True, index=True)
    age = Column(Integer, nullable=True)
    date_of_birth = Column(String(20), nullable=True)  # ISO date string, preferred over age
    gender = Column(String(50), nullable=True)  # Title Case: Male, Female
    languages = Column(JSON, default=list)
    photos = Column(JSON, default=list)  # R2 keys
    introduction = Column(Text, nullable=True)
    experience = Column(Text, nullable=True)
    abn = Column(String(20), nullable=True)
    has_vehicle = Column(Boolean, default=False)
    is_published = Column(Boolean, default=False, nullable=False)
    verification_status = Column(String(20), default=VerificationStatus.NOT_STARTED, nullable=False)
    setup_progress = Column(JSON, nullable=True)
    current_setup_section = Column(String(50), nullable=True)
    created_at = Column(DateTime, default=utcnow, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    user = relationship("User", back_populates="worker_profile")
    additional_info = relationship(
        "WorkerAdditionalInfo", back_populates="worker_profile", uselist=False, cascade="all, delete-orphan"
    )
    services = relationship("WorkerService", back_populates="worker_profile", cascade="all, delete-orphan")
    requirements = relationship(
        "VerificationRequirement", back_populates="worker_profile", cascade="all, delete-orphan"
    )


class WorkerAdditionalInfo(Base):
    __tablename__ = "worker_additional_info"

    id = Column(String(36), primary_key=True, default=generate_id)
    worker_profile_id = Column(String(36), ForeignKey("worker_profiles.id"), unique=True, nullable=False)
    languages = Column(JSON, default=list)
    cultural_background = Column(String(255), nullable=True)
    religion = Column(String(100), nullable=True)
    interests = Column(JSON, default=list)
    personality = Column(Text, nullable=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    worker_profile = relationship("WorkerProfile", back_populates="additional_info")


class WorkerService(Base):
    __tablename__ = "worker_services"
    __table_args__ = (
        UniqueConstraint(
            "worker_profile_id", "category_id", "subcategory_id", name="uq_worker_service"
        ),
    )

    id = Column(String(36), primary_key=True, default=generate_id)
    worker_profile_id = Column(String(36), ForeignKey("worker_profiles.id"), nullable=False, index=True)
    category_id = Column(String(100), nullable=False, index=True)
    category_name = Column(String(255), nullable=False, index=True)
    subcategory_id = Column(String(100), nullable=True)  # NULL = whole category
    subcategory_name = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=utcnow)

    worker_profile = relationship("WorkerProfile", back_populates="services")


class VerificationRequirement(Base):
    __tablename__ = "verification_requirements"
    __table_args__ = (
        UniqueConstraint("worker_profile_id", "requirement_type", name="uq_worker_requirement"),
    )

    id = Column(String(36), primary_key=True, default=generate_id)
    worker_profile_id = Column(String(36), ForeignKey("worker_profiles.id"), nullable=False, index=True)
    requirement_type = Column(String(150), nullable=False, index=True)  # Document id or "service:doc"
    requirement_name = Column(String(255), nullable=False)
    document_category = Column(String(30), nullable=True, index=True)
    is_required = Column(Boolean, default=False, nullable=False)
    status = Column(String(20), default=RequirementStatus.PENDING, nullable=False, index=True)
    document_url = Column(String(500), nullable=True)  # R2 key, not a URL
    document_uploaded_at = Column(DateTime, nullable=True)
    submitted_at = Column(DateTime, nullable=True)
    reviewed_at = Column(DateTime, nullable=True)
    reviewed_by = Column(String(255), nullable=True)
    approved_at = Column(DateTime, nullable=True)
    rejected_at = Column(DateTime, nullable=True)
    rejection_reason = Column(Text, nullable=True)
    expires_at = Column(DateTime, nullable=True)
    notes = Column(Text, nullable=True)
    meta = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    worker_profile = relationship("WorkerProfile", back_populates="requirements")


# ============================================================================
# SERVICE CATALOG
# ============================================================================


class Document(Base):
    __tablename__ = "documents"

    id = Column(String(100), primary_key=True)  # e.g. "police-check"
    name = Column(String(255), nullable=False)
    category = Column(String(30), nullable=False)  # IDENTITY, BUSINESS, COMPLIANCE, TRAINING, ...
    description = Column(Text, nullable=True)
    has_expiration = Column(Boolean, default=False, nullable=False)


class Category(Base):
    __tablename__ = "categories"

    id = Column(String(100), primary_key=True)  # e.g. "support-worker"
    name = Column(String(255), unique=True, nullable=False)
    requires_qualification = Column(Boolean, default=False, nullable=False)

    documents = relationship("CategoryDocument", back_populates="category", cascade="all, delete-orphan")
    subcategories = relationship(
        "Subcategory",
        back_populates="category",
        cascade="all, delete-orphan",
        order_by="Subcategory.name",
    )


class CategoryDocument(Base):
    __tablename__ = "category_documents"

    id = Column(Integer, primary_key=True, autoincrement=True)
    category_id = Column(String(100), ForeignKey("categories.id"), nullable=False, index=True)
    document_id = Column(String(100), ForeignKey("documents.id"), nullable=False)
    document_type = Column(String(20), nullable=False)  # REQUIRED, OPTIONAL, CONDITIONAL
    condition_key = Column(String(100), nullable=True)
    required_if_true = Column(Boolean, nullable=True)

    category = relationship("Category", back_populates="documents")
    document = relationship("Document")


class Subcategory(Base):
    __tablename__ = "subcategories"

    id = Column(String(100), primary_key=True)
    category_id = Column(String(100), ForeignKey("categories.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    requires_registration = Column(Boolean, default=False, nullable=False)

    category = relationship("Category", back_populates="subcategories")
    additional_documents = relationship(
        "SubcategoryDocument", back_populates="subcategory", cascade="all, delete-orphan"
    )


class SubcategoryDocument(Base):
    __tablename__ = "subcategory_documents"

    id = Column(Integer, primary_key=True, autoincrement=True)
    subcategory_id = Column(String(100), ForeignKey("subcategories.id"), nullable=False, index=True)
    document_id = Column(String(100), ForeignKey("documents.id"), nullable=False)

    subcategory = relationship("Subcategory", back_populates="additional_documents")
    document = relationship("Document")


# ============================================================================
# CLIENTS & COORDINATORS
# ============================================================================


class ClientProfile(Base):
    __tablename__ = "client_profiles"

    id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(String(36), ForeignKey("users.id"), unique=True, nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    mobile = Column(String(20), nullable=False)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    user = relationship("User", back_populates="client_profile")


class CoordinatorProfile(Base):
    __tablename__ = "coordinator_profiles"

    id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(String(36), ForeignKey("users.id"), unique=True, nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    mobile = Column(String(20), nullable=False)
    organization = Column(String(255), nullable=True)
    client_types = Column(JSON, default=list)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    user = relationship("User", back_populates="coordinator_profile")


class Participant(Base):
    """The person receiving support (may be the registrant themselves)"""

    __tablename__ = "participants"

    id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    date_of_birth = Column(DateTime, nullable=True)
    gender = Column(String(50), nullable=True)
    location = Column(String(255), nullable=True)
    funding_type = Column(String(20), nullable=False)  # NDIS, AGED_CARE, INSURANCE, PRIVATE, OTHER
    relationship_to_client = Column(String(30), nullable=True)
    is_self_managed = Column(Boolean, default=False, nullable=False)
    services_requested = Column(JSON, nullable=True)
    conditions = Column(JSON, default=list)
    additional_info = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    user = relationship("User", back_populates="participants")


class ServiceRequest(Base):
    __tablename__ = "service_requests"

    id = Column(String(36), primary_key=True, default=generate_id)
    requester_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    participant_id = Column(String(36), ForeignKey("participants.id"), nullable=True)
    services = Column(JSON, nullable=True)
    details = Column(JSON, nullable=True)  # {title, description}
    location = Column(String(255), nullable=True)
    status = Column(String(20), default="PENDING", nullable=False)  # PENDING, ACTIVE, CLOSED
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    requester = relationship("User", back_populates="service_requests")
    participant = relationship("Participant")


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=True, index=True)
    action = Column(String(50), nullable=False)
    meta = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime, default=utcnow)
