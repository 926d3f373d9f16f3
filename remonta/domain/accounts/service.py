"""Account service - Registration (client, coordinator, worker) and login"""

import logging

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...config import ACCESS_TOKEN_EXPIRE_MINUTES
from ...geocoding import geocode_address
from ...models import (
    ClientProfile,
    CoordinatorProfile,
    Participant,
    ServiceRequest,
    User,
    UserRole,
    UserStatus,
    VerificationStatus,
    WorkerProfile,
    WorkerService,
    utcnow,
)
from ...security_utils import create_access_token, hash_password_bcrypt, verify_password_bcrypt
from ...shared.validators import calculate_age, parse_date, parse_datetime, to_title_case
from ..catalog.repository import CatalogRepository
from ..progress.service import default_setup_progress
from .repository import AccountRepository
from .schemas import ClientRegistration, CoordinatorRegistration, LoginRequest, WorkerRegistration

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL_MESSAGE = "An account with this email already exists"


def user_summary(user: User) -> dict:
    return {"id": user.id, "email": user.email, "role": user.role, "status": user.status}


def services_to_json(services_requested: dict) -> dict:
    return {category_id: selection.model_dump() for category_id, selection in (services_requested or {}).items()}


class AccountService:
    """Service layer for registration and authentication"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = AccountRepository()

    def _ensure_email_available(self, email: str) -> None:
        if self.repo.email_exists(self.db, email):
            logger.warning(f"⚠️ Registration attempt with existing email: {email}")
            raise HTTPException(status_code=409, detail=DUPLICATE_EMAIL_MESSAGE)

    def _create(self, user: User, *related) -> User:
        """Insert the user and related rows in one transaction"""
        try:
            self.db.add(user)
            for row in related:
                self.db.add(row)
            self.db.commit()
            self.db.refresh(user)
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"⚠️ Duplicate email on insert {user.email}: {e.orig}")
            raise HTTPException(status_code=409, detail=DUPLICATE_EMAIL_MESSAGE) from e
        except Exception:
            self.db.rollback()
            raise
        return user

    def register_client(self, data: ClientRegistration) -> dict:
        """Create a CLIENT user with contact profile and the participant receiving support"""
        self._ensure_email_available(data.email)

        date_of_birth = parse_datetime(data.dateOfBirth) if data.dateOfBirth else None
        if data.dateOfBirth and date_of_birth is None:
            raise HTTPException(status_code=422, detail="Invalid date of birth")

        user = User(
            email=data.email,
            password_hash=hash_password_bcrypt(data.password),
            role=UserRole.CLIENT,
            status=UserStatus.ACTIVE,
        )
        user.client_profile = ClientProfile(first_name=data.firstName, last_name=data.lastName, mobile=data.mobile)
        user.participants.append(
            Participant(
                first_name=data.firstName if data.isSelfManaged else (data.clientFirstName or data.firstName),
                last_name=data.lastName if data.isSelfManaged else (data.clientLastName or data.lastName),
                date_of_birth=date_of_birth or utcnow(),
                location=data.location,
                funding_type=data.fundingType,
                relationship_to_client="OTHER" if data.isSelfManaged else data.relationshipToClient,
                is_self_managed=data.isSelfManaged,
                services_requested=services_to_json(data.servicesRequested),
                conditions=[],
                additional_info=data.additionalInfo or None,
            )
        )
        user = self._create(user)

        registration_type = "CLIENT_SELF" if data.isSelfManaged else "CLIENT_REPRESENTATIVE"
        self.repo.add_audit_log(
            self.db, user.id, "REGISTERED", {"registrationType": registration_type, "fundingType": data.fundingType}
        )
        logger.info(f"✅ Client registered: {user.email} ({registration_type})")
        return user_summary(user)

    def register_coordinator(self, data: CoordinatorRegistration) -> dict:
        """Create a COORDINATOR user, the participant and an open service request"""
        self._ensure_email_available(data.email)

        client_dob = parse_datetime(data.clientDateOfBirth)
        if client_dob is None:
            raise HTTPException(status_code=422, detail="Invalid client date of birth")

        category_names = [s.categoryName for s in data.servicesRequested.values()]
        title = f"Support needed: {', '.join(category_names)}" if category_names else "Support request"

        user = User(
            email=data.email,
            password_hash=hash_password_bcrypt(data.password),
            role=UserRole.COORDINATOR,
            status=UserStatus.ACTIVE,
        )
        user.coordinator_profile = CoordinatorProfile(
            first_name=data.firstName,
            last_name=data.lastName,
            mobile=data.mobile,
            organization=data.organization or None,
            client_types=data.clientTypes,
        )
        participant = Participant(
            first_name=data.clientFirstName,
            last_name=data.clientLastName,
            date_of_birth=client_dob,
            funding_type="OTHER",
            conditions=[],
            additional_info=data.additionalInfo or None,
        )
        user.participants.append(participant)
        user.service_requests.append(
            ServiceRequest(
                participant=participant,
                services=services_to_json(data.servicesRequested),
                details={"title": title, "description": data.additionalInfo or None},
                location=data.location,
                status="PENDING",
            )
        )
        user = self._create(user)

        self.repo.add_audit_log(
            self.db, user.id, "REGISTERED", {"registrationType": "COORDINATOR", "clientTypes": data.clientTypes}
        )
        logger.info(f"✅ Coordinator registered: {user.email}")
        return user_summary(user)

    async def register_worker(self, data: WorkerRegistration) -> dict:
        """
        Create a WORKER user and profile.

        The location is geocoded when given; a geocoding failure leaves the
        worker without coordinates rather than failing registration.
        """
        self._ensure_email_available(data.email)

        geo = None
        if data.location and data.location.strip():
            geo = await geocode_address(data.location)
            if not geo:
                logger.warning(f"⚠️ Could not geocode worker location '{data.location}'")

        age = data.age
        date_of_birth = None
        if data.dateOfBirth:
            age = calculate_age(data.dateOfBirth)
            if age is None:
                raise HTTPException(status_code=422, detail="Invalid date of birth")
            date_of_birth = parse_date(data.dateOfBirth).isoformat()

        user = User(
            email=data.email,
            password_hash=hash_password_bcrypt(data.password),
            role=UserRole.WORKER,
            status=UserStatus.ACTIVE,
        )
        profile = WorkerProfile(
            first_name=data.firstName,
            last_name=data.lastName,
            mobile=data.mobile,
            location=data.location,
            latitude=geo["latitude"] if geo else None,
            longitude=geo["longitude"] if geo else None,
            city=geo.get("city") if geo else None,
            state=geo.get("state") if geo else None,
            postal_code=geo.get("postal_code") if geo else None,
            age=age,
            date_of_birth=date_of_birth,
            gender=to_title_case(data.gender.strip()) if data.gender else None,
            languages=[to_title_case(lang.strip()) for lang in data.languages if lang.strip()],
            photos=data.photos,
            introduction=data.introduction,
            experience=data.experience,
            has_vehicle=data.hasVehicle,
            is_published=False,
            verification_status=VerificationStatus.NOT_STARTED,
            setup_progress=default_setup_progress(),
        )
        user.worker_profile = profile

        catalog = CatalogRepository()
        seen = set()
        for selection in data.services:
            category = catalog.get_category(self.db, selection.categoryId)
            subcategory = (
                catalog.get_subcategory(self.db, selection.categoryId, selection.subcategoryId)
                if category and selection.subcategoryId
                else None
            )
            if not category or (selection.subcategoryId and not subcategory):
                logger.warning(f"⚠️ Ignoring unknown service {selection.categoryId}/{selection.subcategoryId}")
                continue
            key = (category.id, subcategory.id if subcategory else None)
            if key in seen:
                continue
            seen.add(key)
            profile.services.append(
                WorkerService(
                    category_id=category.id,
                    category_name=category.name,
                    subcategory_id=subcategory.id if subcategory else None,
                    subcategory_name=subcategory.name if subcategory else None,
                )
            )

        user = self._create(user)

        self.repo.add_audit_log(self.db, user.id, "REGISTERED", {"registrationType": "WORKER"})
        logger.info(f"✅ Worker registered: {user.email}")
        return user_summary(user)

    def login(self, data: LoginRequest) -> dict:
        """Verify credentials and issue an access token"""
        user = self.repo.get_user_by_email(self.db, data.email)
        if not user or not verify_password_bcrypt(data.password, user.password_hash):
            logger.warning(f"⚠️ Failed login for {data.email}")
            self.repo.add_audit_log(self.db, user.id if user else None, "LOGIN_FAILED", {"email": data.email})
            raise HTTPException(status_code=401, detail="Invalid email or password")

        if user.status == UserStatus.SUSPENDED:
            logger.warning(f"🚫 Suspended user {user.id} attempted login")
            raise HTTPException(status_code=403, detail="Account suspended")

        user.last_login_at = utcnow()
        self.db.commit()
        self.db.refresh(user)
        self.repo.add_audit_log(self.db, user.id, "LOGIN_SUCCESS")

        token = create_access_token(user.id, user.role)
        logger.info(f"🔑 User {user.id} logged in")
        return {
            "access_token": token,
            "token_type": "bearer",
            "expires_in": ACCESS_TOKEN_EXPIRE_MINUTES * 60,
            "user": user_summary(user),
        }
