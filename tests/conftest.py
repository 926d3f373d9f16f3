import os

# Must be set before the app modules read their configuration
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["SECURITY_HEADERS_ENABLED"] = "true"
os.environ.pop("GOOGLE_GEOCODING_API_KEY", None)
os.environ.pop("REDIS_URL", None)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from remonta import cache as cache_module  # noqa: E402
from remonta import rate_limiter  # noqa: E402
from remonta.database import Base, get_db, serialize_json  # noqa: E402
from remonta.domain.catalog.service import CatalogService  # noqa: E402
from remonta.domain.progress.service import default_setup_progress  # noqa: E402
from remonta.main import app  # noqa: E402
from remonta.models import (  # noqa: E402
    User,
    UserRole,
    UserStatus,
    VerificationRequirement,
    WorkerProfile,
    WorkerService,
    utcnow,
)
from remonta.security_utils import create_access_token, hash_password_bcrypt  # noqa: E402
from remonta.utils.storage import get_storage  # noqa: E402

from fakes import FakeRedis, FakeStorage  # noqa: E402

TEST_PASSWORD = "Password123"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        json_serializer=serialize_json,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture(autouse=True)
def fake_redis(monkeypatch):
    fake = FakeRedis()
    monkeypatch.setattr(rate_limiter, "redis_client", fake)
    monkeypatch.setattr(cache_module.cache, "redis_client", None)
    return fake


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def client(session_factory, storage):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: storage
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def catalog(db):
    return CatalogService(db).seed_catalog()


SERVICE_ROWS = {
    "cleaning": ("cleaning-services", "Cleaning Services", "domestic-cleaning", "Domestic Cleaning"),
    "support": ("support-worker", "Support Worker", "personal-care", "Personal Care"),
    "nursing": ("nursing-services", "Nursing Services", "registered-nurse", "Registered Nurse"),
    "physio": ("therapeutic-supports", "Therapeutic Supports", "physiotherapist", "Physiotherapist"),
    "speech": ("therapeutic-supports", "Therapeutic Supports", "speech-pathologist", "Speech Pathologist"),
}


@pytest.fixture
def make_worker(db):
    """Create a WORKER user with profile; `services` are keys of SERVICE_ROWS"""
    counter = {"n": 0}

    def _make(email=None, services=(), status=UserStatus.ACTIVE, **fields):
        counter["n"] += 1
        user = User(
            email=email or f"worker{counter['n']}@example.com",
            password_hash=hash_password_bcrypt(TEST_PASSWORD),
            role=UserRole.WORKER,
            status=status,
        )
        profile_fields = {
            "first_name": "Test",
            "last_name": f"Worker{counter['n']}",
            "mobile": "0412345678",
            "setup_progress": default_setup_progress(),
        }
        profile_fields.update(fields)
        profile = WorkerProfile(**profile_fields)
        for key in services:
            category_id, category_name, sub_id, sub_name = SERVICE_ROWS[key]
            profile.services.append(
                WorkerService(
                    category_id=category_id,
                    category_name=category_name,
                    subcategory_id=sub_id,
                    subcategory_name=sub_name,
                )
            )
        user.worker_profile = profile
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def make_admin(db):
    def _make(email="admin@remonta.test"):
        user = User(
            email=email,
            password_hash=hash_password_bcrypt(TEST_PASSWORD),
            role=UserRole.ADMIN,
            status=UserStatus.ACTIVE,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def add_document(db):
    """Insert a VerificationRequirement row directly"""

    def _add(profile, requirement_type, status="SUBMITTED", category=None, name=None, **fields):
        now = utcnow()
        requirement = VerificationRequirement(
            worker_profile_id=profile.id,
            requirement_type=requirement_type,
            requirement_name=name or requirement_type,
            document_category=category,
            status=status,
            document_url=f"compliance-documents/{profile.user_id}/{requirement_type}.pdf",
            document_uploaded_at=now,
            submitted_at=fields.pop("submitted_at", now),
            **fields,
        )
        db.add(requirement)
        db.commit()
        db.refresh(requirement)
        return requirement

    return _add


@pytest.fixture
def auth_headers():
    def _headers(user) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user.id, user.role)}"}

    return _headers
