from fakes import fake_geocoder

from remonta.domain.accounts import service as account_service
from remonta.models import (
    AuditLog,
    ClientProfile,
    CoordinatorProfile,
    Participant,
    ServiceRequest,
    User,
    UserStatus,
    WorkerProfile,
)

TEST_PASSWORD = "Password123"

PERSON = {"password": "Password123", "firstName": "Alex", "lastName": "Smith", "mobile": "0412 345 678"}

SERVICES_REQUESTED = {
    "cleaning-services": {
        "categoryName": "Cleaning Services",
        "subCategories": [{"id": "domestic-cleaning", "name": "Domestic Cleaning"}],
    }
}


def test_register_self_managed_client(client, db):
    response = client.post(
        "/auth/register/client",
        json={
            **PERSON,
            "email": "Client@Example.com",
            "isSelfManaged": True,
            "fundingType": "NDIS",
            "location": "Parramatta NSW",
            "servicesRequested": SERVICES_REQUESTED,
            "consent": True,
        },
    )
    assert response.status_code == 201
    assert response.json()["email"] == "client@example.com"
    assert response.json()["role"] == "CLIENT"

    participant = db.query(Participant).one()
    assert participant.is_self_managed is True
    assert participant.first_name == "Alex"
    assert participant.relationship_to_client == "OTHER"
    assert participant.services_requested["cleaning-services"]["categoryName"] == "Cleaning Services"
    assert db.query(ClientProfile).one().mobile == "0412 345 678"
    assert db.query(AuditLog).filter(AuditLog.action == "REGISTERED").one().meta["registrationType"] == "CLIENT_SELF"


def test_register_client_on_behalf_of_someone(client, db):
    response = client.post(
        "/auth/register/client",
        json={
            **PERSON,
            "email": "parent@example.com",
            "isSelfManaged": False,
            "fundingType": "PRIVATE",
            "relationshipToClient": "PARENT",
            "clientFirstName": "Sam",
            "clientLastName": "Smith",
            "dateOfBirth": "2012-03-04",
            "location": "Newcastle NSW",
            "consent": True,
        },
    )
    assert response.status_code == 201
    participant = db.query(Participant).one()
    assert participant.first_name == "Sam"
    assert participant.relationship_to_client == "PARENT"
    assert participant.date_of_birth.year == 2012


def test_register_client_requires_consent_and_valid_fields(client):
    base = {
        **PERSON,
        "email": "c@example.com",
        "isSelfManaged": True,
        "fundingType": "NDIS",
        "location": "Sydney",
        "consent": True,
    }
    assert client.post("/auth/register/client", json={**base, "consent": False}).status_code == 422
    assert client.post("/auth/register/client", json={**base, "fundingType": "CASH"}).status_code == 422
    assert client.post("/auth/register/client", json={**base, "password": "weak"}).status_code == 422
    assert client.post("/auth/register/client", json={**base, "mobile": "0212345678"}).status_code == 422
    assert client.post("/auth/register/client", json={**base, "location": " "}).status_code == 422


def test_register_coordinator_creates_service_request(client, db):
    response = client.post(
        "/auth/register/coordinator",
        json={
            **PERSON,
            "email": "coord@example.com",
            "organization": "Care Co",
            "clientTypes": ["NDIS"],
            "clientFirstName": "Pat",
            "clientLastName": "Lee",
            "clientDateOfBirth": "1950-07-01",
            "servicesRequested": SERVICES_REQUESTED,
            "location": "Wollongong NSW",
            "consent": True,
        },
    )
    assert response.status_code == 201
    assert response.json()["role"] == "COORDINATOR"

    assert db.query(CoordinatorProfile).one().organization == "Care Co"
    request = db.query(ServiceRequest).one()
    assert request.status == "PENDING"
    assert request.details["title"] == "Support needed: Cleaning Services"
    assert request.participant.first_name == "Pat"


def test_register_coordinator_validation(client):
    payload = {
        **PERSON,
        "email": "coord@example.com",
        "clientTypes": [],
        "clientFirstName": "Pat",
        "clientLastName": "Lee",
        "clientDateOfBirth": "1950-07-01",
        "location": "Wollongong NSW",
        "consent": True,
    }
    assert client.post("/auth/register/coordinator", json=payload).status_code == 422

    payload["clientTypes"] = ["NDIS"]
    payload["clientDateOfBirth"] = "not a date"
    assert client.post("/auth/register/coordinator", json=payload).status_code == 422


def test_register_worker(client, db, catalog, monkeypatch):
    monkeypatch.setattr(
        account_service,
        "geocode_address",
        fake_geocoder(
            {"Bondi NSW": {"latitude": -33.89, "longitude": 151.27, "city": "Bondi", "state": "NSW", "postal_code": "2026"}}
        ),
    )
    response = client.post(
        "/auth/register/worker",
        json={
            **PERSON,
            "email": "worker@example.com",
            "location": "Bondi NSW",
            "dateOfBirth": "1985-02-03",
            "gender": "male",
            "languages": ["english", "greek"],
            "services": [
                {"categoryId": "cleaning-services", "subcategoryId": "domestic-cleaning"},
                {"categoryId": "cleaning-services", "subcategoryId": "domestic-cleaning"},
                {"categoryId": "juggling"},
            ],
        },
    )
    assert response.status_code == 201
    assert response.json()["role"] == "WORKER"

    profile = db.query(WorkerProfile).one()
    assert profile.latitude == -33.89
    assert profile.postal_code == "2026"
    assert profile.gender == "Male"
    assert profile.languages == ["English", "Greek"]
    assert profile.verification_status == "NOT_STARTED"
    assert profile.is_published is False
    assert [(s.category_id, s.subcategory_id) for s in profile.services] == [
        ("cleaning-services", "domestic-cleaning")
    ]


def test_register_worker_without_geocode(client, db, monkeypatch):
    monkeypatch.setattr(account_service, "geocode_address", fake_geocoder({}))
    response = client.post(
        "/auth/register/worker", json={**PERSON, "email": "w2@example.com", "location": "Somewhere"}
    )
    assert response.status_code == 201
    assert db.query(WorkerProfile).one().latitude is None


def test_duplicate_email_conflicts(client, make_worker):
    make_worker(email="taken@example.com")
    response = client.post("/auth/register/worker", json={**PERSON, "email": "TAKEN@example.com"})
    assert response.status_code == 409
    assert response.json()["detail"] == "An account with this email already exists"


def test_login(client, db, make_worker):
    worker = make_worker(email="login@example.com")
    response = client.post("/auth/login", json={"email": " Login@Example.com ", "password": TEST_PASSWORD})
    assert response.status_code == 200
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["id"] == worker.id

    me = client.get("/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert me.status_code == 200
    assert me.json()["email"] == "login@example.com"

    db.expire_all()
    assert db.query(User).filter(User.id == worker.id).one().last_login_at is not None
    assert db.query(AuditLog).filter(AuditLog.action == "LOGIN_SUCCESS").count() == 1


def test_login_failures(client, db, make_worker):
    make_worker(email="suspended@example.com", status=UserStatus.SUSPENDED)
    make_worker(email="active@example.com")

    response = client.post("/auth/login", json={"email": "active@example.com", "password": "WrongPass1"})
    assert response.status_code == 401
    response = client.post("/auth/login", json={"email": "nobody@example.com", "password": TEST_PASSWORD})
    assert response.status_code == 401
    response = client.post("/auth/login", json={"email": "suspended@example.com", "password": TEST_PASSWORD})
    assert response.status_code == 403

    assert db.query(AuditLog).filter(AuditLog.action == "LOGIN_FAILED").count() == 2


def test_suspended_user_token_is_rejected(client, make_worker, auth_headers):
    worker = make_worker(status=UserStatus.SUSPENDED)
    assert client.get("/auth/me", headers=auth_headers(worker)).status_code == 403


def test_me_requires_token(client):
    assert client.get("/auth/me").status_code in (401, 403)
    assert client.get("/auth/me", headers={"Authorization": "Bearer not-a-jwt"}).status_code == 401
