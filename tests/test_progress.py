from remonta.domain.progress.service import (
    get_completion_percentage,
    parse_setup_progress,
    refresh_progress,
)
from remonta.models import WorkerProfile

PDF = ("document.pdf", b"%PDF-1.4 test", "application/pdf")


def upload(client, headers, document_type, **form):
    return client.post(
        "/worker/compliance/documents",
        headers=headers,
        files={"file": PDF},
        data={"documentType": document_type, **form},
    )


def progress_of(client, headers):
    response = client.get("/worker/setup-progress", headers=headers)
    assert response.status_code == 200
    return response.json()


def test_parse_setup_progress_normalizes():
    assert parse_setup_progress(None) == {
        "accountDetails": False,
        "compliance": False,
        "trainings": False,
        "services": False,
    }
    assert parse_setup_progress({"compliance": 1, "bogus": True})["compliance"] is True
    assert get_completion_percentage({"accountDetails": True, "compliance": True}) == 50


def test_get_setup_progress_defaults(client, make_worker, auth_headers):
    worker = make_worker()
    body = progress_of(client, auth_headers(worker))
    assert body["progress"] == {
        "accountDetails": False,
        "compliance": False,
        "trainings": False,
        "services": False,
    }
    assert body["completionPercentage"] == 0
    assert body["verificationStatus"] == "NOT_STARTED"
    assert body["currentSection"] is None


def test_update_current_section(client, make_worker, auth_headers):
    headers = auth_headers(make_worker())
    response = client.put("/worker/setup-progress/current-section", headers=headers, json={"section": "trainings"})
    assert response.status_code == 200
    assert progress_of(client, headers)["currentSection"] == "trainings"

    response = client.put("/worker/setup-progress/current-section", headers=headers, json={"section": "payments"})
    assert response.status_code == 400


def test_manual_section_completion_moves_status(client, make_worker, auth_headers):
    headers = auth_headers(make_worker())
    response = client.put("/worker/setup-progress/sections/compliance", headers=headers, json={"completed": True})
    assert response.status_code == 200
    assert response.json()["verificationStatus"] == "IN_PROGRESS"

    for section in ("accountDetails", "trainings", "services"):
        response = client.put(f"/worker/setup-progress/sections/{section}", headers=headers, json={"completed": True})
    assert response.json()["verificationStatus"] == "PENDING_REVIEW"
    assert progress_of(client, headers)["completionPercentage"] == 100

    response = client.put("/worker/setup-progress/sections/unknown", headers=headers, json={"completed": True})
    assert response.status_code == 400


def test_progress_requires_worker_role(client, make_admin, auth_headers):
    response = client.get("/worker/setup-progress", headers=auth_headers(make_admin()))
    assert response.status_code == 403

    response = client.get("/worker/setup-progress")
    assert response.status_code in (401, 403)


def test_cleaning_worker_completes_compliance_through_uploads(client, db, catalog, make_worker, auth_headers):
    worker = make_worker(services=["cleaning"], abn="51824753556")
    headers = auth_headers(worker)

    assert upload(client, headers, "identity-passport").status_code == 200
    assert upload(client, headers, "identity-medicare-card").status_code == 200
    assert upload(client, headers, "police-check").status_code == 200
    assert upload(client, headers, "worker-screening-check").status_code == 200
    assert progress_of(client, headers)["progress"]["compliance"] is False

    assert upload(client, headers, "identity-working-rights").status_code == 200
    body = progress_of(client, headers)
    assert body["progress"]["compliance"] is True
    # No training documents are required for cleaning services
    assert body["progress"]["trainings"] is True
    assert body["verificationStatus"] == "PENDING_REVIEW"


def test_clearing_abn_reopens_compliance(client, db, catalog, make_worker, add_document, auth_headers):
    worker = make_worker(services=["cleaning"], abn="51824753556")
    profile = worker.worker_profile
    add_document(profile, "identity-passport", category="PRIMARY")
    add_document(profile, "identity-medicare-card", category="SECONDARY")
    for requirement_type in ("police-check", "ndis-screening-check", "right-to-work"):
        add_document(profile, requirement_type)
    headers = auth_headers(worker)

    assert client.post("/worker/setup-progress/refresh", headers=headers).json()["progress"]["compliance"] is True

    response = client.put("/worker/abn", headers=headers, json={"abn": ""})
    assert response.status_code == 200
    assert response.json() == {"abn": None}
    assert progress_of(client, headers)["progress"]["compliance"] is False


def test_support_worker_trainings(client, db, catalog, make_worker, add_document, auth_headers):
    worker = make_worker(services=["support"])
    profile = worker.worker_profile
    headers = auth_headers(worker)

    add_document(profile, "ndis-worker-orientation")
    assert client.post("/worker/setup-progress/refresh", headers=headers).json()["progress"]["trainings"] is False

    assert upload(client, headers, "infection-control").status_code == 200
    assert progress_of(client, headers)["progress"]["trainings"] is True


def test_refresh_progress_never_raises(db, make_worker, monkeypatch):
    from remonta.domain.progress import service as progress_service

    worker = make_worker(services=["cleaning"])
    profile = db.query(WorkerProfile).filter(WorkerProfile.user_id == worker.id).one()

    def explode(db, profile):
        raise RuntimeError("boom")

    monkeypatch.setattr(progress_service, "_evaluate_services", explode)
    assert refresh_progress(db, profile, ["services"]) == {"services": False}

    monkeypatch.setattr(progress_service, "_evaluate_services", lambda db, profile: True)
    monkeypatch.setattr(progress_service.ProgressRepository, "save_progress", staticmethod(explode))
    assert refresh_progress(db, profile, ["services"]) == {"services": None}
