import asyncio
from datetime import timedelta

from remonta import worker
from remonta.models import VerificationRequirement, WorkerProfile, utcnow
from remonta.services.expiry_automation import expire_documents


def statuses(db):
    db.expire_all()
    return {r.requirement_type: r.status for r in db.query(VerificationRequirement).all()}


def test_expire_documents_only_touches_past_reviewable_documents(db, make_worker, add_document):
    profile = make_worker().worker_profile
    past = utcnow() - timedelta(days=1)
    add_document(profile, "police-check", status="APPROVED", expires_at=past)
    add_document(profile, "working-with-children", status="SUBMITTED", expires_at=past)
    add_document(profile, "infection-control", status="REJECTED", expires_at=past)
    add_document(profile, "car-insurance", status="PENDING", expires_at=past)
    add_document(profile, "right-to-work", status="APPROVED", expires_at=utcnow() + timedelta(days=30))
    add_document(profile, "ndis-screening-check", status="APPROVED")

    summary = expire_documents(db)
    assert summary["documents_expired"] == 2
    assert summary["workers_refreshed"] == 1
    assert len(summary["expired_ids"]) == 2

    assert statuses(db) == {
        "police-check": "EXPIRED",
        "working-with-children": "EXPIRED",
        "infection-control": "REJECTED",
        "car-insurance": "PENDING",
        "right-to-work": "APPROVED",
        "ndis-screening-check": "APPROVED",
    }

    assert expire_documents(db) == {"documents_expired": 0, "workers_refreshed": 0, "expired_ids": []}


def test_expiry_reopens_compliance(db, catalog, make_worker, add_document):
    profile = make_worker(services=["cleaning"], abn="51824753556").worker_profile
    add_document(profile, "identity-passport", category="PRIMARY")
    add_document(profile, "identity-medicare-card", category="SECONDARY")
    add_document(profile, "ndis-screening-check", status="APPROVED")
    add_document(profile, "right-to-work", status="APPROVED")
    add_document(profile, "police-check", status="APPROVED", expires_at=utcnow() - timedelta(hours=1))
    profile_id = profile.id

    assert expire_documents(db)["workers_refreshed"] == 1

    db.expire_all()
    refreshed = db.query(WorkerProfile).filter(WorkerProfile.id == profile_id).one()
    assert refreshed.setup_progress["compliance"] is False


def test_admin_can_run_expiry(client, db, make_admin, make_worker, add_document, auth_headers):
    profile = make_worker().worker_profile
    document = add_document(profile, "police-check", status="APPROVED", expires_at=utcnow() - timedelta(days=2))

    response = client.post("/admin/compliance/expire", headers=auth_headers(make_admin()))
    assert response.status_code == 200
    assert response.json() == {"documents_expired": 1, "workers_refreshed": 1, "expired_ids": [document.id]}
    assert statuses(db)["police-check"] == "EXPIRED"

    worker_headers = auth_headers(make_worker())
    assert client.post("/admin/compliance/expire", headers=worker_headers).status_code == 403


def test_arq_task_uses_a_fresh_session(db, session_factory, make_worker, add_document, monkeypatch):
    profile = make_worker().worker_profile
    add_document(profile, "police-check", status="SUBMITTED", expires_at=utcnow() - timedelta(minutes=5))
    monkeypatch.setattr(worker, "SessionLocal", session_factory)

    summary = asyncio.run(worker.expire_documents_task({}))
    assert summary["documents_expired"] == 1
    assert statuses(db)["police-check"] == "EXPIRED"

    assert worker.expire_documents_task in worker.WorkerSettings.functions
    assert len(worker.WorkerSettings.cron_jobs) == 1
