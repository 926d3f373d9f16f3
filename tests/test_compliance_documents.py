from remonta.models import VerificationRequirement, WorkerProfile

PDF = ("police check.pdf", b"%PDF-1.4 test", "application/pdf")


def upload(client, headers, document_type="police-check", file=PDF, **form):
    data = {"documentType": document_type, **form} if document_type is not None else form
    return client.post("/worker/compliance/documents", headers=headers, files={"file": file}, data=data)


def test_upload_creates_submitted_requirement(client, db, make_worker, storage, auth_headers):
    worker = make_worker()
    response = upload(client, auth_headers(worker), expiryDate="2030-06-30")
    assert response.status_code == 200
    body = response.json()
    assert body["documentType"] == "police-check"
    assert body["documentName"] == "National Police Check"
    assert body["documentUrl"].startswith("https://r2.test/police-check/")

    key = next(iter(storage.objects))
    assert key.startswith(f"police-check/{worker.id}/police-check-")
    assert key.endswith("-police_check.pdf")

    db.expire_all()
    requirement = db.query(VerificationRequirement).one()
    assert requirement.status == "SUBMITTED"
    assert requirement.document_url == key
    assert requirement.expires_at.year == 2030
    profile = db.query(WorkerProfile).filter(WorkerProfile.user_id == worker.id).one()
    assert profile.verification_status == "PENDING_REVIEW"


def test_identity_upload_uses_identity_folder_and_category(client, db, make_worker, storage, auth_headers):
    worker = make_worker()
    assert upload(client, auth_headers(worker), "identity-passport").status_code == 200

    assert next(iter(storage.objects)).startswith(f"identity-documents/{worker.id}/")
    db.expire_all()
    assert db.query(VerificationRequirement).one().document_category == "PRIMARY"


def test_unknown_type_uses_supplied_name(client, db, make_worker, auth_headers):
    response = upload(client, auth_headers(make_worker()), "forklift-licence", documentName="Forklift Licence")
    assert response.status_code == 200
    assert response.json()["documentName"] == "Forklift Licence"
    db.expire_all()
    requirement = db.query(VerificationRequirement).one()
    assert requirement.is_required is False
    assert requirement.document_category is None


def test_reupload_resets_review_and_replaces_blob(client, db, make_worker, add_document, storage, auth_headers):
    worker = make_worker()
    existing = add_document(
        worker.worker_profile,
        "police-check",
        status="REJECTED",
        rejection_reason="Blurry",
    )
    old_key = existing.document_url

    assert upload(client, auth_headers(worker)).status_code == 200

    db.expire_all()
    requirements = db.query(VerificationRequirement).all()
    assert len(requirements) == 1
    assert requirements[0].id == existing.id
    assert requirements[0].status == "SUBMITTED"
    assert requirements[0].rejection_reason is None
    assert requirements[0].document_url != old_key
    assert old_key in storage.deleted


def test_upload_validation(client, db, make_worker, auth_headers):
    headers = auth_headers(make_worker())

    response = upload(client, headers, file=("notes.txt", b"hello", "text/plain"))
    assert response.status_code == 400
    assert "Invalid file type" in response.json()["detail"]

    response = upload(client, headers, file=("big.pdf", b"x" * (10 * 1024 * 1024 + 1), "application/pdf"))
    assert response.status_code == 400

    response = upload(client, headers, file=("blank.pdf", b"", "application/pdf"))
    assert response.status_code == 400
    assert response.json()["detail"] == "File is empty."

    response = upload(client, headers, document_type=None)
    assert response.status_code == 400
    assert response.json()["detail"] == "Document type is required"

    response = upload(client, headers, expiryDate="next year")
    assert response.status_code == 422

    db.expire_all()
    assert db.query(VerificationRequirement).count() == 0


def test_storage_failure_returns_500_without_row(client, db, make_worker, storage, auth_headers):
    storage.fail_uploads = True
    response = upload(client, auth_headers(make_worker()))
    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to upload document"
    db.expire_all()
    assert db.query(VerificationRequirement).count() == 0


def test_list_documents_newest_first(client, make_worker, auth_headers):
    worker = make_worker()
    headers = auth_headers(worker)
    assert upload(client, headers, "police-check").status_code == 200
    assert upload(client, headers, "working-with-children").status_code == 200

    response = client.get("/worker/compliance/documents", headers=headers)
    assert response.status_code == 200
    documents = response.json()
    assert [d["requirementType"] for d in documents] == ["working-with-children", "police-check"]
    assert documents[0]["documentUrl"].startswith("https://r2.test/")


def test_delete_document(client, db, make_worker, storage, auth_headers):
    worker = make_worker()
    headers = auth_headers(worker)
    document_id = upload(client, headers).json()["id"]
    key = next(iter(storage.objects))

    response = client.delete(f"/worker/compliance/documents/{document_id}", headers=headers)
    assert response.status_code == 200
    assert response.json() == {"documentType": "police-check"}
    assert key in storage.deleted
    db.expire_all()
    assert db.query(VerificationRequirement).count() == 0


def test_cannot_delete_another_workers_document(client, make_worker, add_document, auth_headers):
    owner = make_worker()
    other = make_worker()
    document = add_document(owner.worker_profile, "police-check")

    response = client.delete(f"/worker/compliance/documents/{document.id}", headers=auth_headers(other))
    assert response.status_code == 404


def test_compliance_endpoints_need_worker_token(client, make_admin, auth_headers):
    response = client.get("/worker/compliance/documents", headers=auth_headers(make_admin()))
    assert response.status_code == 403

    response = client.get("/worker/compliance/documents", headers={"Authorization": "Bearer abc"})
    assert response.status_code == 401
