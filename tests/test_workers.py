from fakes import fake_geocoder

from remonta.domain.workers import service as worker_service
from remonta.domain.workers.service import merge_requirements
from remonta.models import VerificationRequirement, WorkerProfile, WorkerService

PDF = ("cert.pdf", b"%PDF-1.4 test", "application/pdf")

SYDNEY = {
    "latitude": -33.8688,
    "longitude": 151.2093,
    "city": "Sydney",
    "state": "NSW",
    "postal_code": "2000",
    "formatted_address": "Sydney NSW 2000, Australia",
}


def profile_of(db, user):
    db.expire_all()
    return db.query(WorkerProfile).filter(WorkerProfile.user_id == user.id).one()


def test_get_profile(client, make_worker, auth_headers):
    worker = make_worker(email="jane@example.com")
    response = client.get("/worker/profile", headers=auth_headers(worker))
    assert response.status_code == 200
    body = response.json()
    assert body["email"] == "jane@example.com"
    assert body["setupProgress"]["compliance"] is False
    assert body["isPublished"] is False


def test_update_profile_geocodes_new_location(client, db, make_worker, auth_headers, monkeypatch):
    monkeypatch.setattr(worker_service, "geocode_address", fake_geocoder({"Sydney NSW": SYDNEY}))
    worker = make_worker()

    response = client.patch(
        "/worker/profile",
        headers=auth_headers(worker),
        json={"location": "Sydney NSW", "gender": "female", "dateOfBirth": "1990-01-15", "state": "New South Wales"},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["latitude"] == SYDNEY["latitude"]
    assert body["city"] == "Sydney"
    assert body["postalCode"] == "2000"
    # Explicit fields win over geocoded ones
    assert body["state"] == "New South Wales"
    assert body["gender"] == "Female"
    assert body["age"] >= 34


def test_failed_geocode_keeps_coordinates(client, db, make_worker, auth_headers, monkeypatch):
    monkeypatch.setattr(worker_service, "geocode_address", fake_geocoder({}))
    worker = make_worker(location="Old Town", latitude=-37.8, longitude=144.9)

    response = client.patch("/worker/profile", headers=auth_headers(worker), json={"location": "Nowhere"})
    assert response.status_code == 200
    assert response.json()["latitude"] == -37.8
    assert response.json()["location"] == "Nowhere"


def test_update_profile_validation(client, make_worker, auth_headers):
    headers = auth_headers(make_worker())
    assert client.patch("/worker/profile", headers=headers, json={"mobile": "12345"}).status_code == 422
    assert client.patch("/worker/profile", headers=headers, json={"age": 150}).status_code == 422
    assert client.patch("/worker/profile", headers=headers, json={"firstName": ""}).status_code == 400
    assert client.patch("/worker/profile", headers=headers, json={"dateOfBirth": "someday"}).status_code == 422


def test_complete_profile_marks_account_details(client, db, make_worker, auth_headers):
    worker = make_worker(city="Sydney", state="NSW", postal_code="2000", age=30, gender="Male")
    response = client.patch(
        "/worker/profile",
        headers=auth_headers(worker),
        json={"photos": ["workers/photo.jpg"], "introduction": "Friendly and reliable"},
    )
    assert response.status_code == 200
    assert response.json()["setupProgress"]["accountDetails"] is True


def test_additional_info_upsert(client, make_worker, auth_headers):
    headers = auth_headers(make_worker())
    response = client.put(
        "/worker/additional-info", headers=headers, json={"languages": ["english", " MANDARIN ", ""], "religion": "None"}
    )
    assert response.status_code == 200
    assert response.json()["languages"] == ["English", "Mandarin"]

    response = client.put("/worker/additional-info", headers=headers, json={"interests": ["Cooking"]})
    assert response.json()["languages"] == ["English", "Mandarin"]
    assert response.json()["interests"] == ["Cooking"]


def test_abn(client, db, make_worker, auth_headers):
    worker = make_worker()
    headers = auth_headers(worker)

    response = client.put("/worker/abn", headers=headers, json={"abn": "51 824 753 556"})
    assert response.status_code == 200
    assert response.json() == {"abn": "51824753556"}
    assert profile_of(db, worker).abn == "51824753556"

    assert client.put("/worker/abn", headers=headers, json={"abn": "123"}).status_code == 422


def test_toggle_service(client, db, catalog, make_worker, auth_headers):
    worker = make_worker()
    headers = auth_headers(worker)
    payload = {"categoryId": "cleaning-services", "subcategoryId": "deep-cleaning"}

    response = client.post("/worker/services/toggle", headers=headers, json=payload)
    assert response.status_code == 200
    assert response.json() == {
        "action": "added",
        "services": [
            {
                "categoryId": "cleaning-services",
                "categoryName": "Cleaning Services",
                "subcategories": [{"id": "deep-cleaning", "name": "Deep Cleaning"}],
            }
        ],
    }
    assert profile_of(db, worker).setup_progress["services"] is True

    response = client.post("/worker/services/toggle", headers=headers, json=payload)
    assert response.json() == {"action": "removed", "services": []}
    assert profile_of(db, worker).setup_progress["services"] is False


def test_list_services_groups_by_category(client, make_worker, auth_headers):
    worker = make_worker(services=["physio", "speech", "cleaning"])
    response = client.get("/worker/services", headers=auth_headers(worker))
    assert response.status_code == 200
    groups = {g["categoryId"]: g for g in response.json()}
    assert [s["id"] for s in groups["therapeutic-supports"]["subcategories"]] == [
        "physiotherapist",
        "speech-pathologist",
    ]
    assert groups["cleaning-services"]["categoryName"] == "Cleaning Services"


def test_toggle_unknown_service(client, catalog, make_worker, auth_headers):
    headers = auth_headers(make_worker())
    response = client.post("/worker/services/toggle", headers=headers, json={"categoryId": "juggling"})
    assert response.status_code == 404
    response = client.post(
        "/worker/services/toggle", headers=headers, json={"categoryId": "cleaning-services", "subcategoryId": "nope"}
    )
    assert response.status_code == 404


def test_bulk_update_replaces_category_selection(client, db, catalog, make_worker, auth_headers):
    worker = make_worker(services=["cleaning", "support"])
    headers = auth_headers(worker)

    response = client.put(
        "/worker/services/bulk",
        headers=headers,
        json={"categoryId": "cleaning-services", "subcategoryIds": ["laundry", "deep-cleaning", "laundry"]},
    )
    assert response.status_code == 200
    groups = {g["categoryId"]: g for g in response.json()}
    assert sorted(s["id"] for s in groups["cleaning-services"]["subcategories"]) == ["deep-cleaning", "laundry"]
    assert groups["support-worker"]["subcategories"] == [{"id": "personal-care", "name": "Personal Care"}]

    response = client.put(
        "/worker/services/bulk", headers=headers, json={"categoryId": "cleaning-services", "subcategoryIds": []}
    )
    assert [g["categoryId"] for g in response.json()] == ["support-worker"]
    db.expire_all()
    assert db.query(WorkerService).count() == 1


def test_bulk_update_keeps_category_without_subcategories(client, catalog, make_worker, auth_headers):
    headers = auth_headers(make_worker())
    response = client.put(
        "/worker/services/bulk", headers=headers, json={"categoryId": "personal-trainer", "subcategoryIds": []}
    )
    assert response.json() == [{"categoryId": "personal-trainer", "categoryName": "Personal Trainer", "subcategories": []}]


def test_service_requirements_for_nursing(client, catalog, make_worker, add_document, auth_headers):
    worker = make_worker(services=["nursing"])
    add_document(worker.worker_profile, "nursing-services:ahpra-registration", category="SERVICE_QUALIFICATION")

    response = client.get(
        "/worker/service-requirements", headers=auth_headers(worker), params={"serviceTitle": "Nursing Services"}
    )
    assert response.status_code == 200
    body = response.json()
    assert body["serviceSlug"] == "nursing-services"
    assert body["qualificationGroup"] is None
    by_type = {r["type"]: r for r in body["requirements"]}
    assert by_type["ahpra-registration"]["uploaded"]["status"] == "SUBMITTED"
    assert by_type["qualification-certificate"]["uploaded"] is None
    assert len(body["documents"]) == 1


def test_service_requirements_need_title(client, make_worker, auth_headers):
    response = client.get("/worker/service-requirements", headers=auth_headers(make_worker()))
    assert response.status_code == 400


def test_support_worker_group_is_informational(client, catalog, make_worker, auth_headers):
    response = client.get(
        "/worker/service-requirements",
        headers=auth_headers(make_worker(services=["support"])),
        params={"serviceTitle": "Support Worker"},
    )
    group = response.json()["qualificationGroup"]
    assert group["enforced"] is False
    assert group["options"][0]["type"] == "cert3-aged-care"


def test_upload_service_documents_completes_services(client, db, catalog, make_worker, storage, auth_headers):
    worker = make_worker(services=["nursing"])
    headers = auth_headers(worker)

    response = client.post(
        "/worker/service-documents",
        headers=headers,
        files={"file": PDF},
        data={"serviceTitle": "Nursing Services", "requirementType": "ahpra-registration"},
    )
    assert response.status_code == 200
    assert response.json()["requirementType"] == "nursing-services:ahpra-registration"
    assert response.json()["documentName"] == "AHPRA Registration"
    assert next(iter(storage.objects)).startswith(
        f"workers/{worker.id}/service-documents/nursing-services/ahpra-registration/"
    )
    assert profile_of(db, worker).setup_progress["services"] is False

    response = client.post(
        "/worker/service-documents",
        headers=headers,
        files={"file": PDF},
        data={"serviceTitle": "Nursing Services", "requirementType": "qualification-certificate"},
    )
    assert response.status_code == 200
    profile = profile_of(db, worker)
    assert profile.setup_progress["services"] is True

    requirement = (
        db.query(VerificationRequirement)
        .filter(VerificationRequirement.requirement_type == "nursing-services:qualification-certificate")
        .one()
    )
    assert requirement.document_category == "SERVICE_QUALIFICATION"
    assert requirement.is_required is True
    assert requirement.meta == {"serviceTitle": "Nursing Services"}


def test_upload_service_document_validation(client, make_worker, auth_headers):
    headers = auth_headers(make_worker(services=["nursing"]))
    response = client.post(
        "/worker/service-documents", headers=headers, files={"file": PDF}, data={"serviceTitle": "Nursing Services"}
    )
    assert response.status_code == 400
    response = client.post(
        "/worker/service-documents",
        headers=headers,
        files={"file": ("cert.gif", b"GIF89a", "image/gif")},
        data={"serviceTitle": "Nursing Services", "requirementType": "ahpra-registration"},
    )
    assert response.status_code == 400


def test_delete_service_document(client, db, catalog, make_worker, add_document, storage, auth_headers):
    worker = make_worker(services=["nursing"])
    key = add_document(worker.worker_profile, "nursing-services:ahpra-registration").document_url
    headers = auth_headers(worker)

    response = client.delete(
        "/worker/service-documents", headers=headers, params={"requirementType": "nursing-services:ahpra-registration"}
    )
    assert response.status_code == 200
    assert key in storage.deleted

    response = client.delete(
        "/worker/service-documents", headers=headers, params={"requirementType": "nursing-services:ahpra-registration"}
    )
    assert response.status_code == 404


def test_merge_requirements_required_wins():
    merged = merge_requirements(
        [
            [{"type": "qualification-certificate", "required": False}],
            [{"type": "qualification-certificate", "required": True}, {"type": "ahpra-registration", "required": True}],
        ]
    )
    assert merged == [
        {"type": "qualification-certificate", "required": True},
        {"type": "ahpra-registration", "required": True},
    ]
