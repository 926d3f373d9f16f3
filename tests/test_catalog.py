from types import SimpleNamespace

from remonta.domain.catalog.seed_data import CATEGORIES, DOCUMENTS, expand_document_refs
from remonta.domain.catalog.service import CatalogService, base_document_ids, training_document_ids

CORE = ["identity-points-100", "abn-contractor", "police-check", "ndis-screening-check", "right-to-work"]


def service_row(category_id, category_name, subcategory_id=None):
    return SimpleNamespace(category_id=category_id, category_name=category_name, subcategory_id=subcategory_id)


def test_expand_document_refs_is_recursive_and_deduplicated():
    expanded = expand_document_refs(["$ref:care-compliance", "police-check"])
    assert expanded[:5] == CORE
    assert expanded.count("police-check") == 1
    assert "working-with-children" in expanded
    assert "infection-control-training" in expanded


def test_expand_document_refs_ignores_unknown_sets():
    assert expand_document_refs(["$ref:nope", "police-check"]) == ["police-check"]
    assert expand_document_refs("$ref:vehicle") == ["drivers-licence", "car-insurance"]


def test_seed_counts(db):
    counts = CatalogService(db).seed_catalog()
    assert counts["documents"] == len(DOCUMENTS)
    assert counts["categories"] == len(CATEGORIES)
    assert counts["subcategories"] == sum(len(c.get("subcategories", [])) for c in CATEGORIES)


def test_seed_is_repeatable(db):
    service = CatalogService(db)
    first = service.seed_catalog()
    second = service.seed_catalog()
    assert first == second


def test_cleaning_matrix_has_core_documents_and_no_trainings(db, catalog):
    matrix = CatalogService(db).get_requirement_matrix([service_row("cleaning-services", "Cleaning Services")])
    assert base_document_ids(matrix) == CORE
    assert training_document_ids(matrix) == []


def test_support_worker_matrix_includes_trainings_and_conditionals(db, catalog):
    matrix = CatalogService(db).get_requirement_matrix(
        [service_row("support-worker", "Support Worker", "personal-care")]
    )
    assert "working-with-children" in base_document_ids(matrix)
    assert sorted(training_document_ids(matrix)) == ["infection-control-training", "ndis-worker-orientation"]
    conditions = {c["document"]["id"]: c["condition"] for c in matrix["conditional"]}
    assert conditions == {"drivers-licence": "hasVehicle", "car-insurance": "hasVehicle"}


def test_matrix_merges_services_and_subcategory_documents(db, catalog):
    matrix = CatalogService(db).get_requirement_matrix(
        [
            service_row("cleaning-services", "Cleaning Services"),
            service_row("therapeutic-supports", "Therapeutic Supports", "physiotherapist"),
        ]
    )
    base = base_document_ids(matrix)
    assert len(base) == len(set(base))
    assert "working-with-children" in base
    assert [d["id"] for d in matrix["subcategoryDocuments"]] == ["ahpra-registration"]


def test_matrix_matches_category_by_name(db, catalog):
    matrix = CatalogService(db).get_requirement_matrix([service_row(None, "Cleaning Services")])
    assert base_document_ids(matrix) == CORE


def test_list_categories_endpoint(client, catalog):
    response = client.get("/categories")
    assert response.status_code == 200
    categories = response.json()
    assert [c["name"] for c in categories[:2]] == ["Support Worker", "Support Worker (High Intensity)"]

    cleaning = next(c for c in categories if c["id"] == "cleaning-services")
    assert [d["id"] for d in cleaning["documents"]["required"]] == CORE
    assert [d["id"] for d in cleaning["documents"]["optional"]] == ["public-liability-10m"]
    assert [s["name"] for s in cleaning["subcategories"]] == sorted(s["name"] for s in cleaning["subcategories"])

    therapy = next(c for c in categories if c["id"] == "therapeutic-supports")
    physio = next(s for s in therapy["subcategories"] if s["id"] == "physiotherapist")
    assert physio["requiresRegistration"] is True
    assert physio["additionalDocuments"][0]["id"] == "ahpra-registration"


def test_unlisted_categories_follow_alphabetically(client, db):
    extra = [{"id": "zeta", "name": "Zeta"}, {"id": "alpha", "name": "Alpha"}]
    CatalogService(db).seed_catalog(categories=CATEGORIES + extra)

    names = [c["name"] for c in client.get("/categories").json()]
    assert names == [
        "Support Worker",
        "Support Worker (High Intensity)",
        "Therapeutic Supports",
        "Nursing Services",
        "Cleaning Services",
        "Home and Yard Maintenance",
        "Alpha",
        "Personal Trainer",
        "Zeta",
    ]


def test_list_categories_is_cached_until_reseed(client, db, catalog, fake_redis):
    first = client.get("/categories").json()
    assert fake_redis.get("catalog:categories") is not None
    assert client.get("/categories").json() == first

    CatalogService(db).seed_catalog()
    assert fake_redis.get("catalog:categories") is None
