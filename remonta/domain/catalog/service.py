"""Catalog service - Category listing, seeding and document requirement matrix"""

import logging

from sqlalchemy.orm import Session

from ...cache import get_categories_cached, invalidate_catalog_cache, set_categories_cached
from ...models import Category, CategoryDocument, Document, Subcategory, SubcategoryDocument
from ...shared.validators import slugify
from .repository import CatalogRepository
from .seed_data import CATEGORIES, DOCUMENT_SETS, DOCUMENTS, expand_document_refs

logger = logging.getLogger(__name__)

# Preferred display order; anything else follows alphabetically
CATEGORY_ORDER = [
    "Support Worker",
    "Support Worker (High Intensity)",
    "Therapeutic Supports",
    "Nursing Services",
    "Cleaning Services",
    "Home and Yard Maintenance",
]

BASE_DOCUMENT_CATEGORIES = ("IDENTITY", "BUSINESS", "COMPLIANCE")
TRAINING_DOCUMENT_CATEGORY = "TRAINING"


def format_document(document: Document) -> dict:
    return {
        "id": document.id,
        "name": document.name,
        "category": document.category,
        "description": document.description,
        "hasExpiration": document.has_expiration,
    }


def format_category(category: Category) -> dict:
    """Group category documents into required/optional/conditional"""
    grouped = {"required": [], "optional": [], "conditional": []}
    for cd in category.documents:
        doc = format_document(cd.document)
        if cd.document_type == "REQUIRED":
            grouped["required"].append(doc)
        elif cd.document_type == "OPTIONAL":
            grouped["optional"].append(doc)
        elif cd.document_type == "CONDITIONAL":
            grouped["conditional"].append(
                {"document": doc, "condition": cd.condition_key, "requiredIf": cd.required_if_true}
            )

    return {
        "id": category.id,
        "name": category.name,
        "requiresQualification": category.requires_qualification,
        "documents": grouped,
        "subcategories": [
            {
                "id": sub.id,
                "name": sub.name,
                "requiresRegistration": sub.requires_registration,
                "additionalDocuments": [format_document(sd.document) for sd in sub.additional_documents],
            }
            for sub in sorted(category.subcategories, key=lambda s: s.name)
        ],
    }


def category_sort_key(name: str) -> tuple:
    if name in CATEGORY_ORDER:
        return (0, CATEGORY_ORDER.index(name), "")
    return (1, 0, name.lower())


class CatalogService:
    """Service layer for the service catalog"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = CatalogRepository()

    def seed_catalog(self, categories=None, documents=None, document_sets=None) -> dict:
        """
        Replace the catalog with the static data set.

        Returns counts of the inserted rows.
        """
        categories = CATEGORIES if categories is None else categories
        documents = DOCUMENTS if documents is None else documents
        document_sets = DOCUMENT_SETS if document_sets is None else document_sets
        counts = {"documents": 0, "categories": 0, "categoryDocuments": 0, "subcategories": 0}

        try:
            self.repo.clear_catalog(self.db)

            for doc in documents:
                self.db.add(
                    Document(
                        id=doc["id"],
                        name=doc["name"],
                        category=doc["category"],
                        description=doc.get("description"),
                        has_expiration=doc.get("hasExpiration", False),
                    )
                )
            counts["documents"] = len(documents)
            self.db.flush()

            for data in categories:
                category = Category(
                    id=data["id"],
                    name=data["name"],
                    requires_qualification=data.get("requiresQualification", False),
                )
                self.db.add(category)
                counts["categories"] += 1

                docs = data.get("documents") or {}
                shared = data.get("sharedDocuments") or {}
                links = [
                    (doc_id, "REQUIRED", None, None)
                    for doc_id in expand_document_refs(
                        docs.get("required", []) + shared.get("required", []), document_sets
                    )
                ]
                links += [
                    (doc_id, "OPTIONAL", None, None)
                    for doc_id in expand_document_refs(docs.get("optional", []), document_sets)
                ]
                for cond in docs.get("conditional", []):
                    links += [
                        (doc_id, "CONDITIONAL", cond.get("condition"), cond.get("requiredIf"))
                        for doc_id in expand_document_refs(cond["documents"], document_sets)
                    ]

                for doc_id, doc_type, condition_key, required_if in links:
                    category.documents.append(
                        CategoryDocument(
                            document_id=doc_id,
                            document_type=doc_type,
                            condition_key=condition_key,
                            required_if_true=required_if,
                        )
                    )
                counts["categoryDocuments"] += len(links)

                for sub in data.get("subcategories", []):
                    subcategory = Subcategory(
                        id=sub["id"],
                        name=sub["name"],
                        requires_registration=sub.get("requiresRegistration", False),
                    )
                    extra = (sub.get("additionalDocuments") or {}).get("required", [])
                    for doc_id in expand_document_refs(extra, document_sets):
                        subcategory.additional_documents.append(SubcategoryDocument(document_id=doc_id))
                    category.subcategories.append(subcategory)
                    counts["subcategories"] += 1

            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Catalog seed failed: {e}")
            raise

        invalidate_catalog_cache()
        logger.info(
            f"✅ Seeded catalog: {counts['documents']} documents, {counts['categories']} categories, "
            f"{counts['subcategories']} subcategories"
        )
        return counts

    def list_categories(self) -> list[dict]:
        """Formatted categories in display order (cached)"""
        cached = get_categories_cached()
        if cached is not None:
            return cached

        formatted = [format_category(c) for c in self.repo.list_categories(self.db)]
        formatted.sort(key=lambda c: category_sort_key(c["name"]))
        set_categories_cached(formatted)
        return formatted

    def get_requirement_matrix(self, services) -> dict:
        """
        Documents required by the union of a worker's services.

        `services` are WorkerService rows (or objects with category_id,
        category_name and subcategory_id). Categories match by id, or by
        name for rows whose slugified name differs from the id.
        """
        ids: set[str] = set()
        names: set[str] = set()
        subcategory_ids: set[str] = set()
        for service in services:
            if service.category_id:
                ids.add(service.category_id)
            if service.category_name:
                names.add(service.category_name)
                ids.add(slugify(service.category_name))
            if service.subcategory_id:
                subcategory_ids.add(service.subcategory_id)

        matrix = {
            "base": [],
            "training": [],
            "categoryDocuments": [],
            "subcategoryDocuments": [],
            "conditional": [],
        }
        seen_base: set[str] = set()
        seen_training: set[str] = set()

        for category in self.repo.find_categories(self.db, ids, names):
            for cd in category.documents:
                doc = format_document(cd.document)
                matrix["categoryDocuments"].append(
                    {**doc, "categoryId": category.id, "documentType": cd.document_type}
                )
                if cd.document_type == "CONDITIONAL":
                    matrix["conditional"].append(
                        {
                            "document": doc,
                            "categoryId": category.id,
                            "condition": cd.condition_key,
                            "requiredIf": cd.required_if_true,
                        }
                    )
                if doc["category"] in BASE_DOCUMENT_CATEGORIES and doc["id"] not in seen_base:
                    seen_base.add(doc["id"])
                    matrix["base"].append(doc)
                elif doc["category"] == TRAINING_DOCUMENT_CATEGORY and doc["id"] not in seen_training:
                    seen_training.add(doc["id"])
                    matrix["training"].append(doc)

        for sd in self.repo.find_subcategory_documents(self.db, subcategory_ids):
            matrix["subcategoryDocuments"].append(
                {**format_document(sd.document), "subcategoryId": sd.subcategory_id}
            )

        return matrix


def base_document_ids(matrix: dict) -> list[str]:
    return [doc["id"] for doc in matrix["base"]]


def training_document_ids(matrix: dict) -> list[str]:
    return [doc["id"] for doc in matrix["training"]]
