"""Worker service - Profile, services and service qualification documents"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...geocoding import geocode_address
from ...models import (
    RequirementStatus,
    User,
    VerificationRequirement,
    WorkerProfile,
    WorkerService,
    utcnow,
)
from ...shared.validators import calculate_age, parse_date, to_title_case
from ...utils.storage import R2DocumentStorage, build_service_document_key, validate_document_file
from ..catalog.repository import CatalogRepository
from ..compliance.document_types import SERVICE_QUALIFICATION
from ..compliance.repository import ComplianceRepository
from ..compliance.service import format_requirement, mark_resubmitted
from ..compliance.service_requirements import (
    get_qualification_group,
    get_service_document_requirements,
    service_requirement_type,
    service_slug,
)
from ..progress.service import auto_update_account_details, parse_setup_progress, refresh_progress
from .repository import WorkerRepository
from .schemas import AdditionalInfoUpdate, WorkerProfileUpdate

logger = logging.getLogger(__name__)

SERVICE_SECTIONS = ["compliance", "trainings", "services"]

# Request field -> column
PROFILE_FIELDS = {
    "firstName": "first_name",
    "lastName": "last_name",
    "mobile": "mobile",
    "location": "location",
    "city": "city",
    "state": "state",
    "postalCode": "postal_code",
    "age": "age",
    "dateOfBirth": "date_of_birth",
    "gender": "gender",
    "languages": "languages",
    "photos": "photos",
    "introduction": "introduction",
    "experience": "experience",
    "hasVehicle": "has_vehicle",
}


def format_additional_info(info) -> Optional[dict]:
    if not info:
        return None
    return {
        "languages": info.languages or [],
        "culturalBackground": info.cultural_background,
        "religion": info.religion,
        "interests": info.interests or [],
        "personality": info.personality,
    }


def format_profile(profile: WorkerProfile) -> dict:
    return {
        "id": profile.id,
        "userId": profile.user_id,
        "email": profile.user.email if profile.user else None,
        "firstName": profile.first_name,
        "lastName": profile.last_name,
        "mobile": profile.mobile,
        "location": profile.location,
        "city": profile.city,
        "state": profile.state,
        "postalCode": profile.postal_code,
        "latitude": profile.latitude,
        "longitude": profile.longitude,
        "age": profile.age,
        "dateOfBirth": profile.date_of_birth,
        "gender": profile.gender,
        "languages": profile.languages or [],
        "photos": profile.photos or [],
        "introduction": profile.introduction,
        "experience": profile.experience,
        "abn": profile.abn,
        "hasVehicle": bool(profile.has_vehicle),
        "isPublished": profile.is_published,
        "verificationStatus": profile.verification_status,
        "setupProgress": parse_setup_progress(profile.setup_progress),
        "additionalInfo": format_additional_info(profile.additional_info),
        "createdAt": profile.created_at,
    }


def group_services(services: list[WorkerService]) -> list[dict]:
    """Rows grouped by category; a category-only row has no subcategories"""
    grouped: dict[str, dict] = {}
    for ws in services:
        entry = grouped.setdefault(
            ws.category_id,
            {"categoryId": ws.category_id, "categoryName": ws.category_name, "subcategories": []},
        )
        if ws.subcategory_id:
            entry["subcategories"].append({"id": ws.subcategory_id, "name": ws.subcategory_name})
    return list(grouped.values())


def merge_requirements(rule_lists: list[list[dict]]) -> list[dict]:
    """Union of rule lists by type; required wins"""
    merged: dict[str, dict] = {}
    for rules in rule_lists:
        for rule in rules:
            existing = merged.get(rule["type"])
            if existing is None:
                merged[rule["type"]] = dict(rule)
            elif rule["required"]:
                existing["required"] = True
    return list(merged.values())


class WorkerProfileService:
    """Service layer for the worker's own profile and services"""

    def __init__(self, db: Session, storage: R2DocumentStorage):
        self.db = db
        self.storage = storage
        self.repo = WorkerRepository()
        self.catalog_repo = CatalogRepository()
        self.compliance_repo = ComplianceRepository()

    def _get_profile(self, user: User) -> WorkerProfile:
        profile = self.repo.get_profile_by_user_id(self.db, user.id)
        if not profile:
            raise HTTPException(status_code=404, detail="Worker profile not found")
        return profile

    # ------------------------------------------------------------------
    # Profile
    # ------------------------------------------------------------------

    def get_profile(self, user: User) -> dict:
        return format_profile(self._get_profile(user))

    async def update_profile(self, user: User, data: WorkerProfileUpdate) -> dict:
        """
        Update profile fields.

        A changed location is geocoded (failures keep the old coordinates);
        explicit city/state/postcode in the request win over geocoded ones.
        """
        profile = self._get_profile(user)
        provided = data.model_dump(exclude_unset=True)

        updates = {PROFILE_FIELDS[k]: v for k, v in provided.items() if k in PROFILE_FIELDS}
        for required in ("first_name", "last_name", "mobile"):
            if required in updates and not updates[required]:
                raise HTTPException(status_code=400, detail=f"{required.replace('_', ' ').capitalize()} cannot be empty")

        if "date_of_birth" in updates and updates["date_of_birth"]:
            age = calculate_age(updates["date_of_birth"])
            if age is None:
                raise HTTPException(status_code=422, detail="Invalid date of birth")
            updates.setdefault("age", age)
            updates["date_of_birth"] = parse_date(updates["date_of_birth"]).isoformat()

        new_location = updates.get("location")
        if new_location and new_location.strip() != (profile.location or "").strip():
            geo = await geocode_address(new_location)
            if geo:
                updates["latitude"] = geo["latitude"]
                updates["longitude"] = geo["longitude"]
                for key in ("city", "state", "postal_code"):
                    if geo.get(key) and key not in updates:
                        updates[key] = geo[key]
            else:
                logger.warning(f"⚠️ Could not geocode '{new_location}' for worker {profile.id}")

        profile = self.repo.update_profile(self.db, profile, **updates)
        logger.info(f"✅ Updated profile for worker {profile.id}: {sorted(updates)}")

        auto_update_account_details(self.db, profile)
        return format_profile(profile)

    def update_additional_info(self, user: User, data: AdditionalInfoUpdate) -> dict:
        profile = self._get_profile(user)
        provided = data.model_dump(exclude_unset=True)

        fields = {}
        if "languages" in provided:
            fields["languages"] = [to_title_case(lang.strip()) for lang in provided["languages"] or [] if lang.strip()]
        if "culturalBackground" in provided:
            fields["cultural_background"] = provided["culturalBackground"]
        if "religion" in provided:
            fields["religion"] = provided["religion"]
        if "interests" in provided:
            fields["interests"] = provided["interests"] or []
        if "personality" in provided:
            fields["personality"] = provided["personality"]

        info = self.repo.upsert_additional_info(self.db, profile, **fields)
        return format_additional_info(info)

    def update_abn(self, user: User, abn: Optional[str]) -> dict:
        """Store (or clear) the ABN, then recompute compliance"""
        profile = self._get_profile(user)
        profile = self.repo.update_profile(self.db, profile, abn=abn)
        logger.info(f"✅ {'Saved' if abn else 'Cleared'} ABN for worker {profile.id}")

        refresh_progress(self.db, profile, ["compliance"])
        return {"abn": profile.abn}

    # ------------------------------------------------------------------
    # Services
    # ------------------------------------------------------------------

    def list_services(self, user: User) -> list[dict]:
        profile = self._get_profile(user)
        return group_services(self.repo.get_services(self.db, profile.id))

    def _resolve_catalog(self, category_id: str, subcategory_ids: list[str]):
        category = self.catalog_repo.get_category(self.db, category_id)
        if not category:
            raise HTTPException(status_code=404, detail=f"Category not found: {category_id}")

        subcategories = []
        for sub_id in subcategory_ids:
            subcategory = self.catalog_repo.get_subcategory(self.db, category_id, sub_id)
            if not subcategory:
                raise HTTPException(status_code=404, detail=f"Subcategory not found: {sub_id}")
            subcategories.append(subcategory)
        return category, subcategories

    def toggle_service(self, user: User, category_id: str, subcategory_id: Optional[str] = None) -> dict:
        """Add the service if the worker lacks it, remove it otherwise"""
        profile = self._get_profile(user)
        category, subcategories = self._resolve_catalog(category_id, [subcategory_id] if subcategory_id else [])
        subcategory = subcategories[0] if subcategories else None

        existing = self.repo.find_service(self.db, profile.id, category.id, subcategory_id)
        if existing:
            self.db.delete(existing)
            action = "removed"
        else:
            self.db.add(
                WorkerService(
                    worker_profile_id=profile.id,
                    category_id=category.id,
                    category_name=category.name,
                    subcategory_id=subcategory.id if subcategory else None,
                    subcategory_name=subcategory.name if subcategory else None,
                )
            )
            action = "added"
        self.db.commit()
        logger.info(f"🔁 Service {category.id}/{subcategory_id or '-'} {action} for worker {profile.id}")

        refresh_progress(self.db, profile, SERVICE_SECTIONS)
        return {"action": action, "services": group_services(self.repo.get_services(self.db, profile.id))}

    def bulk_update_services(self, user: User, category_id: str, subcategory_ids: list[str]) -> list[dict]:
        """
        Replace the worker's rows for one category.

        An empty selection removes the category, unless the category has no
        subcategories, in which case the category itself is kept.
        """
        profile = self._get_profile(user)
        unique_ids = list(dict.fromkeys(subcategory_ids))
        category, subcategories = self._resolve_catalog(category_id, unique_ids)

        try:
            self.repo.delete_category_services(self.db, profile.id, category.id)
            if subcategories:
                for subcategory in subcategories:
                    self.db.add(
                        WorkerService(
                            worker_profile_id=profile.id,
                            category_id=category.id,
                            category_name=category.name,
                            subcategory_id=subcategory.id,
                            subcategory_name=subcategory.name,
                        )
                    )
            elif not category.subcategories:
                self.db.add(
                    WorkerService(
                        worker_profile_id=profile.id,
                        category_id=category.id,
                        category_name=category.name,
                    )
                )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"🔁 Worker {profile.id} now has {len(subcategories)} subcategories in {category.id}")
        refresh_progress(self.db, profile, SERVICE_SECTIONS)
        return group_services(self.repo.get_services(self.db, profile.id))

    # ------------------------------------------------------------------
    # Service documents
    # ------------------------------------------------------------------

    def _rules_for(self, profile: WorkerProfile, service_title: str) -> list[dict]:
        """Rules for the worker's rows in this service (all rows merged)"""
        rows = [
            ws
            for ws in self.repo.get_services(self.db, profile.id)
            if ws.category_name.lower().strip() == service_title.lower().strip()
        ]
        if not rows:
            return get_service_document_requirements(service_title)
        return merge_requirements(
            [get_service_document_requirements(ws.category_name, ws.subcategory_id) for ws in rows]
        )

    def get_service_requirements(self, user: User, service_title: Optional[str]) -> dict:
        if not service_title or not service_title.strip():
            raise HTTPException(status_code=400, detail="serviceTitle is required")

        profile = self._get_profile(user)
        service_title = service_title.strip()
        slug = service_slug(service_title)
        documents = self.compliance_repo.list_by_prefix(self.db, profile.id, f"{slug}:")
        by_type = {d.requirement_type: d for d in documents}

        requirements = []
        for rule in self._rules_for(profile, service_title):
            uploaded = by_type.get(service_requirement_type(service_title, rule["type"]))
            requirements.append(
                {**rule, "uploaded": format_requirement(uploaded, self.storage) if uploaded else None}
            )

        group = get_qualification_group(service_title)
        if group and any(r["type"] == group["satisfies"] and r["required"] for r in requirements):
            group["enforced"] = True

        return {
            "serviceTitle": service_title,
            "serviceSlug": slug,
            "requirements": requirements,
            "qualificationGroup": group,
            "documents": [format_requirement(d, self.storage) for d in documents],
        }

    def _requirement_name(self, profile: WorkerProfile, service_title: str, requirement_type: str) -> tuple[str, bool]:
        for rule in self._rules_for(profile, service_title):
            if rule["type"] == requirement_type:
                return rule["name"], rule["required"]
        group = get_qualification_group(service_title) or {"options": []}
        for option in group["options"]:
            if option["type"] == requirement_type:
                return option["name"], False
        return to_title_case(requirement_type.replace("-", " ")), False

    def upload_service_document(
        self,
        user: User,
        filename: str,
        content: bytes,
        content_type: Optional[str],
        service_title: Optional[str],
        requirement_type: Optional[str],
    ) -> dict:
        """Store a qualification document for one of the worker's services"""
        error = validate_document_file(len(content or b""), content_type)
        if error:
            raise HTTPException(status_code=400, detail=error)
        if not service_title or not service_title.strip() or not requirement_type or not requirement_type.strip():
            raise HTTPException(status_code=400, detail="serviceTitle and requirementType are required")

        service_title = service_title.strip()
        requirement_type = requirement_type.strip()
        profile = self._get_profile(user)

        stored_type = service_requirement_type(service_title, requirement_type)
        key = build_service_document_key(user.id, service_slug(service_title), requirement_type, filename)
        try:
            self.storage.upload(content, key, content_type)
        except Exception as e:
            logger.error(f"❌ Failed to upload service document {key}: {e}")
            raise HTTPException(status_code=500, detail="Failed to upload document") from e

        now = utcnow()
        requirement = self.compliance_repo.get_by_type(self.db, profile.id, stored_type)
        old_key = None
        if requirement:
            old_key = requirement.document_url
            mark_resubmitted(requirement, key, now)
            requirement.meta = {**(requirement.meta or {}), "serviceTitle": service_title}
        else:
            name, is_required = self._requirement_name(profile, service_title, requirement_type)
            requirement = VerificationRequirement(
                worker_profile_id=profile.id,
                requirement_type=stored_type,
                requirement_name=name,
                document_category=SERVICE_QUALIFICATION,
                is_required=is_required,
                status=RequirementStatus.SUBMITTED,
                document_url=key,
                document_uploaded_at=now,
                submitted_at=now,
                meta={"serviceTitle": service_title},
            )
            self.db.add(requirement)
        self.db.commit()
        self.db.refresh(requirement)

        if old_key and old_key != key:
            try:
                self.storage.delete(old_key)
            except Exception as e:
                logger.warning(f"⚠️ Failed to delete replaced blob {old_key}: {e}")

        logger.info(f"✅ Saved service document {stored_type} for worker {profile.id}")
        refresh_progress(self.db, profile, ["services"])

        return {
            "id": requirement.id,
            "documentUrl": self.storage.presigned_url(key),
            "requirementType": stored_type,
            "documentName": requirement.requirement_name,
            "uploadedAt": requirement.document_uploaded_at,
        }

    def delete_service_document(self, user: User, requirement_type: Optional[str]) -> dict:
        if not requirement_type:
            raise HTTPException(status_code=400, detail="requirementType is required")

        profile = self._get_profile(user)
        requirement = self.compliance_repo.get_by_type(self.db, profile.id, requirement_type)
        if not requirement:
            raise HTTPException(status_code=404, detail="Document not found")

        if requirement.document_url:
            try:
                self.storage.delete(requirement.document_url)
            except Exception as e:
                logger.warning(f"⚠️ Failed to delete blob {requirement.document_url}: {e}")
        self.compliance_repo.delete(self.db, requirement)
        logger.info(f"🗑️ Deleted service document {requirement_type} for worker {profile.id}")

        refresh_progress(self.db, profile, ["services"])
        return {"requirementType": requirement_type}
