"""
Setup completion rules.

Pure functions over a worker's profile, services and verification
requirements. The DB-backed wrappers in the progress domain load the rows
and the catalog requirement matrix, then call these.
"""

import logging

from ...models import RequirementStatus
from .document_types import ALIAS_TYPES, PRIMARY, SECONDARY, accepted_types
from .service_requirements import (
    get_qualification_group,
    get_service_document_requirements,
    service_requirement_type,
)

logger = logging.getLogger(__name__)

VALID_STATUSES = (RequirementStatus.APPROVED, "PENDING_REVIEW", RequirementStatus.SUBMITTED)


def _is_valid(requirement) -> bool:
    return requirement.status in VALID_STATUSES


def _valid_types(requirements) -> set[str]:
    return {r.requirement_type for r in requirements if _is_valid(r)}


def is_base_document_satisfied(document_id: str, profile, requirements) -> bool:
    """Whether one base compliance document is covered"""
    if document_id == "identity-points-100":
        has_primary = any(r.document_category == PRIMARY for r in requirements)
        has_secondary = any(r.document_category == SECONDARY for r in requirements)
        return has_primary and has_secondary

    if document_id == "abn-contractor":
        return bool(profile.abn and profile.abn.strip())

    uploaded = {r.requirement_type for r in requirements}
    return bool(accepted_types(document_id) & uploaded)


def check_compliance_completion(profile, services, base_ids, requirements) -> bool:
    """Base compliance documents present, and every relevant upload in a valid status"""
    if not services or not base_ids:
        return False

    missing = [doc_id for doc_id in base_ids if not is_base_document_satisfied(doc_id, profile, requirements)]
    if missing:
        logger.debug(f"📋 Compliance incomplete for worker {profile.id}, missing: {missing}")
        return False

    base = set(base_ids)
    relevant = [
        r
        for r in requirements
        if r.requirement_type in base
        or r.document_category in (PRIMARY, SECONDARY)
        or r.requirement_type in ALIAS_TYPES
    ]
    return bool(relevant) and all(_is_valid(r) for r in relevant)


def check_trainings_completion(services, training_ids, requirements) -> bool:
    """Every required training (alias-aware) uploaded with a valid status"""
    if not services:
        return False
    if not training_ids:
        return True

    uploaded = _valid_types(requirements)
    return all(accepted_types(doc_id) & uploaded for doc_id in training_ids)


def check_services_completion(services, requirements) -> bool:
    """
    At least one service, with its required qualification documents uploaded.

    A required qualification certificate is also satisfied by any member of
    the service's qualification group.
    """
    if not services:
        return False

    uploaded = _valid_types(requirements)
    for service in services:
        title = service.category_name
        group = get_qualification_group(title, service.subcategory_id)
        group_types = set()
        if group:
            group_types = {service_requirement_type(title, o["type"]) for o in group["options"]}

        for rule in get_service_document_requirements(title, service.subcategory_id):
            if not rule["required"]:
                continue
            stored_type = service_requirement_type(title, rule["type"])
            if stored_type in uploaded:
                continue
            if group and group["enforced"] and rule["type"] == group["satisfies"] and group_types & uploaded:
                continue
            return False

    return True


def check_account_details_completion(profile) -> bool:
    """Names, a photo, introduction, address parts, age (0 counts) and gender"""
    return bool(
        profile.first_name
        and profile.last_name
        and profile.photos
        and profile.introduction
        and profile.city
        and profile.state
        and profile.postal_code
        and profile.age is not None
        and profile.gender
    )
