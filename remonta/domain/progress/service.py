"""Progress service - Worker setup progress tracking and automatic section updates"""

import logging
from typing import Callable, Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import User, VerificationStatus, WorkerProfile
from ..catalog.service import CatalogService, base_document_ids, training_document_ids
from ..compliance.evaluator import (
    check_account_details_completion,
    check_compliance_completion,
    check_services_completion,
    check_trainings_completion,
)
from .repository import ProgressRepository

logger = logging.getLogger(__name__)

SECTIONS = ["accountDetails", "compliance", "trainings", "services"]

# URL slug -> progress key
SECTION_SLUGS = {
    "account-details": "accountDetails",
    "compliance": "compliance",
    "trainings": "trainings",
    "services": "services",
}


def default_setup_progress() -> dict:
    return {section: False for section in SECTIONS}


def parse_setup_progress(value) -> dict:
    """Normalize stored progress: known sections only, booleans, missing -> False"""
    if not isinstance(value, dict):
        return default_setup_progress()
    return {section: bool(value.get(section, False)) for section in SECTIONS}


def is_all_sections_completed(progress: dict) -> bool:
    return all(progress.get(section) for section in SECTIONS)


def get_completion_percentage(progress: dict) -> int:
    completed = sum(1 for section in SECTIONS if progress.get(section))
    return round(100 * completed / len(SECTIONS))


class ProgressService:
    """Service layer for worker setup progress"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ProgressRepository()

    def _get_profile(self, user: User) -> WorkerProfile:
        profile = self.repo.get_profile_by_user_id(self.db, user.id)
        if not profile:
            raise HTTPException(status_code=404, detail="Worker profile not found")
        return profile

    def get_setup_progress(self, user: User) -> dict:
        profile = self._get_profile(user)
        progress = parse_setup_progress(profile.setup_progress)
        return {
            "currentSection": profile.current_setup_section,
            "progress": progress,
            "verificationStatus": profile.verification_status,
            "completionPercentage": get_completion_percentage(progress),
        }

    def update_current_section(self, user: User, section: str) -> dict:
        """Remember which section the worker is on"""
        if section not in SECTION_SLUGS:
            raise HTTPException(status_code=400, detail=f"Invalid section: {section}")

        profile = self._get_profile(user)
        profile.current_setup_section = section
        self.db.commit()
        return {"message": f"Current section updated to {section}", "currentSection": section}

    def update_section_completion(self, user: User, section: str, completed: bool) -> dict:
        """
        Mark a section complete/incomplete.

        All four complete moves the worker to PENDING_REVIEW; otherwise a
        worker who has not started moves to IN_PROGRESS.
        """
        if section not in SECTIONS:
            raise HTTPException(status_code=400, detail=f"Invalid section: {section}")

        profile = self._get_profile(user)
        progress = parse_setup_progress(profile.setup_progress)
        progress[section] = bool(completed)

        status = profile.verification_status
        if is_all_sections_completed(progress):
            status = VerificationStatus.PENDING_REVIEW
        elif status == VerificationStatus.NOT_STARTED:
            status = VerificationStatus.IN_PROGRESS

        self.repo.save_progress(self.db, profile, progress, verification_status=status)
        logger.info(
            f"✅ Worker {profile.id}: {section} marked as {'completed' if completed else 'incomplete'} "
            f"(status {status})"
        )
        return {"progress": progress, "verificationStatus": status}

    def refresh_all(self, user: User) -> dict:
        """Recompute every section, then report progress"""
        profile = self._get_profile(user)
        refresh_progress(self.db, profile, SECTIONS)
        return self.get_setup_progress(user)


# ============================================================================
# AUTOMATIC SECTION UPDATES
# ============================================================================


def _evaluate_compliance(db: Session, profile: WorkerProfile) -> bool:
    services = ProgressRepository.get_services(db, profile.id)
    if not services:
        return False
    matrix = CatalogService(db).get_requirement_matrix(services)
    requirements = ProgressRepository.get_requirements(db, profile.id)
    return check_compliance_completion(profile, services, base_document_ids(matrix), requirements)


def _evaluate_trainings(db: Session, profile: WorkerProfile) -> bool:
    services = ProgressRepository.get_services(db, profile.id)
    if not services:
        return False
    matrix = CatalogService(db).get_requirement_matrix(services)
    requirements = ProgressRepository.get_requirements(db, profile.id)
    return check_trainings_completion(services, training_document_ids(matrix), requirements)


def _evaluate_services(db: Session, profile: WorkerProfile) -> bool:
    services = ProgressRepository.get_services(db, profile.id)
    requirements = ProgressRepository.get_requirements(db, profile.id)
    return check_services_completion(services, requirements)


def _evaluate_account_details(db: Session, profile: WorkerProfile) -> bool:
    return check_account_details_completion(profile)


def _auto_update(db: Session, profile: WorkerProfile, section: str,
                 evaluate: Callable[[Session, WorkerProfile], bool]) -> Optional[bool]:
    """
    Recompute one section and write it only when it changed.

    Never raises; returns the computed value, or None on failure.
    """
    try:
        try:
            is_complete = evaluate(db, profile)
        except Exception as e:
            logger.error(f"❌ Error checking {section} completion for worker {profile.id}: {e}")
            is_complete = False

        progress = parse_setup_progress(profile.setup_progress)
        if progress[section] != is_complete:
            progress[section] = is_complete
            ProgressRepository.save_progress(db, profile, progress)
            logger.info(
                f"📋 Worker {profile.id}: {section} marked as {'complete' if is_complete else 'incomplete'}"
            )
        return is_complete
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Error auto-updating {section} for worker {profile.id}: {e}")
        return None


def auto_update_account_details(db: Session, profile: WorkerProfile) -> Optional[bool]:
    return _auto_update(db, profile, "accountDetails", _evaluate_account_details)


def auto_update_compliance(db: Session, profile: WorkerProfile) -> Optional[bool]:
    return _auto_update(db, profile, "compliance", _evaluate_compliance)


def auto_update_trainings(db: Session, profile: WorkerProfile) -> Optional[bool]:
    return _auto_update(db, profile, "trainings", _evaluate_trainings)


def auto_update_services(db: Session, profile: WorkerProfile) -> Optional[bool]:
    return _auto_update(db, profile, "services", _evaluate_services)


AUTO_UPDATERS = {
    "accountDetails": auto_update_account_details,
    "compliance": auto_update_compliance,
    "trainings": auto_update_trainings,
    "services": auto_update_services,
}


def refresh_progress(db: Session, profile: WorkerProfile, sections: list[str]) -> dict:
    """Run the automatic update for each named section"""
    return {section: AUTO_UPDATERS[section](db, profile) for section in sections}
