"""Progress repository - Database operations for worker setup progress"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import VerificationRequirement, WorkerProfile, WorkerService


class ProgressRepository:
    """Repository for setup progress database operations"""

    @staticmethod
    def get_profile_by_user_id(db: Session, user_id: str) -> Optional[WorkerProfile]:
        return db.query(WorkerProfile).filter(WorkerProfile.user_id == user_id).first()

    @staticmethod
    def get_services(db: Session, worker_profile_id: str) -> list[WorkerService]:
        return db.query(WorkerService).filter(WorkerService.worker_profile_id == worker_profile_id).all()

    @staticmethod
    def get_requirements(db: Session, worker_profile_id: str) -> list[VerificationRequirement]:
        return (
            db.query(VerificationRequirement)
            .filter(VerificationRequirement.worker_profile_id == worker_profile_id)
            .all()
        )

    @staticmethod
    def save_progress(db: Session, profile: WorkerProfile, progress: dict, **updates) -> WorkerProfile:
        """Persist setup progress (and optional extra columns)"""
        profile.setup_progress = dict(progress)
        for key, value in updates.items():
            setattr(profile, key, value)
        db.commit()
        db.refresh(profile)
        return profile
