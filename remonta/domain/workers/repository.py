"""Worker repository - Database operations for worker profiles and services"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import WorkerAdditionalInfo, WorkerProfile, WorkerService


class WorkerRepository:
    """Repository for worker profile database operations"""

    @staticmethod
    def get_profile_by_user_id(db: Session, user_id: str) -> Optional[WorkerProfile]:
        return db.query(WorkerProfile).filter(WorkerProfile.user_id == user_id).first()

    @staticmethod
    def update_profile(db: Session, profile: WorkerProfile, **updates) -> WorkerProfile:
        """Update a profile with provided fields"""
        for key, value in updates.items():
            if hasattr(profile, key):
                setattr(profile, key, value)
        db.commit()
        db.refresh(profile)
        return profile

    @staticmethod
    def upsert_additional_info(db: Session, profile: WorkerProfile, **fields) -> WorkerAdditionalInfo:
        info = (
            db.query(WorkerAdditionalInfo)
            .filter(WorkerAdditionalInfo.worker_profile_id == profile.id)
            .first()
        )
        if not info:
            info = WorkerAdditionalInfo(worker_profile_id=profile.id)
            db.add(info)
        for key, value in fields.items():
            setattr(info, key, value)
        db.commit()
        db.refresh(info)
        return info

    @staticmethod
    def get_services(db: Session, worker_profile_id: str) -> list[WorkerService]:
        return (
            db.query(WorkerService)
            .filter(WorkerService.worker_profile_id == worker_profile_id)
            .order_by(WorkerService.category_name.asc(), WorkerService.subcategory_name.asc())
            .all()
        )

    @staticmethod
    def find_service(
        db: Session, worker_profile_id: str, category_id: str, subcategory_id: Optional[str]
    ) -> Optional[WorkerService]:
        query = db.query(WorkerService).filter(
            WorkerService.worker_profile_id == worker_profile_id,
            WorkerService.category_id == category_id,
        )
        if subcategory_id:
            query = query.filter(WorkerService.subcategory_id == subcategory_id)
        else:
            query = query.filter(WorkerService.subcategory_id.is_(None))
        return query.first()

    @staticmethod
    def delete_category_services(db: Session, worker_profile_id: str, category_id: str) -> int:
        """Remove every row the worker has for a category (not committed)"""
        return (
            db.query(WorkerService)
            .filter(
                WorkerService.worker_profile_id == worker_profile_id,
                WorkerService.category_id == category_id,
            )
            .delete(synchronize_session=False)
        )
