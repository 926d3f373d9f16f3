"""Compliance repository - Database operations for worker verification documents"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import VerificationRequirement, WorkerProfile


class ComplianceRepository:
    """Repository for verification requirement database operations"""

    @staticmethod
    def get_profile_by_user_id(db: Session, user_id: str) -> Optional[WorkerProfile]:
        return db.query(WorkerProfile).filter(WorkerProfile.user_id == user_id).first()

    @staticmethod
    def get_by_type(db: Session, worker_profile_id: str, requirement_type: str) -> Optional[VerificationRequirement]:
        return (
            db.query(VerificationRequirement)
            .filter(
                VerificationRequirement.worker_profile_id == worker_profile_id,
                VerificationRequirement.requirement_type == requirement_type,
            )
            .first()
        )

    @staticmethod
    def get_for_worker(db: Session, worker_profile_id: str, requirement_id: str) -> Optional[VerificationRequirement]:
        """A requirement, only if it belongs to the worker"""
        return (
            db.query(VerificationRequirement)
            .filter(
                VerificationRequirement.id == requirement_id,
                VerificationRequirement.worker_profile_id == worker_profile_id,
            )
            .first()
        )

    @staticmethod
    def list_for_worker(db: Session, worker_profile_id: str) -> list[VerificationRequirement]:
        """All of a worker's documents, newest first"""
        return (
            db.query(VerificationRequirement)
            .filter(VerificationRequirement.worker_profile_id == worker_profile_id)
            .order_by(VerificationRequirement.created_at.desc())
            .all()
        )

    @staticmethod
    def list_by_prefix(db: Session, worker_profile_id: str, prefix: str) -> list[VerificationRequirement]:
        """Documents whose requirement_type starts with the prefix"""
        return (
            db.query(VerificationRequirement)
            .filter(
                VerificationRequirement.worker_profile_id == worker_profile_id,
                VerificationRequirement.requirement_type.startswith(prefix, autoescape=True),
            )
            .order_by(VerificationRequirement.created_at.desc())
            .all()
        )

    @staticmethod
    def delete(db: Session, requirement: VerificationRequirement) -> None:
        db.delete(requirement)
        db.commit()
