"""Admin repository - Database queries for the back-office"""

from typing import Optional

from sqlalchemy import distinct, func
from sqlalchemy.orm import Session, joinedload, selectinload

from ...models import (
    Document,
    RequirementStatus,
    User,
    UserStatus,
    VerificationRequirement,
    WorkerProfile,
)


def _with_listing_relations(query):
    return query.options(
        joinedload(WorkerProfile.user),
        selectinload(WorkerProfile.services),
        selectinload(WorkerProfile.additional_info),
    )


class AdminRepository:
    """Repository for admin-only worker queries"""

    @staticmethod
    def search_workers(
        db: Session, clauses: list, order_by, offset: int, limit: int
    ) -> tuple[int, list[WorkerProfile]]:
        """One page of workers matching every clause, plus the total count"""
        base = db.query(WorkerProfile).filter(*clauses)
        total = base.count()
        workers = _with_listing_relations(base).order_by(order_by).offset(offset).limit(limit).all()
        return total, workers

    @staticmethod
    def find_workers_in_box(db: Session, clauses: list, bbox: dict) -> list[WorkerProfile]:
        """Candidates for a distance search: located workers inside the bounding box"""
        query = db.query(WorkerProfile).filter(
            *clauses,
            WorkerProfile.latitude.isnot(None),
            WorkerProfile.longitude.isnot(None),
            WorkerProfile.latitude.between(bbox["minLat"], bbox["maxLat"]),
            WorkerProfile.longitude.between(bbox["minLng"], bbox["maxLng"]),
        )
        return _with_listing_relations(query).all()

    @staticmethod
    def get_worker(db: Session, worker_id: str) -> Optional[WorkerProfile]:
        return _with_listing_relations(db.query(WorkerProfile)).filter(WorkerProfile.id == worker_id).first()

    @staticmethod
    def list_pending_workers(db: Session) -> list[WorkerProfile]:
        """Unpublished workers with at least one SUBMITTED document"""
        return (
            db.query(WorkerProfile)
            .options(joinedload(WorkerProfile.user), selectinload(WorkerProfile.requirements))
            .filter(
                WorkerProfile.is_published.is_(False),
                WorkerProfile.requirements.any(VerificationRequirement.status == RequirementStatus.SUBMITTED),
            )
            .all()
        )

    @staticmethod
    def list_published_workers(db: Session) -> list[WorkerProfile]:
        return (
            db.query(WorkerProfile)
            .options(joinedload(WorkerProfile.user), selectinload(WorkerProfile.requirements))
            .filter(WorkerProfile.is_published.is_(True))
            .order_by(WorkerProfile.updated_at.desc())
            .all()
        )

    @staticmethod
    def list_suspended_workers(db: Session, offset: int, limit: int) -> tuple[int, list[WorkerProfile]]:
        base = db.query(WorkerProfile).join(User, WorkerProfile.user_id == User.id).filter(
            User.status == UserStatus.SUSPENDED
        )
        total = base.count()
        workers = (
            _with_listing_relations(base)
            .order_by(WorkerProfile.updated_at.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return total, workers

    # ------------------------------------------------------------------
    # Filter options
    # ------------------------------------------------------------------

    @staticmethod
    def distinct_document_categories(db: Session) -> list[str]:
        rows = (
            db.query(distinct(VerificationRequirement.document_category))
            .filter(VerificationRequirement.document_category.isnot(None))
            .order_by(VerificationRequirement.document_category)
            .all()
        )
        return [row[0] for row in rows]

    @staticmethod
    def distinct_requirement_statuses(db: Session) -> list[str]:
        rows = (
            db.query(distinct(VerificationRequirement.status))
            .order_by(VerificationRequirement.status)
            .all()
        )
        return [row[0] for row in rows]

    @staticmethod
    def list_documents_excluding(db: Session, exclude_ids: list[str]) -> list[Document]:
        return db.query(Document).filter(Document.id.notin_(exclude_ids)).order_by(Document.name).all()

    @staticmethod
    def submission_stats(db: Session) -> dict:
        """Worker counts by the state of their submitted documents"""
        total_profiles = db.query(func.count(WorkerProfile.id)).scalar() or 0

        def count_workers(*criteria) -> int:
            return (
                db.query(func.count(distinct(VerificationRequirement.worker_profile_id)))
                .filter(*criteria)
                .scalar()
                or 0
            )

        with_documents = count_workers()
        any_rejected = count_workers(VerificationRequirement.status == RequirementStatus.REJECTED)
        pending = count_workers(
            VerificationRequirement.status.in_([RequirementStatus.PENDING, RequirementStatus.SUBMITTED])
        )

        # Every stored document approved
        all_approved = (
            db.query(func.count(WorkerProfile.id))
            .filter(
                WorkerProfile.requirements.any(),
                ~WorkerProfile.requirements.any(VerificationRequirement.status != RequirementStatus.APPROVED),
            )
            .scalar()
            or 0
        )

        return {
            "totalProfiles": total_profiles,
            "profilesWithDocuments": with_documents,
            "profilesWithAllApproved": all_approved,
            "profilesWithAnyRejected": any_rejected,
            "profilesWithPending": pending,
        }
