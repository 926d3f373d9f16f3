"""
Automated expiry of worker compliance documents
Moves APPROVED and SUBMITTED documents whose expiry date has passed to EXPIRED
and recomputes the affected workers' setup progress
"""

import logging

from sqlalchemy.orm import Session

from ..domain.progress.service import refresh_progress
from ..models import RequirementStatus, VerificationRequirement, WorkerProfile, utcnow

logger = logging.getLogger(__name__)

EXPIRABLE_STATUSES = [RequirementStatus.APPROVED, RequirementStatus.SUBMITTED]
EXPIRY_SECTIONS = ["compliance", "trainings"]


def expire_documents(db: Session) -> dict:
    """
    Expire every document past its expiry date
    Should be run as a scheduled job (daily cron)

    Returns:
        dict: Summary of documents expired and workers refreshed
    """
    summary = {"documents_expired": 0, "workers_refreshed": 0, "expired_ids": []}

    try:
        now = utcnow()
        expired = db.query(VerificationRequirement).filter(
            VerificationRequirement.status.in_(EXPIRABLE_STATUSES),
            VerificationRequirement.expires_at.isnot(None),
            VerificationRequirement.expires_at <= now,
        ).all()

        if not expired:
            logger.debug("ℹ️ No documents to expire")
            return summary

        worker_ids = set()
        for requirement in expired:
            logger.info(
                f"⏰ Document {requirement.id} ({requirement.requirement_type}) expired: "
                f"{requirement.status} → EXPIRED"
            )
            requirement.status = RequirementStatus.EXPIRED
            worker_ids.add(requirement.worker_profile_id)
            summary["expired_ids"].append(requirement.id)

        db.commit()
        summary["documents_expired"] = len(expired)
    except Exception as e:
        logger.error(f"❌ Error expiring documents: {str(e)}")
        db.rollback()
        raise

    # Progress recompute never raises
    for worker in db.query(WorkerProfile).filter(WorkerProfile.id.in_(worker_ids)).all():
        refresh_progress(db, worker, EXPIRY_SECTIONS)
        summary["workers_refreshed"] += 1

    logger.info(f"📊 Expiry automation summary: {summary['documents_expired']} document(s), "
                f"{summary['workers_refreshed']} worker(s)")
    return summary
