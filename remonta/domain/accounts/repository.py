"""Account repository - Database operations for users and audit logs"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...models import AuditLog, User

logger = logging.getLogger(__name__)


class AccountRepository:
    """Repository for user account database operations"""

    @staticmethod
    def get_user_by_email(db: Session, email: str) -> Optional[User]:
        return db.query(User).filter(User.email == email).first()

    @staticmethod
    def email_exists(db: Session, email: str) -> bool:
        return db.query(User.id).filter(User.email == email).first() is not None

    @staticmethod
    def add_audit_log(db: Session, user_id: Optional[str], action: str, metadata: Optional[dict] = None) -> None:
        """Write an audit row in its own commit; failures are logged only"""
        try:
            db.add(AuditLog(user_id=user_id, action=action, meta=metadata or {}))
            db.commit()
        except Exception as e:
            db.rollback()
            logger.error(f"❌ Failed to write audit log {action} for {user_id}: {e}")
