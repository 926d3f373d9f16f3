#!/usr/bin/env python3
"""
Script to create (or promote) an admin user
Usage: python create_admin_user.py <email> <password>
"""

import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from remonta import models  # noqa: E402,F401
from remonta.database import Base, SessionLocal, engine  # noqa: E402
from remonta.models import User, UserRole, UserStatus  # noqa: E402
from remonta.security_utils import hash_password_bcrypt  # noqa: E402
from remonta.shared.validators import validate_email, validate_password  # noqa: E402

logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)


def create_admin_user(email: str, password: str):
    try:
        email = validate_email(email)
        password = validate_password(password)
    except ValueError as e:
        logger.error(f"❌ {e}")
        sys.exit(1)

    Base.metadata.create_all(bind=engine, checkfirst=True)
    db = SessionLocal()
    try:
        user = db.query(User).filter(User.email == email).first()
        if user:
            user.role = UserRole.ADMIN
            user.status = UserStatus.ACTIVE
            user.password_hash = hash_password_bcrypt(password)
            logger.info(f"🔄 Existing user {email} promoted to ADMIN")
        else:
            db.add(
                User(
                    email=email,
                    password_hash=hash_password_bcrypt(password),
                    role=UserRole.ADMIN,
                    status=UserStatus.ACTIVE,
                )
            )
            logger.info(f"👤 Creating admin user {email}")
        db.commit()
        logger.info("✅ Admin user ready")
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Failed to create admin user: {e}")
        sys.exit(1)
    finally:
        db.close()


if __name__ == "__main__":
    if len(sys.argv) != 3:
        print("Usage: python create_admin_user.py <email> <password>")
        sys.exit(1)
    create_admin_user(sys.argv[1], sys.argv[2])
