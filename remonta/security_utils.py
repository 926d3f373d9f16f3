"""
Security Utilities
Password hashing, password strength rules and access tokens
"""

import logging
import os
import re
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

# Token generation and validation
from jose import JWTError
from jose import jwt as jose_jwt

# Password hashing
from passlib.context import CryptContext

from .config import ACCESS_TOKEN_EXPIRE_MINUTES, SECRET_KEY

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=BCRYPT_ROUNDS)


# ============================================================================
# PASSWORD SECURITY
# ============================================================================


def hash_password_bcrypt(password: str) -> str:
    """Hash password using bcrypt"""
    return pwd_context.hash(password)


def verify_password_bcrypt(plain_password: str, hashed_password: str) -> bool:
    """Verify password against bcrypt hash"""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except Exception as e:
        logger.error(f"Password verification error: {e}")
        return False


def check_password_strength(password: str) -> dict[str, Any]:
    """
    Check a password against the registration rules

    Returns:
        dict with 'is_valid' (bool) and 'feedback' (list of unmet rules)
    """
    feedback = []

    if len(password) < 8:
        feedback.append("Password must be at least 8 characters")
    if not re.search(r"[A-Z]", password):
        feedback.append("Password must contain at least one uppercase letter")
    if not re.search(r"[a-z]", password):
        feedback.append("Password must contain at least one lowercase letter")
    if not re.search(r"[0-9]", password):
        feedback.append("Password must contain at least one number")

    return {"is_valid": not feedback, "feedback": feedback}


# ============================================================================
# ACCESS TOKENS
# ============================================================================


def create_access_token(
    subject: str, role: str, expires_delta: Optional[timedelta] = None
) -> str:
    """Create a signed JWT carrying the user id and role"""
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    payload = {"sub": subject, "role": role, "exp": expire, "type": "access"}
    return jose_jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str) -> Optional[dict]:
    """Verify a JWT and return its claims, or None when invalid or expired"""
    try:
        payload = jose_jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError as e:
        logger.warning(f"⚠️ Invalid access token: {e}")
        return None

    if payload.get("type") != "access" or not payload.get("sub"):
        logger.warning("⚠️ Access token missing subject or wrong type")
        return None
    return payload
