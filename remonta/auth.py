import logging

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .database import get_db
from .models import User, UserRole, UserStatus
from .security_utils import decode_access_token

logger = logging.getLogger(__name__)

security = HTTPBearer()


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """Get current user from the bearer access token"""

    if not credentials:
        logger.error("❌ No credentials provided")
        raise HTTPException(
            status_code=401,
            detail="Not authenticated. Please provide a valid Bearer token in the Authorization header.",
        )

    token = credentials.credentials

    # Basic token format validation before processing
    token_parts = token.split(".")
    if len(token_parts) != 3:
        logger.warning(f"⚠️ Malformed token received: {len(token_parts)} parts")
        raise HTTPException(
            status_code=401, detail="Invalid token format. Expected a valid JWT token."
        )

    claims = decode_access_token(token)
    if not claims:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    user = db.query(User).filter(User.id == claims["sub"]).first()
    if not user:
        logger.warning(f"⚠️ Token subject {claims['sub']} no longer exists")
        raise HTTPException(status_code=401, detail="User not found")

    if user.status == UserStatus.SUSPENDED:
        logger.warning(f"🚫 Suspended user {user.id} attempted access")
        raise HTTPException(status_code=403, detail="Account suspended")

    return user


def require_role(*roles: str):
    """
    Create a dependency that only lets through users holding one of the roles

    Example usage:
        @router.get("/admin/things")
        async def list_things(admin: User = Depends(require_role(UserRole.ADMIN))):
            ...
    """

    async def role_checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in roles:
            logger.warning(
                f"🚫 User {current_user.id} with role {current_user.role} denied (needs {roles})"
            )
            raise HTTPException(status_code=403, detail="Insufficient permissions")
        return current_user

    return role_checker


get_current_admin = require_role(UserRole.ADMIN)
get_current_worker = require_role(UserRole.WORKER)
