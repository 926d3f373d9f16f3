"""Account router - Registration, login and current user"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from ...rate_limiter import rate_limit_login, rate_limit_registration
from .schemas import (
    ClientRegistration,
    CoordinatorRegistration,
    LoginRequest,
    TokenResponse,
    UserResponse,
    WorkerRegistration,
)
from .service import AccountService

router = APIRouter(prefix="/auth", tags=["Auth"])


def get_account_service(db: Session = Depends(get_db)) -> AccountService:
    """Dependency injection for AccountService"""
    return AccountService(db)


@router.post("/register/client", response_model=UserResponse, status_code=201)
async def register_client(
    data: ClientRegistration,
    service: AccountService = Depends(get_account_service),
    _: None = Depends(rate_limit_registration),
):
    """Register a client (self-managed or on behalf of someone)"""
    return service.register_client(data)


@router.post("/register/coordinator", response_model=UserResponse, status_code=201)
async def register_coordinator(
    data: CoordinatorRegistration,
    service: AccountService = Depends(get_account_service),
    _: None = Depends(rate_limit_registration),
):
    """Register a support coordinator with their first participant"""
    return service.register_coordinator(data)


@router.post("/register/worker", response_model=UserResponse, status_code=201)
async def register_worker(
    data: WorkerRegistration,
    service: AccountService = Depends(get_account_service),
    _: None = Depends(rate_limit_registration),
):
    """Register a worker; documents are uploaded after sign-in"""
    return await service.register_worker(data)


@router.post("/login", response_model=TokenResponse)
async def login(
    data: LoginRequest,
    service: AccountService = Depends(get_account_service),
    _: None = Depends(rate_limit_login),
):
    return service.login(data)


@router.get("/me", response_model=UserResponse)
async def me(current_user: User = Depends(get_current_user)):
    """The authenticated user"""
    return current_user
