from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.notifications import EmailNotifier, get_notifier
from shared.security import get_current_user

from .schemas import TokenResponse, UserCreate, UserLogin, UserResponse
from .service import AuthService

router = APIRouter(tags=["Authentication"])
public_router = APIRouter()  # For any public endpoints (e.g. health check)

@public_router.get("/health", include_in_schema=False)
async def health_check():
    return {"service": "auth", "status": "running"}


@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new customer account",
)
async def register(
    payload: UserCreate,
    db: AsyncSession = Depends(get_db),
    notifier: EmailNotifier = Depends(get_notifier),
):
    return await AuthService.register(db, payload, notifier)


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Authenticate and receive a JWT access token",
)
async def login(payload: UserLogin, db: AsyncSession = Depends(get_db)):
    return await AuthService.login(db, payload)


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Get the current authenticated user's profile",
)
async def get_me(
    user_id: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await AuthService.get_user_by_id(db, int(user_id))
