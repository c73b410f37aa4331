from fastapi import HTTPException, status
from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from shared.notifications import EmailNotifier, NotificationError
from shared.observability import ecomm_notification_failures_total
from shared.security import ROLE_ADMIN, ROLE_CUSTOMER
from shared.security.jwt_handler import create_access_token

from .models import User
from .repository import UserRepository
from .schemas import TokenResponse, UserCreate, UserLogin

_pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

logger = structlog.get_logger(__name__)


class AuthService:

    @staticmethod
    def _hash_password(password: str) -> str:
        return _pwd_context.hash(password)

    @staticmethod
    def _verify_password(plain: str, hashed: str) -> bool:
        return _pwd_context.verify(plain, hashed)

    @staticmethod
    async def register(db: AsyncSession, data: UserCreate, notifier: EmailNotifier) -> User:
        existing = await UserRepository.get_by_email(db, data.email)
        if existing:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Email already registered",
            )
        user = User(
            name=data.name,
            email=data.email,
            hashed_password=AuthService._hash_password(data.password),
            role=ROLE_CUSTOMER,
        )
        try:
            user = await UserRepository.create(db, user)
        except IntegrityError:
            # Lost a race with a concurrent registration for the same e-mail.
            await db.rollback()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Email already registered",
            )
        logger.info("user.registered", user_id=user.id)

        try:
            await notifier.welcome(user)
        except NotificationError as e:
            ecomm_notification_failures_total.labels(kind="welcome").inc()
            logger.warning("user.welcome_email_failed", user_id=user.id, error=str(e))
        return user

    @staticmethod
    async def login(db: AsyncSession, data: UserLogin) -> TokenResponse:
        user = await UserRepository.get_by_email(db, data.email)
        if not user or not AuthService._verify_password(data.password, user.hashed_password):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Incorrect email or password",
                headers={"WWW-Authenticate": "Bearer"},
            )
        if not user.is_active:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Account is disabled",
            )
        token = create_access_token(user.id, user.role)
        return TokenResponse(access_token=token)

    @staticmethod
    async def get_user_by_id(db: AsyncSession, user_id: int) -> User:
        user = await UserRepository.get_by_id(db, user_id)
        if not user:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
        return user

    @staticmethod
    async def ensure_admin(db: AsyncSession, email: str, password: str) -> User:
        """Create the bootstrap admin account if it does not exist yet."""
        user = await UserRepository.get_by_email(db, email)
        if user:
            return user
        user = User(
            name="Administrator",
            email=email,
            hashed_password=AuthService._hash_password(password),
            role=ROLE_ADMIN,
        )
        user = await UserRepository.create(db, user)
        logger.info("user.admin_bootstrapped", user_id=user.id)
        return user
