"""HS256 access tokens carrying the caller's user id and role."""
from datetime import datetime, timedelta, timezone
from jose import JWTError, jwt

from shared.config import settings

SECRET_KEY = settings.JWT_SECRET_KEY
if not SECRET_KEY:
    raise ValueError("FATAL ERROR: JWT_SECRET_KEY is not set in the environment!")

ALGORITHM = "HS256"


def create_access_token(user_id: int, role: str, expires_delta: timedelta | None = None) -> str:
    lifetime = expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    claims = {
        "sub": str(user_id),
        "role": role,
        "exp": datetime.now(timezone.utc) + lifetime,
    }
    return jwt.encode(claims, SECRET_KEY, algorithm=ALGORITHM)


def read_access_token(token: str) -> tuple[int, str | None] | None:
    """Return ``(user_id, role)`` from a valid token; None if forged, expired or malformed."""
    try:
        claims = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None
    subject = claims.get("sub")
    if subject is None or not str(subject).isdigit():
        return None
    return int(subject), claims.get("role")
