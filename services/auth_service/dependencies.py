from fastapi import Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.security import Principal, require_customer
from .repository import UserRepository


async def require_active_customer(
    principal: Principal = Depends(require_customer),
    db: AsyncSession = Depends(get_db),
) -> Principal:
    """Customer whose account is still enabled; tokens outlive deactivation."""
    user = await UserRepository.get_by_id(db, principal.user_id)
    if user is None or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is disabled",
        )
    return principal
