"""Shared endpoint dependencies."""
from fastapi import Depends, Header, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.models.user import User
from app.schemas.user import UserInDB


async def get_actor(
    x_user_id: int = Header(..., alias="X-User-Id", description="ID of the acting user"),
    db: AsyncSession = Depends(get_db),
) -> UserInDB:
    """
    Resolve the acting user.

    Sign-in happens at the identity provider in front of this service,
    which forwards the user's ID in the X-User-Id header.
    """
    result = await db.execute(select(User).where(User.id == x_user_id))
    user = result.scalar_one_or_none()

    if not user:
        raise HTTPException(status_code=401, detail=f"Unknown user {x_user_id}")

    return UserInDB.model_validate(user)
