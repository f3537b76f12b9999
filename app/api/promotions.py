"""Promotion endpoints."""
from datetime import date
from typing import List
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_actor
from app.core.database import get_db
from app.models.promotion import Promotion
from app.schemas.enums import UserRole
from app.schemas.promotion import PromotionCreate, PromotionInDB, PromotionUpdate
from app.schemas.user import UserInDB

router = APIRouter(prefix="/promotions", tags=["promotions"])

PROMOTION_ROLES = (UserRole.OWNER, UserRole.PROMOTER, UserRole.ADMIN)


def _require_promotion_role(actor: UserInDB):
    if actor.role not in PROMOTION_ROLES:
        raise HTTPException(status_code=403, detail="Not allowed to manage promotions")


@router.post("", response_model=PromotionInDB, status_code=201)
async def create_promotion(
    promotion: PromotionCreate,
    actor: UserInDB = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    """
    Create a promotion.

    Args:
        promotion: Discount, validity window, weekdays (0 = Sunday), hours and pitches
        actor: Acting user
        db: Database session

    Returns:
        Created promotion
    """
    _require_promotion_role(actor)

    db_promotion = Promotion(**promotion.model_dump())
    db.add(db_promotion)
    await db.commit()
    await db.refresh(db_promotion)

    return db_promotion


@router.get("", response_model=List[PromotionInDB])
async def list_promotions(
    active_on: date = None,
    db: AsyncSession = Depends(get_db),
):
    """List promotions, optionally only those valid on a given day."""
    query = select(Promotion)
    if active_on is not None:
        query = query.where(
            Promotion.valid_from <= active_on,
            Promotion.valid_to >= active_on,
        )

    result = await db.execute(query.order_by(Promotion.id))
    return result.scalars().all()


@router.get("/{promotion_id}", response_model=PromotionInDB)
async def get_promotion(
    promotion_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Get a specific promotion by ID."""
    result = await db.execute(select(Promotion).where(Promotion.id == promotion_id))
    promotion = result.scalar_one_or_none()

    if not promotion:
        raise HTTPException(status_code=404, detail="Promotion not found")

    return promotion


@router.patch("/{promotion_id}", response_model=PromotionInDB)
async def update_promotion(
    promotion_id: int,
    promotion_update: PromotionUpdate,
    actor: UserInDB = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    """Update a promotion."""
    _require_promotion_role(actor)

    result = await db.execute(select(Promotion).where(Promotion.id == promotion_id))
    promotion = result.scalar_one_or_none()

    if not promotion:
        raise HTTPException(status_code=404, detail="Promotion not found")

    update_data = promotion_update.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        setattr(promotion, field, value)

    if promotion.valid_from > promotion.valid_to:
        raise HTTPException(
            status_code=400,
            detail="valid_from must be before or equal to valid_to",
        )

    await db.commit()
    await db.refresh(promotion)

    return promotion


@router.delete("/{promotion_id}", status_code=204)
async def delete_promotion(
    promotion_id: int,
    actor: UserInDB = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    """Delete a promotion."""
    _require_promotion_role(actor)

    result = await db.execute(select(Promotion).where(Promotion.id == promotion_id))
    promotion = result.scalar_one_or_none()

    if not promotion:
        raise HTTPException(status_code=404, detail="Promotion not found")

    await db.delete(promotion)
    await db.commit()
