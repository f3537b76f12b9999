"""User and team endpoints."""
from typing import List
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_actor
from app.core.database import get_db
from app.models.user import Team, User
from app.schemas.enums import UserRole
from app.schemas.user import TeamCreate, TeamInDB, UserCreate, UserInDB

router = APIRouter(tags=["users"])


@router.post("/users", response_model=UserInDB, status_code=201)
async def create_user(
    user: UserCreate,
    db: AsyncSession = Depends(get_db),
):
    """
    Register a user mirrored from the identity provider.

    Args:
        user: Name, email and role
        db: Database session

    Returns:
        Created user
    """
    result = await db.execute(select(User).where(User.email == user.email))
    if result.scalar_one_or_none():
        raise HTTPException(
            status_code=400,
            detail=f"User with email {user.email} already exists",
        )

    db_user = User(name=user.name, email=user.email, role=user.role.value)
    db.add(db_user)
    await db.commit()
    await db.refresh(db_user)

    return db_user


@router.get("/users", response_model=List[UserInDB])
async def list_users(
    skip: int = 0,
    limit: int = 100,
    db: AsyncSession = Depends(get_db),
):
    """List users."""
    result = await db.execute(select(User).offset(skip).limit(limit))
    return result.scalars().all()


@router.get("/users/{user_id}", response_model=UserInDB)
async def get_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Get a specific user by ID."""
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    return user


@router.post("/teams", response_model=TeamInDB, status_code=201)
async def create_team(
    team: TeamCreate,
    actor: UserInDB = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    """
    Create a team managed by the acting user.

    Args:
        team: Team name and city
        actor: Acting user, must be a manager
        db: Database session

    Returns:
        Created team
    """
    if actor.role != UserRole.MANAGER:
        raise HTTPException(status_code=403, detail="Only managers can create teams")

    db_team = Team(**team.model_dump(), manager_id=actor.id)
    db.add(db_team)
    await db.commit()
    await db.refresh(db_team)

    return db_team


@router.get("/teams", response_model=List[TeamInDB])
async def list_teams(
    manager_id: int = None,
    db: AsyncSession = Depends(get_db),
):
    """List teams, optionally only those of one manager."""
    query = select(Team)
    if manager_id is not None:
        query = query.where(Team.manager_id == manager_id)

    result = await db.execute(query)
    return result.scalars().all()


@router.get("/teams/{team_id}", response_model=TeamInDB)
async def get_team(
    team_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Get a specific team by ID."""
    result = await db.execute(select(Team).where(Team.id == team_id))
    team = result.scalar_one_or_none()

    if not team:
        raise HTTPException(status_code=404, detail="Team not found")

    return team
