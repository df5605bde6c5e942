"""Profile and appliance API endpoints."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from homewatt.database import get_db
from homewatt.engine.load import DeviceStatus
from homewatt.models import Appliance, Profile
from homewatt.schemas.profile import (
    ApplianceCreate,
    ApplianceResponse,
    ProfileResponse,
    ProfileUpdate,
)

router = APIRouter(prefix="/api/users", tags=["households"])


async def _get_appliance(db: AsyncSession, user_id: str, appliance_id: str) -> Appliance:
    result = await db.execute(
        select(Appliance).where(Appliance.id == appliance_id, Appliance.user_id == user_id)
    )
    appliance = result.scalar_one_or_none()
    if not appliance:
        raise HTTPException(status_code=404, detail="Appliance not found")
    return appliance


@router.get("/{user_id}/profile", response_model=ProfileResponse)
async def get_profile(user_id: str, db: AsyncSession = Depends(get_db)) -> Profile:
    """Get a household profile."""
    profile = await db.get(Profile, user_id)
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")
    return profile


@router.put("/{user_id}/profile", response_model=ProfileResponse)
async def put_profile(
    user_id: str,
    data: ProfileUpdate,
    db: AsyncSession = Depends(get_db),
) -> Profile:
    """Create or update a household profile."""
    profile = await db.get(Profile, user_id)
    if not profile:
        profile = Profile(user_id=user_id)
        db.add(profile)

    for key, value in data.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(profile, key, value)

    await db.flush()
    await db.refresh(profile)
    return profile


@router.get("/{user_id}/appliances", response_model=list[ApplianceResponse])
async def list_appliances(user_id: str, db: AsyncSession = Depends(get_db)) -> list[Appliance]:
    """List a household's appliances."""
    result = await db.execute(
        select(Appliance).where(Appliance.user_id == user_id).order_by(Appliance.created_at)
    )
    return list(result.scalars().all())


@router.post("/{user_id}/appliances", response_model=ApplianceResponse, status_code=201)
async def add_appliance(
    user_id: str,
    data: ApplianceCreate,
    db: AsyncSession = Depends(get_db),
) -> Appliance:
    """Add an appliance to a household."""
    appliance = Appliance(user_id=user_id, **data.model_dump())
    db.add(appliance)
    await db.flush()
    await db.refresh(appliance)
    return appliance


@router.post("/{user_id}/appliances/{appliance_id}/toggle", response_model=ApplianceResponse)
async def toggle_appliance(
    user_id: str,
    appliance_id: str,
    db: AsyncSession = Depends(get_db),
) -> Appliance:
    """Switch an appliance on or off. Running simulations pick it up on their next tick."""
    appliance = await _get_appliance(db, user_id, appliance_id)
    appliance.status = DeviceStatus.OFF if appliance.status == DeviceStatus.ON else DeviceStatus.ON
    await db.flush()
    return appliance


@router.delete("/{user_id}/appliances/{appliance_id}", status_code=204)
async def delete_appliance(
    user_id: str,
    appliance_id: str,
    db: AsyncSession = Depends(get_db),
) -> None:
    """Remove an appliance."""
    appliance = await _get_appliance(db, user_id, appliance_id)
    await db.delete(appliance)
