"""User, favorite address and vehicle endpoints."""

from typing import List

from fastapi import APIRouter, Depends, status
from lavajato.dependencies import get_current_user
from lavajato.models.user import User
from lavajato.schemas import (
    FavoriteAddressCreate,
    FavoriteAddressResponse,
    LoyaltyPointsRequest,
    UserCreate,
    UserResponse,
    UserUpdate,
    VehicleCreate,
    VehicleResponse,
    VehicleUpdate,
)
from lavajato.services import registry
from lavajato.services.database import get_db
from sqlalchemy.ext.asyncio import AsyncSession

users_router = APIRouter()
cars_router = APIRouter()


@users_router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(payload: UserCreate, db: AsyncSession = Depends(get_db)):
    return await registry.create_user(db, **payload.model_dump())


@users_router.get("", response_model=List[UserResponse])
async def list_users(db: AsyncSession = Depends(get_db)):
    return await registry.list_users(db)


@users_router.get("/profile", response_model=UserResponse)
async def get_profile(current_user: User = Depends(get_current_user)):
    return current_user


@users_router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: str, db: AsyncSession = Depends(get_db)):
    return await registry.get_user(db, user_id)


@users_router.patch("/{user_id}", response_model=UserResponse)
async def update_user(user_id: str, payload: UserUpdate, db: AsyncSession = Depends(get_db)):
    return await registry.update_user(db, user_id, payload.model_dump(exclude_unset=True))


@users_router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(user_id: str, db: AsyncSession = Depends(get_db)):
    await registry.delete_user(db, user_id)


@users_router.post("/{user_id}/points", response_model=UserResponse)
async def add_points(
    user_id: str, payload: LoyaltyPointsRequest, db: AsyncSession = Depends(get_db)
):
    return await registry.add_loyalty_points(db, user_id, payload.points)


@users_router.post(
    "/{user_id}/favorite-addresses",
    response_model=FavoriteAddressResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_favorite_address(
    user_id: str, payload: FavoriteAddressCreate, db: AsyncSession = Depends(get_db)
):
    return await registry.add_favorite_address(db, user_id, **payload.model_dump())


@users_router.get("/{user_id}/favorite-addresses", response_model=List[FavoriteAddressResponse])
async def list_favorite_addresses(user_id: str, db: AsyncSession = Depends(get_db)):
    return await registry.list_favorite_addresses(db, user_id)


@users_router.delete(
    "/{user_id}/favorite-addresses/{address_id}", status_code=status.HTTP_204_NO_CONTENT
)
async def delete_favorite_address(
    user_id: str, address_id: str, db: AsyncSession = Depends(get_db)
):
    await registry.delete_favorite_address(db, user_id, address_id)


@cars_router.post("", response_model=VehicleResponse, status_code=status.HTTP_201_CREATED)
async def create_vehicle(payload: VehicleCreate, db: AsyncSession = Depends(get_db)):
    return await registry.create_vehicle(db, **payload.model_dump())


@cars_router.get("", response_model=List[VehicleResponse])
async def list_vehicles(db: AsyncSession = Depends(get_db)):
    return await registry.list_vehicles(db)


@cars_router.get("/user/{user_id}", response_model=List[VehicleResponse])
async def list_user_vehicles(user_id: str, db: AsyncSession = Depends(get_db)):
    return await registry.list_vehicles(db, user_id=user_id)


@cars_router.get("/{vehicle_id}", response_model=VehicleResponse)
async def get_vehicle(vehicle_id: str, db: AsyncSession = Depends(get_db)):
    return await registry.get_vehicle(db, vehicle_id)


@cars_router.patch("/{vehicle_id}", response_model=VehicleResponse)
async def update_vehicle(
    vehicle_id: str, payload: VehicleUpdate, db: AsyncSession = Depends(get_db)
):
    return await registry.update_vehicle(db, vehicle_id, payload.model_dump(exclude_unset=True))


@cars_router.delete("/{vehicle_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_vehicle(vehicle_id: str, db: AsyncSession = Depends(get_db)):
    await registry.delete_vehicle(db, vehicle_id)
