"""Wash service catalog and unit endpoints (staff admin panel)."""

from typing import List

from fastapi import APIRouter, Depends, status
from lavajato.schemas import (
    ServiceCreate,
    ServiceResponse,
    ServiceUpdate,
    UnitCreate,
    UnitResponse,
    UnitUpdate,
)
from lavajato.services import catalog, registry
from lavajato.services.database import get_db
from sqlalchemy.ext.asyncio import AsyncSession

services_router = APIRouter()
units_router = APIRouter()


@services_router.post("", response_model=ServiceResponse, status_code=status.HTTP_201_CREATED)
async def create_service(payload: ServiceCreate, db: AsyncSession = Depends(get_db)):
    return await catalog.create_service(db, **payload.model_dump())


@services_router.get("", response_model=List[ServiceResponse])
async def list_services(db: AsyncSession = Depends(get_db)):
    return await catalog.list_services(db)


@services_router.get("/{service_id}", response_model=ServiceResponse)
async def get_service(service_id: str, db: AsyncSession = Depends(get_db)):
    return await catalog.get_service(db, service_id)


@services_router.patch("/{service_id}", response_model=ServiceResponse)
async def update_service(
    service_id: str, payload: ServiceUpdate, db: AsyncSession = Depends(get_db)
):
    return await catalog.update_service(db, service_id, payload.model_dump(exclude_unset=True))


@services_router.delete("/{service_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_service(service_id: str, db: AsyncSession = Depends(get_db)):
    await catalog.delete_service(db, service_id)


@units_router.post("", response_model=UnitResponse, status_code=status.HTTP_201_CREATED)
async def create_unit(payload: UnitCreate, db: AsyncSession = Depends(get_db)):
    return await registry.create_unit(db, **payload.model_dump())


@units_router.get("", response_model=List[UnitResponse])
async def list_units(db: AsyncSession = Depends(get_db)):
    return await registry.list_units(db)


@units_router.get("/{unit_id}", response_model=UnitResponse)
async def get_unit(unit_id: str, db: AsyncSession = Depends(get_db)):
    return await registry.get_unit(db, unit_id)


@units_router.patch("/{unit_id}", response_model=UnitResponse)
async def update_unit(unit_id: str, payload: UnitUpdate, db: AsyncSession = Depends(get_db)):
    return await registry.update_unit(db, unit_id, payload.model_dump(exclude_unset=True))


@units_router.delete("/{unit_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_unit(unit_id: str, db: AsyncSession = Depends(get_db)):
    await registry.delete_unit(db, unit_id)
