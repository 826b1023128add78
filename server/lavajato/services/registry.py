"""User, vehicle and unit registries."""

import logging
from typing import Any, Dict, List, Optional

from lavajato.errors import NotFoundError, ValidationError
from lavajato.models.appointment import Appointment
from lavajato.models.unit import Unit
from lavajato.models.user import FavoriteAddress, User, normalize_phone_number
from lavajato.models.vehicle import Vehicle, VehicleSize, normalize_license_plate
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

USER_FIELDS = (
    "name",
    "address",
    "neighborhood",
    "city",
    "state",
    "postal_code",
    "loyalty_points",
    "date_of_birth",
    "account_type",
)
VEHICLE_FIELDS = ("model", "license_plate", "size")
UNIT_FIELDS = ("name", "address")


def _apply(instance, changes: Dict[str, Any], allowed) -> List[str]:
    """Copy non-None allowed fields onto the instance; returns the fields set."""
    applied = []
    for field, value in changes.items():
        if field in allowed and value is not None:
            try:
                setattr(instance, field, value)
            except ValueError as e:
                raise ValidationError(str(e)) from e
            applied.append(field)
    return applied


async def _in_use(db: AsyncSession, column, value) -> bool:
    """True when some row still points at ``value`` through ``column``."""
    result = await db.execute(select(column).where(column == value).limit(1))
    return result.first() is not None


# ============================================================================
# Users
# ============================================================================


async def create_user(db: AsyncSession, **fields) -> User:
    phone = fields.get("phone_number")
    if await find_user_by_phone(db, phone):
        raise ValidationError("phone number already registered")

    if fields.get("loyalty_points", 0) < 0:
        raise ValidationError("loyalty points must be non-negative")

    try:
        user = User(**fields)
    except ValueError as e:
        raise ValidationError(str(e)) from e

    db.add(user)
    await db.commit()
    await db.refresh(user)

    logger.info(f"User {user.id} created for phone {phone}")
    return user


async def list_users(db: AsyncSession) -> List[User]:
    result = await db.execute(select(User).order_by(User.created_at.desc()))
    return list(result.scalars().all())


async def get_user(db: AsyncSession, user_id: str) -> User:
    user = await db.get(User, user_id)
    if not user:
        raise NotFoundError("user not found")
    return user


async def find_user_by_phone(db: AsyncSession, phone_number: str) -> Optional[User]:
    """Look a user up by phone, ignoring formatting ("+55 (11) 9..." == "55119...")."""
    normalized = normalize_phone_number(phone_number)
    if not normalized:
        return None
    result = await db.execute(select(User).where(User.phone_number == normalized))
    return result.scalar_one_or_none()


async def get_user_by_phone(db: AsyncSession, phone_number: str) -> User:
    user = await find_user_by_phone(db, phone_number)
    if not user:
        raise NotFoundError("user not found")
    return user


async def update_user(db: AsyncSession, user_id: str, changes: Dict[str, Any]) -> User:
    user = await get_user(db, user_id)
    if changes.get("loyalty_points") is not None and changes["loyalty_points"] < 0:
        raise ValidationError("loyalty points must be non-negative")

    applied = _apply(user, changes, USER_FIELDS)
    await db.commit()
    await db.refresh(user)
    logger.info(f"User {user_id} updated: {applied}")
    return user


async def delete_user(db: AsyncSession, user_id: str) -> None:
    await get_user(db, user_id)
    if await _in_use(db, Appointment.user_id, user_id):
        raise ValidationError("user has appointments")
    if await _in_use(db, Vehicle.user_id, user_id):
        raise ValidationError("user has registered vehicles")

    await db.execute(delete(FavoriteAddress).where(FavoriteAddress.user_id == user_id))
    await db.execute(delete(User).where(User.id == user_id))
    await db.commit()
    logger.info(f"User {user_id} deleted")


async def add_loyalty_points(db: AsyncSession, user_id: str, points: int) -> User:
    """Credit loyalty points to a user (points must be positive)."""
    if points <= 0:
        raise ValidationError("points must be positive")

    user = await get_user(db, user_id)
    user.loyalty_points = (user.loyalty_points or 0) + points
    await db.commit()
    await db.refresh(user)

    logger.info(f"User {user_id} credited {points} points (balance {user.loyalty_points})")
    return user


# ============================================================================
# Favorite addresses
# ============================================================================


async def add_favorite_address(db: AsyncSession, user_id: str, **fields) -> FavoriteAddress:
    await get_user(db, user_id)

    address = FavoriteAddress(user_id=user_id, **fields)
    db.add(address)
    await db.commit()
    await db.refresh(address)
    return address


async def list_favorite_addresses(db: AsyncSession, user_id: str) -> List[FavoriteAddress]:
    await get_user(db, user_id)
    result = await db.execute(
        select(FavoriteAddress)
        .where(FavoriteAddress.user_id == user_id)
        .order_by(FavoriteAddress.created_at.desc())
    )
    return list(result.scalars().all())


async def delete_favorite_address(db: AsyncSession, user_id: str, address_id: str) -> None:
    """Delete a saved address; another user's address counts as not found."""
    address = await db.get(FavoriteAddress, address_id)
    if not address or address.user_id != user_id:
        raise NotFoundError("favorite address not found")

    await db.execute(delete(FavoriteAddress).where(FavoriteAddress.id == address_id))
    await db.commit()


# ============================================================================
# Vehicles
# ============================================================================


async def _plate_taken(db: AsyncSession, plate: str, exclude_id: Optional[str] = None) -> bool:
    stmt = select(Vehicle.id).where(Vehicle.license_plate == normalize_license_plate(plate))
    if exclude_id:
        stmt = stmt.where(Vehicle.id != exclude_id)
    result = await db.execute(stmt)
    return result.first() is not None


async def create_vehicle(
    db: AsyncSession, user_id: str, model: str, license_plate: str, size: VehicleSize
) -> Vehicle:
    if await _plate_taken(db, license_plate):
        raise ValidationError("license plate already registered")

    if not await db.get(User, user_id):
        raise ValidationError("user not found")

    try:
        vehicle = Vehicle(user_id=user_id, model=model, license_plate=license_plate, size=size)
    except ValueError as e:
        raise ValidationError(str(e)) from e

    db.add(vehicle)
    await db.commit()
    await db.refresh(vehicle)

    logger.info(f"Vehicle {vehicle.id} ({vehicle.license_plate}) registered for user {user_id}")
    return vehicle


async def list_vehicles(db: AsyncSession, user_id: Optional[str] = None) -> List[Vehicle]:
    stmt = select(Vehicle).order_by(Vehicle.created_at.desc())
    if user_id:
        stmt = stmt.where(Vehicle.user_id == user_id)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def get_vehicle(db: AsyncSession, vehicle_id: str) -> Vehicle:
    vehicle = await db.get(Vehicle, vehicle_id)
    if not vehicle:
        raise NotFoundError("vehicle not found")
    return vehicle


async def update_vehicle(db: AsyncSession, vehicle_id: str, changes: Dict[str, Any]) -> Vehicle:
    vehicle = await get_vehicle(db, vehicle_id)

    plate = changes.get("license_plate")
    if plate and await _plate_taken(db, plate, exclude_id=vehicle_id):
        raise ValidationError("license plate already registered")

    applied = _apply(vehicle, changes, VEHICLE_FIELDS)
    await db.commit()
    await db.refresh(vehicle)
    logger.info(f"Vehicle {vehicle_id} updated: {applied}")
    return vehicle


async def delete_vehicle(db: AsyncSession, vehicle_id: str) -> None:
    await get_vehicle(db, vehicle_id)
    if await _in_use(db, Appointment.vehicle_id, vehicle_id):
        raise ValidationError("vehicle is used by appointments")

    await db.execute(delete(Vehicle).where(Vehicle.id == vehicle_id))
    await db.commit()
    logger.info(f"Vehicle {vehicle_id} deleted")


# ============================================================================
# Units
# ============================================================================


async def create_unit(db: AsyncSession, name: str, address: str) -> Unit:
    unit = Unit(name=name, address=address)
    db.add(unit)
    await db.commit()
    await db.refresh(unit)
    logger.info(f"Unit {unit.id} created: {name}")
    return unit


async def list_units(db: AsyncSession) -> List[Unit]:
    result = await db.execute(select(Unit).order_by(Unit.created_at.desc()))
    return list(result.scalars().all())


async def get_unit(db: AsyncSession, unit_id: str) -> Unit:
    unit = await db.get(Unit, unit_id)
    if not unit:
        raise NotFoundError("unit not found")
    return unit


async def update_unit(db: AsyncSession, unit_id: str, changes: Dict[str, Any]) -> Unit:
    unit = await get_unit(db, unit_id)
    _apply(unit, changes, UNIT_FIELDS)
    await db.commit()
    await db.refresh(unit)
    return unit


async def delete_unit(db: AsyncSession, unit_id: str) -> None:
    await get_unit(db, unit_id)
    if await _in_use(db, Appointment.unit_id, unit_id):
        raise ValidationError("unit is used by appointments")

    await db.execute(delete(Unit).where(Unit.id == unit_id))
    await db.commit()
    logger.info(f"Unit {unit_id} deleted")
