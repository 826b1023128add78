"""Appointment endpoints."""

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, status
from lavajato.config import settings
from lavajato.dependencies import get_booking_service, get_current_user
from lavajato.models.user import User
from lavajato.schemas import AppointmentCreate, AppointmentUpdate, PriceCalculationRequest
from lavajato.services.booking_service import BookingService
from lavajato.services.database import get_db
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_appointment(
    payload: AppointmentCreate,
    db: AsyncSession = Depends(get_db),
    booking: BookingService = Depends(get_booking_service),
) -> Dict[str, Any]:
    """Book an appointment; the price is computed server-side."""
    return await booking.create_appointment(db, **payload.model_dump())


@router.post("/calculate-price")
async def calculate_price(
    payload: PriceCalculationRequest,
    db: AsyncSession = Depends(get_db),
    booking: BookingService = Depends(get_booking_service),
) -> Dict[str, Any]:
    breakdown = await booking.calculate_price(db, payload.size, payload.service_ids)
    return breakdown.to_dict()


@router.get("/pickup-fee")
async def pickup_fee() -> Dict[str, float]:
    """
    Pickup/delivery fees.

    ``charged`` is what gets stored on the appointment; ``quoted`` is what
    the mobile checkout shows. They differ until product picks one.
    """
    return {
        "charged": float(settings.PICKUP_FEE),
        "quoted": float(settings.PICKUP_QUOTED_FEE),
    }


@router.get("")
async def list_appointments(
    db: AsyncSession = Depends(get_db),
    booking: BookingService = Depends(get_booking_service),
) -> List[Dict[str, Any]]:
    return await booking.list_appointments(db)


@router.get("/mine")
async def list_my_appointments(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    booking: BookingService = Depends(get_booking_service),
) -> List[Dict[str, Any]]:
    return await booking.list_appointments_by_user(db, current_user.id)


@router.get("/user/{user_id}")
async def list_user_appointments(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    booking: BookingService = Depends(get_booking_service),
) -> List[Dict[str, Any]]:
    return await booking.list_appointments_by_user(db, user_id)


@router.get("/{appointment_id}")
async def get_appointment(
    appointment_id: str,
    db: AsyncSession = Depends(get_db),
    booking: BookingService = Depends(get_booking_service),
) -> Dict[str, Any]:
    return await booking.get_appointment(db, appointment_id)


@router.patch("/{appointment_id}")
async def update_appointment(
    appointment_id: str,
    payload: AppointmentUpdate,
    db: AsyncSession = Depends(get_db),
    booking: BookingService = Depends(get_booking_service),
) -> Dict[str, Any]:
    return await booking.update_appointment(
        db, appointment_id, payload.model_dump(exclude_unset=True)
    )


@router.delete("/{appointment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_appointment(
    appointment_id: str,
    db: AsyncSession = Depends(get_db),
    booking: BookingService = Depends(get_booking_service),
) -> None:
    await booking.remove_appointment(db, appointment_id)
