"""Response shapes for appointments.

Every read path (get, list, list by user, create, update) goes through
``appointment_to_dict`` so the denormalized ``service_ids`` and the
user/vehicle/unit summaries are always built the same way. The appointment
must be loaded with ``appointment_load_options()``.
"""

from decimal import Decimal
from typing import Any, Dict, Optional

from lavajato.models.appointment import Appointment, AppointmentService
from sqlalchemy.orm import selectinload


def appointment_load_options():
    """Eager-load options required by ``appointment_to_dict``."""
    return (
        selectinload(Appointment.user),
        selectinload(Appointment.vehicle),
        selectinload(Appointment.unit),
        selectinload(Appointment.appointment_services).selectinload(AppointmentService.service),
    )


def _money(value: Optional[Decimal]) -> float:
    return float(value) if value is not None else 0.0


def _enum_value(value):
    return value.value if hasattr(value, "value") else value


def appointment_to_dict(appointment: Appointment) -> Dict[str, Any]:
    links = sorted(appointment.appointment_services, key=lambda link: link.created_at)
    user = appointment.user
    vehicle = appointment.vehicle
    unit = appointment.unit

    return {
        "id": appointment.id,
        "user_id": appointment.user_id,
        "vehicle_id": appointment.vehicle_id,
        "unit_id": appointment.unit_id,
        "status": _enum_value(appointment.status),
        "scheduled_date": appointment.scheduled_date.isoformat(),
        "scheduled_time": appointment.scheduled_time,
        "final_price": _money(appointment.final_price),
        "includes_pickup": bool(appointment.includes_pickup),
        "pickup_fee": _money(appointment.pickup_fee),
        "pickup_address": appointment.pickup_address,
        "pickup_notes": appointment.pickup_notes,
        "created_at": appointment.created_at.isoformat() if appointment.created_at else None,
        "updated_at": appointment.updated_at.isoformat() if appointment.updated_at else None,
        "service_ids": [link.service_id for link in links],
        "services": [
            {
                "id": link.service.id,
                "name": link.service.name,
                "base_price": _money(link.service.base_price),
                "size_surcharge": _money(link.service.size_surcharge),
            }
            for link in links
            if link.service is not None
        ],
        "user": (
            {"id": user.id, "name": user.name, "phone_number": user.phone_number}
            if user
            else None
        ),
        "vehicle": (
            {
                "id": vehicle.id,
                "model": vehicle.model,
                "license_plate": vehicle.license_plate,
                "size": _enum_value(vehicle.size),
            }
            if vehicle
            else None
        ),
        "unit": {"id": unit.id, "name": unit.name, "address": unit.address} if unit else None,
    }
