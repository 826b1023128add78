"""Database models for the application."""

from lavajato.models.appointment import Appointment, AppointmentService, AppointmentStatus
from lavajato.models.base import Base
from lavajato.models.service import Service
from lavajato.models.unit import Unit
from lavajato.models.user import FavoriteAddress, User
from lavajato.models.vehicle import Vehicle, VehicleSize

__all__ = [
    "Base",
    "User",
    "FavoriteAddress",
    "Vehicle",
    "VehicleSize",
    "Unit",
    "Service",
    "Appointment",
    "AppointmentService",
    "AppointmentStatus",
]
