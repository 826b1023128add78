"""
Request and response schemas for the HTTP layer.

Appointment responses are plain dicts from lavajato.services.projections;
the other resources serialize straight from ORM objects.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from lavajato.models.appointment import AppointmentStatus
from lavajato.models.vehicle import VehicleSize
from pydantic import BaseModel, ConfigDict, Field


class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# ----------------------------------------------------------------------------
# Users
# ----------------------------------------------------------------------------


class UserCreate(BaseModel):
    name: str = Field(..., min_length=1, description="Full name")
    phone_number: str = Field(..., min_length=1, description="Login phone number")
    address: str = Field(..., min_length=1)
    neighborhood: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=2, max_length=2, description="UF")
    postal_code: str = Field(..., min_length=1)
    loyalty_points: int = Field(0, ge=0)
    date_of_birth: Optional[date] = None
    account_type: Optional[str] = None


class UserUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    address: Optional[str] = Field(None, min_length=1)
    neighborhood: Optional[str] = Field(None, min_length=1)
    city: Optional[str] = Field(None, min_length=1)
    state: Optional[str] = Field(None, min_length=2, max_length=2)
    postal_code: Optional[str] = Field(None, min_length=1)
    loyalty_points: Optional[int] = Field(None, ge=0)
    date_of_birth: Optional[date] = None
    account_type: Optional[str] = None


class UserResponse(ORMModel):
    id: str
    name: str
    phone_number: str
    address: str
    neighborhood: str
    city: str
    state: str
    postal_code: str
    loyalty_points: int
    date_of_birth: Optional[date] = None
    account_type: Optional[str] = None
    requires_registration: bool
    created_at: datetime
    updated_at: datetime


class LoyaltyPointsRequest(BaseModel):
    points: int = Field(..., gt=0)


class FavoriteAddressCreate(BaseModel):
    label: str = Field(..., min_length=1, description="e.g. Casa, Trabalho")
    street: str = Field(..., min_length=1)
    number: str = Field(..., min_length=1)
    complement: Optional[str] = None
    neighborhood: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    postal_code: str = Field(..., min_length=1)


class FavoriteAddressResponse(ORMModel):
    id: str
    user_id: str
    label: str
    street: str
    number: str
    complement: Optional[str] = None
    neighborhood: str
    city: str
    postal_code: str
    created_at: datetime


# ----------------------------------------------------------------------------
# Vehicles, units, services
# ----------------------------------------------------------------------------


class VehicleCreate(BaseModel):
    user_id: str
    model: str = Field(..., min_length=1)
    license_plate: str = Field(..., min_length=1)
    size: VehicleSize


class VehicleUpdate(BaseModel):
    model: Optional[str] = Field(None, min_length=1)
    license_plate: Optional[str] = Field(None, min_length=1)
    size: Optional[VehicleSize] = None


class VehicleResponse(ORMModel):
    id: str
    user_id: str
    model: str
    license_plate: str
    size: VehicleSize
    created_at: datetime
    updated_at: datetime


class UnitCreate(BaseModel):
    name: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)


class UnitUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    address: Optional[str] = Field(None, min_length=1)


class UnitResponse(ORMModel):
    id: str
    name: str
    address: str
    created_at: datetime
    updated_at: datetime


class ServiceCreate(BaseModel):
    name: str = Field(..., min_length=1)
    base_price: Decimal = Field(..., ge=0)
    size_surcharge: Decimal = Field(Decimal("0"), ge=0)


class ServiceUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    base_price: Optional[Decimal] = Field(None, ge=0)
    size_surcharge: Optional[Decimal] = Field(None, ge=0)


class ServiceResponse(ORMModel):
    id: str
    name: str
    base_price: float
    size_surcharge: float
    created_at: datetime
    updated_at: datetime


# ----------------------------------------------------------------------------
# Appointments
# ----------------------------------------------------------------------------


class AppointmentCreate(BaseModel):
    user_id: str
    vehicle_id: str
    unit_id: str
    scheduled_date: date
    scheduled_time: str = Field(..., min_length=1)
    service_ids: List[str]
    includes_pickup: bool = False
    pickup_address: Optional[str] = None
    pickup_notes: Optional[str] = None


class AppointmentUpdate(BaseModel):
    status: Optional[AppointmentStatus] = None
    scheduled_date: Optional[date] = None
    scheduled_time: Optional[str] = Field(None, min_length=1)
    includes_pickup: Optional[bool] = None
    pickup_fee: Optional[Decimal] = Field(None, ge=0)
    pickup_address: Optional[str] = None
    pickup_notes: Optional[str] = None


class PriceCalculationRequest(BaseModel):
    # Plain string: unrecognized sizes price as medium
    size: str
    service_ids: List[str]


# ----------------------------------------------------------------------------
# Auth
# ----------------------------------------------------------------------------


class PhoneVerificationRequest(BaseModel):
    phone_number: str = Field(..., min_length=1)


class PhoneLoginRequest(BaseModel):
    phone_number: str = Field(..., min_length=1)
    verification_code: str = Field(..., min_length=1)
