"""Appointment and appointment/service link models."""

import enum

from lavajato.models.base import Base, TimestampMixin, generate_id
from sqlalchemy import Boolean, Column, Date
from sqlalchemy import Enum as SQLEnum
from sqlalchemy import ForeignKey, Index, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship


class AppointmentStatus(str, enum.Enum):
    """Appointment status enum."""

    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class Appointment(Base, TimestampMixin):
    """Appointment model for storing a booking.

    Stores:
    - References to the customer, vehicle and unit
    - Scheduled date and free-text time slot
    - Final price, computed once at booking and never recomputed
    - Pickup/delivery ("leva e traz") flag, fee, address and notes
    - Status (scheduled -> in_progress -> completed, not enforced)
    """

    __tablename__ = "appointments"

    __table_args__ = (
        Index("ix_appointments_user_created", "user_id", "created_at"),
        Index("ix_appointments_status_date", "status", "scheduled_date"),
    )

    # Primary Identity
    id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    vehicle_id = Column(String(36), ForeignKey("vehicles.id"), nullable=False, index=True)
    unit_id = Column(String(36), ForeignKey("units.id"), nullable=False, index=True)

    # Scheduling
    status = Column(
        SQLEnum(AppointmentStatus), default=AppointmentStatus.SCHEDULED, nullable=False
    )
    scheduled_date = Column(Date, nullable=False)
    scheduled_time = Column(String(20), nullable=False)  # "14:30", not validated

    # Pricing
    final_price = Column(Numeric(10, 2), nullable=False)

    # Pickup & delivery
    includes_pickup = Column(Boolean, default=False, nullable=False)
    pickup_fee = Column(Numeric(10, 2), default=0, nullable=False)
    pickup_address = Column(String(255))
    pickup_notes = Column(Text)

    # Relationships
    user = relationship("User")
    vehicle = relationship("Vehicle")
    unit = relationship("Unit")
    appointment_services = relationship(
        "AppointmentService", back_populates="appointment", passive_deletes=True
    )

    def __repr__(self):
        return f"<Appointment(id={self.id}, user_id={self.user_id}, scheduled_date='{self.scheduled_date}', status='{self.status}')>"


class AppointmentService(Base, TimestampMixin):
    """Link row: this service was included in this booking."""

    __tablename__ = "appointment_services"
    __table_args__ = (
        UniqueConstraint("appointment_id", "service_id", name="uq_appointment_service"),
    )

    id = Column(String(36), primary_key=True, default=generate_id)
    appointment_id = Column(
        String(36), ForeignKey("appointments.id", ondelete="CASCADE"), nullable=False, index=True
    )
    service_id = Column(String(36), ForeignKey("services.id"), nullable=False, index=True)

    appointment = relationship("Appointment", back_populates="appointment_services")
    service = relationship("Service")

    def __repr__(self):
        return f"<AppointmentService(appointment_id={self.appointment_id}, service_id={self.service_id})>"
