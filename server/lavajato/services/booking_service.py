"""
Appointment booking workflow.

Creates appointments (validate references, price, persist with service
links), applies partial updates, removes appointments and serves the read
projections. The completion notifier is injected at startup; moving an
appointment into ``completed`` fires it as a detached task.
"""

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Union

from lavajato.config import settings
from lavajato.errors import NotFoundError, ValidationError
from lavajato.models.appointment import Appointment, AppointmentService, AppointmentStatus
from lavajato.models.unit import Unit
from lavajato.models.user import User
from lavajato.models.vehicle import Vehicle, VehicleSize
from lavajato.services.database import unit_of_work
from lavajato.services.notification_service import CompletionNotifier, NullNotifier
from lavajato.services.pricing import PriceBreakdown, calculate_price
from lavajato.services.projections import appointment_load_options, appointment_to_dict
from lavajato.utils.background_tasks import spawn, wait_for_background_tasks
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

STATUS_ORDER = {
    AppointmentStatus.SCHEDULED: 0,
    AppointmentStatus.IN_PROGRESS: 1,
    AppointmentStatus.COMPLETED: 2,
}

# Fields a partial update may touch. Nullable ones may be cleared with None.
UPDATABLE_FIELDS = (
    "status",
    "scheduled_date",
    "scheduled_time",
    "includes_pickup",
    "pickup_fee",
    "pickup_address",
    "pickup_notes",
)
NULLABLE_FIELDS = ("pickup_address", "pickup_notes")


def is_forward_transition(old: AppointmentStatus, new: AppointmentStatus) -> bool:
    """True when ``new`` does not move backwards from ``old``.

    Not applied by BookingService: transitions are unconstrained there.
    """
    return STATUS_ORDER[AppointmentStatus(new)] >= STATUS_ORDER[AppointmentStatus(old)]


def _parse_date(value: Union[date, datetime, str]) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        # Accept both "2025-01-15" and full ISO timestamps
        return date.fromisoformat(str(value)[:10])
    except ValueError as e:
        raise ValidationError(f"invalid date: {value}") from e


def _parse_status(value: Union[AppointmentStatus, str]) -> AppointmentStatus:
    try:
        return AppointmentStatus(value)
    except ValueError as e:
        valid = ", ".join(s.value for s in AppointmentStatus)
        raise ValidationError(f"invalid status {value!r}; must be one of: {valid}") from e


class BookingService:
    """
    Appointment booking orchestrator.

    Holds no per-request state; one instance is shared by the application
    and every method receives the request's database session.
    """

    def __init__(
        self,
        notifier: Optional[CompletionNotifier] = None,
        pickup_fee: Optional[Decimal] = None,
        loyalty_points_per_completion: Optional[int] = None,
    ):
        """
        Args:
            notifier: Completion notifier (default: NullNotifier)
            pickup_fee: Flat pickup/delivery fee (default: settings.PICKUP_FEE)
            loyalty_points_per_completion: Points credited on completion
                (default: settings.LOYALTY_POINTS_PER_COMPLETION, 0 disables)
        """
        self.notifier = notifier or NullNotifier()
        self.pickup_fee = Decimal(
            str(pickup_fee if pickup_fee is not None else settings.PICKUP_FEE)
        )
        self.loyalty_points_per_completion = (
            loyalty_points_per_completion
            if loyalty_points_per_completion is not None
            else settings.LOYALTY_POINTS_PER_COMPLETION
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def _load(self, db: AsyncSession, appointment_id: str) -> Appointment:
        stmt = (
            select(Appointment)
            .options(*appointment_load_options())
            .where(Appointment.id == appointment_id)
            .execution_options(populate_existing=True)
        )
        result = await db.execute(stmt)
        appointment = result.scalar_one_or_none()
        if not appointment:
            raise NotFoundError("appointment not found")
        return appointment

    async def get_appointment(self, db: AsyncSession, appointment_id: str) -> Dict[str, Any]:
        return appointment_to_dict(await self._load(db, appointment_id))

    async def list_appointments(
        self, db: AsyncSession, user_id: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        stmt = (
            select(Appointment)
            .options(*appointment_load_options())
            .order_by(Appointment.created_at.desc())
        )
        if user_id is not None:
            stmt = stmt.where(Appointment.user_id == user_id)

        result = await db.execute(stmt)
        return [appointment_to_dict(appointment) for appointment in result.scalars().all()]

    async def list_appointments_by_user(
        self, db: AsyncSession, user_id: str
    ) -> List[Dict[str, Any]]:
        return await self.list_appointments(db, user_id=user_id)

    async def calculate_price(
        self,
        db: AsyncSession,
        size: Union[VehicleSize, str, None],
        service_ids: Iterable[str],
    ) -> PriceBreakdown:
        return await calculate_price(db, size, service_ids)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create_appointment(
        self,
        db: AsyncSession,
        user_id: str,
        vehicle_id: str,
        unit_id: str,
        scheduled_date: Union[date, str],
        scheduled_time: str,
        service_ids: List[str],
        includes_pickup: bool = False,
        pickup_address: Optional[str] = None,
        pickup_notes: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Book an appointment.

        This method:
        1. Validates that the user, vehicle and unit exist (in that order)
        2. Prices the services for the vehicle's size
        3. Adds the flat pickup fee when pickup/delivery is requested
        4. Inserts the appointment and its service links in one transaction

        Returns:
            The appointment projection (see lavajato.services.projections)

        Raises:
            ValidationError: Unknown user/vehicle/unit, or no service resolved
        """
        if not await db.get(User, user_id):
            raise ValidationError("user not found")

        vehicle = await db.get(Vehicle, vehicle_id)
        if not vehicle:
            raise ValidationError("vehicle not found")

        if not await db.get(Unit, unit_id):
            raise ValidationError("unit not found")

        breakdown = await calculate_price(db, vehicle.size, service_ids)
        scheduled_on = _parse_date(scheduled_date)

        pickup_fee = self.pickup_fee if includes_pickup else Decimal("0")
        final_price = breakdown.final_price + pickup_fee

        appointment = Appointment(
            user_id=user_id,
            vehicle_id=vehicle_id,
            unit_id=unit_id,
            status=AppointmentStatus.SCHEDULED,
            scheduled_date=scheduled_on,
            scheduled_time=scheduled_time,
            final_price=final_price,
            includes_pickup=bool(includes_pickup),
            pickup_fee=pickup_fee,
            pickup_address=pickup_address,
            pickup_notes=pickup_notes,
        )

        async with unit_of_work(db):
            db.add(appointment)
            await db.flush()

            # Link only the services that were actually priced
            db.add_all(
                AppointmentService(appointment_id=appointment.id, service_id=service_id)
                for service_id in breakdown.service_ids
            )

        logger.info(
            f"Appointment {appointment.id} booked for user {user_id}, vehicle {vehicle_id} "
            f"at unit {unit_id} on {scheduled_on} {scheduled_time}: "
            f"{len(breakdown.items)} services, R$ {final_price}"
            + (f" (pickup R$ {pickup_fee})" if includes_pickup else "")
        )

        return await self.get_appointment(db, appointment.id)

    async def update_appointment(
        self, db: AsyncSession, appointment_id: str, changes: Dict[str, Any]
    ) -> Dict[str, Any]:
        """
        Apply a partial update.

        The price is never recomputed. Moving the status into ``completed``
        from any other status fires the completion notice; nothing else does.
        """
        appointment = await self._load(db, appointment_id)
        previous_status = appointment.status

        updates: Dict[str, Any] = {}
        for field, value in changes.items():
            if field not in UPDATABLE_FIELDS:
                continue
            if value is None and field not in NULLABLE_FIELDS:
                continue
            updates[field] = value

        if "status" in updates:
            updates["status"] = _parse_status(updates["status"])
        if "scheduled_date" in updates:
            updates["scheduled_date"] = _parse_date(updates["scheduled_date"])
        if "pickup_fee" in updates:
            updates["pickup_fee"] = Decimal(str(updates["pickup_fee"]))
            if updates["pickup_fee"] < 0:
                raise ValidationError("pickup fee must be non-negative")

        completing = (
            updates.get("status") == AppointmentStatus.COMPLETED
            and previous_status != AppointmentStatus.COMPLETED
        )

        if completing:
            self._notify_completion(appointment_id)

        async with unit_of_work(db):
            for field, value in updates.items():
                setattr(appointment, field, value)

            if completing and self.loyalty_points_per_completion > 0:
                user = await db.get(User, appointment.user_id)
                user.loyalty_points = (user.loyalty_points or 0) + self.loyalty_points_per_completion

        logger.info(f"Appointment {appointment_id} updated: {sorted(updates)}")
        if "status" in updates and updates["status"] != previous_status:
            logger.info(
                f"Appointment {appointment_id} status {previous_status.value} -> "
                f"{updates['status'].value}"
            )

        return await self.get_appointment(db, appointment_id)

    async def remove_appointment(self, db: AsyncSession, appointment_id: str) -> None:
        """Delete an appointment, its service links first."""
        await self._load(db, appointment_id)

        async with unit_of_work(db):
            await db.execute(
                delete(AppointmentService).where(AppointmentService.appointment_id == appointment_id)
            )
            await db.execute(delete(Appointment).where(Appointment.id == appointment_id))

        logger.info(f"Appointment {appointment_id} removed")

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    def _notify_completion(self, appointment_id: str) -> None:
        """Fire the completion notice without waiting for it."""
        try:
            spawn(
                self.notifier.notify_completion(appointment_id),
                name=f"notify-completion-{appointment_id}",
            )
        except Exception as e:
            logger.error(
                f"Could not schedule completion notice for appointment {appointment_id}: {e}",
                exc_info=True,
            )

    async def wait_for_notifications(self, timeout: Optional[float] = None) -> None:
        await wait_for_background_tasks(timeout=timeout)
