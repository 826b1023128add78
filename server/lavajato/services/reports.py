"""Revenue and volume dashboard for staff."""

import calendar
import logging
from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Optional

from lavajato.models.appointment import Appointment, AppointmentStatus
from lavajato.models.service import Service
from lavajato.models.unit import Unit
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

logger = logging.getLogger(__name__)


async def build_dashboard(
    db: AsyncSession,
    start: Optional[date] = None,
    end: Optional[date] = None,
    year: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Summarize appointments scheduled between ``start`` and ``end`` (inclusive).

    Revenue is the stored final price. Service revenue counts the full
    price of every appointment that includes the service, so per-service
    figures overlap and do not add up to the total.

    Args:
        db: Database session
        start: First scheduled date included (default: no lower bound)
        end: Last scheduled date included (default: no upper bound)
        year: Year for the monthly breakdown (default: current year)

    Returns:
        {
            "total_revenue": float,
            "total_appointments": int,
            "by_status": {status: {"count": int, "revenue": float}},
            "by_unit": [{"unit_id", "name", "count", "revenue"}],
            "by_service": [{"service_id", "name", "count", "revenue"}],
            "monthly": [{"month": 1..12, "count": int, "revenue": float}],
        }
    """
    year = year or date.today().year

    stmt = select(Appointment).options(selectinload(Appointment.appointment_services))
    if start:
        stmt = stmt.where(Appointment.scheduled_date >= start)
    if end:
        stmt = stmt.where(Appointment.scheduled_date <= end)
    appointments = (await db.execute(stmt)).scalars().all()

    units = (await db.execute(select(Unit).order_by(Unit.name))).scalars().all()
    services = (await db.execute(select(Service).order_by(Service.name))).scalars().all()

    total = Decimal("0")
    by_status = {status.value: {"count": 0, "revenue": Decimal("0")} for status in AppointmentStatus}
    by_unit = defaultdict(lambda: {"count": 0, "revenue": Decimal("0")})
    by_service = defaultdict(lambda: {"count": 0, "revenue": Decimal("0")})
    monthly = {month: {"count": 0, "revenue": Decimal("0")} for month in range(1, 13)}

    for appointment in appointments:
        price = appointment.final_price or Decimal("0")
        total += price

        status_bucket = by_status[AppointmentStatus(appointment.status).value]
        status_bucket["count"] += 1
        status_bucket["revenue"] += price

        by_unit[appointment.unit_id]["count"] += 1
        by_unit[appointment.unit_id]["revenue"] += price

        for service_id in {link.service_id for link in appointment.appointment_services}:
            by_service[service_id]["count"] += 1
            by_service[service_id]["revenue"] += price

        if appointment.scheduled_date.year == year:
            month = monthly[appointment.scheduled_date.month]
            month["count"] += 1
            month["revenue"] += price

    logger.info(f"Dashboard built over {len(appointments)} appointments ({start} - {end})")

    return {
        "total_revenue": float(total),
        "total_appointments": len(appointments),
        "by_status": {
            status: {"count": bucket["count"], "revenue": float(bucket["revenue"])}
            for status, bucket in by_status.items()
        },
        "by_unit": [
            {
                "unit_id": unit.id,
                "name": unit.name,
                "count": by_unit[unit.id]["count"],
                "revenue": float(by_unit[unit.id]["revenue"]),
            }
            for unit in units
        ],
        "by_service": [
            {
                "service_id": service.id,
                "name": service.name,
                "count": by_service[service.id]["count"],
                "revenue": float(by_service[service.id]["revenue"]),
            }
            for service in services
        ],
        "monthly": [
            {
                "month": month,
                "label": calendar.month_abbr[month],
                "count": bucket["count"],
                "revenue": float(bucket["revenue"]),
            }
            for month, bucket in monthly.items()
        ],
    }
