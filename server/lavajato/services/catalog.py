"""Service catalog: wash services offered and their prices."""

import logging
from decimal import Decimal
from typing import Any, Dict, Iterable, List

from lavajato.errors import NotFoundError, ValidationError
from lavajato.models.appointment import AppointmentService
from lavajato.models.service import Service
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("name", "base_price", "size_surcharge")


def _check_prices(base_price, size_surcharge):
    if base_price is not None and Decimal(base_price) < 0:
        raise ValidationError("base price must be non-negative")
    if size_surcharge is not None and Decimal(size_surcharge) < 0:
        raise ValidationError("size surcharge must be non-negative")


async def create_service(
    db: AsyncSession, name: str, base_price: Decimal, size_surcharge: Decimal = Decimal("0")
) -> Service:
    _check_prices(base_price, size_surcharge)

    service = Service(name=name, base_price=base_price, size_surcharge=size_surcharge)
    db.add(service)
    await db.commit()
    await db.refresh(service)

    logger.info(f"Service {service.id} created: {name} ({base_price} + {size_surcharge}/size)")
    return service


async def list_services(db: AsyncSession) -> List[Service]:
    result = await db.execute(select(Service).order_by(Service.created_at.desc()))
    return list(result.scalars().all())


async def get_service(db: AsyncSession, service_id: str) -> Service:
    service = await db.get(Service, service_id)
    if not service:
        raise NotFoundError("service not found")
    return service


async def find_services_by_ids(db: AsyncSession, service_ids: Iterable[str]) -> List[Service]:
    """
    Resolve service ids against the catalog.

    Unknown ids are silently omitted and duplicates collapse to one record;
    callers decide whether an empty result is an error.
    """
    ids = list(dict.fromkeys(service_ids or []))
    if not ids:
        return []

    result = await db.execute(select(Service).where(Service.id.in_(ids)))
    services = {service.id: service for service in result.scalars().all()}

    missing = [service_id for service_id in ids if service_id not in services]
    if missing:
        logger.debug(f"Ignoring unknown service ids: {missing}")

    # Keep the caller's ordering
    return [services[service_id] for service_id in ids if service_id in services]


async def update_service(db: AsyncSession, service_id: str, changes: Dict[str, Any]) -> Service:
    service = await get_service(db, service_id)
    _check_prices(changes.get("base_price"), changes.get("size_surcharge"))

    for field, value in changes.items():
        if field in UPDATABLE_FIELDS and value is not None:
            setattr(service, field, value)

    await db.commit()
    await db.refresh(service)
    logger.info(f"Service {service_id} updated: {sorted(changes)}")
    return service


async def delete_service(db: AsyncSession, service_id: str) -> None:
    await get_service(db, service_id)
    in_use = await db.execute(
        select(AppointmentService.id).where(AppointmentService.service_id == service_id).limit(1)
    )
    if in_use.first() is not None:
        raise ValidationError("service is used by appointments")

    await db.execute(delete(Service).where(Service.id == service_id))
    await db.commit()
    logger.info(f"Service {service_id} deleted")
