"""
Appointment pricing.

The price of a booking is the sum of each selected service's base price plus
its size surcharge scaled by the vehicle size:

    small  -> surcharge x 0.5
    medium -> surcharge x 1.0
    large  -> surcharge x 1.5

Unrecognized sizes price as medium. Arithmetic stays in ``Decimal`` with no
rounding; formatting for display is the caller's job.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from lavajato.errors import ValidationError
from lavajato.models.service import Service
from lavajato.models.vehicle import VehicleSize
from lavajato.services.catalog import find_services_by_ids
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

SIZE_MULTIPLIERS: Dict[VehicleSize, Decimal] = {
    VehicleSize.SMALL: Decimal("0.5"),
    VehicleSize.MEDIUM: Decimal("1.0"),
    VehicleSize.LARGE: Decimal("1.5"),
}
DEFAULT_MULTIPLIER = SIZE_MULTIPLIERS[VehicleSize.MEDIUM]


@dataclass(frozen=True)
class PriceLineItem:
    """One priced service. ``size_surcharge`` is the catalog (unscaled) value."""

    service_id: str
    name: str
    base_price: Decimal
    size_surcharge: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.service_id,
            "name": self.name,
            "base_price": float(self.base_price),
            "size_surcharge": float(self.size_surcharge),
        }


@dataclass(frozen=True)
class PriceBreakdown:
    base_total: Decimal
    surcharge_total: Decimal
    final_price: Decimal
    items: List[PriceLineItem] = field(default_factory=list)

    @property
    def service_ids(self) -> List[str]:
        return [item.service_id for item in self.items]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "base_total": float(self.base_total),
            "surcharge_total": float(self.surcharge_total),
            "final_price": float(self.final_price),
            "services": [item.to_dict() for item in self.items],
        }


def size_multiplier(size: Union[VehicleSize, str, None]) -> Decimal:
    """Surcharge multiplier for a vehicle size; anything unrecognized counts as medium."""
    if isinstance(size, VehicleSize):
        return SIZE_MULTIPLIERS[size]

    try:
        return SIZE_MULTIPLIERS[VehicleSize(str(size).lower())]
    except ValueError:
        logger.warning(f"Unrecognized vehicle size {size!r}, pricing as medium")
        return DEFAULT_MULTIPLIER


def _as_decimal(value) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def price_services(
    services: Sequence[Service], size: Union[VehicleSize, str, None]
) -> PriceBreakdown:
    """
    Price already-resolved services for a vehicle size.

    Args:
        services: Catalog records (anything with id, name, base_price, size_surcharge)
        size: Vehicle size

    Returns:
        PriceBreakdown with totals and one line item per service

    Raises:
        ValidationError: If no services were given
    """
    if not services:
        raise ValidationError("no services found")

    multiplier = size_multiplier(size)
    base_total = Decimal("0")
    surcharge_total = Decimal("0")
    items = []

    for service in services:
        base_price = _as_decimal(service.base_price)
        surcharge = _as_decimal(service.size_surcharge)

        base_total += base_price
        surcharge_total += surcharge * multiplier
        items.append(
            PriceLineItem(
                service_id=service.id,
                name=service.name,
                base_price=base_price,
                size_surcharge=surcharge,
            )
        )

    return PriceBreakdown(
        base_total=base_total,
        surcharge_total=surcharge_total,
        final_price=base_total + surcharge_total,
        items=items,
    )


async def calculate_price(
    db: AsyncSession,
    size: Union[VehicleSize, str, None],
    service_ids: Optional[Iterable[str]],
) -> PriceBreakdown:
    """Resolve service ids through the catalog and price them.

    Unknown ids are dropped; if none resolve, raises ValidationError.
    """
    services = await find_services_by_ids(db, service_ids or [])
    breakdown = price_services(services, size)

    logger.debug(
        f"Priced {len(breakdown.items)} services for size {size}: "
        f"{breakdown.base_total} + {breakdown.surcharge_total} = {breakdown.final_price}"
    )
    return breakdown
