#!/usr/bin/env python3
"""
Initialize database with sample data for development.

Drops and recreates every table, then seeds units, wash services, one
customer with two vehicles and a couple of appointments.

Usage:
    python scripts/init_db.py
"""

import asyncio
import sys
from datetime import date, timedelta
from decimal import Decimal
from pathlib import Path

# Add server directory to path
sys.path.append(str(Path(__file__).parent.parent / "server"))

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from lavajato.config import settings
from lavajato.models import Base, Service, Unit, User, Vehicle, VehicleSize
from lavajato.services.booking_service import BookingService
from lavajato.services.database import enable_sqlite_foreign_keys


async def init_database():
    """Create tables and seed with sample data."""
    print("Initializing database...")

    engine = create_async_engine(settings.DATABASE_URL, echo=settings.DEBUG)
    enable_sqlite_foreign_keys(engine)
    async_session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    print("Creating tables...")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    print("Seeding sample data...")
    async with async_session_maker() as db:
        units = [
            Unit(name="Unidade Centro", address="Av. Paulista, 1000 - Bela Vista"),
            Unit(name="Unidade Zona Sul", address="Av. Interlagos, 2500 - Interlagos"),
        ]
        services = [
            Service(name="Lavagem Simples", base_price=Decimal("25.00"), size_surcharge=Decimal("5.00")),
            Service(name="Lavagem Completa", base_price=Decimal("45.00"), size_surcharge=Decimal("8.00")),
            Service(name="Enceramento", base_price=Decimal("60.00"), size_surcharge=Decimal("15.00")),
            Service(name="Higienização Interna", base_price=Decimal("120.00"), size_surcharge=Decimal("30.00")),
        ]
        user = User(
            name="Maria Silva",
            phone_number="+5511987654321",
            address="Rua das Flores, 123",
            neighborhood="Centro",
            city="São Paulo",
            state="SP",
            postal_code="01000-000",
            account_type="personal",
            date_of_birth=date(1990, 5, 15),
        )
        db.add_all(units + services + [user])
        await db.flush()

        vehicles = [
            Vehicle(user_id=user.id, model="Fiat Mobi", license_plate="ABC1D23", size=VehicleSize.SMALL),
            Vehicle(user_id=user.id, model="Toyota Hilux", license_plate="XYZ9A87", size=VehicleSize.LARGE),
        ]
        db.add_all(vehicles)
        await db.commit()

        booking = BookingService()
        tomorrow = date.today() + timedelta(days=1)

        appointments = [
            await booking.create_appointment(
                db,
                user_id=user.id,
                vehicle_id=vehicles[0].id,
                unit_id=units[0].id,
                scheduled_date=tomorrow,
                scheduled_time="09:00",
                service_ids=[services[0].id],
            ),
            await booking.create_appointment(
                db,
                user_id=user.id,
                vehicle_id=vehicles[1].id,
                unit_id=units[1].id,
                scheduled_date=tomorrow,
                scheduled_time="14:30",
                service_ids=[services[1].id, services[2].id],
                includes_pickup=True,
                pickup_address="Rua das Flores, 123",
            ),
        ]

    print("Database initialized successfully!")
    print(f"Created {len(units)} units")
    print(f"Created {len(services)} services")
    print(f"Created {len(vehicles)} vehicles")
    for appointment in appointments:
        print(f"  Appointment {appointment['id']}: R$ {appointment['final_price']:.2f}")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(init_database())
