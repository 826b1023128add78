"""Vehicle model."""

import enum
import re

from lavajato.models.base import Base, TimestampMixin, generate_id
from sqlalchemy import Column
from sqlalchemy import Enum as SQLEnum
from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import relationship, validates


class VehicleSize(str, enum.Enum):
    """Vehicle size category ("porte"), scales per-service surcharges."""

    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


def normalize_license_plate(value: str) -> str:
    """Upper-case a plate and strip separators (abc-1d23 -> ABC1D23)."""
    return re.sub(r"[\s\-]", "", value or "").upper()


class Vehicle(Base, TimestampMixin):
    """Customer vehicle. License plates are unique across all vehicles."""

    __tablename__ = "vehicles"

    # Primary Identity
    id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)

    # Vehicle Details
    model = Column(String(100), nullable=False)
    license_plate = Column(String(10), unique=True, nullable=False, index=True)
    size = Column(SQLEnum(VehicleSize), nullable=False, default=VehicleSize.MEDIUM)

    # Relationships
    user = relationship("User", back_populates="vehicles")

    @validates("license_plate")
    def validate_license_plate(self, key, value):
        value = normalize_license_plate(value)
        if not value:
            raise ValueError("License plate cannot be empty")

        if not re.match(r"^[A-Z0-9]{5,10}$", value):
            raise ValueError(f"Invalid license plate: {value}")

        return value

    def __repr__(self):
        return f"<Vehicle(id={self.id}, plate='{self.license_plate}', model='{self.model}')>"
