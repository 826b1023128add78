"""User (customer) and favorite address models."""

import re

from lavajato.models.base import Base, TimestampMixin, generate_id
from sqlalchemy import CheckConstraint, Column, Date, ForeignKey, Integer, String
from sqlalchemy.orm import relationship, validates


def normalize_phone_number(value: str) -> str:
    """Canonical stored form: "+" and the digits only ("+55 (11) 98765-4321" -> "+5511987654321").

    Returns "" when there are no digits.
    """
    digits = re.sub(r"\D", "", value or "")
    return f"+{digits}" if digits else ""


class User(Base, TimestampMixin):
    """Customer account.

    The phone number is the login identity. Users created by the phone login
    flow start with placeholder address fields and no date of birth or
    account type; those two fields gate the "complete registration" step.
    """

    __tablename__ = "users"
    __table_args__ = (CheckConstraint("loyalty_points >= 0", name="ck_users_loyalty_points"),)

    # Primary Identity
    id = Column(String(36), primary_key=True, default=generate_id)

    # Contact Information
    name = Column(String(150), nullable=False)
    phone_number = Column(String(20), unique=True, nullable=False, index=True)

    # Address Information
    address = Column(String(200), nullable=False)
    neighborhood = Column(String(100), nullable=False)
    city = Column(String(100), nullable=False)
    state = Column(String(2), nullable=False)
    postal_code = Column(String(10), nullable=False)

    # Loyalty
    loyalty_points = Column(Integer, default=0, nullable=False)

    # Registration completion
    date_of_birth = Column(Date)
    account_type = Column(String(20))  # personal, business

    # Relationships
    vehicles = relationship("Vehicle", back_populates="user", passive_deletes=True)

    @validates("phone_number")
    def validate_phone_number(self, key, value):
        """Validate phone number format and length.

        Only allows digits, spaces, hyphens, parentheses, and plus sign,
        with 10-15 digits in total. Stored normalized, see normalize_phone_number.
        """
        if not value:
            raise ValueError("Phone number cannot be empty")

        digits_only = re.sub(r"[\s\-\(\)\+]", "", value)

        if not re.match(r"^\d+$", digits_only):
            raise ValueError(f"Phone number contains invalid characters: {value}")

        if len(digits_only) < 10 or len(digits_only) > 15:
            raise ValueError(f"Phone number must contain 10-15 digits, got {len(digits_only)}")

        return normalize_phone_number(value)

    @validates("state")
    def validate_state(self, key, value):
        """Brazilian UF codes are two letters."""
        return value.upper() if value else value

    @property
    def requires_registration(self) -> bool:
        return self.date_of_birth is None or not self.account_type

    def __repr__(self):
        return f"<User(id={self.id}, name='{self.name}', phone='{self.phone_number}')>"


class FavoriteAddress(Base, TimestampMixin):
    """Saved pickup address ("Casa", "Trabalho") belonging to one user."""

    __tablename__ = "favorite_addresses"

    id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    label = Column(String(50), nullable=False)
    street = Column(String(200), nullable=False)
    number = Column(String(20), nullable=False)
    complement = Column(String(100))
    neighborhood = Column(String(100), nullable=False)
    city = Column(String(100), nullable=False)
    postal_code = Column(String(10), nullable=False)

    def __repr__(self):
        return f"<FavoriteAddress(id={self.id}, user_id={self.user_id}, label='{self.label}')>"
