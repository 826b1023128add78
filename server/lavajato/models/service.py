"""Wash service catalog model."""

from lavajato.models.base import Base, TimestampMixin, generate_id
from sqlalchemy import CheckConstraint, Column, Numeric, String


class Service(Base, TimestampMixin):
    """A purchasable wash operation.

    ``size_surcharge`` is scaled by the vehicle size multiplier at booking
    time; the resulting price is copied onto the appointment.
    """

    __tablename__ = "services"
    __table_args__ = (
        CheckConstraint("base_price >= 0", name="ck_services_base_price"),
        CheckConstraint("size_surcharge >= 0", name="ck_services_size_surcharge"),
    )

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(100), nullable=False)
    base_price = Column(Numeric(10, 2), nullable=False)
    size_surcharge = Column(Numeric(10, 2), nullable=False, default=0)

    def __repr__(self):
        return f"<Service(id={self.id}, name='{self.name}', base_price={self.base_price})>"
