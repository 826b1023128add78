"""Service unit (physical location) model."""

from lavajato.models.base import Base, TimestampMixin, generate_id
from sqlalchemy import Column, String


class Unit(Base, TimestampMixin):
    """A car-wash location. No capacity model: any unit accepts any booking."""

    __tablename__ = "units"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(100), nullable=False)
    address = Column(String(255), nullable=False)

    def __repr__(self):
        return f"<Unit(id={self.id}, name='{self.name}')>"
