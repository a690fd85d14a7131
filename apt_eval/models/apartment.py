"""Apartment evaluation table model."""

from datetime import datetime

from sqlalchemy import Boolean, Float, Index, Integer, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from apt_eval.models.base import Base, UTCDateTime


class Apartment(Base):
    """One apartment evaluation recorded by the user."""

    __tablename__ = "apartments"
    __table_args__ = (Index("idx_apartments_created", "created_at"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    address: Mapped[str] = mapped_column(Text, nullable=False)
    visit_date: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True, default="")
    rating: Mapped[int | None] = mapped_column(Integer, nullable=True, default=0)
    price: Mapped[float | None] = mapped_column(Float, nullable=True, default=0.0)
    floor: Mapped[int | None] = mapped_column(Integer, nullable=True, default=1)
    is_gated: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="0"
    )
    has_garage: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="0"
    )
    has_laundry: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="0"
    )
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, server_default=func.current_timestamp()
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, server_default=func.current_timestamp()
    )
