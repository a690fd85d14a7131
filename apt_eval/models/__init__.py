"""SQLAlchemy ORM models."""

from apt_eval.models.apartment import Apartment
from apt_eval.models.base import Base

__all__ = ["Apartment", "Base"]
