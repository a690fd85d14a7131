"""Request and response shapes for the apartment API."""

import math
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from apt_eval.db.repositories import ApartmentUpsert

# Tried in order; naive results are treated as UTC.
VISIT_DATE_FORMATS = (
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M",
    "%Y-%m-%d",
)

_TRUE_STRINGS = frozenset({"true", "1", "yes", "on", "t", "y"})

# SQLite INTEGER is a signed 64-bit value.
_SQLITE_INT_MIN = -(2**63)
_SQLITE_INT_MAX = 2**63 - 1


def parse_visit_date(value: object) -> datetime | None:
    """Normalize a client-supplied visit date to an aware UTC datetime.

    ``None``, ``""`` and ``"null"`` mean "not visited". Unparseable strings
    raise ``ValueError``.
    """

    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip().strip('"')
        if not text or text.lower() == "null":
            return None
        parsed = _parse_date_string(text)
    else:
        raise ValueError("visit_date must be a date string")

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    try:
        return parsed.astimezone(UTC)
    except OverflowError as exc:
        raise ValueError("visit_date is out of range") from exc


def _parse_date_string(text: str) -> datetime:
    for fmt in VISIT_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    raise ValueError(f"visit_date '{text}' is not a recognized date format")


def _coerce_int(value: object, default: int) -> int:
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        parsed = value
    else:
        try:
            parsed = int(float(str(value).strip()))
        except (TypeError, ValueError, OverflowError):
            return default
    if not _SQLITE_INT_MIN <= parsed <= _SQLITE_INT_MAX:
        return default
    return parsed


def _coerce_float(value: object, default: float) -> float:
    if value is None or isinstance(value, bool):
        return default
    try:
        parsed = float(str(value).strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return default
    return parsed if math.isfinite(parsed) else default


def _coerce_bool(value: object) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value == 1
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return False


class ApartmentRequest(BaseModel):
    """Fields a client may send when creating or replacing a record.

    Server-managed keys (``id``, ``created_at``, ``updated_at``) and unknown
    keys are ignored.
    """

    model_config = ConfigDict(extra="ignore")

    address: str
    visit_date: datetime | None = None
    notes: str = ""
    rating: int = 0
    price: float = 0.0
    floor: int = 1
    is_gated: bool = False
    has_garage: bool = False
    has_laundry: bool = False

    @field_validator("address", mode="before")
    @classmethod
    def _require_address(cls, value: object) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("address is required")
        return value.strip()

    @field_validator("visit_date", mode="before")
    @classmethod
    def _parse_visit_date(cls, value: object) -> datetime | None:
        return parse_visit_date(value)

    @field_validator("notes", mode="before")
    @classmethod
    def _default_notes(cls, value: object) -> str:
        if value is None:
            return ""
        return str(value)

    @field_validator("rating", mode="before")
    @classmethod
    def _lenient_rating(cls, value: object) -> int:
        return _coerce_int(value, 0)

    @field_validator("price", mode="before")
    @classmethod
    def _lenient_price(cls, value: object) -> float:
        return _coerce_float(value, 0.0)

    @field_validator("floor", mode="before")
    @classmethod
    def _lenient_floor(cls, value: object) -> int:
        return _coerce_int(value, 1)

    @field_validator("is_gated", "has_garage", "has_laundry", mode="before")
    @classmethod
    def _lenient_flags(cls, value: object) -> bool:
        return _coerce_bool(value)

    def to_upsert(self) -> ApartmentUpsert:
        return ApartmentUpsert(
            address=self.address,
            visit_date=self.visit_date,
            notes=self.notes,
            rating=self.rating,
            price=self.price,
            floor=self.floor,
            is_gated=self.is_gated,
            has_garage=self.has_garage,
            has_laundry=self.has_laundry,
        )


class ApartmentResponse(BaseModel):
    """Stored record as returned to clients."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    address: str
    visit_date: datetime | None = None
    notes: str = ""
    rating: int = 0
    price: float = 0.0
    floor: int = 1
    is_gated: bool = False
    has_garage: bool = False
    has_laundry: bool = False
    created_at: datetime
    updated_at: datetime

    @field_validator("notes", mode="before")
    @classmethod
    def _null_notes(cls, value: Any) -> str:
        return "" if value is None else value

    @field_validator("rating", "price", mode="before")
    @classmethod
    def _null_numbers(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator("floor", mode="before")
    @classmethod
    def _null_floor(cls, value: Any) -> Any:
        return 1 if value is None else value


class DeleteResponse(BaseModel):
    status: str = "success"


class HealthResponse(BaseModel):
    status: str
    time: int
