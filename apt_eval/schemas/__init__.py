"""Pydantic request/response schemas."""

from apt_eval.schemas.apartment import (
    ApartmentRequest,
    ApartmentResponse,
    DeleteResponse,
    HealthResponse,
    parse_visit_date,
)

__all__ = [
    "ApartmentRequest",
    "ApartmentResponse",
    "DeleteResponse",
    "HealthResponse",
    "parse_visit_date",
]
