"""Service layer."""

from apt_eval.services.apartment_service import (
    ApartmentOutcome,
    ApartmentService,
    OutcomeStatus,
)

__all__ = ["ApartmentOutcome", "ApartmentService", "OutcomeStatus"]
