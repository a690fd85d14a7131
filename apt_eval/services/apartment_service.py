"""Business logic for apartment evaluation records."""

import logging
from dataclasses import dataclass
from enum import StrEnum

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from apt_eval.db.repositories import (
    ApartmentUpsert,
    create_apartment,
    delete_apartment,
    fetch_apartment,
    fetch_apartments,
    update_apartment,
)
from apt_eval.errors import StorageError
from apt_eval.models.apartment import Apartment

logger = logging.getLogger(__name__)


class OutcomeStatus(StrEnum):
    OK = "ok"
    NOT_FOUND = "not_found"


@dataclass(slots=True, frozen=True)
class ApartmentOutcome:
    """Result of a lookup or mutation addressed by id.

    Infrastructure faults are raised as ``StorageError`` and never appear here.
    """

    status: OutcomeStatus
    apartment: Apartment | None = None

    @classmethod
    def ok(cls, apartment: Apartment | None = None) -> "ApartmentOutcome":
        return cls(status=OutcomeStatus.OK, apartment=apartment)

    @classmethod
    def not_found(cls) -> "ApartmentOutcome":
        return cls(status=OutcomeStatus.NOT_FOUND)

    @property
    def found(self) -> bool:
        return self.status is OutcomeStatus.OK


class ApartmentService:
    """Service layer used by the apartment API routes."""

    _session: AsyncSession

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, row: ApartmentUpsert) -> Apartment:
        """Persist a new record and return it with generated fields."""

        try:
            apartment = await create_apartment(self._session, row)
        except SQLAlchemyError as exc:
            await self._rollback()
            raise StorageError("failed to create apartment") from exc

        logger.info("Created apartment id=%s", apartment.id)
        return apartment

    async def get(self, apartment_id: int) -> ApartmentOutcome:
        try:
            apartment = await fetch_apartment(self._session, apartment_id)
        except SQLAlchemyError as exc:
            await self._rollback()
            raise StorageError(f"failed to get apartment {apartment_id}") from exc

        if apartment is None:
            return ApartmentOutcome.not_found()
        return ApartmentOutcome.ok(apartment)

    async def list_all(self) -> list[Apartment]:
        try:
            return await fetch_apartments(self._session)
        except SQLAlchemyError as exc:
            await self._rollback()
            raise StorageError("failed to list apartments") from exc

    async def update(self, apartment_id: int, row: ApartmentUpsert) -> ApartmentOutcome:
        """Replace all mutable fields of an existing record."""

        try:
            apartment = await update_apartment(self._session, apartment_id, row)
        except SQLAlchemyError as exc:
            await self._rollback()
            raise StorageError(f"failed to update apartment {apartment_id}") from exc

        if apartment is None:
            return ApartmentOutcome.not_found()

        logger.info("Updated apartment id=%s", apartment_id)
        return ApartmentOutcome.ok(apartment)

    async def delete(self, apartment_id: int) -> ApartmentOutcome:
        try:
            deleted = await delete_apartment(self._session, apartment_id)
        except SQLAlchemyError as exc:
            await self._rollback()
            raise StorageError(f"failed to delete apartment {apartment_id}") from exc

        if not deleted:
            return ApartmentOutcome.not_found()

        logger.info("Deleted apartment id=%s", apartment_id)
        return ApartmentOutcome.ok()

    async def _rollback(self) -> None:
        try:
            await self._session.rollback()
        except SQLAlchemyError:
            logger.exception("Rollback failed")
