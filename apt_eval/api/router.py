"""REST routes for apartment evaluations."""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from apt_eval.db.session import get_db_session
from apt_eval.errors import StorageError
from apt_eval.schemas.apartment import (
    ApartmentRequest,
    ApartmentResponse,
    DeleteResponse,
)
from apt_eval.services.apartment_service import ApartmentService

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "Apartment not found"

router = APIRouter(prefix="/api/apartments", tags=["apartments"])


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _storage_failure(message: str, exc: StorageError) -> JSONResponse:
    logger.error("%s: %s", message, exc, exc_info=exc)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, message)


@router.post(
    "",
    response_model=ApartmentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_apartment(
    payload: ApartmentRequest,
    session: AsyncSession = Depends(get_db_session),
) -> ApartmentResponse | JSONResponse:
    """Create a new apartment evaluation."""

    try:
        apartment = await ApartmentService(session).create(payload.to_upsert())
    except StorageError as exc:
        return _storage_failure("Failed to create apartment", exc)

    return ApartmentResponse.model_validate(apartment)


@router.get("", response_model=list[ApartmentResponse])
async def list_apartments(
    session: AsyncSession = Depends(get_db_session),
) -> list[ApartmentResponse] | JSONResponse:
    """List every apartment, most recently created first."""

    try:
        apartments = await ApartmentService(session).list_all()
    except StorageError as exc:
        return _storage_failure("Failed to list apartments", exc)

    return [ApartmentResponse.model_validate(apt) for apt in apartments]


@router.get("/{id}", response_model=ApartmentResponse)
async def get_apartment(
    id: int,
    session: AsyncSession = Depends(get_db_session),
) -> ApartmentResponse | JSONResponse:
    try:
        outcome = await ApartmentService(session).get(id)
    except StorageError as exc:
        return _storage_failure("Failed to get apartment", exc)

    if not outcome.found:
        return error_response(status.HTTP_404_NOT_FOUND, NOT_FOUND_MESSAGE)

    return ApartmentResponse.model_validate(outcome.apartment)


@router.put("/{id}", response_model=ApartmentResponse)
async def update_apartment(
    id: int,
    payload: ApartmentRequest,
    session: AsyncSession = Depends(get_db_session),
) -> ApartmentResponse | JSONResponse:
    """Replace every mutable field of an apartment."""

    try:
        outcome = await ApartmentService(session).update(id, payload.to_upsert())
    except StorageError as exc:
        return _storage_failure("Failed to update apartment", exc)

    if not outcome.found:
        return error_response(status.HTTP_404_NOT_FOUND, NOT_FOUND_MESSAGE)

    return ApartmentResponse.model_validate(outcome.apartment)


@router.delete("/{id}", response_model=DeleteResponse)
async def delete_apartment(
    id: int,
    session: AsyncSession = Depends(get_db_session),
) -> DeleteResponse | JSONResponse:
    try:
        outcome = await ApartmentService(session).delete(id)
    except StorageError as exc:
        return _storage_failure("Failed to delete apartment", exc)

    if not outcome.found:
        return error_response(status.HTTP_404_NOT_FOUND, NOT_FOUND_MESSAGE)

    return DeleteResponse()
