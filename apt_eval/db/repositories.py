"""Repository helpers for apartment evaluation persistence."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import UTC, datetime

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from apt_eval.models.apartment import Apartment


@dataclass(slots=True)
class ApartmentUpsert:
    """Payload used to insert or fully replace an apartment record."""

    address: str
    visit_date: datetime | None = None
    notes: str = ""
    rating: int = 0
    price: float = 0.0
    floor: int = 1
    is_gated: bool = False
    has_garage: bool = False
    has_laundry: bool = False


def _utcnow() -> datetime:
    return datetime.now(UTC)


async def create_apartment(session: AsyncSession, row: ApartmentUpsert) -> Apartment:
    """Insert a record; created_at and updated_at share the same timestamp."""

    now = _utcnow()
    apartment = Apartment(**asdict(row), created_at=now, updated_at=now)
    session.add(apartment)
    await session.commit()
    await session.refresh(apartment)
    return apartment


async def fetch_apartment(session: AsyncSession, apartment_id: int) -> Apartment | None:
    """Fetch a single record by primary key."""

    stmt = select(Apartment).where(Apartment.id == apartment_id)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def fetch_apartments(session: AsyncSession) -> list[Apartment]:
    """Fetch every record, most recently created first."""

    stmt = select(Apartment).order_by(
        Apartment.created_at.desc(), Apartment.id.desc()
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def update_apartment(
    session: AsyncSession, apartment_id: int, row: ApartmentUpsert
) -> Apartment | None:
    """Replace every mutable field of an existing record.

    Returns ``None`` when no record has ``apartment_id``; nothing is inserted.
    """

    apartment = await fetch_apartment(session, apartment_id)
    if apartment is None:
        return None

    for field_name, value in asdict(row).items():
        setattr(apartment, field_name, value)

    now = _utcnow()
    # Keep updated_at monotonic even if the wall clock steps backwards.
    if apartment.created_at is not None and now < apartment.created_at:
        now = apartment.created_at
    apartment.updated_at = now

    await session.commit()
    await session.refresh(apartment)
    return apartment


async def delete_apartment(session: AsyncSession, apartment_id: int) -> bool:
    """Delete a record permanently. Returns False when nothing matched."""

    stmt = delete(Apartment).where(Apartment.id == apartment_id)
    result = await session.execute(stmt)
    await session.commit()
    return result.rowcount > 0
