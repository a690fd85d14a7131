"""Database session and repository utilities."""

from apt_eval.db.session import (
    dispose_engine,
    get_db_session,
    get_engine,
    get_sessionmaker,
    init_db,
    session_context,
)
from apt_eval.db.repositories import (
    ApartmentUpsert,
    create_apartment,
    delete_apartment,
    fetch_apartment,
    fetch_apartments,
    update_apartment,
)

__all__ = [
    "dispose_engine",
    "get_db_session",
    "get_engine",
    "get_sessionmaker",
    "init_db",
    "session_context",
    "ApartmentUpsert",
    "create_apartment",
    "delete_apartment",
    "fetch_apartment",
    "fetch_apartments",
    "update_apartment",
]
