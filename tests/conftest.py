"""Shared fixtures: isolated settings, a fresh SQLite file and an API client."""

import sys
from collections.abc import AsyncIterator
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from apt_eval.config import Settings
from apt_eval.db.session import dispose_engine, init_db, session_context
from apt_eval.main import create_app

INDEX_HTML = "<html><body>Test Page</body></html>"


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    static_dir = tmp_path / "static"
    static_dir.mkdir()
    (static_dir / "index.html").write_text(INDEX_HTML)

    return Settings(
        _env_file=None,
        data_dir=tmp_path / "data",
        static_dir=static_dir,
        tls_enabled=False,
    )


@pytest.fixture
async def db(settings: Settings) -> AsyncIterator[None]:
    """Point the cached engine at a per-test database file."""

    await dispose_engine()
    await init_db(settings)
    yield
    await dispose_engine()


@pytest.fixture
async def session(db: None) -> AsyncIterator[AsyncSession]:
    _ = db
    async with session_context() as db_session:
        yield db_session


@pytest.fixture
def app(settings: Settings) -> FastAPI:
    return create_app(settings)


@pytest.fixture
async def client(db: None, app: FastAPI) -> AsyncIterator[AsyncClient]:
    _ = db
    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport,
        base_url="http://testserver",
    ) as http_client:
        yield http_client
