from pathlib import Path

import pytest
from fastapi.exceptions import RequestValidationError
from httpx import ASGITransport, AsyncClient

from apt_eval.config import Settings
from apt_eval.db.session import dispose_engine, init_db
from apt_eval.errors import StorageError
from apt_eval.main import create_app, validation_error_from_request


@pytest.mark.anyio
async def test_health_reports_up_with_unix_time(client: AsyncClient) -> None:
    response = await client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "up"
    assert isinstance(body["time"], int)
    assert body["time"] > 1_600_000_000


@pytest.mark.anyio
async def test_root_serves_index_page(client: AsyncClient) -> None:
    response = await client.get("/")

    assert response.status_code == 200
    assert "Test Page" in response.text
    assert response.headers["content-type"].startswith("text/html")


@pytest.mark.anyio
async def test_static_files_are_served(settings: Settings, client: AsyncClient) -> None:
    (settings.static_dir / "test.txt").write_text("static content")

    response = await client.get("/static/test.txt")

    assert response.status_code == 200
    assert response.text == "static content"


@pytest.mark.anyio
async def test_unknown_static_file_is_not_found(client: AsyncClient) -> None:
    response = await client.get("/static/missing.js")

    assert response.status_code == 404


@pytest.mark.anyio
async def test_missing_static_dir_still_serves_api(tmp_path: Path) -> None:
    settings = Settings(
        _env_file=None,
        data_dir=tmp_path / "data",
        static_dir=tmp_path / "does-not-exist",
        tls_enabled=False,
    )
    await dispose_engine()
    await init_db(settings)
    try:
        app = create_app(settings)
        async with AsyncClient(
            transport=ASGITransport(app=app), base_url="http://testserver"
        ) as http_client:
            index = await http_client.get("/")
            listed = await http_client.get("/api/apartments")
            health = await http_client.get("/health")
    finally:
        await dispose_engine()

    assert index.status_code == 404
    assert index.json() == {"error": "Not found"}
    assert listed.status_code == 200
    assert health.status_code == 200


@pytest.mark.parametrize(
    ("errors", "expected"),
    [
        (
            [{"type": "int_parsing", "loc": ("path", "id"), "msg": "bad"}],
            "Invalid apartment ID",
        ),
        (
            [{"type": "json_invalid", "loc": ("body", 12), "msg": "JSON decode error"}],
            "Invalid JSON body",
        ),
        (
            [{"type": "model_attributes_type", "loc": ("body",), "msg": "bad"}],
            "Request body must be a JSON object",
        ),
        (
            [{"type": "missing", "loc": ("body", "address"), "msg": "Field required"}],
            "address is required",
        ),
        (
            [
                {
                    "type": "value_error",
                    "loc": ("body", "visit_date"),
                    "msg": "Value error, unrecognized date",
                }
            ],
            "Invalid visit_date: unrecognized date",
        ),
    ],
)
def test_validation_errors_are_reduced_to_one_message(
    errors: list[dict[str, object]], expected: str
) -> None:
    assert validation_error_from_request(RequestValidationError(errors)).message == expected


def test_storage_errors_are_answered_by_routes_only(settings: Settings) -> None:
    app = create_app(settings)

    assert StorageError not in app.exception_handlers
    assert RequestValidationError in app.exception_handlers
