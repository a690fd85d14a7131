"""FastAPI application factory (`uvicorn --factory apt_eval.main:create_app`)."""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from apt_eval.api.router import error_response, router as apartments_router
from apt_eval.config import Settings, get_settings
from apt_eval.db.session import dispose_engine, init_db
from apt_eval.errors import ValidationError
from apt_eval.schemas.apartment import HealthResponse

logger = logging.getLogger(__name__)

INVALID_ID_MESSAGE = "Invalid apartment ID"


@asynccontextmanager
async def lifespan(application: FastAPI):
    """Ensure the schema exists and release pooled connections on exit."""

    await init_db(application.state.settings)
    yield
    await dispose_engine()


def validation_error_from_request(exc: RequestValidationError) -> ValidationError:
    """Reduce FastAPI's error list to the first offending input."""

    errors = exc.errors()
    if not errors:
        return ValidationError("Invalid request")

    first = errors[0]
    loc = tuple(first.get("loc", ()))
    error_type = first.get("type", "")

    if loc[:1] == ("path",):
        return ValidationError(INVALID_ID_MESSAGE, field="id")

    if error_type == "json_invalid":
        return ValidationError("Invalid JSON body")

    if len(loc) < 2:
        return ValidationError("Request body must be a JSON object")

    field = str(loc[-1])
    if field == "address":
        return ValidationError("address is required", field=field)

    message = str(first.get("msg", "invalid value")).removeprefix("Value error, ")
    return ValidationError(f"Invalid {field}: {message}", field=field)


async def _request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return await _validation_handler(request, validation_error_from_request(exc))


async def _validation_handler(request: Request, exc: ValidationError) -> JSONResponse:
    logger.warning("Rejected %s %s: %s", request.method, request.url.path, exc.message)
    return error_response(status.HTTP_400_BAD_REQUEST, exc.message)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the API application with static assets and the landing page."""

    settings = settings or get_settings()
    application = FastAPI(title=settings.app_name, lifespan=lifespan)
    application.state.settings = settings

    application.add_exception_handler(
        RequestValidationError, _request_validation_handler
    )
    application.add_exception_handler(ValidationError, _validation_handler)

    application.include_router(apartments_router)

    @application.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        """Basic health endpoint."""

        return HealthResponse(status="up", time=int(time.time()))

    static_dir = settings.static_dir
    index_file = static_dir / "index.html"

    if static_dir.is_dir():
        application.mount(
            "/static", StaticFiles(directory=static_dir), name="static"
        )
    else:
        logger.warning("Static directory %s not found; serving API only", static_dir)

    @application.get("/", include_in_schema=False, response_model=None)
    async def index() -> FileResponse | JSONResponse:
        if not index_file.is_file():
            return error_response(status.HTTP_404_NOT_FOUND, "Not found")
        return FileResponse(index_file)

    return application

