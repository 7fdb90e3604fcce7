from __future__ import annotations

from contextlib import asynccontextmanager
from time import perf_counter
from typing import AsyncIterator, Awaitable, Callable, Optional
from uuid import uuid4

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from affinity_placement.config import get_settings
from affinity_placement.errors import PlacementConfigConflictError, PlacementConfigError
from affinity_placement.logger import configure_logging, get_logger
from affinity_placement.routes import placement_config, system
from affinity_placement.schemas.placement_config import PlacementConfigErrorOut
from affinity_placement.services.placement_config import get_store, load_config

settings = get_settings()
configure_logging(settings.log_level, settings.log_file)
logger = get_logger("api")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    logger.info("app.startup", "Starting app", env=settings.app_env, version=settings.app_version)
    if settings.placement_config_file:
        get_store().set(load_config(settings.placement_config_file))
    else:
        logger.info("placement_config.defaults", "No PLACEMENT_CONFIG_FILE set; using defaults")
    yield
    logger.info("app.shutdown", "Shutting down app")


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    lifespan=lifespan,
)


@app.exception_handler(PlacementConfigError)
async def placement_config_error_handler(
    request: Request,
    exc: PlacementConfigError,
) -> JSONResponse:
    collections = exc.collections if isinstance(exc, PlacementConfigConflictError) else []
    body = PlacementConfigErrorOut(detail=exc.message, code=int(exc.code), collections=collections)
    return JSONResponse(status_code=int(exc.code), content=body.model_dump())


@app.middleware("http")
async def request_logging(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    request_id = request.headers.get("x-request-id") or str(uuid4())
    client: Optional[str] = None
    if request.client:
        client = request.client.host

    start = perf_counter()
    with logger.context(request_id=request_id):
        logger.info(
            "request.start",
            "Started",
            method=request.method,
            path=request.url.path,
            client=client,
        )
        try:
            response = await call_next(request)
        except Exception as exc:
            duration_ms = (perf_counter() - start) * 1000
            logger.exception(
                "request.error",
                "Failed",
                method=request.method,
                path=request.url.path,
                duration_ms=round(duration_ms, 1),
                error_type=type(exc).__name__,
            )
            raise

        duration_ms = (perf_counter() - start) * 1000
        logger.info(
            "request.complete",
            "Completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=round(duration_ms, 1),
        )

    response.headers["X-Request-ID"] = request_id
    return response


app.include_router(system.router)
app.include_router(placement_config.router)
