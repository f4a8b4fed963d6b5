"""FastAPI application for the movie-match API."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from movie_match.api.routes.events import router as events_router
from movie_match.api.routes.health import router as health_router
from movie_match.api.routes.movies import router as movies_router
from movie_match.api.routes.rooms import router as rooms_router
from movie_match.config.settings import get_settings
from movie_match.context import build_context
from movie_match.errors import (
    MovieMatchError,
    MovieNotFoundError,
    NotRoomMemberError,
    RoomCodeAllocationError,
    RoomFullError,
    RoomNotFoundError,
)
from movie_match.logging_config import configure_logging

logger = structlog.get_logger()

_ERROR_STATUS: dict[type[MovieMatchError], int] = {
    RoomNotFoundError: 404,
    MovieNotFoundError: 404,
    NotRoomMemberError: 403,
    RoomFullError: 409,
    RoomCodeAllocationError: 503,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    # Tests install their own context before startup
    if getattr(app.state, "context", None) is not None:
        yield
        return

    settings = get_settings()
    configure_logging(json_output=settings.log_json, log_level=settings.log_level)
    ctx = build_context(settings)
    app.state.context = ctx
    logger.info("api_started")
    try:
        yield
    finally:
        await ctx.aclose()
        app.state.context = None


async def domain_error_handler(request: Request, exc: MovieMatchError) -> JSONResponse:
    status = next(
        (code for cls, code in _ERROR_STATUS.items() if isinstance(exc, cls)),
        400,
    )
    logger.info(
        "request_rejected",
        path=request.url.path,
        error=type(exc).__name__,
        status=status,
    )
    return JSONResponse(status_code=status, content={"detail": str(exc)})


app = FastAPI(title="Movie Match API", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_exception_handler(MovieMatchError, domain_error_handler)

app.include_router(health_router)
app.include_router(rooms_router)
app.include_router(movies_router)
app.include_router(events_router)
