import asyncio
import contextlib
import logging
import sys

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.router import api_router
from core.config import settings
from database.session import init_db
from services.errors import AnalysisError, ProviderError, RateLimited
from services.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(level: str) -> None:
    # basicConfig leaves existing handlers (uvicorn, pytest) alone; the level always applies.
    logging.basicConfig(stream=sys.stdout, format=LOG_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S%z")
    logging.getLogger().setLevel(level.upper())


def build_rate_limiter() -> RateLimiter:
    return RateLimiter(minute_limit=settings.rate_limit_per_minute, daily_limit=settings.rate_limit_per_day)


async def _cleanup_rate_limits(app: FastAPI) -> None:
    while True:
        await asyncio.sleep(settings.rate_limit_cleanup_interval_seconds)
        removed = app.state.rate_limiter.cleanup_expired()
        if removed:
            logger.info("Rate limiter cleanup removed %d expired client(s)", removed)


def create_app() -> FastAPI:
    app = FastAPI(title=settings.app_name)
    app.state.rate_limiter = build_rate_limiter()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_origin],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router, prefix=settings.api_prefix)

    @app.exception_handler(AnalysisError)
    async def _analysis_error(request: Request, exc: AnalysisError):
        headers = {}
        if isinstance(exc, RateLimited):
            headers["Retry-After"] = str(exc.retry_after_seconds)
        elif isinstance(exc, ProviderError) and exc.is_rate_limit:
            headers["Retry-After"] = str(exc.retry_after_seconds or 60)
        if exc.status_code >= 500:
            logger.error("%s on %s: %s", type(exc).__name__, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_body(), headers=headers)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.on_event("startup")
    async def _startup():
        configure_logging(settings.log_level)
        init_db()
        app.state.cleanup_task = asyncio.create_task(_cleanup_rate_limits(app))

    @app.on_event("shutdown")
    async def _shutdown():
        task = getattr(app.state, "cleanup_task", None)
        if task:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

    return app


app = create_app()
