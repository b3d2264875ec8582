"""FastAPI entrypoint."""

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from allmind.config import get_settings, validate_settings_for_env
from allmind.logging import configure_logging, log_context
from allmind.repo_cache import get_repo_cache
from allmind.routes.api import router as api_router
from allmind.routes.health import router as health_router

logger = logging.getLogger(__name__)

STATIC_DIR = Path("public")


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    validate_settings_for_env(settings)
    configure_logging(settings.log_level)
    logger.info(
        "AllMind starting (strap root %s, registry %s)",
        settings.strap_root_path,
        settings.registry_path,
    )
    cache = get_repo_cache()
    refresh_task = asyncio.create_task(cache.run())
    yield
    await cache.shutdown()
    await refresh_task


limiter = Limiter(key_func=get_remote_address)

app = FastAPI(title="AllMind", version="0.1.0", lifespan=lifespan)
app.state.limiter = limiter


@app.exception_handler(RateLimitExceeded)
async def _rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    return JSONResponse(
        status_code=429,
        content={"error": "rate limit exceeded", "detail": str(exc.detail)},
    )


@app.exception_handler(404)
async def spa_fallback(request: Request, exc: Exception) -> FileResponse | JSONResponse:
    detail = getattr(exc, "detail", None) or "Not Found"
    if request.url.path.startswith("/api/"):
        return JSONResponse({"detail": detail}, status_code=404)
    index_path = STATIC_DIR / "index.html"
    if index_path.exists():
        return FileResponse(index_path)
    return JSONResponse({"detail": detail}, status_code=404)


@app.middleware("http")
async def log_requests(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    with log_context(method=request.method, path=request.url.path):
        response = await call_next(request)
        logger.debug("%s %s -> %d", request.method, request.url.path, response.status_code)
        return response


settings = get_settings()
cors_origins = [item.strip() for item in settings.web_cors_origins.split(",") if item.strip()]
if cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
app.include_router(health_router)
app.include_router(api_router)

if STATIC_DIR.exists():
    app.mount("/", StaticFiles(directory=str(STATIC_DIR), html=True), name="web")
