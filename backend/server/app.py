"""
Avatarcyan API Application

Wires configuration, the shared HTTP client, the memory store, the
resolver and the status monitor into one FastAPI app.

Run:
    uvicorn server.app:create_app --factory --port 3000
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from starlette.exceptions import HTTPException as StarletteHTTPException

from avatar_proxy import AvatarResolver
from avatar_proxy import router as avatar_router
from avatar_proxy.clients import DiscordClient, GitHubClient, ImageClient
from cache import MemoryStore
from status_monitor import (
    HistoryStore,
    MemoryHistoryStore,
    ProbeSet,
    StatusLogWriter,
    StatusService,
    SupabaseHistoryStore,
)
from status_monitor import router as status_router

from .config import Settings

logger = logging.getLogger(__name__)

API_NAME = "Avatarcyan API"
API_VERSION = "2.0.0"

ENDPOINTS = [
    {"url": "/api/version", "description": "Get API version info"},
    {"url": "/api/:userId", "description": "Get avatar JSON info (JSON)"},
    {"url": "/api/user/:userId/raw", "description": "Get raw Discord user data (JSON)"},
    {"url": "/api/pfp/:userId/image", "description": "Redirect to avatar (512px)"},
    {"url": "/api/pfp/:userId/smallimage", "description": "Redirect to avatar (128px)"},
    {"url": "/api/pfp/:userId/bigimage", "description": "Redirect to avatar (1024px)"},
    {"url": "/api/pfp/:userId/superbigimage", "description": "Redirect to avatar (4096px)"},
    {"url": "/api/pfp/:userId/:size", "description": "Redirect to avatar with custom size (16–4096)"},
    {"url": "/api/banner/:userId", "description": "Get banner URL JSON for a user (JSON)"},
    {"url": "/api/banner/:userId/image", "description": "Redirect to banner image"},
    {"url": "/api/github/:username", "description": "Get GitHub user JSON info"},
    {"url": "/api/github/:username/pfp", "description": "Redirect to GitHub avatar image"},
    {"url": "/api/status", "description": "Get overall API status and uptime"},
    {"url": "/api/status/services", "description": "Get per-service status and uptime"},
]

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Resource-Policy": "same-origin",
}


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def build_history_store(settings: Settings, http_client: httpx.AsyncClient) -> HistoryStore:
    if settings.supabase_enabled:
        logger.info("[App] Using Supabase status history")
        return SupabaseHistoryStore(
            settings.supabase_url,
            settings.supabase_service_key,
            http_client=http_client,
        )
    logger.warning("[App] SUPABASE_URL/SUPABASE_SERVICE_ROLE_KEY not set, status history kept in memory")
    return MemoryHistoryStore()


def create_app(
    settings: Optional[Settings] = None,
    *,
    http_client: Optional[httpx.AsyncClient] = None,
    history_store: Optional[HistoryStore] = None,
    cache: Optional[MemoryStore] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Defaults to Settings.from_env()
        http_client: Shared upstream client (tests pass a MockTransport client)
        history_store: Defaults to Supabase when configured, else memory
        cache: Defaults to a MemoryStore with settings.cache_ttl
    """
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)

    http_client = http_client or httpx.AsyncClient(follow_redirects=True)
    cache = cache or MemoryStore(default_ttl=settings.cache_ttl)
    history_store = history_store or build_history_store(settings, http_client)

    discord = DiscordClient(http_client, settings.discord_bot_token, api_base=settings.discord_api_base)
    github = GitHubClient(http_client, settings.github_token, api_base=settings.github_api_base)
    resolver = AvatarResolver(discord, github, ImageClient(http_client), cache)

    probes = ProbeSet(discord, github, http_client, cache, settings.public_base_url)
    writer = StatusLogWriter(history_store)
    status_service = StatusService(probes, history_store, writer)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"[App] {API_NAME} {API_VERSION} starting ({settings.environment})")
        yield
        await writer.drain()
        await history_store.aclose()
        await http_client.aclose()
        logger.info("[App] Shutdown complete")

    app = FastAPI(title=API_NAME, version=API_VERSION, lifespan=lifespan)

    app.state.settings = settings
    app.state.cache = cache
    app.state.resolver = resolver
    app.state.status_service = status_service
    app.state.log_writer = writer

    # Rate limiting
    app.state.limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit])
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            if name not in response.headers:
                response.headers[name] = value
        return response

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404 and exc.detail == "Not Found":
            return JSONResponse(status_code=404, content={"error": "Endpoint not found"})
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": "Invalid request"})

    # ============================================
    # Meta routes (before the /api/{user_id} catch-all)
    # ============================================

    @app.get("/api")
    async def api_index():
        return {"endpoints": ENDPOINTS}

    @app.get("/api/version")
    async def api_version():
        return {
            "version": API_VERSION,
            "name": API_NAME,
            "environment": settings.environment,
            "lastBuild": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        }

    app.include_router(status_router)
    app.include_router(avatar_router)

    return app
