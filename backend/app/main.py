import logging
import warnings
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.core.cache import SessionCache
from app.core.errors import register_error_handlers
from app.core.management_api import ManagementApiClient
from app.core.middleware import AccessLogMiddleware, RequestIDMiddleware, UiPreferencesMiddleware
from app.routers import sessions
from app.services.revocation_service import RevocationRegistry

# Validate Management API credentials in production
if settings.is_production and not settings.management_api_token:
    raise RuntimeError(
        "MANAGEMENT_API_TOKEN must be set in production. "
        "Create a machine-to-machine app with Management API access and use its token."
    )

if not settings.is_production and not settings.management_api_token:
    warnings.warn("MANAGEMENT_API_TOKEN is not set. Management API calls will be unauthenticated.", stacklevel=1)

logger = logging.getLogger("session_console")


@asynccontextmanager
async def lifespan(application: FastAPI):
    """Create the Management API client and the shared fetch cache; close them on shutdown."""
    client = ManagementApiClient(
        settings.management_api_url,
        settings.management_api_token,
        timeout_seconds=settings.management_api_timeout_seconds,
    )
    application.state.management_client = client
    application.state.session_cache = SessionCache(
        client.fetch,
        maxsize=settings.cache_maxsize,
        ttl=settings.cache_ttl_seconds,
    )
    application.state.revocation_registry = RevocationRegistry()
    logger.info("Management API client ready base_url=%s", settings.management_api_url)
    yield
    await client.aclose()


app = FastAPI(
    title=settings.app_name,
    version="0.1.0",
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    lifespan=lifespan,
)

# Middleware — order matters (last added = outermost = first to execute)
# CORS outermost so all responses get CORS headers
app.add_middleware(UiPreferencesMiddleware)
app.add_middleware(RequestIDMiddleware)
app.add_middleware(AccessLogMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["x-request-id"],
)

# Error handlers
register_error_handlers(app)

# Routers
app.include_router(sessions.router)


@app.get("/health")
async def health_check():
    return {"status": "ok", "app": settings.app_name, "version": "0.1.0"}
