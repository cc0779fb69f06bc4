"""FastAPI dependencies: shared clients created in the app lifespan."""

from fastapi import Request

from app.core.cache import SessionCache
from app.core.management_api import ManagementApiClient
from app.services.revocation_service import RevocationRegistry


def get_management_client(request: Request) -> ManagementApiClient:
    return request.app.state.management_client


def get_session_cache(request: Request) -> SessionCache:
    return request.app.state.session_cache


def get_revocation_registry(request: Request) -> RevocationRegistry:
    return request.app.state.revocation_registry
