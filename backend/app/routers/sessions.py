"""User session routes: detail view, list view, revoke."""

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import ValidationError

from app.core.cache import SessionCache, session_key, session_list_key
from app.core.management_api import ManagementApiClient
from app.core.navigation import HistoryNavigator
from app.dependencies import get_management_client, get_revocation_registry, get_session_cache
from app.derived_views.session_detail import (
    session_detail_view,
    session_details_link,
    session_list_view,
    user_link,
)
from app.schemas.session import (
    RevocationRead,
    RevocationRequest,
    SessionDetailRead,
    SessionListRead,
    SessionRecord,
)
from app.services.revocation_service import RevocationRegistry, RevocationState, revoke_session

router = APIRouter(prefix="/users/{user_id}/sessions", tags=["sessions"])


async def _read(cache: SessionCache, key: str):
    entry = await cache.get(key)
    if entry.error is not None:
        raise entry.error
    return entry.data


def _parse_record(data) -> SessionRecord:
    try:
        return SessionRecord.model_validate(data)
    except ValidationError as exc:
        raise HTTPException(status_code=502, detail="Malformed session record") from exc


@router.get("", response_model=SessionListRead)
async def list_sessions(
    user_id: str,
    request: Request,
    cache: SessionCache = Depends(get_session_cache),
):
    request.state.user_id = user_id
    data = await _read(cache, session_list_key(user_id))
    items = data.get("sessions", []) if isinstance(data, dict) else data
    records = [_parse_record(item) for item in items or []]
    return SessionListRead(user_id=user_id, sessions=session_list_view(records, user_id))


@router.get("/{session_id}", response_model=SessionDetailRead)
async def get_session(
    user_id: str,
    session_id: str,
    request: Request,
    cache: SessionCache = Depends(get_session_cache),
):
    request.state.user_id = user_id
    data = await _read(cache, session_key(user_id, session_id))
    return session_detail_view(_parse_record(data), user_id, session_id)


@router.delete("/{session_id}", response_model=RevocationRead)
async def revoke(
    user_id: str,
    session_id: str,
    request: Request,
    client: ManagementApiClient = Depends(get_management_client),
    cache: SessionCache = Depends(get_session_cache),
    registry: RevocationRegistry = Depends(get_revocation_registry),
):
    request.state.user_id = user_id
    target = RevocationRequest(user_id=user_id, session_id=session_id)
    navigator = HistoryNavigator(
        [user_link(target.user_id), session_details_link(target.user_id, target.session_id)]
    )
    coordinator = await revoke_session(
        registry,
        user_id=target.user_id,
        session_id=target.session_id,
        revoker=client,
        cache=cache,
        navigator=navigator,
    )
    return RevocationRead(
        revoked=coordinator.state == RevocationState.succeeded,
        redirect_to=navigator.location,
    )
