"""Derived view builders for the user session pages.

All views:
- Are pure: no I/O, no mutation of the record
- Replace missing signals with the "-" placeholder at presentation time
- Keep field order stable; the order is the display order
"""

from app.schemas.session import (
    ApplicationsValue,
    SessionDetailField,
    SessionDetailRead,
    SessionRecord,
    SessionSummaryRead,
    TextValue,
    UserValue,
)
from app.services.application_service import resolve_authorized_applications
from app.services.session_info_service import (
    display_or_placeholder,
    get_header_title,
    get_session_display_info,
)
from app.services.timestamp_service import format_timestamp

LABEL_PREFIX = "user_details.sessions."


def session_details_link(user_id: str, session_id: str) -> str:
    return f"/users/{user_id}/sessions/{session_id}"


def user_link(user_id: str) -> str:
    return f"/users/{user_id}"


def _text(value: str | None) -> TextValue:
    return TextValue(text=display_or_placeholder(value))


def session_detail_fields(
    record: SessionRecord | None,
    user_id: str | None,
) -> list[SessionDetailField]:
    """Labeled info fields for the session header card. Empty while there is no record."""
    if record is None:
        return []

    info = get_session_display_info(record)
    applications = resolve_authorized_applications(record)

    rows = [
        ("session-id", "session_id_column", TextValue(text=record.payload.uid)),
        (
            "user",
            "user",
            UserValue(user_id=user_id, href=user_link(user_id)) if user_id else _text(None),
        ),
        (
            "applications",
            "applications",
            _text(applications)
            if isinstance(applications, str)
            else ApplicationsValue(applications=applications),
        ),
        ("signed-in-at", "signed_in_at", TextValue(text=format_timestamp(record.payload.login_ts))),
        ("ip", "ip", _text(info.ip)),
        ("location", "location_column", _text(info.location)),
        ("browser-name", "browser_name", _text(info.browser_name)),
        ("os-name", "os_name", _text(info.os_name)),
        ("device-model", "device_model", _text(info.device_model)),
    ]
    return [
        SessionDetailField(key=key, label=LABEL_PREFIX + label, value=value)
        for key, label, value in rows
    ]


def session_detail_view(
    record: SessionRecord,
    user_id: str,
    session_id: str,
) -> SessionDetailRead:
    """Full detail page: header title, info fields, links and the raw record."""
    info = get_session_display_info(record)
    return SessionDetailRead(
        session_id=session_id,
        user_id=user_id,
        title=get_header_title(info),
        fields=session_detail_fields(record, user_id),
        details_link=session_details_link(user_id, session_id),
        back_link=user_link(user_id),
        can_revoke=bool(user_id and session_id),
        raw_data=record.model_dump(mode="json", by_alias=True, exclude_none=True),
    )


def session_list_view(records: list[SessionRecord], user_id: str) -> list[SessionSummaryRead]:
    """One summary row per session, in the order the list was fetched."""
    rows = []
    for record in records:
        info = get_session_display_info(record)
        rows.append(
            SessionSummaryRead(
                session_id=record.payload.uid,
                title=get_header_title(info),
                location=display_or_placeholder(info.location),
                signed_in_at=format_timestamp(record.payload.login_ts),
                href=session_details_link(user_id, record.payload.uid),
            )
        )
    return rows
