"""Session display info: device, browser, OS, location and IP for a session.

User-agent and geolocation parsing happen upstream; this module only picks the
parsed signals out of the session record. Missing values stay None here and
are replaced with the placeholder at presentation time.
"""

from app.schemas.session import (
    HeaderTitle,
    PhraseTitle,
    SessionDisplayInfo,
    SessionRecord,
    TextTitle,
)
from app.services.timestamp_service import PLACEHOLDER

BROWSER_ON_OS_PHRASE = "user_details.sessions.browser_on_os"


def display_or_placeholder(value: str | None) -> str:
    return value if value is not None else PLACEHOLDER


def _format_location(record: SessionRecord) -> str | None:
    submission = record.last_submission
    if submission is None or submission.location is None:
        return None
    loc = submission.location
    parts = [p for p in (loc.city, loc.region, loc.country) if p]
    return ", ".join(parts) if parts else None


def get_session_display_info(record: SessionRecord | None) -> SessionDisplayInfo | None:
    """Extract display signals from a session record. None when there is no record."""
    if record is None:
        return None

    submission = record.last_submission
    parsed = submission.user_agent_parsed if submission else None
    browser = parsed.browser if parsed else None
    os_ = parsed.os if parsed else None
    device = parsed.device if parsed else None

    return SessionDisplayInfo(
        ip=submission.ip if submission else None,
        location=_format_location(record),
        browser_name=browser.name if browser else None,
        os_name=os_.name if os_ else None,
        device_model=device.model if device else None,
        name=record.payload.kind,
    )


def get_header_title(info: SessionDisplayInfo | None) -> HeaderTitle:
    """Header label: "browser on OS" when both are known, else the first known signal."""
    if info is not None and info.browser_name and info.os_name:
        return PhraseTitle(
            key=BROWSER_ON_OS_PHRASE,
            interpolation={"browser": info.browser_name, "os": info.os_name},
        )

    if info is None:
        return TextTitle(text=PLACEHOLDER)

    for candidate in (info.browser_name, info.os_name, info.name):
        if candidate is not None:
            return TextTitle(text=candidate)
    return TextTitle(text=PLACEHOLDER)
