"""Authorized applications of a session, as references for display."""

from app.schemas.session import ApplicationReference, SessionRecord
from app.services.timestamp_service import PLACEHOLDER

# Platform-reserved application ids; these have no console detail page.
BUILT_IN_APPLICATION_IDS = frozenset({"admin-console", "demo-app"})


def is_built_in_application_id(application_id: str) -> bool:
    return application_id in BUILT_IN_APPLICATION_IDS


def application_reference(application_id: str) -> ApplicationReference:
    built_in = is_built_in_application_id(application_id)
    return ApplicationReference(
        id=application_id,
        is_built_in=built_in,
        href=None if built_in else f"/applications/{application_id}",
    )


def resolve_authorized_applications(
    record: SessionRecord | None,
) -> list[ApplicationReference] | str:
    """References for every client id in the session's authorizations.

    Order follows the mapping as received. Returns "-" rather than an empty
    list when there is no record or nothing is authorized.
    """
    application_ids = list(record.payload.authorizations) if record else []
    if not application_ids:
        return PLACEHOLDER
    return [application_reference(app_id) for app_id in application_ids]
