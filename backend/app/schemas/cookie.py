"""Guard for the console UI preference cookie."""

import json

from pydantic import BaseModel, Field, ValidationError


class UiCookie(BaseModel):
    app_id: str | None = Field(default=None, alias="appId")
    organization_id: str | None = Field(default=None, alias="organizationId")
    ui_locales: str | None = None

    model_config = {"populate_by_name": True, "extra": "ignore"}


def parse_ui_cookie(raw: str | None) -> UiCookie:
    """Parse the JSON cookie value. Anything that fails the guard yields an empty cookie."""
    if not raw:
        return UiCookie()
    try:
        return UiCookie.model_validate(json.loads(raw))
    except (ValueError, ValidationError):
        return UiCookie()
