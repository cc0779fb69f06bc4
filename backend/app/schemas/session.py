from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, field_validator


class ParsedBrowser(BaseModel):
    name: str | None = None
    version: str | None = None

    model_config = {"frozen": True, "extra": "allow"}


class ParsedOs(BaseModel):
    name: str | None = None
    version: str | None = None

    model_config = {"frozen": True, "extra": "allow"}


class ParsedDevice(BaseModel):
    model: str | None = None
    vendor: str | None = None
    type: str | None = None

    model_config = {"frozen": True, "extra": "allow"}


class ParsedUserAgent(BaseModel):
    browser: ParsedBrowser | None = None
    os: ParsedOs | None = None
    device: ParsedDevice | None = None

    model_config = {"frozen": True, "extra": "allow"}


class SubmissionLocation(BaseModel):
    city: str | None = None
    region: str | None = None
    country: str | None = None

    model_config = {"frozen": True, "extra": "allow"}


class SessionSubmission(BaseModel):
    """Last interaction submission: client signals already parsed upstream."""

    ip: str | None = None
    user_agent: str | None = Field(default=None, alias="userAgent")
    user_agent_parsed: ParsedUserAgent | None = Field(default=None, alias="userAgentParsed")
    location: SubmissionLocation | None = None

    model_config = {"frozen": True, "extra": "allow", "populate_by_name": True}


class SessionPayload(BaseModel):
    uid: str
    kind: str | None = None
    login_ts: float | None = Field(default=None, alias="loginTs")
    account_id: str | None = Field(default=None, alias="accountId")
    # clientId -> grant payload; key order is the order received
    authorizations: dict[str, Any] = Field(default_factory=dict)

    model_config = {"frozen": True, "extra": "allow", "populate_by_name": True}

    @field_validator("authorizations", mode="before")
    @classmethod
    def _null_authorizations(cls, value):
        return {} if value is None else value


class SessionRecord(BaseModel):
    """Immutable snapshot of a user session as returned by the Management API."""

    payload: SessionPayload
    last_submission: SessionSubmission | None = Field(default=None, alias="lastSubmission")
    client_id: str | None = Field(default=None, alias="clientId")
    account_id: str | None = Field(default=None, alias="accountId")
    expires_at: float | None = Field(default=None, alias="expiresAt")

    model_config = {"frozen": True, "extra": "allow", "populate_by_name": True}


class SessionDisplayInfo(BaseModel):
    ip: str | None = None
    location: str | None = None
    browser_name: str | None = None
    os_name: str | None = None
    device_model: str | None = None
    name: str | None = None

    model_config = {"frozen": True}


class ApplicationReference(BaseModel):
    id: str
    is_built_in: bool
    href: str | None = None

    model_config = {"frozen": True}


class TextValue(BaseModel):
    kind: Literal["text"] = "text"
    text: str


class UserValue(BaseModel):
    kind: Literal["user"] = "user"
    user_id: str
    href: str


class ApplicationsValue(BaseModel):
    kind: Literal["applications"] = "applications"
    applications: list[ApplicationReference]


FieldValue = Annotated[
    Union[TextValue, UserValue, ApplicationsValue],
    Field(discriminator="kind"),
]


class SessionDetailField(BaseModel):
    key: str
    label: str
    value: FieldValue

    model_config = {"frozen": True}


class PhraseTitle(BaseModel):
    kind: Literal["phrase"] = "phrase"
    key: str
    interpolation: dict[str, str] = Field(default_factory=dict)


class TextTitle(BaseModel):
    kind: Literal["text"] = "text"
    text: str


HeaderTitle = Annotated[Union[PhraseTitle, TextTitle], Field(discriminator="kind")]


class SessionDetailRead(BaseModel):
    session_id: str
    user_id: str
    title: HeaderTitle
    fields: list[SessionDetailField]
    details_link: str
    back_link: str
    can_revoke: bool
    raw_data: dict[str, Any]


class SessionSummaryRead(BaseModel):
    session_id: str
    title: HeaderTitle
    location: str
    signed_in_at: str
    href: str


class SessionListRead(BaseModel):
    user_id: str
    sessions: list[SessionSummaryRead]


class RevocationRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    session_id: str = Field(..., min_length=1)


class RevocationRead(BaseModel):
    revoked: bool
    redirect_to: str
