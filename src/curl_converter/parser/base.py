"""Unified data models for the conversion engine.

The curl parser produces a ``CurlAst``; the normalizer and the document
adapter both produce a ``RequestIR``, which every generator consumes.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class UnsupportedFlag(BaseModel):
    """A flag the parser did not recognise, with the value it swallowed."""

    model_config = ConfigDict(frozen=True)

    flag: str
    value: str | None = None


class HeaderEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str
    value: str


class CurlAst(BaseModel):
    """Raw, flag-by-flag view of a single curl invocation."""

    model_config = ConfigDict(frozen=True)

    url: str = ""
    method: str | None = None
    headers: list[HeaderEntry] = []

    # Data families, kept apart because the normalizer ranks them
    data: list[str] = []
    data_raw: list[str] = []
    data_binary: list[str] = []
    data_urlencode: list[str] = []
    form: list[str] = []
    form_string: list[str] = []

    user: str | None = None

    get: bool = False
    head: bool = False
    insecure: bool = False
    location: bool = False
    compressed: bool = False
    http2: bool = False
    silent: bool = False
    verbose: bool = False

    output: str | None = None
    proxy: str | None = None
    max_time: float | None = None  # seconds
    max_redirs: int | None = None
    cacert: str | None = None
    cert: str | None = None
    key: str | None = None
    cookie: str | None = None
    cookie_jar: str | None = None
    user_agent: str | None = None
    referer: str | None = None

    unsupported_flags: list[UnsupportedFlag] = []


BodyType = Literal["json", "urlencoded", "raw", "binary"]


class BodyIR(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: BodyType
    content: Any = None


class FormFile(BaseModel):
    """A multipart file attachment: field=@file;filename=...;type=..."""

    model_config = ConfigDict(frozen=True)

    file: str
    filename: str | None = None
    content_type: str | None = None


FormField = str | FormFile


class AuthIR(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["basic", "bearer"]
    username: str | None = None
    password: str | None = None
    token: str | None = None


class SslIR(BaseModel):
    model_config = ConfigDict(frozen=True)

    ca: str | None = None
    cert: str | None = None
    key: str | None = None


class IRMetadata(BaseModel):
    """Where an IR came from and what was lost getting there."""

    model_config = ConfigDict(frozen=True)

    source: Literal["curl", "yaml"]
    warnings: list[str] = []
    unsupported_flags: list[UnsupportedFlag] = []


class RequestIR(BaseModel):
    """Canonical, direction-agnostic request shared by both converters."""

    model_config = ConfigDict(frozen=True)

    name: str | None = None
    method: str
    url: str
    headers: dict[str, str] = {}
    params: dict[str, str] | None = None
    body: BodyIR | None = None
    form_data: dict[str, FormField] | None = None
    auth: AuthIR | None = None
    insecure: bool | None = None
    follow_redirects: bool | None = None
    max_redirects: int | None = None
    timeout: int | None = None  # milliseconds
    proxy: str | None = None
    output: str | None = None
    http2: bool | None = None
    ssl: SslIR | None = None
    metadata: IRMetadata

    @model_validator(mode="after")
    def _body_or_form(self) -> "RequestIR":
        if self.body is not None and self.form_data is not None:
            raise ValueError("body and form_data are mutually exclusive")
        return self


class AuthConfig(BaseModel):
    type: Literal["basic", "bearer"]
    username: str | None = None
    password: str | None = None
    token: str | None = None


class SslConfig(BaseModel):
    ca: str | None = None
    cert: str | None = None
    key: str | None = None
    verify: bool | None = None


class RequestConfig(BaseModel):
    """A single request as written in a YAML request file.

    Field names follow the file format (``formData``, ``followRedirects``,
    ``maxRedirects``); snake_case names are accepted too.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: str | None = None
    url: str
    method: str | None = None
    headers: dict[str, Any] | None = None
    params: dict[str, Any] | None = None
    body: Any = None
    form_data: dict[str, Any] | None = Field(default=None, alias="formData")
    auth: AuthConfig | None = None
    timeout: int | float | None = None
    follow_redirects: bool | None = Field(default=None, alias="followRedirects")
    max_redirects: int | None = Field(default=None, alias="maxRedirects")
    proxy: str | None = None
    insecure: bool | None = None
    http2: bool | None = None
    output: str | None = None
    ssl: SslConfig | None = None

    # No curl equivalent
    expect: Any = None
    store: Any = None
    when: Any = None
    retry: Any = None
    snapshot: Any = None
    diff: Any = None
