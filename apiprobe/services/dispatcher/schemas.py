"""Request/response schemas for the dispatcher endpoint."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model exchanging camelCase JSON with the console."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DispatchRequest(CamelModel):
    """Credentials, action and per-action parameters for one dispatch."""

    client_id: str = Field(min_length=1)
    client_secret: str = Field(min_length=1)
    environment: str = "sandbox"
    action: str
    payment_id: str | None = None
    sale_id: str | None = None
    authorization_id: str | None = None
    order_id: str | None = None
    capture_id: str | None = None
    refund_id: str | None = None
    payer_id: str | None = None
    request_body: Any = None
    query_params: dict[str, Any] | None = None
    patch_body: Any = None
    custom_base_url: str | None = None


class HttpRequestTrace(CamelModel):
    method: str
    url: str
    headers: dict[str, str]
    body: Any = None
    curl: str | None = None


class HttpResponseTrace(CamelModel):
    status: int
    status_text: str
    headers: dict[str, str]
    body: Any = None
    time: str


class TokenInfo(BaseModel):
    """Token metadata safe to show; the access token itself is never included."""

    model_config = ConfigDict(populate_by_name=True)

    # Passed through as the token endpoint returned them.
    scope: Any = None
    token_type: Any = None
    app_id: Any = None
    expires_in: Any = None
    nonce: Any = None
    auth_time: str = Field(alias="authTime")


class ApiResult(CamelModel):
    """Envelope returned for every dispatch, successful or not."""

    success: bool
    error: str | None = None
    http_request: HttpRequestTrace | None = None
    http_response: HttpResponseTrace | None = None
    token_info: TokenInfo | None = None
    token_response: Any = None

    def to_payload(self) -> dict[str, Any]:
        """JSON-ready dict with camelCase keys and unset fields dropped."""

        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
