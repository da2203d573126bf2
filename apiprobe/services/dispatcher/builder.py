"""Maps a dispatch request onto one concrete upstream HTTP call.

Nothing in here touches the network: the service resolves the action, builds
the call with these helpers and only then acquires a token.
"""

import json
from typing import Any
from urllib.parse import urlencode

from pydantic import BaseModel

from apiprobe.common.actions import LIST_QUERY_FIELDS, ActionSpec
from apiprobe.common.config import settings
from apiprobe.services.dispatcher.schemas import DispatchRequest


TOKEN_PATH = "/v1/oauth2/token"
TOKEN_GRANT_BODY = "grant_type=client_credentials"
BASIC_PLACEHOLDER = "Basic <base64(clientId:clientSecret)>"
BEARER_PLACEHOLDER = "Bearer <access_token>"


class MissingParameterError(ValueError):
    """Raised when an action's URL template needs a resource id that was not supplied."""


class PreparedCall(BaseModel):
    """Method, URL and serialized body for the main API call."""

    method: str
    url: str
    body: str | None = None


def resolve_base_url(environment: str | None, custom_base_url: str | None = None) -> str:
    """Pick the upstream origin; a custom base URL always wins."""

    if custom_base_url:
        return custom_base_url.rstrip("/")
    if environment == "live":
        return settings.live_base_url
    return settings.sandbox_base_url


def to_json(value: Any) -> str:
    """Compact JSON matching what browsers send for the same object."""

    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_query_string(query_params: dict[str, Any] | None) -> str:
    """Encode the present list filters in declared field order.

    Falsy values (None, "", 0, False) count as absent and are left out.
    """

    query_params = query_params or {}
    pairs = []
    for name in LIST_QUERY_FIELDS:
        value = query_params.get(name)
        if not value:
            continue
        pairs.append((name, _query_value(value)))
    return urlencode(pairs)


def _select_body(spec: ActionSpec, req: DispatchRequest) -> Any:
    # Returning None means no body is sent.
    if spec.body == "empty":
        return {}
    if spec.body == "optional":
        return {} if req.request_body is None else req.request_body
    if spec.body == "payer":
        if req.request_body is not None:
            return req.request_body
        return {} if req.payer_id is None else {"payer_id": req.payer_id}
    if spec.body == "patch":
        return req.patch_body
    if spec.body == "passthrough":
        return req.request_body
    # "none" and "query": anything supplied is dropped.
    return None


def build_api_request(spec: ActionSpec, base_url: str, req: DispatchRequest) -> PreparedCall:
    """Resolve URL and body for one action."""

    path = spec.path
    if spec.path_param:
        value = getattr(req, spec.path_param)
        if not value:
            raise MissingParameterError(f"{spec.path_param} is required for {spec.key}")
        path = path.format(**{spec.path_param: value})

    url = f"{base_url}{path}"
    if spec.body == "query":
        qs = build_query_string(req.query_params)
        if qs:
            url = f"{url}?{qs}"

    body = _select_body(spec, req)
    serialized = to_json(body) if body is not None else None
    return PreparedCall(method=spec.method, url=url, body=serialized)


def api_headers(access_token: str) -> dict[str, str]:
    """Headers for the main call, in the order they appear in traces."""

    return {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {access_token}",
    }


def mask_headers(headers: dict[str, str]) -> dict[str, str]:
    """Copy of headers with the Authorization credential replaced by a placeholder."""

    masked = dict(headers)
    value = masked.get("Authorization")
    if value is not None:
        masked["Authorization"] = BASIC_PLACEHOLDER if value.startswith("Basic") else BEARER_PLACEHOLDER
    return masked


def _quote(text: str) -> str:
    return "'" + text.replace("'", "'\\''") + "'"


def build_curl(method: str, url: str, headers: dict[str, str], body: str | None = None) -> str:
    """Reproducible command line for a call, credentials masked."""

    lines = [f"curl -X {method} {_quote(url)}"]
    for name, value in mask_headers(headers).items():
        lines.append(f"-H {_quote(f'{name}: {value}')}")
    if body and method != "GET":
        lines.append(f"-d {_quote(body)}")
    return " \\\n  ".join(lines)
