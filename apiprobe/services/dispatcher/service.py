"""Stateless dispatcher: one token fetch, one API call, one trace.

Every dispatch authenticates from scratch and nothing is cached or retried;
failures are reported back as data so the console can show them.
"""

import base64
import json
import time
from typing import Any

import httpx
from pydantic import ValidationError

from apiprobe.common.actions import UnknownActionError, get_action
from apiprobe.common.config import settings
from apiprobe.common.logging import action_ctx, logger
from apiprobe.common.metrics import (
    dispatch_failures_total,
    dispatch_requests_total,
    upstream_latency_seconds,
)
from apiprobe.common.tracing import tracer
from apiprobe.services.dispatcher.builder import (
    BASIC_PLACEHOLDER,
    TOKEN_GRANT_BODY,
    TOKEN_PATH,
    MissingParameterError,
    api_headers,
    build_api_request,
    build_curl,
    mask_headers,
    resolve_base_url,
)
from apiprobe.services.dispatcher.schemas import (
    ApiResult,
    DispatchRequest,
    HttpRequestTrace,
    HttpResponseTrace,
    TokenInfo,
)


def parse_body(response: httpx.Response) -> Any:
    """JSON for JSON content types, raw text for everything else."""

    content_type = response.headers.get("content-type", "")
    if "json" in content_type:
        return response.json()
    return response.text


def response_trace(response: httpx.Response, body: Any, elapsed_ms: int) -> HttpResponseTrace:
    return HttpResponseTrace(
        status=response.status_code,
        status_text=response.reason_phrase,
        headers=dict(response.headers),
        body=body,
        time=f"{elapsed_ms}ms",
    )


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


def _body_view(body: str | None) -> Any:
    # The trace shows the outbound body as JSON, not as the serialized string.
    return json.loads(body) if body else None


def _validation_message(exc: ValidationError) -> str:
    # Input values are left out: they may hold the client secret.
    problems = [
        f"{'.'.join(str(part) for part in err['loc']) or 'body'}: {err['msg']}" for err in exc.errors()
    ]
    return "Invalid request: " + "; ".join(problems)


class DispatcherService:
    """Runs dispatches against the upstream payments API."""

    def __init__(
        self,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float | None = None,
        service_name: str | None = None,
    ) -> None:
        self.transport = transport
        self.timeout = settings.http_timeout_seconds if timeout is None else timeout
        self.service_name = service_name or settings.service_name

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    def _fail(self, action: str, kind: str) -> None:
        dispatch_failures_total.labels(service=self.service_name, action=action, kind=kind).inc()

    async def acquire_token(
        self, client: httpx.AsyncClient, base_url: str, req: DispatchRequest
    ) -> tuple[httpx.Response, Any, int]:
        """Client-credentials grant; returns (response, parsed body, elapsed ms)."""

        credentials = f"{req.client_id}:{req.client_secret}".encode("utf-8")
        headers = {
            "Content-Type": "application/x-www-form-urlencoded",
            "Authorization": "Basic " + base64.b64encode(credentials).decode("ascii"),
        }
        start = time.perf_counter()
        with tracer.start_as_current_span("upstream.oauth2_token"):
            response = await client.post(f"{base_url}{TOKEN_PATH}", headers=headers, content=TOKEN_GRANT_BODY)
            body = parse_body(response)
        elapsed_ms = _elapsed_ms(start)
        upstream_latency_seconds.labels(service=self.service_name, stage="token").observe(elapsed_ms / 1000)
        return response, body, elapsed_ms

    def _auth_failure(self, base_url: str, response: httpx.Response, body: Any, elapsed_ms: int) -> ApiResult:
        url = f"{base_url}{TOKEN_PATH}"
        headers = {
            "Content-Type": "application/x-www-form-urlencoded",
            "Authorization": BASIC_PLACEHOLDER,
        }
        return ApiResult(
            success=False,
            error="Authentication failed",
            token_response=body,
            http_request=HttpRequestTrace(
                method="POST",
                url=url,
                headers=headers,
                body=TOKEN_GRANT_BODY,
                curl=build_curl("POST", url, headers, TOKEN_GRANT_BODY),
            ),
            http_response=response_trace(response, body, elapsed_ms),
        )

    async def dispatch(self, req: DispatchRequest) -> ApiResult:
        """Run one action end to end.

        Raises `UnknownActionError` / `MissingParameterError` before any network
        traffic; transport and parse errors propagate to `handle`.
        """

        spec = get_action(req.action)
        base_url = resolve_base_url(req.environment, req.custom_base_url)
        call = build_api_request(spec, base_url, req)
        dispatch_requests_total.labels(service=self.service_name, action=spec.key).inc()
        logger.info("dispatch action=%s method=%s url=%s", spec.key, call.method, call.url)

        async with self._client() as client:
            token_res, token_data, token_ms = await self.acquire_token(client, base_url, req)
            if not token_res.is_success:
                logger.warning(
                    "token request rejected status=%s elapsed_ms=%s", token_res.status_code, token_ms
                )
                self._fail(spec.key, "auth")
                return self._auth_failure(base_url, token_res, token_data, token_ms)
            if not isinstance(token_data, dict) or not token_data.get("access_token"):
                raise ValueError("Token response did not include an access_token")

            # Built before the API call so a completed upstream call is always reported.
            token_info = TokenInfo(
                scope=token_data.get("scope"),
                token_type=token_data.get("token_type"),
                app_id=token_data.get("app_id"),
                expires_in=token_data.get("expires_in"),
                nonce=token_data.get("nonce"),
                auth_time=f"{token_ms}ms",
            )
            headers = api_headers(token_data["access_token"])
            send_body = call.body if call.body and call.method != "GET" else None
            start = time.perf_counter()
            with tracer.start_as_current_span("upstream.api_call") as span:
                span.set_attribute("apiprobe.action", spec.key)
                response = await client.request(call.method, call.url, headers=headers, content=send_body)
                body = parse_body(response)
            api_ms = _elapsed_ms(start)
        upstream_latency_seconds.labels(service=self.service_name, stage="api").observe(api_ms / 1000)

        if response.is_success:
            logger.info("upstream status=%s elapsed_ms=%s", response.status_code, api_ms)
        else:
            logger.warning("upstream status=%s elapsed_ms=%s", response.status_code, api_ms)
            self._fail(spec.key, "upstream")

        return ApiResult(
            success=response.is_success,
            http_request=HttpRequestTrace(
                method=call.method,
                url=call.url,
                headers=mask_headers(headers),
                body=_body_view(call.body),
                curl=build_curl(call.method, call.url, headers, send_body),
            ),
            http_response=response_trace(response, body, api_ms),
            token_info=token_info,
        )

    async def handle(self, payload: Any) -> tuple[int, ApiResult]:
        """Error boundary around `dispatch`; always yields a status code and a result."""

        action = payload.get("action") if isinstance(payload, dict) else None
        action_ctx.set(action if isinstance(action, str) else "")
        try:
            req = DispatchRequest.model_validate(payload)
        except ValidationError as exc:
            message = _validation_message(exc)
            logger.warning("malformed dispatch request: %s", message)
            self._fail("unknown", "invalid_input")
            return 400, ApiResult(success=False, error=message)

        try:
            return 200, await self.dispatch(req)
        except UnknownActionError as exc:
            logger.warning("rejected unknown action=%r", exc.action)
            self._fail("unknown", "unknown_action")
            return 400, ApiResult(success=False, error=str(exc))
        except MissingParameterError as exc:
            logger.warning("missing parameter: %s", exc)
            self._fail(req.action, "invalid_input")
            return 400, ApiResult(success=False, error=str(exc))
        except Exception as exc:
            logger.exception("dispatch failed action=%s", req.action)
            self._fail(req.action, "error")
            return 500, ApiResult(success=False, error=str(exc) or exc.__class__.__name__)
