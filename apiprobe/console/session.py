"""Terminal-side state for driving the dispatcher one action at a time.

A session remembers credentials and every resource id seen so far, so a
`create_payment` followed by `execute_payment` and `refund_sale` needs no
copy-pasting of ids between calls.
"""

import json
from typing import Any

import httpx

from apiprobe.common.actions import get_action
from apiprobe.common.config import settings
from apiprobe.common.logging import logger
from apiprobe.console.extractor import extract_resource_ids
from apiprobe.console.history import CallHistory


ID_FIELDS = {
    "payment_id": "paymentId",
    "sale_id": "saleId",
    "authorization_id": "authorizationId",
    "order_id": "orderId",
    "capture_id": "captureId",
    "refund_id": "refundId",
    "payer_id": "payerId",
}
VIEWS = ("response", "request", "curl", "token")


class ConsoleSession:
    """Credentials, known ids and call history for one console run."""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        environment: str = "sandbox",
        custom_base_url: str | None = None,
        dispatcher_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        history: CallHistory | None = None,
    ) -> None:
        self.client_id = client_id
        self.client_secret = client_secret
        self.environment = environment
        self.custom_base_url = custom_base_url
        self.dispatcher_url = (dispatcher_url or settings.dispatcher_url).rstrip("/")
        self.transport = transport
        self.history = history or CallHistory()
        self.ids: dict[str, str] = {}

    def build_payload(
        self,
        action: str,
        body: Any = None,
        query_params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Inbound dispatcher request for `action` using the ids known so far."""

        payload: dict[str, Any] = {
            "clientId": self.client_id,
            "clientSecret": self.client_secret,
            "environment": self.environment,
            "action": action,
        }
        if self.custom_base_url:
            payload["customBaseUrl"] = self.custom_base_url
        for name, field in ID_FIELDS.items():
            if self.ids.get(name):
                payload[field] = self.ids[name]
        if action == "update_payment":
            payload["patchBody"] = body
        else:
            payload["requestBody"] = body
        if action == "list_payments" and query_params:
            payload["queryParams"] = {k: v for k, v in query_params.items() if v not in (None, "")}
        return payload

    async def run(
        self,
        action: str,
        body: Any = None,
        query_params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Send one action, remember any ids in the response, record history."""

        get_action(action)
        payload = self.build_payload(action, body, query_params)
        try:
            async with httpx.AsyncClient(timeout=settings.http_timeout_seconds, transport=self.transport) as client:
                resp = await client.post(f"{self.dispatcher_url}/api/dispatch", json=payload)
            result = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("dispatcher call failed action=%s error=%s", action, exc)
            return {"success": False, "error": str(exc) or exc.__class__.__name__}

        response = result.get("httpResponse") or {}
        found = extract_resource_ids(response.get("body"))
        if found:
            logger.info("picked up ids %s", found)
            self.ids.update(found)
        self.history.record(action, result)
        return result


def render_view(result: dict[str, Any], view: str = "response") -> str:
    """Text for one of the response/request/curl/token views of a result."""

    if view not in VIEWS:
        raise ValueError(f"unknown view {view!r}, expected one of {', '.join(VIEWS)}")
    if view == "curl":
        return (result.get("httpRequest") or {}).get("curl") or ""
    if view == "request":
        data = result.get("httpRequest")
    elif view == "token":
        data = result.get("tokenInfo") or result.get("tokenResponse")
    else:
        data = result.get("httpResponse")
    if data is None:
        data = {"success": result.get("success"), "error": result.get("error")}
    return json.dumps(data, indent=2)
