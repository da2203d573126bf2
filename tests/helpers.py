"""Scripted upstream payments API behind httpx.MockTransport, plus shared credentials."""

import json

import httpx


CLIENT_ID = "client-abc"
CLIENT_SECRET = "s3cr3t-value"
ACCESS_TOKEN = "A21AA-live-token-value"
TOKEN_PAYLOAD = {
    "scope": "https://uri.example.com/services/payments",
    "access_token": ACCESS_TOKEN,
    "token_type": "Bearer",
    "app_id": "APP-80W284485P519543T",
    "expires_in": 32400,
    "nonce": "2024-01-01T00:00:00Z-nonce",
}


class FakeUpstream:
    """Records every request and answers token and API calls from scripted responses."""

    def __init__(self, token_response: httpx.Response | None = None, api_response: httpx.Response | None = None):
        self.calls: list[httpx.Request] = []
        self.token_response = token_response or httpx.Response(200, json=TOKEN_PAYLOAD)
        self.api_response = api_response or httpx.Response(200, json={"id": "PAY-1AB23456CD789012EF34GHIJ"})
        self.raise_on_api: Exception | None = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        if request.url.path == "/v1/oauth2/token":
            return self._fresh(self.token_response)
        if self.raise_on_api is not None:
            raise self.raise_on_api
        return self._fresh(self.api_response)

    @staticmethod
    def _fresh(template: httpx.Response) -> httpx.Response:
        # A new Response per call so one scripted upstream can serve many dispatches.
        return httpx.Response(template.status_code, headers=template.headers, content=template.content)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def api_calls(self) -> list[httpx.Request]:
        return [call for call in self.calls if call.url.path != "/v1/oauth2/token"]

    def last_api_json(self):
        return json.loads(self.api_calls[-1].content)
