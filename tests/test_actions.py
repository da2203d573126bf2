"""Unit tests for the action catalogue and request mapping."""

import pytest

from apiprobe.common.actions import ACTIONS, UnknownActionError, action_groups, get_action
from apiprobe.services.dispatcher.builder import (
    MissingParameterError,
    build_api_request,
    build_query_string,
    resolve_base_url,
)
from apiprobe.services.dispatcher.schemas import DispatchRequest


BASE = "https://api-m.sandbox.example.com"

EXPECTED = [
    ("create_payment", "POST", "/v1/payments/payment"),
    ("list_payments", "GET", "/v1/payments/payment"),
    ("show_payment", "GET", "/v1/payments/payment/PAY-1"),
    ("update_payment", "PATCH", "/v1/payments/payment/PAY-1"),
    ("execute_payment", "POST", "/v1/payments/payment/PAY-1/execute"),
    ("show_sale", "GET", "/v1/payments/sale/SALE-1"),
    ("refund_sale", "POST", "/v1/payments/sale/SALE-1/refund"),
    ("show_authorization", "GET", "/v1/payments/authorization/AUTH-1"),
    ("capture_authorization", "POST", "/v1/payments/authorization/AUTH-1/capture"),
    ("void_authorization", "POST", "/v1/payments/authorization/AUTH-1/void"),
    ("reauthorize", "POST", "/v1/payments/authorization/AUTH-1/reauthorize"),
    ("show_order", "GET", "/v1/payments/orders/O-1"),
    ("capture_order", "POST", "/v1/payments/orders/O-1/capture"),
    ("void_order", "POST", "/v1/payments/orders/O-1/do-void"),
    ("authorize_order", "POST", "/v1/payments/orders/O-1/authorize"),
    ("show_capture", "GET", "/v1/payments/capture/CAP-1"),
    ("refund_capture", "POST", "/v1/payments/capture/CAP-1/refund"),
    ("show_refund", "GET", "/v1/payments/refund/REF-1"),
]


def make_request(action: str, **fields) -> DispatchRequest:
    ids = {
        "payment_id": "PAY-1",
        "sale_id": "SALE-1",
        "authorization_id": "AUTH-1",
        "order_id": "O-1",
        "capture_id": "CAP-1",
        "refund_id": "REF-1",
    }
    ids.update(fields)
    return DispatchRequest(client_id="id", client_secret="secret", action=action, **ids)


def test_catalogue_has_eighteen_actions():
    """The catalogue holds exactly the eighteen v1 payment actions."""

    assert len(ACTIONS) == 18
    assert {key for key, _, _ in EXPECTED} == set(ACTIONS)


@pytest.mark.parametrize("action,method,path", EXPECTED)
def test_action_method_and_url(action, method, path):
    """Each action resolves to its documented method and URL."""

    call = build_api_request(get_action(action), BASE, make_request(action))
    assert call.method == method
    assert call.url == BASE + path


def test_unknown_action_raises():
    """Identifiers outside the catalogue are rejected."""

    with pytest.raises(UnknownActionError, match="Unknown action: frobnicate"):
        get_action("frobnicate")


def test_path_parameter_substituted_verbatim():
    """Resource ids land in the path unchanged."""

    req = make_request("show_sale", sale_id="4RR959492F879224U")
    call = build_api_request(get_action("show_sale"), BASE, req)
    assert call.url.endswith("/v1/payments/sale/4RR959492F879224U")


def test_missing_path_parameter_raises():
    """An action that needs a resource id refuses to build without one."""

    req = DispatchRequest(client_id="id", client_secret="secret", action="show_payment")
    with pytest.raises(MissingParameterError, match="payment_id"):
        build_api_request(get_action("show_payment"), BASE, req)


def test_list_payments_query_string_order_and_omission():
    """Only supplied list filters are encoded, in declared order."""

    req = make_request("list_payments", query_params={"count": "5", "start_time": "2024-01-01T00:00:00Z"})
    call = build_api_request(get_action("list_payments"), BASE, req)
    query = call.url.split("?", 1)[1]
    assert query == "count=5&start_time=2024-01-01T00%3A00%3A00Z"
    for omitted in ("start_id", "end_time", "sort_by", "sort_order"):
        assert omitted not in query
    assert call.body is None


def test_list_payments_without_params_has_no_query():
    """No filters means no query string at all."""

    call = build_api_request(get_action("list_payments"), BASE, make_request("list_payments"))
    assert call.url == BASE + "/v1/payments/payment"


def test_query_string_follows_declared_order():
    """Filter order comes from the field list, not the input dict."""

    qs = build_query_string({"sort_order": "DESC", "count": 3, "sort_by": "create_time", "start_id": ""})
    assert qs == "count=3&sort_by=create_time&sort_order=DESC"


@pytest.mark.parametrize("action", ["void_authorization", "void_order"])
def test_void_actions_always_send_empty_object(action):
    """Void calls send an empty object whatever body was given."""

    req = make_request(action, request_body={"note": "ignored"})
    assert build_api_request(get_action(action), BASE, req).body == "{}"


@pytest.mark.parametrize("action", ["refund_sale", "refund_capture"])
def test_refunds_default_to_empty_object(action):
    """Refunds send the supplied body or an empty object."""

    assert build_api_request(get_action(action), BASE, make_request(action)).body == "{}"
    req = make_request(action, request_body={"amount": {"total": "2.00", "currency": "USD"}})
    assert build_api_request(get_action(action), BASE, req).body == '{"amount":{"total":"2.00","currency":"USD"}}'


def test_execute_payment_defaults_to_payer_id():
    """Execute without a body sends the payer id."""

    req = make_request("execute_payment", payer_id="PAYER123")
    assert build_api_request(get_action("execute_payment"), BASE, req).body == '{"payer_id":"PAYER123"}'


def test_execute_payment_prefers_supplied_body():
    """A supplied execute body wins over the payer id."""

    req = make_request("execute_payment", payer_id="PAYER123", request_body={"payer_id": "OTHER"})
    assert build_api_request(get_action("execute_payment"), BASE, req).body == '{"payer_id":"OTHER"}'


def test_update_payment_sends_patch_document():
    """Patch sends the patch document, not the request body."""

    patch = [{"op": "replace", "path": "/transactions/0/amount", "value": {"total": "20.00"}}]
    req = make_request("update_payment", patch_body=patch, request_body={"ignored": True})
    call = build_api_request(get_action("update_payment"), BASE, req)
    assert call.method == "PATCH"
    assert call.body == '[{"op":"replace","path":"/transactions/0/amount","value":{"total":"20.00"}}]'


def test_get_actions_drop_supplied_body():
    """Lookups silently drop any body they are given."""

    req = make_request("show_payment", request_body={"unexpected": 1})
    assert build_api_request(get_action("show_payment"), BASE, req).body is None


def test_passthrough_without_body_sends_nothing():
    """Pass-through actions send nothing when no body is supplied."""

    assert build_api_request(get_action("create_payment"), BASE, make_request("create_payment")).body is None


def test_resolve_base_url():
    """Custom base URL wins, otherwise the environment picks the origin."""

    assert resolve_base_url("live") == "https://api-m.example.com"
    assert resolve_base_url("sandbox") == "https://api-m.sandbox.example.com"
    assert resolve_base_url("anything-else") == "https://api-m.sandbox.example.com"
    assert resolve_base_url("live", "http://localhost:9000///") == "http://localhost:9000"
    assert resolve_base_url("live", "") == "https://api-m.example.com"


def test_action_groups_keep_form_order():
    """Grouped catalogue keeps form order and hands out copies of default bodies."""

    groups = action_groups()
    assert [g["group"] for g in groups] == ["Payments", "Sales", "Authorizations", "Orders", "Captures", "Refunds"]
    assert groups[0]["items"][0]["key"] == "create_payment"
    groups[0]["items"][0]["defaultBody"]["intent"] = "mutated"
    assert ACTIONS["create_payment"].default_body["intent"] == "sale"


def test_query_string_skips_falsy_and_renders_booleans():
    """Falsy filters are omitted and booleans render in lowercase."""

    qs = build_query_string({"count": 0, "start_id": False, "start_index": True, "sort_by": None, "sort_order": "asc"})
    assert qs == "start_index=true&sort_order=asc"


def test_execute_payment_without_payer_id_sends_empty_object():
    """Execute with neither body nor payer id sends an empty object."""

    req = make_request("execute_payment")
    assert build_api_request(get_action("execute_payment"), BASE, req).body == "{}"
