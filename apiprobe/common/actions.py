"""Static catalogue of the v1 payments actions the dispatcher can run.

Every action maps to exactly one HTTP call: a method, a URL template with at
most one resource id, and a body policy describing where the outbound body
comes from.
"""

import copy
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict


BodyPolicy = Literal["none", "passthrough", "optional", "payer", "empty", "patch", "query"]

# Declared order is the order parameters appear in the query string.
LIST_QUERY_FIELDS = (
    "count",
    "start_id",
    "start_index",
    "start_time",
    "end_time",
    "sort_by",
    "sort_order",
)


class ActionSpec(BaseModel):
    """One row of the action table."""

    model_config = ConfigDict(frozen=True)

    key: str
    label: str
    group: str
    method: Literal["GET", "POST", "PATCH"]
    path: str
    path_param: str | None = None
    body: BodyPolicy = "none"
    default_body: Any = None


class UnknownActionError(ValueError):
    """Raised when an action identifier is not in the catalogue."""

    def __init__(self, action: object) -> None:
        super().__init__(f"Unknown action: {action}")
        self.action = action


_AMOUNT_10 = {"currency": "USD", "total": "10.00"}

_ACTION_LIST = [
    ActionSpec(
        key="create_payment",
        label="Create Payment",
        group="Payments",
        method="POST",
        path="/v1/payments/payment",
        body="passthrough",
        default_body={
            "intent": "sale",
            "payer": {"payment_method": "paypal"},
            "transactions": [
                {
                    "amount": {
                        "total": "10.00",
                        "currency": "USD",
                        "details": {"subtotal": "10.00", "tax": "0.00", "shipping": "0.00"},
                    },
                    "description": "Test payment via v1 API tester",
                    "item_list": {
                        "items": [
                            {
                                "name": "Test Item",
                                "description": "A test item",
                                "quantity": "1",
                                "price": "10.00",
                                "currency": "USD",
                            }
                        ]
                    },
                }
            ],
            "redirect_urls": {
                "return_url": "https://example.com/return",
                "cancel_url": "https://example.com/cancel",
            },
        },
    ),
    ActionSpec(
        key="list_payments",
        label="List Payments",
        group="Payments",
        method="GET",
        path="/v1/payments/payment",
        body="query",
    ),
    ActionSpec(
        key="show_payment",
        label="Show Payment Details",
        group="Payments",
        method="GET",
        path="/v1/payments/payment/{payment_id}",
        path_param="payment_id",
    ),
    ActionSpec(
        key="update_payment",
        label="Patch Payment",
        group="Payments",
        method="PATCH",
        path="/v1/payments/payment/{payment_id}",
        path_param="payment_id",
        body="patch",
        default_body=[
            {
                "op": "replace",
                "path": "/transactions/0/amount",
                "value": {
                    "total": "20.00",
                    "currency": "USD",
                    "details": {"subtotal": "20.00", "tax": "0.00", "shipping": "0.00"},
                },
            }
        ],
    ),
    ActionSpec(
        key="execute_payment",
        label="Execute Payment",
        group="Payments",
        method="POST",
        path="/v1/payments/payment/{payment_id}/execute",
        path_param="payment_id",
        body="payer",
        default_body={"payer_id": ""},
    ),
    ActionSpec(
        key="show_sale",
        label="Show Sale Details",
        group="Sales",
        method="GET",
        path="/v1/payments/sale/{sale_id}",
        path_param="sale_id",
    ),
    ActionSpec(
        key="refund_sale",
        label="Refund Sale",
        group="Sales",
        method="POST",
        path="/v1/payments/sale/{sale_id}/refund",
        path_param="sale_id",
        body="optional",
        default_body={},
    ),
    ActionSpec(
        key="show_authorization",
        label="Show Authorization",
        group="Authorizations",
        method="GET",
        path="/v1/payments/authorization/{authorization_id}",
        path_param="authorization_id",
    ),
    ActionSpec(
        key="capture_authorization",
        label="Capture Authorization",
        group="Authorizations",
        method="POST",
        path="/v1/payments/authorization/{authorization_id}/capture",
        path_param="authorization_id",
        body="passthrough",
        default_body={"amount": _AMOUNT_10, "is_final_capture": True},
    ),
    ActionSpec(
        key="void_authorization",
        label="Void Authorization",
        group="Authorizations",
        method="POST",
        path="/v1/payments/authorization/{authorization_id}/void",
        path_param="authorization_id",
        body="empty",
    ),
    ActionSpec(
        key="reauthorize",
        label="Re-authorize",
        group="Authorizations",
        method="POST",
        path="/v1/payments/authorization/{authorization_id}/reauthorize",
        path_param="authorization_id",
        body="passthrough",
        default_body={"amount": {"total": "10.00", "currency": "USD"}},
    ),
    ActionSpec(
        key="show_order",
        label="Show Order Details",
        group="Orders",
        method="GET",
        path="/v1/payments/orders/{order_id}",
        path_param="order_id",
    ),
    ActionSpec(
        key="capture_order",
        label="Capture Order",
        group="Orders",
        method="POST",
        path="/v1/payments/orders/{order_id}/capture",
        path_param="order_id",
        body="passthrough",
        default_body={"amount": _AMOUNT_10, "is_final_capture": True},
    ),
    ActionSpec(
        key="void_order",
        label="Void Order",
        group="Orders",
        method="POST",
        path="/v1/payments/orders/{order_id}/do-void",
        path_param="order_id",
        body="empty",
    ),
    ActionSpec(
        key="authorize_order",
        label="Authorize Order",
        group="Orders",
        method="POST",
        path="/v1/payments/orders/{order_id}/authorize",
        path_param="order_id",
        body="passthrough",
        default_body={"amount": _AMOUNT_10},
    ),
    ActionSpec(
        key="show_capture",
        label="Show Capture Details",
        group="Captures",
        method="GET",
        path="/v1/payments/capture/{capture_id}",
        path_param="capture_id",
    ),
    ActionSpec(
        key="refund_capture",
        label="Refund Capture",
        group="Captures",
        method="POST",
        path="/v1/payments/capture/{capture_id}/refund",
        path_param="capture_id",
        body="optional",
        default_body={},
    ),
    ActionSpec(
        key="show_refund",
        label="Show Refund Details",
        group="Refunds",
        method="GET",
        path="/v1/payments/refund/{refund_id}",
        path_param="refund_id",
    ),
]

ACTIONS: dict[str, ActionSpec] = {spec.key: spec for spec in _ACTION_LIST}


def get_action(action: object) -> ActionSpec:
    """Look up an action, raising when the identifier is not catalogued."""

    if not isinstance(action, str) or action not in ACTIONS:
        raise UnknownActionError(action)
    return ACTIONS[action]


def action_groups() -> list[dict[str, Any]]:
    """Catalogue grouped the way the console presents it, in declaration order."""

    groups: dict[str, list[dict[str, Any]]] = {}
    for spec in _ACTION_LIST:
        groups.setdefault(spec.group, []).append(
            {
                "key": spec.key,
                "label": spec.label,
                "method": spec.method,
                "defaultBody": copy.deepcopy(spec.default_body),
            }
        )
    return [{"group": name, "items": items} for name, items in groups.items()]
