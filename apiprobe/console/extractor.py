"""Pull reusable resource ids out of upstream response bodies."""

from typing import Any


PAYMENT_ID_PREFIXES = ("PAY-", "PAYID-")
RELATED_RESOURCE_KINDS = ("sale", "authorization", "order", "capture")


def extract_resource_ids(body: Any) -> dict[str, str]:
    """Best-effort scan of a payment-shaped body.

    Returns a mapping such as `{"payment_id": ..., "sale_id": ...}` holding
    only the ids that were found. Later related resources overwrite earlier
    ones. Bodies of any other shape yield an empty mapping.
    """

    found: dict[str, str] = {}
    if not isinstance(body, dict):
        return found

    payment_id = body.get("id")
    if isinstance(payment_id, str) and payment_id.startswith(PAYMENT_ID_PREFIXES):
        found["payment_id"] = payment_id

    transactions = body.get("transactions")
    if not isinstance(transactions, list):
        return found
    for txn in transactions:
        related = txn.get("related_resources") if isinstance(txn, dict) else None
        if not isinstance(related, list):
            continue
        for resource in related:
            if not isinstance(resource, dict):
                continue
            for kind in RELATED_RESOURCE_KINDS:
                item = resource.get(kind)
                if isinstance(item, dict) and isinstance(item.get("id"), str) and item["id"]:
                    found[f"{kind}_id"] = item["id"]
    return found
