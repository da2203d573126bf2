"""Run one payments API action through the dispatcher and print a trace view.

Credentials default to the PROBE_CLIENT_ID / PROBE_CLIENT_SECRET environment
variables so they stay out of shell history.
"""

import argparse
import asyncio
import json
import os
from pathlib import Path

from apiprobe.common.actions import ACTIONS, action_groups
from apiprobe.console.session import VIEWS, ConsoleSession, render_view


def list_actions() -> None:
    """Print the catalogue grouped as in the console form."""

    for group in action_groups():
        print(group["group"])
        for item in group["items"]:
            print(f"  {item['method']:<6} {item['key']:<22} {item['label']}")


def load_body(args: argparse.Namespace):
    if args.json_inline and args.json_file:
        raise SystemExit("Provide at most one of --json or --file")
    if args.json_inline:
        return json.loads(args.json_inline)
    if args.json_file:
        return json.loads(Path(args.json_file).read_text())
    if args.default_body:
        return ACTIONS[args.action].default_body
    return None


async def run(args: argparse.Namespace) -> int:
    session = ConsoleSession(
        client_id=args.client_id,
        client_secret=args.client_secret,
        environment=args.environment,
        custom_base_url=args.base_url,
        dispatcher_url=args.dispatcher_url,
    )
    for name in ("payment_id", "sale_id", "authorization_id", "order_id", "capture_id", "refund_id", "payer_id"):
        value = getattr(args, name)
        if value:
            session.ids[name] = value

    query = {
        "count": args.count,
        "start_id": args.start_id,
        "start_index": args.start_index,
        "start_time": args.start_time,
        "end_time": args.end_time,
        "sort_by": args.sort_by,
        "sort_order": args.sort_order,
    }
    result = await session.run(args.action, body=load_body(args), query_params=query)
    print(render_view(result, args.view))
    if session.ids:
        print(f"ids={session.ids}")
    for entry in session.history.entries():
        print(f"[{entry.time}] {entry.action} {'ok' if entry.success else 'FAILED'} {entry.summary}")
    return 0 if result.get("success") else 1


def main() -> None:
    """Parse CLI args and dispatch one action."""

    parser = argparse.ArgumentParser(description="Exercise one v1 payments API action.")
    parser.add_argument("action", nargs="?", choices=sorted(ACTIONS))
    parser.add_argument("--list", action="store_true", help="List actions and exit")
    parser.add_argument("--client-id", default=os.getenv("PROBE_CLIENT_ID"))
    parser.add_argument("--client-secret", default=os.getenv("PROBE_CLIENT_SECRET"))
    parser.add_argument("--environment", choices=["sandbox", "live"], default="sandbox")
    parser.add_argument("--base-url", default=None, help="Custom upstream base URL")
    parser.add_argument("--dispatcher-url", default=None)
    parser.add_argument("--view", choices=VIEWS, default="response")
    parser.add_argument("--json", dest="json_inline", default=None, help="Inline JSON body")
    parser.add_argument("--file", dest="json_file", default=None, help="Path to JSON body file")
    parser.add_argument("--default-body", action="store_true", help="Send the action's sample body")
    for name in ("payment_id", "sale_id", "authorization_id", "order_id", "capture_id", "refund_id", "payer_id"):
        parser.add_argument(f"--{name.replace('_', '-')}", dest=name, default=None)
    parser.add_argument("--count", default="10")
    for name in ("start_id", "start_index", "start_time", "end_time", "sort_by", "sort_order"):
        parser.add_argument(f"--{name.replace('_', '-')}", dest=name, default=None)
    args = parser.parse_args()

    if args.list:
        list_actions()
        return
    if not args.action:
        parser.error("an action is required")
    if not args.client_id or not args.client_secret:
        raise SystemExit("Enter client id and secret first (--client-id/--client-secret).")
    raise SystemExit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
