"""MQTT topic helpers.

We keep topic construction in one place so the service and its clients agree
on naming.

Topic layout under a configurable namespace (default: `supermarket/sim`):

Request/response:
- `<ns>/control/requests`
    Control commands (configure, start, pause, resume, set_delay, reset).
- `<ns>/control/responses/<client_id>`

Streaming/broadcast:
- `<ns>/status/updates`
    The service broadcasts periodic simulation status snapshots.
- `<ns>/notifications/<kind>`
    One message per simulation notification (customer_created,
    customer_moved, customer_completed, simulation_ended, time_remaining).

You can run several simulators on a shared broker by changing the `namespace`
parameter (e.g. `--namespace demo/alice`).
"""

from __future__ import annotations

DEFAULT_NAMESPACE = "supermarket/sim"


def control_requests(namespace: str = DEFAULT_NAMESPACE) -> str:
    return f"{namespace}/control/requests"


def control_responses(client_id: str, namespace: str = DEFAULT_NAMESPACE) -> str:
    return f"{namespace}/control/responses/{client_id}"


def status_updates(namespace: str = DEFAULT_NAMESPACE) -> str:
    """Broadcast simulation status snapshots."""
    return f"{namespace}/status/updates"


def notifications(kind: str, namespace: str = DEFAULT_NAMESPACE) -> str:
    """Per-kind notification stream. Subscribe to `<ns>/notifications/+` for all."""
    return f"{namespace}/notifications/{kind}"
