"""Wait timeline event records."""

from __future__ import annotations

from datetime import datetime, timezone

WAIT_STAGE = "wait"


def domain_build_wait_event(label: str, status: str, attempt: int, **details: object) -> dict[str, object]:
    """Build one timeline record for a readiness or operation wait.

    Args:
        label: Name of the awaited dependency, for example `operation 41b6`.
        status: Wait transition such as `started`, `retrying` or `timed_out`.
        attempt: Probe invocations performed so far, `0` before the first probe.
        **details: Transition-specific fields (probe detail, error code, budget).

    Returns:
        dict[str, object]: Timeline record stamped with the current UTC time.
    """

    wait_event: dict[str, object] = {
        "stage": WAIT_STAGE,
        "label": label,
        "status": status,
        "attempt": attempt,
        "at_utc": datetime.now(timezone.utc).isoformat(),
    }
    if details:
        wait_event["details"] = dict(details)
    return wait_event
