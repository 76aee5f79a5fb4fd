"""Utilities for computing ClusterExternalSecret status conditions."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Iterable

from ..constants import (
    COND_NOT_READY,
    COND_PARTIALLY_READY,
    COND_READY,
    ERR_NAMESPACES_FAILED,
    MSG_ALL_SYNCHRONIZED,
)


def utc_now() -> str:
    """Return the current UTC time in ISO-8601 form."""
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


def update_condition(
    conditions: list[dict[str, Any]],
    condition_type: str,
    status: str,
    reason: str,
    message: str,
    observed_generation: int | None = None,
) -> list[dict[str, Any]]:
    """Replace the conditions list with a single condition.

    The condition only reflects the latest cycle. ``lastTransitionTime`` is
    carried over from the previous condition when type and status match.

    Args:
        conditions: List of existing conditions
        condition_type: Type of condition
        status: Status of condition ("True", "False", "Unknown")
        reason: Reason for the condition
        message: Human-readable message
        observed_generation: Generation when condition was observed

    Returns:
        New list holding exactly one condition
    """
    now = utc_now()

    new_condition = {
        "type": condition_type,
        "status": status,
        "reason": reason,
        "message": message,
        "lastTransitionTime": now,
    }

    if observed_generation is not None:
        new_condition["observedGeneration"] = observed_generation

    for existing in conditions or []:
        if existing.get("type") == condition_type and existing.get("status") == status:
            new_condition["lastTransitionTime"] = existing.get("lastTransitionTime", now)
            break

    return [new_condition]


def condition_for_failures(failed_namespaces: dict[str, str], total: int) -> tuple[str, str, str]:
    """Pick the condition type, status and message for a cycle.

    Args:
        failed_namespaces: Namespace name to failure reason for this cycle
        total: Number of namespaces considered this cycle (matched plus failed)

    Returns:
        Tuple of (type, status, message)
    """
    if not failed_namespaces:
        return COND_READY, "True", MSG_ALL_SYNCHRONIZED

    failed = len(failed_namespaces)
    total = max(total, failed)
    condition_type = COND_PARTIALLY_READY if failed < total else COND_NOT_READY
    return condition_type, "False", f"{ERR_NAMESPACES_FAILED} ({failed}/{total})"


def to_namespace_failures(failed_namespaces: dict[str, str]) -> list[dict[str, str]]:
    """Render the failure map as a list sorted by namespace name."""
    return [
        {"namespace": namespace, "reason": reason}
        for namespace, reason in sorted(failed_namespaces.items())
    ]


def aggregate_status(
    status: dict[str, Any],
    provisioned: Iterable[str],
    failed_namespaces: dict[str, str],
    matched: Iterable[str],
    observed_generation: int | None = None,
) -> dict[str, Any]:
    """Write the outcome of a cycle into *status*.

    Args:
        status: Status dict to update in place (the cycle's working copy)
        provisioned: Namespaces synchronized this cycle
        failed_namespaces: Namespace name to failure reason for this cycle
        matched: Namespaces matching the selector this cycle
        observed_generation: Parent generation this cycle observed

    Returns:
        The updated status dict
    """
    total = len(set(matched) | set(failed_namespaces))
    condition_type, cond_status, message = condition_for_failures(failed_namespaces, total)

    status["conditions"] = update_condition(
        status.get("conditions", []),
        condition_type,
        cond_status,
        condition_type,
        message,
    )
    status["failedNamespaces"] = to_namespace_failures(failed_namespaces)
    status["provisionedNamespaces"] = sorted(set(provisioned))
    if observed_generation is not None:
        status["observedGeneration"] = observed_generation
    return status
