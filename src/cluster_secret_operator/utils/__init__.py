"""Utility functions for the ClusterExternalSecret Operator."""

from .conditions import aggregate_status, to_namespace_failures, update_condition
from .context import get_correlation_id, with_correlation_id
from .duration import parse_duration
from .events import emit_event
from .namespaces import EventKind, Namespace, match_namespaces, removed_namespaces, should_reenqueue
from .ownership import AlreadyOwnedError, set_controller_reference
from .patch import create_merge_patch
from .queue import ParentKey, ReconcileQueue
from .selectors import LabelSelector, SelectorError

__all__ = [
    "aggregate_status",
    "to_namespace_failures",
    "update_condition",
    "get_correlation_id",
    "with_correlation_id",
    "parse_duration",
    "emit_event",
    "EventKind",
    "Namespace",
    "match_namespaces",
    "removed_namespaces",
    "should_reenqueue",
    "AlreadyOwnedError",
    "set_controller_reference",
    "create_merge_patch",
    "ParentKey",
    "ReconcileQueue",
    "LabelSelector",
    "SelectorError",
]
