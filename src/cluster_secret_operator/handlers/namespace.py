"""Namespace watch handling: maps namespace changes to ClusterExternalSecrets."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Mapping

import kopf

from ..constants import ERR_CONVERT_LABEL_SELECTOR, ERR_GET_CES, PARENT_LIST_PAGE_SIZE
from ..services.k8s.client import ClusterClient
from ..utils.errors import sanitize_exception
from ..utils.namespaces import EventKind, should_reenqueue
from ..utils.queue import ParentKey, ReconcileQueue
from ..utils.selectors import LabelSelector, SelectorError
from .shared import QUEUE, get_cluster_client

logger = logging.getLogger(__name__)


def find_parents_for_namespace(
    cluster: ClusterClient,
    namespace_labels: Mapping[str, str] | None,
    page_size: int = PARENT_LIST_PAGE_SIZE,
    previous_labels: Mapping[str, str] | None = None,
) -> list[ParentKey]:
    """Return the ClusterExternalSecrets whose selector matches a namespace.

    A parent counts when its selector matches the current labels or, if
    given, *previous_labels*, so parents that just lost the namespace are
    found too. Parents are listed in pages of *page_size*. Any listing or
    selector error drops the whole result: reconciling from a partial list
    is worse than waiting for the next trigger.
    """
    label_sets = [dict(namespace_labels or {})]
    if previous_labels is not None and dict(previous_labels) != label_sets[0]:
        label_sets.append(dict(previous_labels))
    requests: list[ParentKey] = []
    continue_token: str | None = None

    while True:
        try:
            page = cluster.list_parents(limit=page_size, continue_token=continue_token)
        except Exception as e:
            logger.error(f"{ERR_GET_CES}: {sanitize_exception(e)}")
            return []

        for item in page.get("items") or []:
            meta = item.get("metadata", {})
            try:
                selector = LabelSelector.from_dict(item.get("spec", {}).get("namespaceSelector"))
            except SelectorError as e:
                logger.error(f"{ERR_CONVERT_LABEL_SELECTOR} for {meta.get('name')}: {e}")
                return []

            if any(selector.matches(labels) for labels in label_sets):
                requests.append(ParentKey(meta.get("name", ""), meta.get("namespace") or ""))

        continue_token = (page.get("metadata") or {}).get("continue")
        if not continue_token:
            break

    return requests


class NamespaceWatcher:
    """Turns namespace watch events into reconcile triggers.

    Remembers the last labels seen per namespace so updates can be compared
    against the previous label set, and so parents that selected the old
    labels are triggered as well as those selecting the new ones. Runs on the event loop thread; parent
    listing is pushed to a worker thread.
    """

    def __init__(self, queue: ReconcileQueue):
        self.queue = queue
        self._labels: dict[str, dict[str, str]] = {}

    def _remember(self, name: str, labels: dict[str, str] | None) -> dict[str, str] | None:
        previous = self._labels.get(name)
        if labels is None:
            self._labels.pop(name, None)
        else:
            self._labels[name] = labels
        return previous

    async def handle(
        self,
        cluster: ClusterClient,
        event_type: str | None,
        name: str,
        labels: Mapping[str, str] | None,
    ) -> list[ParentKey]:
        """Process one watch event and enqueue the parents it affects.

        Args:
            cluster: Kubernetes API access used to list parents
            event_type: Raw watch type: None for the initial listing, or
                "ADDED", "MODIFIED", "DELETED"
            name: Namespace name
            labels: Namespace labels carried by the event

        Returns:
            The parent keys that were enqueued
        """
        labels = dict(labels or {})

        if event_type is None:
            # Initial listing: parents are reconciled on their own resume
            self._remember(name, labels)
            return []
        if event_type == "DELETED":
            old = self._remember(name, None)
            kind = EventKind.DELETE
        else:
            old = self._remember(name, labels)
            kind = EventKind.UPDATE if event_type == "MODIFIED" and old is not None else EventKind.CREATE

        if not should_reenqueue(old, labels, kind):
            return []

        # Parents selecting the old labels must also run to drop their child
        keys = await asyncio.to_thread(
            find_parents_for_namespace, cluster, labels, PARENT_LIST_PAGE_SIZE, old
        )
        for key in keys:
            self.queue.enqueue(key)
        if keys:
            logger.debug(f"namespace {name} ({kind.value}) triggered {len(keys)} ClusterExternalSecret(s)")
        return keys


WATCHER = NamespaceWatcher(QUEUE)


@kopf.on.event("v1", "namespaces")
async def handle_namespace_event(
    type: str | None,
    name: str,
    labels: Mapping[str, str],
    **kwargs: Any,
) -> None:
    """Enqueue the ClusterExternalSecrets affected by a namespace change."""
    await WATCHER.handle(get_cluster_client(), type, name, labels)
