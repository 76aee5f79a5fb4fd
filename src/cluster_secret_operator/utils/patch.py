"""JSON merge patch (RFC 7386) generation."""

from __future__ import annotations

from typing import Any


def create_merge_patch(original: dict[str, Any], modified: dict[str, Any]) -> dict[str, Any]:
    """Compute the merge patch that turns *original* into *modified*.

    Keys missing from *modified* become ``None`` (delete). Nested dicts are
    diffed recursively; any other changed value, lists included, is replaced
    whole.
    """
    patch: dict[str, Any] = {}
    for key in original:
        if key not in modified:
            patch[key] = None
    for key, value in modified.items():
        old = original.get(key)
        if key in original and old == value:
            continue
        if isinstance(old, dict) and isinstance(value, dict):
            nested = create_merge_patch(old, value)
            if nested:
                patch[key] = nested
        else:
            patch[key] = value
    return patch
