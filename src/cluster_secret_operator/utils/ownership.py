"""Owner reference helpers."""

from __future__ import annotations

from typing import Any


class AlreadyOwnedError(Exception):
    """Raised when an object is already controlled by a different owner."""

    def __init__(self, object_name: str, owner: dict[str, Any]):
        self.object_name = object_name
        self.owner = owner
        super().__init__(
            f"object {object_name!r} is already owned by another "
            f"{owner.get('kind')} controller {owner.get('name')!r}"
        )


def make_owner_reference(owner: dict[str, Any]) -> dict[str, Any]:
    """Build a controller owner reference pointing at *owner*."""
    meta = owner.get("metadata", {})
    return {
        "apiVersion": owner.get("apiVersion"),
        "kind": owner.get("kind"),
        "name": meta.get("name"),
        "uid": meta.get("uid"),
        "controller": True,
        "blockOwnerDeletion": True,
    }


def get_controller_of(meta: dict[str, Any]) -> dict[str, Any] | None:
    """Return the owner reference marked as controller, if any."""
    for ref in meta.get("ownerReferences") or []:
        if ref.get("controller"):
            return ref
    return None


def set_controller_reference(owner: dict[str, Any], meta: dict[str, Any]) -> dict[str, Any]:
    """Make *owner* the controller of the object described by *meta*.

    Mutates and returns *meta*. An existing reference to the same owner is
    replaced; references to other, non-controlling owners are kept.

    Raises:
        AlreadyOwnedError: If another object is already the controller
    """
    desired = make_owner_reference(owner)
    existing = get_controller_of(meta)
    if existing is not None and existing.get("uid") != desired["uid"]:
        raise AlreadyOwnedError(meta.get("name", ""), existing)

    refs = [ref for ref in meta.get("ownerReferences") or [] if ref.get("uid") != desired["uid"]]
    refs.append(desired)
    meta["ownerReferences"] = refs
    return meta
