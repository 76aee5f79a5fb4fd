"""Kubernetes label selector parsing and matching."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Mapping

OP_EQUALS = "="
OP_IN = "In"
OP_NOT_IN = "NotIn"
OP_EXISTS = "Exists"
OP_DOES_NOT_EXIST = "DoesNotExist"

_SET_OPERATORS = {OP_IN, OP_NOT_IN}
_PRESENCE_OPERATORS = {OP_EXISTS, OP_DOES_NOT_EXIST}

_NAME_RE = re.compile(r"^([A-Za-z0-9][-A-Za-z0-9_.]*)?[A-Za-z0-9]$")
_DNS_SUBDOMAIN_RE = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?(\.[a-z0-9]([-a-z0-9]*[a-z0-9])?)*$")


class SelectorError(ValueError):
    """Raised when a label selector cannot be converted."""


def validate_label_key(key: str) -> None:
    """Validate a qualified label key (``[prefix/]name``)."""
    prefix, _, name = key.rpartition("/")
    if "/" in key and not prefix:
        raise SelectorError(f"invalid label key {key!r}: prefix part must be non-empty")
    if prefix and (len(prefix) > 253 or not _DNS_SUBDOMAIN_RE.match(prefix)):
        raise SelectorError(f"invalid label key {key!r}: prefix must be a DNS-1123 subdomain")
    if not name or len(name) > 63 or not _NAME_RE.match(name):
        raise SelectorError(f"invalid label key {key!r}: name part must be a valid label name")


def validate_label_value(value: str) -> None:
    """Validate a label value (empty values are allowed)."""
    if value == "":
        return
    if len(value) > 63 or not _NAME_RE.match(value):
        raise SelectorError(f"invalid label value {value!r}")


@dataclass(frozen=True)
class Requirement:
    """A single key/operator/values clause of a selector."""

    key: str
    operator: str
    values: tuple[str, ...] = ()

    @classmethod
    def build(cls, key: str, operator: str, values: list[str] | None = None) -> Requirement:
        """Create a validated requirement.

        Raises:
            SelectorError: If the key, operator or values are invalid
        """
        values = list(values or [])
        validate_label_key(key)
        if operator == OP_EQUALS:
            if len(values) != 1:
                raise SelectorError(f"{key}: exact-match requirement needs exactly one value")
        elif operator in _SET_OPERATORS:
            if not values:
                raise SelectorError(f"{key}: for '{operator}' operator, values set can't be empty")
        elif operator in _PRESENCE_OPERATORS:
            if values:
                raise SelectorError(f"{key}: values set must be empty for '{operator}' operator")
        else:
            raise SelectorError(f"{key}: {operator!r} is not a valid label selector operator")
        for value in values:
            validate_label_value(value)
        return cls(key=key, operator=operator, values=tuple(sorted(set(values))))

    def matches(self, labels: Mapping[str, str]) -> bool:
        """Return True if *labels* satisfy this requirement."""
        present = self.key in labels
        if self.operator in (OP_EQUALS, OP_IN):
            return present and labels[self.key] in self.values
        if self.operator == OP_NOT_IN:
            return not present or labels[self.key] not in self.values
        if self.operator == OP_EXISTS:
            return present
        return not present

    def __str__(self) -> str:
        if self.operator == OP_EQUALS:
            return f"{self.key}={self.values[0]}"
        if self.operator == OP_IN:
            return f"{self.key} in ({','.join(self.values)})"
        if self.operator == OP_NOT_IN:
            return f"{self.key} notin ({','.join(self.values)})"
        if self.operator == OP_EXISTS:
            return self.key
        return f"!{self.key}"


class LabelSelector:
    """An AND of requirements. No requirements selects everything."""

    def __init__(self, requirements: list[Requirement] | None = None):
        self.requirements = sorted(requirements or [], key=lambda r: (r.key, r.operator, r.values))

    @classmethod
    def from_dict(cls, selector: Mapping[str, Any] | None) -> LabelSelector:
        """Convert a ``metav1.LabelSelector``-shaped dict into a selector.

        Args:
            selector: Dict with optional ``matchLabels`` and ``matchExpressions``

        Returns:
            Parsed selector

        Raises:
            SelectorError: If the selector is malformed
        """
        if not selector:
            return cls()
        if not isinstance(selector, Mapping):
            raise SelectorError(f"label selector must be an object, got {type(selector).__name__}")

        requirements = []
        for key, value in (selector.get("matchLabels") or {}).items():
            if not isinstance(value, str):
                raise SelectorError(f"{key}: label value must be a string")
            requirements.append(Requirement.build(key, OP_EQUALS, [value]))

        for expr in selector.get("matchExpressions") or []:
            if not isinstance(expr, Mapping) or "key" not in expr or "operator" not in expr:
                raise SelectorError(f"malformed match expression: {expr!r}")
            requirements.append(Requirement.build(expr["key"], expr["operator"], expr.get("values")))

        return cls(requirements)

    @property
    def empty(self) -> bool:
        return not self.requirements

    def matches(self, labels: Mapping[str, str] | None) -> bool:
        labels = labels or {}
        return all(req.matches(labels) for req in self.requirements)

    def __str__(self) -> str:
        return ",".join(str(req) for req in self.requirements)

    def __repr__(self) -> str:
        return f"LabelSelector({str(self)!r})"
