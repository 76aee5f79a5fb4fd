"""Builders for objects derived from CRD specs."""

from .external_secret import create_external_secret_from_spec, external_secret_name

__all__ = ["create_external_secret_from_spec", "external_secret_name"]
