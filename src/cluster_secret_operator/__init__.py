"""Kopf operator that projects ClusterExternalSecrets into matching namespaces."""

__version__ = "0.1.0"
