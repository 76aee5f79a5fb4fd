"""Handler modules for the operator."""

# Import handlers to register them - all handlers register themselves via @kopf decorators
from . import cluster_external_secret  # noqa: F401
from . import namespace  # noqa: F401
