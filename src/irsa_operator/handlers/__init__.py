"""Handler modules for CRD resources."""

# Import handlers to register them - all handlers register themselves via @kopf decorators
from . import binding  # noqa: F401
from . import setup  # noqa: F401
