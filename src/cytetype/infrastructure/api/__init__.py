"""CyteType API access."""

from cytetype.infrastructure.api.transport import (
    HttpTransport,
    classify_transport_error,
    DEFAULT_API_URL,
)
from cytetype.infrastructure.api.status import StatusResolver

__all__ = ["HttpTransport", "classify_transport_error", "DEFAULT_API_URL", "StatusResolver"]
