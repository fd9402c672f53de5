"""Infrastructure layer package."""

from cytetype.infrastructure.api import HttpTransport, StatusResolver, classify_transport_error
from cytetype.infrastructure.config import ConfigLoader, ClientConfig

__all__ = [
    "HttpTransport",
    "StatusResolver",
    "classify_transport_error",
    "ConfigLoader",
    "ClientConfig",
]
