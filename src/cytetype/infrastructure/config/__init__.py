"""Configuration package."""

from cytetype.infrastructure.config.loader import ConfigLoader, ClientConfig

__all__ = ["ConfigLoader", "ClientConfig"]
