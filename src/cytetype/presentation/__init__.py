"""Presentation layer package."""

from cytetype.presentation.cli import main, create_client_from_config
from cytetype.presentation.progress import ClusterProgressRenderer

__all__ = ["main", "create_client_from_config", "ClusterProgressRenderer"]
