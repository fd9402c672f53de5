"""Configuration loading and validation."""

import os
import yaml
from pathlib import Path
from typing import Optional, Dict, Any
from dataclasses import dataclass, fields

from cytetype.domain.exceptions import ConfigurationError
from cytetype.infrastructure.api.transport import DEFAULT_API_URL
from cytetype.shared.logging import get_logger
from cytetype.shared.retry import PollPolicy

logger = get_logger(__name__)

TRUE_VALUES = ("true", "1", "yes")


@dataclass
class ClientConfig:
    """Configuration for talking to the CyteType API."""

    api_url: str = DEFAULT_API_URL
    poll_interval: float = 10
    timeout: float = 7200
    auth_token: Optional[str] = None
    show_progress: bool = True
    settle_delay: float = 5

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate()

    def _validate(self):
        """Validate configuration values."""
        if not self.api_url or not str(self.api_url).startswith(("http://", "https://")):
            raise ConfigurationError(f"Invalid api_url: {self.api_url}")

        if self.poll_interval <= 0:
            raise ConfigurationError(f"Poll interval must be positive, got: {self.poll_interval}")

        if self.timeout <= 0:
            raise ConfigurationError(f"Timeout must be positive, got: {self.timeout}")

        if self.settle_delay < 0:
            raise ConfigurationError(f"Settle delay cannot be negative, got: {self.settle_delay}")

    def poll_policy(self) -> PollPolicy:
        """Build the poller timing policy from this config."""
        return PollPolicy(
            poll_interval=self.poll_interval,
            timeout=self.timeout,
            settle_delay=self.settle_delay,
        )


class ConfigLoader:
    """Loads and validates configuration from YAML files and environment variables."""

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize config loader.

        Args:
            config_path: Optional path to YAML config file
        """
        self.config_path = Path(config_path) if config_path else Path("cytetype.yaml")
        self._logger = get_logger(__name__)

    def load(self, overrides: Optional[Dict[str, Any]] = None) -> ClientConfig:
        """
        Load configuration from file, environment and overrides.

        Later sources win: file < environment < overrides.

        Returns:
            ClientConfig instance

        Raises:
            ConfigurationError: If configuration is invalid
        """
        config_dict: Dict[str, Any] = {}

        if self.config_path.exists():
            self._logger.debug(f"Loading config from {self.config_path}")
            config_dict.update(self._load_from_file())

        config_dict.update(self._load_from_env())

        if overrides:
            for k, v in overrides.items():
                if v is None:
                    continue
                config_dict[k] = v

        valid_fields = {f.name for f in fields(ClientConfig)}
        filtered_config = {k: v for k, v in config_dict.items() if k in valid_fields}

        try:
            return ClientConfig(**filtered_config)
        except TypeError as e:
            raise ConfigurationError(f"Invalid configuration: {e}")

    def _load_from_file(self) -> Dict[str, Any]:
        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                raw = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {self.config_path}: {e}")

        if not isinstance(raw, dict):
            raise ConfigurationError(f"Config file must contain a mapping: {self.config_path}")

        # Settings may live under a 'cytetype' section of a shared file
        section = raw.get('cytetype')
        if isinstance(section, dict):
            return section
        return raw

    def _load_from_env(self) -> Dict[str, Any]:
        """Load configuration from environment variables."""
        env_config: Dict[str, Any] = {}

        if api_url := os.getenv("CYTETYPE_API_URL"):
            env_config["api_url"] = api_url

        if poll_interval := os.getenv("CYTETYPE_POLL_INTERVAL"):
            try:
                env_config["poll_interval"] = float(poll_interval)
            except ValueError:
                self._logger.warning(f"Invalid CYTETYPE_POLL_INTERVAL value: {poll_interval}")

        if timeout := os.getenv("CYTETYPE_TIMEOUT"):
            try:
                env_config["timeout"] = float(timeout)
            except ValueError:
                self._logger.warning(f"Invalid CYTETYPE_TIMEOUT value: {timeout}")

        if auth_token := os.getenv("CYTETYPE_AUTH_TOKEN"):
            env_config["auth_token"] = auth_token

        if show_progress := os.getenv("CYTETYPE_SHOW_PROGRESS"):
            env_config["show_progress"] = show_progress.lower() in TRUE_VALUES

        return env_config
