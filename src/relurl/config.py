"""Configuration management for relurl.

Supports TOML configuration format with auto-discovery.
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path

from relurl.core.deployment import DeploymentPath

CONFIG_FILENAME = "relurl.toml"


@dataclass
class DeploymentConfig:
    """Deployment mount point configuration."""

    context_path: str = ""
    filter_path: str = ""

    def to_deployment_path(self) -> DeploymentPath:
        return DeploymentPath.from_paths(self.context_path, self.filter_path)


@dataclass
class BaseConfig:
    """Default base URL configuration."""

    url: str | None = None


@dataclass
class Config:
    """Application configuration."""

    deployment: DeploymentConfig = field(default_factory=DeploymentConfig)
    base: BaseConfig = field(default_factory=BaseConfig)
    config_path: Path | None = None

    @classmethod
    def load(cls, config_path: Path | None = None) -> Config:
        """Load configuration from file.

        If config_path is provided, loads from that file.
        Otherwise, searches for relurl.toml in current directory and parents.

        Args:
            config_path: Optional explicit path to config file

        Returns:
            Config instance with defaults for missing sections

        Raises:
            FileNotFoundError: If explicit config_path doesn't exist
            ValueError: If configuration is invalid
        """
        if config_path is not None:
            if not config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {config_path}")
            return cls._load_from_file(config_path)

        discovered_path = cls._discover_config()
        if discovered_path is None:
            return cls()

        return cls._load_from_file(discovered_path)

    @classmethod
    def _discover_config(cls) -> Path | None:
        """Search for config file in current directory and parents."""
        current = Path.cwd()
        while True:
            candidate = current / CONFIG_FILENAME
            if candidate.exists():
                return candidate
            parent = current.parent
            if parent == current:
                return None
            current = parent

    @classmethod
    def _load_from_file(cls, path: Path) -> Config:
        """Load configuration from a specific file.

        Args:
            path: Path to TOML configuration file

        Returns:
            Config instance

        Raises:
            ValueError: If configuration is invalid
        """
        with path.open("rb") as f:
            try:
                data = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise ValueError(f"Invalid TOML in {path}: {e}") from e

        return cls(
            deployment=cls._parse_deployment(data.get("deployment")),
            base=cls._parse_base(data.get("base")),
            config_path=path,
        )

    @classmethod
    def _parse_deployment(cls, data: object) -> DeploymentConfig:
        """Parse deployment configuration section.

        Args:
            data: Raw deployment section data

        Returns:
            DeploymentConfig instance
        """
        if data is None:
            return DeploymentConfig()

        if not isinstance(data, dict):
            raise ValueError("deployment section must be a dictionary")

        context_path = data.get("context_path", "")
        if not isinstance(context_path, str):
            raise ValueError("deployment.context_path must be a string")

        filter_path = data.get("filter_path", "")
        if not isinstance(filter_path, str):
            raise ValueError("deployment.filter_path must be a string")

        return DeploymentConfig(context_path=context_path, filter_path=filter_path)

    @classmethod
    def _parse_base(cls, data: object) -> BaseConfig:
        if data is None:
            return BaseConfig()

        if not isinstance(data, dict):
            raise ValueError("base section must be a dictionary")

        url = data.get("url")
        if url is not None and not isinstance(url, str):
            raise ValueError("base.url must be a string")

        return BaseConfig(url=url)

    def with_overrides(
        self,
        *,
        context_path: str | None = None,
        filter_path: str | None = None,
        base_url: str | None = None,
    ) -> Config:
        """Create a new Config with CLI overrides applied.

        Only non-None values override the existing config. The original
        Config is not modified.

        Args:
            context_path: Override deployment.context_path
            filter_path: Override deployment.filter_path
            base_url: Override base.url

        Returns:
            New Config instance with overrides applied
        """
        deployment = self.deployment
        if context_path is not None or filter_path is not None:
            deployment = replace(
                self.deployment,
                context_path=context_path
                if context_path is not None
                else self.deployment.context_path,
                filter_path=filter_path
                if filter_path is not None
                else self.deployment.filter_path,
            )

        base = self.base
        if base_url is not None:
            base = replace(self.base, url=base_url)

        return replace(self, deployment=deployment, base=base)
