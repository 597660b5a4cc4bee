"""Pipeline configuration resolver.

This module handles loading deploy.yaml:
- Explicit path, or SURETY_DEPLOY_CONFIG, or discovery in standard locations
- Environment overrides for the network name and RPC endpoint
- Conversion of YAML and schema errors into ConfigurationError
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import ValidationError as PydanticValidationError

from surety_deploy.errors import ConfigurationError
from surety_deploy.schemas.pipeline_spec import PipelineSpec

logger = logging.getLogger(__name__)

# Environment variable pointing at deploy.yaml
CONFIG_PATH_ENV_VAR = "SURETY_DEPLOY_CONFIG"

# Environment overrides
NETWORK_NAME_ENV_VAR = "SURETY_NETWORK_NAME"
RPC_URL_ENV_VAR = "SURETY_RPC_URL"

# Standard configuration file name
CONFIG_FILE_NAME = "deploy.yaml"

# Directories searched for deploy.yaml, relative to the working directory
CONFIG_SEARCH_PATHS = (
    Path("."),
    Path(".surety"),
)


class ConfigResolver:
    """Resolves and loads deploy.yaml.

    Attributes:
        search_paths: Ordered directories searched for deploy.yaml.

    Example:
        >>> spec = ConfigResolver().load()
        >>> spec.network.url
        'http://localhost:7545'

        >>> spec = ConfigResolver().load(Path("ops/deploy.yaml"))
    """

    def __init__(self, search_paths: tuple[Path, ...] | None = None) -> None:
        """Initialize the ConfigResolver.

        Args:
            search_paths: Custom search directories. Defaults to
                CONFIG_SEARCH_PATHS.
        """
        self.search_paths = search_paths or CONFIG_SEARCH_PATHS

    def find_config_file(self) -> Path:
        """Locate deploy.yaml from the environment or the search paths.

        Returns:
            Path to deploy.yaml.

        Raises:
            ConfigurationError: If no configuration file is found.
        """
        env_path = os.environ.get(CONFIG_PATH_ENV_VAR)
        if env_path:
            logger.debug("Using %s=%s", CONFIG_PATH_ENV_VAR, env_path)
            return Path(env_path)

        for base_path in self.search_paths:
            candidate = base_path / CONFIG_FILE_NAME
            if candidate.exists():
                logger.debug("Found deploy.yaml at %s", candidate)
                return candidate

        searched = ", ".join(str(p / CONFIG_FILE_NAME) for p in self.search_paths)
        raise ConfigurationError(
            f"Deployment configuration not found. Searched: {searched}",
        )

    def load(self, path: Path | str | None = None) -> PipelineSpec:
        """Load, validate and apply environment overrides.

        Args:
            path: Explicit path to deploy.yaml. Discovered if None.

        Returns:
            Validated PipelineSpec with absolute paths.

        Raises:
            ConfigurationError: If the file is missing or unreadable, not
                valid YAML, or fails schema validation.
        """
        resolved = Path(path) if path is not None else self.find_config_file()

        logger.info("Loading deployment configuration from %s", resolved)
        try:
            spec = PipelineSpec.from_yaml(resolved)
        except FileNotFoundError as exc:
            raise ConfigurationError(
                "Deployment configuration not found",
                file_path=str(resolved),
            ) from exc
        except OSError as exc:
            raise ConfigurationError(
                "Deployment configuration is not readable",
                file_path=str(resolved),
                internal_details=str(exc),
            ) from exc
        except yaml.YAMLError as exc:
            raise ConfigurationError(
                "Invalid YAML",
                file_path=str(resolved),
                internal_details=str(exc),
            ) from exc
        except PydanticValidationError as exc:
            first = exc.errors()[0]
            raise ConfigurationError(
                f"Invalid configuration: {first['msg']}",
                file_path=str(resolved),
                field_path=".".join(str(x) for x in first["loc"]) or None,
                internal_details=str(exc),
            ) from exc

        return apply_environment_overrides(spec, file_path=str(resolved))


def apply_environment_overrides(spec: PipelineSpec, *, file_path: str | None = None) -> PipelineSpec:
    """Apply SURETY_NETWORK_NAME and SURETY_RPC_URL, if set.

    Raises:
        ConfigurationError: If an override is invalid.
    """
    name = os.environ.get(NETWORK_NAME_ENV_VAR) or None
    url = os.environ.get(RPC_URL_ENV_VAR) or None
    if name is None and url is None:
        return spec

    try:
        return spec.with_network(name=name, url=url)
    except PydanticValidationError as exc:
        raise ConfigurationError(
            "Invalid network override from environment",
            file_path=file_path,
            field_path="network",
            internal_details=str(exc),
        ) from exc
