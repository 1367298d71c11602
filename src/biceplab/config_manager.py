"""Configuration management module.

This module handles persistent configuration storage using TOML format.
Stores tutorial defaults like the resource group, location, environment
and the directory the examples were scaffolded into.

Precedence (highest first):
    1. Command-line option
    2. Environment variable (BICEPLAB_*)
    3. ~/.biceplab/config.toml
    4. Built-in default

Security:
- Config file permissions: 0600 (owner read/write only)
- Config directory permissions: 0700
"""

import logging
import os
import re
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any

try:
    import tomli  # type: ignore[import]
except ImportError:
    # Fallback for Python versions that ship tomllib
    try:
        import tomllib as tomli  # type: ignore[import]
    except ImportError as e:
        raise ImportError("toml library not available. Install with: pip install tomli") from e

try:
    import tomlkit
except ImportError as e:
    raise ImportError("tomlkit library not available. Install with: pip install tomlkit") from e

logger = logging.getLogger(__name__)

DEFAULT_RESOURCE_GROUP = "rg-bicep-tutorial"
DEFAULT_LOCATION = "East US"
DEFAULT_ENVIRONMENT = "dev"
DEFAULT_EXAMPLES_DIR = "examples"

# config key -> environment variable
ENV_OVERRIDES = {
    "default_resource_group": "BICEPLAB_RESOURCE_GROUP",
    "default_location": "BICEPLAB_LOCATION",
    "default_environment": "BICEPLAB_ENVIRONMENT",
    "examples_dir": "BICEPLAB_EXAMPLES_DIR",
}


class ConfigError(Exception):
    """Raised when configuration operations fail."""

    pass


@dataclass
class BiceplabConfig:
    """biceplab configuration data."""

    default_resource_group: str = DEFAULT_RESOURCE_GROUP
    default_location: str = DEFAULT_LOCATION
    default_environment: str = DEFAULT_ENVIRONMENT
    examples_dir: str = DEFAULT_EXAMPLES_DIR

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary, excluding None values."""
        data = asdict(self)
        return {k: v for k, v in data.items() if v is not None}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BiceplabConfig":
        """Create from dictionary, ignoring unknown keys."""
        return cls(
            default_resource_group=data.get("default_resource_group", DEFAULT_RESOURCE_GROUP),
            default_location=data.get("default_location", DEFAULT_LOCATION),
            default_environment=data.get("default_environment", DEFAULT_ENVIRONMENT),
            examples_dir=data.get("examples_dir", DEFAULT_EXAMPLES_DIR),
        )

    @classmethod
    def keys(cls) -> list[str]:
        """Names of all settable configuration keys."""
        return [f.name for f in fields(cls)]

    def with_environment(self) -> "BiceplabConfig":
        """Return a copy with BICEPLAB_* environment variables applied."""
        data = self.to_dict()
        for key, env_var in ENV_OVERRIDES.items():
            value = os.getenv(env_var)
            if value:
                logger.debug(f"{key} overridden by {env_var}")
                data[key] = value
        return BiceplabConfig.from_dict(data)


class ConfigManager:
    """Manage the biceplab configuration file.

    Configuration is stored at ~/.biceplab/config.toml with secure permissions.
    """

    DEFAULT_CONFIG_DIR = Path.home() / ".biceplab"
    DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.toml"

    # Azure resource group names: 1-90 chars, no trailing period
    RESOURCE_GROUP_PATTERN = re.compile(r"^[-\w\._\(\)]{0,89}[-\w_\(\)]$")

    @classmethod
    def get_config_path(cls, custom_path: str | None = None) -> Path:
        """Get configuration file path.

        Args:
            custom_path: Custom config file path (optional)

        Returns:
            Path to config file

        Raises:
            ConfigError: If a custom path was given and does not exist
        """
        if custom_path:
            path = Path(custom_path).expanduser().resolve()
            if not path.exists():
                raise ConfigError(f"Config file not found: {path}")
            return path

        return cls.DEFAULT_CONFIG_FILE

    @classmethod
    def ensure_config_dir(cls) -> Path:
        """Ensure config directory exists with secure permissions.

        Raises:
            ConfigError: If directory creation fails
        """
        try:
            cls.DEFAULT_CONFIG_DIR.mkdir(parents=True, exist_ok=True)
            os.chmod(cls.DEFAULT_CONFIG_DIR, 0o700)
            logger.debug(f"Config directory ready: {cls.DEFAULT_CONFIG_DIR}")
            return cls.DEFAULT_CONFIG_DIR
        except OSError as e:
            raise ConfigError(f"Failed to create config directory: {e}") from e

    @classmethod
    def load_config(cls, custom_path: str | None = None) -> BiceplabConfig:
        """Load configuration from file.

        A missing default config file is not an error: built-in defaults apply.

        Raises:
            ConfigError: If the file exists but cannot be parsed
        """
        config_path = cls.get_config_path(custom_path)

        if not config_path.exists():
            logger.debug("Config file not found, using defaults")
            return BiceplabConfig()

        try:
            mode = config_path.stat().st_mode & 0o777
            if mode & 0o077:
                logger.warning(
                    f"Config file has insecure permissions: {oct(mode)}. Fixing to 0600..."
                )
                os.chmod(config_path, 0o600)

            with open(config_path, "rb") as f:
                data = tomli.load(f)  # type: ignore[attr-defined]

            logger.debug(f"Loaded config from: {config_path}")
            return BiceplabConfig.from_dict(data)  # type: ignore[arg-type]

        except Exception as e:
            raise ConfigError(f"Failed to load config: {e}") from e

    @classmethod
    def get_effective_config(cls, custom_path: str | None = None) -> BiceplabConfig:
        """Load the config file and apply environment overrides."""
        return cls.load_config(custom_path).with_environment()

    @classmethod
    def save_config(cls, config: BiceplabConfig, custom_path: str | None = None) -> None:
        """Save configuration to file.

        Existing comments and formatting are preserved by tomlkit; the file is
        written to a temporary path and renamed into place.

        Raises:
            ConfigError: If saving fails
        """
        temp_path: Path | None = None
        try:
            if custom_path:
                config_path = Path(custom_path).expanduser().resolve()
                config_path.parent.mkdir(parents=True, exist_ok=True)
            else:
                cls.ensure_config_dir()
                config_path = cls.DEFAULT_CONFIG_FILE

            temp_path = config_path.with_suffix(".tmp")

            if config_path.exists():
                with open(config_path) as f:
                    doc = tomlkit.load(f)
            else:
                doc = tomlkit.document()
            for key, value in config.to_dict().items():
                doc[key] = value

            with open(temp_path, "w") as f:
                tomlkit.dump(doc, f)

            os.chmod(temp_path, 0o600)
            temp_path.replace(config_path)

            logger.debug(f"Saved config to: {config_path}")

        except Exception as e:
            if temp_path and temp_path.exists():
                temp_path.unlink()
            raise ConfigError(f"Failed to save config: {e}") from e

    @classmethod
    def set_value(cls, key: str, value: str, custom_path: str | None = None) -> BiceplabConfig:
        """Validate and persist a single configuration value.

        Args:
            key: One of BiceplabConfig.keys()
            value: New value
            custom_path: Custom config file path (optional)

        Returns:
            Updated configuration (without environment overrides)

        Raises:
            ConfigError: If the key is unknown or the value is invalid
        """
        if key not in BiceplabConfig.keys():
            raise ConfigError(
                f"Unknown config key: {key}. Valid keys: {', '.join(BiceplabConfig.keys())}"
            )
        value = value.strip()
        if not value:
            raise ConfigError(f"Value for {key} cannot be empty")
        if key == "default_resource_group" and not cls.validate_resource_group_name(value):
            raise ConfigError(f"Invalid resource group name: {value}")

        if custom_path and not Path(custom_path).expanduser().exists():
            # New custom file starts from the built-in defaults
            config = BiceplabConfig()
        else:
            config = cls.load_config(custom_path)
        setattr(config, key, value)
        cls.save_config(config, custom_path)
        return config

    @classmethod
    def validate_resource_group_name(cls, name: str) -> bool:
        """Check a name against Azure's resource group naming rules."""
        return bool(cls.RESOURCE_GROUP_PATTERN.match(name))


__all__ = ["BiceplabConfig", "ConfigError", "ConfigManager", "ENV_OVERRIDES"]
