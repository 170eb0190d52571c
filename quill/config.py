"""
Config system - Layered typed configuration with validation.

Serializer defaults (the identity key used by ``to_param`` and the
renderer options) are read from a ``SerializerConfig`` dataclass that can
be populated from files, a ``.env`` file, environment variables and
explicit overrides.
"""

from typing import Any, Dict, Optional, Type, get_type_hints, get_origin, get_args
from dataclasses import dataclass, fields, MISSING
from pathlib import Path
import logging
import os
import json

from dotenv import dotenv_values

from .faults import Fault, FaultDomain

logger = logging.getLogger("quill.config")


class ConfigError(Fault):
    """Raised when configuration loading or validation fails."""

    def __init__(self, message: str, *, metadata: Optional[Dict[str, Any]] = None):
        super().__init__(
            code="CONFIG_INVALID",
            message=message,
            domain=FaultDomain.CONFIG,
            metadata=metadata,
        )


@dataclass
class SerializerConfig:
    """Library-wide serializer defaults."""

    param_key: str = "id"
    json_indent: Optional[int] = None
    json_ensure_ascii: bool = False
    xml_item_tag: str = "item"
    xml_declaration: bool = True
    yaml_allow_unicode: bool = True
    yaml_default_flow_style: bool = False


class ConfigLoader:
    """
    Loads and merges configuration from multiple sources with precedence:
    overrides > environment variables > .env file > config files > defaults
    """

    def __init__(self, env_prefix: str = "QUILL_"):
        self.env_prefix = env_prefix
        self.config_data: Dict[str, Any] = {}

    @classmethod
    def load(
        cls,
        paths: Optional[list[str]] = None,
        env_prefix: str = "QUILL_",
        env_file: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> "ConfigLoader":
        """
        Load configuration from multiple sources with proper merge strategy.

        Merge order (later overrides earlier):
        1. Config files (JSON or YAML, glob patterns supported)
        2. .env file
        3. Environment variables (QUILL_* prefix)
        4. Manual overrides

        Args:
            paths: List of config file paths (glob patterns supported)
            env_prefix: Prefix for environment variables
            env_file: Path to .env file
            overrides: Manual overrides (highest precedence)

        Returns:
            Configured ConfigLoader instance
        """
        loader = cls(env_prefix=env_prefix)

        for pattern in paths or []:
            loader._load_from_files(pattern)

        if env_file:
            loader._load_env_file(env_file)

        loader._load_from_env()

        if overrides:
            loader._merge_dict(loader.config_data, overrides)

        return loader

    def _load_from_files(self, pattern: str):
        """Load config from JSON or YAML files."""
        from glob import glob

        matched = sorted(glob(pattern))
        if not matched:
            logger.debug("No config files match %s", pattern)
        for path_str in matched:
            path = Path(path_str)
            if path.suffix == ".json":
                self._load_json_file(path)
            elif path.suffix in (".yaml", ".yml"):
                self._load_yaml_file(path)
            else:
                raise ConfigError(f"Unsupported config file type: {path}")

    def _load_json_file(self, path: Path):
        """Load config from JSON file."""
        with open(path) as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")
        self._merge_dict(self.config_data, data)
        logger.debug("Loaded config from %s", path)

    def _load_yaml_file(self, path: Path):
        """Load config from YAML file."""
        import yaml
        with open(path) as f:
            data = yaml.safe_load(f)
        if data:
            if not isinstance(data, dict):
                raise ConfigError(f"Config file {path} must contain a mapping")
            self._merge_dict(self.config_data, data)
        logger.debug("Loaded config from %s", path)

    def _load_env_file(self, path: str):
        """Load prefixed keys from a .env file."""
        env_path = Path(path)
        if not env_path.exists():
            logger.debug("Env file %s not found, skipping", path)
            return

        for key, value in dotenv_values(env_path).items():
            if value is not None and key.startswith(self.env_prefix):
                self._set_nested(key, value)

    def _load_from_env(self):
        """Load config from environment variables."""
        for key, value in os.environ.items():
            if key.startswith(self.env_prefix):
                self._set_nested(key, value)

    def _set_nested(self, key: str, value: str):
        """Convert QUILL_SERIALIZER__PARAM_KEY to nested dict."""
        key = key[len(self.env_prefix):]

        # Split by double underscore for nested keys
        parts = key.lower().split("__")

        current = self.config_data
        for part in parts[:-1]:
            if not isinstance(current.get(part), dict):
                current[part] = {}
            current = current[part]

        current[parts[-1]] = self._parse_value(value)

    def _parse_value(self, value: str) -> Any:
        """Parse string value to appropriate type."""
        if value.lower() in ("true", "yes"):
            return True
        if value.lower() in ("false", "no"):
            return False

        try:
            if "." in value:
                return float(value)
            return int(value)
        except ValueError:
            pass

        if value.lower() in ("null", "none"):
            return None

        if value.startswith(("{", "[")):
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                pass

        return value

    def _merge_dict(self, target: dict, source: dict):
        """Deep merge source into target."""
        for key, value in source.items():
            if key in target and isinstance(target[key], dict) and isinstance(value, dict):
                self._merge_dict(target[key], value)
            else:
                target[key] = value

    def get(self, path: str, default: Any = None) -> Any:
        """Get config value by dot-separated path."""
        current = self.config_data
        for part in path.split("."):
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return default
        return current

    def serializer_config(self) -> SerializerConfig:
        """Build a validated ``SerializerConfig`` from the ``serializer`` section."""
        data = self.get("serializer", {})
        if not isinstance(data, dict):
            raise ConfigError("'serializer' config section must be a mapping")
        return self._instantiate_dataclass(SerializerConfig, data)

    def _instantiate_dataclass(self, config_class: Type, data: dict):
        """Instantiate dataclass config with validation."""
        kwargs = {}
        hints = get_type_hints(config_class)

        unknown = set(data) - {f.name for f in fields(config_class)}
        if unknown:
            raise ConfigError(
                f"Unknown {config_class.__name__} option(s): {', '.join(sorted(unknown))}"
            )

        for field_info in fields(config_class):
            field_name = field_info.name
            field_type = hints.get(field_name, field_info.type)

            if field_name in data:
                value = data[field_name]
                if not self._check_type(value, field_type):
                    raise ConfigError(
                        f"Config field '{field_name}' expected {field_type}, "
                        f"got {type(value).__name__}"
                    )
                kwargs[field_name] = value
            elif field_info.default is not MISSING:
                kwargs[field_name] = field_info.default
            elif field_info.default_factory is not MISSING:
                kwargs[field_name] = field_info.default_factory()
            else:
                raise ConfigError(
                    f"Required config field '{field_name}' not provided"
                )

        return config_class(**kwargs)

    def _check_type(self, value: Any, expected_type: Type) -> bool:
        """Basic type checking."""
        import types
        origin = get_origin(expected_type)
        if origin is types.UnionType or str(origin) == 'typing.Union':
            args = get_args(expected_type)
            if value is None:
                return type(None) in args
            return any(
                self._check_type(value, arg) for arg in args if arg is not type(None)
            )

        if origin:
            return isinstance(value, origin)

        # bool is an int subclass; keep them apart
        if expected_type is int and isinstance(value, bool):
            return False

        try:
            return isinstance(value, expected_type)
        except TypeError:
            return True

    def to_dict(self) -> dict:
        """Export all config as dictionary."""
        return self.config_data.copy()


# ============================================================================
# Active configuration
# ============================================================================

_active_config: Optional[SerializerConfig] = None


def configure(config: Any = None, **overrides: Any) -> SerializerConfig:
    """
    Install the library-wide ``SerializerConfig``.

    Accepts a ``SerializerConfig``, a ``ConfigLoader``, or nothing (defaults);
    keyword overrides are applied on top.
    """
    global _active_config

    if config is None:
        base = SerializerConfig()
    elif isinstance(config, SerializerConfig):
        base = config
    elif isinstance(config, ConfigLoader):
        base = config.serializer_config()
    else:
        raise ConfigError(
            f"configure() expects a SerializerConfig or ConfigLoader, got {type(config).__name__}"
        )

    if overrides:
        loader = ConfigLoader()
        data = {f.name: getattr(base, f.name) for f in fields(base)}
        data.update(overrides)
        base = loader._instantiate_dataclass(SerializerConfig, data)

    _active_config = base
    logger.debug("Serializer config installed: %s", base)
    return base


def get_config() -> SerializerConfig:
    """Return the active ``SerializerConfig`` (defaults if never configured)."""
    if _active_config is None:
        return SerializerConfig()
    return _active_config


def reset_config() -> None:
    """Forget the active configuration."""
    global _active_config
    _active_config = None
