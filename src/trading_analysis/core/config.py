"""Configuration for the analysis engine.

Settings are layered YAML files read from one directory:

1. ``settings.yaml`` holds the defaults.
2. ``settings.<environment>.yaml`` overrides them, where ``environment`` is
   the (substituted) top-level ``environment`` key of the defaults.
3. ``settings.local.yaml`` holds untracked developer overrides.

String values of the form ``${VAR}`` or ``${VAR:default}`` are replaced by
environment variables, after a ``.env`` file (if any) has been loaded.
"""

import logging
import os
import re
from pathlib import Path
from typing import Any, cast

import yaml
from dotenv import load_dotenv

from trading_analysis.core.exceptions import ConfigurationError
from trading_analysis.core.numbers import DEFAULT_PRECISION, NumFactory

DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

_ENV_REFERENCE = re.compile(r"\$\{[^}]+\}")


def _read_yaml(path: Path) -> dict[str, Any]:
    """Return the mapping stored in ``path``, empty when the file is missing."""
    if not path.exists():
        return {}
    with path.open() as f:
        loaded: Any = yaml.safe_load(f)
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        msg = f"{path.name} must contain a mapping, got {type(loaded).__name__}"
        raise ConfigurationError(msg)
    return cast("dict[str, Any]", loaded)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> None:
    """Merge ``override`` into ``base`` in place, recursing into nested mappings."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(cast("dict[str, Any]", base[key]), cast("dict[str, Any]", value))
        else:
            base[key] = value


def _substitute(value: Any) -> Any:
    """Replace ``${VAR}`` / ``${VAR:default}`` strings with environment values.

    Raises:
        ConfigurationError: If a variable without default is unset, or a
            reference is embedded inside a longer string.

    """
    if isinstance(value, dict):
        return {
            k: _substitute(v)
            for k, v in value.items()  # pyright: ignore[reportUnknownVariableType]
        }
    if isinstance(value, list):
        return [_substitute(item) for item in value]  # pyright: ignore[reportUnknownVariableType]
    if not isinstance(value, str):
        return value
    if value.startswith("${") and value.endswith("}"):
        name, _, default = value[2:-1].partition(":")
        resolved = os.getenv(name, default if ":" in value else None)
        if resolved is None:
            msg = f"Required environment variable ${{{name}}} is not set and has no default"
            raise ConfigurationError(msg)
        return resolved
    if _ENV_REFERENCE.search(value):
        msg = f"Unresolved environment variable reference in: {value}"
        raise ConfigurationError(msg)
    return value


class ConfigLoader:
    """Layered YAML configuration with environment variable substitution."""

    def __init__(self, config_dir: Path | None = None) -> None:
        """Load ``.env`` and then the YAML layers found in ``config_dir``.

        Args:
            config_dir: Directory containing config files. Defaults to the
                ``config`` directory bundled with the package.

        """
        load_dotenv()
        if config_dir is None:
            config_dir = Path(__file__).parent.parent / "config"
        self.config_dir = Path(config_dir)
        self._config = self._load()

    def _load(self) -> dict[str, Any]:
        config = _substitute(_read_yaml(self.config_dir / "settings.yaml"))
        environment = config.get("environment")
        if environment:
            _deep_merge(config, _substitute(_read_yaml(self.config_dir / f"settings.{environment}.yaml")))
        _deep_merge(config, _substitute(_read_yaml(self.config_dir / "settings.local.yaml")))
        return cast("dict[str, Any]", config)

    @property
    def environment(self) -> str:
        """Return the active environment name (``development`` when unset)."""
        return str(self.get("environment", "development"))

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value by dot-notation key.

        Args:
            key: Key in dot notation (e.g., ``'costs.borrowing_rate'``).
            default: Value returned when any part of the key is missing.

        """
        current: Any = self._config
        for part in key.split("."):
            if not isinstance(current, dict):
                return default
            current = cast("dict[str, Any]", current).get(part)
            if current is None:
                return default
        return current

    def get_section(self, name: str) -> dict[str, Any]:
        """Return a top-level configuration section as a dictionary.

        Raises:
            ConfigurationError: If the section exists but is not a mapping.

        """
        result: Any = self.get(name, {})
        if isinstance(result, dict):
            return cast("dict[str, Any]", result)
        msg = f"{name} config must be a dict, got {type(result).__name__}"
        raise ConfigurationError(msg)

    def get_num_factory(self) -> NumFactory:
        """Build the ``NumFactory`` described by ``numeric.precision``.

        Raises:
            ConfigurationError: If the precision is not a positive integer.

        """
        raw = self.get("numeric.precision", DEFAULT_PRECISION)
        try:
            precision = int(raw)
        except (TypeError, ValueError) as exc:
            msg = f"numeric.precision must be an integer, got {raw!r}"
            raise ConfigurationError(msg) from exc
        if precision <= 0:
            msg = f"numeric.precision must be positive, got {precision}"
            raise ConfigurationError(msg)
        return NumFactory(precision=precision)


def configure_logging(loader: ConfigLoader | None = None) -> None:
    """Apply ``logging.level`` and ``logging.format`` to the root logger.

    Raises:
        ConfigurationError: If the level name is unknown.

    """
    cfg = loader or get_config()
    level_name = str(cfg.get("logging.level", "INFO")).upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        msg = f"Unknown logging level: {level_name}"
        raise ConfigurationError(msg)
    logging.basicConfig(level=level, format=str(cfg.get("logging.format", DEFAULT_LOG_FORMAT)))


_config: ConfigLoader | None = None


def get_config() -> ConfigLoader:
    """Return the shared ``ConfigLoader``, creating it on first use.

    Nothing is read at import time.
    """
    global _config  # noqa: PLW0603
    if _config is None:
        _config = ConfigLoader()
    return _config
