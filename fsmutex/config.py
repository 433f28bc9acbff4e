"""Mutex configuration.

Settings are resolved explicitly and handed to ``FileMutex`` instead of
being read from ambient state inside the lock. They can come from
defaults, environment variables or a YAML file.

Environment variables:
    FSMUTEX_ENV: Environment name (falls back to ENVIRONMENT, then "development")
    FSMUTEX_ROOT: Root directory for lock directories (default: system temp dir)
    FSMUTEX_PREFIX: Lock directory prefix (default: "fsmutex")
    FSMUTEX_MAX_WAIT: Seconds to poll before checking holder liveness (default: 2)
    FSMUTEX_POLL_INTERVAL: Seconds between existence checks (default: 1)
"""

from __future__ import annotations

import logging
import math
import os
import re
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from fsmutex.exceptions import ConfigValidationError
from fsmutex.paths import is_safe_segment, lock_directory

logger = logging.getLogger(__name__)

DEFAULT_ENVIRONMENT = "development"
DEFAULT_PREFIX = "fsmutex"
ONE_SECOND = 1.0
DEFAULT_MAX_WAIT = ONE_SECOND * 2
DEFAULT_POLL_INTERVAL = ONE_SECOND

_ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::([^}]*))?\}")


def resolve_env_vars(value: Any) -> Any:
    """Resolve ${VAR} and ${VAR:default} placeholders, keeping unknown vars intact."""

    if isinstance(value, str):
        def replacer(match: re.Match[str]) -> str:
            env_value = os.environ.get(match.group(1))
            if env_value is not None:
                return env_value
            if match.group(2) is not None:
                return match.group(2)
            return match.group(0)

        return _ENV_VAR_PATTERN.sub(replacer, value)

    if isinstance(value, dict):
        return {k: resolve_env_vars(v) for k, v in value.items()}

    if isinstance(value, list):
        return [resolve_env_vars(item) for item in value]

    return value


def _default_root() -> Path:
    return Path(tempfile.gettempdir())


def _as_seconds(value: Any, key: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ConfigValidationError(
            f"Expected a number of seconds, got {value!r}", key=key
        ) from None


@dataclass
class MutexConfig:
    """Settings shared by every FileMutex of one environment.

    Attributes:
        environment: Environment name, used in the lock directory name
        root_dir: Directory under which the lock directory is created
        prefix: Lock directory name prefix
        max_wait: Seconds to poll before checking whether the holder is alive
        poll_interval: Seconds to sleep between existence checks
    """

    environment: str = DEFAULT_ENVIRONMENT
    root_dir: Path = field(default_factory=_default_root)
    prefix: str = DEFAULT_PREFIX
    max_wait: float = DEFAULT_MAX_WAIT
    poll_interval: float = DEFAULT_POLL_INTERVAL

    def __post_init__(self) -> None:
        self.root_dir = Path(self.root_dir).expanduser()
        self.max_wait = _as_seconds(self.max_wait, "max_wait")
        self.poll_interval = _as_seconds(self.poll_interval, "poll_interval")
        self.validate()

    def validate(self) -> None:
        """Raise ConfigValidationError if any setting is unusable."""
        if not is_safe_segment(self.environment):
            raise ConfigValidationError(
                f"Environment name {self.environment!r} is not a valid directory name",
                key="environment",
            )
        if not is_safe_segment(self.prefix):
            raise ConfigValidationError(
                f"Prefix {self.prefix!r} is not a valid directory name", key="prefix"
            )
        for name in ("max_wait", "poll_interval"):
            if not math.isfinite(getattr(self, name)):
                raise ConfigValidationError(f"{name} must be a finite number of seconds", key=name)
        if self.max_wait < 0:
            raise ConfigValidationError("max_wait must be >= 0", key="max_wait")
        if self.poll_interval <= 0:
            raise ConfigValidationError("poll_interval must be > 0", key="poll_interval")

    @property
    def lock_directory(self) -> Path:
        return lock_directory(self.root_dir, self.prefix, self.environment)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MutexConfig":
        """Create a config from a dictionary with environment variable resolution.

        Args:
            data: Configuration dictionary; unknown keys are ignored

        Returns:
            MutexConfig instance
        """
        if not isinstance(data, Mapping):
            raise ConfigValidationError("Mutex configuration must be a dictionary")

        data = resolve_env_vars(dict(data))
        kwargs: Dict[str, Any] = {}
        for name in ("environment", "root_dir", "prefix", "max_wait", "poll_interval"):
            if data.get(name) is not None:
                kwargs[name] = data[name]
        if "environment" in kwargs:
            kwargs["environment"] = str(kwargs["environment"])
        return cls(**kwargs)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "MutexConfig":
        """Create a config from FSMUTEX_* environment variables."""
        env = os.environ if environ is None else environ
        data: Dict[str, Any] = {
            "environment": env.get("FSMUTEX_ENV") or env.get("ENVIRONMENT"),
            "root_dir": env.get("FSMUTEX_ROOT"),
            "prefix": env.get("FSMUTEX_PREFIX"),
            "max_wait": env.get("FSMUTEX_MAX_WAIT"),
            "poll_interval": env.get("FSMUTEX_POLL_INTERVAL"),
        }
        return cls.from_dict({k: v for k, v in data.items() if v})

    @classmethod
    def from_yaml(cls, path: Path) -> "MutexConfig":
        """Load config from a YAML file.

        The settings may sit at the top level or under a ``mutex:`` key.

        Raises:
            ConfigValidationError: If the file is missing, empty or invalid
        """
        path = Path(path)
        if not path.exists():
            raise ConfigValidationError("Mutex config file not found", config_path=str(path))

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise ConfigValidationError(
                f"Invalid YAML: {exc}", config_path=str(path)
            ) from exc

        if not data:
            raise ConfigValidationError("Mutex config file is empty", config_path=str(path))
        if isinstance(data, dict) and isinstance(data.get("mutex"), dict):
            data = data["mutex"]

        logger.debug("Loaded mutex config from %s", path)
        return cls.from_dict(data)
