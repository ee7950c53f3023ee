# Taskboard configuration
# Override paths and endpoints via config.yaml, environment or CLI args.

import os
import logging
import yaml
from pathlib import Path
from dataclasses import dataclass, fields
from typing import Optional

from .errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_PATH = Path(__file__).parent / "config.yaml"

# Environment overrides: variable -> field
ENV_OVERRIDES = {
    "TASKBOARD_DB": "db_path",
    "TASKBOARD_API_SECRET": "api_secret",
}


@dataclass
class Config:
    """Runtime configuration for the taskboard engine and server."""

    # Storage
    db_path: str = ""  # empty = ~/.local/share/taskboard/taskboard.db
    storage_version: str = "v4"
    notification_cap: int = 50

    # Weather upstreams
    forecast_url: str = "https://api.open-meteo.com/v1/forecast"
    geocode_url: str = "https://nominatim.openstreetmap.org/reverse"
    geocode_user_agent: str = "BentoTasks/1.0"
    upstream_timeout: Optional[float] = None  # None = wait indefinitely
    forecast_days: int = 8
    hourly_points: int = 24

    # HTTP server
    api_secret: str = ""  # empty = mutating routes answer 503
    host: str = "127.0.0.1"
    port: int = 8080

    def resolve_paths(self):
        """Expand ~ and fill in the default database location."""
        if not self.db_path:
            self.db_path = str(Path.home() / ".local" / "share" / "taskboard" / "taskboard.db")
        self.db_path = str(Path(self.db_path).expanduser())

    def apply_env(self, environ=None):
        environ = os.environ if environ is None else environ
        for var, name in ENV_OVERRIDES.items():
            if environ.get(var):
                setattr(self, name, environ[var])

    @classmethod
    def load(cls, path: Optional[str] = None, strict: bool = False, environ=None) -> "Config":
        """
        Load config from a YAML file, falling back to defaults.

        The path defaults to $TASKBOARD_CONFIG, then config.yaml beside the
        package. Unknown keys are ignored. With ``strict`` a malformed file
        raises ConfigError instead of silently using defaults.
        """
        environ = os.environ if environ is None else environ
        cfg_path = Path(path or environ.get("TASKBOARD_CONFIG") or CONFIG_PATH)
        cfg = cls()
        if cfg_path.exists():
            try:
                with open(cfg_path, "r") as f:
                    data = yaml.safe_load(f) or {}
                if not isinstance(data, dict):
                    raise ConfigError(f"{cfg_path}: expected a mapping, got {type(data).__name__}")
                known = {f.name for f in fields(cls)}
                cfg = cls(**{k: v for k, v in data.items() if k in known})
            except (OSError, yaml.YAMLError, ConfigError, TypeError) as e:
                if strict:
                    if isinstance(e, ConfigError):
                        raise
                    raise ConfigError(f"{cfg_path}: {e}") from e
                logger.warning("Ignoring config %s: %s", cfg_path, e)
                cfg = cls()
        elif strict and path:
            raise ConfigError(f"Config file not found: {cfg_path}")
        cfg.apply_env(environ)
        cfg.resolve_paths()
        return cfg
