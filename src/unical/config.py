"""Configuration management for unical."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .core.timegrid import GridConfig
from .core.window import ViewMode
from .errors import ConfigError

logger = logging.getLogger(__name__)

UNICAL_HOME = Path(os.environ.get("UNICAL_HOME", Path.home() / "unical"))
CONFIG_FILE = UNICAL_HOME / "config" / "unical.conf"

_INT_KEYS = {
    "grid_start_hour",
    "grid_end_hour",
    "hour_height",
    "snap_minutes",
    "min_event_height",
}


@dataclass
class Config:
    """unical configuration."""

    api_base: str = ""
    api_token: str = ""
    organization_id: str = ""
    timezone: str = "Europe/Warsaw"
    grid_start_hour: int = 7
    grid_end_hour: int = 21
    hour_height: int = 60
    snap_minutes: int = 15
    min_event_height: int = 18
    default_view: str = "week"
    # Module whose records mirror into the calendar and need a second write
    secondary_module: str = "gabinet"
    secondary_id_key: str = "appointmentId"
    request_timeout: float = 10.0

    def grid(self) -> GridConfig:
        return GridConfig(
            start_hour=self.grid_start_hour,
            end_hour=self.grid_end_hour,
            hour_height=self.hour_height,
            snap_minutes=self.snap_minutes,
            min_event_height=self.min_event_height,
        )

    def tz(self) -> ZoneInfo:
        try:
            return ZoneInfo(self.timezone)
        except ZoneInfoNotFoundError as e:
            raise ConfigError(f"Unknown timezone: {self.timezone}") from e

    def view_mode(self) -> ViewMode:
        try:
            return ViewMode(self.default_view)
        except ValueError:
            logger.warning(f"Invalid DEFAULT_VIEW {self.default_view!r}, using week")
            return ViewMode.WEEK


def _unquote(value: str) -> str:
    """Strip quotes, or an inline comment from an unquoted value."""
    for quote in ('"', "'"):
        if value.startswith(quote):
            end_quote = value.find(quote, 1)
            return value[1:end_quote] if end_quote != -1 else value[1:]
    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def parse_config(text: str) -> Config:
    """Parse key=value config text."""
    config = Config()

    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _unquote(value.strip())

        if key in _INT_KEYS:
            try:
                setattr(config, key, int(value))
            except ValueError:
                logger.warning(f"Ignoring non-integer {key.upper()}: {value!r}")
            continue

        match key:
            case "api_base":
                config.api_base = value.rstrip("/")
            case "api_token":
                config.api_token = value
            case "organization_id":
                config.organization_id = value
            case "timezone":
                config.timezone = value
            case "default_view":
                config.default_view = value.lower()
            case "secondary_module":
                config.secondary_module = value
            case "secondary_id_key":
                config.secondary_id_key = value
            case "request_timeout":
                try:
                    config.request_timeout = float(value)
                except ValueError:
                    logger.warning(f"Ignoring invalid REQUEST_TIMEOUT: {value!r}")
            case _:
                logger.debug(f"Unknown config key: {key}")

    return config


def load_config(path: Path | None = None) -> Config:
    """Load configuration from unical.conf, falling back to defaults."""
    path = path or CONFIG_FILE
    if not path.exists():
        return Config()
    return parse_config(path.read_text())
