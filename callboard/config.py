"""callboard.config

Configuration for calendar exports.

- `Config` is a typed dataclass built with `Config.from_dict()`, which coerces
  and bounds values instead of failing on small mistakes.
- `load_config()` reads a YAML file (PyYAML).
- `ConfigManager` layers `.env` defaults and CALLBOARD_* environment variables
  on top of the file.
"""

from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

import yaml

from .exceptions import ConfigError
from .timeutils import DEFAULT_CALENDAR_TIMEZONE

logger = logging.getLogger(__name__)


@dataclass
class Config:
    """Typed configuration for callboard.

    Fields:
        calendar_name: X-WR-CALNAME of exported calendars
        calendar_timezone: IANA zone advertised in exports and used for display
        prodid: PRODID of exported calendars
        uid_domain: domain part of generated event UIDs
        pdf_branding: footer text of resume PDFs
        watermark_opacity: resume watermark opacity (0..1)
        quick_select_step_minutes: step of suggested agenda item times (5..240)
        log_level: logging level name
        logo_timeout_seconds: timeout for downloading watermark logos
    """

    calendar_name: str = "Production Calendar"
    calendar_timezone: str = DEFAULT_CALENDAR_TIMEZONE
    prodid: str = "-//Callboard//Casting Calendar//EN"
    uid_domain: str = "callboard.local"
    pdf_branding: str = "Generated via Callboard"
    watermark_opacity: float = 0.1
    quick_select_step_minutes: int = 30
    log_level: str = "INFO"
    logo_timeout_seconds: float = 10.0

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> Config:
        """Create Config from a plain mapping, applying defaults and validation.

        Numeric values are coerced; out-of-range values are clamped with a
        warning; unknown keys are ignored.
        """
        if data is None:
            data = {}
        defaults = cls()

        def _coerce_str(key: str, default: str) -> str:
            raw = data.get(key)
            return str(raw) if raw is not None and str(raw).strip() else default

        def _coerce_number(key: str, default: float, kind: type) -> Any:
            raw = data.get(key, default)
            try:
                return kind(raw)
            except (TypeError, ValueError):
                logger.warning("Config %s=%r is not a number; using default %s", key, raw, default)
                return default

        opacity = _coerce_number("watermark_opacity", defaults.watermark_opacity, float)
        if not 0.0 <= opacity <= 1.0:
            clamped = min(max(opacity, 0.0), 1.0)
            logger.warning("watermark_opacity %s outside 0..1; coercing to %s", opacity, clamped)
            opacity = clamped

        step = _coerce_number("quick_select_step_minutes", defaults.quick_select_step_minutes, int)
        if step < 5:
            logger.warning("quick_select_step_minutes %d below minimum; coercing to 5", step)
            step = 5
        elif step > 240:
            logger.warning("quick_select_step_minutes %d above maximum; coercing to 240", step)
            step = 240

        timeout = _coerce_number("logo_timeout_seconds", defaults.logo_timeout_seconds, float)
        if timeout <= 0:
            logger.warning("logo_timeout_seconds %s must be positive; using default", timeout)
            timeout = defaults.logo_timeout_seconds

        return cls(
            calendar_name=_coerce_str("calendar_name", defaults.calendar_name),
            calendar_timezone=_coerce_str("calendar_timezone", defaults.calendar_timezone),
            prodid=_coerce_str("prodid", defaults.prodid),
            uid_domain=_coerce_str("uid_domain", defaults.uid_domain),
            pdf_branding=_coerce_str("pdf_branding", defaults.pdf_branding),
            watermark_opacity=opacity,
            quick_select_step_minutes=step,
            log_level=_coerce_str("log_level", defaults.log_level).upper(),
            logo_timeout_seconds=timeout,
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _load_yaml(path: Path) -> dict[str, Any]:
    """Load a mapping from a YAML file.

    Raises:
        ConfigError: if the file is unreadable, not YAML, or not a mapping
    """
    try:
        loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"Unable to read config file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Unable to parse config file {path}: {exc}") from exc

    # safe_load returns None for empty files
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"Config file {path} must contain a mapping, got {type(loaded).__name__}")
    return loaded


def load_config(path: str | Path | None = None) -> Config:
    """Load configuration from ``path``, or defaults when no path is given."""
    if path is None:
        return Config()
    config_path = Path(path)
    logger.debug("Loading config from %s", config_path)
    return Config.from_dict(_load_yaml(config_path))


def parse_env_file(path: Path) -> dict[str, str]:
    """Parse a .env file and return key-value pairs.

    Skips blank lines, comments and lines without "="; strips surrounding
    quotes from values. A missing or unreadable file yields an empty dict.
    """
    if not path.exists():
        return {}

    result: dict[str, str] = {}
    try:
        content = path.read_text(encoding="utf-8")
    except OSError:
        logger.debug("Failed to read .env file (continuing): %s", path, exc_info=True)
        return result

    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, val = line.split("=", 1)
        key = key.strip()
        if key:
            result[key] = val.strip().strip('"').strip("'")
    return result


# Environment variable -> config key
ENV_KEYS = {
    "CALLBOARD_CALENDAR_NAME": "calendar_name",
    "CALLBOARD_TIMEZONE": "calendar_timezone",
    "CALLBOARD_PRODID": "prodid",
    "CALLBOARD_UID_DOMAIN": "uid_domain",
    "CALLBOARD_PDF_BRANDING": "pdf_branding",
    "CALLBOARD_WATERMARK_OPACITY": "watermark_opacity",
    "CALLBOARD_QUICK_SELECT_STEP": "quick_select_step_minutes",
    "CALLBOARD_LOG_LEVEL": "log_level",
    "CALLBOARD_LOGO_TIMEOUT": "logo_timeout_seconds",
}


class ConfigManager:
    """Manages configuration from a YAML file, a .env file and environment variables.

    Precedence (highest first): process environment, .env file, YAML file,
    built-in defaults.
    """

    def __init__(self, env_file_path: Path | None = None):
        self.env_file_path = env_file_path or Path.cwd() / ".env"

    def load_env_file(self) -> list[str]:
        """Load .env file into the environment without overriding existing variables.

        Returns:
            Keys that were set from the .env file
        """
        if not self.env_file_path.exists():
            logger.debug("No .env file found at %s", self.env_file_path)
            return []

        set_keys = []
        for key, val in parse_env_file(self.env_file_path).items():
            if key not in os.environ:
                os.environ[key] = val
                set_keys.append(key)

        if set_keys:
            logger.debug("Loaded .env defaults for keys: %s", ", ".join(set_keys))
        return set_keys

    def build_config_from_env(self) -> dict[str, Any]:
        """Collect CALLBOARD_* environment variables into a config mapping."""
        cfg: dict[str, Any] = {}
        for env_key, config_key in ENV_KEYS.items():
            value = os.environ.get(env_key)
            if value:
                cfg[config_key] = value
        return cfg

    def load(self, config_path: str | Path | None = None) -> Config:
        """Build the effective configuration."""
        self.load_env_file()
        data: dict[str, Any] = _load_yaml(Path(config_path)) if config_path is not None else {}
        data.update(self.build_config_from_env())
        config = Config.from_dict(data)
        logger.debug("Effective config: %s", config.to_dict())
        return config
