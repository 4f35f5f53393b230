from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_CONF_PATH = Path("local") / "dupe-check.conf"


@dataclass(frozen=True)
class Settings:
    default_threshold: int = 65
    search_limit: int = 100
    exact_phone_limit: int = 10
    min_phone_digits: int = 5
    # name terms this short relax the threshold by short_name_relaxation
    short_name_length: int = 5
    short_name_relaxation: int = 25
    relaxed_threshold_floor: int = 30
    # single-field fallbacks for phone-led searches
    phone_fallback_similarity: int = 75
    name_fallback_similarity: int = 85
    default_region: str = "GR"
    database_url: str | None = None


DEFAULT_CONF = """# dupe-check local config (TOML)
default_threshold = 65
search_limit = 100
exact_phone_limit = 10
min_phone_digits = 5
short_name_length = 5
short_name_relaxation = 25
relaxed_threshold_floor = 30
phone_fallback_similarity = 75
name_fallback_similarity = 85
default_region = "GR"
# database_url = "sqlite:///var/customers.db"
"""


def load_settings(path: Path | None = None) -> Settings:
    """Read settings from a flat TOML file; missing keys keep their defaults."""
    conf = Path(path) if path is not None else DEFAULT_CONF_PATH
    settings = Settings()
    if not conf.exists():
        return settings
    try:
        data = tomllib.loads(conf.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as exc:
        logger.warning("ignoring unreadable config %s: %s", conf, exc)
        return settings
    return _apply(settings, data, conf)


def _apply(settings: Settings, data: dict[str, Any], source: Path) -> Settings:
    updates: dict[str, Any] = {}
    for f in fields(Settings):
        if f.name not in data:
            continue
        value = data[f.name]
        default = getattr(settings, f.name)
        try:
            if isinstance(default, int):
                updates[f.name] = int(value)
            else:
                updates[f.name] = None if value in ("", None) else str(value)
        except (TypeError, ValueError):
            logger.warning("%s: bad value for %s: %r", source, f.name, value)
    unknown = sorted(set(data) - {f.name for f in fields(Settings)})
    if unknown:
        logger.debug("%s: unknown keys ignored: %s", source, ", ".join(unknown))
    return replace(settings, **updates)


def write_default_config(path: Path | None = None) -> Path:
    """Create the config file with defaults unless it already exists."""
    conf = Path(path) if path is not None else DEFAULT_CONF_PATH
    conf.parent.mkdir(parents=True, exist_ok=True)
    if not conf.exists():
        conf.write_text(DEFAULT_CONF, encoding="utf-8")
    return conf
