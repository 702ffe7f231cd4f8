"""Process configuration for the Home Stream skill.

Values come from the environment (optionally a ``.env`` file). The loaded
:class:`SkillConfig` is passed explicitly into the catalog builders so
nothing else reads ``os.environ`` directly.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

from dotenv import load_dotenv

CONTENT_SOURCES = ("static", "env_json", "env_urls", "store")

# Per-item URL settings: environment variable -> content key
DEFAULT_URL_SETTINGS: Dict[str, str] = {
    "OCEAN_SOUNDS_URL": "ocean sounds",
    "AIR_PLAY_URL": "air play",
}


class ConfigError(ValueError):
    """Raised when the configuration itself is unusable (not its data)."""


@dataclass(frozen=True)
class SkillConfig:
    content_source: str = "env_json"
    default_key: Optional[str] = None
    content_json_setting: str = "CONTENT_LIBRARY_JSON"
    url_settings: Mapping[str, str] = field(default_factory=lambda: dict(DEFAULT_URL_SETTINGS))
    table_name: Optional[str] = None
    partition_key: str = "content-library"
    region_name: Optional[str] = None
    log_level: str = "INFO"

    def validate(self) -> "SkillConfig":
        if self.content_source not in CONTENT_SOURCES:
            raise ConfigError(
                f"Unknown CONTENT_SOURCE {self.content_source!r}; "
                f"expected one of {', '.join(CONTENT_SOURCES)}"
            )
        if self.content_source == "store" and not self.table_name:
            raise ConfigError("CONTENT_TABLE_NAME is required when CONTENT_SOURCE=store")
        return self


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def load_config(environ: Optional[Mapping[str, str]] = None, validate: bool = True) -> SkillConfig:
    """Build a :class:`SkillConfig` from ``environ`` (defaults to ``os.environ``).

    A ``.env`` file is only consulted when reading the real process
    environment. Pass ``validate=False`` to read the settings without
    checking that a catalog can be built from them.
    """
    if environ is None:
        load_dotenv()
        environ = os.environ

    config = SkillConfig(
        content_source=(_clean(environ.get("CONTENT_SOURCE")) or "env_json").lower(),
        default_key=_clean(environ.get("DEFAULT_CONTENT_KEY")),
        table_name=_clean(environ.get("CONTENT_TABLE_NAME")),
        partition_key=_clean(environ.get("CONTENT_PARTITION_KEY")) or "content-library",
        region_name=_clean(environ.get("AWS_REGION")),
        log_level=(_clean(environ.get("LOG_LEVEL")) or "INFO").upper(),
    )
    return config.validate() if validate else config
