"""Configuration constants and utilities for the bandwidth explorer."""
from __future__ import annotations
import logging
import os
import yaml
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional
from enum import Enum

from .exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://cdn.sanity.io"

# Environment overrides
CONFIG_ENV_VAR = "BANDWIDTH_TUI_CONFIG"
BASE_URL_ENV_VAR = "BANDWIDTH_TUI_BASE_URL"

# Log line field names
BODY_FIELD = "body"
URL_FIELD = "url"


class AssetKind(Enum):
    """Kind of request a URL path classifies as."""
    IMAGE = "image"
    FILE = "file"
    QUERY = "query"
    OTHER = "other"

    @property
    def label(self) -> str:
        return _KIND_LABELS[self]

    @property
    def group_label(self) -> str:
        return _KIND_GROUP_LABELS[self]

    @property
    def color(self) -> str:
        return _KIND_COLORS[self]

    @property
    def has_extensions(self) -> bool:
        return self in (AssetKind.IMAGE, AssetKind.FILE)

    @classmethod
    def all_values(cls) -> list[str]:
        return [kind.value for kind in cls]


_KIND_LABELS = {
    AssetKind.IMAGE: "I",
    AssetKind.FILE: "F",
    AssetKind.QUERY: "Q",
    AssetKind.OTHER: "?",
}

_KIND_GROUP_LABELS = {
    AssetKind.IMAGE: "Images",
    AssetKind.FILE: "Files",
    AssetKind.QUERY: "GROQ Queries",
    AssetKind.OTHER: "Other",
}

_KIND_COLORS = {
    AssetKind.IMAGE: "green",
    AssetKind.FILE: "blue",
    AssetKind.QUERY: "yellow",
    AssetKind.OTHER: "bright_black",
}


class SortField(Enum):
    """Sortable table columns, valued by their shortcut key."""
    ID = "d"
    EXT = "e"
    REQUESTS = "r"
    AVG_SIZE = "s"
    BANDWIDTH = "b"

    @property
    def shortcut(self) -> str:
        return self.value

    @property
    def is_numeric(self) -> bool:
        return self in (SortField.REQUESTS, SortField.AVG_SIZE, SortField.BANDWIDTH)

    @classmethod
    def from_shortcut(cls, key: str) -> Optional["SortField"]:
        for field in cls:
            if field.value == key:
                return field
        return None

    @classmethod
    def from_name(cls, name: str) -> "SortField":
        """Resolve a column from its name ("bandwidth", "avg_size") or shortcut."""
        text = str(name).strip().lower().replace("-", "_")
        for field in cls:
            if text in (field.name.lower(), field.value):
                return field
        raise ConfigError(f"Unknown sort column: {name!r}")

    @classmethod
    def all_values(cls) -> list[str]:
        return [field.name.lower() for field in cls]


class ViewMode(Enum):
    """Tabs of the interactive view."""
    ASSET = "asset"
    TYPE = "type"

    @property
    def title(self) -> str:
        return "By Asset" if self is ViewMode.ASSET else "By Type"

    @classmethod
    def from_name(cls, name: str) -> "ViewMode":
        text = str(name).strip().lower()
        for mode in cls:
            if mode.value == text:
                return mode
        raise ConfigError(f"Unknown view: {name!r}")

    @classmethod
    def all_values(cls) -> list[str]:
        return [mode.value for mode in cls]


class SizeField(Enum):
    """Byte-count field names inside a log line body."""
    REQUEST_SIZE = "requestSize"
    RESPONSE_SIZE = "responseSize"

    @classmethod
    def all_values(cls) -> list[str]:
        return [field.value for field in cls]


@dataclass
class Settings:
    """Runtime settings, from defaults, a YAML file and CLI flags."""
    base_url: str = DEFAULT_BASE_URL
    sort_field: SortField = SortField.BANDWIDTH
    descending: bool = True
    view_mode: ViewMode = ViewMode.ASSET
    log_level: str = "WARNING"
    log_file: Optional[str] = None

    def updated(self, **changes: Any) -> "Settings":
        """Return a copy with every non-None change applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


def load_settings_config(cfg_path: Path) -> Dict:
    try:
        with cfg_path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigError(f"Cannot read settings file {cfg_path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {cfg_path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Settings file {cfg_path} must contain a mapping")
    return data


def settings_from_mapping(data: Dict[str, Any]) -> Settings:
    """Build Settings from a plain mapping, validating enum-valued keys."""
    known = {f.name for f in fields(Settings)}
    values: Dict[str, Any] = {}
    for key, value in data.items():
        if key not in known:
            logger.warning(f"Ignoring unknown setting: {key}")
            continue
        if value is None:
            continue
        if key == "sort_field":
            value = SortField.from_name(value)
        elif key == "view_mode":
            value = ViewMode.from_name(value)
        elif key == "descending":
            if not isinstance(value, bool):
                raise ConfigError(f"descending must be true or false, got {value!r}")
        elif key == "log_level":
            value = str(value).upper()
            if not isinstance(logging.getLevelName(value), int):
                raise ConfigError(f"Unknown log level: {value}")
        else:
            value = str(value)
        values[key] = value
    return Settings(**values)


def load_settings(cfg_path: Optional[Path] = None) -> Settings:
    """Load settings from cfg_path, or the file named by BANDWIDTH_TUI_CONFIG.

    Without either, defaults apply. BANDWIDTH_TUI_BASE_URL overrides base_url.
    """
    if cfg_path is None and os.getenv(CONFIG_ENV_VAR):
        cfg_path = Path(os.environ[CONFIG_ENV_VAR])

    settings = Settings()
    if cfg_path is not None:
        settings = settings_from_mapping(load_settings_config(Path(cfg_path)))
        logger.debug(f"Loaded settings from {cfg_path}: {settings}")

    base_url = os.getenv(BASE_URL_ENV_VAR)
    if base_url:
        settings = settings.updated(base_url=base_url)
    return settings
