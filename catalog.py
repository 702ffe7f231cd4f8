"""Content catalog: the named audio streams the skill can play.

A catalog maps a normalized content key ("ocean sounds") to a
:class:`ContentItem` and knows which key plays by default. It can be built
from a static table, from environment settings, or from the external
content store (see :mod:`content_store`); callers only see the
:class:`Catalog` interface.

Bad source data never raises here. It is logged and the catalog comes up
empty, so the skill answers "nothing configured" instead of failing.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Protocol

from config import SkillConfig

log = logging.getLogger(__name__)

NOTHING_CONFIGURED = "nothing configured"

# Built-in content, also what setup_content.py seeds the store with
DEFAULT_CONTENT: Dict[str, Dict[str, str]] = {
    "ocean sounds": {"url": "https://example.com/ocean.mp3", "title": "Ocean Sounds"},
    "jazz": {"url": "https://example.com/jazz.mp3", "title": "Jazz Radio"},
    "white noise": {"url": "https://example.com/whitenoise.mp3", "title": "White Noise"},
}
DEFAULT_CONTENT_KEY = "ocean sounds"


def normalize_key(key: Any) -> Optional[str]:
    """Case-fold and trim ``key``; ``None`` if it is not a usable string."""
    if not isinstance(key, str):
        return None
    key = key.strip().lower()
    return key or None


def describe_keys(keys: List[str]) -> str:
    if not keys:
        return NOTHING_CONFIGURED
    if len(keys) == 1:
        return keys[0]
    return ", ".join(keys[:-1]) + ", or " + keys[-1]


@dataclass(frozen=True)
class ContentItem:
    key: str
    title: str
    url: str


class Catalog(Protocol):
    """What the router needs from any catalog backend."""

    @property
    def default_key(self) -> Optional[str]: ...

    def resolve(self, key: Any) -> Optional[ContentItem]: ...

    def list(self) -> List[str]: ...

    def describe_for_speech(self) -> str: ...

    def get_default(self) -> Optional[ContentItem]: ...

    def is_empty(self) -> bool: ...


class ContentCatalog:
    """Immutable key -> :class:`ContentItem` table with a default pointer."""

    def __init__(self, items: Optional[List[ContentItem]] = None, default_key: Optional[str] = None):
        self._items: Dict[str, ContentItem] = {}
        for item in items or []:
            if item.key in self._items:
                log.warning("Duplicate content key %r ignored", item.key)
                continue
            self._items[item.key] = item

        wanted = normalize_key(default_key)
        if wanted is not None and wanted not in self._items:
            log.warning("Default content key %r is not in the catalog", default_key)
            wanted = None
        if wanted is None and self._items:
            wanted = next(iter(self._items))
        self._default_key = wanted

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------
    @classmethod
    def empty(cls) -> "ContentCatalog":
        return cls()

    @classmethod
    def from_mapping(cls, mapping: Any, default_key: Optional[str] = None) -> "ContentCatalog":
        """Build from ``{key: {"url": ..., "title": ...}}``.

        Entries without a URL are skipped. A missing title falls back to the
        key. Anything that is not a mapping yields an empty catalog.
        """
        if not isinstance(mapping, Mapping):
            log.error("Content library must be a JSON object, got %s", type(mapping).__name__)
            return cls.empty()

        items = []
        for raw_key, entry in mapping.items():
            key = normalize_key(raw_key)
            if key is None:
                log.warning("Skipping content entry with unusable key %r", raw_key)
                continue
            if not isinstance(entry, Mapping) or not isinstance(entry.get("url"), str) or not entry["url"]:
                log.warning("Skipping content %r: no url", raw_key)
                continue
            title = entry.get("title")
            if not isinstance(title, str) or not title.strip():
                title = key
            items.append(ContentItem(key=key, title=title.strip(), url=entry["url"]))
        return cls(items, default_key)

    @classmethod
    def from_json(cls, text: Optional[str], default_key: Optional[str] = None) -> "ContentCatalog":
        if not text:
            return cls.empty()
        try:
            mapping = json.loads(text)
        except (TypeError, ValueError) as exc:
            log.error("Failed to parse content library JSON: %s", exc)
            return cls.empty()
        return cls.from_mapping(mapping, default_key)

    @classmethod
    def from_env_json(cls, environ: Mapping[str, str], setting: str = "CONTENT_LIBRARY_JSON",
                      default_key: Optional[str] = None) -> "ContentCatalog":
        text = environ.get(setting)
        if not text:
            log.warning("%s environment variable not set", setting)
            return cls.empty()
        return cls.from_json(text, default_key)

    @classmethod
    def from_env_urls(cls, environ: Mapping[str, str], url_settings: Mapping[str, str],
                      default_key: Optional[str] = None) -> "ContentCatalog":
        """One URL setting per item, e.g. ``OCEAN_SOUNDS_URL`` -> "ocean sounds"."""
        mapping = {}
        for setting, key in url_settings.items():
            url = (environ.get(setting) or "").strip()
            if url:
                mapping[key] = {"url": url, "title": key.title()}
        if not mapping:
            log.warning("None of %s is set", ", ".join(url_settings))
        return cls.from_mapping(mapping, default_key)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @property
    def default_key(self) -> Optional[str]:
        return self._default_key

    def resolve(self, key: Any) -> Optional[ContentItem]:
        normalized = normalize_key(key)
        if normalized is None:
            return None
        return self._items.get(normalized)

    def list(self) -> List[str]:
        return list(self._items)

    def describe_for_speech(self) -> str:
        return describe_keys(self.list())

    def get_default(self) -> Optional[ContentItem]:
        return self.resolve(self._default_key)

    def is_empty(self) -> bool:
        return not self._items

    def to_mapping(self) -> Dict[str, Dict[str, str]]:
        return {item.key: {"url": item.url, "title": item.title} for item in self._items.values()}

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"ContentCatalog(keys={self.list()!r}, default_key={self._default_key!r})"


def build_catalog(config: SkillConfig, environ: Optional[Mapping[str, str]] = None, store=None) -> Catalog:
    """Pick the catalog backend named by ``config.content_source``."""
    if environ is None:
        environ = os.environ
    source = config.content_source
    log.info("Loading content catalog from %s", source)

    if source == "static":
        return ContentCatalog.from_mapping(DEFAULT_CONTENT, config.default_key or DEFAULT_CONTENT_KEY)
    if source == "env_json":
        return ContentCatalog.from_env_json(environ, config.content_json_setting, config.default_key)
    if source == "env_urls":
        return ContentCatalog.from_env_urls(environ, config.url_settings, config.default_key)

    config.validate()
    from content_store import CachedStoreCatalog, DynamoContentStore

    if store is None:
        store = DynamoContentStore(
            config.table_name,
            partition_key=config.partition_key,
            region_name=config.region_name,
        )
    return CachedStoreCatalog(store, default_key=config.default_key)
