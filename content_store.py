"""Content library kept in an external key-value store (DynamoDB).

The whole library lives in one item addressed by a fixed partition key::

    {"id": "content-library",
     "contentJson": "{\"ocean sounds\": {\"url\": ..., \"title\": ...}}",
     "defaultKey": "ocean sounds"}

:class:`CachedStoreCatalog` reads that item once per process and serves
every request from the snapshot. A failed read is cached too; only a
:meth:`CachedStoreCatalog.save` or :meth:`CachedStoreCatalog.invalidate`
makes it read again.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Mapping, Optional, Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from catalog import ContentCatalog, ContentItem

log = logging.getLogger(__name__)

CONTENT_ATTR = "contentJson"
DEFAULT_ATTR = "defaultKey"


class ContentStore(Protocol):
    def get_record(self) -> Optional[Dict[str, Any]]: ...

    def put_record(self, content_json: str, default_key: Optional[str]) -> None: ...


class DynamoContentStore:
    """Get/put of the single content-library item in a DynamoDB table."""

    def __init__(self, table_name: str, partition_key: str = "content-library",
                 region_name: Optional[str] = None, resource: Any = None):
        self.table_name = table_name
        self.partition_key = partition_key
        self.region_name = region_name
        self._resource = resource
        self._table = None

    @property
    def table(self):
        if self._table is None:
            if self._resource is None:
                self._resource = boto3.resource("dynamodb", region_name=self.region_name)
            self._table = self._resource.Table(self.table_name)
        return self._table

    def get_record(self) -> Optional[Dict[str, Any]]:
        result = self.table.get_item(Key={"id": self.partition_key})
        return result.get("Item")

    def put_record(self, content_json: str, default_key: Optional[str]) -> None:
        item = {"id": self.partition_key, CONTENT_ATTR: content_json}
        if default_key:
            item[DEFAULT_ATTR] = default_key
        self.table.put_item(Item=item)


class CachedStoreCatalog:
    """Catalog backed by a :class:`ContentStore` with a process-lifetime cache.

    ``default_key`` overrides the default stored in the record when set.
    Concurrent first reads may both hit the store; whichever finishes last
    becomes the snapshot.
    """

    def __init__(self, store: ContentStore, default_key: Optional[str] = None):
        self.store = store
        self.default_override = default_key
        self._snapshot: Optional[ContentCatalog] = None

    def _fetch(self) -> ContentCatalog:
        try:
            record = self.store.get_record()
        except (BotoCoreError, ClientError) as exc:
            log.error("Failed to load content library from store: %s", exc)
            return ContentCatalog.empty()
        except Exception:
            log.exception("Unexpected error loading content library from store")
            return ContentCatalog.empty()

        if not record:
            log.warning("No content library record in store")
            return ContentCatalog.empty()

        default_key = self.default_override or record.get(DEFAULT_ATTR)
        catalog = ContentCatalog.from_json(record.get(CONTENT_ATTR), default_key)
        log.info("Loaded %d content item(s) from store", len(catalog))
        return catalog

    @property
    def snapshot(self) -> ContentCatalog:
        snapshot = self._snapshot
        if snapshot is None:
            snapshot = self._fetch()
            self._snapshot = snapshot
        return snapshot

    def invalidate(self) -> None:
        self._snapshot = None

    def save(self, mapping: Mapping[str, Any], default_key: Optional[str] = None) -> bool:
        """Replace the stored library with ``mapping``; ``False`` on failure."""
        try:
            content_json = json.dumps(dict(mapping))
        except (TypeError, ValueError) as exc:
            log.error("Content library is not JSON serializable: %s", exc)
            return False
        try:
            self.store.put_record(content_json, default_key)
        except (BotoCoreError, ClientError) as exc:
            log.error("Failed to save content library: %s", exc)
            return False
        except Exception:
            log.exception("Unexpected error saving content library")
            return False
        finally:
            self.invalidate()
        log.info("Saved %d content item(s) to store", len(mapping))
        return True

    # Catalog interface, answered from the snapshot
    @property
    def default_key(self) -> Optional[str]:
        return self.snapshot.default_key

    def resolve(self, key: Any) -> Optional[ContentItem]:
        return self.snapshot.resolve(key)

    def list(self) -> List[str]:
        return self.snapshot.list()

    def describe_for_speech(self) -> str:
        return self.snapshot.describe_for_speech()

    def get_default(self) -> Optional[ContentItem]:
        return self.snapshot.get_default()

    def is_empty(self) -> bool:
        return self.snapshot.is_empty()
