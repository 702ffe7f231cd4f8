"""Seed the content store with an initial library.

Run once after creating the table::

    python setup_content.py --table home-stream-content
    python setup_content.py --table home-stream-content --file streams.json --default jazz

Without ``--file`` the built-in example library is written. A file is read
the way the skill reads it: keys are normalized and entries without a URL
are dropped before anything is saved.
"""

import argparse
import json
import logging
import sys
from typing import Any, Mapping, Optional

from catalog import DEFAULT_CONTENT, DEFAULT_CONTENT_KEY, ContentCatalog
from config import load_config
from content_store import CachedStoreCatalog, DynamoContentStore

log = logging.getLogger(__name__)


def setup_content(catalog: CachedStoreCatalog,
                  content: Mapping[str, Any] = DEFAULT_CONTENT,
                  default_key: Optional[str] = DEFAULT_CONTENT_KEY) -> bool:
    log.info("Content: %s", json.dumps(content, indent=2))
    log.info("Default: %s", default_key)
    if catalog.save(content, default_key):
        log.info("Content library saved successfully")
        return True
    log.error("Failed to save content library")
    return False


def main(argv=None) -> int:
    # Only table settings are read here; CONTENT_SOURCE does not matter
    config = load_config(validate=False)
    parser = argparse.ArgumentParser(description="Replace the stored Home Stream content library")
    parser.add_argument("--table", default=config.table_name, help="DynamoDB table name")
    parser.add_argument("--region", default=config.region_name, help="AWS region")
    parser.add_argument("--partition-key", default=config.partition_key)
    parser.add_argument("--file", help="JSON file with {key: {url, title}} entries")
    parser.add_argument("--default", help="default content key")
    args = parser.parse_args(argv)

    logging.basicConfig(level=config.log_level, format="%(levelname)s %(message)s")
    if not args.table:
        parser.error("--table (or CONTENT_TABLE_NAME) is required")

    content: Mapping[str, Any] = DEFAULT_CONTENT
    default_key = args.default or DEFAULT_CONTENT_KEY
    if args.file:
        with open(args.file, "r", encoding="utf-8") as f:
            loaded = ContentCatalog.from_json(f.read(), args.default)
        if loaded.is_empty():
            log.error("No usable content in %s", args.file)
            return 1
        content = loaded.to_mapping()
        default_key = loaded.default_key

    log.info("Setting up content in table: %s", args.table)
    store = DynamoContentStore(args.table, partition_key=args.partition_key, region_name=args.region)
    return 0 if setup_content(CachedStoreCatalog(store), content, default_key) else 1


if __name__ == "__main__":
    sys.exit(main())
