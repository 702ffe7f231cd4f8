"""Shared fixtures: catalogs and envelope builders."""

import pytest

from catalog import ContentCatalog

LIBRARY = {
    "ocean sounds": {"url": "https://example.com/ocean.mp3", "title": "Ocean Sounds"},
    "air play": {"url": "https://example.com/airplay.mp3", "title": "Air Play Stream"},
    "jazz": {"url": "https://example.com/jazz.mp3", "title": "Jazz Radio"},
}


class FakeStore:
    """In-memory stand-in for the DynamoDB content store."""

    def __init__(self, record=None, error=None):
        self.record = record
        self.error = error
        self.gets = 0
        self.puts = []

    def get_record(self):
        self.gets += 1
        if self.error is not None:
            raise self.error
        return self.record

    def put_record(self, content_json, default_key):
        if self.error is not None:
            raise self.error
        self.puts.append((content_json, default_key))
        self.record = {"id": "content-library", "contentJson": content_json}
        if default_key:
            self.record["defaultKey"] = default_key


@pytest.fixture
def catalog():
    return ContentCatalog.from_mapping(LIBRARY, "ocean sounds")


@pytest.fixture
def empty_catalog():
    return ContentCatalog.empty()


def envelope(request_type: str, **fields):
    return {"version": "1.0", "request": {"type": request_type, **fields}}


def intent_envelope(name: str, slots=None):
    intent = {"name": name, "slots": {}}
    for key, value in (slots or {}).items():
        intent["slots"][key] = {"name": key, "value": value}
    return envelope("IntentRequest", intent=intent)
