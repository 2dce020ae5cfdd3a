"""Test configuration and fixtures for blob-tools."""

import threading

import pytest
from botocore.exceptions import ClientError

from blob_tools.schemas import ObjectDescriptor, ObjectProperties


def client_error(code: str = "InternalError", operation: str = "PutObject"):
    return ClientError({"Error": {"Code": code, "Message": "boom"}}, operation)


def _apply(obj, properties):
    if properties is None:
        return
    for name in ("content_type", "content_encoding", "cache_control"):
        value = getattr(properties, name)
        if value is not None:
            obj[name] = value


class FakeObjectStore:
    """In-memory ObjectStore that records every call.

    Failures are injected per (operation, key) through ``fail``.
    """

    def __init__(self):
        self.objects = {}
        self.calls = []
        self.failures = {}
        self._lock = threading.Lock()

    def put(
        self,
        container,
        key,
        body=b"",
        content_type="text/plain",
        content_encoding=None,
        cache_control=None,
    ):
        self.objects[(container, key)] = {
            "body": body,
            "content_type": content_type,
            "content_encoding": content_encoding,
            "cache_control": cache_control,
        }

    def fail(self, operation, key, error=None):
        self.failures[(operation, key)] = error or client_error()

    def _record(self, operation, key):
        with self._lock:
            self.calls.append((operation, key))
        error = self.failures.get((operation, key))
        if error is not None:
            raise error

    @property
    def writes(self):
        return [
            call for call in self.calls if call[0] in ("write_body", "set_properties")
        ]

    def list_objects(self, container):
        """Listing-only descriptors, like an S3 listing page."""
        snapshot = sorted(
            (key, len(obj["body"]))
            for (c, key), obj in self.objects.items()
            if c == container
        )
        for key, size in snapshot:
            yield ObjectDescriptor(container=container, key=key, size=size)

    def describe(self, descriptor):
        self._record("describe", descriptor.key)
        obj = self.objects.get((descriptor.container, descriptor.key))
        if obj is None:
            return None
        return ObjectDescriptor(
            container=descriptor.container,
            key=descriptor.key,
            content_type=obj["content_type"],
            content_encoding=obj["content_encoding"],
            cache_control=obj["cache_control"],
            size=len(obj["body"]),
        )

    def read_body(self, descriptor):
        self._record("read_body", descriptor.key)
        return self.objects[(descriptor.container, descriptor.key)]["body"]

    def exists(self, container, key):
        self._record("exists", key)
        return (container, key) in self.objects

    def write_body(self, container, key, data, properties=None):
        self._record("write_body", key)
        with self._lock:
            current = self.objects.get((container, key), {})
            obj = {
                "body": data,
                "content_type": current.get("content_type", "application/octet-stream"),
                "content_encoding": None,
                "cache_control": current.get("cache_control"),
            }
            _apply(obj, properties)
            self.objects[(container, key)] = obj

    def set_properties(self, container, key, properties: ObjectProperties):
        self._record("set_properties", key)
        with self._lock:
            _apply(self.objects[(container, key)], properties)


@pytest.fixture
def store():
    """A fake store holding a small static site in bucket 'site'."""
    fake = FakeObjectStore()
    fake.put("site", "a.js", b"console.log('a');" * 20, "application/javascript")
    fake.put("site", "b.png", b"\x89PNG fake", "image/png")
    fake.put("site", "css/main.css", b"body { margin: 0; }" * 10, "text/css")
    return fake


@pytest.fixture
def aws_credentials(monkeypatch):
    """Keep moto-backed tests away from real credentials."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "test_key")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "test_secret")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")
