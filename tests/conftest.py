"""
Pytest configuration and fixtures for backend testing
"""

import io
import os
import zipfile
from datetime import datetime, timezone
from typing import Dict, Iterable, Tuple, Union

import pytest
from fastapi.testclient import TestClient

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["CLEANUP_ENABLED"] = "false"

from app.main import app
from app.repositories.package_store import PackageStore, get_package_store


SAMPLE_MANIFEST = """<?xml version="1.0" encoding="UTF-8"?>
<manifest identifier="com.example.course" version="1"
          xmlns="http://www.imsproject.org/xsd/imscp_rootv1p1p2"
          xmlns:adlcp="http://www.adlnet.org/xsd/adlcp_rootv1p2">
  <metadata>
    <schema>ADL SCORM</schema>
    <schemaversion>1.2</schemaversion>
  </metadata>
  <organizations default="ORG-1">
    <organization identifier="ORG-1">
      <title>Sample Course</title>
      <item identifier="ITEM-1" identifierref="RES-1">
        <title>Lesson 1</title>
      </item>
    </organization>
  </organizations>
  <resources>
    <resource identifier="RES-1" type="webcontent" adlcp:scormtype="sco" href="index.html">
      <file href="index.html"/>
    </resource>
  </resources>
</manifest>
"""

SAMPLE_INDEX_HTML = (
    "<html><head><title>Lesson</title></head>"
    "<body><h1>Hello</h1></body></html>"
)

Entries = Union[Dict[str, Union[str, bytes]], Iterable[Tuple[str, Union[str, bytes]]]]


def build_zip(entries: Entries) -> bytes:
    """Build an in-memory zip archive. Names ending in '/' become directories."""
    items = entries.items() if isinstance(entries, dict) else entries
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
        for name, data in items:
            zf.writestr(name, data)
    return buffer.getvalue()


class FakeClock:
    """Controllable clock for store tests"""

    def __init__(self, start: datetime = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta) -> None:
        self.now = self.now + delta


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def package_store():
    """Fresh store per test"""
    return PackageStore()


@pytest.fixture
def test_client(package_store):
    """Test client whose routes use an isolated package store"""
    app.dependency_overrides[get_package_store] = lambda: package_store
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.pop(get_package_store, None)


@pytest.fixture
def sample_package_bytes():
    """Small SCORM 1.2 package with a manifest, a page and a stylesheet"""
    return build_zip([
        ("imsmanifest.xml", SAMPLE_MANIFEST),
        ("index.html", SAMPLE_INDEX_HTML),
        ("css/", ""),
        ("css/style.css", "body { color: black; }"),
    ])


def upload(client: TestClient, data: bytes, filename: str = "course.zip"):
    return client.post(
        "/api/v1/upload",
        files={"scormFile": (filename, data, "application/zip")},
    )


def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
