"""
Package API tests
Upload, listing, detail and content endpoints
"""

import asyncio

from fastapi import Request
from fastapi.testclient import TestClient
from starlette.datastructures import UploadFile

from app.config import Settings
from app.services.content_server import serve_content
from app.services.package_analyzer import analyze_package
from conftest import build_zip, upload

TAG = '<script src="/scorm-api.js"></script>'


class TestUpload:
    def test_upload_success(self, test_client: TestClient, sample_package_bytes):
        resp = upload(test_client, sample_package_bytes)

        assert resp.status_code == 200, resp.text
        data = resp.json()
        assert data["success"] is True
        assert data["filename"] == "course.zip"
        assert data["packageId"]
        assert data["message"] == "SCORM file uploaded and analyzed successfully"

        scorm = data["scormData"]
        assert [f["name"] for f in scorm["files"]] == [
            "imsmanifest.xml", "index.html", "css/", "css/style.css",
        ]
        assert scorm["files"][2]["isDirectory"] is True
        assert scorm["manifest"]["identifier"] == "com.example.course"
        assert scorm["manifest"]["resources"] == [{"identifier": "RES-1", "href": "index.html"}]
        assert scorm["rawManifestText"].startswith("<?xml")

    def test_upload_without_manifest(self, test_client: TestClient):
        resp = upload(test_client, build_zip({"index.html": "<html></html>"}), "plain.scorm")

        assert resp.status_code == 200
        assert resp.json()["scormData"]["manifest"] is None

    def test_missing_file(self, test_client: TestClient):
        resp = test_client.post("/api/v1/upload", data={"other": "x"})

        assert resp.status_code == 400
        assert resp.json()["error"] == "No file uploaded"

    def test_wrong_extension(self, test_client: TestClient, sample_package_bytes):
        resp = upload(test_client, sample_package_bytes, "course.exe")

        assert resp.status_code == 400
        assert resp.json()["error"] == "Only ZIP and SCORM files are allowed"

    def test_empty_file(self, test_client: TestClient):
        resp = upload(test_client, b"", "empty.zip")

        assert resp.status_code == 400

    def test_corrupt_archive(self, test_client: TestClient, package_store):
        resp = upload(test_client, b"definitely not a zip", "broken.zip")

        assert resp.status_code == 400
        assert "Error processing SCORM file" in resp.json()["error"]
        assert len(package_store) == 0

    def test_oversize_upload(self, test_client: TestClient, monkeypatch):
        monkeypatch.setattr(
            "app.routers.packages.settings",
            Settings(max_upload_size=1024 * 1024),
        )
        big = build_zip({"big.bin": b"\x00" * 10}) + b"\x00" * (2 * 1024 * 1024)

        resp = upload(test_client, big, "big.zip")

        assert resp.status_code == 400
        assert "too large" in resp.json()["error"].lower()


class TestListing:
    def test_files_lists_uploads(self, test_client: TestClient, sample_package_bytes):
        first = upload(test_client, sample_package_bytes, "one.zip").json()["packageId"]
        second = upload(test_client, sample_package_bytes, "two.pif").json()["packageId"]

        resp = test_client.get("/api/v1/files")

        assert resp.status_code == 200
        files = resp.json()["files"]
        assert [f["packageId"] for f in files] == [first, second]
        assert [f["name"] for f in files] == ["one.zip", "two.pif"]
        assert all("uploadDate" in f for f in files)

    def test_files_empty(self, test_client: TestClient):
        assert test_client.get("/api/v1/files").json() == {"files": []}

    def test_package_detail(self, test_client: TestClient, sample_package_bytes):
        package_id = upload(test_client, sample_package_bytes).json()["packageId"]

        resp = test_client.get(f"/api/v1/packages/{package_id}")

        assert resp.status_code == 200
        data = resp.json()
        assert data["packageId"] == package_id
        assert data["filename"] == "course.zip"
        assert data["scormData"]["manifest"]["title"] == "Sample Course"

    def test_package_detail_unknown(self, test_client: TestClient):
        resp = test_client.get("/api/v1/packages/nope")

        assert resp.status_code == 404
        assert resp.json()["error"] == "SCORM package not found"


class TestContent:
    def test_html_is_injected(self, test_client: TestClient, sample_package_bytes):
        package_id = upload(test_client, sample_package_bytes).json()["packageId"]

        resp = test_client.get(f"/api/v1/content/{package_id}/index.html")

        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/html")
        assert resp.text.count(TAG) == 1
        assert f"  {TAG}\n</head>" in resp.text

    def test_repeated_requests_inject_once(self, test_client: TestClient, sample_package_bytes):
        package_id = upload(test_client, sample_package_bytes).json()["packageId"]

        first = test_client.get(f"/api/v1/content/{package_id}/index.html")
        second = test_client.get(f"/api/v1/content/{package_id}/index.html")

        assert first.text == second.text
        assert second.text.count(TAG) == 1

    def test_nested_asset(self, test_client: TestClient, sample_package_bytes):
        package_id = upload(test_client, sample_package_bytes).json()["packageId"]

        resp = test_client.get(f"/api/v1/content/{package_id}/css/style.css")

        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/css")
        assert resp.text == "body { color: black; }"

    def test_unknown_package(self, test_client: TestClient):
        resp = test_client.get("/api/v1/content/unknown/index.html")

        assert resp.status_code == 404
        assert resp.json()["error"] == "SCORM package not found"

    def test_unknown_entry(self, test_client: TestClient, sample_package_bytes):
        package_id = upload(test_client, sample_package_bytes).json()["packageId"]

        resp = test_client.get(f"/api/v1/content/{package_id}/missing.html")

        assert resp.status_code == 404
        assert resp.json()["error"] == "File not found in SCORM package"


class TestRuntimeScript:
    def test_scorm_api_js(self, test_client: TestClient):
        resp = test_client.get("/scorm-api.js")

        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("application/javascript")
        assert "LMSInitialize" in resp.text
        assert '"cmi.core.lesson_status": "not attempted"' in resp.text


def _runs_on_event_loop() -> bool:
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return False
    return True


class TestUploadOrdering:
    def test_oversize_rejected_before_form_is_parsed(self, test_client: TestClient, monkeypatch):
        monkeypatch.setattr(
            "app.routers.packages.settings",
            Settings(max_upload_size=1024 * 1024),
        )
        parsed = []
        original_form = Request.form

        def tracking_form(self, *args, **kwargs):
            parsed.append(True)
            return original_form(self, *args, **kwargs)

        monkeypatch.setattr(Request, "form", tracking_form)

        resp = upload(test_client, b"\x00" * (2 * 1024 * 1024), "big.zip")

        assert resp.status_code == 400
        assert parsed == []

    def test_extension_checked_before_file_is_read(self, test_client: TestClient, monkeypatch):
        read_calls = []
        original_read = UploadFile.read

        async def tracking_read(self, *args, **kwargs):
            read_calls.append(self.filename)
            return await original_read(self, *args, **kwargs)

        monkeypatch.setattr(UploadFile, "read", tracking_read)

        resp = upload(test_client, b"not a zip", "course.exe")

        assert resp.status_code == 400
        assert resp.json()["error"] == "Only ZIP and SCORM files are allowed"
        assert read_calls == []


class TestOffloadedWork:
    def test_analysis_runs_off_the_event_loop(
        self, test_client: TestClient, sample_package_bytes, monkeypatch
    ):
        on_loop = []

        def spy(content):
            on_loop.append(_runs_on_event_loop())
            return analyze_package(content)

        monkeypatch.setattr("app.routers.packages.analyze_package", spy)

        resp = upload(test_client, sample_package_bytes)

        assert resp.status_code == 200
        assert on_loop == [False]

    def test_content_served_off_the_event_loop(
        self, test_client: TestClient, sample_package_bytes, monkeypatch
    ):
        package_id = upload(test_client, sample_package_bytes).json()["packageId"]
        on_loop = []

        def spy(store, pid, path):
            on_loop.append(_runs_on_event_loop())
            return serve_content(store, pid, path)

        monkeypatch.setattr("app.routers.packages.serve_content", spy)

        resp = test_client.get(f"/api/v1/content/{package_id}/index.html")

        assert resp.status_code == 200
        assert on_loop == [False]
