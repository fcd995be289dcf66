"""
Package Content Server

Reads entries back out of stored packages. HTML pages get a script tag for
the runtime shim injected on the way out; the stored archive is never touched.
"""

import logging
from dataclasses import dataclass
from pathlib import PurePosixPath

from ..repositories.package_store import PackageStore
from .package_analyzer import open_archive
from .runtime_shim import shim_script_tag

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"

CONTENT_TYPES = {
    ".html": "text/html",
    ".htm": "text/html",
    ".css": "text/css",
    ".js": "application/javascript",
    ".json": "application/json",
    ".xml": "application/xml",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
}

HTML_EXTENSIONS = {".html", ".htm"}


class EntryNotFoundError(Exception):
    """Raised when a path does not name an entry of the package."""


@dataclass(frozen=True)
class ServedContent:
    body: bytes
    content_type: str


def _extension(path: str) -> str:
    return PurePosixPath(path).suffix.lower()


def content_type_for(path: str) -> str:
    """Map a path's extension to a MIME type"""
    return CONTENT_TYPES.get(_extension(path), DEFAULT_CONTENT_TYPE)


def inject_shim(html_content: str) -> str:
    """
    Insert the shim script tag exactly once.

    Preferred spot is right before the first ``</head>``; failing that, right
    before the first ``<body``; otherwise the tag is prepended.
    """
    script_tag = shim_script_tag()
    if "</head>" in html_content:
        return html_content.replace("</head>", f"  {script_tag}\n</head>", 1)
    if "<body" in html_content:
        return html_content.replace("<body", f"{script_tag}\n<body", 1)
    return f"{script_tag}\n{html_content}"


def serve_content(store: PackageStore, package_id: str, inner_path: str) -> ServedContent:
    """
    Resolve ``inner_path`` inside a stored package.

    Raises:
        PackageNotFoundError: If the package id is unknown
        EntryNotFoundError: If the archive has no entry at ``inner_path``
    """
    record = store.get(package_id)

    with open_archive(record.raw_bytes) as archive:
        try:
            content = archive.read(inner_path)
        except KeyError:
            raise EntryNotFoundError(inner_path)

    extension = _extension(inner_path)
    content_type = CONTENT_TYPES.get(extension, DEFAULT_CONTENT_TYPE)

    if extension in HTML_EXTENSIONS:
        html_content = content.decode("utf-8", errors="replace")
        content = inject_shim(html_content).encode("utf-8")
        logger.debug("Injected SCORM API into %s/%s", package_id, inner_path)

    return ServedContent(body=content, content_type=content_type)
