"""
SCORM Package Analyzer

Opens an uploaded archive in memory, indexes its entries and hands the
imsmanifest.xml descriptor (if any) to the manifest extractor.
"""

import logging
import zipfile
from io import BytesIO
from typing import List, Optional

from ..models.package import AnalysisResult, Manifest, PackageEntry
from .manifest_parser import parse_manifest

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = "imsmanifest.xml"


class CorruptArchiveError(Exception):
    """Raised when uploaded bytes cannot be opened as a zip archive."""


def open_archive(raw_bytes: bytes) -> zipfile.ZipFile:
    """Open ``raw_bytes`` as a zip archive or raise CorruptArchiveError"""
    try:
        return zipfile.ZipFile(BytesIO(raw_bytes))
    except (zipfile.BadZipFile, zipfile.LargeZipFile, ValueError, OSError) as e:
        raise CorruptArchiveError(f"Error analyzing SCORM package: {e}") from e


def is_manifest_entry(name: str) -> bool:
    return name.lower() == MANIFEST_FILENAME


def analyze_package(raw_bytes: bytes) -> AnalysisResult:
    """
    Analyze an uploaded SCORM package.

    Args:
        raw_bytes: Archive content as received from the client

    Returns:
        AnalysisResult with every entry in archive order and the parsed
        manifest, when the archive carries one

    Raises:
        CorruptArchiveError: If the bytes are not a readable zip archive
    """
    files: List[PackageEntry] = []
    manifest: Optional[Manifest] = None
    manifest_text: Optional[str] = None
    manifest_seen = False

    with open_archive(raw_bytes) as archive:
        for info in archive.infolist():
            files.append(PackageEntry(
                name=info.filename,
                size=info.file_size,
                isDirectory=info.is_dir(),
            ))

            # First manifest in archive order wins
            if manifest_seen or not is_manifest_entry(info.filename):
                continue
            manifest_seen = True
            try:
                manifest_text = archive.read(info).decode("utf-8", errors="replace")
                manifest = parse_manifest(manifest_text)
            except Exception as e:
                logger.error("Error reading manifest %s: %s", info.filename, e)

    logger.info(
        "Analyzed package: %d entries, manifest %s",
        len(files),
        "found" if manifest is not None else "absent",
    )
    return AnalysisResult(files=files, manifest=manifest, rawManifestText=manifest_text)
