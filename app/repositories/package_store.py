"""In-memory registry for uploaded SCORM packages.

Packages live only for the lifetime of the process. Each upload becomes a
write-once ``PackageRecord`` keyed by a generated package id; the only way a
record disappears (short of a restart) is the age-based eviction sweep.
"""
from __future__ import annotations

import logging
import threading
import time
import uuid
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional

from app.models.package import AnalysisResult, PackageRecord, PackageSummary

logger = logging.getLogger(__name__)


class PackageNotFoundError(Exception):
    """Raised when a package id is unknown to the store."""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_package_id() -> str:
    """Millisecond timestamp plus a random suffix, e.g. ``1729251234567-3f9a0c2be``"""
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:9]}"


class PackageStore:
    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self._clock = clock or _utcnow
        self._records: Dict[str, PackageRecord] = {}
        self._lock = threading.Lock()

    # CREATE -----------------------------------------------------------------
    def put(self, filename: str, raw_bytes: bytes, analysis: AnalysisResult) -> str:
        with self._lock:
            package_id = generate_package_id()
            while package_id in self._records:
                package_id = generate_package_id()
            # Only a fully built record ever becomes visible
            self._records[package_id] = PackageRecord(
                package_id=package_id,
                original_filename=filename,
                raw_bytes=bytes(raw_bytes),
                analysis=analysis,
                ingested_at=self._clock(),
            )
        logger.info("Stored package %s (%s, %d bytes)", package_id, filename, len(raw_bytes))
        return package_id

    # READ -------------------------------------------------------------------
    def get(self, package_id: str) -> PackageRecord:
        with self._lock:
            record = self._records.get(package_id)
        if record is None:
            raise PackageNotFoundError(package_id)
        return record

    def list_all(self) -> List[PackageSummary]:
        with self._lock:
            records = list(self._records.values())
        return [
            PackageSummary(
                packageId=record.package_id,
                name=record.original_filename,
                uploadDate=record.ingested_at,
            )
            for record in records
        ]

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __contains__(self, package_id: object) -> bool:
        with self._lock:
            return package_id in self._records

    # DELETE -----------------------------------------------------------------
    def evict_older_than(self, max_age: timedelta) -> List[str]:
        """Remove every record ingested before ``now - max_age``.

        Returns the evicted package ids. A record that cannot be inspected is
        logged and left in place; the sweep carries on with the rest.
        """
        cutoff = self._clock() - max_age
        with self._lock:
            candidates = list(self._records.items())

        evicted: List[str] = []
        for package_id, record in candidates:
            try:
                if record.ingested_at >= cutoff:
                    continue
                with self._lock:
                    if self._records.get(package_id) is record:
                        del self._records[package_id]
                        evicted.append(package_id)
                        logger.info("Cleaned up old package: %s", package_id)
            except Exception as e:
                logger.error("Failed to evaluate package %s for eviction: %s", package_id, e)
        return evicted


# Shared store instance used by the FastAPI application
package_store = PackageStore()


def get_package_store() -> PackageStore:
    """FastAPI dependency returning the process-wide package store."""
    return package_store
