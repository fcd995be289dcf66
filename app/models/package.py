"""
Pydantic Models for SCORM Package Data

These models describe what the analyzer extracts from an uploaded package and
what the API returns to clients. Field names follow the JSON shape the reader
frontend already consumes (camelCase).
"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class PackageEntry(BaseModel):
    """Single member of an uploaded archive"""
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Path of the entry inside the archive")
    size: int = Field(..., ge=0, description="Declared uncompressed size in bytes")
    isDirectory: bool = Field(default=False, description="Whether the entry is a directory marker")


class OrganizationInfo(BaseModel):
    """First organization found in an <organizations> block"""
    model_config = ConfigDict(frozen=True)

    identifier: Optional[str] = Field(None, description="Organization identifier attribute")
    title: Optional[str] = Field(None, description="Organization title")


class ResourceInfo(BaseModel):
    """Manifest <resource> reference"""
    model_config = ConfigDict(frozen=True)

    identifier: Optional[str] = Field(None, description="Resource identifier attribute")
    href: Optional[str] = Field(None, description="Launch file of the resource")


class Manifest(BaseModel):
    """Best-effort view of an imsmanifest.xml descriptor"""
    model_config = ConfigDict(frozen=True)

    identifier: Optional[str] = Field(None, description="Manifest identifier")
    title: Optional[str] = Field(None, description="First title found in the manifest")
    organizations: List[OrganizationInfo] = Field(default_factory=list)
    resources: List[ResourceInfo] = Field(default_factory=list)


class AnalysisResult(BaseModel):
    """Result of analyzing one uploaded package"""
    model_config = ConfigDict(frozen=True)

    files: List[PackageEntry] = Field(default_factory=list, description="Entries in archive order")
    manifest: Optional[Manifest] = Field(None, description="Parsed manifest, if one was found")
    rawManifestText: Optional[str] = Field(None, description="Raw manifest text, if one was found")


@dataclass(frozen=True)
class PackageRecord:
    """Stored package. Owned by the package store and never mutated."""
    package_id: str
    original_filename: str
    raw_bytes: bytes
    analysis: AnalysisResult
    ingested_at: datetime


# API Request/Response Models
class PackageSummary(BaseModel):
    """Listing row for an uploaded package"""
    packageId: str = Field(..., description="Opaque package identifier")
    name: str = Field(..., description="Original upload filename")
    uploadDate: datetime = Field(..., description="Ingestion timestamp (UTC)")


class PackageListResponse(BaseModel):
    """Response model for the package listing"""
    files: List[PackageSummary] = Field(default_factory=list)


class UploadResponse(BaseModel):
    """Response model for a successful upload"""
    success: bool = Field(True, description="Upload success status")
    filename: str = Field(..., description="Original upload filename")
    packageId: str = Field(..., description="Identifier to use for content requests")
    scormData: AnalysisResult = Field(..., description="Package analysis")
    message: str = Field(..., description="Success message")


class PackageDetailResponse(BaseModel):
    """Response model for a single stored package"""
    success: bool = Field(True)
    packageId: str
    filename: str
    uploadDate: datetime
    scormData: AnalysisResult


class HealthCheckResponse(BaseModel):
    """Health check response model"""
    status: str = Field(..., description="Service status")
    version: str = Field(..., description="Application version")
    environment: str = Field(..., description="Current environment")
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="Check timestamp")
    uptime: Optional[float] = Field(None, description="Uptime in seconds")
