"""
SCORM Package Router

Upload, listing and content-serving endpoints for SCORM packages held in the
in-memory package store.
"""

import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import Response

from app.config import settings
from app.models.package import (
    PackageDetailResponse,
    PackageListResponse,
    UploadResponse,
)
from app.repositories.package_store import (
    PackageNotFoundError,
    PackageStore,
    get_package_store,
)
from app.services.content_server import EntryNotFoundError, serve_content
from app.services.package_analyzer import CorruptArchiveError, analyze_package
from app.utils.validation import (
    OversizeUploadError,
    UploadValidationError,
    check_declared_size,
    validate_upload,
    validate_upload_filename,
)

logger = logging.getLogger(__name__)

router = APIRouter()

UPLOAD_FIELD = "scormFile"


@router.post("/upload", response_model=UploadResponse, summary="Upload SCORM Package")
async def upload_package(
    request: Request,
    store: PackageStore = Depends(get_package_store),
) -> UploadResponse:
    """
    Upload and analyze a SCORM package

    Expects a multipart form with the package in the ``scormFile`` field
    (.zip, .scorm or .pif). The archive is kept in memory for one hour. Use
    the returned ``packageId`` with the content endpoint to launch it.
    """
    filename = None
    form = None
    try:
        # Rejected before the multipart body is parsed
        check_declared_size(request.headers.get("content-length"), settings.max_upload_size)

        form = await request.form()
        scorm_file = form.get(UPLOAD_FIELD)
        if scorm_file is None or isinstance(scorm_file, str):
            raise HTTPException(status_code=400, detail="No file uploaded")

        filename = validate_upload_filename(scorm_file.filename)

        try:
            content = await scorm_file.read()
        except Exception as e:
            logger.error(f"Failed to read uploaded file: {e}")
            raise HTTPException(status_code=400, detail="Failed to read uploaded file")

        validate_upload(filename, content, settings.max_upload_size)
        logger.info(f"File uploaded: {filename} ({len(content)} bytes)")

        analysis = await asyncio.to_thread(analyze_package, content)
        package_id = store.put(filename, content, analysis)

        return UploadResponse(
            success=True,
            filename=filename,
            packageId=package_id,
            scormData=analysis,
            message="SCORM file uploaded and analyzed successfully",
        )

    except HTTPException:
        raise
    except OversizeUploadError as e:
        logger.warning(f"Upload rejected: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except UploadValidationError as e:
        logger.warning(f"Upload rejected for {filename}: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except CorruptArchiveError as e:
        logger.error(f"Upload error: {e}")
        raise HTTPException(
            status_code=400,
            detail=f"Error processing SCORM file: {e}",
        )
    except Exception as e:
        logger.error(f"Upload error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error processing SCORM file")
    finally:
        if form is not None:
            await form.close()


@router.get("/files", response_model=PackageListResponse, summary="List Uploaded Packages")
async def list_packages(
    store: PackageStore = Depends(get_package_store),
) -> PackageListResponse:
    """List packages currently held in memory"""
    return PackageListResponse(files=store.list_all())


@router.get(
    "/packages/{package_id}",
    response_model=PackageDetailResponse,
    summary="Get Package Analysis",
)
async def get_package(
    package_id: str,
    store: PackageStore = Depends(get_package_store),
) -> PackageDetailResponse:
    """Return the stored analysis of one package"""
    try:
        record = store.get(package_id)
    except PackageNotFoundError:
        raise HTTPException(status_code=404, detail="SCORM package not found")

    return PackageDetailResponse(
        success=True,
        packageId=record.package_id,
        filename=record.original_filename,
        uploadDate=record.ingested_at,
        scormData=record.analysis,
    )


@router.get("/content/{package_id}/{file_path:path}", summary="Serve Package Content")
async def get_package_content(
    package_id: str,
    file_path: str,
    store: PackageStore = Depends(get_package_store),
) -> Response:
    """
    Serve a file from inside a stored package

    HTML pages are returned with the SCORM runtime API script injected so
    content can find an ``API`` object in its frame.
    """
    try:
        served = await asyncio.to_thread(serve_content, store, package_id, file_path)
    except PackageNotFoundError:
        raise HTTPException(status_code=404, detail="SCORM package not found")
    except EntryNotFoundError:
        raise HTTPException(status_code=404, detail="File not found in SCORM package")
    except Exception as e:
        logger.error(f"Content serving error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error serving content")

    return Response(content=served.body, media_type=served.content_type)
