"""
Health Check Router

Provides health check endpoints for monitoring application status.
"""

from fastapi import APIRouter, Depends, HTTPException
from app.config import settings
from app.models.package import HealthCheckResponse
from app.repositories.package_store import PackageStore, get_package_store
from app.services.runtime_shim import generate_shim
import time
import os
import sys
from datetime import datetime

# Initialize router
router = APIRouter()

# Application start time for uptime calculation
_start_time = time.time()


@router.get("/health", response_model=HealthCheckResponse, summary="Basic Health Check")
async def health_check():
    """
    Basic health check endpoint

    Returns application status, version, and environment information.
    This endpoint is used by load balancers and monitoring systems.
    """
    uptime = time.time() - _start_time

    return HealthCheckResponse(
        status="healthy",
        version=settings.version,
        environment=settings.environment,
        timestamp=datetime.utcnow(),
        uptime=uptime
    )


@router.get("/health/detailed", summary="Detailed Health Check")
async def detailed_health_check(store: PackageStore = Depends(get_package_store)):
    """
    Detailed health check with component status

    Reports the package store size, the runtime shim and the upload and
    retention limits in effect.
    """
    uptime = time.time() - _start_time

    try:
        shim_ready = bool(generate_shim())
    except Exception:
        shim_ready = False

    components = {
        "package_store": {
            "status": "healthy",
            "packages": len(store),
        },
        "runtime_shim": {
            "status": "healthy" if shim_ready else "unavailable",
        },
    }
    is_healthy = all(c["status"] == "healthy" for c in components.values())

    return {
        "status": "healthy" if is_healthy else "degraded",
        "version": settings.version,
        "environment": settings.environment,
        "timestamp": datetime.utcnow().isoformat(),
        "uptime": uptime,
        "components": components,
        "details": {
            "cors_origins": settings.cors_origins,
            "max_upload_size_mb": settings.max_upload_size_mb,
            "package_max_age_seconds": settings.package_max_age_seconds,
            "cleanup_interval_seconds": settings.cleanup_interval_seconds,
            "python_version": sys.version,
            "startup_time": datetime.fromtimestamp(_start_time).isoformat()
        }
    }


@router.get("/health/ready", summary="Readiness Check")
async def readiness_check():
    """
    Kubernetes-style readiness check

    Returns 200 if the application is ready to serve requests,
    503 if the runtime shim cannot be generated.
    """
    try:
        if not generate_shim():
            raise RuntimeError("Runtime shim is empty")
        return {"status": "ready", "timestamp": datetime.utcnow().isoformat()}
    except Exception as e:
        raise HTTPException(
            status_code=503,
            detail=f"Application not ready: {str(e)}"
        )


@router.get("/health/live", summary="Liveness Check")
async def liveness_check():
    """
    Kubernetes-style liveness check

    Returns 200 if the application is alive and responding.
    """
    return {
        "status": "alive",
        "timestamp": datetime.utcnow().isoformat(),
        "pid": os.getpid()
    }
