"""
SCORM Runtime Router

Serves the runtime API shim referenced by injected content pages.
"""

from fastapi import APIRouter
from fastapi.responses import Response

from app.services.runtime_shim import SHIM_SCRIPT_PATH, generate_shim

router = APIRouter()


@router.get(SHIM_SCRIPT_PATH, summary="SCORM Runtime API Script")
async def scorm_api_script() -> Response:
    """Return the SCORM 1.2 API shim as JavaScript"""
    return Response(content=generate_shim(), media_type="application/javascript")
