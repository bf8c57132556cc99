import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends

from ..dependencies import get_result_cache
from ..services.folder_size.result_cache import ResultCache

router = APIRouter(prefix="/api", tags=["folder-size"])


@router.get("/folder-size")
async def get_folder_size(
    result_cache: ResultCache = Depends(get_result_cache),
) -> Dict[str, Any]:
    """
    Get the latest folder size measurement.

    Returns:
        current_size_bytes, max_size_bytes and used_percentage, or an empty
        object until the first calculation has completed. Failed runs never
        change what is served here.
    """
    payload = result_cache.as_payload()
    if not payload:
        logging.debug("Folder size requested before first measurement")
    return payload
