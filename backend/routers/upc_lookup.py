import logging
from typing import Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from starlette.concurrency import run_in_threadpool

from core.auth import current_active_user
from core.rate_limit import SlidingWindowRateLimiter, enforce_rate_limit, get_rate_limiter
from core.upc_client import UpcDatabaseClient, make_upc_client
from db.users import User
from schemas.upc import LookupFailure

logger = logging.getLogger(__name__)

router = APIRouter()


def get_upc_client() -> Optional[UpcDatabaseClient]:
    return make_upc_client()


@router.get("", response_model=Dict)
async def lookup_upc(
    upc: Optional[str] = None,
    user: User = Depends(current_active_user),
    limiter: SlidingWindowRateLimiter = Depends(get_rate_limiter("upc_rate_limiter")),
    client: Optional[UpcDatabaseClient] = Depends(get_upc_client),
):
    """
    Look a barcode up in the UPC database.

    The session is only used to gate access and key the rate limiter; results
    are not stored.
    """
    if client is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="UPC_DATABASE_API_KEY is not set on the server.",
        )
    if not upc or not upc.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing upc query parameter")

    enforce_rate_limit(limiter, str(user.id))

    result = await run_in_threadpool(client.lookup, upc)
    if isinstance(result, LookupFailure):
        if result.reason == "not_found":
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=result.error)
        if result.reason == "upstream_status" and result.status_code:
            raise HTTPException(status_code=result.status_code, detail=result.error)
        if result.reason == "invalid_code":
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=result.error)
        logger.error("UPC lookup for %s failed: %s", upc, result.error)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=result.error)

    return {"success": True, "data": result.data.model_dump()}
