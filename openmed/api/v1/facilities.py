from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ...api.deps import get_current_user, get_geo_server
from ...core.config import settings
from ...services.geo_service import GeoServer, GeocodingError
from ...schemas.facility import GeoSearchResponse
from ...models.user import User

router = APIRouter(prefix="/facilities", tags=["Facility"])

@router.get("/geo/search", response_model=GeoSearchResponse)
async def geo_search(
    q: str = Query(..., min_length=1),
    limit: Optional[int] = Query(None, ge=1, le=50),
    countrycodes: Optional[str] = None,
    geo: GeoServer = Depends(get_geo_server),
    _: User = Depends(get_current_user)
):
    """Look up an address with the geocoding provider."""
    try:
        results = await geo.search(
            q,
            limit=limit or settings.GEOCODER_DEFAULT_LIMIT,
            countrycodes=countrycodes,
        )
    except GeocodingError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=str(e)
        )

    return GeoSearchResponse(query=q, results=results)
