from typing import Any, Dict, List

from pydantic import BaseModel

class GeoSearchResponse(BaseModel):
    query: str
    results: List[Dict[str, Any]]
