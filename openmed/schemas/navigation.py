from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

class NavigationCheck(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    to: str
    from_path: str = Field(default="/", alias="from")

class NavigationDecisionResponse(BaseModel):
    allowed: bool
    redirect: Optional[str] = None
