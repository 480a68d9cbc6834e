from typing import Optional

from fastapi import APIRouter, Depends

from ...api.deps import get_current_user_optional
from ...services.navigation_guard import SessionState, evaluate_navigation
from ...schemas.navigation import NavigationCheck, NavigationDecisionResponse
from ...models.user import User

router = APIRouter(prefix="/navigation", tags=["Navigation"])

@router.post("/check", response_model=NavigationDecisionResponse)
async def check_navigation(
    check: NavigationCheck,
    current_user: Optional[User] = Depends(get_current_user_optional)
):
    """Tell the client whether it may render ``to`` or where to go instead."""
    session = SessionState.for_role(current_user.role if current_user else None)
    decision = evaluate_navigation(check.to, check.from_path, session)

    return NavigationDecisionResponse(
        allowed=decision.allowed,
        redirect=decision.redirect
    )
