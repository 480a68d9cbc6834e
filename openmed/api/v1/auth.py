from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ...core.config import settings
from ...core.database import get_db
from ...api.deps import get_current_user, rate_limit_check
from ...services.auth_service import AuthService
from ...services.signup_service import SignupService
from ...schemas.auth import (
    SignupRequest, SignupResponse, UserSignin, TokenResponse,
    UserResponse, RefreshTokenRequest
)
from ...models.user import User

router = APIRouter(prefix="/users", tags=["User"])

@router.post(
    "/signup",
    response_model=SignupResponse,
    status_code=status.HTTP_201_CREATED,
)
def signup(
    signup_data: SignupRequest,
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit_check)
):
    """Create a person and the account that references it."""
    signup_service = SignupService(db, atomic=settings.SIGNUP_ATOMIC)
    return signup_service.signup(signup_data)

@router.post("/signin", response_model=TokenResponse)
def signin(
    signin_data: UserSignin,
    db: Session = Depends(get_db),
):
    """Authenticate user and return access tokens."""
    auth_service = AuthService(db)
    return auth_service.authenticate_user(signin_data)

@router.post("/refresh", response_model=TokenResponse)
def refresh_token(
    refresh_data: RefreshTokenRequest,
    db: Session = Depends(get_db)
):
    """Refresh access token using refresh token."""
    auth_service = AuthService(db)
    return auth_service.refresh_access_token(refresh_data.refresh_token)

@router.post("/signout")
def signout(
    refresh_data: RefreshTokenRequest,
    db: Session = Depends(get_db)
):
    """Logout user by revoking refresh token."""
    auth_service = AuthService(db)
    success = auth_service.logout_user(refresh_data.refresh_token)

    return {"message": "Successfully logged out" if success else "Logout completed"}

@router.get("/me", response_model=UserResponse)
def get_current_user_info(
    current_user: User = Depends(get_current_user)
):
    """Get current user information."""
    return UserResponse.model_validate(current_user)
