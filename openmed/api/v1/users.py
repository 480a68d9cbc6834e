from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ...core.database import get_db
from ...core.security import AuthorizationError
from ...api.deps import get_current_user, get_admin_user
from ...services.auth_service import AuthService
from ...schemas.auth import UserResponse, RoleUpdate
from ...models.user import User

router = APIRouter(prefix="/users", tags=["User"])

@router.get("")
def list_users(
    skip: int = 0,
    limit: int = 10,
    db: Session = Depends(get_db),
    _: User = Depends(get_admin_user)
):
    """List all users (admin only)."""
    auth_service = AuthService(db)
    users = auth_service.list_users(skip=skip, limit=limit)
    return [UserResponse.model_validate(user) for user in users]

@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Get a user by id (admin, or the user itself)."""
    if not current_user.is_admin and current_user.id != user_id:
        raise AuthorizationError("Admin access required")

    user = AuthService(db).get_user_by_id(user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )

    return UserResponse.model_validate(user)

@router.patch("/{user_id}/role", response_model=UserResponse)
def update_user_role(
    user_id: int,
    role_data: RoleUpdate,
    db: Session = Depends(get_db),
    _: User = Depends(get_admin_user)
):
    """Change a user's role (admin only)."""
    user = AuthService(db).update_role(user_id, role_data.role)
    return UserResponse.model_validate(user)

@router.patch("/{user_id}/status")
def update_user_status(
    user_id: int,
    is_active: bool,
    db: Session = Depends(get_db),
    _: User = Depends(get_admin_user)
):
    """Update user active status (admin only)."""
    AuthService(db).update_status(user_id, is_active)

    return {"message": f"User {'activated' if is_active else 'deactivated'} successfully"}
