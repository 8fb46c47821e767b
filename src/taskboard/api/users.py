"""User management API — admins only.

Learn: The whole router is admin-gated. Self-protection rules (own role,
own account, last admin) are enforced by UserService, which is why the
acting admin's id is passed down explicitly.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.auth.dependencies import require_admin
from taskboard.auth.jwt import TokenClaim
from taskboard.db.engine import get_db
from taskboard.schemas.auth import MessageResponse, UserRead
from taskboard.schemas.user import UserRoleUpdate
from taskboard.services.user_service import UserService

router = APIRouter(prefix="/users")


def _svc(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(db)


@router.get("", response_model=list[UserRead])
async def list_users(
    _: TokenClaim = Depends(require_admin),
    svc: UserService = Depends(_svc),
):
    return await svc.list_users()


@router.get("/{user_id}", response_model=UserRead)
async def get_user(
    user_id: int,
    _: TokenClaim = Depends(require_admin),
    svc: UserService = Depends(_svc),
):
    return await svc.get_user(user_id)


@router.patch("/{user_id}", response_model=UserRead)
async def change_user_role(
    user_id: int,
    body: UserRoleUpdate,
    claim: TokenClaim = Depends(require_admin),
    svc: UserService = Depends(_svc),
):
    """Change a user's role. Admins can't change their own role."""
    return await svc.change_role(actor_id=claim.user_id, user_id=user_id, role=body.role)


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: int,
    claim: TokenClaim = Depends(require_admin),
    svc: UserService = Depends(_svc),
):
    """Delete a user. Not yourself, and never the last admin."""
    await svc.delete_user(actor_id=claim.user_id, user_id=user_id)
    return {"message": "User deleted"}
