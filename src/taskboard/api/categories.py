"""Category API routes.

Reads need any authenticated user, writes need an admin.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.auth.dependencies import require_admin, require_auth
from taskboard.auth.jwt import TokenClaim
from taskboard.db.engine import get_db
from taskboard.schemas.auth import MessageResponse
from taskboard.schemas.category import CategoryCreate, CategoryRead, CategoryUpdate
from taskboard.services.category_service import CategoryService

router = APIRouter(prefix="/categories")


def _svc(db: AsyncSession = Depends(get_db)) -> CategoryService:
    return CategoryService(db)


@router.get("", response_model=list[CategoryRead])
async def list_categories(
    _: TokenClaim = Depends(require_auth),
    svc: CategoryService = Depends(_svc),
):
    return await svc.list_categories()


@router.post("", response_model=CategoryRead, status_code=201)
async def create_category(
    body: CategoryCreate,
    _: TokenClaim = Depends(require_admin),
    svc: CategoryService = Depends(_svc),
):
    return await svc.create_category(name=body.name, color=body.color)


@router.get("/{category_id}", response_model=CategoryRead)
async def get_category(
    category_id: int,
    _: TokenClaim = Depends(require_auth),
    svc: CategoryService = Depends(_svc),
):
    return await svc.get_category(category_id)


@router.patch("/{category_id}", response_model=CategoryRead)
async def update_category(
    category_id: int,
    body: CategoryUpdate,
    _: TokenClaim = Depends(require_admin),
    svc: CategoryService = Depends(_svc),
):
    """Partially update a category. Send "color": null to remove the color."""
    return await svc.update_category(category_id, body.model_dump(exclude_unset=True))


@router.delete("/{category_id}", response_model=MessageResponse)
async def delete_category(
    category_id: int,
    _: TokenClaim = Depends(require_admin),
    svc: CategoryService = Depends(_svc),
):
    """Delete a category. Its todos are kept, with categoryId set to null."""
    await svc.delete_category(category_id)
    return {"message": "Category deleted"}
