"""Todo API routes.

Learn: These routes are the HTTP interface to TodoService.
Every route is gated before touching the database:
- reads (list, get) → require_auth
- writes (create, update, delete) → require_admin

Query filters use the camelCase names clients send (categoryId, ...).
page/limit are clamped by the service rather than rejected.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.auth.dependencies import require_admin, require_auth
from taskboard.auth.jwt import TokenClaim
from taskboard.db.engine import get_db
from taskboard.db.models import TodoPriority, TodoStatus
from taskboard.schemas.auth import MessageResponse
from taskboard.schemas.todo import TodoCreate, TodoPage, TodoRead, TodoUpdate
from taskboard.services.todo_service import TodoFilters, TodoService

router = APIRouter(prefix="/todos")


def _svc(db: AsyncSession = Depends(get_db)) -> TodoService:
    return TodoService(db)


@router.get("", response_model=TodoPage)
async def list_todos(
    status: Optional[TodoStatus] = Query(None),
    priority: Optional[TodoPriority] = Query(None),
    category_id: Optional[int] = Query(None, alias="categoryId"),
    assigned_to_id: Optional[int] = Query(None, alias="assignedToId"),
    exclude_assigned_to_id: Optional[int] = Query(None, alias="excludeAssignedToId"),
    search: Optional[str] = Query(None, max_length=200),
    page: int = Query(1),
    limit: int = Query(10),
    _: TokenClaim = Depends(require_auth),
    svc: TodoService = Depends(_svc),
):
    """List todos with optional filters, newest first."""
    filters = TodoFilters(
        status=status,
        priority=priority,
        category_id=category_id,
        assigned_to_id=assigned_to_id,
        exclude_assigned_to_id=exclude_assigned_to_id,
        search=search or None,
    )
    todos, info = await svc.list_todos(filters, page=page, limit=limit)
    return {
        "todos": todos,
        "pagination": {
            "current_page": info.current_page,
            "total_pages": info.total_pages,
            "total_items": info.total_items,
            "items_per_page": info.items_per_page,
            "has_next_page": info.has_next_page,
            "has_previous_page": info.has_previous_page,
        },
    }


@router.post("", response_model=TodoRead, status_code=201)
async def create_todo(
    body: TodoCreate,
    claim: TokenClaim = Depends(require_admin),
    svc: TodoService = Depends(_svc),
):
    """Create a todo. The caller (an admin) is recorded as its creator."""
    return await svc.create_todo(created_by_id=claim.user_id, data=body.model_dump())


@router.get("/{todo_id}", response_model=TodoRead)
async def get_todo(
    todo_id: int,
    _: TokenClaim = Depends(require_auth),
    svc: TodoService = Depends(_svc),
):
    return await svc.get_todo(todo_id)


@router.patch("/{todo_id}", response_model=TodoRead)
async def update_todo(
    todo_id: int,
    body: TodoUpdate,
    _: TokenClaim = Depends(require_admin),
    svc: TodoService = Depends(_svc),
):
    """Partially update a todo. Only fields present in the body change."""
    return await svc.update_todo(todo_id, body.model_dump(exclude_unset=True))


@router.delete("/{todo_id}", response_model=MessageResponse)
async def delete_todo(
    todo_id: int,
    _: TokenClaim = Depends(require_admin),
    svc: TodoService = Depends(_svc),
):
    await svc.delete_todo(todo_id)
    return {"message": "Todo deleted"}
