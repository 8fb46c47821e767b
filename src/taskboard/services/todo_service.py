"""Todo service — business logic for the shared todo pool.

Learn: Routes call the service, the service calls the database. The
service never checks roles: the route has already gone through
require_auth / require_admin before it gets here.

Every todo leaves this service with its category, creator and assignee
eager-loaded (selectinload), because the relationships are lazy="raise"
and the API always returns them embedded.
"""

import math
from dataclasses import dataclass
from typing import Any, Optional

import structlog
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from taskboard.db.models import Category, Todo, TodoPriority, TodoStatus, User
from taskboard.errors import NotFound, ValidationError

logger = structlog.get_logger()

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


@dataclass
class TodoFilters:
    """Optional list filters. None means "don't filter on this"."""

    status: Optional[TodoStatus] = None
    priority: Optional[TodoPriority] = None
    category_id: Optional[int] = None
    assigned_to_id: Optional[int] = None
    exclude_assigned_to_id: Optional[int] = None
    search: Optional[str] = None


@dataclass
class PageInfo:
    current_page: int
    total_pages: int
    total_items: int
    items_per_page: int

    @property
    def has_next_page(self) -> bool:
        return self.current_page < self.total_pages

    @property
    def has_previous_page(self) -> bool:
        return self.current_page > 1


def clamp_paging(page: Optional[int], limit: Optional[int]) -> tuple[int, int]:
    """Page is floored to 1, limit clamped to [1, MAX_PAGE_SIZE]."""
    page = max(page or 1, 1)
    limit = DEFAULT_PAGE_SIZE if limit is None else min(max(limit, 1), MAX_PAGE_SIZE)
    return page, limit


def _with_relations(query):
    return query.options(
        selectinload(Todo.category),
        selectinload(Todo.created_by),
        selectinload(Todo.assigned_to),
    )


class TodoService:
    """Business logic for todo CRUD and filtering."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Read ────────────────────────────────────────────

    async def get_todo(self, todo_id: int) -> Todo:
        result = await self.db.execute(
            _with_relations(select(Todo).where(Todo.id == todo_id))
            # reload relationships that may have changed under us
            .execution_options(populate_existing=True)
        )
        todo = result.scalars().first()
        if not todo:
            raise NotFound("Todo not found")
        return todo

    async def list_todos(
        self,
        filters: TodoFilters,
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> tuple[list[Todo], PageInfo]:
        """List todos, newest first, with filters and pagination.

        Learn: Query filters are applied conditionally — only when the
        caller provides them. The same WHERE clause feeds both the COUNT
        and the page query, so totals always match the filtered set.
        """
        page, limit = clamp_paging(page, limit)
        conditions = []
        if filters.status:
            conditions.append(Todo.status == filters.status)
        if filters.priority:
            conditions.append(Todo.priority == filters.priority)
        if filters.category_id is not None:
            conditions.append(Todo.category_id == filters.category_id)
        if filters.assigned_to_id is not None:
            conditions.append(Todo.assigned_to_id == filters.assigned_to_id)
        if filters.exclude_assigned_to_id is not None:
            # unassigned todos are kept
            conditions.append(
                or_(
                    Todo.assigned_to_id.is_(None),
                    Todo.assigned_to_id != filters.exclude_assigned_to_id,
                )
            )
        if filters.search:
            # literal substring: % and _ in the text are not wildcards
            conditions.append(
                or_(
                    Todo.title.icontains(filters.search, autoescape=True),
                    Todo.description.icontains(filters.search, autoescape=True),
                )
            )

        total = await self.db.scalar(
            select(func.count()).select_from(Todo).where(*conditions)
        )

        todos: list[Todo] = []
        offset = (page - 1) * limit
        # past the last page: nothing to fetch, and the offset may not fit
        # in a database integer
        if offset < total:
            query = (
                _with_relations(select(Todo).where(*conditions))
                .order_by(Todo.created_at.desc(), Todo.id.desc())
                .offset(offset)
                .limit(limit)
            )
            result = await self.db.execute(query)
            todos = list(result.scalars().all())
        info = PageInfo(
            current_page=page,
            total_pages=math.ceil(total / limit),
            total_items=total,
            items_per_page=limit,
        )
        return todos, info

    # ─── Create ──────────────────────────────────────────

    async def create_todo(self, created_by_id: int, data: dict[str, Any]) -> Todo:
        """Create a todo. created_by_id always comes from the caller's claim."""
        await self._check_references(data)
        todo = Todo(created_by_id=created_by_id, **data)
        self.db.add(todo)
        await self.db.commit()

        logger.info("todos.created", todo_id=todo.id, created_by_id=created_by_id)
        return await self.get_todo(todo.id)

    # ─── Update ──────────────────────────────────────────

    async def update_todo(self, todo_id: int, changes: dict[str, Any]) -> Todo:
        """Apply a partial update. Only keys present in `changes` are touched."""
        todo = await self.get_todo(todo_id)
        await self._check_references(changes)
        for field, value in changes.items():
            setattr(todo, field, value)
        await self.db.commit()

        if changes:
            logger.info("todos.updated", todo_id=todo_id, fields=sorted(changes))
        return await self.get_todo(todo_id)

    # ─── Delete ──────────────────────────────────────────

    async def delete_todo(self, todo_id: int) -> None:
        todo = await self.get_todo(todo_id)
        await self.db.delete(todo)
        await self.db.commit()
        logger.info("todos.deleted", todo_id=todo_id)

    # ─── Helpers ─────────────────────────────────────────

    async def _check_references(self, data: dict[str, Any]) -> None:
        """Referenced category/assignee must exist (None clears the link)."""
        details = []
        category_id = data.get("category_id")
        if category_id is not None and not await self.db.get(Category, category_id):
            details.append({"field": "categoryId", "message": "Category not found"})
        assigned_to_id = data.get("assigned_to_id")
        if assigned_to_id is not None and not await self.db.get(User, assigned_to_id):
            details.append({"field": "assignedToId", "message": "User not found"})
        if details:
            raise ValidationError("Invalid data", details=details)
