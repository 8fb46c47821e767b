"""Dashboard service — aggregate numbers for the admin overview."""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from taskboard.db.models import Category, Todo, User

UNCATEGORIZED = "Uncategorized"
RECENT_LIMIT = 5


class DashboardService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _count(self, model) -> int:
        return await self.db.scalar(select(func.count()).select_from(model))

    async def _group_counts(self, column) -> dict[str, int]:
        result = await self.db.execute(
            select(column, func.count(Todo.id)).group_by(column)
        )
        return {key.value: count for key, count in result.all()}

    async def stats(self) -> dict:
        by_category = await self.db.execute(
            select(Category.name, func.count(Todo.id))
            .select_from(Todo)
            .outerjoin(Category, Todo.category_id == Category.id)
            .group_by(Category.id, Category.name)
            .order_by(func.count(Todo.id).desc())
        )
        recent = await self.db.execute(
            select(Todo)
            .options(selectinload(Todo.category), selectinload(Todo.assigned_to))
            .order_by(Todo.created_at.desc(), Todo.id.desc())
            .limit(RECENT_LIMIT)
        )

        return {
            "totals": {
                "todos": await self._count(Todo),
                "users": await self._count(User),
                "categories": await self._count(Category),
            },
            "todos_by_status": await self._group_counts(Todo.status),
            "todos_by_priority": await self._group_counts(Todo.priority),
            "todos_by_category": [
                {"name": name or UNCATEGORIZED, "count": count}
                for name, count in by_category.all()
            ],
            "recent_todos": list(recent.scalars().all()),
        }
