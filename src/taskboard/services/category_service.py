"""Category service — CRUD for todo categories.

Learn: Deleting a category never deletes todos. Todos pointing at it are
detached (category_id → NULL) in the same transaction as the delete.
"""

from typing import Any, Optional

import structlog
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.db.models import Category, Todo
from taskboard.errors import NotFound

logger = structlog.get_logger()


class CategoryService:
    """Business logic for categories."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_categories(self) -> list[Category]:
        result = await self.db.execute(select(Category).order_by(Category.name))
        return list(result.scalars().all())

    async def get_category(self, category_id: int) -> Category:
        category = await self.db.get(Category, category_id)
        if not category:
            raise NotFound("Category not found")
        return category

    async def create_category(self, name: str, color: Optional[str] = None) -> Category:
        category = Category(name=name, color=color)
        self.db.add(category)
        await self.db.commit()
        await self.db.refresh(category)
        logger.info("categories.created", category_id=category.id)
        return category

    async def update_category(
        self, category_id: int, changes: dict[str, Any]
    ) -> Category:
        category = await self.get_category(category_id)
        for field, value in changes.items():
            setattr(category, field, value)
        await self.db.commit()
        await self.db.refresh(category)
        return category

    async def delete_category(self, category_id: int) -> None:
        category = await self.get_category(category_id)
        await self.db.execute(
            update(Todo)
            .where(Todo.category_id == category_id)
            .values(category_id=None)
        )
        await self.db.delete(category)
        await self.db.commit()
        logger.info("categories.deleted", category_id=category_id)
