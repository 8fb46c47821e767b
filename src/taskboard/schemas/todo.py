"""Pydantic schemas for todos.

Learn: Separate schemas for create/update/read keeps the API clean.
- TodoCreate: what you POST to create a todo
- TodoUpdate: what you PATCH (only keys present in the body are applied;
  categoryId, assignedToId and dueDate accept null to clear them)
- TodoRead: what the API returns, with category/creator/assignee embedded
- TodoPage: a page of todos plus pagination info
"""

from datetime import datetime
from typing import Optional

from pydantic import Field, model_validator

from taskboard.db.models import TodoPriority, TodoStatus
from taskboard.schemas import CamelModel, reject_nulls
from taskboard.schemas.auth import UserSummary
from taskboard.schemas.category import CategoryRead


class TodoCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    priority: TodoPriority = TodoPriority.MEDIUM
    status: TodoStatus = TodoStatus.TODO
    due_date: Optional[datetime] = None
    category_id: Optional[int] = Field(None, gt=0)
    assigned_to_id: Optional[int] = Field(None, gt=0)


class TodoUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    priority: Optional[TodoPriority] = None
    status: Optional[TodoStatus] = None
    due_date: Optional[datetime] = None
    category_id: Optional[int] = Field(None, gt=0)
    assigned_to_id: Optional[int] = Field(None, gt=0)

    @model_validator(mode="after")
    def _required_not_null(self):
        reject_nulls(self, "title", "priority", "status")
        return self


class TodoRead(CamelModel):
    id: int
    title: str
    description: Optional[str]
    status: TodoStatus
    priority: TodoPriority
    due_date: Optional[datetime]
    category_id: Optional[int]
    created_by_id: int
    assigned_to_id: Optional[int]
    category: Optional[CategoryRead]
    created_by: Optional[UserSummary]
    assigned_to: Optional[UserSummary]
    created_at: datetime
    updated_at: datetime


class Pagination(CamelModel):
    current_page: int
    total_pages: int
    total_items: int
    items_per_page: int
    has_next_page: bool
    has_previous_page: bool


class TodoPage(CamelModel):
    todos: list[TodoRead]
    pagination: Pagination
