"""Pydantic schemas for the admin dashboard."""

from datetime import datetime
from typing import Optional

from taskboard.db.models import TodoPriority, TodoStatus
from taskboard.schemas import CamelModel
from taskboard.schemas.auth import UserSummary


class Totals(CamelModel):
    todos: int
    users: int
    categories: int


class CategoryCount(CamelModel):
    name: str
    count: int


class CategoryBadge(CamelModel):
    id: int
    name: str
    color: Optional[str]


class RecentTodo(CamelModel):
    id: int
    title: str
    status: TodoStatus
    priority: TodoPriority
    created_at: datetime
    category: Optional[CategoryBadge]
    assigned_to: Optional[UserSummary]


class DashboardStats(CamelModel):
    totals: Totals
    todos_by_status: dict[str, int]
    todos_by_priority: dict[str, int]
    todos_by_category: list[CategoryCount]
    recent_todos: list[RecentTodo]
