"""Pydantic schemas for admin user management."""

from taskboard.db.models import Role
from taskboard.schemas import CamelModel


class UserRoleUpdate(CamelModel):
    role: Role
