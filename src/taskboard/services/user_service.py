"""User service — admin-side account management.

Learn: Three policy rules live here, all enforced before any write:
1. An admin can't change their own role.
2. An admin can't delete their own account.
3. The last remaining ADMIN can't be deleted or demoted.

Deleting a user keeps the todo pool consistent in one transaction:
todos assigned to them become unassigned, todos they created go away.
"""

from typing import Optional

import structlog
from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.auth.password import hash_password
from taskboard.db.models import Role, Todo, User
from taskboard.errors import DuplicateEmail, Forbidden, LastAdmin, NotFound

logger = structlog.get_logger()


class UserService:
    """Business logic for user management."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_users(self) -> list[User]:
        result = await self.db.execute(select(User).order_by(User.id))
        return list(result.scalars().all())

    async def get_user(self, user_id: int) -> User:
        user = await self.db.get(User, user_id)
        if not user:
            raise NotFound("User not found")
        return user

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalars().first()

    async def count_admins(self) -> int:
        """Count ADMIN rows, locking them until the transaction ends.

        Two admins removing each other at once both wait on the same rows,
        so the second one sees the first one's write and stops at one.
        """
        result = await self.db.execute(
            select(User.id).where(User.role == Role.ADMIN).with_for_update()
        )
        return len(result.all())

    async def create_user(
        self, email: str, password: str, name: str, role: Role = Role.USER
    ) -> User:
        """Create an account directly (CLI bootstrap, no session issued)."""
        if await self.get_by_email(email):
            raise DuplicateEmail()
        user = User(
            email=email,
            name=name,
            password_hash=hash_password(password),
            role=role,
        )
        self.db.add(user)
        await self.db.commit()
        await self.db.refresh(user)
        logger.info("users.created", user_id=user.id, role=role.value)
        return user

    async def change_role(self, actor_id: int, user_id: int, role: Role) -> User:
        if actor_id == user_id:
            raise Forbidden("You cannot change your own role")
        user = await self.get_user(user_id)
        if (
            user.role == Role.ADMIN
            and role != Role.ADMIN
            and await self.count_admins() <= 1
        ):
            raise LastAdmin("Cannot demote the last administrator")
        user.role = role
        await self.db.commit()
        await self.db.refresh(user)
        logger.info("users.role_changed", user_id=user_id, role=role.value, by=actor_id)
        return user

    async def delete_user(self, actor_id: int, user_id: int) -> None:
        if actor_id == user_id:
            raise Forbidden("You cannot delete your own account")
        user = await self.get_user(user_id)
        if user.role == Role.ADMIN and await self.count_admins() <= 1:
            raise LastAdmin()

        await self.db.execute(
            update(Todo)
            .where(Todo.assigned_to_id == user_id)
            .values(assigned_to_id=None)
        )
        await self.db.execute(delete(Todo).where(Todo.created_by_id == user_id))
        await self.db.delete(user)
        await self.db.commit()
        logger.info("users.deleted", user_id=user_id, by=actor_id)
