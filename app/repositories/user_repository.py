"""
User repository.

Data access layer for User model.
"""

from datetime import datetime

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import UserRole
from app.models.user import User
from app.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """User repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize user repository."""
        super().__init__(User, session)

    async def get_by_email(self, email: str) -> User | None:
        """
        Get user by email.

        Args:
            email: Normalized (lowercase) email

        Returns:
            User or None
        """
        return await self.get_by(email=email)

    async def get_by_wallet_id(self, wallet_id: str) -> User | None:
        """
        Get user by external wallet ID (e.g. MCT23A).

        Args:
            wallet_id: Normalized (uppercase) wallet ID

        Returns:
            User or None
        """
        return await self.get_by(wallet_id=wallet_id)

    async def wallet_id_exists(self, wallet_id: str) -> bool:
        """Check whether a wallet ID is already taken."""
        return await self.exists(wallet_id=wallet_id)

    async def lock_many(self, user_ids: list[int]) -> dict[int, User]:
        """
        Lock several user rows in ascending ID order.

        Acquiring locks in a fixed order keeps two opposite transfers
        from deadlocking on each other.

        Args:
            user_ids: IDs to lock

        Returns:
            Mapping of ID to locked user (missing IDs are absent)
        """
        locked: dict[int, User] = {}
        for user_id in sorted(set(user_ids)):
            user = await self.get_for_update(user_id)
            if user is not None:
                locked[user_id] = user
        return locked

    async def count_active(self) -> int:
        """Count accounts with is_active set."""
        return await self.count(is_active=True)

    async def count_created_since(self, since: datetime) -> int:
        """
        Count accounts registered at or after a moment.

        Args:
            since: Lower bound (inclusive)

        Returns:
            Number of users
        """
        stmt = select(func.count(User.id)).where(User.created_at >= since)
        result = await self.session.execute(stmt)
        return result.scalar() or 0


    async def find_users(
        self,
        search: str | None = None,
        is_active: bool | None = None,
        page: int = 1,
        per_page: int = 10,
    ) -> tuple[list[User], int]:
        """
        Page through regular (non-admin) accounts, newest first.

        Args:
            search: Case-insensitive substring of first name, last name
                or email
            is_active: Optional activation filter
            page: Page number (1-indexed)
            per_page: Items per page

        Returns:
            Tuple of (users, total_count)
        """
        conditions = [User.role == UserRole.USER.value]
        if search:
            conditions.append(
                or_(
                    User.first_name.icontains(search, autoescape=True),
                    User.last_name.icontains(search, autoescape=True),
                    User.email.icontains(search, autoescape=True),
                )
            )
        if is_active is not None:
            conditions.append(User.is_active.is_(is_active))

        count_stmt = select(func.count(User.id)).where(*conditions)
        total = (await self.session.execute(count_stmt)).scalar() or 0

        stmt = (
            select(User)
            .where(*conditions)
            .order_by(User.created_at.desc(), User.id.desc())
            .offset((max(page, 1) - 1) * per_page)
            .limit(per_page)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total
