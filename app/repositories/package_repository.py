"""
Investment package repository.

Data access layer for InvestmentPackage model.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.investment import Investment
from app.models.investment_package import InvestmentPackage
from app.repositories.base import BaseRepository


class InvestmentPackageRepository(BaseRepository[InvestmentPackage]):
    """Package catalog queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize package repository."""
        super().__init__(InvestmentPackage, session)

    async def list_packages(
        self, active_only: bool = False
    ) -> list[InvestmentPackage]:
        """
        List packages ordered by minimum amount.

        Args:
            active_only: Only return packages open for investment

        Returns:
            Packages, cheapest first
        """
        stmt = select(InvestmentPackage).order_by(
            InvestmentPackage.min_amount.asc(), InvestmentPackage.id.asc()
        )
        if active_only:
            stmt = stmt.where(InvestmentPackage.is_active.is_(True))

        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def is_referenced(self, package_id: int) -> bool:
        """Check whether any investment points at the package."""
        stmt = (
            select(Investment.id)
            .where(Investment.package_id == package_id)
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.first() is not None

    async def delete(self, package: InvestmentPackage) -> None:
        """Delete a package row."""
        await self.session.delete(package)
        await self.session.flush()
