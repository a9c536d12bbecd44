"""
Package service.

Administration of the investment package catalog.
"""

from decimal import Decimal
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.config.business_constants import (
    DEFAULT_PACKAGE_FEATURES,
    PACKAGE_MAX_ROI,
    PACKAGE_MIN_DURATION_DAYS,
    PACKAGE_MIN_ROI,
)
from app.models.enums import RiskLevel
from app.models.investment_package import InvestmentPackage
from app.repositories.package_repository import InvestmentPackageRepository
from app.services.base_service import BaseService, transaction
from app.utils.exceptions import ConflictError, NotFoundError, ValidationError
from app.validators import sanitize_text, validate_amount

_UPDATABLE_FIELDS = {
    "name",
    "description",
    "min_amount",
    "max_amount",
    "duration",
    "roi",
    "risk_level",
    "features",
    "is_active",
}


def _parse_decimal(value: Any, field: str) -> Decimal:
    is_valid, parsed, error = validate_amount(
        value if isinstance(value, Decimal | int) else str(value)
    )
    if not is_valid:
        raise ValidationError(f"{field}: {error}")
    return parsed


def validate_package_terms(
    min_amount: Decimal,
    max_amount: Decimal,
    duration: int,
    roi: Decimal,
) -> None:
    """
    Check package bounds.

    Raises:
        ValidationError: max <= min, duration < 1 day or ROI outside 0-100
    """
    if max_amount <= min_amount:
        raise ValidationError("Maximum amount must be greater than minimum amount")
    if isinstance(duration, bool) or not isinstance(duration, int):
        raise ValidationError("Duration must be a whole number of days")
    if duration < PACKAGE_MIN_DURATION_DAYS:
        raise ValidationError(
            f"Duration must be at least {PACKAGE_MIN_DURATION_DAYS} day"
        )
    if roi < PACKAGE_MIN_ROI or roi > PACKAGE_MAX_ROI:
        raise ValidationError(
            f"ROI must be between {PACKAGE_MIN_ROI} and {PACKAGE_MAX_ROI}"
        )


class PackageService(BaseService):
    """Package catalog operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize package service."""
        super().__init__(session)
        self.package_repo = InvestmentPackageRepository(session)

    async def list_packages(
        self, active_only: bool = False
    ) -> list[InvestmentPackage]:
        """List packages, cheapest first."""
        return await self.package_repo.list_packages(active_only)

    async def get_package(self, package_id: int) -> InvestmentPackage:
        """
        Get one package.

        Raises:
            NotFoundError: Package missing
        """
        package = await self.package_repo.get_by_id(package_id)
        if package is None:
            raise NotFoundError(f"Package {package_id} not found")
        return package

    @transaction
    async def create_package(
        self,
        name: str,
        min_amount: Decimal | str,
        max_amount: Decimal | str,
        duration: int,
        roi: Decimal | str,
        description: str = "",
        risk_level: str = RiskLevel.MEDIUM.value,
        features: list[str] | None = None,
        is_active: bool = True,
        created_by: int | None = None,
    ) -> InvestmentPackage:
        """
        Create a package.

        Args:
            name: Display name
            min_amount: Smallest accepted principal
            max_amount: Largest accepted principal (> min_amount)
            duration: Term in days (>= 1)
            roi: Total return over the term, percent (0-100)
            description: Marketing text
            risk_level: low, medium or high
            features: Feature bullet list (defaults provided)
            is_active: Open for investment
            created_by: Creating administrator

        Returns:
            Created package
        """
        name = sanitize_text(name, max_length=200)
        if not name:
            raise ValidationError("Package name is required")

        min_value = _parse_decimal(min_amount, "min_amount")
        max_value = _parse_decimal(max_amount, "max_amount")
        roi_value = _parse_decimal(roi, "roi")
        validate_package_terms(min_value, max_value, duration, roi_value)

        try:
            risk = RiskLevel(risk_level).value
        except ValueError as e:
            raise ValidationError(f"Invalid risk level: {risk_level}") from e

        package = await self.package_repo.create(
            name=name,
            description=sanitize_text(description, max_length=2000) or "",
            min_amount=min_value,
            max_amount=max_value,
            duration=duration,
            roi=roi_value,
            risk_level=risk,
            features=list(features) if features else list(DEFAULT_PACKAGE_FEATURES),
            is_active=is_active,
            created_by=created_by,
        )

        self.logger.info(
            "Package created",
            extra={
                "package_id": package.id,
                "name": package.name,
                "roi": str(roi_value),
            },
        )
        return package

    @transaction
    async def update_package(
        self, package_id: int, **changes: Any
    ) -> InvestmentPackage:
        """
        Update package fields.

        Bounds are re-validated against the merged values. Existing
        investments keep their stored figures until next revalued.

        Raises:
            NotFoundError: Package missing
            ValidationError: Unknown field or invalid terms
        """
        unknown = set(changes) - _UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update fields: {', '.join(sorted(unknown))}")

        package = await self.package_repo.get_for_update(package_id)
        if package is None:
            raise NotFoundError(f"Package {package_id} not found")

        for field in ("min_amount", "max_amount", "roi"):
            if field in changes:
                changes[field] = _parse_decimal(changes[field], field)
        if "risk_level" in changes:
            try:
                changes["risk_level"] = RiskLevel(changes["risk_level"]).value
            except ValueError as e:
                raise ValidationError(
                    f"Invalid risk level: {changes['risk_level']}"
                ) from e
        if "name" in changes:
            changes["name"] = sanitize_text(changes["name"], max_length=200)
            if not changes["name"]:
                raise ValidationError("Package name is required")

        validate_package_terms(
            changes.get("min_amount", package.min_amount),
            changes.get("max_amount", package.max_amount),
            changes.get("duration", package.duration),
            changes.get("roi", package.roi),
        )

        for key, value in changes.items():
            setattr(package, key, value)
        await self.session.flush()

        self.logger.info(
            f"Package {package_id} updated",
            extra={"package_id": package_id, "fields": sorted(changes)},
        )
        return package

    @transaction
    async def toggle_package(self, package_id: int) -> InvestmentPackage:
        """Flip a package's active flag."""
        package = await self.package_repo.get_for_update(package_id)
        if package is None:
            raise NotFoundError(f"Package {package_id} not found")

        package.is_active = not package.is_active
        await self.session.flush()

        self.logger.info(
            f"Package {package_id} {'activated' if package.is_active else 'deactivated'}"
        )
        return package

    @transaction
    async def delete_package(self, package_id: int) -> None:
        """
        Delete a package nobody has invested in.

        Raises:
            NotFoundError: Package missing
            ConflictError: Package is referenced by investments
        """
        package = await self.package_repo.get_for_update(package_id)
        if package is None:
            raise NotFoundError(f"Package {package_id} not found")
        if await self.package_repo.is_referenced(package_id):
            raise ConflictError(
                "Package has investments; deactivate it instead of deleting"
            )

        await self.package_repo.delete(package)
        self.logger.info(f"Package {package_id} deleted")
