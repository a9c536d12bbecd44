"""
Tests for PackageService.
"""

from decimal import Decimal

import pytest

from app.config.business_constants import DEFAULT_PACKAGE_FEATURES
from app.services import PackageService
from app.services.package_service import validate_package_terms
from app.utils.exceptions import ConflictError, NotFoundError, ValidationError


class TestValidatePackageTerms:
    """Tests for validate_package_terms()."""

    def test_valid_terms(self):
        """Typical package passes."""
        validate_package_terms(Decimal("100"), Decimal("1999"), 5, Decimal("5"))

    @pytest.mark.parametrize(
        "min_amount,max_amount,duration,roi",
        [
            ("100", "100", 5, "5"),
            ("200", "100", 5, "5"),
            ("100", "200", 0, "5"),
            ("100", "200", 5, "-1"),
            ("100", "200", 5, "100.01"),
        ],
    )
    def test_invalid_terms(self, min_amount, max_amount, duration, roi):
        """max > min, duration >= 1 and 0 <= roi <= 100 are enforced."""
        with pytest.raises(ValidationError):
            validate_package_terms(
                Decimal(min_amount), Decimal(max_amount), duration, Decimal(roi)
            )

    def test_fractional_duration_rejected(self):
        """Duration is a whole number of days."""
        with pytest.raises(ValidationError):
            validate_package_terms(Decimal("1"), Decimal("2"), 2.5, Decimal("5"))


class TestPackageService:
    """Tests for package CRUD."""

    @pytest.mark.asyncio
    async def test_create_package_defaults(self, db_session):
        """Features default and amounts are parsed from strings."""
        package = await PackageService(db_session).create_package(
            name="Starter Package",
            min_amount="100",
            max_amount="1999",
            duration=5,
            roi="5",
        )

        assert package.id is not None
        assert package.min_amount == Decimal("100")
        assert package.roi == Decimal("5")
        assert package.features == DEFAULT_PACKAGE_FEATURES
        assert package.risk_level == "medium"
        assert package.is_active is True

    @pytest.mark.asyncio
    async def test_create_package_invalid_risk(self, db_session):
        """Unknown risk level is rejected."""
        with pytest.raises(ValidationError):
            await PackageService(db_session).create_package(
                name="Odd", min_amount="1", max_amount="2", duration=1, roi="1",
                risk_level="extreme",
            )

    @pytest.mark.asyncio
    async def test_list_active_only(self, db_session, make_package):
        """Inactive packages are hidden when requested."""
        await make_package(name="Open", min_amount="500", max_amount="900")
        await make_package(name="Closed", is_active=False)

        service = PackageService(db_session)

        assert [p.name for p in await service.list_packages(active_only=True)] == [
            "Open"
        ]
        assert len(await service.list_packages()) == 2

    @pytest.mark.asyncio
    async def test_update_revalidates_merged_terms(self, db_session, make_package):
        """Raising min above existing max fails."""
        package = await make_package(min_amount="100", max_amount="1000")
        service = PackageService(db_session)
        package_id = package.id

        with pytest.raises(ValidationError):
            await service.update_package(package_id, min_amount="1000")

        updated = await service.update_package(package_id, roi="12.5", duration=7)
        assert updated.roi == Decimal("12.5")
        assert updated.duration == 7

    @pytest.mark.asyncio
    async def test_update_unknown_field(self, db_session, make_package):
        """Only catalog fields can be changed."""
        package = await make_package()

        with pytest.raises(ValidationError, match="created_by"):
            await PackageService(db_session).update_package(
                package.id, created_by=1
            )

    @pytest.mark.asyncio
    async def test_toggle(self, db_session, make_package):
        """Toggle flips is_active."""
        package = await make_package()
        service = PackageService(db_session)

        assert (await service.toggle_package(package.id)).is_active is False
        assert (await service.toggle_package(package.id)).is_active is True

    @pytest.mark.asyncio
    async def test_delete_unreferenced(self, db_session, make_package):
        """Unused packages can be deleted."""
        package = await make_package()
        service = PackageService(db_session)

        await service.delete_package(package.id)

        with pytest.raises(NotFoundError):
            await service.get_package(package.id)

    @pytest.mark.asyncio
    async def test_delete_referenced(
        self, db_session, make_user, make_package, make_investment
    ):
        """Packages with investments cannot be deleted."""
        user = await make_user()
        package = await make_package()
        await make_investment(user, package)

        with pytest.raises(ConflictError):
            await PackageService(db_session).delete_package(package.id)
