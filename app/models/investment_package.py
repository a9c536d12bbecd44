"""
Investment package model.

Investable plan templates: amount bounds, duration and total ROI.
"""

from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base
from app.models.enums import RiskLevel
from app.models.types import MoneyType, PercentType

if TYPE_CHECKING:
    from app.models.investment import Investment


class InvestmentPackage(Base):
    """Investment package - plan definition."""

    __tablename__ = "investment_packages"
    __table_args__ = (
        CheckConstraint(
            'min_amount >= 0', name='check_package_min_amount_non_negative'
        ),
        CheckConstraint(
            'max_amount > min_amount', name='check_package_max_gt_min'
        ),
        CheckConstraint(
            'duration >= 1', name='check_package_duration_positive'
        ),
        CheckConstraint(
            'roi >= 0 AND roi <= 100', name='check_package_roi_range'
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    # Bounds
    min_amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    max_amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)

    # Duration in days, ROI in percent over the whole duration
    duration: Mapped[int] = mapped_column(Integer, nullable=False)
    roi: Mapped[Decimal] = mapped_column(PercentType, nullable=False)

    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, nullable=False, index=True
    )
    risk_level: Mapped[str] = mapped_column(
        String(10), default=RiskLevel.MEDIUM.value, nullable=False
    )
    features: Mapped[list[str]] = mapped_column(
        JSON, default=list, nullable=False
    )

    created_by: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False
    )

    investments: Mapped[list["Investment"]] = relationship(
        "Investment",
        back_populates="package",
    )

    @property
    def daily_rate(self) -> Decimal:
        """Fraction of principal accrued per day."""
        return Decimal(self.roi) / Decimal("100") / Decimal(self.duration)

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<InvestmentPackage(id={self.id}, name={self.name}, "
            f"roi={self.roi}, duration={self.duration})>"
        )
