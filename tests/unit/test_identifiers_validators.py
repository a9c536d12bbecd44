"""
Tests for identifier generators, validators and small helpers.
"""

import re
from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest

from app.config.business_constants import calculate_withdrawal_fee
from app.utils.datetime_utils import ensure_utc, start_of_month, whole_days_between
from app.utils.exceptions import TransientError, ValidationError, must_log
from app.utils.identifiers import (
    generate_transaction_reference,
    generate_wallet_id,
    normalize_wallet_id,
)
from app.validators import (
    normalize_pagination,
    require_positive_amount,
    sanitize_text,
    validate_amount,
    validate_email,
)


class TestIdentifiers:
    """Reference and wallet ID formats."""

    def test_transaction_reference_format(self):
        """TYPE-millis-6 uppercase alphanumerics."""
        reference = generate_transaction_reference("transfer_out")

        assert re.fullmatch(r"TRANSFER_OUT-\d{13}-[0-9A-Z]{6}", reference)

    def test_references_differ(self):
        """Random suffix makes collisions unlikely."""
        references = {generate_transaction_reference("deposit") for _ in range(50)}

        assert len(references) == 50

    def test_wallet_id_format(self):
        """MCT + two digits + one letter."""
        for _ in range(20):
            assert re.fullmatch(r"MCT[1-9]\d[A-Z]", generate_wallet_id())

    def test_normalize_wallet_id(self):
        """Lookup is case-insensitive."""
        assert normalize_wallet_id("  mct42b ") == "MCT42B"
        assert normalize_wallet_id(None) == ""


class TestAmounts:
    """Amount parsing."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("100.50", Decimal("100.50")),
            ("1,5", Decimal("1.5")),
            (Decimal("0.00000001"), Decimal("0.00000001")),
            (7, Decimal("7")),
        ],
    )
    def test_valid_amounts(self, raw, expected):
        """Strings, Decimals and ints are accepted."""
        assert require_positive_amount(raw) == expected

    @pytest.mark.parametrize(
        "raw", ["", "abc", "0", "-1", "NaN", "1.000000001", 1.5, True]
    )
    def test_rejected_amounts(self, raw):
        """Malformed, non-positive, over-precise and float amounts fail."""
        with pytest.raises(ValidationError):
            require_positive_amount(raw)

    def test_upper_bound(self):
        """Optional max is enforced."""
        is_valid, value, error = validate_amount("11", max_val=Decimal("10"))

        assert is_valid is False
        assert value is None
        assert error == "Amount must be <= 10"

    def test_withdrawal_fee(self):
        """Two percent fee, rest is net."""
        assert calculate_withdrawal_fee(Decimal("100")) == (
            Decimal("2"),
            Decimal("98"),
        )
        fee, net = calculate_withdrawal_fee(Decimal("250"), Decimal("5"))
        assert fee + net == Decimal("250")
        assert fee == Decimal("12.5")


class TestTextAndPaging:
    """Email, free text and pagination helpers."""

    def test_email(self):
        """Basic shape check."""
        assert validate_email("a@b.io") == (True, None)
        assert validate_email("a@b")[0] is False
        assert validate_email("")[0] is False

    def test_sanitize_text(self):
        """Angle brackets dropped, whitespace trimmed, length capped."""
        assert sanitize_text("  <b>hi</b> ") == "bhi/b"
        assert sanitize_text(None) is None
        assert sanitize_text("x" * 10, max_length=4) == "xxxx"

    @pytest.mark.parametrize(
        "page,per_page,expected",
        [
            (None, None, (1, 10)),
            (0, 1000, (1, 100)),
            (3, 0, (3, 10)),
            (2, 25, (2, 25)),
        ],
    )
    def test_pagination(self, page, per_page, expected):
        """Page >= 1, 1 <= per_page <= 100."""
        assert normalize_pagination(page, per_page) == expected


class TestDatetimeAndErrors:
    """Datetime helpers and error classification."""

    def test_whole_days_floor(self):
        """Partial days do not count."""
        start = datetime(2026, 1, 1, 12, tzinfo=UTC)

        assert whole_days_between(start, start + timedelta(hours=47)) == 1
        assert whole_days_between(start, start - timedelta(days=3)) == 0

    def test_ensure_utc_tags_naive(self):
        """Naive values are treated as UTC."""
        naive = datetime(2026, 1, 1, 12)

        assert ensure_utc(naive) == datetime(2026, 1, 1, 12, tzinfo=UTC)

    def test_start_of_month(self):
        """Truncates to the first day at midnight."""
        value = datetime(2026, 10, 19, 15, 30, tzinfo=UTC)

        assert start_of_month(value) == datetime(2026, 10, 1, tzinfo=UTC)

    def test_must_log(self):
        """Only transient store failures are skip-and-log."""
        assert must_log(TransientError("busy")) is True
        assert must_log(ValidationError("bad")) is False
        assert must_log(RuntimeError("boom")) is False
