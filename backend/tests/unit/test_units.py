"""Tests for unit conversion helpers."""

from decimal import Decimal

import pytest

from services.exceptions import InvalidAmountError
from utils.units import format_units, to_base_units


class TestToBaseUnits:
    @pytest.mark.parametrize(
        "amount, unit, expected",
        [
            (1, "btc", 100_000_000),
            ("0.5", "btc", 50_000_000),
            (100_000, "sat", 100_000),
            (100, "ksat", 100_000),
            (1000, "msat", 1),
            (Decimal("2.5"), "asset", 250_000_000),
            ("0.00000001", "btc", 1),
        ],
    )
    def test_conversions(self, amount, unit, expected):
        assert to_base_units(amount, unit) == expected

    def test_default_unit_is_sats(self):
        assert to_base_units(12345) == 12345

    def test_unit_is_case_insensitive(self):
        assert to_base_units(1, "BTC") == 100_000_000

    def test_unknown_unit(self):
        with pytest.raises(InvalidAmountError, match="Invalid unit"):
            to_base_units(1, "bits")

    @pytest.mark.parametrize("amount", [0, -1, "-0.5", "0"])
    def test_non_positive(self, amount):
        with pytest.raises(InvalidAmountError, match="positive"):
            to_base_units(amount)

    def test_fractional_base_unit(self):
        """1500 msat is 1.5 sats, which cannot be represented."""
        with pytest.raises(InvalidAmountError, match="whole number"):
            to_base_units(1500, "msat")

    def test_fractional_sats(self):
        with pytest.raises(InvalidAmountError):
            to_base_units("1.5", "sat")

    @pytest.mark.parametrize("amount", [1.5, True])
    def test_float_and_bool_refused(self, amount):
        with pytest.raises(InvalidAmountError):
            to_base_units(amount)

    @pytest.mark.parametrize("amount", ["abc", "", "NaN", "Infinity"])
    def test_unparseable(self, amount):
        with pytest.raises(InvalidAmountError):
            to_base_units(amount)

    def test_error_carries_amount(self):
        with pytest.raises(InvalidAmountError) as exc_info:
            to_base_units(-5)
        assert exc_info.value.amount == -5


class TestFormatUnits:
    def test_whole_and_fraction(self):
        assert format_units(150_000_000) == "1.50000000"

    def test_sub_unit(self):
        assert format_units(1) == "0.00000001"

    def test_negative(self):
        assert format_units(-50_000_000) == "-0.50000000"

    def test_fewer_places(self):
        assert format_units(123_456_789, places=2) == "1.23"
