"""Tests for the values module - physical quantity parsing."""

import pytest

from partxref_mcp.values import (
    normalize,
    parse_boolean,
    parse_msl,
    parse_percentage,
    parse_quantity,
    parse_range,
    values_equal,
)


class TestParseQuantity:
    """Tests for parse_quantity function."""

    def test_si_prefixes(self):
        assert parse_quantity("100nF") == pytest.approx(100e-9)
        assert parse_quantity("4.7uF") == pytest.approx(4.7e-6)
        assert parse_quantity("4.7µF") == pytest.approx(4.7e-6)
        assert parse_quantity("22pF") == pytest.approx(22e-12)
        assert parse_quantity("500mA") == pytest.approx(0.5)
        assert parse_quantity("2.2MHz") == pytest.approx(2.2e6)

    def test_plain_units(self):
        assert parse_quantity("50V") == 50.0
        assert parse_quantity("25 V") == 25.0
        assert parse_quantity("10Ω") == 10.0

    def test_with_spaces_between_prefix(self):
        assert parse_quantity("4.7 kΩ") == pytest.approx(4700)
        assert parse_quantity("100 nF") == pytest.approx(100e-9)

    def test_european_notation(self):
        assert parse_quantity("4k7") == pytest.approx(4700)
        assert parse_quantity("0R05") == pytest.approx(0.05)
        assert parse_quantity("2M2") == pytest.approx(2.2e6)

    def test_fraction_watts(self):
        assert parse_quantity("1/4W") == pytest.approx(0.25)
        assert parse_quantity("1/10W") == pytest.approx(0.1)

    def test_unicode_minus(self):
        assert parse_quantity("−40°C") == -40.0

    def test_strict_requires_whole_string(self):
        assert parse_quantity("0402", strict=True) == 402.0
        assert parse_quantity("10R", strict=True) == 10.0
        assert parse_quantity("0402 (1005 Metric)", strict=True) is None
        assert parse_quantity("X7R", strict=True) is None

    def test_invalid(self):
        assert parse_quantity("") is None
        assert parse_quantity(None) is None
        assert parse_quantity("abc") is None


class TestParsePercentage:
    def test_with_plus_minus(self):
        assert parse_percentage("±1%") == 1.0
        assert parse_percentage("±0.5%") == 0.5
        assert parse_percentage("± 10 %") == 10.0

    def test_without_symbol(self):
        assert parse_percentage("5%") == 5.0

    def test_invalid(self):
        assert parse_percentage("") is None
        assert parse_percentage(None) is None
        assert parse_percentage("10") is None


class TestParseRange:
    def test_temperature_tilde(self):
        assert parse_range("-55°C ~ 125°C") == (-55.0, 125.0)

    def test_to_separator(self):
        assert parse_range("4.5V to 18V") == (4.5, 18.0)

    def test_dash_separator(self):
        assert parse_range("10V - 20V") == (10.0, 20.0)

    def test_reversed_is_sorted(self):
        assert parse_range("125 ~ -55") == (-55.0, 125.0)

    def test_prefixes(self):
        low, high = parse_range("100mV ~ 1V")
        assert low == pytest.approx(0.1)
        assert high == pytest.approx(1.0)

    def test_invalid(self):
        assert parse_range("") is None
        assert parse_range(None) is None
        assert parse_range("125°C") is None


class TestParseMsl:
    def test_levels(self):
        assert parse_msl("MSL 1") == 1.0
        assert parse_msl("3 (168 Hours)") == 3.0

    def test_a_suffix_sorts_between_levels(self):
        assert parse_msl("2a") == 2.5
        assert parse_msl("2") < parse_msl("2a") < parse_msl("3")

    def test_invalid(self):
        assert parse_msl("") is None
        assert parse_msl("n/a") is None


class TestParseBoolean:
    def test_affirmative(self):
        for text in ("Yes", "true", "1", "Required", "Y", "present", "Supported"):
            assert parse_boolean(text) is True, text

    def test_negative_and_missing(self):
        for text in ("No", "false", "0", "", None, "-", "unknown"):
            assert parse_boolean(text) is False, text


class TestNormalize:
    def test_case_and_whitespace(self):
        assert normalize("  x7r   ceramic ") == "X7R CERAMIC"
        assert normalize("0603") == "0603"


class TestValuesEqual:
    def test_exact(self):
        assert values_equal(1.0, 1.0)

    def test_float_noise(self):
        assert values_equal(100e-9, 1e-7)
        assert values_equal(4700, 4.7 * 1000)

    def test_different(self):
        assert not values_equal(50.0, 45.0)
        assert not values_equal(0.0, 1e-12)
