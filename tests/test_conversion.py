"""Sats converter and en-US display formatting."""
from __future__ import annotations

from decimal import Decimal

import pytest

from btc_wallet_sync.conversion import (
    EMPTY_CONVERSION,
    convert_sats,
    format_btc,
    format_number,
    format_percentage,
    mask_value,
    parse_sats,
    sanitize_sats_input,
)
from btc_wallet_sync.core.errors import ParseError
from tests.fakes import make_price

PRICE = make_price(usd="50000", eur="46000")


class TestConvertSats:
    def test_grouped_input(self):
        conv = convert_sats("100,000", PRICE)
        assert conv.usd == "50.00"
        assert conv.eur == "46.00"

    def test_large_amount_grouped_output(self):
        conv = convert_sats("1,000,000,000", PRICE)
        assert conv.usd == "500,000.00"

    @pytest.mark.parametrize("text", ["", "abc", ",", "1.2.3"])
    def test_invalid_input_is_empty(self, text):
        assert convert_sats(text, PRICE) == EMPTY_CONVERSION
        assert convert_sats(text, PRICE).is_empty

    def test_no_price_is_empty(self):
        assert convert_sats("100,000", None).is_empty

    def test_zero_is_not_empty(self):
        conv = convert_sats("0", PRICE)
        assert conv.usd == "0.00"
        assert not conv.is_empty

    def test_tiny_amount_keeps_significant_digits(self):
        assert convert_sats("1", PRICE).usd == "0.0005"

    def test_pure(self):
        assert convert_sats("12,345", PRICE) == convert_sats("12,345", PRICE)

    def test_many_digit_amount_keeps_every_digit(self):
        conv = convert_sats("1" + "0" * 70, PRICE)
        assert conv.usd.replace(",", "") == "5" + "0" * 66 + ".00"
        assert conv.eur.replace(",", "") == "46" + "0" * 65 + ".00"

    def test_exponent_amount_exact(self):
        assert convert_sats("1e30", PRICE).usd.replace(",", "") == "5" + "0" * 26 + ".00"

    def test_out_of_range_exponent_is_empty(self):
        assert convert_sats("1e999999999", PRICE).is_empty


class TestParsing:
    def test_sanitize_keeps_digits_and_commas(self):
        assert sanitize_sats_input("12a,3.4 ") == "12,34"

    def test_parse_strips_commas(self):
        assert parse_sats("1,234") == Decimal("1234")

    def test_parse_rejects_garbage(self):
        with pytest.raises(ParseError):
            parse_sats("12x")


class TestFormatting:
    def test_format_number_grouping_and_padding(self):
        assert format_number(Decimal("1234.5")) == "1,234.50"
        assert format_number(Decimal("1234")) == "1,234.00"

    def test_format_number_rounds_half_up_at_eight(self):
        assert format_number(Decimal("0.123456785")) == "0.12345679"

    def test_format_number_no_fraction(self):
        assert format_number(150000, 0) == "150,000"

    def test_format_percentage_sign(self):
        assert format_percentage(Decimal("1.234")) == "+1.23"
        assert format_percentage(Decimal("-0.5")) == "-0.50"

    def test_format_btc(self):
        assert format_btc(Decimal("0.5")) == "0.50000000"
        assert format_btc(Decimal("1.5")) == "1.50"

    def test_mask_value(self):
        assert mask_value("1.50", True) == "********"
        assert mask_value("1.50", False) == "1.50"
