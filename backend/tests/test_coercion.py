"""
Tests for snapshot value coercion.
"""

from datetime import datetime, timezone

import pytest

from pos_api.models.enums import OrderStatus, PurchaseStatus, SaleStatus
from pos_api.services.maintenance.coercion import (
    coerce_enum,
    format_date,
    parse_date,
    to_boolean,
    to_int,
    to_nullable_text,
    to_number,
    to_employee_status,
    to_leave_status,
    to_order_status,
    to_order_type,
    to_payment_method,
    to_payroll_type,
    to_purchase_status,
    to_sale_status,
    to_shift_status,
    to_text,
    to_zone_status,
)


class TestTextCoercion:
    """to_text / to_nullable_text."""

    def test_strings_pass_through(self):
        assert to_text("Cola") == "Cola"
        assert to_text("") == ""

    def test_none_uses_fallback(self):
        assert to_text(None) == ""
        assert to_text(None, fallback="n/a") == "n/a"

    def test_scalars_are_stringified(self):
        assert to_text(12) == "12"
        assert to_text(12.0) == "12"
        assert to_text(1.5) == "1.5"
        assert to_text(True) == "true"

    def test_nullable_text_maps_empty_to_none(self):
        assert to_nullable_text(None) is None
        assert to_nullable_text("") is None
        assert to_nullable_text("note") == "note"
        assert to_nullable_text(0) == "0"


class TestNumberCoercion:
    """to_number / to_int."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (None, 0.0),
            (3, 3.0),
            (2.5, 2.5),
            ("4.25", 4.25),
            ("  7 ", 7.0),
            ("", 0.0),
            (True, 1.0),
            (False, 0.0),
            ("abc", 0.0),
            ({"a": 1}, 0.0),
            ([], 0.0),
            (["5"], 5.0),
            (float("nan"), 0.0),
            (float("inf"), 0.0),
            ("Infinity", 0.0),
            ("0x10", 16.0),
        ],
    )
    def test_to_number(self, value, expected):
        assert to_number(value) == expected

    def test_to_int_rounds_half_up(self):
        assert to_int(2.5, minimum=0) == 3
        assert to_int(2.4, minimum=0) == 2
        assert to_int("7.6", minimum=0) == 8

    def test_to_int_clamps_to_minimum(self):
        assert to_int(-3, minimum=0) == 0
        assert to_int(0, minimum=1) == 1
        assert to_int(None, minimum=1) == 1
        assert to_int("garbage", minimum=1) == 1


class TestBooleanCoercion:
    """to_boolean follows JavaScript truthiness."""

    @pytest.mark.parametrize("value", [None, False, 0, 0.0, "", float("nan")])
    def test_falsy(self, value):
        assert to_boolean(value) is False

    @pytest.mark.parametrize("value", [True, 1, -1, "false", "0", [], {}])
    def test_truthy(self, value):
        assert to_boolean(value) is True


class TestDates:
    """parse_date / format_date."""

    def test_parses_z_suffix(self):
        parsed = parse_date("2024-01-05T10:00:00.000Z")
        assert parsed == datetime(2024, 1, 5, 10, tzinfo=timezone.utc)

    def test_naive_input_is_utc(self):
        assert parse_date("2024-01-05T10:00:00") == datetime(2024, 1, 5, 10, tzinfo=timezone.utc)

    def test_offset_is_normalized_to_utc(self):
        assert parse_date("2024-01-05T12:00:00+02:00") == datetime(2024, 1, 5, 10, tzinfo=timezone.utc)

    def test_date_only(self):
        assert parse_date("2024-01-05") == datetime(2024, 1, 5, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value", [None, "", "   ", "yesterday", "2024-13-45", 20240105, {}])
    def test_unparsable_is_none(self, value):
        assert parse_date(value) is None

    def test_format_date_millisecond_z(self):
        value = datetime(2024, 1, 5, 10, 0, 0, 123456, tzinfo=timezone.utc)
        assert format_date(value) == "2024-01-05T10:00:00.123Z"

    def test_format_date_treats_naive_as_utc(self):
        assert format_date(datetime(2024, 1, 5, 10)) == "2024-01-05T10:00:00.000Z"

    def test_format_date_none(self):
        assert format_date(None) is None


class TestEnumCoercion:
    """Unknown enum values degrade to the documented fallback."""

    def test_known_value_kept(self):
        assert to_order_status("READY") is OrderStatus.READY
        assert to_purchase_status("RECEIVED") is PurchaseStatus.RECEIVED

    def test_unknown_value_falls_back(self):
        assert to_order_status("BOGUS_STATUS") is OrderStatus.PREPARING
        assert to_purchase_status("shipped") is PurchaseStatus.DRAFT
        assert to_payment_method(None).value == "CASH"

    @pytest.mark.parametrize(
        "coerce, expected",
        [
            (to_purchase_status, "DRAFT"),
            (to_zone_status, "ACTIVE"),
            (to_employee_status, "ACTIVE"),
            (to_shift_status, "ACTIVE"),
            (to_payroll_type, "SALARY"),
            (to_leave_status, "PENDING"),
            (to_order_type, "DINE_IN"),
            (to_order_status, "PREPARING"),
            (to_payment_method, "CASH"),
            (to_sale_status, "DRAFT"),
        ],
    )
    def test_each_fallback(self, coerce, expected):
        assert coerce("NOT_A_MEMBER").value == expected
        assert coerce(None).value == expected

    def test_values_are_case_sensitive(self):
        assert coerce_enum(SaleStatus, "paid") is SaleStatus.DRAFT

    def test_member_passes_through(self):
        assert coerce_enum(SaleStatus, SaleStatus.PAID) is SaleStatus.PAID

    def test_non_string_falls_back(self):
        assert to_order_status(3) is OrderStatus.PREPARING
