"""
Property-based tests with Hypothesis.

Snapshot parsing must be total: whatever JSON arrives, the parser and the
coercion helpers return a value instead of raising.
"""

import math

from hypothesis import given, settings, strategies as st

from pos_api.services.maintenance import SNAPSHOT_KEYS, parse_system_snapshot
from pos_api.services.maintenance.coercion import (
    format_date,
    parse_date,
    to_boolean,
    to_int,
    to_nullable_text,
    to_number,
    to_order_status,
    to_text,
)
from pos_api.models.enums import OrderStatus

json_scalars = st.none() | st.booleans() | st.integers() | st.floats() | st.text(max_size=20)
json_values = st.recursive(
    json_scalars,
    lambda children: st.lists(children, max_size=4) | st.dictionaries(st.text(max_size=8), children, max_size=4),
    max_leaves=12,
)


class TestCoercionProperties:
    """Coercion helpers never raise and respect their ranges."""

    @given(value=json_values)
    def test_to_number_is_finite(self, value):
        assert math.isfinite(to_number(value))

    @given(value=json_values, minimum=st.integers(min_value=0, max_value=5))
    def test_to_int_respects_minimum(self, value, minimum):
        result = to_int(value, minimum=minimum)
        assert isinstance(result, int)
        assert result >= minimum

    @given(value=json_values)
    def test_text_helpers_are_total(self, value):
        assert isinstance(to_text(value), str)
        text = to_nullable_text(value)
        assert text is None or text != ""
        assert isinstance(to_boolean(value), bool)

    @given(value=json_values)
    def test_enum_coercion_always_yields_member(self, value):
        assert isinstance(to_order_status(value), OrderStatus)

    @given(value=st.datetimes(timezones=st.just(None)))
    def test_date_format_round_trips_to_milliseconds(self, value):
        parsed = parse_date(format_date(value))
        assert parsed is not None
        assert format_date(parsed) == format_date(value)


class TestParserProperties:
    """parse_system_snapshot never raises."""

    @given(payload=json_values)
    @settings(max_examples=200)
    def test_arbitrary_json(self, payload):
        parse_system_snapshot(payload)

    @given(
        rows=st.lists(st.dictionaries(st.text(max_size=10), json_values, max_size=6), max_size=3),
        key=st.sampled_from(SNAPSHOT_KEYS),
    )
    def test_arbitrary_rows_in_a_collection(self, rows, key):
        data = {name: [] for name in SNAPSHOT_KEYS}
        data[key] = rows
        snapshot = parse_system_snapshot({"version": 1, "data": data})
        assert snapshot is not None
        assert len(snapshot.to_payload()["data"][key]) == len(rows)
