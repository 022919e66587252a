"""Tests for week-batch normalization."""

from datetime import date, time

from app.scheduling.normalization import (
    FlatBatch,
    GroupedBatch,
    NESTED_NOT_A_LIST,
    NOT_AN_OBJECT,
    detect_batch,
    flatten,
    normalize_week,
    parse_row,
)


def row(**overrides):
    base = {
        "employee_id": 1,
        "date_of_day": "2024-01-16",
        "scheduled_start_time": "09:00:00",
        "scheduled_end_time": "17:00:00",
        "status_id": 1,
    }
    base.update(overrides)
    return base


class TestDetectAndFlatten:
    def test_flat_batch(self):
        data = [row(), row(date_of_day="2024-01-17")]
        batch = detect_batch(data)
        assert isinstance(batch, FlatBatch)
        assert flatten(batch) == data

    def test_grouped_batch_propagates_day_date(self):
        data = [
            {"date_of_day": "2024-01-16", "schedules": [{"employee_id": 1}, {"employee_id": 2}]},
            {"date_of_day": "2024-01-17", "schedules": [{"employee_id": 1}]},
        ]
        batch = detect_batch(data)
        assert isinstance(batch, GroupedBatch)
        rows = flatten(batch)
        assert [r["date_of_day"] for r in rows] == ["2024-01-16", "2024-01-16", "2024-01-17"]
        assert [r["employee_id"] for r in rows] == [1, 2, 1]

    def test_day_date_overrides_row_date(self):
        data = [{"date_of_day": "2024-01-18", "schedules": [row(date_of_day="2024-01-16")]}]
        assert flatten(detect_batch(data))[0]["date_of_day"] == "2024-01-18"

    def test_shape_decided_by_first_element(self):
        data = [row(), {"date_of_day": "2024-01-17", "schedules": [row(employee_id=2)]}]
        batch = detect_batch(data)
        assert isinstance(batch, FlatBatch)
        rows = flatten(batch)
        assert [(r["employee_id"], r["date_of_day"]) for r in rows] == [(1, "2024-01-16"), (2, "2024-01-17")]

    def test_flat_row_after_day_group_is_kept(self):
        data = [
            {"date_of_day": "2024-01-16", "schedules": [row()]},
            row(employee_id=2, date_of_day="2024-01-17"),
        ]
        batch = detect_batch(data)
        assert isinstance(batch, GroupedBatch)
        rows = flatten(batch)
        assert [(r["employee_id"], r["date_of_day"]) for r in rows] == [(1, "2024-01-16"), (2, "2024-01-17")]

    def test_empty_day_group(self):
        data = [{"date_of_day": "2024-01-16", "schedules": []}]
        assert flatten(detect_batch(data)) == []


class TestParseRow:
    def test_valid_row(self):
        entry = parse_row(row(required_skills=[2, 1], scheduled_start_time="09:00"))
        assert entry.employee_id == 1
        assert entry.date_of_day == date(2024, 1, 16)
        assert entry.scheduled_start_time == time(9, 0)
        assert entry.required_skills == {1, 2}
        assert entry.id is None

    def test_string_ids_are_accepted(self):
        entry = parse_row(row(employee_id="3", status_id="2", id="11"))
        assert (entry.employee_id, entry.status_id, entry.id) == (3, 2, 11)

    def test_missing_employee(self):
        assert parse_row(row(employee_id=None)) is None

    def test_boolean_employee_is_rejected(self):
        assert parse_row(row(employee_id=True)) is None

    def test_malformed_time(self):
        assert parse_row(row(scheduled_start_time="9am")) is None

    def test_end_before_start(self):
        assert parse_row(row(scheduled_start_time="17:00:00", scheduled_end_time="09:00:00")) is None

    def test_bad_date(self):
        assert parse_row(row(date_of_day="2024-13-40")) is None


class TestNormalizeWeek:
    def test_rows_are_indexed_in_flattened_order(self):
        data = [
            {"date_of_day": "2024-01-16", "schedules": [row(), row(status_id=None)]},
            {"date_of_day": "2024-01-17", "schedules": [row()]},
        ]
        rows = normalize_week(data)
        assert [r.index for r in rows] == [0, 1, 2]
        assert rows[0].entry is not None
        assert rows[1].entry is None
        assert rows[2].entry.date_of_day == date(2024, 1, 17)

    def test_mixed_shapes_parse_every_row(self):
        data = [
            {"date_of_day": "2024-01-16", "schedules": [row()]},
            row(date_of_day="2024-01-17"),
        ]
        rows = normalize_week(data)
        assert [r.entry.date_of_day for r in rows] == [date(2024, 1, 16), date(2024, 1, 17)]
        assert all(r.shape_error is None for r in rows)

    def test_non_object_nested_item(self):
        rows = normalize_week([{"date_of_day": "2024-01-16", "schedules": [row(), 5]}])
        assert len(rows) == 2
        assert rows[0].entry is not None
        assert rows[1].entry is None
        assert rows[1].shape_error == NOT_AN_OBJECT
        assert rows[1].raw == {"date_of_day": "2024-01-16"}

    def test_nested_value_that_is_not_a_list(self):
        rows = normalize_week([{"date_of_day": "2024-01-16", "schedules": "abc"}, row()])
        assert [r.shape_error for r in rows] == [NESTED_NOT_A_LIST, None]
        assert rows[0].entry is None
        assert rows[1].entry is not None

    def test_null_nested_value(self):
        rows = normalize_week([{"date_of_day": "2024-01-16", "schedules": None}])
        assert rows[0].shape_error == NESTED_NOT_A_LIST

    def test_non_object_top_level_element(self):
        rows = normalize_week([row(), "oops"])
        assert rows[1].shape_error == NOT_AN_OBJECT
        assert rows[1].raw == {}
