from datetime import date, datetime, timezone

import pytest

from travelops_console.app.ui.sorting import (
    ComparatorRegistry,
    SortOrder,
    as_datetime,
    as_number,
    collator_for,
    sort_rows,
    toggle_order,
)


def _names(rows):
    return [row["name"] for row in rows]


def test_english_collation_orders_alex_alice_zara() -> None:
    rows = [{"name": "Zara"}, {"name": "alice"}, {"name": "Alex"}]
    registry = ComparatorRegistry.for_fields(["name"], collate=collator_for("en"))

    assert _names(sort_rows(rows, "name", "asc", registry)) == ["Alex", "alice", "Zara"]
    assert _names(sort_rows(rows, "name", "desc", registry)) == ["Zara", "alice", "Alex"]


def test_codepoint_collation_puts_uppercase_first() -> None:
    rows = [{"name": "alice"}, {"name": "Zara"}, {"name": "Alex"}]
    registry = ComparatorRegistry.for_fields(["name"], collate=collator_for("C"))

    assert _names(registry.sort(rows, "name")) == ["Alex", "Zara", "alice"]


def test_accents_are_secondary_and_lowercase_breaks_ties() -> None:
    rows = [{"name": "Émile"}, {"name": "emile"}, {"name": "Emile"}, {"name": "Eva"}]
    registry = ComparatorRegistry.for_fields(["name"])

    assert _names(registry.sort(rows, "name")) == ["emile", "Emile", "Émile", "Eva"]


def test_sort_is_idempotent_and_desc_reverses_distinct_keys() -> None:
    rows = [{"name": name} for name in ["Neha", "arjun", "Kabir", "Meera"]]
    registry = ComparatorRegistry.for_fields(["name"])

    once = registry.sort(rows, "name", SortOrder.ASC)
    assert registry.sort(once, "name", SortOrder.ASC) == once
    assert registry.sort(rows, "name", SortOrder.DESC) == list(reversed(once))


def test_sort_is_stable_for_equal_keys_in_both_orders() -> None:
    rows = [
        {"id": 1, "status": "ACTIVE"},
        {"id": 2, "status": "INACTIVE"},
        {"id": 3, "status": "ACTIVE"},
        {"id": 4, "status": "INACTIVE"},
    ]
    registry = ComparatorRegistry.for_fields(["status"])

    assert [row["id"] for row in registry.sort(rows, "status", "asc")] == [1, 3, 2, 4]
    assert [row["id"] for row in registry.sort(rows, "status", "desc")] == [2, 4, 1, 3]


def test_unknown_key_keeps_input_order() -> None:
    rows = [{"name": "b"}, {"name": "a"}]
    registry = ComparatorRegistry.for_fields(["name"])

    result = registry.sort(rows, "price", "asc")

    assert result == rows
    assert registry.sort(rows, None, "desc") == rows


def test_missing_values_sort_last_ascending() -> None:
    rows = [{"amount": None}, {"amount": 20}, {}, {"amount": 5}, {"amount": ""}]
    registry = ComparatorRegistry().register("amount", parse=as_number)

    ordered = [row.get("amount") for row in registry.sort(rows, "amount", "asc")]

    assert ordered[:2] == [5, 20]
    assert all(value in (None, "") for value in ordered[2:])


def test_numeric_and_date_keys_compare_by_value() -> None:
    rows = [
        {"id": "a", "amount": "100", "createdAt": "2024-03-01T10:00:00Z"},
        {"id": "b", "amount": "9.5", "createdAt": "2023-12-31"},
        {"id": "c", "amount": 25, "createdAt": "2024-01-15T08:30:00+05:30"},
    ]
    registry = (
        ComparatorRegistry()
        .register("amount", parse=as_number)
        .register("created", field="createdAt", parse=as_datetime)
    )

    assert [row["id"] for row in registry.sort(rows, "amount", "asc")] == ["b", "c", "a"]
    assert [row["id"] for row in registry.sort(rows, "created", "desc")] == ["a", "c", "b"]


def test_as_datetime_accepts_dates_and_rejects_garbage() -> None:
    assert as_datetime(date(2024, 5, 1)) == datetime(2024, 5, 1, tzinfo=timezone.utc)
    assert as_datetime("2024-05-01T00:00:00Z") == datetime(2024, 5, 1, tzinfo=timezone.utc)
    assert as_datetime("not a date") is None
    assert as_datetime("  ") is None


def test_order_helpers() -> None:
    assert toggle_order("asc") is SortOrder.DESC
    assert toggle_order(SortOrder.DESC) is SortOrder.ASC
    with pytest.raises(ValueError):
        toggle_order("sideways")


def test_collator_for_rejects_unknown_locales() -> None:
    assert collator_for("en-IN") is collator_for("en")
    with pytest.raises(ValueError):
        collator_for("tr")
