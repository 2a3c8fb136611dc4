"""Tests for booking change reconciliation and the change narrative."""

from datetime import date

import pytest

from src.services.ordering import (
    ChangeSummary,
    EventDetails,
    describe_changes,
    format_signed_delta,
    has_changes,
    reconcile_changes,
)

NAMES = {"margarita": "Margarita", "mojito": "Mojito", "daiquiri": "Daiquiri"}


class TestFormatSignedDelta:
    """Tests for format_signed_delta()."""

    @pytest.mark.parametrize(
        "delta,expected",
        [(4, "+4"), (-4, "-4"), (0, "0"), (2.5, "+2.5"), (-0.0, "0")],
    )
    def test_labels(self, delta, expected):
        assert format_signed_delta(delta) == expected


class TestReconcileSelections:
    """Tests for per-recipe deltas."""

    def test_sign_and_ordering(self):
        summary = reconcile_changes(
            {"margarita": 10, "mojito": 5},
            {"margarita": 6, "mojito": 5, "daiquiri": 4},
            recipe_names=NAMES,
        )

        assert [(line.name, line.before, line.after, line.label) for line in summary.lines] == [
            ("Daiquiri", 0, 4, "+4"),
            ("Margarita", 10, 6, "-4"),
        ]
        assert summary.total_servings.before == 15
        assert summary.total_servings.after == 15
        assert summary.total_servings.label == "0"

    def test_larger_change_first(self):
        summary = reconcile_changes(
            {"margarita": 10},
            {"margarita": 11, "mojito": 8},
            recipe_names=NAMES,
        )
        assert [line.name for line in summary.lines] == ["Mojito", "Margarita"]

    def test_name_ordering_is_case_sensitive(self):
        summary = reconcile_changes(
            {},
            {"a": 2, "b": 2},
            recipe_names={"a": "apple", "b": "Banana"},
        )
        assert [line.name for line in summary.lines] == ["Banana", "apple"]

    def test_name_ordering_uses_trimmed_names(self):
        summary = reconcile_changes(
            {},
            {"a": 3, "b": 3},
            recipe_names={"a": "Mojito", "b": "  Negroni"},
        )
        assert [line.name for line in summary.lines] == ["Mojito", "Negroni"]

    def test_missing_previous_snapshot_is_all_zero(self):
        summary = reconcile_changes(None, {"mojito": 3}, recipe_names=NAMES)

        assert len(summary.lines) == 1
        assert summary.lines[0].before == 0
        assert summary.total_servings.label == "+3"

    def test_invalid_servings_count_as_zero(self):
        summary = reconcile_changes(
            {"margarita": float("nan"), "mojito": -2},
            {"margarita": 3, "mojito": "lots"},
            recipe_names=NAMES,
        )

        assert [(line.name, line.before, line.after) for line in summary.lines] == [
            ("Margarita", 0, 3),
        ]

    def test_removed_recipe(self):
        summary = reconcile_changes({"mojito": 5}, {}, recipe_names=NAMES)
        assert summary.lines[0].delta == -5
        assert summary.total_servings.label == "-5"

    def test_unknown_names_fall_back_to_id(self):
        summary = reconcile_changes({}, {"r42": 1})
        assert summary.lines[0].name == "r42"

    def test_identical_snapshots_have_no_lines(self):
        summary = reconcile_changes({"mojito": 5}, {"mojito": 5})
        assert summary.lines == ()


class TestReconcileDetails:
    """Tests for field changes, guest count, and notes."""

    def test_field_change_only_when_both_sides_present(self):
        summary = reconcile_changes(
            {},
            {},
            EventDetails(title="Summer Party", event_date=date(2030, 6, 1), phone=None),
            EventDetails(title="Garden Party", event_date=date(2030, 6, 2), phone="555-0101"),
        )

        assert [(change.field, change.before, change.after) for change in summary.field_changes] == [
            ("title", "Summer Party", "Garden Party"),
            ("event_date", date(2030, 6, 1), date(2030, 6, 2)),
        ]

    def test_cleared_field_is_not_a_change(self):
        summary = reconcile_changes(
            {}, {}, EventDetails(phone="555-0101"), EventDetails(phone="  ")
        )
        assert summary.field_changes == ()

    def test_date_strings_and_dates_compare_equal(self):
        summary = reconcile_changes(
            {}, {}, EventDetails(event_date="2030-06-01"), EventDetails(event_date=date(2030, 6, 1))
        )
        assert summary.field_changes == ()

    def test_guest_count_triple(self):
        summary = reconcile_changes({}, {}, EventDetails(guest_count=None), EventDetails(guest_count=40))

        assert summary.guest_count.before == 0
        assert summary.guest_count.after == 40
        assert summary.guest_count.label == "+40"

    def test_notes_changed(self):
        unchanged = reconcile_changes({}, {}, EventDetails(notes="Nut allergy"), EventDetails(notes="Nut allergy "))
        added = reconcile_changes({}, {}, EventDetails(), EventDetails(notes="Bring limes"))

        assert unchanged.notes_changed is False
        assert added.notes_changed is True
        assert EventDetails(notes="Bring limes").has_notes is True
        assert EventDetails(notes="   ").has_notes is False


class TestChangeNarrative:
    """Tests for describe_changes() and has_changes()."""

    def test_describe_changes(self):
        summary = reconcile_changes(
            {"margarita": 10, "mojito": 5},
            {"margarita": 6, "mojito": 5, "daiquiri": 4},
            EventDetails(title="Summer Party", guest_count=40, notes="Outdoor"),
            EventDetails(title="Garden Party", guest_count=45, notes="Indoor"),
            recipe_names=NAMES,
        )

        assert describe_changes(summary) == [
            "Daiquiri: 0 -> 4 (+4)",
            "Margarita: 10 -> 6 (-4)",
            "Title: Summer Party -> Garden Party",
            "Total drinks: 15 -> 15 (0)",
            "Guests: 40 -> 45 (+5)",
            "Notes updated",
        ]

    def test_date_rendered_as_iso(self):
        summary = reconcile_changes(
            {}, {}, EventDetails(event_date=date(2030, 6, 1)), EventDetails(event_date=date(2030, 7, 1))
        )
        assert "Date: 2030-06-01 -> 2030-07-01" in describe_changes(summary)

    def test_has_changes(self):
        assert has_changes(ChangeSummary()) is False
        assert has_changes(reconcile_changes({"mojito": 1}, {"mojito": 2})) is True
        assert has_changes(
            reconcile_changes({}, {}, EventDetails(guest_count=10), EventDetails(guest_count=12))
        ) is True
        assert has_changes(reconcile_changes({}, {}, EventDetails(), EventDetails(notes="x"))) is True

    def test_deterministic(self):
        args = ({"margarita": 10, "mojito": 5}, {"margarita": 6, "daiquiri": 4})
        assert reconcile_changes(*args, recipe_names=NAMES) == reconcile_changes(*args, recipe_names=NAMES)
