"""Tests for event_service: booking create, amend, submit, confirm."""

import logging
from datetime import date

import pytest

from src.models import Event
from src.services import event_service
from src.services.database import session_scope
from src.services.exceptions import EventLocked, EventNotFound, ValidationError

FUTURE = date(2099, 6, 1)
PAST = date(2000, 1, 1)


class TestNormalizeSelection:
    """Tests for normalize_selection()."""

    def test_mapping(self):
        assert event_service.normalize_selection({1: 10, "2": "5"}) == {1: 10, 2: 5}

    def test_rows_drop_zero_and_missing(self):
        rows = [
            {"recipe_id": 1, "servings": 4},
            {"recipe_id": 1, "servings": 2},
            {"recipe_id": 2, "servings": 0},
            {"recipe_id": 3, "servings": -1},
            {"recipe_id": None, "servings": 3},
            {"recipe_id": 4},
        ]
        assert event_service.normalize_selection(rows) == {1: 6}

    def test_fractional_servings_rejected(self):
        with pytest.raises(ValidationError):
            event_service.normalize_selection({1: 2.5})

    def test_empty(self):
        assert event_service.normalize_selection(None) == {}
        assert event_service.normalize_selection([]) == {}


class TestCreateEvent:
    """Tests for create_event()."""

    def test_creates_draft_with_selection(self, sample_catalog):
        result = event_service.create_event(
            title="Garden Party",
            event_date=FUTURE,
            guest_count=40,
            selections={sample_catalog["Gin & Tonic"]: 30, sample_catalog["Gimlet"]: 10},
        )

        assert result["title"] == "Garden Party"
        assert result["status"] == "draft"
        assert result["event_date"] == "2099-06-01"
        assert result["pricing_tier"] == "economy"
        assert result["drinks_count"] == 40
        assert {row["recipe_name"] for row in result["recipes"]} == {"Gin & Tonic", "Gimlet"}

    def test_default_title(self, test_db):
        result = event_service.create_event()
        assert result["title"] == "New Cocktail Event"
        assert result["recipes"] == []

    def test_accepts_iso_date_string(self, test_db):
        result = event_service.create_event(event_date="2099-06-01")
        assert result["event_date"] == "2099-06-01"

    def test_pricing_tier_is_normalized(self, test_db):
        assert event_service.create_event(pricing_tier="premium")["pricing_tier"] == "first_class"
        assert event_service.create_event(pricing_tier="budget")["pricing_tier"] == "economy"

    @pytest.mark.parametrize("guest_count", [0, -5, 2.5, "many", True])
    def test_invalid_guest_count(self, test_db, guest_count):
        with pytest.raises(ValidationError) as exc_info:
            event_service.create_event(guest_count=guest_count)
        assert exc_info.value.errors == ["Number of guests must be a whole number."]

    def test_guest_count_string(self, test_db):
        assert event_service.create_event(guest_count="25")["guest_count"] == 25

    def test_past_date_rejected(self, test_db):
        with pytest.raises(ValidationError) as exc_info:
            event_service.create_event(event_date=PAST)
        assert exc_info.value.errors == ["Date of Event must be today or in the future."]

    def test_malformed_date_rejected(self, test_db):
        with pytest.raises(ValidationError):
            event_service.create_event(event_date="next friday")

    def test_submit_requires_phone(self, test_db):
        with pytest.raises(ValidationError) as exc_info:
            event_service.create_event(submit=True, client_phone="  ")
        assert exc_info.value.errors == ["Telephone number is required."]

    def test_submit_with_phone(self, test_db):
        result = event_service.create_event(submit=True, client_phone="555-0101")
        assert result["status"] == "submitted"

    def test_unknown_recipe_rejected(self, test_db):
        with pytest.raises(ValidationError) as exc_info:
            event_service.create_event(selections={999: 3})
        assert exc_info.value.errors == ["Recipe 999 not found"]

    def test_nothing_written_on_validation_error(self, test_db):
        with pytest.raises(ValidationError):
            event_service.create_event(selections={999: 3})
        session = test_db()
        assert session.query(Event).count() == 0


class TestGetEvent:
    """Tests for get_event() and get_event_selection()."""

    def test_get_event_selection_keys_are_strings(self, sample_catalog):
        created = event_service.create_event(selections={sample_catalog["Gimlet"]: 12})
        selection = event_service.get_event_selection(created["id"])
        assert selection == {str(sample_catalog["Gimlet"]): 12}

    def test_missing_event(self, test_db):
        with pytest.raises(EventNotFound):
            event_service.get_event(404)
        with pytest.raises(EventNotFound):
            event_service.get_event_selection(404)


class TestAmendEvent:
    """Tests for amend_event()."""

    def test_reconciles_selection_change(self, sample_catalog):
        gin_tonic = sample_catalog["Gin & Tonic"]
        gimlet = sample_catalog["Gimlet"]
        spritz = sample_catalog["Tonic Spritz"]
        created = event_service.create_event(selections={gin_tonic: 10, gimlet: 5})

        summary = event_service.amend_event(
            created["id"], selections={gin_tonic: 6, gimlet: 5, spritz: 4}
        )

        assert [(line.name, line.before, line.after, line.label) for line in summary.lines] == [
            ("Gin & Tonic", 10, 6, "-4"),
            ("Tonic Spritz", 0, 4, "+4"),
        ]
        assert summary.total_servings.label == "0"
        stored = event_service.get_event_selection(created["id"])
        assert stored == {str(gin_tonic): 6, str(gimlet): 5, str(spritz): 4}

    def test_removing_a_recipe(self, sample_catalog):
        gimlet = sample_catalog["Gimlet"]
        created = event_service.create_event(selections={gimlet: 5})

        summary = event_service.amend_event(created["id"], selections={gimlet: 0})

        assert summary.lines[0].delta == -5
        assert event_service.get_event(created["id"])["recipes"] == []

    def test_field_updates(self, test_db):
        created = event_service.create_event(
            title="Summer Party", event_date=FUTURE, guest_count=40, client_phone="555-0101"
        )

        summary = event_service.amend_event(
            created["id"],
            {"title": "Garden Party", "guest_count": 45, "notes": "Bring ice", "client_phone": "555-0199"},
        )

        fields = [change.field for change in summary.field_changes]
        assert fields == ["title", "phone"]
        assert summary.guest_count.label == "+5"
        assert summary.notes_changed is True
        event = event_service.get_event(created["id"])
        assert event["title"] == "Garden Party"
        assert event["guest_count"] == 45

    def test_selection_untouched_when_not_given(self, sample_catalog):
        created = event_service.create_event(selections={sample_catalog["Gimlet"]: 5})
        summary = event_service.amend_event(created["id"], {"notes": "Late start"})

        assert summary.lines == ()
        assert event_service.get_event(created["id"])["drinks_count"] == 5

    def test_non_positive_guest_count_clears(self, test_db):
        created = event_service.create_event(guest_count=40)
        summary = event_service.amend_event(created["id"], {"guest_count": 0})

        assert event_service.get_event(created["id"])["guest_count"] is None
        assert summary.guest_count.after == 0
        assert summary.guest_count.label == "-40"

    def test_fractional_guest_count_rejected(self, test_db):
        created = event_service.create_event()
        with pytest.raises(ValidationError):
            event_service.amend_event(created["id"], {"guest_count": 3.5})

    def test_unknown_field_rejected(self, test_db):
        created = event_service.create_event()
        with pytest.raises(ValidationError) as exc_info:
            event_service.amend_event(created["id"], {"status": "confirmed"})
        assert exc_info.value.errors == ["Unknown field: status"]

    def test_new_past_date_rejected(self, test_db):
        created = event_service.create_event(event_date=FUTURE)
        with pytest.raises(ValidationError):
            event_service.amend_event(created["id"], {"event_date": PAST})

    def test_submitted_event_keeps_phone(self, test_db):
        created = event_service.create_event(submit=True, client_phone="555-0101")
        with pytest.raises(ValidationError):
            event_service.amend_event(created["id"], {"client_phone": ""})

    def test_confirmed_event_is_locked(self, sample_catalog, caplog):
        created = event_service.create_event(selections={sample_catalog["Gimlet"]: 5})
        event_service.confirm_event(created["id"])

        with caplog.at_level(logging.WARNING, logger="cocktail_order.services.event_service"):
            with pytest.raises(EventLocked):
                event_service.amend_event(created["id"], selections={sample_catalog["Gimlet"]: 8})

        assert "amend_event: event_locked" in caplog.text
        assert event_service.get_event(created["id"])["drinks_count"] == 5

    def test_missing_event(self, test_db):
        with pytest.raises(EventNotFound):
            event_service.amend_event(404, {"title": "x"})

    def test_shares_caller_session(self, sample_catalog):
        with session_scope() as session:
            created = event_service.create_event(
                selections={sample_catalog["Gimlet"]: 5}, session=session
            )
            summary = event_service.amend_event(
                created["id"], selections={sample_catalog["Gimlet"]: 7}, session=session
            )
            assert summary.lines[0].label == "+2"


class TestStatusTransitions:
    """Tests for submit_event() and confirm_event()."""

    def test_submit(self, test_db):
        created = event_service.create_event(client_phone="555-0101")
        assert event_service.submit_event(created["id"])["status"] == "submitted"

    def test_submit_requires_phone(self, test_db):
        created = event_service.create_event()
        with pytest.raises(ValidationError):
            event_service.submit_event(created["id"])

    def test_confirm(self, test_db):
        created = event_service.create_event()
        assert event_service.confirm_event(created["id"])["status"] == "confirmed"

    def test_submit_after_confirm_is_locked(self, test_db):
        created = event_service.create_event(client_phone="555-0101")
        event_service.confirm_event(created["id"])
        with pytest.raises(EventLocked):
            event_service.submit_event(created["id"])
