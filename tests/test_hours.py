"""
Tests for local delivery working hours.
"""

import pytest

from kaghati.processor.hours import (
    add_time_slot,
    default_local_delivery,
    remove_time_slot,
    set_day_open,
    update_time_slot,
    validate_local_delivery,
    WEEK_DAYS,
)


class TestDefaults:
    def test_all_days_closed(self):
        hours = default_local_delivery()
        assert list(hours) == list(WEEK_DAYS)
        assert all(not day["isOpen"] and day["timeSlots"] == [] for day in hours.values())


class TestAddTimeSlot:
    """Tests for add_time_slot."""

    def test_slots_are_kept_sorted(self):
        hours = add_time_slot(default_local_delivery(), "Mon", "14:00", "18:00")
        hours = add_time_slot(hours, "Mon", "09:00", "12:00")

        assert hours["Mon"]["timeSlots"] == [
            {"start": "09:00", "end": "12:00"},
            {"start": "14:00", "end": "18:00"},
        ]

    def test_start_must_precede_end(self):
        with pytest.raises(ValueError, match="Start time must be before end time."):
            add_time_slot(default_local_delivery(), "Mon", "18:00", "09:00")

    def test_equal_start_and_end_rejected(self):
        with pytest.raises(ValueError):
            add_time_slot(default_local_delivery(), "Mon", "09:00", "09:00")

    def test_overlap_rejected(self):
        hours = add_time_slot(default_local_delivery(), "Tue", "09:00", "12:00")
        with pytest.raises(ValueError):
            add_time_slot(hours, "Tue", "11:00", "13:00")

    def test_adjacent_slots_allowed(self):
        hours = add_time_slot(default_local_delivery(), "Tue", "09:00", "12:00")
        hours = add_time_slot(hours, "Tue", "12:00", "15:00")
        assert len(hours["Tue"]["timeSlots"]) == 2

    def test_malformed_time_rejected(self):
        with pytest.raises(ValueError):
            add_time_slot(default_local_delivery(), "Mon", "9:00", "12:00")

    def test_unknown_day_rejected(self):
        with pytest.raises(ValueError):
            add_time_slot(default_local_delivery(), "Funday", "09:00", "12:00")

    def test_input_is_not_mutated(self):
        hours = default_local_delivery()
        add_time_slot(hours, "Mon", "09:00", "12:00")
        assert hours["Mon"]["timeSlots"] == []


class TestEditSlots:
    """Tests for update_time_slot, remove_time_slot and set_day_open."""

    def setup_method(self):
        hours = add_time_slot(default_local_delivery(), "Wed", "09:00", "12:00")
        self.hours = add_time_slot(hours, "Wed", "14:00", "18:00")

    def test_update_slot(self):
        hours = update_time_slot(self.hours, "Wed", 1, "13:00", "17:00")
        assert hours["Wed"]["timeSlots"][1] == {"start": "13:00", "end": "17:00"}

    def test_update_slot_may_not_overlap_others(self):
        with pytest.raises(ValueError):
            update_time_slot(self.hours, "Wed", 1, "11:00", "17:00")

    def test_update_missing_slot(self):
        with pytest.raises(ValueError):
            update_time_slot(self.hours, "Wed", 5, "19:00", "20:00")

    def test_remove_slot(self):
        hours = remove_time_slot(self.hours, "Wed", 0)
        assert hours["Wed"]["timeSlots"] == [{"start": "14:00", "end": "18:00"}]

    def test_remove_missing_slot(self):
        with pytest.raises(ValueError):
            remove_time_slot(self.hours, "Thu", 0)

    def test_set_day_open(self):
        hours = set_day_open(self.hours, "Wed", True)
        assert hours["Wed"]["isOpen"] is True
        assert self.hours["Wed"]["isOpen"] is False


class TestValidateLocalDelivery:
    """Tests for validate_local_delivery."""

    def test_missing_days_filled_in(self):
        hours = validate_local_delivery({"Sat": {"isOpen": True, "timeSlots": []}})
        assert list(hours) == list(WEEK_DAYS)
        assert hours["Sat"]["isOpen"] is True
        assert hours["Sun"]["isOpen"] is False

    def test_slots_sorted(self):
        hours = validate_local_delivery({
            "Fri": {"isOpen": True, "timeSlots": [
                {"start": "15:00", "end": "17:00"},
                {"start": "08:00", "end": "10:00"},
            ]}
        })
        assert [slot["start"] for slot in hours["Fri"]["timeSlots"]] == ["08:00", "15:00"]

    def test_overlap_rejected(self):
        with pytest.raises(ValueError):
            validate_local_delivery({
                "Fri": {"isOpen": True, "timeSlots": [
                    {"start": "08:00", "end": "10:00"},
                    {"start": "09:00", "end": "11:00"},
                ]}
            })

    def test_unknown_day_rejected(self):
        with pytest.raises(ValueError):
            validate_local_delivery({"Monday": {"isOpen": True, "timeSlots": []}})

    def test_empty_map_is_all_closed(self):
        assert validate_local_delivery({}) == default_local_delivery()
