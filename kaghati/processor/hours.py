"""
Local delivery working hours.

Shape: {"Mon": {"isOpen": bool, "timeSlots": [{"start": "09:00", "end": "13:00"}]}, ...}
"""

import copy
import re
from typing import Any, Dict, List

WEEK_DAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

_TIME = re.compile(r"^([01][0-9]|2[0-3]):([0-5][0-9])$")


def default_local_delivery() -> Dict[str, Dict[str, Any]]:
    """All days closed, no slots."""
    return {day: {"isOpen": False, "timeSlots": []} for day in WEEK_DAYS}


def _check_day(day: str) -> None:
    if day not in WEEK_DAYS:
        raise ValueError(f"Unknown day: {day!r}")


def _check_slot(start: str, end: str) -> None:
    for value in (start, end):
        if not isinstance(value, str) or not _TIME.match(value):
            raise ValueError(f"Invalid time {value!r}, expected HH:MM")
    # Zero-padded HH:MM compares correctly as a string
    if start >= end:
        raise ValueError("Start time must be before end time.")


def _overlaps(slots: List[Dict[str, str]], start: str, end: str) -> bool:
    return any(start < slot["end"] and slot["start"] < end for slot in slots)


def _with_day(hours: Dict[str, Any], day: str) -> Dict[str, Any]:
    """Deep copy of hours, with the given day present."""
    _check_day(day)
    updated = copy.deepcopy(hours) if hours else default_local_delivery()
    updated.setdefault(day, {"isOpen": False, "timeSlots": []})
    updated[day].setdefault("timeSlots", [])
    return updated


def validate_local_delivery(hours: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validate a full working hours map.

    Missing days are filled in as closed.

    Raises:
        ValueError: On unknown days, malformed or overlapping slots
    """
    result = default_local_delivery()

    for day, config in (hours or {}).items():
        _check_day(day)
        slots = []
        for slot in config.get("timeSlots", []):
            start, end = slot.get("start"), slot.get("end")
            _check_slot(start, end)
            if _overlaps(slots, start, end):
                raise ValueError(f"Overlapping time slots on {day}")
            slots.append({"start": start, "end": end})

        result[day] = {
            "isOpen": bool(config.get("isOpen", False)),
            "timeSlots": sorted(slots, key=lambda s: s["start"]),
        }

    return result


def add_time_slot(hours: Dict[str, Any], day: str, start: str, end: str) -> Dict[str, Any]:
    """Add a slot to a day, keeping the day's slots sorted and disjoint."""
    _check_slot(start, end)
    updated = _with_day(hours, day)
    slots = updated[day]["timeSlots"]

    if _overlaps(slots, start, end):
        raise ValueError(f"Slot {start}-{end} overlaps an existing slot on {day}")

    slots.append({"start": start, "end": end})
    slots.sort(key=lambda s: s["start"])
    return updated


def update_time_slot(
    hours: Dict[str, Any], day: str, index: int, start: str, end: str
) -> Dict[str, Any]:
    """Replace the slot at index."""
    _check_slot(start, end)
    updated = _with_day(hours, day)
    slots = updated[day]["timeSlots"]

    if not 0 <= index < len(slots):
        raise ValueError(f"No slot {index} on {day}")

    others = [slot for i, slot in enumerate(slots) if i != index]
    if _overlaps(others, start, end):
        raise ValueError(f"Slot {start}-{end} overlaps an existing slot on {day}")

    others.append({"start": start, "end": end})
    updated[day]["timeSlots"] = sorted(others, key=lambda s: s["start"])
    return updated


def remove_time_slot(hours: Dict[str, Any], day: str, index: int) -> Dict[str, Any]:
    updated = _with_day(hours, day)
    slots = updated[day]["timeSlots"]

    if not 0 <= index < len(slots):
        raise ValueError(f"No slot {index} on {day}")

    del slots[index]
    return updated


def set_day_open(hours: Dict[str, Any], day: str, is_open: bool) -> Dict[str, Any]:
    updated = _with_day(hours, day)
    updated[day]["isOpen"] = is_open
    return updated
