"""
Store coverage rings.

A store serves concentric delivery rings R1 < R2 < ... measured in km from
its coordinates. Each ring also has a maximum radius.
"""

import math
import re
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from ..db import Store, RecordStatus


# Rule constants
DEFAULT_RADIUS_KM: Dict[str, int] = {"R1": 3, "R2": 5, "R3": 7, "R4": 10, "R5": 15}
EARTH_RADIUS_KM = 6371.0088

_RING_KEY = re.compile(r"^R([1-9][0-9]*)$")


def default_radius() -> Dict[str, int]:
    """Return a fresh copy of the default rings."""
    return dict(DEFAULT_RADIUS_KM)


def ring_index(key: str) -> int:
    """Return the 1-based position of a ring key ("R3" -> 3)."""
    match = _RING_KEY.match(key)
    if not match:
        raise ValueError(f"Invalid ring key: {key!r}")
    return int(match.group(1))


def ring_keys(rings: Mapping[str, int]) -> List[str]:
    """Ring keys in ascending order."""
    return sorted(rings, key=ring_index)


def validate_radius(
    rings: Mapping[str, int],
    max_values: Optional[Mapping[str, int]] = None,
) -> Dict[str, int]:
    """
    Check that rings are contiguous from R1 and strictly increasing.

    Args:
        rings: Ring values in km
        max_values: Optional per-ring maximums; rings without one are uncapped

    Returns:
        The rings as a plain dict in key order

    Raises:
        ValueError: On any violation
    """
    if not rings:
        raise ValueError("At least one ring (R1) is required")

    keys = ring_keys(rings)
    expected = [f"R{i}" for i in range(1, len(keys) + 1)]
    if keys != expected:
        raise ValueError(f"Rings must be contiguous from R1, got {keys}")

    max_values = max_values or {}
    previous: Optional[int] = None
    for key in keys:
        value = rings[key]
        if value < 0:
            raise ValueError(f"{key} must not be negative")
        if key in max_values and value > max_values[key]:
            raise ValueError(f"{key} must be at most {max_values[key]}")
        if previous is not None and value <= previous:
            raise ValueError(f"{key} must be greater than the previous ring ({previous})")
        previous = value

    return {key: rings[key] for key in keys}


def adjust_radius(
    rings: Mapping[str, int],
    key: str,
    value: int,
    max_values: Optional[Mapping[str, int]] = None,
) -> Dict[str, int]:
    """
    Set one ring and keep the rings after it consistent.

    The edited ring is clamped to [previous + 1, its max] (R1 to [0, max]).
    Each following ring is pushed out to at least the ring before it + 1,
    then capped at its own max. The input mapping is left untouched.

    Args:
        rings: Current ring values
        key: Ring being edited, e.g. "R2"
        value: Requested radius in km
        max_values: Per-ring maximums, defaults to DEFAULT_RADIUS_KM

    Returns:
        New ring values

    Raises:
        ValueError: For an unknown ring, or when the maximums leave no room
            for strictly increasing rings
    """
    max_values = max_values or DEFAULT_RADIUS_KM
    if key not in rings:
        raise ValueError(f"Unknown ring: {key}")

    index = ring_index(key)
    new_values = dict(rings)

    lower = 0 if index == 1 else new_values[f"R{index - 1}"] + 1
    upper = max_values.get(key, value)
    new_values[key] = min(max(value, lower), upper)

    previous = new_values[key]
    for outer_key in ring_keys(new_values)[index:]:
        if new_values[outer_key] <= previous:
            new_values[outer_key] = previous + 1
        if outer_key in max_values:
            new_values[outer_key] = min(new_values[outer_key], max_values[outer_key])
        previous = new_values[outer_key]

    return validate_radius(new_values, max_values)


def distance_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance between two points (haversine)."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)

    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(a))


def locate_ring(store: Store, lat: float, lng: float) -> Optional[str]:
    """Return the innermost ring of the store that covers the point, or None."""
    if not store.radius:
        return None

    distance = distance_km(store.lat, store.lng, lat, lng)
    for key in ring_keys(store.radius):
        if distance <= store.radius[key]:
            return key
    return None


def stores_covering(
    stores: Iterable[Store], lat: float, lng: float
) -> List[Tuple[Store, str, float]]:
    """
    Find the active stores whose rings cover a point.

    Returns:
        (store, ring, distance_km) tuples, nearest store first
    """
    matches = []
    for store in stores:
        if store.status != RecordStatus.ACTIVE:
            continue
        ring = locate_ring(store, lat, lng)
        if ring is not None:
            matches.append((store, ring, distance_km(store.lat, store.lng, lat, lng)))

    matches.sort(key=lambda match: match[2])
    return matches
