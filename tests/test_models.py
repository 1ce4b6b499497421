"""
Tests for the time slot graph model.
"""

import math
import pytest
from datetime import datetime, timedelta, timezone
from pathlib import Path
import sys

# Add the matcher package to the path
sys.path.append(str(Path(__file__).parent.parent))

from matcher.errors import InvalidInterval
from matcher.models import NIL, RequestSlot, AvailabilitySlot, MatchRecord


T = datetime(2020, 8, 3, 9, 0, tzinfo=timezone.utc)
HOUR = timedelta(hours=1)


def test_construction_validates_bounds():
    """Test that missing or inverted bounds are rejected."""
    with pytest.raises(InvalidInterval):
        RequestSlot(None, T + HOUR)

    with pytest.raises(InvalidInterval):
        AvailabilitySlot(T, None)

    with pytest.raises(InvalidInterval):
        RequestSlot(T + HOUR, T)

    # Start must be strictly before end
    with pytest.raises(InvalidInterval):
        AvailabilitySlot(T, T)


def test_invalid_interval_is_value_error():
    """Test that InvalidInterval can be caught as a ValueError."""
    with pytest.raises(ValueError):
        RequestSlot(T, T - HOUR)


def test_contains():
    """Test closed-interval containment."""
    long_slot = AvailabilitySlot(T, T + 2 * HOUR)

    assert long_slot.contains(RequestSlot(T, T + HOUR))
    assert long_slot.contains(RequestSlot(T + HOUR, T + 2 * HOUR))
    assert long_slot.contains(RequestSlot(T, T + 2 * HOUR))
    assert not long_slot.contains(RequestSlot(T - HOUR, T + HOUR))
    assert not long_slot.contains(RequestSlot(T + HOUR, T + 3 * HOUR))
    assert not RequestSlot(T, T + HOUR).contains(long_slot)


def test_unpaired_slot_points_at_nil():
    """Test the initial state of a slot."""
    slot = RequestSlot(T, T + HOUR, "isolate-1")

    assert not slot.is_paired()
    assert slot.paired_node() is NIL
    assert slot.distance == math.inf
    assert slot.neighbours == frozenset()


def test_pair_with_is_mutual():
    """Test that pairing sets both sides."""
    request = RequestSlot(T, T + HOUR)
    availability = AvailabilitySlot(T, T + HOUR)

    request.pair_with(availability)

    assert request.is_paired()
    assert availability.is_paired()
    assert request.paired_node() is availability
    assert availability.paired_node() is request


def test_pair_with_does_not_unpair_previous_partner():
    """Test that re-pairing leaves the old partner for the caller to fix."""
    request = RequestSlot(T, T + HOUR)
    first = AvailabilitySlot(T, T + HOUR, "a")
    second = AvailabilitySlot(T, T + HOUR, "b")

    request.pair_with(first)
    request.pair_with(second)

    assert request.paired_node() is second
    assert first.paired_node() is request

    first.unpair()
    assert not first.is_paired()


def test_neighbours():
    """Test adjacency bookkeeping."""
    request = RequestSlot(T, T + HOUR)
    availability = AvailabilitySlot(T, T + HOUR)

    request.add_neighbour(availability)

    assert request.has_neighbour(availability)
    assert availability in request.neighbours
    # Adjacency is not made symmetric by the slot itself
    assert not availability.has_neighbour(request)


def test_reset():
    """Test that reset clears graph state."""
    request = RequestSlot(T, T + HOUR)
    availability = AvailabilitySlot(T, T + HOUR)
    request.add_neighbour(availability)
    request.pair_with(availability)
    request.distance = 3

    request.reset()

    assert not request.is_paired()
    assert request.neighbours == frozenset()
    assert request.distance == math.inf


def test_equality_by_value():
    """Test that slots compare by side, bounds and owner."""
    assert RequestSlot(T, T + HOUR, "x") == RequestSlot(T, T + HOUR, "x")
    assert len({RequestSlot(T, T + HOUR, "x"), RequestSlot(T, T + HOUR, "x")}) == 1
    assert RequestSlot(T, T + HOUR, "x") != RequestSlot(T, T + HOUR, "y")
    assert RequestSlot(T, T + HOUR, "x") != AvailabilitySlot(T, T + HOUR, "x")


def test_nil_is_distinct_from_every_slot():
    """Test that the NIL terminal never equals a real slot."""
    slot = RequestSlot(T, T + HOUR)

    assert NIL != slot
    assert slot != NIL
    assert not NIL
    assert repr(NIL) == "NIL"


def test_request_slot_day_defaults_to_start_date():
    """Test the scheduled day of a request."""
    slot = RequestSlot(T, T + HOUR, "isolate-1", ticket="ticket-1")

    assert slot.day == T.date()
    assert slot.ticket == "ticket-1"
    assert slot.duration_hours == 1.0


def test_match_record_from_request():
    """Test building a match record from a paired request."""
    request = RequestSlot(T, T + HOUR, "isolate-1", ticket="ticket-1")
    availability = AvailabilitySlot(T, T + 2 * HOUR, "volunteer-1")
    request.pair_with(availability)

    record = MatchRecord.from_request(request)

    assert record.request_owner == "isolate-1"
    assert record.availability_owner == "volunteer-1"
    assert record.day == T.date()
    assert record.start == T
    assert record.end == T + HOUR
    assert record.ticket == "ticket-1"
    assert record.to_dict()["Volunteer"] == "volunteer-1"


def test_match_record_requires_pairing():
    """Test that an unpaired request cannot become a record."""
    with pytest.raises(ValueError, match="not paired"):
        MatchRecord.from_request(RequestSlot(T, T + HOUR))
