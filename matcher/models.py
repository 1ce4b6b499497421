"""
Data models for the volunteer matcher.
"""

import math
from dataclasses import dataclass
from datetime import datetime, date
from typing import Any, Dict, FrozenSet, Optional

from .errors import InvalidInterval


class _Unmatched:
    """The NIL terminal: the partner of every slot that is not paired."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self):
        return False

    def __repr__(self):
        return "NIL"

    def __reduce__(self):
        return (_Unmatched, ())


NIL = _Unmatched()


class TimeSlot:
    """
    An interval node in the matching graph.

    Equality and hashing use the slot's side, bounds and owner, so two
    separately built slots with the same values collapse in a set. Pairing
    is tracked by object identity.
    """

    def __init__(self, start: datetime, end: datetime, owner: Any = None):
        if start is None or end is None:
            raise InvalidInterval("Time slot needs both a start and an end")
        if not start < end:
            raise InvalidInterval(f"Time slot start {start} is not before end {end}")

        self.start = start
        self.end = end
        self.owner = owner

        self._neighbours = set()
        self._paired: Optional["TimeSlot"] = None
        self.distance: float = math.inf

    @property
    def duration_hours(self) -> float:
        """Get the duration in hours."""
        return (self.end - self.start).total_seconds() / 3600

    @property
    def neighbours(self) -> FrozenSet["TimeSlot"]:
        return frozenset(self._neighbours)

    def contains(self, other: "TimeSlot") -> bool:
        """Check whether ``other`` fits entirely inside this slot (bounds inclusive)."""
        return self.start <= other.start and self.end >= other.end

    def add_neighbour(self, other: "TimeSlot") -> None:
        self._neighbours.add(other)

    def has_neighbour(self, other: "TimeSlot") -> bool:
        return other in self._neighbours

    def pair_with(self, other: "TimeSlot") -> None:
        """Pair both slots with each other. A previous partner is not unpaired."""
        self._paired = other
        other._paired = self

    def unpair(self) -> None:
        self._paired = None

    def is_paired(self) -> bool:
        return self._paired is not None

    def paired_node(self):
        """Get the paired slot, or NIL when this slot is free."""
        return NIL if self._paired is None else self._paired

    def reset(self) -> None:
        """Drop adjacency, pairing and distance left over from an earlier run."""
        self._neighbours.clear()
        self._paired = None
        self.distance = math.inf

    def _key(self):
        return (type(self), self.start, self.end, self.owner)

    def __eq__(self, other):
        if not isinstance(other, TimeSlot):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self):
        return hash(self._key())

    def __repr__(self):
        return "{}({}, {}, owner={!r})".format(
            type(self).__name__, self.start.isoformat(), self.end.isoformat(), self.owner
        )


class RequestSlot(TimeSlot):
    """A window during which an isolate needs help."""

    def __init__(self, start: datetime, end: datetime, owner: Any = None,
                 ticket: Optional[str] = None, day: Optional[date] = None):
        super().__init__(start, end, owner)
        self.ticket = ticket
        self.scheduled_day = day

    @property
    def day(self) -> date:
        """Get the day this request is booked on, falling back to its start date."""
        return self.scheduled_day if self.scheduled_day is not None else self.start.date()


class AvailabilitySlot(TimeSlot):
    """A window during which a volunteer is free to help."""


@dataclass
class MatchRecord:
    """One request paired with one volunteer, ready to be stored or shown."""
    request_owner: Any
    availability_owner: Any
    day: date
    start: datetime
    end: datetime
    ticket: Optional[str] = None

    @classmethod
    def from_request(cls, request: RequestSlot, day: Optional[date] = None) -> "MatchRecord":
        """Build a record from a matched request slot, dated on ``day`` if given."""
        partner = request.paired_node()
        if partner is NIL:
            raise ValueError(f"{request!r} is not paired")
        return cls(
            request_owner=request.owner,
            availability_owner=partner.owner,
            day=day if day is not None else request.day,
            start=request.start,
            end=request.end,
            ticket=request.ticket,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for export."""
        return {
            'Date': self.day,
            'Start': self.start,
            'End': self.end,
            'Isolate': self.request_owner,
            'Volunteer': self.availability_owner,
            'Ticket': self.ticket,
        }
