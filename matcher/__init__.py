"""
Volunteer Matcher - pairs requests for help with volunteer availability
using maximum bipartite matching.
"""

__version__ = "0.1.0"

from .errors import InvalidInterval, InvalidArgument
from .config import MatcherConfig
from .models import NIL, TimeSlot, RequestSlot, AvailabilitySlot, MatchRecord
from .engine import MatchingEngine, match_time_slots, validate_matching
from .runner import MatchingRunner, MatchReport
from .export import write_excel

__all__ = [
    "InvalidInterval",
    "InvalidArgument",
    "MatcherConfig",
    "NIL",
    "TimeSlot",
    "RequestSlot",
    "AvailabilitySlot",
    "MatchRecord",
    "MatchingEngine",
    "match_time_slots",
    "validate_matching",
    "MatchingRunner",
    "MatchReport",
    "write_excel",
]
