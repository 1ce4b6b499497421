"""
Daily matching run: pick a day's slots, match them and keep the results.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

from .config import MatcherConfig
from .engine import MatchingEngine, MatchingStats
from .errors import InvalidArgument
from .ingest import slots_on_day
from .models import AvailabilitySlot, MatchRecord, RequestSlot


@dataclass
class MatchReport:
    """The outcome of matching one day."""
    day: date
    records: List[MatchRecord] = field(default_factory=list)
    unmatched: List[RequestSlot] = field(default_factory=list)
    unused: List[AvailabilitySlot] = field(default_factory=list)
    stats: MatchingStats = field(default_factory=MatchingStats)

    def to_dataframe(self) -> pd.DataFrame:
        """Convert the match records to a pandas DataFrame."""
        if not self.records:
            return pd.DataFrame(columns=['Date', 'Start', 'End', 'Isolate', 'Volunteer', 'Ticket'])

        df = pd.DataFrame([record.to_dict() for record in self.records])
        return df.sort_values(['Start', 'End']).reset_index(drop=True)

    def get_summary_stats(self) -> Dict[str, Any]:
        """Get summary statistics for the run."""
        total = self.stats.requests
        return {
            'day': self.day,
            'total_requests': total,
            'total_availabilities': self.stats.availabilities,
            'edges': self.stats.edges,
            'phases': self.stats.phases,
            'matched': len(self.records),
            'unmatched': len(self.unmatched),
            'unused_availabilities': len(self.unused),
            'match_rate': len(self.records) / total if total else 0.0,
        }


def purge_previous_matches(records: Iterable[MatchRecord], cutoff: date) -> List[MatchRecord]:
    """
    Drop every record scheduled before ``cutoff``.

    Records on the cutoff day itself are kept.
    """
    return [record for record in records if record.day >= cutoff]


class MatchingRunner:
    """Runs the matching engine for one day at a time and keeps the match records."""

    def __init__(self, config: Optional[MatcherConfig] = None,
                 matches: Optional[List[MatchRecord]] = None):
        self.config = config or MatcherConfig()
        self.matches: List[MatchRecord] = list(matches) if matches else []
        self.request_slots: Optional[List[RequestSlot]] = None
        self.availability_slots: Optional[List[AvailabilitySlot]] = None

    def set_request_slots(self, slots: Iterable[RequestSlot]) -> None:
        if slots is None:
            raise InvalidArgument("Request slots must not be None")
        self.request_slots = list(slots)

    def set_availability_slots(self, slots: Iterable[AvailabilitySlot]) -> None:
        if slots is None:
            raise InvalidArgument("Availability slots must not be None")
        self.availability_slots = list(slots)

    def today(self) -> date:
        return datetime.now(self.config.get_tz()).date()

    def run(self, day: Optional[date] = None, delete_previous: Optional[bool] = None,
            today: Optional[date] = None) -> MatchReport:
        """
        Match the slots scheduled on ``day``.

        Args:
            day: Day to match, defaults to today plus ``lookahead_days``
            delete_previous: Purge stored matches dated before today,
                defaults to ``delete_previous_matches`` from the config
            today: Override for the current date

        Returns:
            MatchReport: Records created by this run plus the leftovers
        """
        if self.request_slots is None or self.availability_slots is None:
            raise InvalidArgument("Request and availability slots must be set before running")

        today = today or self.today()
        day = day or today + timedelta(days=self.config.lookahead_days)
        if delete_previous is None:
            delete_previous = self.config.delete_previous_matches

        if delete_previous:
            before = len(self.matches)
            self.matches = purge_previous_matches(self.matches, today)
            print(f"Deleted {before - len(self.matches)} matches scheduled before {today}")

        requests = slots_on_day(self.request_slots, day, self.config)
        availabilities = slots_on_day(self.availability_slots, day, self.config)
        print(f"Matching {len(requests)} requests against {len(availabilities)} availability slots for {day}")

        engine = MatchingEngine(self.config)
        matched = engine.match(requests, availabilities)

        records = sorted(
            (MatchRecord.from_request(request, day) for request in matched),
            key=lambda r: (r.start, r.end)
        )
        self.matches.extend(records)

        report = MatchReport(
            day=day,
            records=records,
            unmatched=[r for r in engine.requests if not r.is_paired()],
            unused=[a for a in engine.availabilities if not a.is_paired()],
            stats=engine.stats,
        )

        print(f"Matched {len(records)} of {len(requests)} requests")
        return report
