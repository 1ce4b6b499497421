"""
Data ingestion for the volunteer matcher.
"""

import pandas as pd
from datetime import date, datetime
from pathlib import Path
from typing import Dict, List, Optional
from .models import TimeSlot, RequestSlot, AvailabilitySlot
from .config import MatcherConfig


def read_table(path: str) -> pd.DataFrame:
    """Read a spreadsheet or CSV file into a DataFrame."""
    if Path(path).suffix.lower() == '.csv':
        return pd.read_csv(path)
    return pd.read_excel(path)


def load_request_slots(path: str, config: MatcherConfig) -> List[RequestSlot]:
    """
    Load requests for help from a spreadsheet.

    Args:
        path: Path to Excel or CSV file with request data
        config: Matcher configuration

    Returns:
        List[RequestSlot]: Parsed request slots, sorted by start time
    """
    df = read_table(path)
    _check_columns(df, config)

    ticket_column = config.columns.ticket
    has_ticket = ticket_column is not None and ticket_column in df.columns

    slots = []
    for _, row in df.iterrows():
        try:
            start, end = _parse_bounds(row, config)
            slot = RequestSlot(
                start=start,
                end=end,
                owner=_clean(row[config.columns.owner]),
                ticket=_clean(row[ticket_column]) if has_ticket else None,
            )
            slots.append(slot)
        except (ValueError, TypeError) as e:
            print(f"Warning: Could not parse request row {row.name}: {e}")
            continue

    slots.sort(key=lambda x: x.start)
    return slots


def load_availability_slots(path: str, config: MatcherConfig) -> List[AvailabilitySlot]:
    """
    Load volunteer availability from a spreadsheet.

    Args:
        path: Path to Excel or CSV file with availability data
        config: Matcher configuration

    Returns:
        List[AvailabilitySlot]: Parsed availability slots, sorted by start time
    """
    df = read_table(path)
    _check_columns(df, config)

    slots = []
    for _, row in df.iterrows():
        try:
            start, end = _parse_bounds(row, config)
            slots.append(AvailabilitySlot(start, end, _clean(row[config.columns.owner])))
        except (ValueError, TypeError) as e:
            print(f"Warning: Could not parse availability row {row.name}: {e}")
            continue

    slots.sort(key=lambda x: x.start)
    return slots


def _check_columns(df: pd.DataFrame, config: MatcherConfig) -> None:
    required_columns = [config.columns.start, config.columns.end, config.columns.owner]
    missing_columns = [col for col in required_columns if col not in df.columns]

    if missing_columns:
        raise ValueError(f"Missing required columns: {missing_columns}. Found columns: {list(df.columns)}")


def _parse_bounds(row, config: MatcherConfig):
    tz = config.get_tz()
    return (
        _parse_instant(row[config.columns.start], tz),
        _parse_instant(row[config.columns.end], tz),
    )


def _parse_instant(value, tz) -> Optional[datetime]:
    """Parse a cell into a timezone-aware datetime, or None if it is empty."""
    if value is None or pd.isna(value):
        return None

    instant = pd.to_datetime(value).to_pydatetime()
    if instant.tzinfo is None:
        instant = tz.localize(instant)
    return instant


def _clean(value):
    if value is None or pd.isna(value):
        return None
    return str(value)


def slots_on_day(slots: List[TimeSlot], day: date, config: MatcherConfig) -> List[TimeSlot]:
    """
    Select the slots that start on the given day in the configured timezone.

    A request booked on an explicit day is selected by that day instead.
    """
    tz = config.get_tz()
    selected = []
    for slot in slots:
        if slot is None:
            continue
        slot_day = getattr(slot, 'scheduled_day', None)
        if slot_day is None:
            start = slot.start if slot.start.tzinfo is None else slot.start.astimezone(tz)
            slot_day = start.date()
        if slot_day == day:
            selected.append(slot)
    return selected


def validate_slots(slots: List[TimeSlot], config: MatcherConfig) -> Dict[str, List[str]]:
    """
    Validate slot data for common issues.

    Args:
        slots: List of slots to validate
        config: Matcher configuration

    Returns:
        Dict[str, List[str]]: Validation results
    """
    issues = {
        'warnings': [],
        'errors': []
    }

    if not slots:
        issues['errors'].append("No slots found")
        return issues

    seen = set()
    for slot in slots:
        if slot in seen:
            issues['warnings'].append(f"Duplicate slot: {slot!r}")
        seen.add(slot)

    missing_owner = [s for s in slots if s.owner is None]
    if missing_owner:
        issues['warnings'].append(f"Found {len(missing_owner)} slots without an owner")

    long_slots = [s for s in slots if s.duration_hours > config.long_slot_hours]
    if long_slots:
        issues['warnings'].append(
            f"Found {len(long_slots)} slots longer than {config.long_slot_hours:g} hours"
        )

    return issues


def get_slot_summary(slots: List[TimeSlot]) -> Dict:
    """
    Get summary statistics for slots.

    Args:
        slots: List of slots

    Returns:
        Dict: Summary statistics
    """
    if not slots:
        return {}

    df = pd.DataFrame([
        {
            'date': slot.start.date(),
            'owner': slot.owner,
            'duration': slot.duration_hours
        }
        for slot in slots
    ])

    summary = {
        'total_slots': len(slots),
        'date_range': {
            'start': df['date'].min(),
            'end': df['date'].max()
        },
        'owners': df['owner'].nunique(),
        'avg_duration': df['duration'].mean(),
        'total_hours': df['duration'].sum()
    }

    return summary
