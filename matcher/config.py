"""
Configuration management for the volunteer matcher.
"""

from pydantic import BaseModel, Field, field_validator
from typing import Dict, Optional
import pytz


class ColumnMap(BaseModel):
    """Column names used when importing slot spreadsheets."""
    start: str = Field(default="Start", description="Column holding the slot start")
    end: str = Field(default="End", description="Column holding the slot end")
    owner: str = Field(default="User ID", description="Column holding the requester or volunteer id")
    ticket: Optional[str] = Field(default="Ticket", description="Column holding the request ticket key")


class ExcelOut(BaseModel):
    """Excel output configuration."""
    include_summary: bool = Field(default=True, description="Include the summary sheet")
    sheets: Dict[str, str] = Field(
        default_factory=lambda: {
            "matches": "Matches",
            "unmatched": "Unmatched Requests",
            "unused": "Unused Availability",
            "summary": "Summary",
        },
        description="Sheet names"
    )


class MatcherConfig(BaseModel):
    """Main configuration for the volunteer matcher."""
    timezone: str = Field(default="UTC", description="Timezone for naive slot timestamps")
    lookahead_days: int = Field(default=1, ge=0, description="Days ahead of today to match by default")
    delete_previous_matches: bool = Field(default=False, description="Purge matches dated before today")
    columns: ColumnMap = Field(default_factory=ColumnMap)
    long_slot_hours: float = Field(default=12.0, gt=0, description="Warn about slots longer than this")
    verbose: bool = Field(default=False, description="Print per-phase progress from the engine")
    excel: ExcelOut = Field(default_factory=ExcelOut)

    @field_validator('timezone')
    @classmethod
    def validate_timezone(cls, v):
        try:
            pytz.timezone(v)
            return v
        except pytz.exceptions.UnknownTimeZoneError:
            raise ValueError(f"Unknown timezone: {v}")

    def get_tz(self):
        """Get the configured timezone object."""
        return pytz.timezone(self.timezone)


def load_config(config_path: str) -> MatcherConfig:
    """Load configuration from YAML file."""
    import yaml

    with open(config_path, 'r') as f:
        config_data = yaml.safe_load(f) or {}

    return MatcherConfig(**config_data)


def save_config(config: MatcherConfig, config_path: str) -> None:
    """Save configuration to YAML file."""
    import yaml

    with open(config_path, 'w') as f:
        yaml.dump(config.model_dump(), f, default_flow_style=False, indent=2)
