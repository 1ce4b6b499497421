"""
Export functionality for writing match reports to Excel.
"""

import pandas as pd
from typing import List
from .models import TimeSlot
from .config import MatcherConfig
from .runner import MatchReport


def write_excel(report: MatchReport, config: MatcherConfig, output_path: str) -> None:
    """
    Write a match report to an Excel file.

    Args:
        report: Report produced by a matching run
        config: Matcher configuration
        output_path: Path to output Excel file
    """
    print(f"Writing matches to {output_path}")

    with pd.ExcelWriter(output_path, engine='xlsxwriter') as writer:
        _write_matches(report, config, writer)
        _write_slots(report.unmatched, config.excel.sheets.get('unmatched', 'Unmatched Requests'), writer)
        _write_slots(report.unused, config.excel.sheets.get('unused', 'Unused Availability'), writer)

        if config.excel.include_summary:
            _write_summary(report, config, writer)

    print(f"Matches exported successfully to {output_path}")


def _write_matches(report: MatchReport, config: MatcherConfig, writer) -> None:
    """Write the main match sheet."""
    df = report.to_dataframe()

    if df.empty:
        print("Warning: No matches to export")
    else:
        df = df.copy()
        df['Date'] = df['Date'].apply(lambda x: x.strftime('%m/%d/%Y'))
        df['Start'] = df['Start'].apply(lambda x: x.strftime('%I:%M %p'))
        df['End'] = df['End'].apply(lambda x: x.strftime('%I:%M %p'))

    sheet_name = config.excel.sheets.get('matches', 'Matches')
    df.to_excel(writer, sheet_name=sheet_name, index=False)

    worksheet = writer.sheets[sheet_name]
    workbook = writer.book
    _format_header(worksheet, workbook, df)


def _slots_dataframe(slots: List[TimeSlot]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                'Date': slot.start.strftime('%m/%d/%Y'),
                'Start': slot.start.strftime('%I:%M %p'),
                'End': slot.end.strftime('%I:%M %p'),
                'Owner': slot.owner,
                'Hours': round(slot.duration_hours, 2),
            }
            for slot in slots
        ],
        columns=['Date', 'Start', 'End', 'Owner', 'Hours']
    )


def _write_slots(slots: List[TimeSlot], sheet_name: str, writer) -> None:
    """Write a sheet listing slots that were left over."""
    df = _slots_dataframe(slots)
    df.to_excel(writer, sheet_name=sheet_name, index=False)
    _format_header(writer.sheets[sheet_name], writer.book, df)


def _write_summary(report: MatchReport, config: MatcherConfig, writer) -> None:
    """Write run summary statistics."""
    sheet_name = config.excel.sheets.get('summary', 'Summary')

    stats = report.get_summary_stats()
    stats['day'] = stats['day'].strftime('%m/%d/%Y')
    stats['match_rate'] = f"{stats['match_rate']:.0%}"

    df = pd.DataFrame(
        [{'Metric': key.replace('_', ' ').title(), 'Value': value} for key, value in stats.items()]
    )
    df.to_excel(writer, sheet_name=sheet_name, index=False)

    worksheet = writer.sheets[sheet_name]
    worksheet.set_column(0, 0, 24)
    worksheet.set_column(1, 1, 14)


def _format_header(worksheet, workbook, df: pd.DataFrame) -> None:
    """Apply header formatting and column widths."""
    header_format = workbook.add_format({
        'bold': True,
        'text_wrap': True,
        'valign': 'top',
        'fg_color': '#D7E4BC',
        'border': 1
    })

    column_widths = {
        'Date': 12,
        'Start': 10,
        'End': 10,
        'Isolate': 20,
        'Volunteer': 20,
        'Owner': 20,
        'Ticket': 24,
        'Hours': 8,
    }

    for i, col in enumerate(df.columns):
        worksheet.set_column(i, i, column_widths.get(col, 12))
        worksheet.write(0, i, col, header_format)
