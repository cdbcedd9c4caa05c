"""
Day-over-day stock history for a date range.

Each day in the range is represented by its last submission. Its items are
compared with the last submission of the nearest earlier day that has data,
which may fall before the requested range.
"""

import bisect
import logging
from datetime import date, datetime, time
from typing import Dict, Iterable, List, Sequence

from constants.schemas import ItemRow, RawRecord
from constants.sheet_columns import MISSING_VALUE, TIMESTAMP_COLUMN
from utils.record_normalizer import META_COLUMNS, extract_items
from utils.snapshot import latest_per_day
from utils.timestamp_parser import parse_iso_date, parse_timestamp

logger = logging.getLogger(__name__)


def _range_bounds(start_date, end_date):
    start = datetime.combine(parse_iso_date(start_date), time.min)
    end = datetime.combine(parse_iso_date(end_date), time.max)
    return start, end


def build_item_rows(before: Dict[str, str], after: Dict[str, str]) -> List[ItemRow]:
    """One row per item label seen on either day, sorted by label."""
    names = sorted(set(before) | set(after))
    return [
        ItemRow(
            item_name=name,
            before=before.get(name, MISSING_VALUE),
            after=after.get(name, MISSING_VALUE),
        )
        for name in names
    ]


def build_rows_by_date(
    submissions: Iterable[RawRecord],
    start_date,
    end_date,
    timestamp_column: str = TIMESTAMP_COLUMN,
    meta_columns: Sequence[str] = META_COLUMNS,
) -> Dict[date, List[ItemRow]]:
    """
    Build before/after item rows for every day with data in [start_date, end_date].

    Args:
        submissions: All form submissions, not pre-filtered by date
        start_date: First day of the range (date or 'YYYY-MM-DD')
        end_date: Last day of the range, included in full
        timestamp_column: Form column holding the submission time
        meta_columns: Form columns that are not stock items

    Returns:
        Dict of day -> rows ordered by day. Empty when no day falls in the range.
    """
    start, end = _range_bounds(start_date, end_date)

    daily = latest_per_day(submissions, timestamp_column=timestamp_column)
    all_days = sorted(daily)

    selected_days = [
        day for day in all_days if start <= datetime.combine(day, time.min) <= end
    ]
    if not selected_days:
        logger.info(f"No stock submissions between {start.date()} and {end.date()}")
        return {}

    rows_by_date = {}
    for day in selected_days:
        current_items = extract_items(daily[day], meta_columns)

        position = bisect.bisect_left(all_days, day)
        previous_items = extract_items(daily[all_days[position - 1]], meta_columns) if position > 0 else {}

        rows_by_date[day] = build_item_rows(previous_items, current_items)

    return rows_by_date


def filter_submissions_in_range(
    submissions: Iterable[RawRecord],
    start_date,
    end_date,
    timestamp_column: str = TIMESTAMP_COLUMN,
) -> List[RawRecord]:
    """Submissions whose timestamp falls inside the range, in their original order."""
    start, end = _range_bounds(start_date, end_date)
    selected = []
    for record in submissions:
        instant = parse_timestamp(record.get(timestamp_column))
        if instant is not None and start <= instant <= end:
            selected.append(record)
    return selected
