import logging
from datetime import date, datetime
from typing import Dict, Iterable, Optional, Tuple

from constants.schemas import LatestMeta, RawRecord
from constants.sheet_columns import STAFF_COLUMN, TIMESTAMP_COLUMN
from utils.timestamp_parser import day_key, parse_timestamp

logger = logging.getLogger(__name__)


def latest_per_day(
    submissions: Iterable[RawRecord], timestamp_column: str = TIMESTAMP_COLUMN
) -> Dict[date, RawRecord]:
    """
    Keep the last submission of each calendar day.

    A submission replaces the one held for its day only when its timestamp is
    strictly later, so on an exact tie the first one seen stays. Submissions
    with an unparseable timestamp are skipped.

    Returns:
        Dict of day -> submission, in the order days were first seen
    """
    by_day: Dict[date, Tuple[datetime, RawRecord]] = {}
    skipped = 0

    for record in submissions:
        instant = parse_timestamp(record.get(timestamp_column))
        if instant is None:
            skipped += 1
            continue
        key = day_key(instant)
        existing = by_day.get(key)
        if existing is None or instant > existing[0]:
            by_day[key] = (instant, record)

    if skipped:
        logger.debug(f"Skipped {skipped} submissions with unparseable timestamps")

    return {day: record for day, (_, record) in by_day.items()}


def latest_meta(
    submissions: Iterable[RawRecord],
    timestamp_column: str = TIMESTAMP_COLUMN,
    staff_column: str = STAFF_COLUMN,
) -> Optional[LatestMeta]:
    """Timestamp and staff of the latest submission over the whole history."""
    latest: Optional[Tuple[datetime, RawRecord]] = None
    for record in submissions:
        instant = parse_timestamp(record.get(timestamp_column))
        if instant is None:
            continue
        if latest is None or instant > latest[0]:
            latest = (instant, record)

    if latest is None:
        return None

    record = latest[1]
    return LatestMeta(
        timestamp=record.get(timestamp_column, ""),
        staff=record.get(staff_column, "") or "",
    )
