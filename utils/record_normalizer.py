import logging
from typing import Any, Dict, List, Sequence

from constants.sheet_columns import (
    EMAIL_COLUMN,
    ITEM_SUFFIX_SEPARATOR,
    PADDING_COLUMN_PREFIX,
    STAFF_COLUMN,
    TIMESTAMP_COLUMN,
)
from constants.schemas import RawRecord

logger = logging.getLogger(__name__)

META_COLUMNS = (TIMESTAMP_COLUMN, EMAIL_COLUMN, STAFF_COLUMN)


def rows_to_records(
    values: Sequence[Sequence[Any]],
    timestamp_column: str = TIMESTAMP_COLUMN,
    email_column: str = EMAIL_COLUMN,
) -> List[RawRecord]:
    """Convert a Sheets API ``values`` block (header row first) into records.

    Every data row becomes a dict keyed by header. Missing trailing cells map
    to an empty string. Rows missing the timestamp or the email address are
    the blank rows Google Sheets leaves at the bottom of a form response tab
    and are dropped.

    Returns:
        List of records, empty if there is no header or no data row.
    """
    if not values or len(values) < 2:
        return []

    headers = [str(h) for h in values[0]]
    records = []
    for row in values[1:]:
        record = {}
        for index, header in enumerate(headers):
            cell = row[index] if index < len(row) else ""
            record[header] = "" if cell is None else str(cell)
        records.append(record)

    kept = [r for r in records if r.get(timestamp_column) and r.get(email_column)]
    if len(kept) != len(records):
        logger.debug(f"Dropped {len(records) - len(kept)} blank form rows")
    return kept


def item_label(header: str) -> str:
    """'Rice [kg]' -> 'Rice'"""
    return header.split(ITEM_SUFFIX_SEPARATOR)[0]


def is_meta_key(key: str, meta_columns: Sequence[str] = META_COLUMNS) -> bool:
    return key in meta_columns or key.startswith(PADDING_COLUMN_PREFIX)


def extract_items(record: RawRecord, meta_columns: Sequence[str] = META_COLUMNS) -> Dict[str, str]:
    """Item label -> observed value for every non-empty item column.

    Columns are visited in header order, so when two headers share a label
    after suffix stripping the later column wins.
    """
    items = {}
    for key, value in record.items():
        if is_meta_key(key, meta_columns):
            continue
        if value is None or str(value).strip() == "":
            continue
        items[item_label(key)] = str(value)
    return items
