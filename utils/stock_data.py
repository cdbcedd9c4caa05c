"""
Stock data service.

Reads the three ranges of the stock opname spreadsheet (form responses,
processing table, supplier contacts) and turns them into records and models.
Parsing is kept separate from fetching so it can be used on any ``values``
block shaped like the Sheets API response.
"""

import logging
import math
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from constants.schemas import CurrentStockItem, LatestMeta, RawRecord, SupplierContact
from constants.sheet_columns import PROCESSING_COLUMNS, SUPPLIER_COLUMNS
from utils.config import AppConfig, normalize_phone
from utils.google_sheets import get_range_values
from utils.record_normalizer import rows_to_records
from utils.restock import evaluate_condition
from utils.snapshot import latest_meta

logger = logging.getLogger(__name__)

SHEET_ERROR_VALUES = ["#REF!", "#VALUE!", "#DIV/0!", "#N/A", "#NAME?", "#NULL!", "#NUM!"]


def _safe_float_convert(value, default=0.0):
    """
    Safely convert a cell to a non-negative float.

    Sheet formula errors, blanks, free text, infinities and negative numbers
    all become the default.
    """
    if value is None or not str(value).strip():
        return default
    str_value = str(value).strip().upper()
    if str_value.startswith("#") or str_value in SHEET_ERROR_VALUES:
        return default
    try:
        # Sheets may render decimals with a comma
        number = float(str(value).strip().replace(" ", "").replace(",", "."))
    except (ValueError, TypeError):
        return default
    if not math.isfinite(number) or number < 0:
        return default
    return number


def _values_to_frame(values: Sequence[Sequence[Any]], columns: Dict[str, str]) -> pd.DataFrame:
    """
    Build a DataFrame from a values block, keeping only the known columns.

    Headers are matched case-insensitively and renamed to the field names in
    ``columns``. Short rows are padded with empty strings.
    """
    if not values or len(values) < 2:
        return pd.DataFrame(columns=list(columns))

    headers = [str(h).strip() for h in values[0]]
    width = len(headers)
    rows = [list(row[:width]) + [""] * (width - len(row[:width])) for row in values[1:]]
    df = pd.DataFrame(rows, columns=headers)

    lookup = {label.lower(): name for name, label in columns.items()}
    rename = {}
    for header in headers:
        name = lookup.get(header.lower())
        # first matching column wins
        if name and name not in rename.values():
            rename[header] = name
    df = df.loc[:, ~df.columns.duplicated()]
    df = df[[h for h in df.columns if h in rename]].rename(columns=rename)

    for name in columns:
        if name not in df.columns:
            df[name] = ""
    return df.fillna("")


def parse_processing_rows(values: Sequence[Sequence[Any]]) -> List[CurrentStockItem]:
    """
    Parse the processing table into CurrentStockItem models.

    Quantities that cannot be read are treated as 0. The condition is always
    recomputed, whatever the sheet says.
    """
    df = _values_to_frame(values, PROCESSING_COLUMNS)
    if df.empty:
        return []

    for col in ("par_qty", "min_restock", "current_qty"):
        df[col] = df[col].apply(_safe_float_convert)

    items = []
    for _, row in df.iterrows():
        name = str(row["item"]).strip()
        if not name:
            continue
        items.append(
            CurrentStockItem(
                item=name,
                unit=str(row["unit"]).strip(),
                vendor=str(row["vendor"]).strip(),
                category=str(row["category"]).strip(),
                par_qty=row["par_qty"],
                min_restock=row["min_restock"],
                current_qty=row["current_qty"],
                condition=evaluate_condition(row["par_qty"], row["current_qty"], row["min_restock"]),
            )
        )
    logger.info(f"Parsed {len(items)} items from the processing table")
    return items


def parse_supplier_rows(values: Sequence[Sequence[Any]]) -> List[SupplierContact]:
    """Parse the supplier contact table; phone numbers are reduced to digits."""
    df = _values_to_frame(values, SUPPLIER_COLUMNS)
    suppliers = []
    for _, row in df.iterrows():
        name = str(row["name"]).strip()
        if not name:
            continue
        phone = normalize_phone(row["phone"])
        alias = str(row["alias"]).strip()
        suppliers.append(
            SupplierContact(
                name=name,
                media=str(row["media"]).strip(),
                phone=phone or None,
                alias=alias or None,
            )
        )
    return suppliers


def get_stock_data(config: AppConfig) -> List[RawRecord]:
    """All form submissions from the responses tab."""
    values = get_range_values(config, config.submissions_range)
    records = rows_to_records(
        values, timestamp_column=config.timestamp_column, email_column=config.email_column
    )
    logger.info(f"Loaded {len(records)} stock opname submissions")
    return records


def get_processing_data(config: AppConfig) -> List[CurrentStockItem]:
    return parse_processing_rows(get_range_values(config, config.processing_range))


def get_suppliers(config: AppConfig) -> List[SupplierContact]:
    return parse_supplier_rows(get_range_values(config, config.suppliers_range))


def get_latest_submission_meta(config: AppConfig) -> Optional[LatestMeta]:
    """Who submitted the most recent stock opname and when."""
    return latest_meta(
        get_stock_data(config),
        timestamp_column=config.timestamp_column,
        staff_column=config.staff_column,
    )
