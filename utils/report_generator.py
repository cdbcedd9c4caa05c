"""
Printable stock reports as Excel workbooks.

- history report: one sheet per day with stock before and after
- current stock report: the processing table sorted by urgency, with the
  supplier contacts on a second sheet
"""

import logging
from datetime import date, datetime
from io import BytesIO
from typing import Dict, List, Optional, Tuple

import pandas as pd
import pytz

from constants.schemas import CurrentStockItem, ItemRow, LatestMeta, SupplierContact
from constants.sheet_columns import CONDITION_DANGER, CONDITION_LOW
from utils.restock import condition_counts, sort_by_urgency
from utils.timestamp_parser import parse_iso_date

logger = logging.getLogger(__name__)

REPORT_TITLE = "Stock Opname Report"
CURRENT_STOCK_TITLE = "Current Stock Report"
BRAND_COLOR = "#B6432B"

HISTORY_COLUMNS = ["Item Name", "Stock Before", "Stock After"]
CURRENT_STOCK_COLUMNS = [
    "Item", "Category", "Vendor", "Unit", "Par Qty", "Min Restock", "Current Qty", "Condition",
]
SUPPLIER_COLUMNS = ["Name", "Media", "Phone", "Alias"]


def history_file_name(start_date, end_date) -> str:
    start = parse_iso_date(start_date).strftime("%Y%m%d")
    end = parse_iso_date(end_date).strftime("%Y%m%d")
    return f"stock-opname-{start}-{end}.xlsx"


def current_stock_file_name(timezone: str = "Asia/Jakarta") -> str:
    now = datetime.now(pytz.timezone(timezone))
    return f"current-stock-{now.strftime('%Y%m%d-%H%M')}.xlsx"


def history_subtitle(start_date, end_date) -> str:
    start = parse_iso_date(start_date).isoformat()
    end = parse_iso_date(end_date).isoformat()
    return f"Report for the period of {start}" + (f" to {end}" if start != end else "")


def _header_formats(workbook):
    return {
        "title": workbook.add_format({"bold": True, "font_size": 16, "font_color": BRAND_COLOR}),
        "subtitle": workbook.add_format({"italic": True, "font_size": 11}),
        "header": workbook.add_format({
            "bold": True,
            "font_color": "white",
            "bg_color": BRAND_COLOR,
            "align": "center",
            "valign": "top",
            "border": 1,
        }),
        "cell": workbook.add_format({"align": "left", "valign": "top", "border": 1}),
        "alt_cell": workbook.add_format({
            "align": "left",
            "valign": "top",
            "border": 1,
            "bg_color": "#F5F5F5",
        }),
        "danger": workbook.add_format({"bg_color": "#F8D7DA", "border": 1}),
        "low": workbook.add_format({"bg_color": "#FFF3CD", "border": 1}),
    }


def generate_history_report(
    rows_by_date: Dict[date, List[ItemRow]], start_date, end_date
) -> Tuple[bytes, str]:
    """
    Build the before/after history workbook.

    Args:
        rows_by_date: Output of build_rows_by_date
        start_date: First day of the requested range
        end_date: Last day of the requested range

    Returns:
        Tuple of (xlsx bytes, file name)
    """
    output = BytesIO()
    writer = pd.ExcelWriter(output, engine="xlsxwriter")
    workbook = writer.book
    formats = _header_formats(workbook)
    subtitle = history_subtitle(start_date, end_date)

    for day, rows in rows_by_date.items():
        df = pd.DataFrame(
            [[r.item_name, r.before, r.after] for r in rows], columns=HISTORY_COLUMNS
        )
        sheet_name = day.isoformat()
        # Data starts below the title, subtitle and day rows
        df.to_excel(writer, index=False, sheet_name=sheet_name, startrow=4)
        worksheet = writer.sheets[sheet_name]

        worksheet.write(0, 0, REPORT_TITLE, formats["title"])
        worksheet.write(1, 0, subtitle, formats["subtitle"])
        worksheet.write(2, 0, sheet_name, formats["title"])

        for col_num, value in enumerate(HISTORY_COLUMNS):
            worksheet.write(4, col_num, value, formats["header"])
        for row_num, row in enumerate(df.itertuples(index=False), start=5):
            fmt = formats["alt_cell"] if row_num % 2 == 0 else formats["cell"]
            for col_num, value in enumerate(row):
                worksheet.write(row_num, col_num, value, fmt)

        worksheet.set_column("A:A", 40)
        worksheet.set_column("B:C", 18)
        worksheet.freeze_panes(5, 0)

    if not rows_by_date:
        worksheet = workbook.add_worksheet("Report")
        worksheet.write(0, 0, REPORT_TITLE, formats["title"])
        worksheet.write(1, 0, subtitle, formats["subtitle"])
        worksheet.write(3, 0, "No stock data for this period.")

    writer.close()
    logger.info(f"Generated history report with {len(rows_by_date)} day sheets")
    return output.getvalue(), history_file_name(start_date, end_date)


def generate_current_stock_report(
    items: List[CurrentStockItem],
    latest: Optional[LatestMeta] = None,
    suppliers: Optional[List[SupplierContact]] = None,
    timezone: str = "Asia/Jakarta",
) -> Tuple[bytes, str]:
    """Build the current stock workbook; items are sorted by urgency."""
    sorted_items = sort_by_urgency(items)
    counts = condition_counts(sorted_items)

    df = pd.DataFrame(
        [
            [i.item, i.category, i.vendor, i.unit, i.par_qty, i.min_restock, i.current_qty, i.condition]
            for i in sorted_items
        ],
        columns=CURRENT_STOCK_COLUMNS,
    )

    output = BytesIO()
    writer = pd.ExcelWriter(
        output,
        engine="xlsxwriter",
        engine_kwargs={"options": {"nan_inf_to_errors": True}},
    )
    workbook = writer.book
    formats = _header_formats(workbook)

    df.to_excel(writer, index=False, sheet_name="Current Stock", startrow=4)
    worksheet = writer.sheets["Current Stock"]

    now = datetime.now(pytz.timezone(timezone))
    worksheet.write(0, 0, CURRENT_STOCK_TITLE, formats["title"])
    worksheet.write(1, 0, f"Data as of {now.strftime('%Y-%m-%d %H:%M:%S')} ({timezone})", formats["subtitle"])
    if latest:
        last_updated = f"Last stock opname: {latest.timestamp}" + (f" by {latest.staff}" if latest.staff else "")
    else:
        last_updated = "Last stock opname: -"
    worksheet.write(2, 0, last_updated, formats["subtitle"])
    worksheet.write(
        3, 0, f"Bahaya: {counts[CONDITION_DANGER]}  Low: {counts[CONDITION_LOW]}", formats["subtitle"]
    )

    for col_num, value in enumerate(CURRENT_STOCK_COLUMNS):
        worksheet.write(4, col_num, value, formats["header"])
    for row_num, item in enumerate(sorted_items, start=5):
        if item.condition == CONDITION_DANGER:
            fmt = formats["danger"]
        elif item.condition == CONDITION_LOW:
            fmt = formats["low"]
        else:
            fmt = formats["cell"]
        for col_num, value in enumerate(df.iloc[row_num - 5]):
            worksheet.write(row_num, col_num, value, fmt)

    worksheet.set_column("A:A", 30)
    worksheet.set_column("B:D", 16)
    worksheet.set_column("E:H", 12)
    worksheet.freeze_panes(5, 0)

    if suppliers:
        supplier_df = pd.DataFrame(
            [[s.name, s.media, s.phone or "", s.alias or ""] for s in suppliers],
            columns=SUPPLIER_COLUMNS,
        )
        supplier_df.to_excel(writer, index=False, sheet_name="Suppliers")
        supplier_sheet = writer.sheets["Suppliers"]
        for col_num, value in enumerate(SUPPLIER_COLUMNS):
            supplier_sheet.write(0, col_num, value, formats["header"])
        supplier_sheet.set_column("A:D", 22)

    writer.close()
    logger.info(f"Generated current stock report with {len(sorted_items)} items")
    return output.getvalue(), current_stock_file_name(timezone)
