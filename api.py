"""
FastAPI endpoints for the stock opname assistant.

Every request re-reads the spreadsheet and recomputes everything; nothing is
cached between calls.
"""

import logging

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, Response
import uvicorn

from utils.config import AppConfig, ConfigurationError, load_config
from utils.google_sheets import SheetFetchError
from utils.history_report import build_rows_by_date, filter_submissions_in_range
from utils.llm_handler import StockSummaryHandler, SummaryGenerationError
from utils.report_generator import generate_current_stock_report, generate_history_report
from utils.restock import condition_counts, sort_by_urgency
from utils.snapshot import latest_meta
from utils.stock_data import (
    get_latest_submission_meta,
    get_processing_data,
    get_stock_data,
    get_suppliers,
)
from utils.timestamp_parser import parse_iso_date
from utils.vendor_messages import (
    build_broadcast_messages,
    build_supplier_message,
    resolve_phone,
    supplier_groups,
    whatsapp_link,
    whatsapp_suppliers,
)

# Set up logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler()
    ]
)
logger = logging.getLogger(__name__)

NO_DATA_MESSAGE = "No stock data found for the selected date range. Please try a different period."

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# Create FastAPI app
app = FastAPI(
    title="Stock Opname API",
    description="Stock opname reports and restock requests for Sarkop",
    version="1.0.0"
)


def get_config() -> AppConfig:
    return load_config()


@app.exception_handler(SheetFetchError)
async def sheet_fetch_error_handler(request, exc: SheetFetchError):
    logger.error(f"Sheet fetch failed: {exc}")
    return JSONResponse(status_code=502, content={"detail": str(exc), "status": exc.status})


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request, exc: ConfigurationError):
    logger.error(f"Configuration error: {exc}")
    return JSONResponse(status_code=500, content={"detail": str(exc)})


def _date_range(start: str, end: str):
    try:
        start_date, end_date = parse_iso_date(start), parse_iso_date(end)
    except ValueError:
        raise HTTPException(status_code=400, detail="Dates must be in YYYY-MM-DD format")
    if start_date > end_date:
        raise HTTPException(status_code=400, detail="Start date must not be after end date")
    return start_date, end_date


def _attachment(content: bytes, file_name: str) -> Response:
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{file_name}"'},
    )


@app.get("/")
async def root():
    """Health check endpoint"""
    return {"message": "Stock Opname API is running", "status": "healthy"}


@app.get("/api/current-stock")
def current_stock(config: AppConfig = Depends(get_config)):
    """Processing table sorted by urgency, with counters and last submission."""
    items = sort_by_urgency(get_processing_data(config))
    counts = condition_counts(items)
    return {
        "items": [i.model_dump() for i in items],
        "danger_count": counts["bahaya"],
        "low_count": counts["low"],
        "latest": get_latest_submission_meta(config),
        "form_url": config.stock_form_url,
    }


@app.get("/api/latest")
def latest(config: AppConfig = Depends(get_config)):
    return get_latest_submission_meta(config)


@app.get("/api/history")
def history(
    start: str = Query(..., description="First day, YYYY-MM-DD"),
    end: str = Query(..., description="Last day, YYYY-MM-DD"),
    config: AppConfig = Depends(get_config),
):
    """Before/after item rows for every day with data in the range."""
    start_date, end_date = _date_range(start, end)
    rows_by_date = build_rows_by_date(
        get_stock_data(config),
        start_date,
        end_date,
        timestamp_column=config.timestamp_column,
        meta_columns=config.meta_columns,
    )
    return {
        "days": {day.isoformat(): [r.model_dump() for r in rows] for day, rows in rows_by_date.items()},
        "message": None if rows_by_date else NO_DATA_MESSAGE,
    }


@app.get("/api/vendor-messages")
def vendor_messages(config: AppConfig = Depends(get_config)):
    """One restock broadcast per vendor, busiest vendor first."""
    items = get_processing_data(config)
    suppliers = get_suppliers(config)
    result = []
    for vm in build_broadcast_messages(items):
        phone = resolve_phone(vm.vendor, suppliers, config.vendor_phone_numbers)
        result.append({**vm.model_dump(), "whatsapp_url": whatsapp_link(vm.message, phone)})
    return result


@app.get("/api/suppliers")
def suppliers(config: AppConfig = Depends(get_config)):
    """WhatsApp suppliers and the items needing attention per vendor."""
    items = get_processing_data(config)
    groups = supplier_groups(items)
    return {
        "suppliers": [s.model_dump() for s in whatsapp_suppliers(get_suppliers(config))],
        "groups": {vendor: [i.model_dump() for i in group] for vendor, group in groups.items()},
    }


@app.get("/api/suppliers/{vendor}/message")
def supplier_message(vendor: str, config: AppConfig = Depends(get_config)):
    """Restock request for one supplier, greeting its alias when known."""
    contacts = whatsapp_suppliers(get_suppliers(config))
    groups = supplier_groups(get_processing_data(config))
    vm = build_supplier_message(vendor, groups.get(vendor, []), contacts)
    phone = resolve_phone(vendor, contacts, config.vendor_phone_numbers)
    return {**vm.model_dump(), "whatsapp_url": whatsapp_link(vm.message, phone)}


@app.get("/api/summary")
async def summary(
    start: str = Query(..., description="First day, YYYY-MM-DD"),
    end: str = Query(..., description="Last day, YYYY-MM-DD"),
    config: AppConfig = Depends(get_config),
):
    """LLM-written report for the owner, plus a WhatsApp link to send it."""
    start_date, end_date = _date_range(start, end)
    submissions = await run_in_threadpool(get_stock_data, config)
    records = filter_submissions_in_range(
        submissions, start_date, end_date, timestamp_column=config.timestamp_column
    )
    if not records:
        return {"report": NO_DATA_MESSAGE, "whatsapp_url": None}

    handler = StockSummaryHandler(
        api_key=config.openrouter_api_key or None,
        timestamp_column=config.timestamp_column,
        staff_column=config.staff_column,
        email_column=config.email_column,
    )
    try:
        report = await handler.generate_summary(records, start_date.isoformat(), end_date.isoformat())
    except SummaryGenerationError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return {
        "report": report,
        "whatsapp_url": whatsapp_link(report, config.whatsapp_target_number or None),
    }


@app.get("/api/reports/history")
def history_report(
    start: str = Query(..., description="First day, YYYY-MM-DD"),
    end: str = Query(..., description="Last day, YYYY-MM-DD"),
    config: AppConfig = Depends(get_config),
):
    start_date, end_date = _date_range(start, end)
    rows_by_date = build_rows_by_date(
        get_stock_data(config),
        start_date,
        end_date,
        timestamp_column=config.timestamp_column,
        meta_columns=config.meta_columns,
    )
    if not rows_by_date:
        raise HTTPException(status_code=404, detail=NO_DATA_MESSAGE)
    content, file_name = generate_history_report(rows_by_date, start_date, end_date)
    return _attachment(content, file_name)


@app.get("/api/reports/current-stock")
def current_stock_report(config: AppConfig = Depends(get_config)):
    submissions = get_stock_data(config)
    content, file_name = generate_current_stock_report(
        get_processing_data(config),
        latest_meta(submissions, config.timestamp_column, config.staff_column),
        get_suppliers(config),
        timezone=config.report_timezone,
    )
    return _attachment(content, file_name)


if __name__ == "__main__":
    # This allows running the API standalone for testing
    uvicorn.run(app, host="0.0.0.0", port=8001)
