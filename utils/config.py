"""
Configuration Module

Loads the spreadsheet identifiers, ranges and outbound settings from
environment variables (or a .env file). Only the I/O layer reads this; the
stock derivations receive plain data.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Dict

from dotenv import load_dotenv

from constants.sheet_columns import EMAIL_COLUMN, STAFF_COLUMN, TIMESTAMP_COLUMN

logger = logging.getLogger(__name__)

# Load environment variables
load_dotenv()

DEFAULT_SUBMISSIONS_RANGE = "Form responses 1!A:ZZ"
DEFAULT_PROCESSING_RANGE = "Processing!A:Z"
DEFAULT_SUPPLIERS_RANGE = "Suppliers!A:Z"
DEFAULT_TIMEZONE = "Asia/Jakarta"
PLACEHOLDER_SHEET_ID = "YOUR_GOOGLE_SHEET_ID"


class ConfigurationError(ValueError):
    """A required setting is missing or still holds its placeholder."""


@dataclass
class AppConfig:
    sheet_id: str
    api_key: str = ""
    submissions_range: str = DEFAULT_SUBMISSIONS_RANGE
    processing_range: str = DEFAULT_PROCESSING_RANGE
    suppliers_range: str = DEFAULT_SUPPLIERS_RANGE
    timestamp_column: str = TIMESTAMP_COLUMN
    email_column: str = EMAIL_COLUMN
    staff_column: str = STAFF_COLUMN
    whatsapp_target_number: str = ""
    stock_form_url: str = ""
    openrouter_api_key: str = ""
    report_timezone: str = DEFAULT_TIMEZONE
    vendor_phone_numbers: Dict[str, str] = field(default_factory=dict)

    @property
    def meta_columns(self):
        """Form columns that describe the submission rather than a stock item."""
        return (self.timestamp_column, self.email_column, self.staff_column)

    def validate(self):
        """Raise ConfigurationError when the spreadsheet is not configured."""
        if not self.sheet_id or self.sheet_id == PLACEHOLDER_SHEET_ID:
            raise ConfigurationError(
                "Google Sheet is not configured. Set GOOGLE_SHEET_ID in your environment or .env file."
            )


def _parse_phone_numbers(raw: str) -> Dict[str, str]:
    """VENDOR_PHONE_NUMBERS is a JSON object of vendor name -> phone."""
    if not raw or not raw.strip():
        return {}
    try:
        numbers = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning(f"Ignoring VENDOR_PHONE_NUMBERS, not valid JSON: {e}")
        return {}
    if not isinstance(numbers, dict):
        logger.warning("Ignoring VENDOR_PHONE_NUMBERS, expected a JSON object")
        return {}
    return {str(k): normalize_phone(str(v)) for k, v in numbers.items() if v}


def normalize_phone(phone: str) -> str:
    """'+62 812-3456' -> '628123456'"""
    return "".join(ch for ch in str(phone) if ch.isdigit())


def load_config() -> AppConfig:
    """Build the configuration from environment variables."""
    return AppConfig(
        sheet_id=os.getenv("GOOGLE_SHEET_ID", "").strip(),
        api_key=os.getenv("GOOGLE_API_KEY", "").strip(),
        submissions_range=os.getenv("SUBMISSIONS_RANGE", DEFAULT_SUBMISSIONS_RANGE),
        processing_range=os.getenv("PROCESSING_RANGE", DEFAULT_PROCESSING_RANGE),
        suppliers_range=os.getenv("SUPPLIERS_RANGE", DEFAULT_SUPPLIERS_RANGE),
        whatsapp_target_number=normalize_phone(os.getenv("WHATSAPP_TARGET_NUMBER", "")),
        stock_form_url=os.getenv("STOCK_FORM_URL", ""),
        openrouter_api_key=os.getenv("OPENROUTER_API_KEY", ""),
        report_timezone=os.getenv("REPORT_TIMEZONE", DEFAULT_TIMEZONE),
        vendor_phone_numbers=_parse_phone_numbers(os.getenv("VENDOR_PHONE_NUMBERS", "")),
    )
