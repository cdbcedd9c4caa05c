import logging
import os
from typing import Any, List

from google.auth import default
from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from utils.config import AppConfig, ConfigurationError

# Set up logging
logger = logging.getLogger(__name__)

# Read-only access is enough, nothing is written back to the sheet
SCOPES = ["https://www.googleapis.com/auth/spreadsheets.readonly"]

SERVICE_ACCOUNT_FILE_ENV = "GOOGLE_SERVICE_ACCOUNT_FILE"


class SheetFetchError(Exception):
    """The Sheets API answered with a non-success status."""

    def __init__(self, status: int, message: str):
        super().__init__(message)
        self.status = status


def get_credentials():
    """Gets service account credentials using the simplest approach that works."""
    json_file = os.getenv(SERVICE_ACCOUNT_FILE_ENV, "")
    if json_file and os.path.exists(json_file):
        logger.debug("Using local service account JSON file")
        return service_account.Credentials.from_service_account_file(json_file, scopes=SCOPES)

    try:
        # Use Application Default Credentials (works with Cloud Run, gcloud auth, etc.)
        creds, project = default(scopes=SCOPES)
        logger.info(f"Using Application Default Credentials for project: {project}")
        return creds
    except Exception as e:
        logger.error(f"Error getting Application Default Credentials: {e}")
        raise ConfigurationError(
            "Could not authenticate with Google Sheets. Set GOOGLE_API_KEY for a public sheet, "
            f"point {SERVICE_ACCOUNT_FILE_ENV} at a service account file, or run "
            "'gcloud auth application-default login'"
        )


def get_sheets_service(config: AppConfig):
    """Sheets v4 client, keyed by API key when one is configured."""
    if config.api_key:
        return build("sheets", "v4", developerKey=config.api_key, cache_discovery=False)
    return build("sheets", "v4", credentials=get_credentials(), cache_discovery=False)


def get_range_values(config: AppConfig, range_name: str) -> List[List[Any]]:
    """
    Gets the raw values of a range, header row first.

    Raises:
        ConfigurationError: the spreadsheet id is not configured
        SheetFetchError: the API returned an error status
    """
    config.validate()
    logger.info(f"Fetching range '{range_name}' from Google Sheets...")

    try:
        service = get_sheets_service(config)
        result = (
            service.spreadsheets()
            .values()
            .get(spreadsheetId=config.sheet_id, range=range_name)
            .execute()
        )
    except HttpError as e:
        status = getattr(e.resp, "status", 0)
        logger.error(f"Error fetching range {range_name}: {e}")
        raise SheetFetchError(
            int(status or 0),
            f"Failed to fetch data from Google Sheets. Status: {status}. "
            "Please check your Sheet ID, range, and API key permissions.",
        ) from e

    values = result.get("values", [])
    if not values:
        logger.warning(f"No data found in range {range_name}")
    return values
