import json
import logging
import os
from typing import Any, Dict, List, Optional

import aiohttp

from constants.models import DEFAULT_SUMMARY_MODEL
from constants.schemas import RawRecord
from constants.sheet_columns import EMAIL_COLUMN, STAFF_COLUMN, TIMESTAMP_COLUMN
from utils.config import ConfigurationError
from utils.record_normalizer import extract_items

logger = logging.getLogger(__name__)


class SummaryGenerationError(Exception):
    """The LLM service could not produce a summary."""


def prepare_summary_records(
    records: List[RawRecord],
    timestamp_column: str = TIMESTAMP_COLUMN,
    staff_column: str = STAFF_COLUMN,
    email_column: str = EMAIL_COLUMN,
) -> List[Dict[str, Any]]:
    """
    Reduce form submissions to what the summary needs.

    Returns:
        List of {"Timestamp", "staff", "items"} dicts, items keyed by clean label
    """
    return [
        {
            "Timestamp": record.get(timestamp_column, ""),
            "staff": record.get(staff_column, ""),
            "items": extract_items(record, (timestamp_column, email_column, staff_column)),
        }
        for record in records
    ]


class StockSummaryHandler:
    """
    Handles interactions with OpenRouter API to write the stock opname summary
    sent to the owner over WhatsApp.
    """

    def __init__(
        self,
        model_name: str = DEFAULT_SUMMARY_MODEL,
        api_key: Optional[str] = None,
        timeout: int = 60,
        timestamp_column: str = TIMESTAMP_COLUMN,
        staff_column: str = STAFF_COLUMN,
        email_column: str = EMAIL_COLUMN,
    ):
        """
        Initialize the summary handler

        Args:
            model_name: OpenRouter model id (default: Gemini 2.5 Flash)
            api_key: OpenRouter key, read from OPENROUTER_API_KEY when omitted
            timeout: Request timeout in seconds
            timestamp_column: Form column holding the submission time
            staff_column: Form column naming the staff member
            email_column: Form column holding the submitter email
        """
        self.api_key = api_key if api_key is not None else os.getenv("OPENROUTER_API_KEY", "")
        self.model_name = model_name
        self.timeout = timeout
        self.api_url = "https://openrouter.ai/api/v1/chat/completions"
        self.timestamp_column = timestamp_column
        self.staff_column = staff_column
        self.email_column = email_column

    async def generate_summary(self, records: List[RawRecord], start_date: str, end_date: str) -> str:
        """
        Get a summary from the LLM

        Args:
            records: Submissions within the date range
            start_date: First day of the range, as shown to the owner
            end_date: Last day of the range

        Returns:
            str: Summary text ready to paste into WhatsApp
        """
        headers, data = self._prepare_request_data(self._prepare_messages(records, start_date, end_date))

        try:
            timeout = aiohttp.ClientTimeout(total=self.timeout)
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(self.api_url, headers=headers, json=data) as response:
                    response.raise_for_status()
                    result = await response.json()
                    return result["choices"][0]["message"]["content"]
        except (aiohttp.ClientError, KeyError, IndexError, ValueError) as e:
            logger.error(f"Error calling OpenRouter API: {e}")
            raise SummaryGenerationError(
                "Failed to communicate with the AI service. Please check the logs for details."
            ) from e

    def _prepare_messages(self, records: List[RawRecord], start_date: str, end_date: str) -> List[Dict[str, str]]:
        """
        Prepare messages for API request

        Args:
            records: Submissions within the date range
            start_date: First day of the range
            end_date: Last day of the range

        Returns:
            List of formatted messages
        """
        relevant_data = prepare_summary_records(
            records, self.timestamp_column, self.staff_column, self.email_column
        )

        prompt = f"""You are an inventory manager for a restaurant called Sarkop. Your task is to analyze the following stock opname data and write a concise summary for a report to be sent via WhatsApp to the owner.

The data below shows stock levels submitted by staff between {start_date} and {end_date}.

Data:
{json.dumps(relevant_data, indent=2, ensure_ascii=False)}

Your summary MUST follow these instructions:
1. Start with a clear and friendly header, like "Stock Opname Report for [Date Range]".
2. Provide a very brief overview, mentioning how many staff members submitted reports.
3. Analyze the latest stock entries to identify critical items. Highlight 3 to 5 items that have the lowest numerical stock levels or are marked as "Tidak cukup" (Not enough). These are priorities for reordering. List them clearly.
4. Mention 1 or 2 items that seem to have very high stock ("Cukup untuk hari ini" or high numbers), suggesting good inventory levels for those.
5. Conclude with a brief, positive closing remark, for example, "Overall, stock levels are being monitored well. Let's restock the priority items."
6. The entire message should be professional, brief, and formatted with clear sections for easy reading on a mobile phone. Use line breaks to separate points. Do not use markdown like '*' or '#'.
"""

        return [{"role": "user", "content": prompt}]

    def _prepare_request_data(self, messages: List[Dict[str, str]]) -> tuple:
        """
        Prepare headers and data for API request

        Args:
            messages: Formatted messages for the API

        Returns:
            Tuple of (headers, data)
        """
        if not self.api_key:
            raise ConfigurationError("OpenRouter API key not found. Please add OPENROUTER_API_KEY to your .env file.")

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        data = {
            "model": self.model_name,
            "messages": messages,
            "temperature": 0.4,
            "max_tokens": 1000,
        }

        return headers, data
