"""
Model constants for the stock opname summary generator.
Contains the OpenRouter model identifier used for the report summary.
"""

# Google Models
GEMINI_2_5_FLASH = "google/gemini-2.5-flash"

DEFAULT_SUMMARY_MODEL = GEMINI_2_5_FLASH
