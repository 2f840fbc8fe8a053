"""
Centralized prompts for the Trip Mate application.

All LLM prompts are defined in this package.
"""

from tripmate.prompts.expense_summary import (
    EXPENSE_SUMMARY_MAX_WORDS,
    EXPENSE_SUMMARY_PROMPT,
    EXPENSE_SUMMARY_SYSTEM,
    EXPENSE_SUMMARY_USER,
)
from tripmate.prompts.image_analysis import IMAGE_ANALYSIS_PROMPT

__all__ = [
    # Image classification
    "IMAGE_ANALYSIS_PROMPT",
    # Trip expense summary
    "EXPENSE_SUMMARY_SYSTEM",
    "EXPENSE_SUMMARY_USER",
    "EXPENSE_SUMMARY_PROMPT",
    "EXPENSE_SUMMARY_MAX_WORDS",
]
