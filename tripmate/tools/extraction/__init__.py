"""
AI extraction tools for trip photos.
"""

from tripmate.tools.extraction.image_analyzer import (
    analyze_image,
    analyze_trip_expenses,
    get_llm_for_analysis,
    parse_analysis_response,
)

__all__ = [
    "analyze_image",
    "analyze_trip_expenses",
    "get_llm_for_analysis",
    "parse_analysis_response",
]
