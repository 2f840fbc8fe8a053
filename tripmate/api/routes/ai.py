"""
AI endpoints: single-image classification and trip spending summary.
"""

from fastapi import APIRouter

from tripmate.logging_config import get_logger
from tripmate.schemas.analysis import (
    AnalyzeExpensesRequest,
    AnalyzeImageRequest,
    ExpenseAnalysis,
)
from tripmate.tools.extraction.image_analyzer import analyze_image, analyze_trip_expenses

logger = get_logger(__name__)

router = APIRouter(prefix="/ai", tags=["ai"])


@router.post("/analyze-image")
def analyze_image_endpoint(payload: AnalyzeImageRequest) -> dict:
    """Classify a base64 image as expense or memory."""
    result = analyze_image(payload.base64_data, payload.mime_type)
    return result.model_dump(by_alias=True)


@router.post("/analyze-expenses")
def analyze_expenses_endpoint(payload: AnalyzeExpensesRequest) -> dict:
    """Humorous summary of the given expenses."""
    analysis = analyze_trip_expenses(payload.expenses)
    return ExpenseAnalysis(analysis=analysis).model_dump(by_alias=True)
