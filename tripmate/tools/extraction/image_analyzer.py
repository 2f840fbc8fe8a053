"""
Image classifier using a multimodal LLM through LangChain.
Classifies a trip photo as an expense or a memory and extracts name/amount.
"""

import json
import re
from typing import Any

from langchain_anthropic import ChatAnthropic
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage
from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_openai import ChatOpenAI
from pydantic import ValidationError as PydanticValidationError

from tripmate.config import settings
from tripmate.errors import ClassificationFailedError
from tripmate.logging_config import get_logger
from tripmate.prompts import (
    EXPENSE_SUMMARY_MAX_WORDS,
    EXPENSE_SUMMARY_PROMPT,
    IMAGE_ANALYSIS_PROMPT,
)
from tripmate.schemas.analysis import AIAnalysisResult

logger = get_logger(__name__)

_CODE_FENCE = re.compile(r"```json|```")


def get_llm_for_analysis() -> BaseChatModel:
    """
    Get configured multimodal LLM based on settings.

    Returns:
        Configured LangChain chat model

    Raises:
        ValueError: If provider is not supported or API key missing
    """
    provider = settings.llm_provider.lower()

    if provider == "google":
        if not settings.google_api_key:
            raise ValueError("GOOGLE_API_KEY not configured")

        logger.debug("initializing_google_llm", model=settings.gemini_model)
        return ChatGoogleGenerativeAI(
            model=settings.gemini_model,
            google_api_key=settings.google_api_key,
            temperature=settings.llm_temperature,
        )

    elif provider == "openai":
        if not settings.openai_api_key:
            raise ValueError("OPENAI_API_KEY not configured")

        logger.debug("initializing_openai_llm", model="gpt-4o")
        return ChatOpenAI(
            model="gpt-4o",
            api_key=settings.openai_api_key,
            temperature=settings.llm_temperature,
        )

    elif provider == "anthropic":
        if not settings.anthropic_api_key:
            raise ValueError("ANTHROPIC_API_KEY not configured")

        logger.debug("initializing_anthropic_llm", model="claude-3-5-sonnet-20241022")
        return ChatAnthropic(
            model="claude-3-5-sonnet-20241022",
            api_key=settings.anthropic_api_key,
            temperature=settings.llm_temperature,
        )

    else:
        raise ValueError(
            f"Unsupported LLM provider: {provider}. "
            f"Supported: google, openai, anthropic"
        )


def response_text(message: Any) -> str:
    """Flatten a chat model reply into plain text (content may be a list of parts)."""
    content = getattr(message, "content", message)
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type") == "text":
                parts.append(part.get("text", ""))
        return "".join(parts)
    return str(content or "")


def parse_analysis_response(text: str) -> AIAnalysisResult:
    """
    Parse the model's JSON answer into an AIAnalysisResult.

    Markdown code fences are stripped before parsing. Unknown enum values
    are coerced by the schema rather than rejected.

    Raises:
        ClassificationFailedError: If the text is not a JSON object
    """
    cleaned = _CODE_FENCE.sub("", text or "").strip()

    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.warning("analysis_response_not_json", preview=cleaned[:200])
        raise ClassificationFailedError("Failed to analyze image") from e

    if not isinstance(payload, dict):
        logger.warning("analysis_response_not_object", kind=type(payload).__name__)
        raise ClassificationFailedError("Failed to analyze image")

    try:
        return AIAnalysisResult.model_validate(payload)
    except PydanticValidationError as e:
        raise ClassificationFailedError("Failed to analyze image") from e


def analyze_image(base64_data: str, mime_type: str, **kwargs: Any) -> AIAnalysisResult:
    """
    Classify a base64-encoded image.

    Args:
        base64_data: Image bytes, base64 encoded (no data: prefix)
        mime_type: Image MIME type, e.g. image/jpeg
        **kwargs: Additional context (e.g. trip_id) for logging

    Returns:
        AIAnalysisResult with coerced type/category and amount

    Raises:
        ClassificationFailedError: If the model call fails or the answer is unusable
    """
    logger.info(
        "analyzing_image",
        mime_type=mime_type,
        payload_chars=len(base64_data),
        provider=settings.llm_provider,
        **kwargs,
    )

    message = HumanMessage(
        content=[
            {"type": "text", "text": IMAGE_ANALYSIS_PROMPT},
            {
                "type": "image_url",
                "image_url": {"url": f"data:{mime_type};base64,{base64_data}"},
            },
        ]
    )

    try:
        llm = get_llm_for_analysis()
        reply = llm.invoke([message])
    except Exception as e:
        logger.error(
            "image_analysis_failed",
            error=str(e),
            error_type=type(e).__name__,
            **kwargs,
            exc_info=True,
        )
        raise ClassificationFailedError("Failed to analyze image") from e

    result = parse_analysis_response(response_text(reply))

    logger.info(
        "image_analyzed",
        type=result.type,
        category=result.category,
        amount=result.amount,
        **kwargs,
    )

    return result


def analyze_trip_expenses(expenses: list[dict[str, Any]], **kwargs: Any) -> str:
    """
    Produce a short humorous summary of a trip's spending.

    Args:
        expenses: Expense dicts as sent by the client (name, amount, category...)

    Returns:
        Free-text summary with emoji and saving tips

    Raises:
        ClassificationFailedError: If the model call fails
    """
    logger.info("analyzing_trip_expenses", expense_count=len(expenses), **kwargs)

    try:
        llm = get_llm_for_analysis()
        chain = EXPENSE_SUMMARY_PROMPT | llm
        reply = chain.invoke(
            {
                "expenses_json": json.dumps(expenses, ensure_ascii=False, default=str),
                "max_words": EXPENSE_SUMMARY_MAX_WORDS,
            }
        )
    except Exception as e:
        logger.error(
            "expense_analysis_failed",
            error=str(e),
            error_type=type(e).__name__,
            **kwargs,
            exc_info=True,
        )
        raise ClassificationFailedError("Failed to analyze expenses") from e

    analysis = response_text(reply).strip()
    logger.info("trip_expenses_analyzed", summary_length=len(analysis), **kwargs)
    return analysis
