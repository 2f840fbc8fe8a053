"""
Prompt for the humorous end-of-trip spending summary.
"""

from langchain_core.prompts import ChatPromptTemplate

EXPENSE_SUMMARY_SYSTEM = """You are the witty travel buddy of a group of friends on a trip.
You look at their expenses and roast their spending habits, kindly."""

EXPENSE_SUMMARY_USER = """Analyze these travel expenses in a funny, concise way, in Vietnamese (at most {max_words} words).
Data: {expenses_json}
Add emoji and suggest ways to save money."""

EXPENSE_SUMMARY_MAX_WORDS = 150

EXPENSE_SUMMARY_PROMPT = ChatPromptTemplate.from_messages(
    [
        ("system", EXPENSE_SUMMARY_SYSTEM),
        ("user", EXPENSE_SUMMARY_USER),
    ]
)
