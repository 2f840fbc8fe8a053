"""
User-facing copy with the app's casual voice.

Each outcome has a small pool of messages; one is picked at random.
"""

import random

# ─────────────────────────────────────────────────────────────────────────────
# Ingestion outcomes
# ─────────────────────────────────────────────────────────────────────────────

UPLOAD_ERRORS = [
    "AI is busy sightseeing, try again later! 🏞️",
    "AI went for a coffee ☕, hang on a sec!",
    "AI is taking a selfie from its best angle, wait a moment! 🤳",
    "AI dozed off 😴, wake up!",
    "The photo was so pretty the AI got dizzy, give it a second! 🤩",
    "AI is counting money (not yours), try again! 💸",
]

SUCCESS_MESSAGES = [
    "✨ Added! AI says: absolutely amazing!",
    "🎉 Bill saved, your wallet is crying!",
    "💰 Expense added. Your mom: \"Why so much?\"",
    "📸 Memory saved, feelings saved too! 💔",
    "🚀 Done! Now go split the bill!",
]

MIXED_MESSAGES = [
    "😅 Saved {succeeded}/{total}, {failed} photo(s) got lost on the way!",
    "🤹 {succeeded} in, {failed} dropped. AI needs more coffee ☕",
]

# ─────────────────────────────────────────────────────────────────────────────
# Dashboard
# ─────────────────────────────────────────────────────────────────────────────

BUDGET_MESSAGES = {
    "safe": "💚 Safe! Keep on travelling!",
    "warning": "⚠️ Warning: the wallet is feeling the heat!",
    "overdraft": "🔴 BROKE! Who lent you that money? 💔",
}

EMPTY_STATES = [
    "📭 No expenses yet... or did you forget to add them? 😅",
    "🎯 Rich captain! Not a single coin spent!",
    "🤐 Silence... nobody wants to talk about their spending!",
]

ANALYSIS_INTRO = [
    "🔮 Let's see what the AI thinks of your spending habits...",
    "📊 AI is analyzing... brace yourself!",
    "🎯 Hold on, the AI is about to expose your wallet!",
]


def pick(messages: list[str], **values) -> str:
    """Random message from a pool, with {placeholders} filled in."""
    return random.choice(messages).format(**values)


def batch_message(outcome: str, succeeded: int, failed: int, total: int) -> str:
    """Casual message for an ingestion batch outcome."""
    if outcome == "all_failed":
        return pick(UPLOAD_ERRORS)
    if outcome == "mixed":
        return pick(MIXED_MESSAGES, succeeded=succeeded, failed=failed, total=total)
    return pick(SUCCESS_MESSAGES)


def format_amount_with_vibe(amount: float) -> str:
    """Amount in thousands with a comment on how painful it is."""
    shown = f"{amount:g}"
    if amount == 0:
        return f"{shown}k (Super thrifty!)"
    if amount < 100:
        return f"{shown}k (Pocket change!)"
    if amount < 500:
        return f"{shown}k (Normal!)"
    if amount < 1000:
        return f"{shown}k (A bit spicy!)"
    if amount < 2000:
        return f"{shown}k (Oh no...)"
    return f"{shown}k (BROKE!!!)"
