"""
Trip spending statistics and budget status.

Only items of type "expense" count towards the totals.
"""

from dataclasses import dataclass, field
from typing import Any, Iterable, Protocol


class HasAmount(Protocol):
    type: str
    category: str
    amount: float


@dataclass
class TripStats:
    total: float = 0
    by_category: dict[str, float] = field(default_factory=dict)
    per_person: float = 0
    expense_count: int = 0
    member_count: int = 1


def split_divisor(member_count: int | None) -> int:
    """0, negative or missing member counts split by 1."""
    if not member_count or member_count < 1:
        return 1
    return member_count


def compute_trip_stats(items: Iterable[HasAmount], member_count: int | None) -> TripStats:
    """
    Sum expenses overall and per category, and split the total per person.

    Args:
        items: Trip items (ORM rows or read models)
        member_count: Trip member count; anything below 1 counts as 1

    Returns:
        TripStats
    """
    total = 0.0
    by_category: dict[str, float] = {}
    expense_count = 0

    for item in items:
        if item.type != "expense":
            continue
        amount = item.amount or 0
        total += amount
        by_category[item.category] = by_category.get(item.category, 0) + amount
        expense_count += 1

    divisor = split_divisor(member_count)
    return TripStats(
        total=total,
        by_category=by_category,
        per_person=total / divisor,
        expense_count=expense_count,
        member_count=divisor,
    )


def budget_status(spent: float, budget: float | None) -> str:
    """
    Classify spending against the budget.

    safe up to 79%, warning up to 99%, overdraft beyond. Without a budget
    any spending is an overdraft.
    """
    if not budget or budget <= 0:
        return "overdraft" if spent > 0 else "safe"

    percent = spent / budget * 100
    if percent <= 79:
        return "safe"
    if percent <= 99:
        return "warning"
    return "overdraft"


def dashboard_payload(stats: TripStats, budget: float | None) -> dict[str, Any]:
    """Dashboard response body."""
    return {
        "total": stats.total,
        "byCategory": stats.by_category,
        "perPerson": stats.per_person,
        "memberCount": stats.member_count,
        "budget": budget or 0,
        "budgetStatus": budget_status(stats.total, budget),
        "expenseCount": stats.expense_count,
    }
