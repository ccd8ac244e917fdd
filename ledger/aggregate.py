"""
Roll-ups over ledger entries: monthly series, category spend, budget
consumption, rolling net and goal projections.

All functions are pure and leave their inputs untouched.
"""
import datetime as dt
import math
from collections import defaultdict
from functools import lru_cache
from typing import Iterable, Mapping, Sequence, Tuple

from ledger.config import BUDGET_WARN_PCT, FALLBACK_CATEGORY, HISTORY_MONTHS, ROLLING_MONTHS, TOP_HINTS
from ledger.domain import (
    BudgetUsage,
    Goal,
    GoalProjection,
    Kind,
    LedgerEntry,
    MonthlyAggregate,
    SpendingHint,
)
from ledger.filters import by_kind, by_period
from ledger.functional import Maybe, Nothing, Some, check_budget
from ledger.lazy import iter_entries, lazy_top_categories


# ---------------------------------------------------------------------------
# Periods
# ---------------------------------------------------------------------------

def period_of(date: str) -> str:
    return (date or "")[:7]


def add_months(period: str, n: int) -> str:
    year, month = int(period[:4]), int(period[5:7])
    index = year * 12 + (month - 1) + n
    return f"{index // 12:04d}-{index % 12 + 1:02d}"


def trailing_periods(reference: dt.date, count: int = HISTORY_MONTHS) -> list[str]:
    """``count`` year-months ending with the reference month, oldest first."""
    current = f"{reference.year:04d}-{reference.month:02d}"
    return [add_months(current, -i) for i in range(count - 1, -1, -1)]


def round_half_up(x: float) -> int:
    return math.floor(x + 0.5)


def parse_date(text: str) -> Maybe[dt.date]:
    """Calendar date from the first ten characters, Nothing when they are not ISO ``YYYY-MM-DD``."""
    try:
        return Some(dt.date.fromisoformat((text or "")[:10]))
    except ValueError:
        return Nothing()


# ---------------------------------------------------------------------------
# Monthly series
# ---------------------------------------------------------------------------

def month_totals(entries: Iterable[LedgerEntry], period: str) -> MonthlyAggregate:
    income = 0.0
    expense = 0.0
    for e in iter_entries(entries, by_period(period)):
        if e.kind is Kind.INCOME:
            income += e.amount
        elif e.kind is Kind.EXPENSE:
            expense += e.amount
    return MonthlyAggregate(period=period, income=income, expense=expense, net=income - expense)


@lru_cache(maxsize=32)
def _series(entries: Tuple[LedgerEntry, ...], periods: Tuple[str, ...]) -> Tuple[MonthlyAggregate, ...]:
    return tuple(month_totals(entries, p) for p in periods)


def monthly_series(entries: Iterable[LedgerEntry], periods: Sequence[str]) -> Tuple[MonthlyAggregate, ...]:
    """One aggregate per requested period; empty periods report zeros."""
    return _series(tuple(entries), tuple(periods))


def rolling_average_net(series: Sequence[MonthlyAggregate], window: int = ROLLING_MONTHS) -> int:
    recent = list(series)[-window:] if window > 0 else []
    total = sum(m.net for m in recent)
    return round_half_up(total / (len(recent) or 1))


# ---------------------------------------------------------------------------
# Categories and budgets
# ---------------------------------------------------------------------------

def category_spend(entries: Iterable[LedgerEntry], period: str) -> dict[str, float]:
    totals: dict[str, float] = defaultdict(float)
    month = iter_entries(entries, by_period(period))
    for e in iter_entries(month, by_kind(Kind.EXPENSE)):
        totals[e.category or FALLBACK_CATEGORY] += e.amount
    return dict(totals)


def usage_ratio(consumed: float, cap: float) -> int:
    if cap <= 0:
        return 0
    return min(100, round_half_up(consumed / cap * 100))


def _status(ratio: int, over: bool) -> str:
    if over:
        return "over"
    if ratio > BUDGET_WARN_PCT:
        return "warn"
    return "ok"


def budget_usage(
    entries: Iterable[LedgerEntry], budgets: Mapping[str, float], period: str
) -> Tuple[BudgetUsage, ...]:
    """Consumption of every budgeted category within ``period``."""
    spend = category_spend(entries, period)
    rows = []
    for category, cap in budgets.items():
        cap = float(cap or 0)
        consumed = spend.get(category, 0.0)
        over = check_budget(category, cap, consumed).is_left()
        ratio = usage_ratio(consumed, cap)
        rows.append(BudgetUsage(
            category=category,
            cap=cap,
            consumed=consumed,
            ratio=ratio,
            over=over,
            remaining=max(0.0, cap - consumed),
            status=_status(ratio, over),
        ))
    return tuple(rows)


def spending_hints(
    entries: Iterable[LedgerEntry],
    budgets: Mapping[str, float],
    period: str,
    k: int = TOP_HINTS,
) -> Tuple[SpendingHint, ...]:
    """Top ``k`` categories by spend this period, compared with their caps."""
    hints = []
    for category, spent in lazy_top_categories(category_spend(entries, period), k):
        cap = float(budgets.get(category) or 0)
        hints.append(SpendingHint(
            category=category,
            spent=spent,
            cap=cap,
            over=check_budget(category, cap, spent).is_left(),
        ))
    return tuple(hints)


def income_gap(expected: float, entries: Iterable[LedgerEntry], period: str) -> float:
    return (expected or 0) - month_totals(entries, period).income


# ---------------------------------------------------------------------------
# Goals
# ---------------------------------------------------------------------------

def months_to_goal(goal: Goal) -> Maybe[int]:
    if goal.monthly > 0:
        return Some(math.ceil(goal.target / goal.monthly))
    return Nothing()


def goal_projections(goals: Iterable[Goal]) -> Tuple[GoalProjection, ...]:
    out = []
    for g in goals:
        months = months_to_goal(g)
        out.append(GoalProjection(
            goal=g,
            months=months,
            eta_period=months.map(lambda n, start=g.start_period: add_months(start, n)),
        ))
    return tuple(out)
