import datetime as dt
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Sequence, Tuple

from ledger import aggregate
from ledger.config import HISTORY_MONTHS, ROLLING_MONTHS, TOP_HINTS
from ledger.domain import Goal, LedgerEntry


@dataclass(frozen=True)
class SummaryContext:
    """Inputs shared by every calculator for one summary run."""
    period: str
    periods: Tuple[str, ...]
    entries: Tuple[LedgerEntry, ...]
    budgets: Mapping[str, float] = field(default_factory=dict)
    goals: Tuple[Goal, ...] = ()
    expected_income: float = 0.0


Validator = Callable[[SummaryContext], Sequence[str]]
Calculator = Callable[[SummaryContext, Dict[str, Any]], Dict[str, Any]]


class SummaryService:
    """Facade for dashboard summaries using injected validators and calculators.

    validators: functions taking a SummaryContext -> Sequence[str] (warnings, never fatal)
    calculators: functions taking (SummaryContext, acc) -> dict (partial results);
    acc holds the merged output of the calculators that already ran.
    """

    def __init__(self, validators: Sequence[Validator], calculators: Sequence[Calculator]):
        self.validators = validators
        self.calculators = calculators

    def summary(
        self,
        reference: dt.date,
        entries,
        budgets: Mapping[str, float],
        goals,
        expected_income: float = 0.0,
        history: int = HISTORY_MONTHS,
    ) -> Dict[str, Any]:
        """Run validators and calculators and return an aggregated report with intermediate steps."""
        periods = tuple(aggregate.trailing_periods(reference, history))
        ctx = SummaryContext(
            period=f"{reference.year:04d}-{reference.month:02d}",
            periods=periods,
            entries=tuple(entries),
            budgets=dict(budgets),
            goals=tuple(goals),
            expected_income=expected_income,
        )
        report = {
            "period": ctx.period,
            "validation": [],
            "steps": [],
            "result": {}
        }

        for v in self.validators:
            try:
                msgs = v(ctx)
            except Exception as e:
                msgs = [f"validator_error: {e}"]
            report["validation"].append({"validator": getattr(v, "__name__", str(v)), "messages": list(msgs)})

        acc: Dict[str, Any] = {}
        for calc in self.calculators:
            out = calc(ctx, acc)
            report["steps"].append({"calculator": getattr(calc, "__name__", str(calc)), "output": out})
            acc.update(out)

        report["result"] = acc
        return report


# ---------------------------------------------------------------------------
# Validators
# ---------------------------------------------------------------------------

def validate_budgets(ctx: SummaryContext) -> Sequence[str]:
    return [f"budget for {cat} is negative ({cap})" for cat, cap in ctx.budgets.items() if cap < 0]


def validate_goals(ctx: SummaryContext) -> Sequence[str]:
    msgs = []
    for g in ctx.goals:
        if g.target <= 0:
            msgs.append(f"goal {g.name} has no positive target")
        if g.monthly <= 0:
            msgs.append(f"goal {g.name} has no monthly contribution, no ETA")
    return msgs


# ---------------------------------------------------------------------------
# Calculators
# ---------------------------------------------------------------------------

def calc_monthly_series(ctx: SummaryContext, acc: Dict[str, Any]) -> Dict[str, Any]:
    return {"monthly": aggregate.monthly_series(ctx.entries, ctx.periods)}


def calc_current_month(ctx: SummaryContext, acc: Dict[str, Any]) -> Dict[str, Any]:
    return {"current": aggregate.month_totals(ctx.entries, ctx.period)}


def calc_rolling_net(ctx: SummaryContext, acc: Dict[str, Any]) -> Dict[str, Any]:
    series = acc.get("monthly") or aggregate.monthly_series(ctx.entries, ctx.periods)
    return {"avg_net": aggregate.rolling_average_net(series, ROLLING_MONTHS)}


def calc_category_spend(ctx: SummaryContext, acc: Dict[str, Any]) -> Dict[str, Any]:
    return {"category_spend": aggregate.category_spend(ctx.entries, ctx.period)}


def calc_budget_usage(ctx: SummaryContext, acc: Dict[str, Any]) -> Dict[str, Any]:
    return {"budgets": aggregate.budget_usage(ctx.entries, ctx.budgets, ctx.period)}


def calc_goal_projections(ctx: SummaryContext, acc: Dict[str, Any]) -> Dict[str, Any]:
    return {"goals": aggregate.goal_projections(ctx.goals)}


def calc_hints(ctx: SummaryContext, acc: Dict[str, Any]) -> Dict[str, Any]:
    return {"hints": aggregate.spending_hints(ctx.entries, ctx.budgets, ctx.period, TOP_HINTS)}


def calc_income_gap(ctx: SummaryContext, acc: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "expected_income": ctx.expected_income,
        "income_gap": aggregate.income_gap(ctx.expected_income, ctx.entries, ctx.period),
    }


def default_summary_service() -> SummaryService:
    return SummaryService(
        validators=[validate_budgets, validate_goals],
        calculators=[
            calc_monthly_series,
            calc_current_month,
            calc_rolling_net,
            calc_category_spend,
            calc_budget_usage,
            calc_goal_projections,
            calc_hints,
            calc_income_gap,
        ],
    )
