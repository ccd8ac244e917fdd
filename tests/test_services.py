import datetime as dt

from ledger.domain import Goal, Kind, LedgerEntry
from ledger.functional import Nothing, Some
from ledger.services import SummaryService, default_summary_service


def make_sample():
    entries = (
        LedgerEntry(1, "2025-08-01", Kind.INCOME, 10000, "Income", ""),
        LedgerEntry(2, "2025-08-02", Kind.EXPENSE, 400, "Groceries", ""),
        LedgerEntry(3, "2025-07-02", Kind.EXPENSE, 1000, "Housing", ""),
        LedgerEntry(4, "2025-06-02", Kind.INCOME, 3000, "Income", ""),
    )
    budgets = {"Groceries": 300, "Housing": 2500}
    goals = (Goal("g1", "Trip", 3500, 800, "2025-08"), Goal("g2", "Car", 9000, 0, "2025-08"))
    return entries, budgets, goals


def test_default_summary():
    entries, budgets, goals = make_sample()
    report = default_summary_service().summary(dt.date(2025, 8, 20), entries, budgets, goals, 14000)
    res = report["result"]

    assert report["period"] == "2025-08"
    assert len(res["monthly"]) == 12
    assert res["monthly"][-1].period == "2025-08"
    assert res["monthly"][0].income == 0

    assert res["current"].income == 10000
    assert res["current"].expense == 400
    # (3000 - 1000 + 9600) / 3
    assert res["avg_net"] == 3867
    assert res["category_spend"] == {"Groceries": 400}

    usage = {u.category: u for u in res["budgets"]}
    assert usage["Groceries"].over is True
    assert usage["Housing"].ratio == 0

    assert res["goals"][0].months == Some(5)
    assert res["goals"][1].months == Nothing()
    assert res["hints"][0].category == "Groceries"
    assert res["income_gap"] == 4000

    messages = [m for v in report["validation"] for m in v["messages"]]
    assert any("Car" in m for m in messages)
    assert [s["calculator"] for s in report["steps"]][0] == "calc_monthly_series"


def test_validator_errors_are_reported_not_raised():
    def broken(ctx):
        raise RuntimeError("boom")

    def count(ctx, acc):
        return {"count": len(ctx.entries)}

    entries, budgets, goals = make_sample()
    report = SummaryService([broken], [count]).summary(dt.date(2025, 8, 1), entries, budgets, goals)
    assert report["validation"][0]["messages"] == ["validator_error: boom"]
    assert report["result"] == {"count": 4}


def test_calculators_see_previous_results():
    def first(ctx, acc):
        return {"a": 1}

    def second(ctx, acc):
        return {"b": acc["a"] + 1}

    report = SummaryService([], [first, second]).summary(dt.date(2025, 8, 1), (), {}, ())
    assert report["result"] == {"a": 1, "b": 2}
