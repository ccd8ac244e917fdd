from itertools import islice

from ledger.domain import Kind, LedgerEntry
from ledger.filters import by_amount_range, by_category, by_date_range, by_kind, by_period, select
from ledger.lazy import iter_entries, lazy_top_categories


def make_sample():
    return (
        LedgerEntry("t1", "2025-01-01", Kind.EXPENSE, 300, "Food", "Groceries"),
        LedgerEntry("t2", "2025-01-02", Kind.EXPENSE, 200, "Transport", "Bus"),
        LedgerEntry("t3", "2025-01-03", Kind.INCOME, 5000, "Income", "Salary"),
        LedgerEntry("t4", "2025-02-04", Kind.EXPENSE, 700, "Food", "Restaurant"),
    )


def test_filters():
    entries = make_sample()
    assert [e.id for e in filter(by_period("2025-01"), entries)] == ["t1", "t2", "t3"]
    assert [e.id for e in filter(by_kind(Kind.INCOME), entries)] == ["t3"]
    assert [e.id for e in filter(by_category("Food"), entries)] == ["t1", "t4"]
    assert [e.id for e in filter(by_date_range("2025-01-02", "2025-01-31"), entries)] == ["t2", "t3"]
    assert [e.id for e in filter(by_amount_range(250, 800), entries)] == ["t1", "t4"]


def test_select_combines_predicates():
    entries = make_sample()
    picked = select(entries, by_kind(Kind.EXPENSE), by_category("Food"), by_date_range("2025-01-01", "2025-01-31"))
    assert [e.id for e in picked] == ["t1"]
    assert select(entries) == entries
    assert select(entries, by_amount_range(250, float("inf")), by_period("2025-02")) == (entries[3],)


def test_iter_entries_is_lazy_stop_early():
    entries = make_sample()
    calls = {"n": 0}

    def pred(e: LedgerEntry) -> bool:
        calls["n"] += 1
        return e.kind is Kind.EXPENSE

    first_two = list(islice(iter_entries(entries, pred), 2))
    assert len(first_two) == 2
    assert calls["n"] < len(entries)


def test_lazy_top_categories_order_and_limit():
    spend = {"Food": 1000, "Transport": 300, "Leisure": 450}
    assert list(lazy_top_categories(spend, 2)) == [("Food", 1000), ("Leisure", 450)]
    assert len(list(lazy_top_categories(spend, 10))) == 3
    assert list(lazy_top_categories(spend, -1)) == []
