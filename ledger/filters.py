from typing import Iterable, Tuple

from ledger.domain import Kind, LedgerEntry


def by_period(period: str):
    def _filter(e: LedgerEntry) -> bool:
        return (e.date or "")[:7] == period

    return _filter


def by_kind(kind: Kind):
    def _filter(e: LedgerEntry) -> bool:
        return e.kind is kind

    return _filter


def by_category(category: str):
    def _filter(e: LedgerEntry) -> bool:
        return e.category == category

    return _filter


def by_date_range(start: str, end: str):
    def _filter(e: LedgerEntry) -> bool:
        return start <= e.date <= end

    return _filter


def by_amount_range(min: float, max: float):
    def _filter(e: LedgerEntry) -> bool:
        return min <= e.amount <= max

    return _filter


def select(entries: Iterable[LedgerEntry], *preds) -> Tuple[LedgerEntry, ...]:
    """Entries that pass every predicate, in their original order."""
    return tuple(e for e in entries if all(p(e) for p in preds))
