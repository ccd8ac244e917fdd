from typing import Callable, Iterable, Iterator, Mapping

from ledger.domain import LedgerEntry


def iter_entries(
    entries: Iterable[LedgerEntry], pred: Callable[[LedgerEntry], bool]
) -> Iterator[LedgerEntry]:
    for e in entries:
        if pred(e):
            yield e


def lazy_top_categories(spend: Mapping[str, float], k: int) -> Iterator[tuple[str, float]]:
    ordered: list[tuple[str, float]] = sorted(
        spend.items(),
        key=lambda item: item[1],
        reverse=True,
    )

    for name, total in ordered[: max(0, k)]:
        yield name, total
