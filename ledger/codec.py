"""
CSV import/export for ledger entries.

The format is deliberately simple: comma separated, no quoting. Export
replaces commas in notes with semicolons; import is tolerant and drops any
row it cannot turn into a valid entry instead of failing the whole batch.
"""
import datetime as dt
import logging
import math
import re
from typing import Iterable, Optional, Tuple

from ledger.domain import EntryId, Kind, LedgerEntry, new_entry_id
from ledger.functional import Either, Left, Right, pipe, validate_entry
from ledger.normalize import normalize_kind

logger = logging.getLogger(__name__)

DELIMITER = ","
NOTE_DELIMITER_REPLACEMENT = ";"
FIELDS = ("id", "date", "type", "amount", "category", "note")
HEADER = DELIMITER.join(FIELDS)

_LINE_BREAK = re.compile(r"\r?\n")
_NUMBER = re.compile(r"[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?")


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------

def format_number(value: float) -> str:
    """Integral values without a fractional part, others in shortest form."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return repr(value) if isinstance(value, float) else str(value)


def _entry_line(e: LedgerEntry) -> str:
    return DELIMITER.join([
        format_number(e.id),
        e.date,
        e.kind.value,
        format_number(e.amount),
        e.category or "",
        str(e.note or "").replace(DELIMITER, NOTE_DELIMITER_REPLACEMENT),
    ])


def to_csv_string(entries: Iterable[LedgerEntry]) -> str:
    return "\n".join([HEADER, *(_entry_line(e) for e in entries or ())])


def export_filename(today: dt.date) -> str:
    return f"transactions-{today.isoformat()}.csv"


# ---------------------------------------------------------------------------
# Import
# ---------------------------------------------------------------------------

def _strip_bom(text: str) -> str:
    return text.lstrip("\ufeff")


def _split_lines(text: str) -> list[str]:
    return [line for line in _LINE_BREAK.split(text) if line.strip()]


def _parse_number(raw: str) -> Optional[float]:
    """Plain ASCII decimal or exponent notation; ``1_000`` and non-ASCII digits are rejected."""
    if not _NUMBER.fullmatch(raw.strip()):
        return None
    value = float(raw)
    return value if math.isfinite(value) else None


def _parse_id(raw: str) -> EntryId:
    value = _parse_number(raw.strip()) if raw.strip() else None
    if value is None:
        return new_entry_id()
    return int(value) if value.is_integer() else value


class _Row:
    """Positional view over one split line, addressed by header name."""

    def __init__(self, parts: list[str], columns: dict[str, int]):
        self._parts = parts
        self._columns = columns

    def get(self, name: str) -> str:
        j = self._columns.get(name)
        if j is None or j >= len(self._parts):
            return ""
        return self._parts[j]


def _read_date(row: _Row) -> Either[str, dict]:
    date = row.get("date").strip()
    if not date:
        return Left("missing date")
    return Right({"date": date})


def _read_amount(row: _Row, fields: dict) -> Either[str, dict]:
    raw = row.get("amount").replace(",", "").strip()
    if not raw:
        return Left("missing amount")
    amount = _parse_number(raw)
    if amount is None:
        return Left(f"unparseable amount {raw!r}")
    return Right({**fields, "amount": amount})


def _resolve_kind(row: _Row, fields: dict) -> Either[str, dict]:
    kind = normalize_kind(row.get("type"))
    amount = fields["amount"]
    if kind is Kind.UNKNOWN:
        if amount < 0:
            kind = Kind.EXPENSE
        elif amount > 0:
            kind = Kind.INCOME
        else:
            return Left("zero amount without a type")
    return Right({**fields, "kind": kind, "amount": abs(amount)})


def _build_entry(row: _Row, fields: dict) -> Either[str, LedgerEntry]:
    entry = LedgerEntry(
        id=_parse_id(row.get("id")),
        date=fields["date"],
        kind=fields["kind"],
        amount=fields["amount"],
        category=row.get("category").strip(),
        note=row.get("note").strip(),
    )
    gate = validate_entry(entry)
    if gate.is_left():
        return Left(gate.get_error()["message"])
    return gate


def parse_row(line: str, columns: dict[str, int]) -> Either[str, LedgerEntry]:
    """Turn one data line into an entry, or Left(reason) when it must be skipped."""
    row = _Row(line.split(DELIMITER), columns)
    return (
        _read_date(row)
        .bind(lambda f: _read_amount(row, f))
        .bind(lambda f: _resolve_kind(row, f))
        .bind(lambda f: _build_entry(row, f))
    )


def parse_csv(text: Optional[str]) -> Tuple[LedgerEntry, ...]:
    """Best-effort import. Never raises on content; bad rows are dropped.

    Only a header lacking a ``date`` or ``amount`` column yields nothing at all.
    """
    if not text:
        return ()
    lines = pipe(str(text), _strip_bom, _split_lines)
    if not lines:
        return ()

    columns = {name.strip(): i for i, name in enumerate(lines[0].split(DELIMITER))}
    if "date" not in columns or "amount" not in columns:
        logger.info("Import skipped: header has no date/amount columns (%s)", lines[0])
        return ()

    out = []
    for lineno, line in enumerate(lines[1:], start=2):
        result = parse_row(line, columns)
        if result.is_right():
            out.append(result.get_or_else(None))
        else:
            logger.debug("Skipping line %d: %s", lineno, result.get_error())

    logger.info("Parsed %d of %d rows", len(out), len(lines) - 1)
    return tuple(out)
