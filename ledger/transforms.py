import json
import logging
import math
from pathlib import Path
from typing import Any, Dict, Iterable, Tuple

from ledger.domain import EntryId, Goal, LedgerEntry
from ledger.functional import Either, Left, validate_entry
from ledger.normalize import normalize_kind

logger = logging.getLogger(__name__)

Entries = Tuple[LedgerEntry, ...]
Goals = Tuple[Goal, ...]
Budgets = Dict[str, float]


# ---------------------------------------------------------------------------
# Plain-dict conversion (JSON blobs and seed file)
# ---------------------------------------------------------------------------

def entry_to_dict(e: LedgerEntry) -> dict:
    return {
        "id": e.id,
        "date": e.date,
        "type": e.kind.value,
        "amount": e.amount,
        "category": e.category,
        "note": e.note,
    }


def entry_from_dict(d: dict) -> Either[dict, LedgerEntry]:
    try:
        entry = LedgerEntry(
            id=d["id"],
            date=str(d.get("date") or "").strip(),
            kind=normalize_kind(d.get("type")),
            amount=float(d.get("amount")),
            category=str(d.get("category") or ""),
            note=str(d.get("note") or ""),
        )
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        return Left({"error": "malformed_entry", "message": f"Cannot read entry {d!r}: {exc}"})
    return validate_entry(entry)


def goal_to_dict(g: Goal) -> dict:
    return {
        "id": g.id,
        "name": g.name,
        "target": g.target,
        "monthly": g.monthly,
        "start_period": g.start_period,
    }


def goal_from_dict(d: dict) -> Goal:
    target = float(d["target"])
    monthly = float(d.get("monthly") or 0)
    if not math.isfinite(target) or target <= 0 or not math.isfinite(monthly) or monthly < 0:
        raise ValueError(f"goal amounts out of range: target={target}, monthly={monthly}")
    return Goal(
        id=str(d["id"]),
        name=str(d["name"]),
        target=target,
        monthly=monthly,
        start_period=str(d.get("start_period") or d.get("startYm") or ""),
    )


def entries_from_dicts(rows: Iterable[dict]) -> Entries:
    """Decode stored entries, dropping any that break the amount/kind invariant."""
    out = []
    for row in rows:
        result = entry_from_dict(row)
        if result.is_right():
            out.append(result.get_or_else(None))
        else:
            logger.warning("Dropping stored entry: %s", result.get_error()["message"])
    return tuple(out)


def goals_from_dicts(rows: Iterable[dict]) -> Goals:
    """Decode stored goals, dropping rows that do not describe a valid goal."""
    out = []
    for row in rows:
        try:
            out.append(goal_from_dict(row))
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            logger.warning("Dropping stored goal %r: %s", row, exc)
    return tuple(out)


def budgets_from_dict(raw: Dict[str, Any]) -> Budgets:
    """Decode stored caps, dropping labels whose cap is not a finite number >= 0."""
    out: Budgets = {}
    for category, cap in raw.items():
        try:
            value = float(cap)
        except (TypeError, ValueError):
            value = math.nan
        if not math.isfinite(value) or value < 0:
            logger.warning("Dropping budget %r: invalid cap %r", category, cap)
            continue
        out[str(category)] = value
    return out


def load_seed(path: Path) -> Tuple[Entries, Budgets, Goals, float]:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    entries = entries_from_dicts(data.get("transactions", []))
    budgets = budgets_from_dict(data.get("budgets", {}))
    goals = goals_from_dicts(data.get("goals", []))
    expected_income = float(data.get("expected_income", 0))

    return entries, budgets, goals, expected_income


# ---------------------------------------------------------------------------
# Collection updates; every function returns a new collection
# ---------------------------------------------------------------------------

def add_entry(entries: Entries, e: LedgerEntry) -> Entries:
    return (e,) + tuple(entries)


def update_entry(entries: Entries, e: LedgerEntry) -> Entries:
    return tuple(e if t.id == e.id else t for t in entries)


def remove_entry(entries: Entries, entry_id: EntryId) -> Entries:
    return tuple(t for t in entries if t.id != entry_id)


def merge_imported(entries: Entries, imported: Iterable[LedgerEntry]) -> Entries:
    return tuple(imported) + tuple(entries)


def set_budget(budgets: Budgets, category: str, cap: Any) -> Budgets:
    try:
        value = float(cap)
    except (TypeError, ValueError):
        value = 0.0
    if not math.isfinite(value) or value < 0:
        value = 0.0
    return {**budgets, category: value}


def add_goal(goals: Goals, g: Goal) -> Goals:
    return tuple(goals) + (g,)


def remove_goal(goals: Goals, goal_id: str) -> Goals:
    return tuple(g for g in goals if g.id != goal_id)
