"""
Application state and the single controller that owns it.

The controller loads every collection once at startup, swaps in a new
immutable ``AppState`` on each mutation and immediately writes the full
snapshot back to the blob store.
"""
from __future__ import annotations

import datetime as dt
import json
import logging
import math
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from ledger import aggregate, codec, filters, transforms
from ledger.config import (
    DEFAULT_BUDGETS,
    DEFAULT_EXPECTED_INCOME,
    FALLBACK_CATEGORY,
    INCOME_CATEGORY,
    KEY_BUDGETS,
    KEY_ENTRIES,
    KEY_EXPECTED_INCOME,
    KEY_GOALS,
    SEED_PATH,
)
from ledger.domain import EntryId, Goal, Kind, LedgerEntry, new_entry_id
from ledger.events import (
    BUDGET_CHANGED,
    DATA_RESET,
    ENTRIES_IMPORTED,
    ENTRY_ADDED,
    ENTRY_REMOVED,
    ENTRY_UPDATED,
    GOAL_ADDED,
    GOAL_REMOVED,
    EventBus,
    register_default_handlers,
)
from ledger.functional import Either, Left, Right, validate_entry
from ledger.normalize import normalize_kind
from ledger.services import SummaryService, default_summary_service
from ledger.storage import BlobStore, StorageError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppState:
    entries: transforms.Entries = ()
    budgets: transforms.Budgets = field(default_factory=dict)
    goals: transforms.Goals = ()
    expected_income: float = 0.0


def default_state(seed_path: Optional[Path] = SEED_PATH) -> AppState:
    """Sample data when a seed file is available, otherwise empty collections."""
    if seed_path is not None and Path(seed_path).exists():
        entries, budgets, goals, expected = transforms.load_seed(seed_path)
        return AppState(entries, budgets or dict(DEFAULT_BUDGETS), goals, expected or DEFAULT_EXPECTED_INCOME)
    return AppState(budgets=dict(DEFAULT_BUDGETS), expected_income=DEFAULT_EXPECTED_INCOME)


def _to_amount(raw: Any) -> Optional[float]:
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    return value if math.isfinite(value) else None


class LedgerController:
    def __init__(
        self,
        store: BlobStore,
        seed_path: Optional[Path] = SEED_PATH,
        bus: Optional[EventBus] = None,
        summaries: Optional[SummaryService] = None,
    ):
        self.store = store
        self.seed_path = seed_path
        self.bus = bus or register_default_handlers(EventBus())
        self.summaries = summaries or default_summary_service()
        self.state = AppState()
        self.alerts: List[dict] = []

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _read(self, key: str, shape: Union[type, Tuple[type, ...]]) -> Any:
        """Decoded blob for ``key``, None when never written; wrong JSON shapes raise StorageError."""
        blob = self.store.get(key)
        if blob is None:
            return None
        try:
            value = json.loads(blob)
        except json.JSONDecodeError as exc:
            raise StorageError(f"Stored blob {key!r} is not valid JSON: {exc}") from exc
        if not isinstance(value, shape) or isinstance(value, bool):
            raise StorageError(f"Stored blob {key!r} has unexpected type {type(value).__name__}")
        return value

    def load(self) -> AppState:
        """Read every collection once; keys never written fall back to the seed."""
        defaults = default_state(self.seed_path)

        rows = self._read(KEY_ENTRIES, list)
        budgets = self._read(KEY_BUDGETS, dict)
        goals = self._read(KEY_GOALS, list)
        expected = self._read(KEY_EXPECTED_INCOME, (int, float))
        if expected is not None and (not math.isfinite(expected) or expected < 0):
            raise StorageError(f"Stored expected income {expected!r} is out of range")

        self.state = AppState(
            entries=defaults.entries if rows is None else transforms.entries_from_dicts(rows),
            budgets=defaults.budgets if budgets is None else transforms.budgets_from_dict(budgets),
            goals=defaults.goals if goals is None else transforms.goals_from_dicts(goals),
            expected_income=defaults.expected_income if expected is None else float(expected),
        )
        logger.info(
            "Loaded %d entries, %d budgets, %d goals",
            len(self.state.entries), len(self.state.budgets), len(self.state.goals),
        )
        return self.state

    def save(self) -> None:
        s = self.state
        self.store.put(KEY_ENTRIES, json.dumps([transforms.entry_to_dict(e) for e in s.entries], ensure_ascii=False))
        self.store.put(KEY_BUDGETS, json.dumps(s.budgets, ensure_ascii=False))
        self.store.put(KEY_GOALS, json.dumps([transforms.goal_to_dict(g) for g in s.goals], ensure_ascii=False))
        self.store.put(KEY_EXPECTED_INCOME, json.dumps(s.expected_income))

    def _commit(self, state: AppState) -> AppState:
        self.state = state
        self.save()
        return state

    def reset(self) -> AppState:
        """Forget every stored collection and start over from the seed."""
        for key in (KEY_ENTRIES, KEY_BUDGETS, KEY_GOALS, KEY_EXPECTED_INCOME):
            self.store.delete(key)
        self.alerts.clear()
        state = self.load()
        self._publish(DATA_RESET, {})
        logger.info("Stored data cleared, back to defaults")
        return state

    # ------------------------------------------------------------------
    # Entries
    # ------------------------------------------------------------------

    def _budget_payload(self, e: LedgerEntry) -> dict:
        category = e.category or FALLBACK_CATEGORY
        spend = aggregate.category_spend(self.state.entries, aggregate.period_of(e.date))
        return {
            "id": e.id,
            "kind": e.kind.value,
            "category": category,
            "amount": e.amount,
            "budget_limit": self.state.budgets.get(category, 0),
            "current_spent": spend.get(category, 0.0),
        }

    def _publish(self, name: str, payload: dict) -> None:
        for result in self.bus.publish(name, payload):
            if result and "alert" in result:
                logger.warning(result["alert"])
                self.alerts.append(result)

    def _make_entry(self, entry_id: EntryId, date, kind, amount, category, note) -> Either[dict, LedgerEntry]:
        kind = kind if isinstance(kind, Kind) else normalize_kind(kind)
        value = _to_amount(amount)
        if value is None:
            return Left({"error": "invalid_amount", "message": f"Amount {amount!r} is not a number", "id": entry_id})
        if kind is Kind.INCOME:
            category = INCOME_CATEGORY
        else:
            category = str(category or "").strip() or FALLBACK_CATEGORY
        return validate_entry(LedgerEntry(
            id=entry_id,
            date=str(date or "").strip(),
            kind=kind,
            amount=value,
            category=category,
            note=str(note or "").strip(),
        ))

    def add_entry(self, date, kind, amount, category: str = "", note: str = "") -> Either[dict, LedgerEntry]:
        result = self._make_entry(new_entry_id(), date, kind, amount, category, note)
        if result.is_left():
            return result
        entry = result.get_or_else(None)
        self._commit(replace(self.state, entries=transforms.add_entry(self.state.entries, entry)))
        self._publish(ENTRY_ADDED, self._budget_payload(entry))
        return result

    def edit_entry(self, entry_id: EntryId, date, kind, amount, category: str = "", note: str = "") -> Either[dict, LedgerEntry]:
        """Replace every field of an existing entry."""
        if not any(e.id == entry_id for e in self.state.entries):
            return Left({"error": "entry_not_found", "message": f"No entry with id {entry_id}", "id": entry_id})
        result = self._make_entry(entry_id, date, kind, amount, category, note)
        if result.is_left():
            return result
        entry = result.get_or_else(None)
        self._commit(replace(self.state, entries=transforms.update_entry(self.state.entries, entry)))
        self._publish(ENTRY_UPDATED, self._budget_payload(entry))
        return result

    def delete_entry(self, entry_id: EntryId) -> bool:
        remaining = transforms.remove_entry(self.state.entries, entry_id)
        if len(remaining) == len(self.state.entries):
            return False
        self._commit(replace(self.state, entries=remaining))
        self._publish(ENTRY_REMOVED, {"id": entry_id})
        return True

    def entries_for(self, period: str) -> Tuple[LedgerEntry, ...]:
        return filters.select(self.state.entries, filters.by_period(period))

    # ------------------------------------------------------------------
    # Import / export
    # ------------------------------------------------------------------

    def import_text(self, text: Optional[str]) -> Tuple[LedgerEntry, ...]:
        imported = codec.parse_csv(text)
        if imported:
            self._commit(replace(self.state, entries=transforms.merge_imported(self.state.entries, imported)))
            self._publish(ENTRIES_IMPORTED, {"count": len(imported)})
        logger.info("Imported %d entries", len(imported))
        return imported

    def export(self, today: dt.date) -> Tuple[str, str]:
        return codec.export_filename(today), codec.to_csv_string(self.state.entries)

    # ------------------------------------------------------------------
    # Budgets, goals, expected income
    # ------------------------------------------------------------------

    def set_budget(self, category: str, cap) -> Dict[str, float]:
        budgets = transforms.set_budget(self.state.budgets, category, cap)
        self._commit(replace(self.state, budgets=budgets))
        self._publish(BUDGET_CHANGED, {"category": category, "cap": budgets[category]})
        return budgets

    def add_category(self, name: str, cap=0) -> Either[dict, Dict[str, float]]:
        """New budget category; an existing label is left untouched."""
        name = str(name or "").strip()
        if not name:
            return Left({"error": "invalid_category", "message": "A category needs a name"})
        if name in self.state.budgets:
            return Left({"error": "category_exists", "message": f"Category {name} already exists", "category": name})
        return Right(self.set_budget(name, cap))

    def add_goal(self, name: str, target, monthly, today: dt.date) -> Either[dict, Goal]:
        name = str(name or "").strip()
        value = _to_amount(target)
        if not name or not value or value <= 0:
            return Left({"error": "invalid_goal", "message": "A goal needs a name and a positive target"})
        rate = _to_amount(monthly)
        goal = Goal(
            id=str(new_entry_id()),
            name=name,
            target=value,
            monthly=rate if rate and rate > 0 else 0.0,
            start_period=f"{today.year:04d}-{today.month:02d}",
        )
        self._commit(replace(self.state, goals=transforms.add_goal(self.state.goals, goal)))
        self._publish(GOAL_ADDED, {"id": goal.id})
        return Right(goal)

    def remove_goal(self, goal_id: str) -> bool:
        remaining = transforms.remove_goal(self.state.goals, goal_id)
        if len(remaining) == len(self.state.goals):
            return False
        self._commit(replace(self.state, goals=remaining))
        self._publish(GOAL_REMOVED, {"id": goal_id})
        return True

    def set_expected_income(self, value) -> bool:
        amount = _to_amount(value)
        if amount is None or amount < 0:
            return False
        self._commit(replace(self.state, expected_income=amount))
        return True

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def summary(self, today: dt.date) -> Dict[str, Any]:
        s = self.state
        return self.summaries.summary(today, s.entries, s.budgets, s.goals, s.expected_income)
