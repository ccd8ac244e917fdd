from datetime import datetime
from typing import Callable, Dict, List, NamedTuple

from ledger.domain import Kind
from ledger.functional import check_budget

__all__ = [
    'Event', 'EventBus', 'register_default_handlers',
    'ENTRY_ADDED', 'ENTRY_UPDATED', 'ENTRY_REMOVED', 'ENTRIES_IMPORTED',
    'BUDGET_CHANGED', 'GOAL_ADDED', 'GOAL_REMOVED', 'DATA_RESET',
]


class Event(NamedTuple):
    name: str
    ts: str
    payload: dict


Handler = Callable[[Event, dict], dict]


class EventBus:
    def __init__(self):
        self._subscribers: Dict[str, List[Handler]] = {}

    def subscribe(self, name: str, handler: Handler) -> None:
        self._subscribers.setdefault(name, []).append(handler)

    def publish(self, name: str, payload: dict) -> List[dict]:
        if name not in self._subscribers:
            return []

        event = Event(
            name=name,
            ts=datetime.now().isoformat(),
            payload=payload
        )

        results = []
        for handler in self._subscribers[name]:
            results.append(handler(event, payload))
        return results

    def unsubscribe(self, name: str, handler: Handler) -> None:
        if handler in self._subscribers.get(name, []):
            self._subscribers[name].remove(handler)


ENTRY_ADDED = "ENTRY_ADDED"
ENTRY_UPDATED = "ENTRY_UPDATED"
ENTRY_REMOVED = "ENTRY_REMOVED"
ENTRIES_IMPORTED = "ENTRIES_IMPORTED"
BUDGET_CHANGED = "BUDGET_CHANGED"
GOAL_ADDED = "GOAL_ADDED"
GOAL_REMOVED = "GOAL_REMOVED"
DATA_RESET = "DATA_RESET"


def check_budget_handler(event: Event, payload: dict) -> dict:
    """Alert when an expense leaves its category above the monthly cap.

    payload: kind, category, amount, budget_limit, current_spent (including this entry)
    """
    if payload.get("kind") != Kind.EXPENSE.value:
        return {}

    category = payload.get("category", "")
    spent = payload.get("current_spent", 0)
    result = check_budget(category, payload.get("budget_limit", 0), spent)
    if result.is_left():
        details = result.get_error()
        return {
            "alert": f"Budget exceeded for category {category}: {spent:,.0f} / {details['limit']:,.0f}",
            **details,
        }
    return {"spent": spent}


def register_default_handlers(bus: EventBus) -> EventBus:
    bus.subscribe(ENTRY_ADDED, check_budget_handler)
    bus.subscribe(ENTRY_UPDATED, check_budget_handler)
    return bus
