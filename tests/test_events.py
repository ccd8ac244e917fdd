from datetime import datetime

from ledger.events import (
    ENTRY_ADDED, ENTRY_REMOVED, Event, EventBus,
    check_budget_handler, register_default_handlers,
)


def test_event_creation():
    event = Event(name=ENTRY_ADDED, ts=datetime.now().isoformat(), payload={"amount": 100})
    assert event.name == ENTRY_ADDED
    assert event.payload["amount"] == 100


def test_subscribe_publish_unsubscribe():
    bus = EventBus()
    seen = []

    def handler(event: Event, payload: dict) -> dict:
        seen.append(payload)
        return {"processed": True}

    bus.subscribe(ENTRY_ADDED, handler)
    assert bus.publish(ENTRY_ADDED, {"amount": 50}) == [{"processed": True}]
    assert seen == [{"amount": 50}]

    bus.unsubscribe(ENTRY_ADDED, handler)
    assert bus.publish(ENTRY_ADDED, {"amount": 50}) == []
    bus.unsubscribe(ENTRY_REMOVED, handler)


def test_publish_without_subscribers():
    assert EventBus().publish(ENTRY_REMOVED, {}) == []


def test_check_budget_handler_alerts_only_on_overspent_expense():
    event = Event(ENTRY_ADDED, datetime.now().isoformat(), {})
    over = check_budget_handler(event, {
        "kind": "expense", "category": "Fuel", "amount": 100,
        "budget_limit": 380, "current_spent": 420,
    })
    assert "alert" in over
    assert over["over_budget"] == 40

    within = check_budget_handler(event, {
        "kind": "expense", "category": "Fuel", "amount": 100,
        "budget_limit": 380, "current_spent": 200,
    })
    assert within == {"spent": 200}

    no_cap = check_budget_handler(event, {
        "kind": "expense", "category": "Pets", "amount": 100,
        "budget_limit": 0, "current_spent": 900,
    })
    assert "alert" not in no_cap

    assert check_budget_handler(event, {"kind": "income", "current_spent": 10**6, "budget_limit": 1}) == {}


def test_register_default_handlers():
    bus = register_default_handlers(EventBus())
    results = bus.publish(ENTRY_ADDED, {
        "kind": "expense", "category": "Fuel", "budget_limit": 10, "current_spent": 20,
    })
    assert len(results) == 1
    assert "alert" in results[0]
