from datetime import datetime

from kasirku.events import (
    Event, EventBus, event_bus, register_default_handlers,
    CATALOG_IMPORTED, CHECKOUT_COMPLETED, INVOICE_CREATED, INVOICE_PAID, STOCK_REJECTED,
    checkout_toast, stock_rejected_toast,
)


def make_event(name, payload):
    return Event(name=name, ts=datetime.now().isoformat(), payload=payload)


def test_event_bus_subscribe_and_publish():
    bus = EventBus()
    seen = []

    def handler(event: Event, payload: dict) -> dict:
        seen.append(event.name)
        return {"processed": True}

    bus.subscribe(INVOICE_CREATED, handler)
    results = bus.publish(INVOICE_CREATED, {"number": "INV-1"})

    assert results == [{"processed": True}]
    assert seen == [INVOICE_CREATED]


def test_publish_without_subscribers():
    assert EventBus().publish("NOBODY", {}) == []


def test_unsubscribe():
    bus = EventBus()

    def handler(event, payload):
        return {}

    bus.subscribe(INVOICE_PAID, handler)
    bus.unsubscribe(INVOICE_PAID, handler)
    bus.unsubscribe(INVOICE_PAID, handler)
    assert bus.publish(INVOICE_PAID, {}) == []


def test_default_handlers_registered_on_module_bus():
    for name in (INVOICE_CREATED, INVOICE_PAID, CHECKOUT_COMPLETED, STOCK_REJECTED, CATALOG_IMPORTED):
        assert len(event_bus.publish(name, {})) >= 1


def test_checkout_toast_formats_total():
    payload = {"number": "INV-5", "total": 45000, "recorded_in_ledger": True}
    toast = checkout_toast(make_event(CHECKOUT_COMPLETED, payload), payload)
    assert toast["message"] == "Invoice INV-5 - Total: Rp 45.000"


def test_checkout_toast_mentions_missing_branch():
    payload = {"number": "INV-5", "total": 1, "recorded_in_ledger": False}
    assert "ledger" in checkout_toast(make_event(CHECKOUT_COMPLETED, payload), payload)["message"]


def test_stock_rejected_toast_is_pure():
    payload = {"error": "insufficient_stock", "message": "Only 1 Es Teh in stock"}
    first = stock_rejected_toast(make_event(STOCK_REJECTED, payload), payload)
    second = stock_rejected_toast(make_event(STOCK_REJECTED, payload), payload)

    assert first == second
    assert first["error"] is True
    assert payload == {"error": "insufficient_stock", "message": "Only 1 Es Teh in stock"}


def test_register_default_handlers_on_fresh_bus():
    bus = register_default_handlers(EventBus())
    assert bus.publish(CATALOG_IMPORTED, {"count": 3}) == [
        {"title": "Import complete", "message": "3 products imported"}
    ]
