import logging
from datetime import datetime
from typing import Callable, Dict, List, NamedTuple

from kasirku.formatting import format_currency

__all__ = [
    'event_bus', 'Event', 'EventBus',
    'INVOICE_CREATED', 'INVOICE_PAID', 'CHECKOUT_COMPLETED', 'STOCK_REJECTED', 'CATALOG_IMPORTED',
]

logger = logging.getLogger("kasirku.events")


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
        handlers = self._subscribers.get(name, [])
        if not handlers:
            return []

        event = Event(name=name, ts=datetime.now().isoformat(), payload=payload)
        logger.debug("publish %s to %d handler(s)", name, len(handlers))
        return [handler(event, payload) for handler in handlers]

    def unsubscribe(self, name: str, handler: Handler) -> None:
        if handler in self._subscribers.get(name, []):
            self._subscribers[name].remove(handler)


INVOICE_CREATED = "INVOICE_CREATED"
INVOICE_PAID = "INVOICE_PAID"
CHECKOUT_COMPLETED = "CHECKOUT_COMPLETED"
STOCK_REJECTED = "STOCK_REJECTED"
CATALOG_IMPORTED = "CATALOG_IMPORTED"

event_bus = EventBus()


# Handlers are pure: they turn a payload into a toast {"title", "message"}

def invoice_created_toast(event: Event, payload: dict) -> dict:
    return {"title": "Invoice created", "message": f"Invoice {payload.get('number', '')} was created"}


def invoice_paid_toast(event: Event, payload: dict) -> dict:
    return {
        "title": "Status updated",
        "message": f"Invoice {payload.get('number', '')} is now Paid",
    }


def checkout_toast(event: Event, payload: dict) -> dict:
    message = f"Invoice {payload.get('number', '')} - Total: {format_currency(payload.get('total', 0))}"
    if not payload.get("recorded_in_ledger", True):
        message += " (no branch, not recorded in the ledger)"
    return {"title": "Checkout complete", "message": message}


def stock_rejected_toast(event: Event, payload: dict) -> dict:
    return {"title": "Not enough stock", "message": payload.get("message", ""), "error": True}


def catalog_imported_toast(event: Event, payload: dict) -> dict:
    return {"title": "Import complete", "message": f"{payload.get('count', 0)} products imported"}


def register_default_handlers(bus: EventBus = event_bus) -> EventBus:
    bus.subscribe(INVOICE_CREATED, invoice_created_toast)
    bus.subscribe(INVOICE_PAID, invoice_paid_toast)
    bus.subscribe(CHECKOUT_COMPLETED, checkout_toast)
    bus.subscribe(STOCK_REJECTED, stock_rejected_toast)
    bus.subscribe(CATALOG_IMPORTED, catalog_imported_toast)
    return bus


register_default_handlers()
