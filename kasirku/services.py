import logging
from dataclasses import replace
from typing import Any, Callable, Dict, Iterable, Optional, Sequence, Tuple

from kasirku import records
from kasirku.catalog import LocalStorage, save_products
from kasirku.checkout import plan_checkout
from kasirku.domain import Cart, CheckoutResult, Invoice, PosRecord, Product, Transaction, PAID
from kasirku.errors import BackendError, error_from_left
from kasirku.events import (
    EventBus, event_bus, CHECKOUT_COMPLETED, INVOICE_CREATED, INVOICE_PAID,
)
from kasirku.invoices import (
    invoice_transactions, mark_paid, new_invoice, sort_invoices, validate_invoice_form,
)
from kasirku.reports import category_buckets, ledger_totals, monthly_buckets

logger = logging.getLogger("kasirku.services")


class StoreService:
    """Shared wiring: the data store, the acting user and branch, the event bus.

    Toasts returned by event handlers pile up in `notices` for the screen
    to show after its next rerun.
    """

    def __init__(self, store, user_id: str, branch_id: Optional[str] = None, bus: EventBus = event_bus):
        self.store = store
        self.user_id = user_id
        self.branch_id = branch_id
        self.bus = bus
        self.notices: list[dict] = []

    def _notify(self, name: str, payload: dict) -> None:
        self.notices.extend(self.bus.publish(name, payload))


class InvoiceService(StoreService):
    """Invoice list, manual entry, status change and detail lookups."""

    def list_invoices(self) -> Tuple[Invoice, ...]:
        rows = self.store.select(records.INVOICES, eq={"user_id": self.user_id}, order=("tanggal", False))
        return sort_invoices(records.invoices_from_rows(rows))

    def create_invoice(self, number: str, customer: str, day, amount) -> Invoice:
        checked = validate_invoice_form(number, customer, day, amount)
        if checked.is_left():
            raise error_from_left(checked.get_error())

        form = checked.get_or_else(None)
        draft = new_invoice(
            form["number"], form["customer"], form["date"], form["amount"],
            user_id=self.user_id, branch_id=self.branch_id,
        )
        invoice = records.invoice_from_row(
            self.store.insert(records.INVOICES, records.invoice_to_row(draft))
        )
        logger.info("created invoice %s", invoice.number)
        self._notify(INVOICE_CREATED, {"number": invoice.number, "amount": invoice.amount})
        return invoice

    def mark_paid(self, invoice: Invoice) -> Invoice:
        # the update always targets Paid, so repeating it is harmless
        target = mark_paid(invoice)
        row = self.store.update(
            records.INVOICES, invoice.id, {"status": records.STATUS_TO_WIRE[PAID]}
        )
        updated = records.invoice_from_row({**records.invoice_to_row(target), "id": invoice.id, **row})
        self._notify(INVOICE_PAID, {"number": updated.number, "amount": updated.amount})
        return updated

    def invoice_detail(self, invoice_id: str) -> Tuple[Invoice, Tuple[Transaction, ...], Tuple[PosRecord, ...]]:
        rows = self.store.select(records.INVOICES, eq={"id": invoice_id, "user_id": self.user_id})
        if not rows:
            raise BackendError(f"Invoice {invoice_id} could not be loaded", records.INVOICES)
        invoice = records.invoice_from_row(rows[0])

        transactions = invoice_transactions(invoice_id, records.transactions_from_rows(self.store.select(
            records.TRANSACTIONS,
            eq={"invoice_id": invoice_id, "user_id": self.user_id},
            order=("created_at", False),
        )))
        items = records.pos_records_from_rows(self.store.select(
            records.POS_RECORDS, eq={"invoice_id": invoice_id}, order=("created_at", True),
        ))
        return invoice, transactions, items


class PosService(StoreService):
    """Checkout and catalog persistence for the point-of-sale screen."""

    def __init__(self, store, storage: LocalStorage, user_id: str,
                 branch_id: Optional[str] = None, bus: EventBus = event_bus):
        super().__init__(store, user_id, branch_id, bus)
        self.storage = storage

    def save_catalog(self, products: Iterable[Product]) -> Tuple[Product, ...]:
        products = tuple(products)
        save_products(self.storage, products)
        return products

    def checkout(self, cart: Cart, products: Iterable[Product], today: Optional[str] = None,
                 millis: Optional[int] = None) -> CheckoutResult:
        """Create the invoice (and, with a branch, the POS record and ledger entry).

        The catalog is written only after every insert succeeded. A failing
        insert raises BackendError and the caller keeps its cart and catalog.
        """
        planned = plan_checkout(cart, products, self.user_id, self.branch_id, today, millis)
        if planned.is_left():
            raise error_from_left(planned.get_error())
        result = planned.get_or_else(None)

        invoice = records.invoice_from_row(
            self.store.insert(records.INVOICES, records.invoice_to_row(result.invoice))
        )

        pos_record = None
        transaction = None
        if result.pos_record is not None:
            pos_record = records.pos_record_from_row(self.store.insert(
                records.POS_RECORDS,
                records.pos_record_to_row(replace(result.pos_record, invoice_id=invoice.id)),
            ))
            transaction = records.transaction_from_row(self.store.insert(
                records.TRANSACTIONS,
                records.transaction_to_row(replace(result.transaction, invoice_id=invoice.id)),
            ))
        else:
            logger.warning("no branch for user %s, %s not recorded in the ledger", self.user_id, invoice.number)

        self.save_catalog(result.products)
        logger.info("checkout %s total %s", invoice.number, invoice.amount)
        self._notify(CHECKOUT_COMPLETED, {
            "number": invoice.number,
            "total": invoice.amount,
            "recorded_in_ledger": transaction is not None,
        })
        return replace(result, invoice=invoice, pos_record=pos_record, transaction=transaction)


def totals_aggregator(trans: Sequence[Transaction], acc: dict) -> Dict[str, Any]:
    inflow, outflow, difference = ledger_totals(trans)
    return {"inflow": inflow, "outflow": outflow, "difference": difference}


def monthly_aggregator(trans: Sequence[Transaction], acc: dict) -> Dict[str, Any]:
    return {"monthly": monthly_buckets(trans, locale=acc.get("locale", "id"))}


def category_aggregator(trans: Sequence[Transaction], acc: dict) -> Dict[str, Any]:
    return {"categories": category_buckets(trans)}


DEFAULT_AGGREGATORS = (totals_aggregator, monthly_aggregator, category_aggregator)


class ReportService:
    """Fetches the ledger for a period and runs the report aggregators over it."""

    def __init__(self, store, user_id: str, branch_id: Optional[str] = None, locale: str = "id",
                 aggregators: Sequence[Callable[..., Dict[str, Any]]] = DEFAULT_AGGREGATORS):
        self.store = store
        self.user_id = user_id
        self.branch_id = branch_id
        self.locale = locale
        self.aggregators = aggregators

    def fetch_transactions(self, start: str, end: str) -> Tuple[Transaction, ...]:
        # own rows of the branch plus rows recorded before a branch existed
        rows = self.store.select(
            records.TRANSACTIONS,
            eq={"user_id": self.user_id},
            gte={"tanggal": start},
            lte={"tanggal": end},
            branch_scope=self.branch_id,
            order=("tanggal", False),
        )
        return records.transactions_from_rows(rows)

    def build(self, trans: Iterable[Transaction]) -> Dict[str, Any]:
        trans = tuple(trans)
        report = {"count": len(trans), "steps": [], "result": {}}
        acc: Dict[str, Any] = {"locale": self.locale}
        for agg in self.aggregators:
            out = agg(trans, acc)
            report["steps"].append({"aggregator": getattr(agg, "__name__", str(agg)), "output": out})
            acc.update(out)
        acc.pop("locale")
        report["result"] = acc
        return report
