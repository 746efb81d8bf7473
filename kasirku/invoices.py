from dataclasses import replace
from datetime import date
from functools import reduce
from typing import Iterable, Optional, Tuple
from uuid import uuid4

from kasirku.domain import Invoice, StatusTotals, Transaction, PAID, UNPAID
from kasirku.functional import Either, Right, fail


def invoices_with_status(invoices: Iterable[Invoice], status: str) -> Tuple[Invoice, ...]:
    return tuple(filter(lambda inv: inv.status == status, invoices))


def total_amount(invoices: Iterable[Invoice]) -> float:
    return reduce(lambda acc, inv: acc + inv.amount, invoices, 0)


def status_totals(invoices: Iterable[Invoice]) -> StatusTotals:
    """Sum of amounts per payment status.

    Invoices whose status is neither Unpaid nor Paid (including a missing
    status) count towards neither sum.
    """
    invoices = tuple(invoices)
    return StatusTotals(
        unpaid=total_amount(invoices_with_status(invoices, UNPAID)),
        paid=total_amount(invoices_with_status(invoices, PAID)),
    )


def sort_invoices(invoices: Iterable[Invoice]) -> Tuple[Invoice, ...]:
    # newest first, same as the list query
    return tuple(sorted(invoices, key=lambda inv: inv.date, reverse=True))


def validate_invoice_form(
    number: str, customer: str, day, amount
) -> Either[dict, dict]:
    """Check the manual invoice form. Right carries the cleaned fields."""
    missing = [
        name
        for name, value in (("number", number), ("customer", customer), ("date", day), ("amount", amount))
        if value is None or str(value).strip() == ""
    ]
    if missing:
        return fail("missing_fields", "All fields are required", fields=missing)

    try:
        parsed_amount = float(amount)
    except (TypeError, ValueError):
        return fail("invalid_amount", f"Amount {amount!r} is not a number", amount=amount)
    if parsed_amount < 0:
        return fail("invalid_amount", "Amount cannot be negative", amount=parsed_amount)

    day = day.isoformat() if isinstance(day, date) else str(day).strip()
    try:
        date.fromisoformat(day[:10])
    except ValueError:
        return fail("invalid_date", f"Date {day!r} is not a calendar day", date=day)

    return Right({
        "number": str(number).strip(),
        "customer": str(customer).strip(),
        "date": day[:10],
        "amount": parsed_amount,
    })


def new_invoice(
    number: str,
    customer: str,
    day: str,
    amount: float,
    user_id: str = "",
    branch_id: Optional[str] = None,
    status: str = UNPAID,
) -> Invoice:
    return Invoice(
        id=str(uuid4()),
        number=number,
        customer=customer,
        date=day,
        amount=amount,
        status=status,
        user_id=user_id,
        branch_id=branch_id,
    )


def mark_paid(invoice: Invoice) -> Invoice:
    # Unpaid -> Paid only; repeating it is a no-op
    if invoice.status == PAID:
        return invoice
    return replace(invoice, status=PAID)


def invoice_transactions(
    invoice_id: str, transactions: Iterable[Transaction]
) -> Tuple[Transaction, ...]:
    linked = (t for t in transactions if t.invoice_id == invoice_id)
    return tuple(sorted(linked, key=lambda t: t.created_at or t.date, reverse=True))
