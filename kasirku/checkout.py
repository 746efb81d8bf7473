import json
import logging
import time
from datetime import date
from typing import Iterable, Optional, Tuple
from uuid import uuid4

from kasirku.cart import EMPTY_CART, cart_quantities, cart_total
from kasirku.domain import (
    Cart, CartLine, CheckoutResult, Invoice, PosRecord, Product, Transaction,
    DEBIT, PAID, SALES_CATEGORY,
)
from kasirku.functional import Either, Right, fail

logger = logging.getLogger("kasirku.checkout")


def validate_checkout(cart: Cart) -> Either[dict, Cart]:
    if cart.is_empty:
        return fail("empty_cart", "Add a product to the cart first")
    if not cart.customer.strip():
        return fail("missing_customer", "Customer name is required")
    return Right(cart)


def decrement_stock(products: Iterable[Product], cart: Cart) -> Tuple[Product, ...]:
    sold = cart_quantities(cart)
    return tuple(
        Product(id=p.id, name=p.name, price=p.price, stock=p.stock - sold[p.id])
        if p.id in sold else p
        for p in products
    )


def cart_source(cart: Cart) -> str:
    # stored on the POS record, read back by pos_items
    return json.dumps([
        {
            "id": line.product.id,
            "name": line.product.name,
            "price": line.product.price,
            "stock": line.product.stock,
            "quantity": line.quantity,
        }
        for line in cart.lines
    ])


def pos_items(record: PosRecord) -> Tuple[CartLine, ...]:
    """Read the sold lines back out of a POS record's cart source.

    A source that is not the list cart_source writes gives no lines.
    """
    try:
        return tuple(
            CartLine(
                product=Product(
                    id=str(item.get("id", "")),
                    name=str(item.get("name", "")),
                    price=float(item.get("price", 0)),
                    stock=int(item.get("stock", 0)),
                ),
                quantity=int(item["quantity"]),
            )
            for item in json.loads(record.source or "[]")
        )
    except (TypeError, ValueError, KeyError, AttributeError) as e:
        logger.warning("unreadable cart source on %s: %s", record.code, e)
        return ()


def plan_checkout(
    cart: Cart,
    products: Iterable[Product],
    user_id: str = "",
    branch_id: Optional[str] = None,
    today: Optional[str] = None,
    millis: Optional[int] = None,
) -> Either[dict, CheckoutResult]:
    """Build every record a checkout produces, without touching the store.

    The invoice is always created and is already Paid. The POS record and
    the Debit ledger entry exist only when a branch is known.
    """
    checked = validate_checkout(cart)
    if checked.is_left():
        return checked

    total = cart_total(cart)
    today = today or date.today().isoformat()
    millis = millis if millis is not None else int(time.time() * 1000)

    invoice = Invoice(
        id=str(uuid4()),
        number=f"INV-{millis}",
        customer=cart.customer.strip(),
        date=today,
        amount=total,
        status=PAID,
        user_id=user_id,
        branch_id=branch_id,
    )

    pos_record = None
    transaction = None
    if branch_id:
        code = f"POS-{millis}"
        pos_record = PosRecord(
            id=str(uuid4()),
            branch_id=branch_id,
            code=code,
            date=today,
            total=total,
            source=cart_source(cart),
        )
        transaction = Transaction(
            id=str(uuid4()),
            date=today,
            description=f"Penjualan POS - {code}",
            category=SALES_CATEGORY,
            direction=DEBIT,
            amount=total,
            branch_id=branch_id,
            user_id=user_id,
        )

    return Right(CheckoutResult(
        invoice=invoice,
        products=decrement_stock(products, cart),
        cart=EMPTY_CART,
        pos_record=pos_record,
        transaction=transaction,
    ))
