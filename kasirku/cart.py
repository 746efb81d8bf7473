import logging
from dataclasses import replace
from functools import reduce
from typing import Iterable

from kasirku.domain import Cart, CartLine, Product
from kasirku.functional import Either, Maybe, Nothing, Right, Some, fail

logger = logging.getLogger("kasirku.cart")

EMPTY_CART = Cart()


def find_line(cart: Cart, product_id: str) -> Maybe[CartLine]:
    for line in cart.lines:
        if line.product.id == product_id:
            return Some(line)
    return Nothing()


def find_product(products: Iterable[Product], product_id: str) -> Maybe[Product]:
    for product in products:
        if product.id == product_id:
            return Some(product)
    return Nothing()


def _insufficient(product: Product, requested: int) -> Either[dict, Cart]:
    logger.info("rejected %s x%d, stock is %d", product.name, requested, product.stock)
    return fail(
        "insufficient_stock",
        f"Only {product.stock} {product.name} in stock",
        product_id=product.id,
        stock=product.stock,
        requested=requested,
    )


def _with_quantity(cart: Cart, product_id: str, quantity: int) -> Cart:
    return replace(cart, lines=tuple(
        replace(line, quantity=quantity) if line.product.id == product_id else line
        for line in cart.lines
    ))


def add_line(cart: Cart, product: Product) -> Either[dict, Cart]:
    """Put one more unit of product in the cart.

    A new line starts at quantity 1 and needs stock >= 1. An existing line is
    incremented only while the new quantity stays within stock. Rejections
    leave the cart as it was.
    """
    existing = find_line(cart, product.id)
    if existing.is_some():
        quantity = existing.get_or_else(None).quantity + 1
        if quantity > product.stock:
            return _insufficient(product, quantity)
        return Right(_with_quantity(cart, product.id, quantity))

    if product.stock < 1:
        logger.info("rejected %s, out of stock", product.name)
        return fail(
            "out_of_stock",
            f"{product.name} is out of stock",
            product_id=product.id,
            stock=product.stock,
        )
    return Right(replace(cart, lines=cart.lines + (CartLine(product=product, quantity=1),)))


def adjust_quantity(
    cart: Cart, products: Iterable[Product], product_id: str, delta: int
) -> Either[dict, Cart]:
    """Apply a signed delta to one line, checked against the catalog stock.

    A result above stock is rejected. A result of zero or below leaves the
    line untouched: removal goes through remove_line.
    """
    product = find_product(products, product_id)
    line = find_line(cart, product_id)
    if product.is_none() or line.is_none():
        return Right(cart)

    product = product.get_or_else(None)
    quantity = line.get_or_else(None).quantity + delta
    if quantity > product.stock:
        return _insufficient(product, quantity)
    if quantity <= 0:
        return Right(cart)
    return Right(_with_quantity(cart, product_id, quantity))


def remove_line(cart: Cart, product_id: str) -> Cart:
    return replace(cart, lines=tuple(l for l in cart.lines if l.product.id != product_id))


def set_customer(cart: Cart, customer: str) -> Cart:
    return replace(cart, customer=customer)


def cart_total(cart: Cart) -> float:
    return reduce(lambda acc, line: acc + line.subtotal, cart.lines, 0)


def cart_quantities(cart: Cart) -> dict[str, int]:
    return {line.product.id: line.quantity for line in cart.lines}
