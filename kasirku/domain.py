from dataclasses import dataclass
from typing import Optional

UNPAID = "Unpaid"
PAID = "Paid"

DEBIT = "Debit"    # inflow
CREDIT = "Credit"  # outflow

SALES_CATEGORY = "Penjualan"


@dataclass(frozen=True)
class Invoice:
    id: str
    number: str               # client-assigned, unique per user
    customer: str
    date: str                 # calendar day, "2025-01-05"
    amount: float
    status: Optional[str]     # Unpaid / Paid, anything else is unknown
    user_id: str = ""
    branch_id: Optional[str] = None
    created_at: str = ""
    updated_at: str = ""


@dataclass(frozen=True)
class Transaction:
    id: str
    date: str
    description: str
    category: str
    direction: str            # Debit / Credit
    amount: float             # never negative, direction carries the sign
    invoice_id: Optional[str] = None
    branch_id: Optional[str] = None
    user_id: str = ""
    created_at: str = ""

    @property
    def inflow(self) -> float:
        return self.amount if self.direction == DEBIT else 0

    @property
    def outflow(self) -> float:
        return self.amount if self.direction == CREDIT else 0


@dataclass(frozen=True)
class Product:
    id: str
    name: str
    price: float
    stock: int


@dataclass(frozen=True)
class CartLine:
    product: Product
    quantity: int

    @property
    def subtotal(self) -> float:
        return self.product.price * self.quantity


@dataclass(frozen=True)
class Cart:
    lines: tuple[CartLine, ...] = ()
    customer: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.lines


@dataclass(frozen=True)
class PosRecord:
    id: str
    branch_id: str
    code: str                 # "POS-<millis>"
    date: str
    total: float
    source: str               # JSON dump of the sold cart lines
    invoice_id: Optional[str] = None


# Derived, rebuilt on every render

@dataclass(frozen=True)
class StatusTotals:
    unpaid: float
    paid: float


@dataclass(frozen=True)
class MonthlyBucket:
    label: str
    inflow: float
    outflow: float


@dataclass(frozen=True)
class CategoryBucket:
    category: str
    amount: float
    percentage: float


@dataclass(frozen=True)
class ExportRow:
    no: object                # int, "" on summary rows
    label: str
    description: str
    debit: object             # amount or ""
    credit: object
    balance: object


@dataclass(frozen=True)
class CheckoutResult:
    invoice: Invoice
    products: tuple[Product, ...]
    cart: Cart
    pos_record: Optional[PosRecord] = None
    transaction: Optional[Transaction] = None
