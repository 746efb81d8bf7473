"""Mapping between backend rows and the record types in kasirku.domain.

The backend is addressed by its own collection and column names. Every
fetched row goes through one of the *_from_row functions, which raise
SchemaMismatch when a required column is absent or null.
"""
from typing import Any, Iterable, Optional, Tuple

from kasirku.domain import (
    Invoice, PosRecord, Transaction, CREDIT, DEBIT, PAID, UNPAID,
)
from kasirku.errors import SchemaMismatch

INVOICES = "invoice"
TRANSACTIONS = "transaksi"
POS_RECORDS = "pos_transaksi"

INVOICE_REQUIRED = ("id", "nomor_invoice", "pelanggan", "tanggal", "nominal")
TRANSACTION_REQUIRED = ("id", "tanggal", "jenis", "nominal")
POS_REQUIRED = ("id", "kode_pos", "tanggal", "total")

# wire value -> domain value; domain values are accepted as well
STATUS_FROM_WIRE = {"Belum Dibayar": UNPAID, "Lunas": PAID, UNPAID: UNPAID, PAID: PAID}
STATUS_TO_WIRE = {UNPAID: "Belum Dibayar", PAID: "Lunas"}
DIRECTION_FROM_WIRE = {"Debet": DEBIT, "Kredit": CREDIT, DEBIT: DEBIT, CREDIT: CREDIT}
DIRECTION_TO_WIRE = {DEBIT: "Debet", CREDIT: "Kredit"}


def require(collection: str, row: dict, fields: Iterable[str]) -> None:
    missing = tuple(f for f in fields if row.get(f) is None)
    if missing:
        raise SchemaMismatch(collection, missing, row.get("id"))


def _optional(row: dict, key: str) -> Optional[str]:
    value = row.get(key)
    return None if value is None else str(value)


def _amount(collection: str, row: dict, key: str) -> float:
    try:
        return float(row[key])
    except (TypeError, ValueError):
        raise SchemaMismatch(collection, (key,), row.get("id"))


def invoice_from_row(row: dict) -> Invoice:
    require(INVOICES, row, INVOICE_REQUIRED)
    status = row.get("status")
    return Invoice(
        id=str(row["id"]),
        number=str(row["nomor_invoice"]),
        customer=str(row["pelanggan"]),
        date=str(row["tanggal"])[:10],
        amount=_amount(INVOICES, row, "nominal"),
        status=STATUS_FROM_WIRE.get(status, status),
        user_id=str(row.get("user_id") or ""),
        branch_id=_optional(row, "branch_id"),
        created_at=str(row.get("created_at") or ""),
        updated_at=str(row.get("updated_at") or ""),
    )


def invoice_to_row(invoice: Invoice) -> dict[str, Any]:
    # id, created_at and updated_at are assigned by the backend
    return {
        "user_id": invoice.user_id or None,
        "branch_id": invoice.branch_id,
        "nomor_invoice": invoice.number,
        "pelanggan": invoice.customer,
        "tanggal": invoice.date,
        "nominal": invoice.amount,
        "status": STATUS_TO_WIRE.get(invoice.status, invoice.status),
    }


def transaction_from_row(row: dict) -> Transaction:
    require(TRANSACTIONS, row, TRANSACTION_REQUIRED)
    kind = row["jenis"]
    return Transaction(
        id=str(row["id"]),
        date=str(row["tanggal"])[:10],
        description=str(row.get("keterangan") or ""),
        category=str(row.get("kategori") or ""),
        direction=DIRECTION_FROM_WIRE.get(kind, kind),
        amount=_amount(TRANSACTIONS, row, "nominal"),
        invoice_id=_optional(row, "invoice_id"),
        branch_id=_optional(row, "branch_id"),
        user_id=str(row.get("user_id") or ""),
        created_at=str(row.get("created_at") or ""),
    )


def transaction_to_row(t: Transaction) -> dict[str, Any]:
    return {
        "user_id": t.user_id or None,
        "branch_id": t.branch_id,
        "invoice_id": t.invoice_id,
        "tanggal": t.date,
        "keterangan": t.description,
        "kategori": t.category,
        "jenis": DIRECTION_TO_WIRE.get(t.direction, t.direction),
        "nominal": t.amount,
    }


def pos_record_from_row(row: dict) -> PosRecord:
    require(POS_RECORDS, row, POS_REQUIRED)
    return PosRecord(
        id=str(row["id"]),
        branch_id=str(row.get("branch_id") or ""),
        code=str(row["kode_pos"]),
        date=str(row["tanggal"])[:10],
        total=_amount(POS_RECORDS, row, "total"),
        source=str(row.get("sumber") or "[]"),
        invoice_id=_optional(row, "invoice_id"),
    )


def pos_record_to_row(record: PosRecord) -> dict[str, Any]:
    return {
        "branch_id": record.branch_id,
        "invoice_id": record.invoice_id,
        "kode_pos": record.code,
        "tanggal": record.date,
        "total": record.total,
        "sumber": record.source,
    }


def invoices_from_rows(rows: Iterable[dict]) -> Tuple[Invoice, ...]:
    return tuple(invoice_from_row(r) for r in rows)


def transactions_from_rows(rows: Iterable[dict]) -> Tuple[Transaction, ...]:
    return tuple(transaction_from_row(r) for r in rows)


def pos_records_from_rows(rows: Iterable[dict]) -> Tuple[PosRecord, ...]:
    return tuple(pos_record_from_row(r) for r in rows)
