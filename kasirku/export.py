import io
import logging
from typing import Iterable, Tuple, Union

import pandas as pd

from kasirku.domain import ExportRow, Transaction
from kasirku.errors import ValidationError
from kasirku.reports import ledger_totals

logger = logging.getLogger("kasirku.export")

SHEET_NAME = "Report"
COLUMNS = ["No", "Invoice/Date", "Description", "Debit", "Credit", "Balance"]


def report_filename(start: str, end: str) -> str:
    return f"Report_{start}_{end}.xlsx"


def sort_chronologically(trans: Iterable[Transaction]) -> Tuple[Transaction, ...]:
    # sorted() is stable, same-day rows keep their relative order
    return tuple(sorted(trans, key=lambda t: t.date[:10]))


def row_label(t: Transaction) -> str:
    if t.invoice_id:
        return f"{t.invoice_id[:8]}... / {t.date}"
    return t.date


def running_balance_rows(trans: Iterable[Transaction]) -> Tuple[ExportRow, ...]:
    rows = []
    balance = 0
    for no, t in enumerate(sort_chronologically(trans), start=1):
        balance += t.inflow - t.outflow
        rows.append(ExportRow(
            no=no,
            label=row_label(t),
            description=t.description,
            debit=t.inflow or "",
            credit=t.outflow or "",
            balance=balance,
        ))
    return tuple(rows)


def summary_rows(trans: Iterable[Transaction]) -> Tuple[ExportRow, ...]:
    inflow, outflow, difference = ledger_totals(trans)
    return (
        ExportRow("", "", "", "", "", ""),
        ExportRow("", "SUMMARY", "", "", "", ""),
        ExportRow("", "", "Total Inflow", inflow, "", ""),
        ExportRow("", "", "Total Outflow", "", outflow, ""),
        ExportRow("", "", "Final Balance", "", "", difference),
    )


def build_report_rows(trans: Iterable[Transaction]) -> Tuple[ExportRow, ...]:
    trans = tuple(trans)
    return running_balance_rows(trans) + summary_rows(trans)


def report_frame(rows: Iterable[ExportRow]) -> pd.DataFrame:
    return pd.DataFrame(
        [[r.no, r.label, r.description, r.debit, r.credit, r.balance] for r in rows],
        columns=COLUMNS,
    )


def write_report(
    trans: Iterable[Transaction], target: Union[str, io.BytesIO, None] = None
) -> Union[str, bytes]:
    """Write the running-balance sheet to target.

    Returns the path when target is a path, otherwise the workbook bytes
    (ready for a download button).
    """
    trans = tuple(trans)
    if not trans:
        raise ValidationError("There are no transactions to export")

    frame = report_frame(build_report_rows(trans))
    buffer = target if target is not None else io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        frame.to_excel(writer, sheet_name=SHEET_NAME, index=False)
    logger.info("exported %d transactions", len(trans))

    if isinstance(buffer, io.BytesIO):
        return buffer.getvalue()
    return buffer
