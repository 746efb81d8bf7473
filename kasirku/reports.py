from typing import Iterable, Tuple

from kasirku.domain import CategoryBucket, MonthlyBucket, Transaction
from kasirku.formatting import month_label

MONTHLY_CHART_LIMIT = 3


def ledger_totals(trans: Iterable[Transaction]) -> Tuple[float, float, float]:
    """(total inflow, total outflow, inflow - outflow)"""
    inflow = 0
    outflow = 0
    for t in trans:
        inflow += t.inflow
        outflow += t.outflow
    return inflow, outflow, inflow - outflow


def monthly_buckets(
    trans: Iterable[Transaction], limit: int = MONTHLY_CHART_LIMIT, locale: str = "id"
) -> Tuple[MonthlyBucket, ...]:
    """Inflow/outflow per month label, first `limit` labels in input order.

    Grouping is by label only, so the same month of different years shares
    a bucket. Input arrives newest first from the store, which makes the
    kept buckets the most recent ones.
    """
    sums: dict[str, list] = {}
    for t in trans:
        label = month_label(t.date, locale)
        bucket = sums.setdefault(label, [0, 0])
        bucket[0] += t.inflow
        bucket[1] += t.outflow

    return tuple(
        MonthlyBucket(label=label, inflow=inflow, outflow=outflow)
        for label, (inflow, outflow) in list(sums.items())[: max(0, limit)]
    )


def category_buckets(trans: Iterable[Transaction]) -> Tuple[CategoryBucket, ...]:
    """Summed amount per category with a width relative to the largest one.

    When every category sums to zero they all count as the largest.
    """
    sums: dict[str, float] = {}
    for t in trans:
        sums[t.category] = sums.get(t.category, 0) + t.amount

    largest = max(sums.values(), default=0)
    return tuple(
        CategoryBucket(
            category=category,
            amount=amount,
            percentage=(amount / largest * 100) if largest > 0 else 100.0,
        )
        for category, amount in sums.items()
    )


def bar_widths(buckets: Iterable[MonthlyBucket]) -> Tuple[Tuple[float, float], ...]:
    """(inflow %, outflow %) per bucket, against the largest bar in the chart."""
    buckets = tuple(buckets)
    largest = max((max(b.inflow, b.outflow) for b in buckets), default=0)
    if largest <= 0:
        return tuple((0.0, 0.0) for _ in buckets)
    return tuple((b.inflow / largest * 100, b.outflow / largest * 100) for b in buckets)
