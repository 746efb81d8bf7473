from kasirku.domain import MonthlyBucket, Transaction, CREDIT, DEBIT
from kasirku.reports import bar_widths, category_buckets, ledger_totals, monthly_buckets


def tx(id, day, direction, amount, category="Umum"):
    return Transaction(id=id, date=day, description=id, category=category, direction=direction, amount=amount)


def make_sample():
    return (
        tx("t1", "2025-04-02", DEBIT, 500, "Penjualan"),
        tx("t2", "2025-03-15", CREDIT, 200, "Bahan"),
        tx("t3", "2025-04-20", CREDIT, 100, "Bahan"),
        tx("t4", "2025-02-01", DEBIT, 300, "Penjualan"),
        tx("t5", "2025-01-09", CREDIT, 50, "Listrik"),
    )


def test_ledger_totals():
    assert ledger_totals(make_sample()) == (800, 350, 450)


def test_ledger_totals_empty():
    assert ledger_totals(()) == (0, 0, 0)


def test_monthly_buckets_keep_first_three_in_input_order():
    buckets = monthly_buckets(make_sample())

    assert buckets == (
        MonthlyBucket("Apr", 500, 100),
        MonthlyBucket("Mar", 0, 200),
        MonthlyBucket("Feb", 300, 0),
    )


def test_monthly_buckets_follow_input_order_not_calendar():
    trans = (tx("a", "2025-01-01", DEBIT, 1), tx("b", "2025-06-01", DEBIT, 2))
    assert [b.label for b in monthly_buckets(trans)] == ["Jan", "Jun"]


def test_monthly_buckets_localized_labels():
    trans = (tx("a", "2025-05-01", DEBIT, 1), tx("b", "2025-08-01", DEBIT, 1))
    assert [b.label for b in monthly_buckets(trans, locale="id")] == ["Mei", "Agu"]
    assert [b.label for b in monthly_buckets(trans, locale="en")] == ["May", "Aug"]


def test_monthly_buckets_same_month_other_year_shares_label():
    trans = (tx("a", "2026-01-03", DEBIT, 10), tx("b", "2025-01-03", CREDIT, 4))
    assert monthly_buckets(trans) == (MonthlyBucket("Jan", 10, 4),)


def test_category_buckets_sum_and_percentage():
    buckets = {b.category: b for b in category_buckets(make_sample())}

    assert buckets["Penjualan"].amount == 800
    assert buckets["Penjualan"].percentage == 100
    assert buckets["Bahan"].amount == 300
    assert buckets["Bahan"].percentage == 37.5
    assert buckets["Listrik"].percentage == 6.25


def test_category_buckets_first_seen_order():
    assert [b.category for b in category_buckets(make_sample())] == ["Penjualan", "Bahan", "Listrik"]


def test_category_percentages_in_range_and_max_is_100():
    trans = tuple(tx(str(i), "2025-01-01", DEBIT, (i * 37) % 11, f"c{i % 4}") for i in range(40))
    buckets = category_buckets(trans)
    largest = max(b.amount for b in buckets)

    assert all(0 <= b.percentage <= 100 for b in buckets)
    assert all(b.percentage == 100 for b in buckets if b.amount == largest)


def test_category_buckets_all_zero():
    trans = (tx("a", "2025-01-01", DEBIT, 0, "x"), tx("b", "2025-01-01", CREDIT, 0, "y"))
    assert [b.percentage for b in category_buckets(trans)] == [100.0, 100.0]


def test_category_buckets_empty():
    assert category_buckets(()) == ()


def test_bar_widths():
    buckets = (MonthlyBucket("Jan", 200, 50), MonthlyBucket("Feb", 100, 0))
    assert bar_widths(buckets) == ((100.0, 25.0), (50.0, 0.0))


def test_bar_widths_zero_safe():
    assert bar_widths((MonthlyBucket("Jan", 0, 0),)) == ((0.0, 0.0),)
