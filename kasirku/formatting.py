from datetime import date

MONTH_NAMES = {
    "id": ("Januari", "Februari", "Maret", "April", "Mei", "Juni", "Juli",
           "Agustus", "September", "Oktober", "November", "Desember"),
    "en": ("January", "February", "March", "April", "May", "June", "July",
           "August", "September", "October", "November", "December"),
}

SHORT_MONTH_NAMES = {
    "id": ("Jan", "Feb", "Mar", "Apr", "Mei", "Jun",
           "Jul", "Agu", "Sep", "Okt", "Nov", "Des"),
    "en": ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
           "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"),
}


def format_currency(value) -> str:
    """Rupiah without decimals, dot as thousands separator: Rp 15.000"""
    amount = round(float(value or 0))
    sign = "-" if amount < 0 else ""
    return f"{sign}Rp {abs(amount):,}".replace(",", ".")


def parse_day(value) -> date:
    # backend dates may carry a time part ("2025-01-05T00:00:00")
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def month_label(value, locale: str = "id") -> str:
    names = SHORT_MONTH_NAMES.get(locale, SHORT_MONTH_NAMES["id"])
    return names[parse_day(value).month - 1]


def format_long_date(value, locale: str = "id") -> str:
    day = parse_day(value)
    names = MONTH_NAMES.get(locale, MONTH_NAMES["id"])
    if locale == "en":
        return f"{names[day.month - 1]} {day.day}, {day.year}"
    return f"{day.day} {names[day.month - 1]} {day.year}"
