class KasirError(Exception):
    """Base class for every condition reported to the user."""


class ValidationError(KasirError):
    """Missing or malformed form input, empty cart, missing customer name."""


class BackendError(KasirError):
    """A round-trip to the data store failed. Nothing was applied locally."""

    def __init__(self, message: str, collection: str = ""):
        super().__init__(message)
        self.collection = collection


class StockError(KasirError):
    """Requested quantity is above the product's recorded stock."""


class CatalogImportError(KasirError):
    """The uploaded spreadsheet could not be read. No product was imported."""


class SchemaMismatch(KasirError):
    """A fetched record lacks a field the record type requires."""

    def __init__(self, collection: str, missing: tuple[str, ...], record_id=None):
        self.collection = collection
        self.missing = missing
        self.record_id = record_id
        super().__init__(
            f"{collection} record {record_id!r} is missing required field(s): {', '.join(missing)}"
        )


def error_from_left(error: dict) -> KasirError:
    """Turn a Left payload from the pure layer into the matching exception."""
    kind = error.get("error", "")
    message = error.get("message", kind)
    if kind in ("insufficient_stock", "out_of_stock"):
        return StockError(message)
    return ValidationError(message)
