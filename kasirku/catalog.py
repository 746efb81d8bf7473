import json
import logging
import time
from pathlib import Path
from typing import Any, BinaryIO, Iterable, Optional, Tuple, Union

import pandas as pd

from kasirku.domain import Product
from kasirku.errors import CatalogImportError
from kasirku.functional import Either, Right, fail

logger = logging.getLogger("kasirku.catalog")

CATALOG_KEY = "pos_products"

# canonical field -> accepted spreadsheet headers, compared case-insensitively
COLUMN_ALIASES = {
    "name": ("nama", "name"),
    "price": ("harga", "price"),
    "stock": ("stok", "stock"),
}


class LocalStorage:
    """Small JSON key-value file, the desktop stand-in for browser storage."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            return json.load(f)

    def get(self, key: str, default=None):
        return self._read().get(key, default)

    def set(self, key: str, value) -> None:
        data = self._read()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)


def load_products(storage: LocalStorage) -> Tuple[Product, ...]:
    try:
        return tuple(Product(**p) for p in storage.get(CATALOG_KEY, []))
    except (ValueError, TypeError, AttributeError) as e:
        logger.error("catalog in %s is unreadable: %s", storage.path, e)
        raise CatalogImportError(f"The saved product catalog in {storage.path} is unreadable") from e


def save_products(storage: LocalStorage, products: Iterable[Product]) -> None:
    products = tuple(products)
    # an empty catalog is never written back
    if not products:
        return
    storage.set(CATALOG_KEY, [
        {"id": p.id, "name": p.name, "price": p.price, "stock": p.stock} for p in products
    ])


def _millis() -> int:
    return int(time.time() * 1000)


def add_product(
    products: Tuple[Product, ...], name: str, price, stock, product_id: Optional[str] = None
) -> Either[dict, Tuple[Product, ...]]:
    if any(v is None or str(v).strip() == "" for v in (name, price, stock)):
        return fail("missing_fields", "Please fill in every product field")
    try:
        parsed_price = float(price)
        parsed_stock = int(float(stock))
    except (TypeError, ValueError):
        return fail("invalid_number", "Price and stock must be numbers", price=price, stock=stock)
    if parsed_price < 0 or parsed_stock < 0:
        return fail("invalid_number", "Price and stock cannot be negative", price=price, stock=stock)

    product = Product(
        id=product_id or str(_millis()),
        name=str(name).strip(),
        price=parsed_price,
        stock=parsed_stock,
    )
    return Right(products + (product,))


def delete_product(products: Tuple[Product, ...], product_id: str) -> Tuple[Product, ...]:
    return tuple(p for p in products if p.id != product_id)


def resolve_columns(headers: Iterable[Any]) -> dict[str, Optional[str]]:
    by_lower = {}
    for header in headers:
        by_lower.setdefault(str(header).strip().lower(), header)
    return {
        field: next((by_lower[a] for a in aliases if a in by_lower), None)
        for field, aliases in COLUMN_ALIASES.items()
    }


def _blank(value) -> bool:
    return value is None or pd.isna(value) or str(value).strip() == ""


def _cell(row: dict, column: Optional[str]):
    return None if column is None else row.get(column)


def products_from_frame(frame: pd.DataFrame, millis: Optional[int] = None) -> Tuple[Product, ...]:
    columns = resolve_columns(frame.columns)
    millis = millis if millis is not None else _millis()

    products = []
    for index, row in enumerate(frame.to_dict(orient="records")):
        name = _cell(row, columns["name"])
        price = _cell(row, columns["price"])
        stock = _cell(row, columns["stock"])
        try:
            product = Product(
                id=f"imported-{millis}-{index}",
                name="" if _blank(name) else str(name).strip(),
                price=0.0 if _blank(price) else float(price),
                stock=0 if _blank(stock) else int(float(stock)),
            )
        except (TypeError, ValueError) as e:
            raise CatalogImportError(f"Row {index + 2} has an invalid price or stock") from e
        if product.price < 0 or product.stock < 0:
            raise CatalogImportError(f"Row {index + 2} has a negative price or stock")
        products.append(product)
    return tuple(products)


def read_catalog_sheet(source: Union[str, Path, BinaryIO]) -> pd.DataFrame:
    try:
        return pd.read_excel(source, sheet_name=0, dtype=object)
    except Exception as e:
        logger.error("could not read catalog spreadsheet: %s", e)
        raise CatalogImportError("Could not read the Excel file") from e


def import_products(
    products: Tuple[Product, ...], source: Union[str, Path, BinaryIO]
) -> Tuple[Product, ...]:
    """Append every row of the first sheet to the catalog, or nothing at all."""
    imported = products_from_frame(read_catalog_sheet(source))
    logger.info("imported %d products", len(imported))
    return products + imported
