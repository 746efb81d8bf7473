import json
from pathlib import Path

import pytest
from streamlit.testing.v1 import AppTest

APP = Path(__file__).resolve().parent.parent / "app" / "main.py"
PAY = "💳 Pay & create invoice"


@pytest.fixture
def app(tmp_path, monkeypatch):
    storage = tmp_path / "local.json"
    storage.write_text(json.dumps({
        "pos_products": [{"id": "p1", "name": "Kopi", "price": 15000.0, "stock": 3}],
    }), encoding="utf-8")
    monkeypatch.delenv("KASIRKU_STORE_URL", raising=False)
    monkeypatch.setenv("KASIRKU_STORAGE_PATH", str(storage))
    monkeypatch.setenv("KASIRKU_BRANCH_ID", "b1")
    monkeypatch.setenv("KASIRKU_USER_ID", "u1")

    at = AppTest.from_file(str(APP), default_timeout=30)
    at.run()
    at.sidebar.radio[0].set_value("🛒 POS").run()
    return at


def sell_one(at, customer="Sari"):
    at.button(key="add_p1").click().run()
    at.text_input(key="pos_customer").input(customer).run()
    next(b for b in at.button if b.label == PAY).click().run()


def test_checkout_clears_cart_and_customer(app):
    sell_one(app)

    assert not app.exception
    assert app.session_state.cart.is_empty
    assert app.session_state.cart.customer == ""
    assert app.text_input(key="pos_customer").value == ""
    assert app.session_state.products[0].stock == 2


def test_next_sale_needs_a_new_customer(app):
    sell_one(app)
    app.button(key="add_p1").click().run()

    assert app.session_state.cart.customer == ""
    assert len(app.session_state.cart.lines) == 1


def test_invoice_detail_lists_sold_items(app):
    sell_one(app)
    app.sidebar.radio[0].set_value("🔎 Invoice Detail").run()

    items = app.dataframe[0].value
    assert list(items["Item"]) == ["Kopi"]
    assert list(items["Qty × Price"]) == ["1 × Rp 15.000"]
    assert list(items["Subtotal"]) == ["Rp 15.000"]
