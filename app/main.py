import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from datetime import date

import pandas as pd
import plotly.graph_objects as go
import plotly.express as px
import streamlit as st

from kasirku.cart import EMPTY_CART, add_line, adjust_quantity, cart_total, remove_line, set_customer
from kasirku.catalog import LocalStorage, add_product, delete_product, import_products, load_products
from kasirku.checkout import pos_items
from kasirku.config import configure_logging, load_settings, make_store
from kasirku.domain import PAID, UNPAID
from kasirku.errors import KasirError
from kasirku.events import event_bus, CATALOG_IMPORTED, STOCK_REJECTED
from kasirku.export import report_filename, write_report
from kasirku.formatting import format_currency, format_long_date
from kasirku.invoices import status_totals
from kasirku.reports import bar_widths
from kasirku.services import InvoiceService, PosService, ReportService

st.set_page_config(page_title="KasirKu", layout="wide")

settings = load_settings()
configure_logging(settings.log_level)

if "store" not in st.session_state:
    st.session_state.store = make_store(settings)
store = st.session_state.store
storage = LocalStorage(settings.storage_path)

invoice_service = InvoiceService(store, settings.user_id, settings.branch_id)
pos_service = PosService(store, storage, settings.user_id, settings.branch_id)
report_service = ReportService(store, settings.user_id, settings.branch_id, settings.month_locale)

if "products" not in st.session_state:
    try:
        st.session_state.products = load_products(storage)
    except KasirError as e:
        st.error(str(e))
        st.session_state.products = ()
if "cart" not in st.session_state:
    st.session_state.cart = EMPTY_CART
if "toasts" not in st.session_state:
    st.session_state.toasts = []


def show_toasts(results):
    for toast in results:
        if toast.get("error"):
            st.error(f"**{toast['title']}** {toast['message']}")
        else:
            st.success(f"**{toast['title']}** {toast['message']}")


def queue_toasts(results):
    # survive the st.rerun() that follows a state change
    st.session_state.toasts.extend(results)


def apply_cart(result):
    if result.is_right():
        st.session_state.cart = result.get_or_else(st.session_state.cart)
    else:
        queue_toasts(event_bus.publish(STOCK_REJECTED, result.get_error()))


def invoice_table(invoices):
    return pd.DataFrame([
        {
            "Number": inv.number,
            "Customer": inv.customer,
            "Date": format_long_date(inv.date, settings.month_locale),
            "Amount": format_currency(inv.amount),
            "Status": inv.status or "-",
        }
        for inv in invoices
    ])


show_toasts(st.session_state.toasts)
st.session_state.toasts = []

st.sidebar.markdown("### 🏪 KasirKu")
st.sidebar.caption(f"User: {settings.user_id}")
st.sidebar.caption(f"Branch: {settings.branch_id or 'none'}")

menu = st.sidebar.radio("Menu", ["🧾 Invoice", "🔎 Invoice Detail", "🛒 POS", "📑 Reports"])

if menu == "🧾 Invoice":
    st.title("🧾 Invoice")
    st.caption("Manage customer invoices")

    try:
        invoices = invoice_service.list_invoices()
    except KasirError as e:
        st.error(str(e))
        invoices = ()

    totals = status_totals(invoices)
    k1, k2 = st.columns(2)
    with k1:
        st.metric("Unpaid", format_currency(totals.unpaid))
    with k2:
        st.metric("Paid", format_currency(totals.paid))

    with st.expander("➕ New invoice"):
        with st.form("invoice_form", clear_on_submit=True):
            col1, col2 = st.columns(2)
            with col1:
                number = st.text_input("Invoice number")
                customer = st.text_input("Customer")
            with col2:
                day = st.date_input("Date", value=date.today())
                amount = st.text_input("Amount (Rp)")
            submitted = st.form_submit_button("Create invoice")

        if submitted:
            try:
                invoice_service.create_invoice(number, customer, day, amount)
            except KasirError as e:
                st.error(str(e))
            else:
                queue_toasts(invoice_service.notices)
                st.rerun()

    st.subheader("📋 Invoices")
    if not invoices:
        st.info("No invoices yet")
    for inv in invoices:
        c1, c2, c3, c4 = st.columns([3, 2, 2, 2])
        with c1:
            st.markdown(f"**{inv.number}**  \n{inv.customer}")
        with c2:
            st.write(format_long_date(inv.date, settings.month_locale))
        with c3:
            st.write(format_currency(inv.amount))
        with c4:
            if inv.status == UNPAID:
                if st.button("Mark as Paid", key=f"pay_{inv.id}"):
                    try:
                        invoice_service.mark_paid(inv)
                    except KasirError as e:
                        st.error(str(e))
                    else:
                        queue_toasts(invoice_service.notices)
                        st.rerun()
            else:
                st.write(f"✅ {inv.status}" if inv.status == PAID else (inv.status or "-"))

elif menu == "🔎 Invoice Detail":
    st.title("🔎 Invoice Detail")
    try:
        invoices = invoice_service.list_invoices()
    except KasirError as e:
        st.error(str(e))
        invoices = ()

    if not invoices:
        st.info("No invoices yet")
    else:
        labels = {f"{inv.number} - {inv.customer}": inv.id for inv in invoices}
        choice = st.selectbox("Invoice", list(labels))
        try:
            invoice, transactions, items = invoice_service.invoice_detail(labels[choice])
        except KasirError as e:
            st.error(str(e))
        else:
            c1, c2, c3 = st.columns(3)
            with c1:
                st.metric("Customer", invoice.customer)
            with c2:
                st.metric("Amount", format_currency(invoice.amount))
            with c3:
                st.metric("Status", invoice.status or "-")
            st.caption(f"Invoice date: {format_long_date(invoice.date, settings.month_locale)}")

            if invoice.status == UNPAID and st.button("Mark as Paid"):
                try:
                    invoice_service.mark_paid(invoice)
                except KasirError as e:
                    st.error(str(e))
                else:
                    queue_toasts(invoice_service.notices)
                    st.rerun()

            st.subheader("Sold items")
            if items:
                for record in items:
                    st.caption(f"{record.code} • {format_long_date(record.date, settings.month_locale)}"
                               f" • {format_currency(record.total)}")
                    st.dataframe(pd.DataFrame([
                        {
                            "Item": line.product.name,
                            "Qty × Price": f"{line.quantity} × {format_currency(line.product.price)}",
                            "Subtotal": format_currency(line.subtotal),
                        }
                        for line in pos_items(record)
                    ]), width="stretch")
            else:
                st.info("No point-of-sale items linked to this invoice")

            st.subheader("Ledger entries")
            if transactions:
                st.dataframe(pd.DataFrame([
                    {"Date": t.date, "Description": t.description, "Direction": t.direction,
                     "Amount": format_currency(t.amount)}
                    for t in transactions
                ]), width="stretch")
            else:
                st.info("No ledger entries linked to this invoice")

elif menu == "🛒 POS":
    st.title("🛒 Point of Sale")
    tab_cashier, tab_catalog, tab_invoices = st.tabs(["Cashier", "Catalog", "Invoices"])
    products = st.session_state.products
    cart = st.session_state.cart

    with tab_cashier:
        col_customer, col_cart = st.columns(2)
        with col_customer:
            st.subheader("Customer")
            customer = st.text_input("Customer name", value=cart.customer, key="pos_customer")
            if customer != cart.customer:
                st.session_state.cart = cart = set_customer(cart, customer)

        with col_cart:
            st.subheader("Cart")
            if cart.is_empty:
                st.info("The cart is empty")
            for line in cart.lines:
                c1, c2, c3, c4, c5 = st.columns([4, 1, 1, 1, 1])
                with c1:
                    st.markdown(f"**{line.product.name}**  \n{format_currency(line.product.price)}")
                with c2:
                    if st.button("➖", key=f"dec_{line.product.id}", disabled=line.quantity <= 1):
                        apply_cart(adjust_quantity(cart, products, line.product.id, -1))
                        st.rerun()
                with c3:
                    st.write(line.quantity)
                with c4:
                    if st.button("➕", key=f"inc_{line.product.id}"):
                        apply_cart(adjust_quantity(cart, products, line.product.id, 1))
                        st.rerun()
                with c5:
                    if st.button("🗑", key=f"rm_{line.product.id}"):
                        st.session_state.cart = remove_line(cart, line.product.id)
                        st.rerun()

        st.subheader("Products")
        if not products:
            st.info("No products yet. Add some in the Catalog tab.")
        cols = st.columns(4)
        for idx, product in enumerate(products):
            with cols[idx % 4]:
                st.markdown(f"**{product.name}**  \n{format_currency(product.price)}  \nStock: {product.stock}")
                if st.button("Add", key=f"add_{product.id}"):
                    apply_cart(add_line(cart, product))
                    st.rerun()

        if not cart.is_empty:
            st.divider()
            st.metric("Total", format_currency(cart_total(cart)))
            if st.button("💳 Pay & create invoice", type="primary"):
                try:
                    result = pos_service.checkout(cart, products)
                except KasirError as e:
                    st.error(str(e))
                else:
                    st.session_state.products = result.products
                    st.session_state.cart = result.cart
                    # the widget keeps its own value across reruns
                    st.session_state.pop("pos_customer", None)
                    queue_toasts(pos_service.notices)
                    st.rerun()

    with tab_catalog:
        st.subheader("Add product")
        with st.form("product_form", clear_on_submit=True):
            name = st.text_input("Product name", placeholder="Kopi Susu")
            price = st.text_input("Price", placeholder="15000")
            stock = st.text_input("Stock", placeholder="100")
            if st.form_submit_button("Add product"):
                added = add_product(products, name, price, stock)
                if added.is_left():
                    st.error(added.get_error()["message"])
                else:
                    st.session_state.products = pos_service.save_catalog(added.get_or_else(products))
                    st.rerun()

        st.subheader("Import from Excel")
        st.caption("Columns: name, price, stock (nama, harga, stok also accepted)")
        upload = st.file_uploader("Excel file", type=["xlsx", "xls"])
        if upload is not None and st.button("Import"):
            try:
                updated = import_products(products, upload)
            except KasirError as e:
                st.error(str(e))
            else:
                st.session_state.products = pos_service.save_catalog(updated)
                queue_toasts(event_bus.publish(CATALOG_IMPORTED, {"count": len(updated) - len(products)}))
                st.rerun()

        st.subheader(f"Products ({len(products)})")
        for product in products:
            c1, c2 = st.columns([5, 1])
            with c1:
                st.write(f"{product.name} • {format_currency(product.price)} • Stock: {product.stock}")
            with c2:
                if st.button("🗑", key=f"del_{product.id}"):
                    st.session_state.products = pos_service.save_catalog(delete_product(products, product.id))
                    st.rerun()

    with tab_invoices:
        try:
            invoices = invoice_service.list_invoices()
        except KasirError as e:
            st.error(str(e))
            invoices = ()
        if invoices:
            st.dataframe(invoice_table(invoices), width="stretch")
        else:
            st.info("No invoices yet")

elif menu == "📑 Reports":
    st.title("📑 Reports")
    st.caption("Business financial analysis")

    col1, col2 = st.columns(2)
    with col1:
        start = st.date_input("From", value=date(2025, 1, 1))
    with col2:
        end = st.date_input("To", value=date.today())
    start, end = start.isoformat(), end.isoformat()

    try:
        transactions = report_service.fetch_transactions(start, end)
    except KasirError as e:
        st.error(str(e))
        transactions = ()

    report = report_service.build(transactions)["result"]
    k1, k2, k3 = st.columns(3)
    with k1:
        st.metric("Total Inflow", format_currency(report["inflow"]))
    with k2:
        st.metric("Total Outflow", format_currency(report["outflow"]))
    with k3:
        st.metric("Difference", format_currency(report["difference"]))

    st.subheader("📊 Monthly")
    monthly = report["monthly"]
    if monthly:
        widths = bar_widths(monthly)
        fig = go.Figure()
        fig.add_trace(go.Bar(
            y=[b.label for b in monthly], x=[w[0] for w in widths], orientation="h", name="In",
            text=[format_currency(b.inflow) for b in monthly],
        ))
        fig.add_trace(go.Bar(
            y=[b.label for b in monthly], x=[w[1] for w in widths], orientation="h", name="Out",
            text=[format_currency(b.outflow) for b in monthly],
        ))
        fig.update_layout(barmode="group", xaxis=dict(range=[0, 100], title="%"), margin=dict(t=30, b=10, l=10, r=10))
        st.plotly_chart(fig, width="stretch")
    else:
        st.info("No transactions in this period")

    st.subheader("🗂 By category")
    categories = report["categories"]
    if categories:
        fig_cat = px.bar(
            x=[c.percentage for c in categories],
            y=[c.category or "-" for c in categories],
            orientation="h",
            text=[format_currency(c.amount) for c in categories],
            labels={"x": "%", "y": "Category"},
        )
        fig_cat.update_layout(xaxis=dict(range=[0, 100]))
        st.plotly_chart(fig_cat, width="stretch")

    if transactions:
        try:
            data = write_report(transactions)
        except KasirError as e:
            st.error(str(e))
        else:
            st.download_button(
                "⬇ Export to Excel",
                data,
                file_name=report_filename(start, end),
                mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            )
    else:
        st.info("There are no transactions to export")
