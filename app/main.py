"""
Streamlit Frontend for Hisaab

The screen a pharmacy or distributor clerk uses all day: log in, find
an invoice, edit its rows and payments, save, print.

DESIGN PRINCIPLES:
1. Totals update as soon as a cell changes
2. Nothing is written until "Save" is pressed
3. Errors are shown in plain language and never lose the open invoice

The UI only calls the services; pricing, ownership checks and storage
all live behind InvoiceService and AuthSession.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

import streamlit as st
import structlog
from pydantic import ValidationError

from hisaab.auth import AuthSession, InvalidCredentialsError
from hisaab.config import get_settings, validate_all_settings
from hisaab.invoices import (
    InvoiceNotFoundError,
    InvoiceService,
    InvoiceValidationError,
)
from hisaab.logging_config import configure_logging
from hisaab.models.invoice import Invoice, InvoiceStatus
from hisaab.orchestrator import AppComponents, create_app_components
from hisaab.services.storage import StorageError


logger = structlog.get_logger(__name__)


# Page configuration
st.set_page_config(
    page_title="Hisaab Kitaab",
    page_icon="🧾",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .stButton>button {
        width: 100%;
    }
    .paid-badge {
        color: #155724;
        background-color: #d4edda;
        padding: 2px 10px;
        border-radius: 10px;
    }
    .pending-badge {
        color: #856404;
        background-color: #fff3cd;
        padding: 2px 10px;
        border-radius: 10px;
    }
</style>
""", unsafe_allow_html=True)


@st.cache_resource
def get_components() -> AppComponents:
    """Get or create application components (cached)."""
    configure_logging()
    try:
        return create_app_components(use_storage=True)
    except StorageError as e:
        st.error(f"Failed to open local storage: {e}")
        return create_app_components(use_storage=False)


def _cell(value: Optional[Decimal]) -> str:
    """Text shown in an input cell; empty when unset."""
    return "" if value is None else format(value, "f")


def _money(value: Decimal) -> str:
    return f"Rs {value:,.2f}"


def get_auth_session(components: AppComponents) -> AuthSession:
    if "auth" not in st.session_state:
        st.session_state.auth = AuthSession(components.auth_service)
    return st.session_state.auth


def open_editor(service: InvoiceService, invoice_id: Optional[str]) -> None:
    user = st.session_state.auth.require_user()
    st.session_state.invoice = service.open_invoice(invoice_id, user)
    st.session_state.page = "editor"


def close_editor() -> None:
    st.session_state.invoice = None
    st.session_state.page = "dashboard"


def main():
    """Main application entry point."""
    components = get_components()
    auth = get_auth_session(components)

    if "page" not in st.session_state:
        st.session_state.page = "dashboard"
    if "invoice" not in st.session_state:
        st.session_state.invoice = None

    if not auth.is_authenticated:
        render_login_page(auth)
        return

    st.sidebar.title("🧾 Hisaab Kitaab")
    st.sidebar.markdown(f"Logged in as **{auth.current_user.username}**")
    if st.sidebar.button("🚪 Log out"):
        auth.logout()
        close_editor()
        st.rerun()
    render_settings_panel()

    try:
        if st.session_state.page == "editor" and st.session_state.invoice is not None:
            render_editor_page(components)
        else:
            render_dashboard_page(components.invoice_service)
    except StorageError as e:
        logger.error("storage_failure", error=str(e))
        st.error(f"Could not read or write the data files: {e}")


def render_settings_panel():
    """Show the active configuration in the sidebar."""
    settings = get_settings()
    status = validate_all_settings()

    with st.sidebar.expander("⚙️ Settings"):
        for name, label in [("storage", "Storage"), ("export", "PDF export"), ("app", "Application")]:
            if status.get(name, False):
                st.success(f"✅ {label}")
            else:
                st.error(f"❌ {label} - {status.get(f'{name}_error', 'Not configured')}")

        if status.get("app") and status.get("storage"):
            app_settings = settings.app
            st.markdown(f"**Environment:** {app_settings.app_environment}")
            st.markdown(f"**Debug mode:** {'on' if app_settings.debug_mode else 'off'}")
            st.markdown(f"**Log level:** {app_settings.log_level}")
            st.markdown(f"**Data folder:** `{settings.storage.data_dir}`")
        st.caption("Configure with a `.env` file. See `.env.example` for the variables.")


def render_login_page(auth: AuthSession):
    """Render the login form. An unknown username is registered on first login."""
    st.title("🧾 Hisaab Kitaab")
    st.markdown("Log in to manage your invoices. New here? Pick a username and password.")

    with st.form("login"):
        username = st.text_input("Username")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Log in", type="primary")

    if submitted:
        try:
            auth.login(username, password)
        except InvalidCredentialsError:
            st.error("Invalid username or password")
        except StorageError as e:
            st.error(f"Could not reach the user store: {e}")
        else:
            st.rerun()


def render_dashboard_page(service: InvoiceService):
    """Render the invoice list with search, status toggle, open and delete."""
    user = st.session_state.auth.require_user()

    col1, col2 = st.columns([4, 1])
    with col1:
        st.title("📊 Invoices")
    with col2:
        if st.button("➕ New Invoice", type="primary"):
            open_editor(service, None)
            st.rerun()

    search = st.text_input("🔍 Search by name", placeholder="e.g. City Pharmacy")
    invoices = service.list_invoices(user, search=search)

    if not invoices:
        st.info("No invoices yet. Use 'New Invoice' to create your first one.")
        return

    header = st.columns([3, 2, 2, 2, 2, 1, 1])
    for col, label in zip(header, ["Name", "Date", "Grand Total", "Balance", "Status", "", ""]):
        col.markdown(f"**{label}**")

    for invoice in invoices:
        cols = st.columns([3, 2, 2, 2, 2, 1, 1])
        cols[0].write(invoice.name)
        cols[1].write(invoice.invoice_date.strftime("%d %b %Y"))
        cols[2].write(_money(invoice.grand_total))
        cols[3].write(_money(invoice.balance))

        badge = "paid-badge" if invoice.status == InvoiceStatus.PAID else "pending-badge"
        if cols[4].button(invoice.status.value, key=f"toggle_{invoice.id}",
                          help="Click to mark as Paid / Pending"):
            try:
                service.toggle_status(invoice.id, user)
            except InvoiceNotFoundError:
                st.error("Invoice not found")
            else:
                st.rerun()
        cols[4].markdown(f'<span class="{badge}">{invoice.status.value}</span>',
                         unsafe_allow_html=True)

        if cols[5].button("✏️", key=f"open_{invoice.id}", help="Open"):
            try:
                open_editor(service, invoice.id)
            except InvoiceNotFoundError:
                st.error("Invoice not found")
            else:
                st.rerun()

        if cols[6].button("🗑️", key=f"delete_{invoice.id}", help="Delete"):
            try:
                service.delete_invoice(invoice.id, user)
            except InvoiceNotFoundError:
                st.error("Invoice not found")
            else:
                st.rerun()


def render_editor_page(components: AppComponents):
    """Render the invoice editor."""
    service = components.invoice_service
    renderer = components.pdf_renderer
    invoice: Invoice = st.session_state.invoice
    user = st.session_state.auth.require_user()

    if st.button("⬅️ Back to invoices"):
        close_editor()
        st.rerun()

    st.title("🧾 Invoice")

    # Metadata
    col1, col2, col3 = st.columns([3, 2, 2])
    with col1:
        invoice.name = st.text_input(
            "Invoice Name *",
            value=invoice.name,
            key=f"name_{invoice.id}",
            help="Shown on the dashboard and used as the PDF file name",
        )
    with col2:
        invoice.invoice_date = st.date_input(
            "Date",
            value=invoice.invoice_date or date.today(),
            key=f"date_{invoice.id}",
        )
    with col3:
        statuses = list(InvoiceStatus)
        invoice.status = st.selectbox(
            "Status",
            options=statuses,
            index=statuses.index(invoice.status),
            format_func=lambda s: s.value,
            key=f"status_{invoice.id}",
        )

    st.markdown("---")
    render_items(service, invoice)
    st.markdown("---")
    render_payments(service, invoice)
    st.markdown("---")

    # Totals
    col1, col2, col3 = st.columns(3)
    col1.metric("Grand Total", _money(invoice.grand_total))
    col2.metric("Total Paid", _money(invoice.total_paid))
    col3.metric("Balance Due", _money(invoice.balance))

    st.markdown("---")

    col1, col2 = st.columns(2)
    with col1:
        if st.button("💾 Save Invoice", type="primary"):
            try:
                st.session_state.invoice = service.save_invoice(invoice, user)
            except InvoiceValidationError as e:
                st.error(str(e))
            except InvoiceNotFoundError:
                st.error("Invoice not found")
            except StorageError as e:
                st.error(f"Failed to save: {e}")
            else:
                st.success("Invoice saved")

    with col2:
        if invoice.name.strip():
            st.download_button(
                "📄 Download PDF",
                data=renderer.render(invoice),
                file_name=renderer.filename_for(invoice),
                mime="application/pdf",
            )
        else:
            st.button("📄 Download PDF", disabled=True,
                      help="Give the invoice a name first")


def render_items(service: InvoiceService, invoice: Invoice):
    """Render the item grid. Each edited cell reprices its row and the totals."""
    st.subheader("Items")

    widths = [4, 1, 1.5, 1.5, 1.5, 1.5, 1.5, 0.6, 0.6]
    header = st.columns(widths)
    labels = ["Item Name", "Qty", "Rate", "Disc %", "T.P", "Total/Unit", "Amount", "", ""]
    for col, label in zip(header, labels):
        col.markdown(f"**{label}**")

    action = None
    for index, item in enumerate(invoice.items):
        cols = st.columns(widths)
        entered = {
            "item_name": cols[0].text_input(
                "Item Name", value=item.item_name, key=f"item_name_{item.id}",
                label_visibility="collapsed",
            ),
            "qty": cols[1].text_input(
                "Qty", value=_cell(item.qty), key=f"qty_{item.id}",
                label_visibility="collapsed",
            ),
            "rate": cols[2].text_input(
                "Rate", value=_cell(item.rate), key=f"rate_{item.id}",
                label_visibility="collapsed",
            ),
            "discount_percent": cols[3].text_input(
                "Disc %", value=_cell(item.discount_percent), key=f"disc_{item.id}",
                label_visibility="collapsed",
            ),
        }
        current = {
            "item_name": item.item_name,
            "qty": _cell(item.qty),
            "rate": _cell(item.rate),
            "discount_percent": _cell(item.discount_percent),
        }
        changes = {k: v for k, v in entered.items() if v.strip() != current[k]}
        if changes:
            try:
                service.update_item(invoice, index, **changes)
            except ValidationError:
                cols[0].error("Enter numbers only")

        item = invoice.items[index]
        cols[4].write(f"{item.tp:,.2f}")
        cols[5].write(f"{item.total_price_per_piece:,.2f}")
        cols[6].write(f"{item.row_total:,.2f}")

        if cols[7].button("⧉", key=f"dup_{item.id}", help="Duplicate row"):
            action = (service.duplicate_item, index)
        if cols[8].button("✖", key=f"del_{item.id}", help="Remove row",
                          disabled=len(invoice.items) == 1):
            action = (service.remove_item, index)

    if st.button("➕ Add Item"):
        service.add_item(invoice)
        st.rerun()

    if action:
        operation, index = action
        operation(invoice, index)
        st.rerun()


def render_payments(service: InvoiceService, invoice: Invoice):
    """Render the payment history."""
    st.subheader("Paid History")

    removed = None
    for index, payment in enumerate(invoice.paid_amounts):
        col1, col2, col3 = st.columns([5, 2, 0.6])
        narration = col1.text_input(
            "Narration", value=payment.narration, key=f"narration_{payment.id}",
            placeholder="e.g. Cash, Cheque 1123", label_visibility="collapsed",
        )
        amount = col2.text_input(
            "Amount", value=_cell(payment.amount), key=f"amount_{payment.id}",
            label_visibility="collapsed",
        )

        changes = {}
        if narration.strip() != payment.narration:
            changes["narration"] = narration
        if amount.strip() != _cell(payment.amount):
            changes["amount"] = amount
        if changes:
            try:
                service.update_paid_amount(invoice, index, **changes)
            except ValidationError:
                col2.error("Enter a number")

        if col3.button("✖", key=f"del_paid_{payment.id}", help="Remove payment"):
            removed = index

    if st.button("➕ Add Payment"):
        service.add_paid_amount(invoice)
        st.rerun()

    if removed is not None:
        service.remove_paid_amount(invoice, removed)
        st.rerun()


if __name__ == "__main__":
    main()
