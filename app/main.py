"""
Streamlit Frontend for the Finance Tracker

Three pages:
1. Dashboard - totals, daily cash-flow chart, quick add, latest entries
2. Transactions - add form and the full history grouped by month
3. AI Studio - edit an image with a text instruction

This is view glue only. All state lives in the TransactionStore built by
create_app_components(); everything shown is recomputed from it on each run.
"""

import atexit
from datetime import date
from decimal import Decimal

import streamlit as st
from pydantic import ValidationError

from finance_tracker.async_runner import AsyncRunner
from finance_tracker.audit import configure_logging
from finance_tracker.config import get_settings, validate_all_settings
from finance_tracker.models.transaction import TransactionKind
from finance_tracker.orchestrator import (
    AppComponents,
    ImageEditStatus,
    create_app_components,
)
from finance_tracker.services.image import to_data_url


st.set_page_config(
    page_title="Finance Tracker",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)


@st.cache_resource
def get_runner() -> AsyncRunner:
    """One event loop for the whole process, shared by every session."""
    runner = AsyncRunner()
    atexit.register(runner.close)
    return runner


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    return get_runner().run(coro)


@st.cache_resource
def get_components() -> AppComponents:
    """Build and open the application components once per process."""
    configure_logging(debug=get_settings().app.debug_mode)
    components = create_app_components()
    run_async(components.store.open())
    # Registered after the runner's close, so it runs first at exit.
    atexit.register(lambda: run_async(components.store.close()))
    return components


def format_currency(value: Decimal) -> str:
    code = get_settings().app.currency_code
    return f"{code} {value:,.2f}"


def main():
    """Main application entry point."""
    components = get_components()

    st.sidebar.title("💰 Finance Tracker")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["📊 Dashboard", "🧾 Transactions", "🪄 AI Studio", "⚙️ Settings"],
        index=0,
    )

    if page == "📊 Dashboard":
        render_dashboard_page(components)
    elif page == "🧾 Transactions":
        render_transactions_page(components)
    elif page == "🪄 AI Studio":
        render_ai_page(components)
    elif page == "⚙️ Settings":
        render_settings_page()


def render_transaction_form(components: AppComponents, key: str):
    """Form for adding a transaction."""
    with st.form(key=f"transaction_form_{key}", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            description = st.text_input("Description")
            amount = st.number_input("Amount", min_value=0.0, step=0.01, format="%.2f")
        with col2:
            kind = st.radio(
                "Type",
                options=list(TransactionKind),
                format_func=lambda k: k.value.title(),
                horizontal=True,
            )
            occurred_on = st.date_input("Date", value=date.today())
        category = st.text_input("Category", placeholder="General")

        submitted = st.form_submit_button("Add")

    if submitted:
        if not description.strip():
            st.error("Please enter a description.")
            return
        try:
            run_async(components.ledger_flow.add_transaction(
                description=description,
                amount=Decimal(str(amount)),
                kind=kind,
                occurred_on=occurred_on,
                category=category,
            ))
        except ValidationError as e:
            st.error(f"Could not add transaction: {e.errors()[0]['msg']}")
            return
        st.success("Transaction added.")
        st.rerun()


def render_transaction_rows(components: AppComponents, transactions, key: str):
    """One row per transaction with a delete button."""
    for transaction in transactions:
        col1, col2, col3, col4 = st.columns([4, 2, 2, 1])
        icon = "🟢" if transaction.is_income else "🔴"
        sign = "+" if transaction.is_income else "-"
        col1.markdown(f"{icon} **{transaction.description}**  \n{transaction.category}")
        col2.write(transaction.occurred_on.strftime("%d/%m"))
        col3.write(f"{sign} {format_currency(transaction.amount)}")
        if col4.button("🗑️", key=f"delete_{key}_{transaction.id}"):
            run_async(components.ledger_flow.delete_transaction(transaction.id))
            st.rerun()


def render_dashboard_page(components: AppComponents):
    """Render totals, the cash-flow chart and the latest entries."""
    st.title("📊 Dashboard")

    snapshot = components.ledger_flow.dashboard()

    col1, col2, col3 = st.columns(3)
    col1.metric("Balance", format_currency(snapshot.summary.balance))
    col2.metric("Income", format_currency(snapshot.summary.total_income))
    col3.metric("Expenses", format_currency(snapshot.summary.total_expense))

    st.markdown("### Cash Flow (Recent Days)")
    if snapshot.daily:
        st.bar_chart(
            {
                "date": [stat.label for stat in snapshot.daily],
                "Income": [float(stat.income) for stat in snapshot.daily],
                "Expense": [float(stat.expense) for stat in snapshot.daily],
            },
            x="date",
            y=["Income", "Expense"],
            color=["#10b981", "#ef4444"],
        )
    else:
        st.info("No data to chart yet.")

    st.markdown("### Quick Add")
    render_transaction_form(components, key="dashboard")

    st.markdown("### Latest Transactions")
    if snapshot.recent:
        render_transaction_rows(components, snapshot.recent, key="recent")
    else:
        st.info("No transactions yet. Add your income and expenses to see them here.")


def render_transactions_page(components: AppComponents):
    """Render the add form and the full history grouped by month."""
    st.title("🧾 Transactions")
    render_transaction_form(components, key="transactions")

    st.markdown("---")
    st.markdown("## Full History")

    history = components.ledger_flow.history()
    if not history:
        st.info("No transactions yet. Add your income and expenses to see the history.")
        return

    for month, transactions in history.items():
        st.markdown(f"#### {month}  ·  {len(transactions)} entries")
        render_transaction_rows(components, transactions, key="history")


def render_ai_page(components: AppComponents):
    """Render the image editor."""
    st.title("🪄 AI Studio")
    st.markdown("Upload an image and describe how it should be changed.")

    app_settings = get_settings().app
    uploaded = st.file_uploader(
        "Image",
        type=app_settings.supported_formats_list,
    )
    instruction = st.text_input(
        "Instruction",
        placeholder="e.g. Add a retro filter",
    )

    if uploaded is None:
        return

    image_bytes = uploaded.getvalue()
    if len(image_bytes) > app_settings.max_upload_size_bytes:
        st.error(f"File too large. Maximum size is {app_settings.max_upload_size_mb} MB.")
        return

    col1, col2 = st.columns(2)
    col1.image(image_bytes, caption="Original")

    if st.button("Generate", disabled=not instruction.strip()):
        with st.spinner("Editing image..."):
            outcome = run_async(components.image_edit_flow.run(
                image_data=to_data_url(image_bytes, uploaded.type),
                instruction=instruction,
                mime_type=uploaded.type,
            ))

        if outcome.status == ImageEditStatus.SUCCESS:
            col2.image(outcome.image.image_bytes, caption="Edited")
            col2.download_button(
                "Download",
                data=outcome.image.image_bytes,
                file_name=f"edited-image.{outcome.image.mime_type.split('/')[-1]}",
                mime=outcome.image.mime_type,
            )
        elif outcome.status == ImageEditStatus.NO_IMAGE:
            st.warning(outcome.message)
        elif outcome.status == ImageEditStatus.CONFIGURATION_ERROR:
            st.error(f"⚙️ {outcome.message}")
        else:
            st.error(outcome.message)


def render_settings_page():
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Connection Status")

    status = validate_all_settings()

    services = [
        ("Gemini (AI Studio)", "gemini"),
        ("Local Storage", "storage"),
        ("Application", "app"),
    ]

    for name, key in services:
        if status.get(key, False):
            st.success(f"✅ {name} - Configured")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")

    st.markdown("---")
    st.markdown("### Configuration")
    st.markdown(
        "To configure the application, create a `.env` file with your settings. "
        "See `.env.example` for the available variables."
    )


if __name__ == "__main__":
    main()
