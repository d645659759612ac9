"""
Streamlit Frontend for Transaction Tracker

One page: balance at the top, the entry form, then every
transaction (most recent first) with Edit and Delete buttons.

DESIGN PRINCIPLES:
1. The page holds no ledger logic - it only renders
   TransactionManager.state and forwards clicks
2. One error message at a time, always visible above the form
3. Edit mode is obvious: the Add button becomes Update + Cancel
"""

import asyncio
import html

import streamlit as st

from tracker.config import get_settings, validate_all_settings
from tracker.manager import TransactionManager, create_manager
from tracker.models.transaction import FormMode, LedgerState, TransactionType


# Page configuration
st.set_page_config(
    page_title="Transaction Manager",
    page_icon="💰",
    layout="centered",
)

# Custom CSS for the transaction cards
st.markdown("""
<style>
    .stButton>button {
        width: 100%;
    }
    .txn-income {
        color: #16a34a;
        font-weight: 600;
    }
    .txn-expense {
        color: #dc2626;
        font-weight: 600;
    }
    .txn-date {
        color: #6b7280;
        font-size: 0.85em;
    }
</style>
""", unsafe_allow_html=True)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def _bump_form_version(state: LedgerState) -> None:
    # New widget keys make Streamlit re-read the form values from state
    st.session_state.form_version = st.session_state.get("form_version", 0) + 1


def get_manager() -> TransactionManager:
    """Get or create this session's manager, loading the ledger once."""
    if "manager" not in st.session_state:
        manager = create_manager(use_storage=True)
        manager.subscribe(_bump_form_version)
        run_async(manager.refresh())
        st.session_state.manager = manager
    return st.session_state.manager


def format_amount(amount) -> str:
    symbol = get_settings().app.currency_symbol
    return f"{symbol}{amount:,.2f}"


def render_form(manager: TransactionManager):
    """Render the add/update form."""
    state = manager.state
    version = st.session_state.get("form_version", 0)
    editing = state.form.mode == FormMode.EDITING

    amount = st.text_input(
        "Amount",
        value=state.form.amount,
        placeholder="Amount",
        key=f"amount_{version}",
    )
    description = st.text_input(
        "Description",
        value=state.form.description,
        placeholder="Description",
        key=f"description_{version}",
    )
    types = list(TransactionType)
    transaction_type = st.selectbox(
        "Type",
        options=types,
        index=types.index(state.form.type),
        format_func=lambda t: t.value,
        key=f"type_{version}",
    )

    if editing:
        col1, col2 = st.columns(2)
        with col1:
            if st.button("Update", type="primary"):
                run_async(manager.update(
                    state.form.editing_id,
                    amount,
                    description,
                    transaction_type,
                ))
                st.rerun()
        with col2:
            if st.button("Cancel"):
                manager.cancel_edit()
                st.rerun()
    else:
        if st.button("Add", type="primary"):
            run_async(manager.add(amount, description, transaction_type))
            st.rerun()


def render_transactions(manager: TransactionManager):
    """Render the transaction list."""
    transactions = manager.state.transactions
    if not transactions:
        st.info("No transactions yet. Add your first one above.")
        return

    for transaction in transactions:
        with st.container(border=True):
            col1, col2, col3 = st.columns([4, 1, 1])
            css_class = (
                "txn-income"
                if transaction.type == TransactionType.INCOME
                else "txn-expense"
            )
            with col1:
                st.markdown(f"""
                <p><strong>{html.escape(transaction.description)}</strong></p>
                <p class="{css_class}">{transaction.type.value}: {format_amount(transaction.amount)}</p>
                <p class="txn-date">{transaction.date.astimezone().strftime('%d %B %Y, %H:%M')}</p>
                """, unsafe_allow_html=True)
            with col2:
                if st.button("Edit", key=f"edit_{transaction.id}"):
                    manager.begin_edit(transaction.id)
                    st.rerun()
            with col3:
                if st.button("Delete", key=f"delete_{transaction.id}"):
                    run_async(manager.delete(transaction.id))
                    st.rerun()


def main():
    """Main application entry point."""
    manager = get_manager()
    state = manager.state

    st.title("Transaction Manager")
    st.subheader(f"Balance: {format_amount(state.balance)}")

    if state.error:
        st.error(state.error.message)

    render_form(manager)

    st.markdown("---")
    render_transactions(manager)

    with st.sidebar:
        st.markdown("### Storage")
        status = validate_all_settings()
        if status.get("google_sheets", False):
            st.success("✅ Google Sheets - Configured")
        else:
            st.warning(
                "Google Sheets is not configured; transactions are kept "
                "in memory for this session only."
            )


if __name__ == "__main__":
    main()
