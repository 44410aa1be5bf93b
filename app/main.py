"""
Streamlit Frontend for Bill Splitter

A single screen:
1. Item list and participant list text areas
2. GST and service tax inputs
3. Per-item participant selection
4. Bill summary table

Every widget change reruns the script, which commits the new input to
the session and shows the freshly computed split. Input problems appear
as warnings; they never stop the summary from rendering.
"""

import streamlit as st

from bill_splitter.audit import configure_logging
from bill_splitter.config import get_settings
from bill_splitter.orchestrator import SplitSession, create_session


# Page configuration
st.set_page_config(
    page_title="Bill Splitter",
    page_icon="🧾",
    layout="wide",
)

st.markdown("""
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
    .total-line {
        font-size: 1.2em;
        font-weight: bold;
        color: #2c3e50;
    }
</style>
""", unsafe_allow_html=True)


def get_session() -> SplitSession:
    """Get or create the session for this browser tab."""
    if "split_session" not in st.session_state:
        configure_logging(get_settings().log_level)
        st.session_state.split_session = create_session()
    return st.session_state.split_session


def sync_widgets(session: SplitSession) -> None:
    """Copy the committed state into the widget keys (after start or reset)."""
    state = session.state
    st.session_state.items_text = state.items_text
    st.session_state.participants_text = state.participants_text
    st.session_state.gst_rate = str(state.gst_rate)
    st.session_state.service_tax_rate = str(state.service_tax_rate)


# -----------------------------------------------------------------------------
# Widget callbacks
# -----------------------------------------------------------------------------

def on_items_change():
    get_session().set_items_text(st.session_state.items_text)


def on_participants_change():
    get_session().set_participants_text(st.session_state.participants_text)


def on_tax_change():
    get_session().set_tax_rates(
        gst_rate=st.session_state.gst_rate,
        service_tax_rate=st.session_state.service_tax_rate,
    )


def on_assignment_change(item_index: int, key: str):
    get_session().assign(item_index, st.session_state[key])


def on_reset():
    session = get_session()
    session.reset()
    sync_widgets(session)


# -----------------------------------------------------------------------------
# Page sections
# -----------------------------------------------------------------------------

def render_inputs(session: SplitSession):
    """Render the text inputs and tax rates."""
    col1, col2, col3 = st.columns([2, 2, 1])

    with col1:
        st.text_area(
            "Enter Food List:",
            key="items_text",
            height=max(len(session.state.items_text.split("\n")), 3) * 28,
            help="One item per line: name, then price (e.g. 'rice 10.8')",
            on_change=on_items_change,
        )

    with col2:
        st.text_area(
            "Enter People List:",
            key="participants_text",
            height=max(len(session.state.participants_text.split("\n")), 3) * 28,
            help="One person per line",
            on_change=on_participants_change,
        )

    with col3:
        st.text_input("GST (%):", key="gst_rate", on_change=on_tax_change)
        st.text_input("Service Tax (%):", key="service_tax_rate", on_change=on_tax_change)
        st.button("Clear", type="primary", on_click=on_reset)


def render_issues(session: SplitSession):
    """Show input issues without blocking anything."""
    for issue in session.result.issues:
        prefix = f"Line {issue.line_number}: " if issue.line_number else ""
        if issue.severity == "warning":
            st.warning(f"{prefix}{issue.message}")
        else:
            st.info(f"{prefix}{issue.message}")


def render_assignments(session: SplitSession):
    """One multiselect per item to choose who shares it."""
    st.subheader("Select person to include:")
    result = session.result
    participants = [share.name for share in result.participants]

    if not result.items:
        st.info("Add items above to choose who shares them.")
        return

    for index, item in enumerate(result.items):
        # Fresh widget per revision so defaults follow the latest attribution
        key = f"assign_{result.revision}_{index}"
        col1, col2 = st.columns([1, 4])
        with col1:
            st.markdown(f"**{item.name}**  \n{item.price:.2f}")
        with col2:
            st.multiselect(
                f"People sharing {item.name}",
                options=participants,
                default=list(item.attributed_participants),
                key=key,
                label_visibility="collapsed",
                placeholder="Please select",
                on_change=on_assignment_change,
                args=(index, key),
            )


def render_summary(session: SplitSession):
    """Render the bill summary table."""
    st.subheader("Bill Summary:")
    result = session.result
    settings = get_settings()

    if not result.participants:
        st.info("Add people above to see who owes what.")
        return

    st.dataframe(
        result.summary_rows(),
        hide_index=True,
    )

    totals = result.totals
    st.markdown(
        f'<p class="total-line">Total: {settings.currency_symbol}{totals.total_owed:,}</p>',
        unsafe_allow_html=True,
    )
    if totals.unattributed_amount:
        st.warning(
            f"{settings.currency_symbol}{totals.unattributed_amount:,.2f} of items "
            "is not assigned to anyone and is left out of the split."
        )


def main():
    """Main application entry point."""
    session = get_session()
    if "items_text" not in st.session_state:
        sync_widgets(session)

    st.title("🧾 Bill Splitter")
    render_inputs(session)
    render_issues(session)
    st.markdown("---")
    render_assignments(session)
    st.markdown("---")
    render_summary(session)


if __name__ == "__main__":
    main()
