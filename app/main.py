"""
Streamlit Frontend for Budget Tracker

This is the screen people use to plan their month and log spending.

DESIGN PRINCIPLES:
1. Simple, clear interface
2. Figures always recomputed from what is stored
3. Clear error messages in simple language
4. Nothing is saved until the user presses Save

The UI never does arithmetic of its own: every number shown comes from
the dashboard or savings view returned by the flows.
"""

import asyncio
from datetime import date, datetime

import streamlit as st

from budget_tracker.config import get_settings, validate_all_settings
from budget_tracker.engine import format_currency
from budget_tracker.export import ExportFormat
from budget_tracker.models import SessionContext
from budget_tracker.orchestrator import (
    AppComponents,
    BudgetFlow,
    BudgetNotFoundError,
    ExpenseFlow,
    ExpenseNotFoundError,
    ExportFlow,
    InsightsFlow,
    InvalidInputError,
    create_app_components,
)


# Page configuration
st.set_page_config(
    page_title="Budget Tracker",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Custom CSS for better UX
st.markdown("""
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
    .success-box {
        padding: 20px;
        background-color: #d4edda;
        border-radius: 10px;
        border-left: 5px solid #28a745;
        margin: 10px 0;
    }
    .warning-box {
        padding: 20px;
        background-color: #fff3cd;
        border-radius: 10px;
        border-left: 5px solid #ffc107;
        margin: 10px 0;
    }
    .info-box {
        padding: 20px;
        background-color: #cce5ff;
        border-radius: 10px;
        border-left: 5px solid #004085;
        margin: 10px 0;
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


@st.cache_resource
def get_components() -> AppComponents:
    """Get or create application components (cached)."""
    try:
        return create_app_components(use_storage=True)
    except Exception as e:
        st.error(f"Failed to initialize: {e}")
        return create_app_components(use_storage=False)


def money(amount: float) -> str:
    return format_currency(amount, get_settings().app.currency_symbol)


def current_session() -> SessionContext:
    """The signed-in user's session, with a fresh correlation id per action."""
    session = SessionContext.next_for(
        st.session_state.get("session"), st.session_state.user_id
    )
    st.session_state.session = session
    return session


def show_setup_prompt():
    st.markdown("""
    <div class="info-box">
        <h4>📋 No budget yet</h4>
        <p>Set up your monthly income and savings goal on the
        <strong>Financial Setup</strong> page first.</p>
    </div>
    """, unsafe_allow_html=True)


def show_rejected(message: str):
    st.markdown(f"""
    <div class="warning-box">
        <h4>⚠️ Not saved</h4>
        <p>{message.replace(chr(10), '<br>')}</p>
    </div>
    """, unsafe_allow_html=True)


def main():
    """Main application entry point."""
    components = get_components()

    # Sidebar navigation
    st.sidebar.title("💰 Budget Tracker")
    st.sidebar.markdown("---")

    user_id = st.sidebar.text_input(
        "Your name or email",
        value=st.session_state.get("user_id", ""),
        help="Your budget and expenses are kept separate from everyone else's",
    ).strip()

    if not user_id:
        st.title("💰 Budget Tracker")
        st.info("Enter your name or email in the sidebar to get started.")
        return
    st.session_state.user_id = user_id

    page = st.sidebar.radio(
        "Navigate to:",
        ["📊 Dashboard", "🧾 Financial Setup", "💸 Expense Tracker", "🎯 Savings Goals", "⚙️ Settings"],
        index=0,
    )

    st.sidebar.markdown("---")
    st.sidebar.markdown(
        """
        **How to use:**
        1. Enter your monthly income and savings goal
        2. Log what you spend as you go
        3. Check the dashboard for what is left per day
        """
    )

    # Route to appropriate page
    if page == "📊 Dashboard":
        render_dashboard_page(components.insights_flow)
    elif page == "🧾 Financial Setup":
        render_setup_page(components.budget_flow)
    elif page == "💸 Expense Tracker":
        render_expenses_page(components.expense_flow)
    elif page == "🎯 Savings Goals":
        render_savings_page(components.insights_flow, components.export_flow)
    elif page == "⚙️ Settings":
        render_settings_page(components.storage_backend)


def render_dashboard_page(insights_flow: InsightsFlow):
    """Render the dashboard page."""
    st.title("📊 Dashboard")

    try:
        dashboard = run_async(insights_flow.get_dashboard(current_session()))
    except BudgetNotFoundError:
        show_setup_prompt()
        return
    except Exception as e:
        st.error(f"Error loading dashboard: {str(e)}")
        return

    col1, col2, col3 = st.columns(3)
    col1.metric("Monthly Income", money(dashboard.total_budget))
    col2.metric("Spent So Far", money(dashboard.total_expenses))
    col3.metric("Savings Goal", money(dashboard.total_savings))

    col1, col2, col3 = st.columns(3)
    col1.metric("Remaining After Goal", money(dashboard.remaining_budget))
    col2.metric("Per Day", money(dashboard.daily_budget))
    col3.metric("Days Left", dashboard.remaining_days)

    if dashboard.remaining_budget < 0:
        st.markdown("""
        <div class="warning-box">
            <h4>⚠️ Over budget</h4>
            <p>Your spending has gone past what is left after your savings goal.</p>
        </div>
        """, unsafe_allow_html=True)

    st.markdown("---")
    st.subheader("Spending by Category")

    if not dashboard.expenses_by_category:
        st.info("No expenses recorded yet.")
        return

    st.dataframe(
        [
            {
                "Category": item.category,
                "Amount": money(item.amount),
                "% of Income": f"{item.percentage_of_income:.1f}%",
            }
            for item in dashboard.expenses_by_category
        ],
        use_container_width=True,
        hide_index=True,
    )
    st.bar_chart(
        [
            {"category": item.category, "amount": item.amount}
            for item in dashboard.expenses_by_category
        ],
        x="category",
        y="amount",
    )


def render_setup_page(budget_flow: BudgetFlow):
    """Render the budget setup page."""
    st.title("🧾 Financial Setup")
    st.markdown("Saving again replaces your current figures.")

    session = current_session()
    try:
        existing = run_async(budget_flow.get_budget(session))
    except BudgetNotFoundError:
        existing = None

    with st.form("budget_form"):
        col1, col2 = st.columns(2)
        with col1:
            monthly_income = st.number_input(
                "Monthly Income *",
                value=existing.monthly_income if existing else 0.0,
                min_value=0.0,
                step=100.0,
                format="%.2f",
            )
            mandatory_expenses = st.number_input(
                "Mandatory Expenses *",
                value=existing.mandatory_expenses if existing else 0.0,
                min_value=0.0,
                step=100.0,
                format="%.2f",
                help="Rent, bills and other fixed costs",
            )
        with col2:
            savings_goal = st.number_input(
                "Monthly Savings Goal *",
                value=existing.savings_goal if existing else 0.0,
                min_value=0.0,
                step=100.0,
                format="%.2f",
            )
            days_options = [28, 29, 30, 31]
            days_in_month = st.selectbox(
                "Days in Month *",
                options=days_options,
                index=days_options.index(existing.days_in_month) if existing else 2,
            )

        submitted = st.form_submit_button("💾 Save Budget", type="primary")

    if not submitted:
        return

    data = {
        "monthly_income": monthly_income,
        "mandatory_expenses": mandatory_expenses,
        "savings_goal": savings_goal,
        "days_in_month": days_in_month,
    }
    result, message = budget_flow.check_budget(data)

    try:
        budget = run_async(budget_flow.set_budget(session, data))
    except InvalidInputError:
        show_rejected(message)
        return
    except Exception as e:
        st.error(f"Failed to save: {str(e)}")
        return

    st.markdown(f"""
    <div class="success-box">
        <h4>✅ Budget Saved</h4>
        <p><strong>Income:</strong> {money(budget.monthly_income)}</p>
        <p><strong>Savings Goal:</strong> {money(budget.savings_goal)}</p>
    </div>
    """, unsafe_allow_html=True)
    if result.warnings:
        st.warning(message)


def render_expenses_page(expense_flow: ExpenseFlow):
    """Render the expense tracker page."""
    st.title("💸 Expense Tracker")

    categories = get_settings().app.expense_categories_list

    st.subheader("Add an Expense")
    with st.form("expense_form", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            amount = st.number_input("Amount *", value=0.0, step=10.0, format="%.2f")
            category = st.selectbox("Category *", options=categories + ["Other..."])
            custom_category = st.text_input("Custom category", help="Used when 'Other...' is picked")
        with col2:
            spent_on = st.date_input("Date", value=date.today())
            description = st.text_input("Description (optional)")
            tags = st.text_input("Tags (optional)", help="Comma separated")

        submitted = st.form_submit_button("➕ Add Expense", type="primary")

    if submitted:
        data = {
            "amount": amount,
            "category": custom_category if category == "Other..." else category,
            "description": description or None,
            "tags": [t.strip() for t in tags.split(",") if t.strip()],
            "date": datetime.combine(spent_on, datetime.now().time()),
        }
        _, message = expense_flow.check_expense(data)
        try:
            expense = run_async(expense_flow.add_expense(current_session(), data))
            st.success(f"✅ Added {money(expense.amount)} to {expense.category}")
        except InvalidInputError:
            show_rejected(message)
        except Exception as e:
            st.error(f"Failed to save: {str(e)}")

    st.markdown("---")
    st.subheader("Your Expenses")

    try:
        expenses = run_async(expense_flow.list_expenses(current_session()))
    except Exception as e:
        st.error(f"Error loading expenses: {str(e)}")
        return

    if not expenses:
        st.info("No expenses recorded yet.")
        return

    st.dataframe(
        [
            {
                "Date": e.date.strftime("%d %b %Y"),
                "Category": e.category,
                "Amount": money(e.amount),
                "Description": e.description or "",
                "Tags": ", ".join(e.tags),
            }
            for e in expenses
        ],
        use_container_width=True,
        hide_index=True,
    )

    with st.expander("✏️ Edit or delete an expense"):
        selected = st.selectbox(
            "Expense",
            options=expenses,
            format_func=lambda e: f"{e.date:%d %b} · {e.category} · {money(e.amount)}",
        )

        new_amount = st.number_input("Amount", value=selected.amount, format="%.2f", key="edit_amount")
        new_category = st.text_input("Category", value=selected.category, key="edit_category")
        new_description = st.text_input(
            "Description", value=selected.description or "", key="edit_description"
        )
        new_tags = st.text_input("Tags", value=", ".join(selected.tags), key="edit_tags")

        col1, col2 = st.columns(2)
        with col1:
            if st.button("💾 Save Changes", type="primary"):
                data = {
                    "amount": new_amount,
                    "category": new_category,
                    "description": new_description or None,
                    "tags": [t.strip() for t in new_tags.split(",") if t.strip()],
                }
                _, message = expense_flow.check_expense(data)
                try:
                    run_async(expense_flow.update_expense(current_session(), selected.id, data))
                    st.rerun()
                except InvalidInputError:
                    show_rejected(message)
                except ExpenseNotFoundError:
                    st.error("That expense no longer exists.")

        with col2:
            if st.button("🗑️ Delete"):
                try:
                    run_async(expense_flow.delete_expense(current_session(), selected.id))
                    st.rerun()
                except ExpenseNotFoundError:
                    st.error("That expense no longer exists.")


def render_savings_page(insights_flow: InsightsFlow, export_flow: ExportFlow):
    """Render the savings page."""
    st.title("🎯 Savings Goals")
    st.markdown("Based on this month's expenses only.")

    try:
        savings = run_async(insights_flow.get_savings(current_session()))
    except BudgetNotFoundError:
        show_setup_prompt()
        return
    except Exception as e:
        st.error(f"Error loading savings: {str(e)}")
        return

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Saved This Month", money(savings.current_savings))
    col2.metric("Savings Goal", money(savings.savings_goal))
    col3.metric("Savings Rate", f"{savings.savings_ratio:.1f}%")
    col4.metric("Spent of Income", f"{savings.expenses_ratio:.1f}%")

    st.progress(savings.savings_progress / 100, text=f"{savings.savings_progress:.0f}% of goal")

    st.markdown("---")
    st.subheader("Recommendations")
    for recommendation in savings.recommendations:
        st.markdown(f"- {recommendation}")

    st.markdown("---")
    st.subheader("Download Your Data")

    export_format = st.radio(
        "Format",
        options=list(ExportFormat),
        format_func=lambda f: f.value.upper(),
        horizontal=True,
    )
    try:
        content, filename, mime_type = run_async(
            export_flow.export(current_session(), export_format)
        )
        st.download_button("⬇️ Download", data=content, file_name=filename, mime=mime_type)
    except Exception as e:
        st.error(f"Export failed: {str(e)}")


def render_settings_page(storage_backend: str):
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Connection Status")

    status = validate_all_settings()

    if storage_backend == "google_sheets":
        st.success("✅ Google Sheets (Storage) - Connected")
    elif status.get("google_sheets", False):
        st.info("ℹ️ Using in-memory storage. Data is lost when the app restarts.")
    else:
        error = status.get("google_sheets_error", "Not configured")
        st.error(f"❌ Google Sheets (Storage) - {error}")

    app_settings = get_settings().app
    st.markdown("---")
    st.markdown("### Configuration")
    st.markdown(f"**Environment:** {app_settings.app_environment}")
    st.markdown(f"**Currency:** {app_settings.currency_symbol}")
    if app_settings.debug_mode:
        st.caption("Debug mode is on.")
    st.markdown(
        "To configure the application, create a `.env` file. "
        "See `.env.example` for the available variables."
    )


if __name__ == "__main__":
    main()
