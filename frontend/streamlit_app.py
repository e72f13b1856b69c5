#frontend/streamlit_app.py

import os

import plotly.express as px
import streamlit as st

from finance_tracker.api_client import DataApiClient
from finance_tracker.auth import AuthStateMachine, DASHBOARD_VIEW, LOGIN_VIEW
from finance_tracker.config import Settings, configure_logging
from finance_tracker.dashboard import category_breakdown, load_summary, monthly_comparison
from finance_tracker.errors import ApiError, ValidationError
from finance_tracker.records import (
    CategoryListController,
    ExpenseListController,
    IncomeListController,
)
from finance_tracker.session_store import SessionStore, is_client_key, new_client_key

# ---------------- Page config ----------------
st.set_page_config(page_title="Finance Tracker", layout="wide", page_icon="💰")

PAGES = {
    "dashboard": "📊 Dashboard",
    "income": "💵 Income",
    "expense": "💸 Expense",
    "category": "🏷️ Category",
}


# ---------------- Session State Management ----------------
def _navigate(view):
    st.session_state.view = view


def browser_session_key():
    """Per-browser key kept in the URL so a reload finds the same session"""
    key = st.query_params.get("sid")
    if not is_client_key(key):
        key = new_client_key()
        st.query_params["sid"] = key
    return key


def init_session_state():
    if "auth" in st.session_state:
        return
    configure_logging(os.environ.get("FINANCE_LOG_LEVEL", "INFO"))
    settings = Settings.from_env()
    client = DataApiClient.from_settings(settings)
    store = SessionStore(browser_session_key(), settings.session_dir)
    auth = AuthStateMachine(client, store, navigate=_navigate)

    st.session_state.client = client
    st.session_state.auth = auth
    st.session_state.view = DASHBOARD_VIEW if auth.is_authenticated else LOGIN_VIEW
    st.session_state.controllers = {
        "income": IncomeListController(client, auth),
        "expense": ExpenseListController(client, auth),
        "category": CategoryListController(client, auth),
    }
    # owner id each controller was last loaded for
    st.session_state.loaded_for = {}
    st.session_state.editing = None
    st.session_state.notifications = []


init_session_state()


# ---------------- Notifications ----------------
def notify(message, icon="✅"):
    st.session_state.notifications.append((message, icon))


def show_notifications():
    while st.session_state.notifications:
        message, icon = st.session_state.notifications.pop(0)
        st.toast(message, icon=icon)


def run_action(action, success_message, changed=None):
    """Run a controller call and queue a toast with the outcome"""
    try:
        action()
    except ValidationError as e:
        notify(str(e), icon="⚠️")
        return False
    except ApiError as e:
        notify(e.message, icon="❌")
        return False
    notify(success_message)
    if changed == "category":
        # expense dropdown and category names depend on the category list
        st.session_state.loaded_for.pop("expense", None)
    return True


def ensure_loaded(name):
    """Fetch a record page once per logged-in user"""
    auth = st.session_state.auth
    controller = st.session_state.controllers[name]
    if st.session_state.loaded_for.get(name) == auth.owner_id:
        return controller
    try:
        controller.refresh()
    except ApiError as e:
        st.error(f"❌ {e.message}")
    st.session_state.loaded_for[name] = auth.owner_id
    return controller


def format_amount(value):
    try:
        return f"₹{float(value):,.2f}"
    except (TypeError, ValueError):
        return "-"


# ---------------- Authentication ----------------
def render_login():
    auth = st.session_state.auth
    st.title("💰 Personal Finance Tracker")

    login_tab, signup_tab = st.tabs(["🔐 Login", "📝 Sign up"])
    for tab, is_signup in ((login_tab, False), (signup_tab, True)):
        with tab:
            with st.form(f"auth_form_{'signup' if is_signup else 'login'}"):
                username = st.text_input("👤 Username")
                password = st.text_input("🔒 Password", type="password")
                label = "Create account" if is_signup else "Login"
                submitted = st.form_submit_button(label, use_container_width=True, disabled=auth.loading)

            if submitted:
                if not username or not password:
                    st.warning("Please enter both username and password")
                else:
                    ok = auth.signup(username, password) if is_signup else auth.login(username, password)
                    if ok:
                        notify(f"Welcome, {auth.identity.username}!")
                        st.rerun()

    if auth.last_error:
        st.error(f"❌ {auth.last_error}")


# ---------------- Sidebar ----------------
def render_sidebar():
    auth = st.session_state.auth
    with st.sidebar:
        st.title("💰 Finance Tracker")
        st.success(f"Logged in as **{auth.identity.username}**")

        views = list(PAGES)
        current = st.session_state.view if st.session_state.view in PAGES else DASHBOARD_VIEW
        choice = st.radio("Navigate", views, index=views.index(current), format_func=PAGES.get)
        st.session_state.view = choice

        st.markdown("---")
        if st.button("🚪 Logout", use_container_width=True, key="logout_btn"):
            auth.logout()
            st.session_state.loaded_for = {}
            st.session_state.editing = None
            st.rerun()


# ---------------- Dashboard ----------------
def render_dashboard():
    auth = st.session_state.auth
    st.header("📊 Dashboard Overview")

    try:
        summary = load_summary(st.session_state.client, auth.owner_id)
    except ApiError as e:
        st.error(f"❌ {e.message}")
        return
    if summary is None:
        st.info("🔐 Please login to view dashboard")
        return

    col1, col2, col3 = st.columns(3)
    col1.metric("Total Income", format_amount(summary.total_income))
    col2.metric("Total Expenses", format_amount(summary.total_expense))
    col3.metric("Balance", format_amount(summary.balance))

    incomes = ensure_loaded("income").records
    expenses = ensure_loaded("expense").records

    st.subheader("📅 Monthly Income vs Expenses")
    monthly = monthly_comparison(incomes, expenses)
    if monthly.empty:
        st.info("No dated records yet")
    else:
        fig = px.bar(
            monthly,
            x="month",
            y=["income", "expense"],
            barmode="group",
            labels={"value": "Amount", "month": "Month", "variable": ""},
        )
        st.plotly_chart(fig, use_container_width=True)

    st.subheader("🏷️ Expenses by Category")
    breakdown = category_breakdown(expenses)
    if breakdown.empty:
        st.info("No expense data yet")
        return

    col1, col2 = st.columns([2, 1])
    with col1:
        fig = px.pie(breakdown, names="category", values="total", hole=0.4)
        st.plotly_chart(fig, use_container_width=True)
    with col2:
        display = breakdown.copy()
        display["total"] = display["total"].map(format_amount)
        st.dataframe(
            display.rename(columns={"category": "Category", "total": "Amount", "percent": "%"}),
            use_container_width=True,
            hide_index=True,
        )


# ---------------- Record forms ----------------
def record_form(name, controller, form_key, initial=None):
    """Render the add/edit form for a record kind; returns fields on submit"""
    initial = initial or {}
    with st.form(form_key, clear_on_submit=initial == {}):
        if name == "category":
            fields = {"name": st.text_input("Name", value=initial.get("name", ""))}
        elif name == "income":
            fields = {"income_amt": st.number_input(
                "💰 Amount", value=float(initial.get("income_amt") or 0.0), step=100.0, format="%.2f"
            )}
        else:
            options = controller.categories
            ids = [str(c.get("id")) for c in options]
            current = str((initial.get("category") or {}).get("id") or controller.default_category_id or "")
            index = ids.index(current) if current in ids else 0
            amount = st.number_input(
                "💰 Amount", value=float(initial.get("expense_amt") or 0.0), step=100.0, format="%.2f"
            )
            picked = st.selectbox(
                "🏷️ Category",
                options,
                index=index if options else None,
                format_func=lambda c: c.get("name") or "Unnamed",
            )
            fields = {"expense_amt": amount, "category_id": picked.get("id") if picked else None}

        label = "Update" if initial else "Save"
        submitted = st.form_submit_button(label, use_container_width=True, disabled=controller.is_loading)
    return fields if submitted else None


def describe(name, record):
    if name == "category":
        return [record.get("name", "")]
    if name == "income":
        return [format_amount(record.get("income_amt")), record.get("created_date", "")]
    category = (record.get("category") or {}).get("name") or "Unknown"
    return [format_amount(record.get("expense_amt")), category, record.get("created_date", "")]


COLUMNS = {
    "category": ["Category Name"],
    "income": ["Amount", "Date"],
    "expense": ["Amount", "Category", "Date"],
}


# ---------------- Record pages ----------------
def render_record_page(name, title):
    controller = ensure_loaded(name)
    kind = controller.kind
    st.header(title)

    with st.expander(f"➕ Add {kind.name.title()}", expanded=not controller.records):
        if name == "expense" and not controller.categories:
            st.info("Create a category first to record expenses")
        else:
            fields = record_form(name, controller, f"add_{name}")
            if fields is not None and run_action(
                lambda: controller.add(fields), f"{kind.name.title()} added successfully", changed=name
            ):
                st.rerun()

    if not controller.records:
        st.info(f"No {kind.plural} found")
        return

    headers = ["Sr No."] + COLUMNS[name] + ["Actions", ""]
    widths = [1] + [3] * len(COLUMNS[name]) + [1, 1]
    for col, header in zip(st.columns(widths), headers):
        if header:
            col.markdown(f"**{header}**")

    for index, record in enumerate(controller.page_items()):
        cols = st.columns(widths)
        cols[0].write(controller.paginator.row_number(index))
        for col, value in zip(cols[1:-2], describe(name, record)):
            col.write(value)
        edit_col, delete_col = cols[-2], cols[-1]
        record_id = record.get("id")
        if edit_col.button("✏️", key=f"edit_{name}_{record_id}", disabled=controller.is_loading):
            st.session_state.editing = (name, record_id)
            st.rerun()
        if delete_col.button("🗑️", key=f"delete_{name}_{record_id}", disabled=controller.is_loading):
            if run_action(
                lambda: controller.remove(record_id), f"{kind.name.title()} deleted successfully", changed=name
            ):
                st.rerun()

    render_pagination(name, controller)
    render_edit(name, controller)


def render_pagination(name, controller):
    total_pages = controller.total_pages
    if total_pages <= 1:
        return

    cols = st.columns(total_pages + 2)
    if cols[0].button("◀", key=f"prev_{name}", disabled=not controller.paginator.has_previous()):
        controller.go_to_page(controller.current_page - 1)
        st.rerun()
    for page in range(1, total_pages + 1):
        label = f"**{page}**" if page == controller.current_page else str(page)
        if cols[page].button(label, key=f"page_{name}_{page}"):
            controller.go_to_page(page)
            st.rerun()
    has_next = controller.paginator.has_next(len(controller.records))
    if cols[-1].button("▶", key=f"next_{name}", disabled=not has_next):
        controller.go_to_page(controller.current_page + 1)
        st.rerun()


def render_edit(name, controller):
    editing = st.session_state.editing
    if not editing or editing[0] != name:
        return
    record = next((r for r in controller.records if r.get("id") == editing[1]), None)
    if record is None:
        st.session_state.editing = None
        return

    st.subheader(f"✏️ Edit {controller.kind.name.title()}")
    fields = record_form(name, controller, f"edit_{name}", initial=record)
    if st.button("Cancel", key=f"cancel_edit_{name}"):
        st.session_state.editing = None
        st.rerun()
    if fields is not None and run_action(
        lambda: controller.update(record["id"], fields),
        f"{controller.kind.name.title()} updated successfully",
        changed=name,
    ):
        st.session_state.editing = None
        st.rerun()


# ---------------- Main App ----------------
def main():
    show_notifications()
    auth = st.session_state.auth

    if not auth.is_authenticated:
        render_login()
        return

    render_sidebar()
    view = st.session_state.view
    if view == "income":
        render_record_page("income", "💵 Income")
    elif view == "expense":
        render_record_page("expense", "💸 Expenses")
    elif view == "category":
        render_record_page("category", "🏷️ Category Master")
    else:
        render_dashboard()


if __name__ == "__main__":
    main()
