import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import datetime as dt

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import streamlit as st

from ledger.aggregate import parse_date
from ledger.config import CATEGORIES, DATA_DIR, setup_logging
from ledger.domain import Kind
from ledger.filters import by_amount_range, by_category, by_date_range, select
from ledger.state import LedgerController
from ledger.storage import JsonFileStore
from ledger.transforms import entry_to_dict

st.set_page_config(page_title="Personal Ledger", layout="wide")

if "controller" not in st.session_state:
    setup_logging()
    controller = LedgerController(JsonFileStore(DATA_DIR))
    controller.load()
    st.session_state.controller = controller

ctl: LedgerController = st.session_state.controller
today = dt.date.today()
report = ctl.summary(today)
res = report["result"]


def money(v) -> str:
    return f"₪{v:,.0f}"


def entries_df(entries) -> pd.DataFrame:
    df = pd.DataFrame([entry_to_dict(e) for e in entries],
                      columns=["id", "date", "type", "amount", "category", "note"])
    return df


# Header KPIs, current month
current = res["current"]
k1, k2, k3, k4 = st.columns(4)
with k1:
    st.metric("Income this month", money(current.income))
with k2:
    st.metric("Expected income", money(res["expected_income"]), delta=f"gap {money(res['income_gap'])}", delta_color="off")
with k3:
    st.metric("Expenses this month", money(current.expense))
with k4:
    st.metric("Net cash flow", money(current.net))

for alert in ctl.alerts[-3:]:
    st.sidebar.warning(alert["alert"])

menu = st.sidebar.radio(
    "Menu",
    ["🏠 Dashboard", "🧾 Transactions", "💰 Budgets", "🎯 Goals", "📂 Import / Export", "⚙️ Settings"]
)

if menu == "🏠 Dashboard":
    series = res["monthly"]
    fig_ts = go.Figure()
    months = [m.period for m in series]
    fig_ts.add_trace(go.Scatter(x=months, y=[m.income for m in series], mode="lines", name="Income"))
    fig_ts.add_trace(go.Scatter(x=months, y=[m.expense for m in series], mode="lines", name="Expense"))
    fig_ts.add_trace(go.Scatter(x=months, y=[m.net for m in series], mode="lines", name="Net"))
    fig_ts.update_layout(title="12-month cash flow", margin=dict(t=30, b=10, l=10, r=10))

    left, right = st.columns([2, 1])
    with left:
        st.plotly_chart(fig_ts, use_container_width=True)
        st.caption(f"Average net, last 3 months: **{money(res['avg_net'])}**")
    with right:
        spend = res["category_spend"]
        if spend:
            fig_pie = px.pie(
                values=list(spend.values()),
                names=list(spend.keys()),
                title="Expenses by category (this month)",
            )
            st.plotly_chart(fig_pie, use_container_width=True)
        else:
            st.info("No expenses recorded this month.")

    st.subheader("💡 Hints")
    for h in res["hints"]:
        cap = f" (budget {money(h.cap)})" if h.cap else ""
        advice = "Time to slow down this week." if h.over else "Looking good, keep going!"
        st.markdown(f"- **{h.category}**: spent {money(h.spent)}{cap}. {advice}")

elif menu == "🧾 Transactions":
    st.subheader("➕ New transaction")
    with st.form("add_entry", clear_on_submit=True):
        c1, c2 = st.columns(2)
        date = c1.date_input("Date", value=today)
        kind = c2.selectbox("Type", [Kind.EXPENSE.value, Kind.INCOME.value])
        category = st.selectbox("Category (expenses)", CATEGORIES)
        amount = st.number_input("Amount", min_value=0.0, step=10.0)
        note = st.text_input("Note")
        if st.form_submit_button("Add transaction"):
            result = ctl.add_entry(date.isoformat(), kind, amount, category, note)
            if result.is_left():
                st.error(result.get_error()["message"])
            else:
                st.rerun()

    month = st.text_input("Month (YYYY-MM)", value=report["period"])
    listed = ctl.entries_for(month)
    with st.expander("Filter"):
        f1, f2 = st.columns(2)
        since = f1.date_input("From", value=None)
        until = f2.date_input("To", value=None)
        labels = sorted({e.category for e in listed if e.category})
        pick_cat = st.selectbox("Category", ["All", *labels])
        a1, a2 = st.columns(2)
        low = a1.number_input("Min amount", min_value=0.0, value=0.0, step=10.0)
        high = a2.number_input("Max amount", min_value=0.0, value=0.0, step=10.0,
                               help="0 means no upper limit")
    preds = [by_amount_range(low, high if high > 0 else float("inf"))]
    if since or until:
        preds.append(by_date_range((since or dt.date.min).isoformat(), (until or dt.date.max).isoformat()))
    if pick_cat != "All":
        preds.append(by_category(pick_cat))
    listed = select(listed, *preds)
    st.dataframe(entries_df(listed), use_container_width=True)

    if listed:
        st.subheader("✏️ Edit / delete")
        by_label = {f"{e.date} · {e.kind.value} · {e.category} · {e.amount:,.2f} · {e.note}": e for e in listed}
        picked = by_label[st.selectbox("Transaction", list(by_label))]
        with st.form("edit_entry"):
            c1, c2 = st.columns(2)
            e_date = c1.date_input("Date", value=parse_date(picked.date).get_or_else(today))
            e_kind = c2.selectbox("Type", [Kind.EXPENSE.value, Kind.INCOME.value],
                                  index=0 if picked.kind is Kind.EXPENSE else 1)
            e_cat = st.text_input("Category", value=picked.category)
            e_amount = st.number_input("Amount", min_value=0.0, value=float(picked.amount), step=10.0)
            e_note = st.text_input("Note", value=picked.note)
            save, delete = st.columns(2)
            if save.form_submit_button("Save"):
                result = ctl.edit_entry(picked.id, e_date.isoformat(), e_kind, e_amount, e_cat, e_note)
                if result.is_left():
                    st.error(result.get_error()["message"])
                else:
                    st.rerun()
            if delete.form_submit_button("Delete"):
                ctl.delete_entry(picked.id)
                st.rerun()

elif menu == "💰 Budgets":
    st.subheader("Budget by category")
    for usage in res["budgets"]:
        c1, c2 = st.columns([3, 1])
        with c1:
            st.markdown(f"**{usage.category}** · spent {money(usage.consumed)} · left {money(usage.remaining)}")
            st.progress(usage.ratio / 100)
            if usage.over:
                st.caption("🔴 over budget")
            elif usage.status == "warn":
                st.caption("🟠 close to the limit")
        with c2:
            cap = st.number_input("Cap", min_value=0.0, value=float(usage.cap), step=10.0,
                                  key=f"cap_{usage.category}", label_visibility="collapsed")
            if cap != usage.cap:
                ctl.set_budget(usage.category, cap)
                st.rerun()

    with st.form("new_budget", clear_on_submit=True):
        new_cat = st.text_input("New category")
        new_cap = st.number_input("Monthly cap", min_value=0.0, step=10.0)
        if st.form_submit_button("Add category"):
            result = ctl.add_category(new_cat, new_cap)
            if result.is_left():
                st.error(result.get_error()["message"])
            else:
                st.rerun()

elif menu == "🎯 Goals":
    with st.form("add_goal", clear_on_submit=True):
        name = st.text_input("Goal name")
        target = st.number_input("Target amount", min_value=0.0, step=100.0)
        monthly = st.number_input("Monthly contribution", min_value=0.0, step=50.0)
        if st.form_submit_button("Add goal"):
            result = ctl.add_goal(name, target, monthly, today)
            if result.is_left():
                st.error(result.get_error()["message"])
            else:
                st.rerun()

    for p in res["goals"]:
        g = p.goal
        with st.container(border=True):
            st.markdown(f"### {g.name}")
            st.write(f"Target: {money(g.target)} · monthly: {money(g.monthly)}")
            if p.months.is_some():
                st.write(f"Estimated time: **{p.months.get_or_else(0)}** months (by {p.eta_period.get_or_else('')})")
            else:
                st.write("Set a monthly contribution to estimate the time to reach this goal.")
            if st.button("Delete", key=f"del_goal_{g.id}"):
                ctl.remove_goal(g.id)
                st.rerun()

elif menu == "📂 Import / Export":
    filename, csv_text = ctl.export(today)
    st.subheader("⬇ Export CSV")
    st.download_button("Download CSV", csv_text, file_name=filename, mime="text/csv")

    st.subheader("⬆ Import CSV")
    st.caption("Columns: id,date,type,amount,category,note")
    uploaded = st.file_uploader("CSV file", type=["csv"])
    if uploaded is not None and st.button("Import"):
        imported = ctl.import_text(uploaded.getvalue().decode("utf-8", errors="replace"))
        st.success(f"Imported {len(imported)} transactions")

elif menu == "⚙️ Settings":
    expected = st.number_input("Expected monthly income", min_value=0.0,
                               value=float(ctl.state.expected_income), step=100.0)
    if st.button("Save") and not ctl.set_expected_income(expected):
        st.error("Expected income must be a non-negative number")

    st.subheader("Reset")
    confirm = st.checkbox("I understand this deletes all stored data")
    if st.button("Reset all data", disabled=not confirm):
        ctl.reset()
        st.rerun()

    with st.expander("Summary diagnostics"):
        for v in report["validation"]:
            for msg in v["messages"]:
                st.write(f"{v['validator']}: {msg}")
        st.write([step["calculator"] for step in report["steps"]])
