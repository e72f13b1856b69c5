# finance_tracker/dashboard.py
import logging
from dataclasses import dataclass

import pandas as pd

logger = logging.getLogger("finance-tracker.dashboard")

UNCATEGORIZED = "Uncategorized"


@dataclass(frozen=True)
class DashboardSummary:
    total_income: float
    total_expense: float

    @property
    def balance(self):
        return self.total_income - self.total_expense


def load_summary(client, owner_id):
    """Fetch aggregate totals for ``owner_id``; None when nobody is logged in"""
    if not owner_id:
        return None
    income = client.total_income(owner_id)
    expense = client.total_expense(owner_id)
    logger.debug(f"Dashboard totals for {owner_id}: income={income} expense={expense}")
    return DashboardSummary(total_income=income, total_expense=expense)


def category_breakdown(expenses):
    """Sum loaded expense records per category name.

    Returns a DataFrame with ``category``, ``total`` and ``percent`` columns,
    largest total first. Empty input gives an empty frame with those columns.
    """
    columns = ["category", "total", "percent"]
    if not expenses:
        return pd.DataFrame(columns=columns)

    rows = []
    for exp in expenses:
        category = exp.get("category") or {}
        rows.append({
            "category": category.get("name") or UNCATEGORIZED,
            "amount": exp.get("expense_amt"),
        })
    df = pd.DataFrame(rows)
    df["amount"] = pd.to_numeric(df["amount"], errors="coerce")
    df = df.dropna(subset=["amount"])
    if df.empty:
        return pd.DataFrame(columns=columns)

    totals = df.groupby("category")["amount"].sum().reset_index().rename(columns={"amount": "total"})
    grand_total = totals["total"].sum()
    totals["percent"] = (totals["total"] / grand_total * 100).round(2) if grand_total else 0.0
    return totals.sort_values("total", ascending=False).reset_index(drop=True)[columns]


def _monthly_totals(records, amount_field, label):
    rows = [{"date": r.get("created_date"), "amount": r.get(amount_field)} for r in records or []]
    if not rows:
        return pd.DataFrame(columns=["month", label])
    df = pd.DataFrame(rows)
    df["date"] = pd.to_datetime(df["date"], errors="coerce", format="mixed", utc=True)
    df["amount"] = pd.to_numeric(df["amount"], errors="coerce")
    df = df.dropna(subset=["date", "amount"])
    if df.empty:
        return pd.DataFrame(columns=["month", label])
    df["month"] = df["date"].dt.strftime("%Y-%m")
    return df.groupby("month")["amount"].sum().reset_index().rename(columns={"amount": label})


def monthly_comparison(incomes, expenses):
    """Income and expense totals per calendar month from loaded records.

    Returns a DataFrame with ``month`` ("YYYY-MM"), ``income`` and ``expense``
    columns, oldest month first. Months with only one side get 0 for the other.
    Records without a parseable ``created_date`` or amount are skipped.
    """
    columns = ["month", "income", "expense"]
    income = _monthly_totals(incomes, "income_amt", "income")
    expense = _monthly_totals(expenses, "expense_amt", "expense")
    if income.empty and expense.empty:
        return pd.DataFrame(columns=columns)

    df = income.merge(expense, on="month", how="outer")
    df[["income", "expense"]] = df[["income", "expense"]].astype(float).fillna(0.0)
    return df.sort_values("month").reset_index(drop=True)[columns]
