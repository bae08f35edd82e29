from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date

from fastapi import HTTPException

from ..errors import ValidationError
from ..persistence import DocumentStore
from ..query import Range
from ..repository import Repository
from ..schemas import (
    MONTH_PATTERN,
    BudgetBand,
    BudgetCreate,
    BudgetRecord,
    BudgetStatus,
    BudgetUpdate,
    FinanceCategories,
    FinanceSummary,
    TransactionCreate,
    TransactionRecord,
    TransactionUpdate,
)

logger = logging.getLogger(__name__)

DEFAULT_EXPENSE_CATEGORIES = (
    "Food & Dining",
    "Shopping",
    "Housing",
    "Transportation",
    "Entertainment",
    "Health & Fitness",
    "Education",
    "Personal Care",
    "Travel",
    "Gifts & Donations",
    "Bills & Utilities",
    "Investment",
    "Other",
)

DEFAULT_INCOME_CATEGORIES = (
    "Salary",
    "Freelance",
    "Business",
    "Investments",
    "Gifts",
    "Refunds",
    "Other",
)


def month_bounds(month: str) -> tuple[date, date]:
    """Return the first day of ``month`` and the first day of the following month."""
    if not MONTH_PATTERN.match(month):
        raise ValidationError("month must use YYYY-MM format", field="month")
    year, mon = (int(part) for part in month.split("-"))
    start = date(year, mon, 1)
    end = date(year + 1, 1, 1) if mon == 12 else date(year, mon + 1, 1)
    return start, end


def budget_band(amount: float, spent: float) -> BudgetBand:
    ratio = spent / amount if amount else 0
    if ratio > 0.9:
        return BudgetBand.red
    if ratio > 0.75:
        return BudgetBand.yellow
    return BudgetBand.green


def budget_status(budget: BudgetRecord) -> BudgetStatus:
    percent = round(budget.spent / budget.amount * 100, 2) if budget.amount else 0
    return BudgetStatus(
        budgetId=budget.id,
        category=budget.category,
        amount=budget.amount,
        spent=budget.spent,
        percent=percent,
        band=budget_band(budget.amount, budget.spent),
    )


class FinanceService:
    def __init__(self, store: DocumentStore) -> None:
        self.transactions = Repository(store, "transactions", TransactionRecord, label="transaction")
        self.budgets = Repository(store, "budgets", BudgetRecord, label="budget")

    @staticmethod
    def categories() -> FinanceCategories:
        return FinanceCategories(expense=list(DEFAULT_EXPENSE_CATEGORIES), income=list(DEFAULT_INCOME_CATEGORIES))

    # transactions

    def create_transaction(self, user_id: str, payload: TransactionCreate) -> TransactionRecord:
        return self.transactions.create(user_id, payload)

    def list_transactions(
        self,
        user_id: str,
        month: str | None = None,
        category: str | None = None,
        tx_type: str | None = None,
    ) -> list[TransactionRecord]:
        filters: dict[str, str] = {}
        if category:
            filters["category"] = category
        if tx_type:
            filters["type"] = tx_type
        value_range = None
        if month:
            start, end = month_bounds(month)
            value_range = Range("date", gte=start, lt=end)
        return self.transactions.list_by_owner(user_id, filters, order_field="date", value_range=value_range)

    def get_transaction(self, user_id: str, transaction_id: str) -> TransactionRecord:
        return self.transactions.get_owned(user_id, transaction_id)

    def update_transaction(self, user_id: str, transaction_id: str, payload: TransactionUpdate) -> TransactionRecord:
        return self.transactions.update(user_id, transaction_id, payload)

    def delete_transaction(self, user_id: str, transaction_id: str) -> None:
        self.transactions.delete(user_id, transaction_id)

    # budgets

    def create_budget(self, user_id: str, payload: BudgetCreate) -> BudgetRecord:
        if self.get_budget_by_category(user_id, payload.category, payload.month) is not None:
            raise HTTPException(status_code=409, detail=f"budget already exists for {payload.category} in {payload.month}")
        return self.budgets.create(user_id, payload)

    def list_budgets(self, user_id: str, month: str | None = None) -> list[BudgetRecord]:
        if month:
            month_bounds(month)
            budgets = self.budgets.list_by_owner(user_id, {"month": month}, order_field=None)
            return sorted(budgets, key=lambda b: b.category)
        return self.budgets.list_by_owner(user_id, order_field="month")

    def get_budget(self, user_id: str, budget_id: str) -> BudgetRecord:
        return self.budgets.get_owned(user_id, budget_id)

    def get_budget_by_category(self, user_id: str, category: str, month: str) -> BudgetRecord | None:
        matches = self.budgets.list_by_owner(user_id, {"category": category, "month": month}, order_field=None, limit=1)
        return matches[0] if matches else None

    def update_budget(self, user_id: str, budget_id: str, payload: BudgetUpdate) -> BudgetRecord:
        current = self.budgets.get_owned(user_id, budget_id)
        if payload.category and payload.category != current.category:
            clash = self.get_budget_by_category(user_id, payload.category, current.month)
            if clash is not None:
                raise HTTPException(status_code=409, detail=f"budget already exists for {payload.category} in {current.month}")
        return self.budgets.update(user_id, budget_id, payload)

    def update_spent(self, user_id: str, budget_id: str, spent: float) -> BudgetRecord:
        if spent < 0:
            raise ValidationError("spent must be >= 0", field="spent")
        return self.budgets.update(user_id, budget_id, {"spent": spent})

    def recompute_spent(self, user_id: str, budget_id: str) -> BudgetRecord:
        """Refresh the cached ``spent`` of a budget from its month's expense transactions."""
        budget = self.budgets.get_owned(user_id, budget_id)
        expenses = self.list_transactions(user_id, month=budget.month, category=budget.category, tx_type="expense")
        spent = round(sum(tx.amount for tx in expenses), 2)
        logger.info("budget %s spent recomputed: %s -> %s", budget_id, budget.spent, spent)
        return self.budgets.update(user_id, budget_id, {"spent": spent})

    def delete_budget(self, user_id: str, budget_id: str) -> None:
        self.budgets.delete(user_id, budget_id)

    def summary(self, user_id: str, month: str) -> FinanceSummary:
        transactions = self.list_transactions(user_id, month=month)
        total_income = 0.0
        total_expense = 0.0
        category_data: dict[str, float] = defaultdict(float)
        for tx in transactions:
            if tx.type == "income":
                total_income += tx.amount
            else:
                total_expense += tx.amount
                category_data[tx.category] += tx.amount
        return FinanceSummary(
            month=month,
            totalIncome=total_income,
            totalExpense=total_expense,
            balance=total_income - total_expense,
            categoryData=dict(category_data),
            budgets=[budget_status(b) for b in self.list_budgets(user_id, month)],
        )
