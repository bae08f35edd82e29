from __future__ import annotations

from datetime import datetime, time, timedelta, timezone

from ..persistence import DocumentStore
from ..query import Range
from ..repository import Repository
from ..schemas import BudgetRecord, DashboardStats, EventRecord, GoalRecord, NoteRecord, TodoRecord
from .finance import FinanceService


class DashboardService:
    def __init__(self, store: DocumentStore) -> None:
        self.notes = Repository(store, "notes", NoteRecord)
        self.todos = Repository(store, "todos", TodoRecord)
        self.events = Repository(store, "events", EventRecord)
        self.budgets = Repository(store, "budgets", BudgetRecord)
        self.goals = Repository(store, "goals", GoalRecord)
        self.finance = FinanceService(store)

    def stats(self, user_id: str, now: datetime | None = None) -> DashboardStats:
        now = now or datetime.now(timezone.utc)
        day_start = datetime.combine(now.date(), time.min, tzinfo=timezone.utc)
        day_end = day_start + timedelta(days=1)
        month = now.strftime("%Y-%m")

        notes = self.notes.list_by_owner(user_id)
        recent_notes = self.notes.list_by_owner(
            user_id, order_field="updatedAt", value_range=Range("updatedAt", gte=now - timedelta(days=7))
        )
        todos = self.todos.list_by_owner(user_id)
        events_today = self.events.list_by_owner(
            user_id, order_field="start", direction="asc", value_range=Range("start", gte=day_start, lt=day_end)
        )
        upcoming = self.events.list_by_owner(
            user_id, order_field="start", direction="asc", value_range=Range("start", gte=day_end)
        )
        expenses = self.finance.list_transactions(user_id, month=month, tx_type="expense")
        budgets = self.budgets.list_by_owner(user_id, {"month": month}, order_field=None)
        goals = self.goals.list_by_owner(user_id)

        return DashboardStats(
            notesTotal=len(notes),
            notesRecent=len(recent_notes),
            todosTotal=len(todos),
            todosCompleted=sum(1 for t in todos if t.completed),
            eventsToday=len(events_today),
            eventsUpcoming=len(upcoming),
            monthExpenses=sum(tx.amount for tx in expenses),
            monthBudget=sum(b.amount for b in budgets),
            goalsActive=sum(1 for g in goals if g.status in {"not-started", "in-progress"}),
            goalsCompleted=sum(1 for g in goals if g.status == "completed"),
        )
