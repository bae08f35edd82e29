from fastapi import APIRouter, Depends, Query, Response

from .. import deps
from ..auth import current_user_id
from ..schemas import (
    BudgetCreate,
    BudgetRecord,
    BudgetUpdate,
    FinanceCategories,
    FinanceSummary,
    TransactionCreate,
    TransactionRecord,
    TransactionType,
    TransactionUpdate,
)

router = APIRouter(tags=["finance"])


@router.post("/transactions", response_model=TransactionRecord, status_code=201)
def create_transaction(payload: TransactionCreate, user_id: str = Depends(current_user_id)) -> TransactionRecord:
    return deps.finance.create_transaction(user_id, payload)


@router.get("/transactions", response_model=list[TransactionRecord])
def list_transactions(
    month: str | None = None,
    category: str | None = None,
    type: TransactionType | None = None,
    user_id: str = Depends(current_user_id),
) -> list[TransactionRecord]:
    return deps.finance.list_transactions(user_id, month, category, type.value if type else None)


@router.get("/transactions/{transaction_id}", response_model=TransactionRecord)
def get_transaction(transaction_id: str, user_id: str = Depends(current_user_id)) -> TransactionRecord:
    return deps.finance.get_transaction(user_id, transaction_id)


@router.patch("/transactions/{transaction_id}", response_model=TransactionRecord)
def update_transaction(
    transaction_id: str, payload: TransactionUpdate, user_id: str = Depends(current_user_id)
) -> TransactionRecord:
    return deps.finance.update_transaction(user_id, transaction_id, payload)


@router.delete("/transactions/{transaction_id}", status_code=204)
def delete_transaction(transaction_id: str, user_id: str = Depends(current_user_id)) -> Response:
    deps.finance.delete_transaction(user_id, transaction_id)
    return Response(status_code=204)


@router.post("/budgets", response_model=BudgetRecord, status_code=201)
def create_budget(payload: BudgetCreate, user_id: str = Depends(current_user_id)) -> BudgetRecord:
    return deps.finance.create_budget(user_id, payload)


@router.get("/budgets", response_model=list[BudgetRecord])
def list_budgets(month: str | None = None, user_id: str = Depends(current_user_id)) -> list[BudgetRecord]:
    return deps.finance.list_budgets(user_id, month)


@router.get("/budgets/{budget_id}", response_model=BudgetRecord)
def get_budget(budget_id: str, user_id: str = Depends(current_user_id)) -> BudgetRecord:
    return deps.finance.get_budget(user_id, budget_id)


@router.patch("/budgets/{budget_id}", response_model=BudgetRecord)
def update_budget(budget_id: str, payload: BudgetUpdate, user_id: str = Depends(current_user_id)) -> BudgetRecord:
    return deps.finance.update_budget(user_id, budget_id, payload)


@router.post("/budgets/{budget_id}/recompute", response_model=BudgetRecord)
def recompute_budget(budget_id: str, user_id: str = Depends(current_user_id)) -> BudgetRecord:
    return deps.finance.recompute_spent(user_id, budget_id)


@router.delete("/budgets/{budget_id}", status_code=204)
def delete_budget(budget_id: str, user_id: str = Depends(current_user_id)) -> Response:
    deps.finance.delete_budget(user_id, budget_id)
    return Response(status_code=204)


@router.get("/finance/summary", response_model=FinanceSummary)
def finance_summary(month: str = Query(...), user_id: str = Depends(current_user_id)) -> FinanceSummary:
    return deps.finance.summary(user_id, month)


@router.get("/finance/categories", response_model=FinanceCategories)
def finance_categories(user_id: str = Depends(current_user_id)) -> FinanceCategories:
    return deps.finance.categories()
