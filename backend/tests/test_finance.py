from fastapi.testclient import TestClient

from kaamkar.main import app
from kaamkar.services.finance import budget_band, month_bounds

client = TestClient(app)


def _tx(headers: dict[str, str], amount: float, tx_type: str, category: str, day: str) -> dict:
    payload = {"amount": amount, "type": tx_type, "category": category, "date": day, "description": "test"}
    res = client.post("/api/v1/transactions", json=payload, headers=headers)
    assert res.status_code == 201
    return res.json()


def test_monthly_summary_totals(headers: dict[str, str]) -> None:
    _tx(headers, 100, "income", "Salary", "2024-03-01")
    _tx(headers, 40, "expense", "Food & Dining", "2024-03-15")
    _tx(headers, 999, "expense", "Food & Dining", "2024-04-01")

    res = client.get("/api/v1/finance/summary", params={"month": "2024-03"}, headers=headers)
    assert res.status_code == 200
    summary = res.json()
    assert summary["totalIncome"] == 100
    assert summary["totalExpense"] == 40
    assert summary["balance"] == 60
    assert summary["categoryData"] == {"Food & Dining": 40}


def test_transactions_filter_by_month_category_and_type(headers: dict[str, str]) -> None:
    _tx(headers, 12, "expense", "Travel", "2024-05-02")
    _tx(headers, 30, "expense", "Shopping", "2024-05-20")
    _tx(headers, 500, "income", "Salary", "2024-05-31")
    _tx(headers, 7, "expense", "Travel", "2024-06-01")

    may = client.get("/api/v1/transactions", params={"month": "2024-05"}, headers=headers).json()
    assert [t["date"] for t in may] == ["2024-05-31", "2024-05-20", "2024-05-02"]

    travel = client.get(
        "/api/v1/transactions", params={"month": "2024-05", "category": "Travel", "type": "expense"}, headers=headers
    ).json()
    assert [t["amount"] for t in travel] == [12]


def test_invalid_month_is_rejected(headers: dict[str, str]) -> None:
    res = client.get("/api/v1/finance/summary", params={"month": "2024-13"}, headers=headers)
    assert res.status_code == 422
    assert res.json()["error"]["details"][0]["field"] == "month"

    res = client.post("/api/v1/budgets", json={"category": "Food", "amount": 10, "month": "March"}, headers=headers)
    assert res.status_code == 422


def test_non_positive_amount_is_rejected(headers: dict[str, str]) -> None:
    payload = {"amount": 0, "type": "expense", "category": "Food", "date": "2024-03-01"}
    res = client.post("/api/v1/transactions", json=payload, headers=headers)
    assert res.status_code == 422


def test_budget_bands_in_summary(headers: dict[str, str]) -> None:
    for category, spent in (("Housing", 95), ("Travel", 80), ("Education", 50)):
        payload = {"category": category, "amount": 100, "month": "2024-07", "spent": spent}
        assert client.post("/api/v1/budgets", json=payload, headers=headers).status_code == 201

    summary = client.get("/api/v1/finance/summary", params={"month": "2024-07"}, headers=headers).json()
    bands = {b["category"]: b["band"] for b in summary["budgets"]}
    assert bands == {"Housing": "red", "Travel": "yellow", "Education": "green"}
    percents = {b["category"]: b["percent"] for b in summary["budgets"]}
    assert percents["Housing"] == 95


def test_budget_band_thresholds() -> None:
    assert budget_band(100, 90).value == "yellow"
    assert budget_band(100, 90.01).value == "red"
    assert budget_band(100, 75).value == "green"
    assert budget_band(100, 75.01).value == "yellow"
    assert budget_band(100, 0).value == "green"


def test_duplicate_budget_returns_409(headers: dict[str, str]) -> None:
    payload = {"category": "Food & Dining", "amount": 300, "month": "2024-08"}
    assert client.post("/api/v1/budgets", json=payload, headers=headers).status_code == 201
    assert client.post("/api/v1/budgets", json=payload, headers=headers).status_code == 409


def test_recompute_spent_from_transactions(headers: dict[str, str]) -> None:
    budget = client.post(
        "/api/v1/budgets", json={"category": "Entertainment", "amount": 200, "month": "2024-09"}, headers=headers
    ).json()
    assert budget["spent"] == 0
    _tx(headers, 25.5, "expense", "Entertainment", "2024-09-03")
    _tx(headers, 14.5, "expense", "Entertainment", "2024-09-28")
    _tx(headers, 60, "expense", "Entertainment", "2024-10-01")
    _tx(headers, 10, "income", "Entertainment", "2024-09-10")

    res = client.post(f"/api/v1/budgets/{budget['id']}/recompute", headers=headers)
    assert res.status_code == 200
    assert res.json()["spent"] == 40


def test_budgets_list_by_month(headers: dict[str, str]) -> None:
    for category in ("Travel", "Bills & Utilities"):
        client.post("/api/v1/budgets", json={"category": category, "amount": 50, "month": "2024-11"}, headers=headers)
    client.post("/api/v1/budgets", json={"category": "Travel", "amount": 50, "month": "2024-12"}, headers=headers)

    november = client.get("/api/v1/budgets", params={"month": "2024-11"}, headers=headers).json()
    assert [b["category"] for b in november] == ["Bills & Utilities", "Travel"]
    assert len(client.get("/api/v1/budgets", headers=headers).json()) == 3


def test_categories_listing(headers: dict[str, str]) -> None:
    categories = client.get("/api/v1/finance/categories", headers=headers).json()
    assert "Food & Dining" in categories["expense"]
    assert "Salary" in categories["income"]


def test_month_bounds_wraps_december() -> None:
    start, end = month_bounds("2024-12")
    assert (start.isoformat(), end.isoformat()) == ("2024-12-01", "2025-01-01")
