from datetime import date

from ecofin_reports.abc_curve import classify_clients
from ecofin_reports.aggregation import aggregate_transactions
from ecofin_reports.income_statement import income_statement
from ecofin_reports.models import MonthlyBucket, Transaction, UNKNOWN_CLIENT_NAME
from ecofin_reports.views import (
    CLASSIFICATION_COLUMNS,
    INCOME_STATEMENT_COLUMNS,
    MONTHLY_COLUMNS,
    classification_to_dataframe,
    income_statement_to_dataframe,
    monthly_series_to_dataframe,
    totals_to_dataframe,
    transactions_to_dataframe,
)


def test_monthly_series_with_undated_row() -> None:
    series = [MonthlyBucket("Jan", 100.0, 40.0), MonthlyBucket("Fev", 0.0, 10.5)]
    undated = MonthlyBucket("Sem data", 5.0, 0.0)

    df = monthly_series_to_dataframe(series, undated)

    assert list(df.columns) == MONTHLY_COLUMNS
    assert df["month"].tolist() == ["Jan", "Fev", "Sem data"]
    assert df["net"].tolist() == [60.0, -10.5, 5.0]


def test_monthly_series_sums_match_totals() -> None:
    summary = aggregate_transactions(
        [
            Transaction(id="r1", date="2025-01-03", amount=10.0),
            Transaction(id="r2", date="??", amount=2.5),
        ],
        [Transaction(id="e1", date="2025-02-03", amount=4.0, kind="expense")],
        today=date(2025, 2, 28),
    )

    df = monthly_series_to_dataframe(summary.monthly_series, summary.undated)

    assert df["revenue"].sum() == summary.totals.revenue
    assert df["expenses"].sum() == summary.totals.expenses


def test_totals_to_dataframe() -> None:
    summary = aggregate_transactions([], [], today=date(2025, 1, 1))

    df = totals_to_dataframe(summary)

    assert df["metric"].tolist() == ["revenue", "expenses", "profit", "average_ticket"]
    assert df["amount"].tolist() == [0.0, 0.0, 0.0, 0.0]


def test_classification_to_dataframe_keeps_ranking() -> None:
    revenues = [
        Transaction(id="1", date="2025-01-01", amount=2.0, client_id="b"),
        Transaction(id="2", date="2025-01-01", amount=1.0, client_id="a"),
    ]
    rows = classify_clients(revenues, [])

    df = classification_to_dataframe(rows, decimals=1)

    assert list(df.columns) == CLASSIFICATION_COLUMNS
    assert df["rank"].tolist() == [1, 2]
    assert df["client_id"].tolist() == ["b", "a"]
    assert df["revenue_pct"].tolist() == [66.7, 33.3]
    assert df["cumulative_pct"].tolist() == [66.7, 100.0]


def test_classification_to_dataframe_empty() -> None:
    df = classification_to_dataframe([])

    assert df.empty
    assert list(df.columns) == CLASSIFICATION_COLUMNS


def test_transactions_to_dataframe_sorted_newest_first() -> None:
    txs = [
        Transaction(id="1", date="2025-01-01", amount=1.0, client_id="c1"),
        Transaction(id="2", date="bad", amount=2.0, client_id="ghost"),
        Transaction(id="3", date="2025-03-01", amount=3.0, kind="expense"),
    ]

    df = transactions_to_dataframe(txs, client_names={"c1": "Serra Azul"})

    assert df["date"].tolist() == ["2025-03-01", "2025-01-01", "bad"]
    assert df["client"].tolist() == ["", "Serra Azul", UNKNOWN_CLIENT_NAME]


def test_income_statement_to_dataframe() -> None:
    statement = income_statement(
        [Transaction(id="r1", date="2025-05-01", amount=1000.0)],
        [],
        [Transaction(id="e1", date="2025-05-02", amount=250.0, kind="expense")],
        2025,
    )

    df = income_statement_to_dataframe(statement)

    assert list(df.columns) == INCOME_STATEMENT_COLUMNS
    assert len(df) == 9
    assert df["line"].iloc[1] == "Faturas recebidas (pagas)"
    assert df.set_index("line")["amount"]["5. Resultado Operacional"] == 750.0
