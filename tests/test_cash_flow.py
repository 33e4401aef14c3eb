from ecofin_reports.cash_flow import TransactionFilter, filter_transactions
from ecofin_reports.models import Transaction

NAMES = {"c1": "Mineração Serra Azul", "c2": "Construtora Horizonte"}

TXS = [
    Transaction(id="r1", date="2025-01-10", amount=500.0, description="Licença LO", client_id="c1"),
    Transaction(id="r2", date="2025-02-10", amount=80.0, description="Vistoria", client_id="c2"),
    Transaction(id="r3", date="sem data", amount=120.0, description="Licença LP", client_id="c1"),
    Transaction(id="e1", date="2025-01-15", amount=300.0, description="Aluguel", kind="expense"),
]


def _ids(flt: TransactionFilter) -> list[str]:
    return [t.id for t in filter_transactions(TXS, flt, NAMES)]


def test_empty_filter_keeps_everything() -> None:
    assert _ids(TransactionFilter()) == ["r1", "r2", "r3", "e1"]


def test_client_filter_only_applies_to_revenues() -> None:
    """Expenses carry no client: the client filter leaves them in."""
    assert _ids(TransactionFilter(client_name_contains="serra")) == ["r1", "r3", "e1"]


def test_description_filter_is_case_insensitive() -> None:
    assert _ids(TransactionFilter(description_contains="LICENÇA")) == ["r1", "r3"]


def test_date_range_excludes_unparseable_dates() -> None:
    flt = TransactionFilter(start="2025-01-01", end="2025-01-31")
    assert _ids(flt) == ["r1", "e1"]


def test_amount_range_is_inclusive() -> None:
    assert _ids(TransactionFilter(min_amount=120.0, max_amount=300.0)) == ["r3", "e1"]


def test_filters_are_combined() -> None:
    flt = TransactionFilter(description_contains="licença", start="2025-01-01")
    assert _ids(flt) == ["r1"]
