# EcoFin Reports - Financial analytics & reporting for environmental consultancies
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
I/O module for EcoFin Reports.

Records are exported from the back-office document store as CSV files and
loaded here into an immutable ``RecordSnapshot``.

Expected input formats
----------------------

Column names are case-insensitive. ``clientId`` is accepted as an alias for
``client_id`` and ``invoiceDate`` for the invoice ``date`` (the document
store field names).

    revenues.csv : id, date, amount, description[, client_id]
    expenses.csv : id, date, amount, description
    invoices.csv : id, client_id, amount, status[, date]
    clients.csv  : id, name

Dates are kept as raw text: an unparseable date does not prevent loading,
it is handled by the date-keyed views (see periods.normalize_date).

Amounts must be numeric and non-negative, otherwise a clear ValueError is
raised. Invoice status must be one of Paid, Unpaid, Overdue.
"""

import os
from pathlib import Path
from typing import Optional, Union

import pandas as pd

from .config import DataConfig
from .models import Client, Invoice, RecordSnapshot, Transaction

PathLike = Union[str, "os.PathLike[str]"]

INVOICE_STATUSES = {"Paid", "Unpaid", "Overdue"}

_ALIASES = {
    "clientid": "client_id",
    "label": "description",
    "invoicedate": "date",
    "invoice_date": "date",
}


def _read_csv(path: PathLike, required: set[str]) -> pd.DataFrame:
    """Read a CSV as text columns, normalize names and check required ones."""
    df = pd.read_csv(path, dtype=str, keep_default_na=False)

    df.columns = [c.lower().strip() for c in df.columns]
    for alias, canonical in _ALIASES.items():
        if alias in df.columns and canonical not in df.columns:
            df = df.rename(columns={alias: canonical})

    missing = required - set(df.columns)
    if missing:
        raise ValueError(
            f"Invalid structure in {path}: missing column(s) "
            f"{', '.join(sorted(missing))}."
        )
    return df


def _amounts(df: pd.DataFrame, path: PathLike) -> pd.Series:
    amounts = pd.to_numeric(df["amount"].str.strip(), errors="coerce")
    if amounts.isna().any():
        raise ValueError(f"Invalid numeric values in 'amount' column of {path}.")
    if (amounts < 0).any():
        raise ValueError(f"Negative values in 'amount' column of {path}.")
    return amounts.astype(float)


def read_transactions(path: PathLike, kind: str) -> tuple[Transaction, ...]:
    """
    Read revenue or expense records from a CSV file.

    Parameters
    ----------
    path:
        CSV file with columns id, date, amount, description and an
        optional client_id.
    kind:
        'revenue' or 'expense'.

    Raises
    ------
    ValueError
        If required columns are missing or amounts are invalid.
    """
    if kind not in ("revenue", "expense"):
        raise ValueError(f"Unknown transaction kind: {kind!r}")

    df = _read_csv(path, {"id", "date", "amount", "description"})
    amounts = _amounts(df, path)
    client_ids = df["client_id"] if "client_id" in df.columns else pd.Series([""] * len(df))

    return tuple(
        Transaction(
            id=str(row_id),
            date=str(raw_date).strip(),
            amount=float(amount),
            description=str(description),
            kind=kind,  # type: ignore[arg-type]
            client_id=(str(client_id).strip() or None) if kind == "revenue" else None,
        )
        for row_id, raw_date, amount, description, client_id in zip(
            df["id"], df["date"], amounts, df["description"], client_ids
        )
    )


def read_invoices(path: PathLike) -> tuple[Invoice, ...]:
    """
    Read invoices from a CSV file (id, client_id, amount, status).

    The issue date column is optional: without it, invoices have an empty
    date and are left out of the date-keyed views (income statement).
    """
    df = _read_csv(path, {"id", "client_id", "amount", "status"})
    amounts = _amounts(df, path)

    statuses = df["status"].str.strip()
    unknown = sorted(set(statuses) - INVOICE_STATUSES)
    if unknown:
        raise ValueError(
            f"Invalid invoice status value(s) in {path}: {', '.join(unknown)}."
        )

    dates = df["date"] if "date" in df.columns else pd.Series([""] * len(df))

    return tuple(
        Invoice(
            id=str(row_id),
            client_id=str(client_id).strip(),
            amount=float(amount),
            status=status,  # type: ignore[arg-type]
            date=str(raw_date).strip(),
        )
        for row_id, client_id, amount, status, raw_date in zip(
            df["id"], df["client_id"], amounts, statuses, dates
        )
    )


def read_clients(path: PathLike) -> tuple[Client, ...]:
    """Read the client lookup table from a CSV file (id, name)."""
    df = _read_csv(path, {"id", "name"})
    return tuple(
        Client(id=str(row_id).strip(), name=str(name))
        for row_id, name in zip(df["id"], df["name"])
    )


def _version(paths: list[Optional[Path]]) -> str:
    parts = []
    for path in paths:
        if path is not None:
            parts.append(f"{path.name}:{path.stat().st_mtime_ns}")
    return "|".join(parts)


def load_snapshot(cfg: DataConfig) -> RecordSnapshot:
    """
    Load every configured record file into a RecordSnapshot.

    Files that are not configured yield empty collections. A configured
    file that does not exist raises FileNotFoundError.
    """
    paths = [cfg.revenues, cfg.expenses, cfg.invoices, cfg.clients]
    for path in paths:
        if path is not None and not path.is_file():
            raise FileNotFoundError(f"Data file not found: {path}")

    return RecordSnapshot(
        revenues=read_transactions(cfg.revenues, "revenue") if cfg.revenues else (),
        expenses=read_transactions(cfg.expenses, "expense") if cfg.expenses else (),
        invoices=read_invoices(cfg.invoices) if cfg.invoices else (),
        clients=read_clients(cfg.clients) if cfg.clients else (),
        version=_version(paths),
    )
