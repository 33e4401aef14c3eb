# EcoFin Reports - Financial analytics & reporting for environmental consultancies
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Command-Line Interface (CLI) for EcoFin Reports.

This module wires together the main building blocks of EcoFin Reports:

- configuration (record files, report options, branding, display),
- record loading into an immutable snapshot,
- period resolution,
- dashboard aggregation, ABC classification and income statement
  (memoized),
- report exports (PDF file or browser print view),
- view helpers (tabular rendering).

The CLI is intentionally thin: it does not implement any financial logic
itself. It orchestrates the underlying modules based on command-line
arguments and the configuration file.


Commands
--------

- ``dashboard`` (default):
    Revenue, expenses, profit, average ticket and the monthly series.

- ``abc``:
    ABC (Pareto) classification of clients by revenue contribution.

- ``cash-flow``:
    Revenues and expenses of the selected period, with optional filters
    (client name, description, amount range).

- ``export --format pdf|print``:
    Cash-flow report of the selected period, either written as a PDF file
    into the output directory or opened in the browser's print dialog.

- ``income-statement [--export pdf|print]``:
    Annual income statement (DRE) of ``--year`` (current year by default):
    paid invoices and revenues of the year, operating expenses and results.
    With ``--export`` the statement is written as a PDF file or opened in
    the print dialog instead of being displayed.


Period selection
----------------

``--period day|month|year`` selects the period type (month by default).
The value is given by the matching option:

- ``--day YYYY-MM-DD``
- ``--month YYYY-MM``
- ``--year YYYY``

When the matching option is omitted, the current day, month or year is
used.


Display modes and output
------------------------

``display.mode`` in the configuration (overridable with
``--display-mode``) controls how tables are rendered:

- ``table``: print tables to stdout,
- ``csv``:   write timestamped CSV files only,
- ``both``:  do both.

CSV files and PDF exports are written into ``--output DIR`` when given,
otherwise into ``report.output_dir`` from the configuration
(``data/output`` by default).


Examples
--------

    python -m ecofin_reports.cli dashboard
    python -m ecofin_reports.cli abc --display-mode both
    python -m ecofin_reports.cli --period year --year 2025 cash-flow --min-amount 100
    python -m ecofin_reports.cli --period month --month 2025-03 export --format pdf
    python -m ecofin_reports.cli --year 2025 income-statement --export pdf
"""

import argparse
import asyncio
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

import pandas as pd

from . import __version__
from .abc_curve import build_client_lookup, classification_summary
from .analytics import abc_for, cash_flow_for, dashboard_for, income_statement_for
from .branding import BrandingFetcher
from .cash_flow import TransactionFilter, filter_transactions
from .config import DISPLAY_MODES, AppConfig, load_app_config
from .exporter import ReportExporter
from .html_renderer import BrowserPrintContext
from .io import load_snapshot
from .models import RecordSnapshot
from .periods import (
    PERIOD_TYPES,
    PeriodSelector,
    determine_period_from_args,
    default_selector,
    resolve_period_bounds,
)
from .report import format_currency
from .views import (
    classification_to_dataframe,
    income_statement_to_dataframe,
    monthly_series_to_dataframe,
    totals_to_dataframe,
    transactions_to_dataframe,
)

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _build_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for the CLI."""
    ap = argparse.ArgumentParser(
        prog="python -m ecofin_reports.cli",
        description=(
            "EcoFin Reports - Financial analytics & reporting for environmental "
            "consultancies. Aggregates revenues and expenses, classifies "
            "clients by revenue contribution and exports cash-flow reports."
        ),
    )

    # Generic options
    ap.add_argument(
        "--version",
        action="store_true",
        help="Show the installed version of ecofin_reports and exit.",
    )

    ap.add_argument(
        "--config",
        dest="config_path",
        help=(
            "Path to the main TOML configuration file. "
            "If omitted, 'ecofin_config.toml' in the current directory is used."
        ),
    )

    # Period selection
    ap.add_argument(
        "--period",
        choices=list(PERIOD_TYPES),
        help="Period type used by cash-flow and export (default: month).",
    )
    ap.add_argument("--day", help="Day of a 'day' period (YYYY-MM-DD).")
    ap.add_argument("--month", help="Month of a 'month' period (YYYY-MM).")
    ap.add_argument("--year", help="Year of a 'year' period (YYYY).")

    # Display options
    ap.add_argument(
        "--display-mode",
        dest="display_mode",
        choices=list(DISPLAY_MODES),
        help=(
            "Override the display.mode setting from the configuration file. "
            "'table' prints results to stdout, "
            "'csv' writes CSV files only, "
            "'both' does both."
        ),
    )
    ap.add_argument(
        "--output",
        dest="output_dir",
        help=(
            "Output directory for CSV files and exported reports. "
            "If omitted, report.output_dir from the configuration is used."
        ),
    )

    subparsers = ap.add_subparsers(
        dest="command",
        metavar="command",
        help="What to compute (default: dashboard).",
    )

    subparsers.add_parser(
        "dashboard",
        help="Show totals, average ticket and the monthly series.",
    )

    subparsers.add_parser(
        "abc",
        help="Show the ABC classification of clients.",
    )

    cash_flow = subparsers.add_parser(
        "cash-flow",
        help="List revenues and expenses of the selected period.",
    )
    cash_flow.add_argument(
        "--client-contains",
        dest="client_contains",
        help="Case-insensitive substring filter on the client name (revenues only).",
    )
    cash_flow.add_argument(
        "--description-contains",
        dest="description_contains",
        help="Case-insensitive substring filter on the description.",
    )
    cash_flow.add_argument(
        "--min-amount",
        dest="min_amount",
        type=float,
        help="Keep transactions with amount >= this value.",
    )
    cash_flow.add_argument(
        "--max-amount",
        dest="max_amount",
        type=float,
        help="Keep transactions with amount <= this value.",
    )

    export = subparsers.add_parser(
        "export",
        help="Export the cash-flow report of the selected period.",
    )
    export.add_argument(
        "--format",
        dest="export_format",
        choices=["pdf", "print"],
        default="pdf",
        help="'pdf' writes a PDF file, 'print' opens the browser print dialog.",
    )

    statement = subparsers.add_parser(
        "income-statement",
        help="Show the income statement (DRE) of --year (default: current year).",
    )
    statement.add_argument(
        "--export",
        dest="statement_export",
        choices=["pdf", "print"],
        help=(
            "Export the statement instead of displaying it: 'pdf' writes a PDF "
            "file, 'print' opens the browser print dialog."
        ),
    )

    return ap


def _configure_logging(level: str) -> None:
    logging.basicConfig(level=getattr(logging, level, logging.INFO), format=LOG_FORMAT)


def _resolve_output_dir(args: argparse.Namespace, config: AppConfig) -> Path:
    return Path(args.output_dir) if args.output_dir else config.output_dir


def _render_tables(
    tables: list[tuple[str, str, pd.DataFrame]],
    display_mode: str,
    output_dir: Path,
) -> None:
    """
    Render ``(label, file_stem, df)`` tables according to the display mode.

    CSV files are named ``<file_stem>_YYYY-MM-DD-HH-MM-SS.csv``.
    """
    if display_mode in {"table", "both"}:
        for label, _, df in tables:
            print()
            print(f"=== {label} ===")
            if df.empty:
                print("(no rows)")
            else:
                print(df.to_string(index=False))

    if display_mode in {"csv", "both"}:
        output_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y-%m-%d-%H-%M-%S")
        for _, stem, df in tables:
            path = output_dir / f"{stem}_{timestamp}.csv"
            df.to_csv(path, index=False)
            print(f"Wrote {path} ({len(df)} rows)")


def _handle_dashboard(snapshot: RecordSnapshot) -> list[tuple[str, str, pd.DataFrame]]:
    summary = dashboard_for(snapshot)

    if summary.undated is not None:
        print(
            "Warning: some transactions have an unparseable date; they are "
            f"counted in the totals and listed under '{summary.undated.month_label}'."
        )

    return [
        ("Dashboard", "dashboard_totals", totals_to_dataframe(summary)),
        (
            "Monthly series",
            "monthly_series",
            monthly_series_to_dataframe(summary.monthly_series, summary.undated),
        ),
    ]


def _handle_abc(
    snapshot: RecordSnapshot, decimals: int
) -> list[tuple[str, str, pd.DataFrame]]:
    rows = abc_for(snapshot)

    if not rows:
        print("No client revenue recorded: ABC classification is empty.")
    else:
        summary = classification_summary(rows)
        for cls in ("A", "B", "C"):
            print(
                f"Class {cls}: {int(summary[cls]['clients'])} client(s), "
                f"{format_currency(summary[cls]['revenue'])}"
            )

    return [
        (
            "ABC classification",
            "abc_classification",
            classification_to_dataframe(rows, decimals=decimals),
        )
    ]


def _handle_cash_flow(
    args: argparse.Namespace, snapshot: RecordSnapshot, selector: PeriodSelector
) -> list[tuple[str, str, pd.DataFrame]]:
    bounds = resolve_period_bounds(selector)
    revenues, expenses = cash_flow_for(snapshot, bounds)

    flt = TransactionFilter(
        client_name_contains=args.client_contains,
        description_contains=args.description_contains,
        min_amount=args.min_amount,
        max_amount=args.max_amount,
    )
    names = build_client_lookup(snapshot.clients)
    listing = filter_transactions(revenues + expenses, flt, client_names=names)

    total_in = sum(t.amount for t in listing if t.kind == "revenue")
    total_out = sum(t.amount for t in listing if t.kind == "expense")
    print(
        f"Entries: {len(listing)} | Receitas: {format_currency(total_in)} | "
        f"Despesas: {format_currency(total_out)}"
    )

    return [
        (
            "Cash flow",
            "cash_flow",
            transactions_to_dataframe(listing, client_names=names),
        )
    ]


def _build_exporter(args: argparse.Namespace, config: AppConfig) -> ReportExporter:
    branding = config.branding
    fetcher = BrandingFetcher(
        base_url=branding.base_url,
        assets_dir=branding.assets_dir,
        timeout=branding.timeout_seconds,
    )
    return ReportExporter(
        fetcher,
        branding=branding,
        output_dir=_resolve_output_dir(args, config),
        title=config.report_title,
    )


def _handle_export(
    args: argparse.Namespace,
    config: AppConfig,
    snapshot: RecordSnapshot,
    selector: PeriodSelector,
) -> bool:
    exporter = _build_exporter(args, config)

    if args.export_format == "print":
        result = asyncio.run(
            exporter.print_report(
                snapshot.revenues, snapshot.expenses, selector, BrowserPrintContext()
            )
        )
        if result is not None:
            print(f"Opened print view for {selector.label}.")
        return result is not None

    result = asyncio.run(
        exporter.export_pdf(snapshot.revenues, snapshot.expenses, selector)
    )
    if result is not None:
        pages = result.rendered.page_count
        print(f"Wrote {result.path} ({pages} page(s))")
    return result is not None


def _statement_year(args: argparse.Namespace) -> int:
    """Fiscal year of the income statement: --year, or the current year."""
    selector = (
        PeriodSelector(type="year", value=args.year)
        if args.year
        else default_selector("year")
    )
    resolve_period_bounds(selector)
    return int(selector.value)


def _handle_income_statement(
    snapshot: RecordSnapshot, year: int
) -> list[tuple[str, str, pd.DataFrame]]:
    statement = income_statement_for(snapshot, year)

    undated = sum(1 for inv in snapshot.invoices if inv.is_paid and not inv.date)
    if undated:
        print(
            f"Warning: {undated} paid invoice(s) without an issue date are not "
            "part of the income statement."
        )

    return [
        (
            f"Income statement {year}",
            f"income_statement_{year}",
            income_statement_to_dataframe(statement),
        )
    ]


def _handle_income_statement_export(
    args: argparse.Namespace, config: AppConfig, snapshot: RecordSnapshot, year: int
) -> bool:
    exporter = _build_exporter(args, config)
    records = (snapshot.revenues, snapshot.invoices, snapshot.expenses, year)

    if args.statement_export == "print":
        result = asyncio.run(
            exporter.print_income_statement(*records, BrowserPrintContext())
        )
        if result is not None:
            print(f"Opened print view for the income statement {year}.")
        return result is not None

    result = asyncio.run(exporter.export_income_statement(*records))
    if result is not None:
        print(f"Wrote {result.path} ({result.rendered.page_count} page(s))")
    return result is not None


def main(argv: Optional[list[str]] = None) -> int:
    """Entry point for the EcoFin Reports CLI.

    This function parses command-line arguments, loads the configuration
    and the record snapshot, resolves the reporting period and dispatches
    to the selected command. Returns the process exit code.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    # --version: short-circuit and exit early.
    if args.version:
        print(f"ecofin_reports version {__version__}")
        return 0

    # 1) Load application configuration.
    try:
        config = load_app_config(args.config_path)
    except (FileNotFoundError, ValueError) as exc:
        parser.error(str(exc))

    _configure_logging(config.log_level)

    # 2) Load records.
    try:
        snapshot = load_snapshot(config.data)
    except (FileNotFoundError, ValueError) as exc:
        parser.error(str(exc))

    logger.info(
        "Loaded %d revenue(s), %d expense(s), %d invoice(s), %d client(s)",
        len(snapshot.revenues),
        len(snapshot.expenses),
        len(snapshot.invoices),
        len(snapshot.clients),
    )

    # 3) Resolve period (used by cash-flow and export).
    try:
        selector = determine_period_from_args(args)
    except ValueError as exc:
        parser.error(str(exc))

    command = args.command or "dashboard"

    if command == "export":
        return 0 if _handle_export(args, config, snapshot, selector) else 1

    if command == "income-statement":
        try:
            year = _statement_year(args)
        except ValueError as exc:
            parser.error(str(exc))
        if args.statement_export:
            ok = _handle_income_statement_export(args, config, snapshot, year)
            return 0 if ok else 1
        tables = _handle_income_statement(snapshot, year)
    elif command == "abc":
        tables = _handle_abc(snapshot, config.decimals)
    elif command == "cash-flow":
        bounds = resolve_period_bounds(selector)
        print(f"Applied period: {selector.label} ({bounds.start} → {bounds.end})")
        tables = _handle_cash_flow(args, snapshot, selector)
    else:
        tables = _handle_dashboard(snapshot)

    # 4) Resolve display mode: config value overridden by CLI if provided.
    display_mode = args.display_mode or config.display_mode
    _render_tables(tables, display_mode, _resolve_output_dir(args, config))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
