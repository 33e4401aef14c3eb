# EcoFin Reports - Financial analytics & reporting for environmental consultancies
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
EcoFin Reports
--------------

Financial analytics and reporting engine for environmental-compliance
back-offices (licenses, water permits, inspections, technical studies).
The records themselves are managed elsewhere; this package works on an
already-loaded snapshot of revenues, expenses, invoices and clients.

Main capabilities:
- reporting period resolution (day / month / year) into inclusive bounds,
- dashboard aggregation (totals, monthly series, average ticket),
- ABC (Pareto) classification of clients by revenue contribution,
- cash-flow exports as paginated PDF documents with branding images,
- print-ready HTML exports for environments without file downloads.

Computation (periods, aggregation, abc_curve), rendering (pdf_renderer,
html_renderer) and orchestration (exporter, cli) live in separate modules
so that each layer can be tested on its own.


Version: 0.2.0

Usage:
    python -m ecofin_reports.cli --help
"""

__all__ = ["periods", "aggregation", "abc_curve", "report"]

__version__ = "0.2.0"
