# EcoFin Reports - Financial analytics & reporting for environmental consultancies
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""Exceptions raised by the reporting layer."""


class ReportExportError(Exception):
    """Base class for export errors."""


class MissingBrandingAsset(ReportExportError):
    """Raised when a branding image cannot be obtained.

    The fetcher catches it and drops the image from the document; it is
    never propagated to callers of the exporter.
    """

    def __init__(self, source: str, reason: str):
        super().__init__(f"Branding image unavailable ({source}): {reason}")
        self.source = source
        self.reason = reason


class PopupBlockedError(ReportExportError):
    """Raised when the print backend cannot open its rendering context."""

    def __init__(self, message: str = "Permita pop-ups para imprimir."):
        super().__init__(message)
