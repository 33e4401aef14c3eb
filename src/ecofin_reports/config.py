# EcoFin Reports - Financial analytics & reporting for environmental consultancies
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Configuration helpers for EcoFin Reports.

This module is responsible for:
- loading the application configuration from a TOML file,
- resolving file paths relative to the configuration file,
- exposing typed dataclasses used by the rest of the application.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:  # pragma: no cover - fallback for older Python
    import tomli as tomllib  # type: ignore[import]

from .branding import DEFAULT_TIMEOUT_SECONDS, DEFAULT_WATERMARK_OPACITY
from .report import DEFAULT_TITLE

DEFAULT_CONFIG_FILE = "ecofin_config.toml"

DISPLAY_MODES = ("table", "csv", "both")


@dataclass(frozen=True)
class DataConfig:
    """Location of the CSV record files (None when not provided)."""

    revenues: Optional[Path]
    expenses: Optional[Path]
    invoices: Optional[Path]
    clients: Optional[Path]


@dataclass(frozen=True)
class BrandingConfig:
    """
    Branding images used by the exports.

    ``header``, ``footer`` and ``watermark`` accept data URLs, absolute
    URLs, site-relative URLs (resolved against ``base_url``) or storage
    paths (resolved against ``assets_dir``).
    """

    base_url: str
    assets_dir: Path
    header: Optional[str]
    footer: Optional[str]
    watermark: Optional[str]
    watermark_opacity: float
    timeout_seconds: float


@dataclass(frozen=True)
class AppConfig:
    """
    Application-wide configuration for EcoFin Reports.

    This aggregates:
    - the record files (data snapshot),
    - the report title and output directory,
    - the branding images,
    - display and logging options.
    """

    data: DataConfig
    report_title: str
    output_dir: Path
    branding: BrandingConfig
    display_mode: str
    decimals: int
    log_level: str


def _load_toml(path: Path) -> dict[str, Any]:
    """
    Load a TOML file and return its content as a dictionary.

    Raises:
        FileNotFoundError: if the file does not exist.
        ValueError: if the TOML content cannot be parsed or is not a table.
    """
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except Exception as exc:  # noqa: BLE001
        raise ValueError(f"Failed to parse TOML config file: {path}") from exc

    if not isinstance(data, dict):
        raise ValueError(f"Invalid TOML root type in {path}, expected a table.")

    return data


def _section(raw: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    section = raw.get(name) or {}
    if not isinstance(section, Mapping):
        return {}
    return section


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _parse_data_config(section: Mapping[str, Any], base_dir: Path) -> DataConfig:
    def _resolve_optional(rel: Any) -> Optional[Path]:
        rel = _optional_str(rel)
        if rel is None:
            return None
        return (base_dir / rel).resolve()

    return DataConfig(
        revenues=_resolve_optional(section.get("revenues")),
        expenses=_resolve_optional(section.get("expenses")),
        invoices=_resolve_optional(section.get("invoices")),
        clients=_resolve_optional(section.get("clients")),
    )


def _parse_branding_config(section: Mapping[str, Any], base_dir: Path) -> BrandingConfig:
    try:
        opacity = float(section.get("watermark_opacity", DEFAULT_WATERMARK_OPACITY))
    except (TypeError, ValueError) as exc:
        raise ValueError(
            "Invalid value for 'branding.watermark_opacity'. Expected a number."
        ) from exc
    if not 0.0 <= opacity <= 1.0:
        raise ValueError("'branding.watermark_opacity' must be between 0 and 1.")

    try:
        timeout = float(section.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS))
    except (TypeError, ValueError) as exc:
        raise ValueError(
            "Invalid value for 'branding.timeout_seconds'. Expected a number."
        ) from exc

    assets_dir_raw = _optional_str(section.get("assets_dir")) or "."

    return BrandingConfig(
        base_url=_optional_str(section.get("base_url")) or "",
        assets_dir=(base_dir / assets_dir_raw).resolve(),
        header=_optional_str(section.get("header")),
        footer=_optional_str(section.get("footer")),
        watermark=_optional_str(section.get("watermark")),
        watermark_opacity=opacity,
        timeout_seconds=timeout,
    )


def load_app_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Load the EcoFin Reports configuration from a TOML file.

    Expected top-level sections in the TOML file
    --------------------------------------------
    [data]
        CSV files holding the record snapshot: revenues, expenses,
        invoices, clients. Each entry is optional.

    [report]
        Report title and output directory for exported files.

    [branding]
        Header, footer and watermark images, base URL for site-relative
        image URLs, local assets directory, watermark opacity and
        download timeout.

    [display]
        Console/CSV display mode and number of decimals for percentages.

    [logging]
        Log level (DEBUG, INFO, WARNING, ...).

    All file paths in the TOML are resolved relative to the directory of
    the TOML file itself.

    Parameters
    ----------
    config_path : str, optional
        Path to the TOML configuration file. Defaults to
        'ecofin_config.toml' in the current directory.

    Returns
    -------
    AppConfig
        Parsed and validated application configuration.
    """
    if config_path is None:
        config_file = Path(DEFAULT_CONFIG_FILE).resolve()
    else:
        config_file = Path(config_path).resolve()

    raw = _load_toml(config_file)
    base_dir = config_file.parent

    # 1) Data files
    data = _parse_data_config(_section(raw, "data"), base_dir)

    # 2) Report options
    report_section = _section(raw, "report")
    report_title = str(report_section.get("title") or DEFAULT_TITLE)
    output_dir = (base_dir / str(report_section.get("output_dir") or "data/output")).resolve()

    # 3) Branding
    branding = _parse_branding_config(_section(raw, "branding"), base_dir)

    # 4) Display options
    display_section = _section(raw, "display")
    display_mode = str(display_section.get("mode", "table"))
    if display_mode not in DISPLAY_MODES:
        raise ValueError(
            f"Invalid display.mode {display_mode!r}. Expected one of {DISPLAY_MODES}."
        )
    try:
        decimals = int(display_section.get("decimals", 2))
    except (TypeError, ValueError):
        decimals = 2

    # 5) Logging
    logging_section = _section(raw, "logging")
    log_level = str(logging_section.get("level", "INFO")).upper()

    return AppConfig(
        data=data,
        report_title=report_title,
        output_dir=output_dir,
        branding=branding,
        display_mode=display_mode,
        decimals=decimals,
        log_level=log_level,
    )
