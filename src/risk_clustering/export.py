"""
Excel export of the summary report.

The report is written with openpyxl, optionally on top of a template
workbook. Rows whose numeric cells all lie in [0, 1] are formatted as
percentages. A template that cannot be loaded never fails the export: a
ReportingDegraded warning is emitted and a plain workbook is used.
"""
import math
import numbers
import warnings
from pathlib import Path
from typing import Iterable, Optional, Tuple
from zipfile import BadZipFile

import pandas as pd
from openpyxl import Workbook, load_workbook
from openpyxl.styles import Font
from openpyxl.utils.exceptions import InvalidFileException

from risk_clustering.errors import ReportingDegraded


PERCENT_FORMAT = '0.0%'


def _is_number(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return False
    return not math.isnan(value)


def is_percentage_row(values: Iterable) -> bool:
    """True when the row has numeric cells and every one is within [0, 1]."""
    numeric = [v for v in values if _is_number(v)]
    return bool(numeric) and all(0 <= v <= 1 for v in numeric)


def _cell_value(value):
    if value is None:
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    if hasattr(value, 'item'):
        value = value.item()
        if isinstance(value, float) and math.isnan(value):
            return None
    return value


def open_workbook(template_path: Optional[str] = None, verbose: bool = True) -> Tuple[Workbook, bool]:
    """
    Open the template workbook, or a blank one.

    Returns:
        Tuple of (workbook, True if the template was loaded)
    """
    if template_path is None:
        return Workbook(), False

    try:
        workbook = load_workbook(template_path)
    except (OSError, InvalidFileException, BadZipFile, KeyError) as e:
        message = f"Report template {template_path} could not be loaded ({e}); writing unstyled report"
        warnings.warn(message, ReportingDegraded, stacklevel=2)
        if verbose:
            print(f"⚠ {message}")
        return Workbook(), False

    # templates (.xltx) are saved as regular workbooks
    workbook.template = False
    return workbook, True


def export_report(
    report: pd.DataFrame,
    output_path: str,
    template_path: Optional[str] = None,
    verbose: bool = True,
) -> Path:
    """
    Write the summary report to an .xlsx file.

    Args:
        report: Summary table from build_summary_report
        output_path: Destination .xlsx file
        template_path: Optional workbook whose first sheet receives the report

    Returns:
        Path of the written file
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    workbook, from_template = open_workbook(template_path, verbose=verbose)
    sheet = workbook.active
    if not from_template:
        sheet.title = 'Report'

    for col_idx, name in enumerate(report.columns, start=1):
        cell = sheet.cell(row=1, column=col_idx, value=str(name))
        cell.font = Font(bold=True)

    n_percent_rows = 0
    for row_idx, row in enumerate(report.itertuples(index=False), start=2):
        values = [_cell_value(v) for v in row]
        percent = is_percentage_row(values)
        n_percent_rows += percent

        for col_idx, value in enumerate(values, start=1):
            cell = sheet.cell(row=row_idx, column=col_idx, value=value)
            if percent and _is_number(value):
                cell.number_format = PERCENT_FORMAT

    longest = max((len(str(v)) for v in report.iloc[:, 0]), default=10)
    sheet.column_dimensions['A'].width = min(60, longest + 2)

    workbook.save(output_path)

    if verbose:
        print(f"✓ Saved report to {output_path} ({n_percent_rows} percentage rows)")

    return output_path
