"""CSV export of a company's risk register."""

from __future__ import annotations

from datetime import date
from typing import Any

CSV_COLUMNS = [
    ("ID", "id"),
    ("Category", "category"),
    ("Asset", "asset"),
    ("Threat", "threat"),
    ("Vulnerability", "vulnerability"),
    ("Impact", "impact"),
    ("Likelihood", "likelihood"),
    ("Risk Level", "risk_score"),
    ("Existing Controls", "existing_controls"),
    ("Treatment Plan", "treatment_plan"),
    ("Owner", "owner"),
    ("Priority", "priority"),
    ("Control Effectiveness", "control_effectiveness"),
]


def _cell(value: Any) -> str:
    return "" if value is None else str(value)


def export_csv(records: list[dict[str, Any]]) -> str:
    """Render records as comma-separated text, header first.

    Cells are joined verbatim. Values containing commas, quotes or
    newlines are not escaped, so such input shifts columns in the output.
    """
    lines = [",".join(header for header, _ in CSV_COLUMNS)]
    for record in records:
        lines.append(",".join(_cell(record.get(field)) for _, field in CSV_COLUMNS))
    return "\n".join(lines)


def export_filename(today: date | None = None) -> str:
    """Download name for an export taken on the given day."""
    today = today or date.today()
    return f"risk-assessment-{today.isoformat()}.csv"
