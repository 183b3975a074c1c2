"""
CSV export: every field quoted, embedded quotes doubled, fixed column order.
"""
from __future__ import annotations

import csv
import io
import re

import pandas as pd

_UNSAFE_FILENAME_RE = re.compile(r'[\\/:*?"<>|\s]+')


def _format_cell(value) -> str:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return ""
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, float):
        value = float(value)
        return str(int(value)) if value.is_integer() else str(value)
    return str(value)


def to_csv(data: pd.DataFrame | list[dict], columns: list[tuple[str, str]]) -> str:
    """Render rows as CSV text with one header row in the given column order.

    columns: [(internal key, header label), ...]; keys missing from the
    data export as empty fields.
    """
    df = data if isinstance(data, pd.DataFrame) else pd.DataFrame(data)
    keys = [key for key, _ in columns]
    out = df.reindex(columns=keys).rename(columns=dict(columns))
    for col in out.columns:
        out[col] = out[col].map(_format_cell)
    return out.to_csv(index=False, quoting=csv.QUOTE_ALL, lineterminator="\n")


def read_csv(text: str) -> pd.DataFrame:
    """Parse an export back into strings (no type inference, no NaN)."""
    return pd.read_csv(io.StringIO(text), dtype=str, keep_default_na=False)


def export_filename(prefix: str, label: str | None = None, ext: str = "csv") -> str:
    """``{prefix}_{label}.{ext}`` with path-unsafe characters replaced."""
    if not label:
        return f"{prefix}.{ext}"
    safe = _UNSAFE_FILENAME_RE.sub("_", label.strip()).strip("_")[:40]
    return f"{prefix}_{safe}.{ext}" if safe else f"{prefix}.{ext}"
