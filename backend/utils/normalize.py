"""
Input Normalization Utilities
=============================

Single source of truth for coercing spreadsheet cell values.
Cells arrive from pandas, so "missing" can be None, NaN, NaT or an empty
string; every helper here treats all of those the same way.

Usage:
    from utils.normalize import to_text, to_list, is_missing

    name = to_text(row.get('공사명'))          # '' when missing
    keywords = to_list(os.getenv("PIPELINE_EXCLUDED_KEYWORDS"))
"""

import math
from typing import Any, Optional

import pandas as pd


def is_missing(value: Any) -> bool:
    """
    True for None, NaN, NaT and empty strings.

    Containers and other non-scalars are never missing.
    """
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (list, tuple, dict, set)):
        return False
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def or_empty(value: Any) -> Any:
    """Pass a cell value through, replacing missing values with ''."""
    return "" if is_missing(value) else value


def to_text(value: Any) -> str:
    """
    Coerce a cell value to text.

    Missing -> ''. Integral floats lose their trailing '.0' (pandas turns
    integer columns with blanks into float64, so 1234 arrives as 1234.0).
    """
    if is_missing(value):
        return ""
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, pd.Timestamp):
        return value.isoformat()
    return str(value)


def to_number(value: Any) -> float:
    """
    Coerce a cell value to a float for threshold comparisons.

    Missing -> 0.0 (the procurement export leaves zero amounts blank).
    Unparseable text -> NaN, which fails every comparison.
    """
    if is_missing(value):
        return 0.0
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value).strip()
    if text == "":
        return 0.0
    try:
        return float(text)
    except ValueError:
        return math.nan


def to_list(
    value: Any,
    *,
    default: Optional[list] = None,
    separator: str = ",",
) -> list:
    """
    Convert comma-separated string to a list of trimmed, non-empty items.

    Lists pass through with the same trimming applied.

    Examples:
        "조경공사, 전기공사,," -> ["조경공사", "전기공사"]
        ["a ", "", " b"] -> ["a", "b"]
        None -> []
    """
    if value is None or value == "":
        return default if default is not None else []
    if isinstance(value, (list, tuple)):
        return [str(item).strip() for item in value if str(item).strip()]
    return [item.strip() for item in str(value).split(separator) if item.strip()]


