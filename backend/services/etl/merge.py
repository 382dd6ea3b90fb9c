"""
Merge & Renumber

"No." is a display sequence, not an identifier: it is reassigned from 1 on
every export and every master update, in input order, and never derived
from any other field. Every function here returns new record dicts; inputs
are left untouched.
"""
from datetime import date
from typing import Any, Dict, List, Sequence

from constants import COL_NO


def renumber(records: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Return copies of the records with "No." set to 1..n.

    "No." is placed first; the remaining fields keep their order.
    """
    renumbered = []
    for i, record in enumerate(records, start=1):
        row = {COL_NO: i}
        row.update((k, v) for k, v in record.items() if k != COL_NO)
        renumbered.append(row)
    return renumbered


def merge_into_master(
    master: Sequence[Dict[str, Any]],
    unique_new: Sequence[Dict[str, Any]]
) -> List[Dict[str, Any]]:
    """Append unique-new records to the master set and renumber the whole."""
    return renumber(list(master) + list(unique_new))


def chunk_records(records: Sequence[Dict[str, Any]], chunk_size: int) -> List[List[Dict[str, Any]]]:
    """
    Split records into contiguous chunks of chunk_size (last may be shorter).

    Each chunk is renumbered independently from 1.

    Raises:
        ValueError: If chunk_size is not positive
    """
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    return [
        renumber(records[start:start + chunk_size])
        for start in range(0, len(records), chunk_size)
    ]


def make_date_tag(today: date) -> str:
    """Format the run date as YYYYMMDD for export file names."""
    return today.strftime('%Y%m%d')
