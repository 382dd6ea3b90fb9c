"""
Excel Loader - Tabular reader/writer for source, master and export files

Source spreadsheets (Whobuilds, Narajang) and the master file are read
wholesale from their first sheet into a list of row dicts keyed by header
text. Exports are written with the canonical column order.

Usage:
    from services.excel_loader import read_excel_file, export_results

    rows = read_excel_file('data/whobuilds_2024_06.xlsx')
    paths = export_results(result, output_dir='output')
"""
import logging
import os
from typing import Any, Dict, List, Sequence

import pandas as pd

from constants import (
    COLUMNS,
    EXPORT_CHUNK_NAME,
    EXPORT_DUPLICATES_NAME,
    EXPORT_MASTER_NAME,
    EXPORT_RESULT_NAME,
)

logger = logging.getLogger(__name__)

EXCEL_EXTENSIONS = ('.xlsx', '.xlsm')
SHEET_NAME = 'Sheet1'


class TabularReadError(Exception):
    """Raised when an input file is missing or cannot be parsed."""
    pass


# =============================================================================
# READING
# =============================================================================

def read_excel_file(file_path: str) -> List[Dict[str, Any]]:
    """
    Read Excel or CSV file and return list of row dictionaries.

    Header text is stripped but otherwise kept as-is. Empty cells become
    None.

    Raises:
        TabularReadError: File missing, unsupported or unreadable
    """
    if not os.path.exists(file_path):
        raise TabularReadError(f"File not found: {file_path}")

    lowered = file_path.lower()
    try:
        if lowered.endswith('.csv'):
            df = _read_csv(file_path)
        elif lowered.endswith(EXCEL_EXTENSIONS):
            df = _read_with_pandas(file_path)
        else:
            raise TabularReadError(
                f"Unsupported file type: {os.path.basename(file_path)} "
                f"(expected .csv or {'/'.join(EXCEL_EXTENSIONS)})"
            )
    except TabularReadError:
        raise
    except Exception as e:
        raise TabularReadError(f"Could not read {os.path.basename(file_path)}: {e}") from e

    df.columns = [str(c).strip() for c in df.columns]
    df = df.astype(object).where(df.notna(), None)

    rows = df.to_dict('records')
    logger.debug(f"Read {len(rows)} rows from {file_path}")
    return rows


def _read_csv(file_path: str) -> pd.DataFrame:
    """Read CSV file (UTF-8, BOM tolerated)."""
    return pd.read_csv(file_path, encoding='utf-8-sig')


def _read_with_pandas(file_path: str) -> pd.DataFrame:
    """Read the first sheet of a workbook."""
    return pd.read_excel(file_path, sheet_name=0, engine='openpyxl')


# =============================================================================
# WRITING
# =============================================================================

def _ordered_columns(records: Sequence[Dict[str, Any]]) -> List[str]:
    """Canonical columns first, then any extra columns in first-seen order."""
    columns = list(COLUMNS)
    seen = set(columns)
    for record in records:
        for key in record:
            if key not in seen:
                seen.add(key)
                columns.append(key)
    return columns


def write_excel_file(records: Sequence[Dict[str, Any]], file_path: str) -> str:
    """
    Write records to a single-sheet workbook.

    Columns follow COLUMNS regardless of which fields are populated; an
    empty record list still produces the header row.

    Returns:
        The path written
    """
    df = pd.DataFrame(list(records), columns=_ordered_columns(records))
    df.to_excel(file_path, sheet_name=SHEET_NAME, index=False, engine='openpyxl')
    logger.debug(f"Wrote {len(df)} rows to {file_path}")
    return file_path


def export_results(result, output_dir: str) -> List[str]:
    """
    Write every artifact of a pipeline run.

    Files (tag = run date as YYYYMMDD):
        잠재기회_중복데이터_{tag}.xlsx  duplicates (only if any)
        잠재기회_업로드양식_{tag}.xlsx  unique-new records
        잠재기회_통합파일_{tag}.xlsx    updated master
        잠재기회_데이터_{NN}.xlsx       one per chunk of the unique-new records

    Args:
        result: PipelineResult
        output_dir: Target directory (created if missing)

    Returns:
        Paths written, in the order above

    Raises:
        OSError: A file could not be written. Files already written by this
            call are removed first.
    """
    os.makedirs(output_dir, exist_ok=True)
    tag = result.date_tag

    targets = []
    if result.duplicates:
        targets.append((EXPORT_DUPLICATES_NAME.format(date_tag=tag), result.duplicates))
    targets.append((EXPORT_RESULT_NAME.format(date_tag=tag), result.result_records))
    targets.append((EXPORT_MASTER_NAME.format(date_tag=tag), result.updated_master))
    for index, chunk in enumerate(result.chunks(), start=1):
        targets.append((EXPORT_CHUNK_NAME.format(index=index), chunk))

    written = []
    try:
        for name, records in targets:
            path = os.path.join(output_dir, name)
            write_excel_file(records, path)
            written.append(path)
    except OSError as e:
        logger.error(f"Export failed after {len(written)} files: {e}")
        _remove_files(written)
        raise

    logger.info(f"Exported {len(written)} files to {output_dir}")
    return written


def _remove_files(paths: Sequence[str]) -> None:
    for path in paths:
        try:
            os.remove(path)
        except OSError as e:
            logger.warning(f"Could not remove partial export {path}: {e}")
