"""
Record Normalizer - Map raw source rows to the canonical project record

Two source schemas are supported:
- Whobuilds (source "01"): field-log export. Dates share one "start~end"
  cell; areas, floors, households and amount live in free-text overview.
- Narajang (source "02"): G2B procurement contract export. Structured
  date and amount columns, bracketed tags in contract names.

Each mapper returns a NormalizedRecord: the canonical record dict (all
COLUMNS present, '' when absent) plus the untouched raw construction-type
label. The label is only for eligibility filtering and is never part of the
record dict, so it cannot leak into an export.

Extraction failures never drop a row: the field is left as ''. Floor counts
of 0 and a contract revision of 0 are exported as '' as well.

Usage:
    from services.record_normalizer import RecordNormalizer

    normalizer = RecordNormalizer()
    records = normalizer.normalize_whobuilds(raw_rows)
    for item in records:
        item.record['공사명'], item.original_type
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from constants import (
    COLUMNS,
    COL_PROVINCE, COL_SUB_REGION, COL_TYPE, COL_NAME, COL_START_DATE,
    COL_COMPLETION_DATE, COL_ADDRESS, COL_AGENCY, COL_CONTRACTOR,
    COL_CONTRACTOR_CONTACT, COL_BUILDING_AREA, COL_BASEMENT_FLOORS,
    COL_GROUND_FLOORS, COL_HOUSEHOLDS, COL_SOURCE, COL_REGISTERED_DATE,
    COL_DETAIL_TYPE, COL_OVERVIEW, COL_FIRST_CONTRACT_DATE,
    COL_CONTRACT_REVISION, COL_CONTRACT_AMOUNT, COL_JOINT_CONTRACT,
    COL_COMPANY_TYPE, COL_MAIN_BUSINESS, COL_BUSINESS_NUMBER, COL_SITE_AREA,
    WB_TYPE, WB_NAME, WB_DATE_RANGE, WB_CONTACT, WB_OVERVIEW, WB_ADDRESS,
    WB_AGENCY, WB_CONTRACTOR, WB_REGISTERED_DATE,
    WB_ADDRESS_VICINITY, WB_PHONE_PREFIX,
    NJ_TYPE, NJ_NAME, NJ_START_DATE, NJ_COMPLETION_DATE, NJ_REFERENCE_DATE,
    NJ_FIRST_CONTRACT_DATE, NJ_SITE_REGION, NJ_AGENCY, NJ_CONTRACTOR,
    NJ_CONTRACT_REVISION, NJ_CONTRACT_AMOUNT, NJ_JOINT_METHOD,
    NJ_COMPANY_TYPE, NJ_COMPANY_REGION, NJ_BUSINESS_NUMBER, NJ_SOLE_CONTRACT,
    NARAJANG_DEFAULT_CONSTR_CODE, SOURCE_WHOBUILDS, SOURCE_NARAJANG,
    LookupTables, get_default_lookup_tables,
)
from services.field_extractors import (
    parse_date,
    extract_area,
    extract_floors,
    extract_households,
    extract_amount,
    clean_project_name,
    map_region,
)
from utils.normalize import is_missing, or_empty, to_text

logger = logging.getLogger(__name__)

# Public API
__all__ = [
    'NormalizedRecord',
    'RecordNormalizer',
    'empty_record',
    'normalize_whobuilds_row',
    'normalize_narajang_row',
]

DATE_RANGE_SEPARATOR = '~'
CONTACT_SEPARATOR = '/'


@dataclass(frozen=True)
class NormalizedRecord:
    """A canonical record paired with filter-only metadata."""
    record: Dict[str, Any]
    original_type: str
    source: str


def empty_record() -> Dict[str, Any]:
    """A canonical record with every column set to ''."""
    return {col: "" for col in COLUMNS}


def _blank_if_none(value: Any) -> Any:
    return "" if value is None else value


class RecordNormalizer:
    """
    Maps Whobuilds and Narajang rows to canonical records.

    Keeps per-batch statistics on fields that could not be derived.
    """

    def __init__(self, tables: Optional[LookupTables] = None):
        """
        Initialize normalizer.

        Args:
            tables: Lookup tables (default: constants.get_default_lookup_tables())
        """
        self.tables = tables or get_default_lookup_tables()
        self._stats = {
            'whobuilds_rows': 0,
            'narajang_rows': 0,
            'unmapped_type': 0,
            'missing_region': 0,
            'missing_completion_date': 0,
        }

    def reset_stats(self) -> None:
        """Reset processing statistics."""
        for key in self._stats:
            self._stats[key] = 0

    def get_stats(self) -> Dict[str, int]:
        """Get processing statistics."""
        return dict(self._stats)

    # -------------------------------------------------------------------------
    # Whobuilds
    # -------------------------------------------------------------------------

    def normalize_whobuilds_row(self, row: Dict[str, Any]) -> NormalizedRecord:
        """
        Map a single Whobuilds row.

        Args:
            row: Raw row keyed by Whobuilds column names

        Returns:
            NormalizedRecord with source '01'
        """
        self._stats['whobuilds_rows'] += 1

        original_type = to_text(row.get(WB_TYPE))
        date_range = to_text(row.get(WB_DATE_RANGE)).split(DATE_RANGE_SEPARATOR)
        contact = to_text(row.get(WB_CONTACT)).split(CONTACT_SEPARATOR)
        overview = to_text(row.get(WB_OVERVIEW))
        address_raw = row.get(WB_ADDRESS)

        start_date = parse_date(date_range[0])
        completion_date = parse_date(date_range[1]) if len(date_range) > 1 else None

        record = empty_record()
        record.update({
            COL_PROVINCE: map_region(address_raw, self.tables.provinces),
            COL_SUB_REGION: map_region(address_raw, self.tables.sub_regions),
            COL_TYPE: self.tables.construction_types.get(original_type, ""),
            COL_NAME: or_empty(row.get(WB_NAME)),
            COL_START_DATE: _blank_if_none(start_date),
            COL_COMPLETION_DATE: _blank_if_none(completion_date),
            COL_ADDRESS: to_text(address_raw).replace(WB_ADDRESS_VICINITY, '', 1),
            COL_AGENCY: or_empty(row.get(WB_AGENCY)),
            COL_CONTRACTOR: or_empty(row.get(WB_CONTRACTOR)),
            COL_CONTRACTOR_CONTACT: contact[0].replace(WB_PHONE_PREFIX, '', 1).strip(),
            COL_BUILDING_AREA: _blank_if_none(extract_area(overview, '건축면적')),
            COL_BASEMENT_FLOORS: extract_floors(overview, '지하') or "",
            COL_GROUND_FLOORS: extract_floors(overview, '지상') or "",
            COL_HOUSEHOLDS: _blank_if_none(extract_households(overview)),
            COL_SOURCE: SOURCE_WHOBUILDS,
            COL_REGISTERED_DATE: _blank_if_none(parse_date(row.get(WB_REGISTERED_DATE))),
            COL_DETAIL_TYPE: self.tables.detail_types.get(original_type, ""),
            COL_OVERVIEW: overview,
            COL_CONTRACT_AMOUNT: _blank_if_none(extract_amount(overview)),
            COL_SITE_AREA: _blank_if_none(extract_area(overview, '대지면적')),
        })

        self._track_misses(record, original_type)
        return NormalizedRecord(record=record, original_type=original_type, source=SOURCE_WHOBUILDS)

    # -------------------------------------------------------------------------
    # Narajang
    # -------------------------------------------------------------------------

    def normalize_narajang_row(self, row: Dict[str, Any]) -> NormalizedRecord:
        """
        Map a single Narajang (procurement) row.

        Unmapped procurement classes fall back to the 'other' code. The
        contract amount is passed through as a number (missing -> 0).

        Args:
            row: Raw row keyed by Narajang column names

        Returns:
            NormalizedRecord with source '02'
        """
        self._stats['narajang_rows'] += 1

        original_type = to_text(row.get(NJ_TYPE))
        site_region = row.get(NJ_SITE_REGION)
        amount = row.get(NJ_CONTRACT_AMOUNT)

        record = empty_record()
        record.update({
            COL_PROVINCE: map_region(site_region, self.tables.provinces),
            COL_SUB_REGION: map_region(site_region, self.tables.sub_regions),
            COL_TYPE: self.tables.construction_types.get(original_type) or NARAJANG_DEFAULT_CONSTR_CODE,
            COL_NAME: or_empty(clean_project_name(row.get(NJ_NAME))),
            COL_START_DATE: _blank_if_none(parse_date(row.get(NJ_START_DATE))),
            COL_COMPLETION_DATE: _blank_if_none(parse_date(row.get(NJ_COMPLETION_DATE))),
            COL_ADDRESS: or_empty(site_region),
            COL_AGENCY: or_empty(row.get(NJ_AGENCY)),
            COL_CONTRACTOR: or_empty(row.get(NJ_CONTRACTOR)),
            COL_SOURCE: SOURCE_NARAJANG,
            COL_REGISTERED_DATE: _blank_if_none(parse_date(row.get(NJ_REFERENCE_DATE))),
            COL_DETAIL_TYPE: self.tables.detail_types.get(original_type, ""),
            COL_FIRST_CONTRACT_DATE: _blank_if_none(parse_date(row.get(NJ_FIRST_CONTRACT_DATE))),
            COL_CONTRACT_REVISION: or_empty(row.get(NJ_CONTRACT_REVISION)) or "",
            COL_CONTRACT_AMOUNT: 0 if is_missing(amount) else amount,
            COL_JOINT_CONTRACT: 'N' if row.get(NJ_JOINT_METHOD) == NJ_SOLE_CONTRACT else 'Y',
            COL_COMPANY_TYPE: or_empty(row.get(NJ_COMPANY_TYPE)),
            COL_MAIN_BUSINESS: or_empty(row.get(NJ_COMPANY_REGION)),
            COL_BUSINESS_NUMBER: or_empty(row.get(NJ_BUSINESS_NUMBER)),
        })

        self._track_misses(record, original_type)
        return NormalizedRecord(record=record, original_type=original_type, source=SOURCE_NARAJANG)

    # -------------------------------------------------------------------------
    # Batch helpers
    # -------------------------------------------------------------------------

    def normalize_whobuilds(self, rows: Sequence[Dict[str, Any]]) -> List[NormalizedRecord]:
        """Map all Whobuilds rows, in order."""
        return self._normalize_all(rows, self.normalize_whobuilds_row, 'Whobuilds')

    def normalize_narajang(self, rows: Sequence[Dict[str, Any]]) -> List[NormalizedRecord]:
        """Map all Narajang rows, in order."""
        return self._normalize_all(rows, self.normalize_narajang_row, 'Narajang')

    def _normalize_all(self, rows, mapper, label: str) -> List[NormalizedRecord]:
        self.reset_stats()
        normalized = [mapper(row) for row in rows]

        misses = []
        for key in ('unmapped_type', 'missing_region', 'missing_completion_date'):
            if self._stats[key] > 0:
                misses.append(f"{key}={self._stats[key]}")
        miss_detail = f" ({', '.join(misses)})" if misses else ""

        logger.info(f"Normalized {len(normalized)} {label} rows{miss_detail}")
        return normalized

    def _track_misses(self, record: Dict[str, Any], original_type: str) -> None:
        if original_type not in self.tables.construction_types:
            self._stats['unmapped_type'] += 1
        if record[COL_PROVINCE] == "":
            self._stats['missing_region'] += 1
        if record[COL_COMPLETION_DATE] == "":
            self._stats['missing_completion_date'] += 1


# =============================================================================
# Module-level convenience functions
# =============================================================================

def normalize_whobuilds_row(row: Dict[str, Any], tables: Optional[LookupTables] = None) -> NormalizedRecord:
    """Map one Whobuilds row with a throwaway normalizer."""
    return RecordNormalizer(tables).normalize_whobuilds_row(row)


def normalize_narajang_row(row: Dict[str, Any], tables: Optional[LookupTables] = None) -> NormalizedRecord:
    """Map one Narajang row with a throwaway normalizer."""
    return RecordNormalizer(tables).normalize_narajang_row(row)
