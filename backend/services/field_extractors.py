"""
Field Extractors - Pull typed values out of raw spreadsheet cells

Pure functions, no I/O. Every extractor returns None when it cannot find
a value; callers decide what the empty sentinel looks like in the record.

Handles:
- Dates: native date cells or YYYY.MM.DD / YYYYMMDD / YYYY-MM-DD text
- Whobuilds overview text: areas, floor counts, households, contract amount
- Project-name prefixes from procurement exports ("[긴급]", "(재공고)")
- Region codes from free-form addresses (ordered, first match wins)

OVERVIEW TEXT CAVEAT:
    The overview extractors are best-effort regular expressions over free
    text. Pattern order and fallback are fixed; ambiguous phrasing can still
    yield a wrong match (e.g. "건축면적 1234㎡" without grouping yields
    "234"). Treat that as a known limitation.

Usage:
    from services.field_extractors import parse_date, extract_area

    parse_date("2024.01.15")                       # "2024-01-15"
    extract_area("건축면적: 1,234.5㎡", "건축면적")    # "1234.5"
"""

import logging
import re
from datetime import date, datetime
from typing import Any, Iterable, Optional, Sequence, Tuple

from constants import REGION_MAPPING, REGION_MAPPING2
from utils.normalize import is_missing

logger = logging.getLogger(__name__)

__all__ = [
    'DATE_FORMATS',
    'parse_date',
    'extract_area',
    'extract_floors',
    'extract_households',
    'extract_amount',
    'clean_project_name',
    'contains_excluded_keyword',
    'map_region',
    'map_province',
    'map_sub_region',
]


# =============================================================================
# Constants
# =============================================================================

# Tried in order; first valid calendar date wins
DATE_FORMATS = ['%Y.%m.%d', '%Y%m%d', '%Y-%m-%d']

AREA_UNIT = '㎡'

# Integer part optionally thousands-grouped, optional decimal
_NUMBER = r'(\d{1,3}(?:,\d{3})*(?:\.\d+)?)'

HOUSEHOLD_PATTERNS = [
    re.compile(r'세대수\s*[:：]?\s*' + _NUMBER, re.IGNORECASE),
    re.compile(r'세\s*대\s*수\s*[:：]?\s*' + _NUMBER, re.IGNORECASE),
    re.compile(_NUMBER + r'\s*세대(?!수)', re.IGNORECASE),
    re.compile(_NUMBER + r'\s*세\s*대(?!\s*수)', re.IGNORECASE),
]

AMOUNT_PATTERNS = [
    re.compile(r'금액\s*[:：]?\s*' + _NUMBER, re.IGNORECASE),
    re.compile(r'공사비\s*[:：]?\s*' + _NUMBER, re.IGNORECASE),
    re.compile(r'공사금액\s*[:：]?\s*' + _NUMBER, re.IGNORECASE),
]

CLOSING_BRACKETS = re.compile(r'[\])]')
OPENING_BRACKETS = re.compile(r'[\[(]')

# Names this short are never inspected for prefixes
NAME_PREFIX_WINDOW = 4
MAX_PREFIX_LEN = 3


# =============================================================================
# Date Parsing
# =============================================================================

def parse_date(value: Any) -> Optional[str]:
    """
    Parse a cell value into a YYYY-MM-DD string.

    Native date cells (date, datetime, pandas Timestamp) are formatted
    directly. Anything else is treated as text and tried against
    DATE_FORMATS in order.

    Args:
        value: Cell value of unknown shape

    Returns:
        'YYYY-MM-DD', or None if the value is missing or no format matches

    Examples:
        >>> parse_date("2024.01.15")
        '2024-01-15'
        >>> parse_date("20240115")
        '2024-01-15'
        >>> parse_date("not a date") is None
        True
    """
    if is_missing(value):
        return None

    if isinstance(value, (datetime, date)):
        return value.strftime('%Y-%m-%d')

    # Excel stores 20240115 as a number; pandas may hand it over as 20240115.0
    if isinstance(value, float) and value.is_integer():
        value = int(value)

    text = str(value).strip()
    if not text:
        return None

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).strftime('%Y-%m-%d')
        except ValueError:
            continue

    logger.debug(f"Unparseable date value: '{text}'")
    return None


# =============================================================================
# Overview Text Extraction
# =============================================================================

def extract_area(text: str, label: str) -> Optional[str]:
    """
    Extract an area in ㎡ that follows the given label.

    Args:
        text: Free-form overview text
        label: '건축면적' (built-up area) or '대지면적' (site area)

    Returns:
        Number as text with grouping commas removed, or None
    """
    if not text:
        return None
    pattern = re.compile(re.escape(label) + r'.*?' + _NUMBER + AREA_UNIT, re.IGNORECASE)
    match = pattern.search(text)
    return match.group(1).replace(',', '') if match else None


def extract_floors(text: str, label: str) -> Optional[int]:
    """
    Extract a floor count that follows the given label.

    Args:
        text: Free-form overview text
        label: '지상' (above ground) or '지하' (basement)

    Returns:
        Floor count as int, or None
    """
    if not text:
        return None
    pattern = re.compile(re.escape(label) + r'\s*(\d+)(?:층)?', re.IGNORECASE)
    match = pattern.search(text)
    return int(match.group(1)) if match else None


def extract_households(text: str) -> Optional[str]:
    """
    Extract a household count from overview text.

    Patterns are tried in order: "세대수: n", "세 대 수 n", "n세대",
    "n 세 대". The number-first variants refuse to match when the label
    continues into "세대수", so "12 세대수" is not read as 12 households.

    Returns:
        Count as text with grouping commas removed, or None
    """
    if not text:
        return None
    for pattern in HOUSEHOLD_PATTERNS:
        match = pattern.search(text)
        if match:
            return match.group(1).replace(',', '')
    return None


def extract_amount(text: str) -> Optional[str]:
    """Extract a contract amount ('금액', '공사비', '공사금액', in that order)."""
    if not text:
        return None
    for pattern in AMOUNT_PATTERNS:
        match = pattern.search(text)
        if match:
            return match.group(1).replace(',', '')
    return None


# =============================================================================
# Name Handling
# =============================================================================

def clean_project_name(name: Any) -> Any:
    """
    Strip a leading bracketed tag from a procurement contract name.

    Rules:
    - Names of length <= 4 (and non-strings) are returned unchanged.
    - If the first 4 characters contain ']' or ')', return everything after
      that character, trimmed: "[A]Test Project" -> "Test Project".
    - Otherwise find the first ']' or ')' anywhere; if a '[' or '(' comes
      before it and the text before that opening bracket is at most 3
      characters (trimmed), strip through the closing bracket.
    - Otherwise return the name unchanged.
    """
    if not isinstance(name, str) or len(name) <= NAME_PREFIX_WINDOW:
        return name

    front_close = CLOSING_BRACKETS.search(name[:NAME_PREFIX_WINDOW])
    if front_close:
        return name[front_close.start() + 1:].strip()

    close = CLOSING_BRACKETS.search(name)
    if close:
        opening = OPENING_BRACKETS.search(name[:close.start()])
        if opening:
            prefix = name[:opening.start()].strip()
            if len(prefix) <= MAX_PREFIX_LEN:
                return name[close.start() + 1:].strip()

    return name


def contains_excluded_keyword(name: Any, keywords: Iterable[str]) -> bool:
    """
    Case-insensitive substring test of a project name against keywords.

    Keywords are trimmed before comparison; blank keywords are ignored.
    """
    if is_missing(name):
        return False
    lower = str(name).lower()
    for keyword in keywords:
        needle = keyword.strip().lower()
        if needle and needle in lower:
            return True
    return False


# =============================================================================
# Region Mapping
# =============================================================================

def map_region(address: Any, table: Sequence[Tuple[str, int]]) -> Any:
    """
    Map an address to a region code.

    The table is scanned in declaration order and the first entry whose
    substring occurs in the address wins, even if a later, longer entry
    also matches.

    Args:
        address: Free-form address
        table: Ordered (substring, code) pairs

    Returns:
        The matching code, or '' when the address is empty or nothing matches
    """
    if is_missing(address):
        return ""
    text = str(address)
    for region, code in table:
        if region in text:
            return code
    return ""


def map_province(address: Any, table: Optional[Sequence[Tuple[str, int]]] = None) -> Any:
    """Map an address to a province (시도) code."""
    return map_region(address, REGION_MAPPING if table is None else table)


def map_sub_region(address: Any, table: Optional[Sequence[Tuple[str, int]]] = None) -> Any:
    """Map an address to a sub-region (시군구) code."""
    return map_region(address, REGION_MAPPING2 if table is None else table)
