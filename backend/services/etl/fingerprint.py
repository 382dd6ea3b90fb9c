"""
ETL Fingerprinting Utilities

Provides:
- File-level fingerprinting (provenance of each input spreadsheet)
- Natural-key extraction (master-set deduplication)

All keys are stable and reproducible across runs.
"""
import hashlib
from typing import Any, Dict, List, Tuple

from utils.normalize import to_text


def compute_file_sha256(filepath: str) -> str:
    """
    Compute SHA256 hash of entire file.

    Recorded on the run context so an export can be traced back to the
    exact input files that produced it.

    Args:
        filepath: Path to file

    Returns:
        64-character hex SHA256 hash
    """
    sha256 = hashlib.sha256()
    with open(filepath, 'rb') as f:
        for chunk in iter(lambda: f.read(8192), b''):
            sha256.update(chunk)
    return sha256.hexdigest()


def compute_dedup_key(row: Dict[str, Any], natural_key_fields: List[str]) -> Tuple[str, ...]:
    """
    Build the natural key tuple used to match a record against the master set.

    Each component is coerced to text (missing -> '') and stripped of
    surrounding whitespace. Case is preserved: keys compare exactly.

    Unlike a row hash, the tuple is kept as-is so that equality is exact
    string equality, with no lowercasing or number reformatting beyond the
    integral-float fix in to_text().

    Args:
        row: Record dict (canonical column names)
        natural_key_fields: Field names, in key order

    Returns:
        Tuple of normalized key components

    Example:
        >>> compute_dedup_key({'공사명': ' A동 신축 ', '주소': None}, ['공사명', '주소'])
        ('A동 신축', '')
    """
    return tuple(to_text(row.get(field)).strip() for field in natural_key_fields)
