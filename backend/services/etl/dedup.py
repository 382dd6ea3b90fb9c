"""
Master-Set Deduplication

Partitions newly normalized records into duplicates (already present in the
master set) and unique-new records.

A record is a duplicate when ANY master record matches it on all four
business-key components: project name, ordering agency, contractor and
address (see constants.DEDUP_KEY_FIELDS). Matching is exact and
case-sensitive after text coercion and trimming.

Master keys are indexed once in a set, so a run costs O(new + master)
instead of comparing every new record against every master record.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from constants import DEDUP_KEY_FIELDS
from services.etl.fingerprint import compute_dedup_key

logger = logging.getLogger(__name__)


@dataclass
class DedupResult:
    """Disjoint partition of the new records, in input order."""
    duplicates: List[Dict[str, Any]] = field(default_factory=list)
    unique_new: List[Dict[str, Any]] = field(default_factory=list)


def build_master_index(
    master: Sequence[Dict[str, Any]],
    key_fields: Optional[List[str]] = None
) -> set:
    """Index the master set by natural key."""
    key_fields = key_fields or DEDUP_KEY_FIELDS
    return {compute_dedup_key(row, key_fields) for row in master}


def deduplicate(
    new_records: Sequence[Dict[str, Any]],
    master: Sequence[Dict[str, Any]],
    key_fields: Optional[List[str]] = None
) -> DedupResult:
    """
    Split new records into duplicates and unique-new against the master set.

    Records are not compared against each other: two identical new records
    that are both absent from the master are both unique-new.

    Args:
        new_records: Merged and filtered new records
        master: Previously accepted records
        key_fields: Override for the natural key (default DEDUP_KEY_FIELDS)

    Returns:
        DedupResult with both partitions in input order
    """
    key_fields = key_fields or DEDUP_KEY_FIELDS
    master_index = build_master_index(master, key_fields)

    result = DedupResult()
    for record in new_records:
        if compute_dedup_key(record, key_fields) in master_index:
            result.duplicates.append(record)
        else:
            result.unique_new.append(record)

    logger.debug(
        f"Dedup against {len(master_index)} master keys: "
        f"{len(result.duplicates)} duplicates, {len(result.unique_new)} unique"
    )
    return result
