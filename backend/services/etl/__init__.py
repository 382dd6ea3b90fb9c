"""
ETL Services Package

Provides the run infrastructure for construction-project ingestion:
- RunContext: Unified context and run log for one pipeline run
- Fingerprinting: File hashing for provenance, natural keys for dedup
- Dedup: Partition new records against the master set
- Merge: Renumbering, master merge and export chunking
"""

from .run_context import LogEntry, RunContext, create_run_context
from .fingerprint import compute_file_sha256, compute_dedup_key
from .dedup import DedupResult, build_master_index, deduplicate
from .merge import chunk_records, make_date_tag, merge_into_master, renumber

__all__ = [
    'LogEntry',
    'RunContext',
    'create_run_context',
    'compute_file_sha256',
    'compute_dedup_key',
    'DedupResult',
    'build_master_index',
    'deduplicate',
    'chunk_records',
    'make_date_tag',
    'merge_into_master',
    'renumber',
]
