"""
Construction Project Pipeline - One batch run from raw files to exports

Stages:
    1. Read Whobuilds files (in order) and the Narajang file
    2. Normalize each source to canonical records
    3. Per-source eligibility filters
    4. Concatenate (Whobuilds first) and apply the structural-bounds filter
    5. Read the master file and deduplicate against it
    6. Renumber the unique-new records and the updated master

Every run gets its own RunContext; its log and counts come back on the
result, and on failure the context is marked failed before the error is
re-raised.

Usage:
    from services.pipeline import run_pipeline
    from services.pipeline_config import PipelineConfig

    result = run_pipeline(['wb_06.xlsx'], 'nj_06.xlsx', 'master.xlsx', PipelineConfig())
    result.chunks()  # [[...500 records], [...], ...]
"""
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

from constants import LookupTables
from services.eligibility_filter import (
    EligibilityFilter,
    STAGE_MERGED,
    STAGE_NARAJANG,
    STAGE_WHOBUILDS,
)
from services.etl.dedup import deduplicate
from services.etl.fingerprint import compute_file_sha256
from services.etl.merge import chunk_records, make_date_tag, merge_into_master, renumber
from services.etl.run_context import RunContext, create_run_context
from services.excel_loader import read_excel_file
from services.pipeline_config import PipelineConfig
from services.record_normalizer import NormalizedRecord, RecordNormalizer

logger = logging.getLogger(__name__)

Reader = Callable[[str], List[Dict[str, Any]]]


@dataclass
class PipelineResult:
    """Everything a run produces. Records are already renumbered."""
    result_records: List[Dict[str, Any]]
    duplicates: List[Dict[str, Any]]
    updated_master: List[Dict[str, Any]]
    date_tag: str
    chunk_size: int
    context: RunContext = field(repr=False)

    def chunks(self) -> List[List[Dict[str, Any]]]:
        """Unique-new records split for upload, each chunk numbered from 1."""
        return chunk_records(self.result_records, self.chunk_size)


def _read(reader: Reader, path: str, ctx: RunContext) -> List[Dict[str, Any]]:
    """Read a file and record its fingerprint when it exists on disk."""
    rows = reader(path)
    if os.path.isfile(path):
        ctx.file_fingerprints[path] = compute_file_sha256(path)
    ctx.total_files += 1
    return rows


def _records(items: Sequence[NormalizedRecord]) -> List[Dict[str, Any]]:
    return [item.record for item in items]


def run_pipeline(
    whobuilds_files: Sequence[str],
    narajang_file: Optional[str] = None,
    master_file: Optional[str] = None,
    config: Optional[PipelineConfig] = None,
    reader: Reader = read_excel_file,
    tables: Optional[LookupTables] = None,
) -> PipelineResult:
    """
    Run one batch.

    Args:
        whobuilds_files: Whobuilds exports, concatenated in this order
        narajang_file: Narajang export, or None
        master_file: Previously accumulated master, or None (empty master)
        config: Run settings (default: PipelineConfig())
        reader: Tabular reader returning row dicts (default: read_excel_file)
        tables: Lookup tables override (default: constants tables)

    Returns:
        PipelineResult

    Raises:
        TabularReadError: An input file could not be read (context marked failed)
    """
    config = config or PipelineConfig()
    ctx = create_run_context(cutoff_date=config.cutoff_date, date_tag=make_date_tag(config.today))
    normalizer = RecordNormalizer(tables)
    rules = EligibilityFilter(config)

    ctx.log("Pipeline starting...")
    ctx.log(
        f"Completion date filter (Cutoff): {ctx.cutoff_date} "
        f"(Today + {config.completion_offset_days} days)"
    )

    try:
        # ---------------------------------------------------------------------
        # Whobuilds
        # ---------------------------------------------------------------------
        whobuilds_kept: List[NormalizedRecord] = []
        if whobuilds_files:
            raw_rows: List[Dict[str, Any]] = []
            for path in whobuilds_files:
                ctx.log(f"Reading Whobuilds file: {os.path.basename(path)}")
                raw_rows.extend(_read(reader, path, ctx))
            ctx.whobuilds_rows_loaded = len(raw_rows)
            ctx.log(f"Loaded {len(raw_rows)} records from Whobuilds.")

            ctx.mark_stage('normalizing')
            normalized = normalizer.normalize_whobuilds(raw_rows)

            ctx.mark_stage('filtering')
            filtered = rules.apply(STAGE_WHOBUILDS, normalized)
            ctx.add_rejections(filtered.rejections)
            whobuilds_kept = filtered.kept
            ctx.whobuilds_rows_kept = len(whobuilds_kept)
            ctx.log(f"Whobuilds post-filter: {len(whobuilds_kept)} records.")

        # ---------------------------------------------------------------------
        # Narajang
        # ---------------------------------------------------------------------
        narajang_kept: List[NormalizedRecord] = []
        if narajang_file:
            ctx.mark_stage('reading')
            ctx.log(f"Reading Narajang file: {os.path.basename(narajang_file)}")
            raw_rows = _read(reader, narajang_file, ctx)
            ctx.narajang_rows_loaded = len(raw_rows)

            ctx.mark_stage('normalizing')
            normalized = normalizer.normalize_narajang(raw_rows)

            ctx.mark_stage('filtering')
            filtered = rules.apply(STAGE_NARAJANG, normalized)
            ctx.add_rejections(filtered.rejections)
            narajang_kept = filtered.kept
            ctx.narajang_rows_kept = len(narajang_kept)
            ctx.log(
                f"Narajang post-filter (Min Amount: {config.min_contract_amount:,.0f}): "
                f"{len(narajang_kept)} records."
            )

        # ---------------------------------------------------------------------
        # Merge + structural bounds
        # ---------------------------------------------------------------------
        merged = whobuilds_kept + narajang_kept
        ctx.rows_merged = len(merged)
        bounded = rules.apply(STAGE_MERGED, merged)
        ctx.add_rejections(bounded.rejections)
        new_records = _records(bounded.kept)
        ctx.rows_after_bounds = len(new_records)
        ctx.log(f"Combined and Validated New Data: {len(new_records)} records.")

        # ---------------------------------------------------------------------
        # Master + dedup
        # ---------------------------------------------------------------------
        master: List[Dict[str, Any]] = []
        if master_file:
            ctx.mark_stage('reading')
            ctx.log(f"Reading Master file: {os.path.basename(master_file)}")
            master = _read(reader, master_file, ctx)
            ctx.master_rows = len(master)
            ctx.log(f"Existing Master contains {len(master)} records.")

        ctx.mark_stage('deduplicating')
        dedup = deduplicate(new_records, master)
        ctx.rows_duplicate = len(dedup.duplicates)
        ctx.rows_unique = len(dedup.unique_new)
        ctx.log(f"Deduplication: {ctx.rows_duplicate} dups, {ctx.rows_unique} unique.")

        ctx.mark_stage('merging')
        result_records = renumber(dedup.unique_new)
        updated_master = merge_into_master(master, dedup.unique_new)
        ctx.master_rows_after = len(updated_master)

    except Exception as e:
        ctx.fail(ctx.status, str(e))
        raise

    ctx.log(f"Final Master size: {len(updated_master)}.", 'success')
    ctx.complete()

    ok, _, message = ctx.reconciliation_check()
    if not ok:
        logger.warning(f"Run {ctx.run_id[:8]}: {message}")

    return PipelineResult(
        result_records=result_records,
        duplicates=dedup.duplicates,
        updated_master=updated_master,
        date_tag=ctx.date_tag,
        chunk_size=config.chunk_size,
        context=ctx,
    )
