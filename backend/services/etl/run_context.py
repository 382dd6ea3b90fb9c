"""
ETL Run Context

Unified context object for one pipeline run.
Prevents "threading parameters everywhere" and keeps the pipeline consistent.

The run log lives here, not in a module global: every run creates its own
RunContext and hands it back with the result, so two runs never share log
state.

Usage:
    ctx = create_run_context()
    ctx.log("Reading Whobuilds file: a.xlsx")

    # During processing
    ctx.whobuilds_rows_loaded += len(rows)

    # After completion
    ctx.complete()
    print(ctx.summary())
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Any, Optional, List
from uuid import uuid4

logger = logging.getLogger(__name__)

LOG_LEVELS = ('info', 'success', 'warning', 'error')

# 'success' is a presentation level; it is logged as INFO
_PY_LEVELS = {
    'info': logging.INFO,
    'success': logging.INFO,
    'warning': logging.WARNING,
    'error': logging.ERROR,
}


@dataclass(frozen=True)
class LogEntry:
    """One timestamped, leveled message in the run log."""
    timestamp: str
    level: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {'timestamp': self.timestamp, 'level': self.level, 'message': self.message}


@dataclass
class RunContext:
    """
    Shared context across all pipeline stages.

    This object is passed through the entire pipeline, accumulating
    per-stage counts and log entries as each stage completes.
    """

    # Run identification
    run_id: str = field(default_factory=lambda: str(uuid4()))

    # Timing
    started_at: datetime = field(default_factory=datetime.now)
    completed_at: Optional[datetime] = None

    # Status
    status: str = "reading"  # reading | normalizing | filtering | deduplicating | merging | completed | failed

    # Run configuration
    cutoff_date: str = ""
    date_tag: str = ""

    # File tracking
    file_fingerprints: Dict[str, str] = field(default_factory=dict)
    total_files: int = 0

    # Row counts by stage
    whobuilds_rows_loaded: int = 0
    whobuilds_rows_kept: int = 0
    narajang_rows_loaded: int = 0
    narajang_rows_kept: int = 0
    rows_merged: int = 0
    rows_after_bounds: int = 0
    master_rows: int = 0
    rows_duplicate: int = 0
    rows_unique: int = 0
    master_rows_after: int = 0

    # Rejections by rule name (first failing rule per record)
    rejections: Dict[str, int] = field(default_factory=dict)

    # Run log
    logs: List[LogEntry] = field(default_factory=list)

    # Error state
    error_message: Optional[str] = None
    error_stage: Optional[str] = None

    def log(self, message: str, level: str = 'info') -> LogEntry:
        """Append an entry to the run log and mirror it to the module logger."""
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {level}. Available: {list(LOG_LEVELS)}")
        entry = LogEntry(
            timestamp=datetime.now().strftime('%H:%M:%S'),
            level=level,
            message=message,
        )
        self.logs.append(entry)
        logger.log(_PY_LEVELS[level], message)
        return entry

    def mark_stage(self, stage: str):
        """Update status to current stage."""
        self.status = stage

    def add_rejections(self, counts: Dict[str, int]):
        """Merge per-rule rejection counts from a filter pass."""
        for rule_name, count in counts.items():
            self.rejections[rule_name] = self.rejections.get(rule_name, 0) + count

    def fail(self, stage: str, message: str):
        """Mark the run as failed."""
        self.status = 'failed'
        self.error_stage = stage
        self.error_message = message
        self.completed_at = datetime.now()
        self.log(f"오류 발생: {message}", 'error')

    def complete(self):
        """Mark the run as completed."""
        self.status = 'completed'
        self.completed_at = datetime.now()

    def to_record(self) -> Dict[str, Any]:
        """Convert to a flat dict (for JSON output)."""
        return {
            'run_id': self.run_id,
            'started_at': self.started_at.isoformat(),
            'completed_at': self.completed_at.isoformat() if self.completed_at else None,
            'status': self.status,
            'cutoff_date': self.cutoff_date,
            'date_tag': self.date_tag,
            'file_fingerprints': self.file_fingerprints,
            'total_files': self.total_files,
            'whobuilds_rows_loaded': self.whobuilds_rows_loaded,
            'whobuilds_rows_kept': self.whobuilds_rows_kept,
            'narajang_rows_loaded': self.narajang_rows_loaded,
            'narajang_rows_kept': self.narajang_rows_kept,
            'rows_merged': self.rows_merged,
            'rows_after_bounds': self.rows_after_bounds,
            'master_rows': self.master_rows,
            'rows_duplicate': self.rows_duplicate,
            'rows_unique': self.rows_unique,
            'master_rows_after': self.master_rows_after,
            'rejections': dict(self.rejections),
            'logs': [entry.to_dict() for entry in self.logs],
            'error_message': self.error_message,
            'error_stage': self.error_stage,
        }

    def summary(self) -> str:
        """Get human-readable summary of the run."""
        elapsed = (self.completed_at or datetime.now()) - self.started_at
        lines = [
            f"Run ID: {self.run_id[:8]}...",
            f"Status: {self.status}",
            f"Cutoff: {self.cutoff_date} | Tag: {self.date_tag}",
            f"Files: {self.total_files}",
            f"Whobuilds: loaded={self.whobuilds_rows_loaded}, kept={self.whobuilds_rows_kept}",
            f"Narajang: loaded={self.narajang_rows_loaded}, kept={self.narajang_rows_kept}",
            f"Pipeline: merged={self.rows_merged}, bounds={self.rows_after_bounds}, "
            f"duplicates={self.rows_duplicate}, unique={self.rows_unique}",
            f"Master: {self.master_rows} -> {self.master_rows_after}",
            f"Elapsed: {elapsed.total_seconds():.1f}s",
        ]
        if self.rejections:
            detail = ', '.join(f"{name}={count}" for name, count in self.rejections.items())
            lines.append(f"Rejected: {detail}")
        if self.error_message:
            lines.append(f"Error: {self.error_stage}: {self.error_message}")
        return '\n'.join(lines)

    def reconciliation_check(self) -> tuple:
        """
        Check that every normalized record is accounted for.

        loaded = kept-after-bounds + rejected-by-rule, and
        kept-after-bounds = duplicates + unique.

        Returns:
            (is_ok, unaccounted, message)
        """
        loaded = self.whobuilds_rows_loaded + self.narajang_rows_loaded
        rejected = sum(self.rejections.values())
        unaccounted = loaded - rejected - self.rows_after_bounds
        dedup_gap = self.rows_after_bounds - self.rows_duplicate - self.rows_unique

        if unaccounted == 0 and dedup_gap == 0:
            return (True, 0, "OK: all rows accounted for")
        return (False, unaccounted + dedup_gap, f"MISMATCH: {unaccounted + dedup_gap} rows unaccounted")


def create_run_context(cutoff_date: str = "", date_tag: str = "") -> RunContext:
    """
    Factory function to create a new RunContext.

    Args:
        cutoff_date: Completion-date cutoff (YYYY-MM-DD) for this run
        date_tag: YYYYMMDD tag used to name exported files

    Returns:
        New RunContext instance
    """
    return RunContext(cutoff_date=cutoff_date, date_tag=date_tag)
