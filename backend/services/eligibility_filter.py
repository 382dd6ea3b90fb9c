"""
Eligibility Filter - Ordered business rules that drop ineligible records

Rules are registered by name, per stage:
- whobuilds: defense_agency, completion_date, excluded_type, excluded_keyword
- narajang:  min_contract_amount, completion_date, excluded_type, excluded_keyword
- merged:    structural_bounds

Per-source rules run right after normalization (they read source-specific
fields and the raw type label); the structural check runs once after both
sources are concatenated.

Every rule is a pure predicate returning True when the record passes. A
record is kept when all rules pass; the first failing rule is counted so
each rejection shows up by name in the run log. Applying the same stage
twice removes nothing the second time.

Usage:
    rules = EligibilityFilter(config)
    result = rules.apply('whobuilds', normalized_records)
    result.kept, result.rejections  # {'completion_date': 12, ...}
"""
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence

from constants import (
    COL_AGENCY,
    COL_BASEMENT_FLOORS,
    COL_COMPLETION_DATE,
    COL_CONTRACT_AMOUNT,
    COL_GROUND_FLOORS,
    COL_NAME,
    DEFENSE_AGENCY,
)
from services.field_extractors import contains_excluded_keyword
from services.pipeline_config import PipelineConfig
from services.record_normalizer import NormalizedRecord
from utils.normalize import to_number, to_text

logger = logging.getLogger(__name__)

STAGE_WHOBUILDS = 'whobuilds'
STAGE_NARAJANG = 'narajang'
STAGE_MERGED = 'merged'

MAX_BASEMENT_FLOORS = 10   # exclusive
MAX_GROUND_FLOORS = 100    # exclusive


@dataclass
class RuleSpec:
    """Specification for an eligibility rule."""
    name: str
    function: Callable[[NormalizedRecord, 'EligibilityFilter'], bool]
    description: str = ""


@dataclass
class FilterResult:
    """Records that passed, and rejection counts by rule name."""
    kept: List[NormalizedRecord] = field(default_factory=list)
    rejections: Dict[str, int] = field(default_factory=dict)

    @property
    def rejected_count(self) -> int:
        return sum(self.rejections.values())


# =============================================================================
# Predicates (True = passes)
# =============================================================================

def not_defense_agency(item: NormalizedRecord, rules: 'EligibilityFilter') -> bool:
    return DEFENSE_AGENCY not in to_text(item.record.get(COL_AGENCY))


def completes_after_cutoff(item: NormalizedRecord, rules: 'EligibilityFilter') -> bool:
    """Completion date present and >= cutoff (ISO strings compare as dates)."""
    completion = item.record.get(COL_COMPLETION_DATE) or ""
    return bool(completion) and completion >= rules.cutoff_date


def type_not_excluded(item: NormalizedRecord, rules: 'EligibilityFilter') -> bool:
    return item.original_type not in rules.excluded_types


def name_not_excluded(item: NormalizedRecord, rules: 'EligibilityFilter') -> bool:
    return not contains_excluded_keyword(item.record.get(COL_NAME), rules.excluded_keywords)


def meets_min_contract_amount(item: NormalizedRecord, rules: 'EligibilityFilter') -> bool:
    """Numeric amount >= minimum. Non-numeric amounts are NaN and fail."""
    return to_number(item.record.get(COL_CONTRACT_AMOUNT)) >= rules.min_contract_amount


def _floor_within(value, limit: int) -> bool:
    if value == "" or value is None:
        return True
    return to_number(value) < limit


def within_structural_bounds(item: NormalizedRecord, rules: 'EligibilityFilter') -> bool:
    """Absent floor counts pass; present ones must be under the limits."""
    return (
        _floor_within(item.record.get(COL_BASEMENT_FLOORS), MAX_BASEMENT_FLOORS)
        and _floor_within(item.record.get(COL_GROUND_FLOORS), MAX_GROUND_FLOORS)
    )


# =============================================================================
# Rule Registry
# =============================================================================

_COMPLETION_RULE = RuleSpec(
    name='completion_date',
    function=completes_after_cutoff,
    description='Completion date missing or before today + offset',
)
_TYPE_RULE = RuleSpec(
    name='excluded_type',
    function=type_not_excluded,
    description='Raw construction-type label is in the excluded list (exact match)',
)
_KEYWORD_RULE = RuleSpec(
    name='excluded_keyword',
    function=name_not_excluded,
    description='Project name contains an excluded keyword (case-insensitive)',
)

STAGE_RULES: Dict[str, List[RuleSpec]] = {
    STAGE_WHOBUILDS: [
        RuleSpec(
            name='defense_agency',
            function=not_defense_agency,
            description='Ordered by the defense acquisition agency',
        ),
        _COMPLETION_RULE,
        _TYPE_RULE,
        _KEYWORD_RULE,
    ],
    STAGE_NARAJANG: [
        RuleSpec(
            name='min_contract_amount',
            function=meets_min_contract_amount,
            description='Contract amount below the configured minimum',
        ),
        _COMPLETION_RULE,
        _TYPE_RULE,
        _KEYWORD_RULE,
    ],
    STAGE_MERGED: [
        RuleSpec(
            name='structural_bounds',
            function=within_structural_bounds,
            description=f'Basement floors >= {MAX_BASEMENT_FLOORS} or ground floors >= {MAX_GROUND_FLOORS}',
        ),
    ],
}


class EligibilityFilter:
    """
    Applies the registered rules for a stage using one run's settings.

    The cutoff date is computed once, when the filter is built, so every
    record in a run is judged against the same date.
    """

    def __init__(self, config: PipelineConfig):
        self.config = config
        self.cutoff_date = config.cutoff_date
        self.excluded_types = list(config.excluded_types)
        self.excluded_keywords = list(config.excluded_keywords)
        self.min_contract_amount = config.min_contract_amount

    def first_failure(self, stage: str, item: NormalizedRecord) -> Optional[str]:
        """Name of the first rule the record fails, or None if it passes."""
        for spec in self._rules_for(stage):
            if not spec.function(item, self):
                return spec.name
        return None

    def is_eligible(self, stage: str, item: NormalizedRecord) -> bool:
        return self.first_failure(stage, item) is None

    def apply(self, stage: str, items: Sequence[NormalizedRecord]) -> FilterResult:
        """
        Filter records for a stage, keeping input order.

        Args:
            stage: 'whobuilds', 'narajang' or 'merged'
            items: Normalized records

        Returns:
            FilterResult (new list; inputs are not modified)
        """
        result = FilterResult()
        for item in items:
            failed = self.first_failure(stage, item)
            if failed is None:
                result.kept.append(item)
            else:
                result.rejections[failed] = result.rejections.get(failed, 0) + 1

        if result.rejections:
            detail = ', '.join(f"{name}={count}" for name, count in result.rejections.items())
            logger.debug(f"{stage}: kept {len(result.kept)}, rejected {result.rejected_count} ({detail})")
        return result

    def _rules_for(self, stage: str) -> List[RuleSpec]:
        if stage not in STAGE_RULES:
            available = list(STAGE_RULES.keys())
            raise KeyError(f"Unknown filter stage: {stage}. Available: {available}")
        return STAGE_RULES[stage]

    @staticmethod
    def get_rule_info(stage: str) -> List[Dict[str, str]]:
        """Describe the rules registered for a stage, in evaluation order."""
        return [
            {'name': spec.name, 'description': spec.description}
            for spec in STAGE_RULES[stage]
        ]
