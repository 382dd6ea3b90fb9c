"""
Pipeline Configuration - Validated, immutable settings for one run

Environment Variables:
    PIPELINE_CHUNK_SIZE: int > 0 (default: 500)
        Rows per upload chunk.

    PIPELINE_COMPLETION_OFFSET_DAYS: int 0-365 (default: 30)
        Projects completing before today + N days are dropped.

    PIPELINE_MIN_CONTRACT_AMOUNT: number >= 0 (default: 10,000,000)
        Minimum Narajang contract amount (inclusive).

    PIPELINE_EXCLUDED_TYPES: comma-separated (default: constants.EXCLUDED_CONSTR_TYPES)
        Raw construction-type labels to drop (exact match).

    PIPELINE_EXCLUDED_KEYWORDS: comma-separated (default: constants.EXCLUDED_KEYWORDS)
        Project-name keywords to drop (case-insensitive substring).

Values are read when from_env() is called, not at import, so a process can
change its environment between runs.
"""

import logging
import os
from datetime import date
from typing import Annotated, Any, List

from dateutil.relativedelta import relativedelta
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from constants import EXCLUDED_CONSTR_TYPES, EXCLUDED_KEYWORDS
from utils.normalize import to_list

logger = logging.getLogger(__name__)

ENV_CHUNK_SIZE = 'PIPELINE_CHUNK_SIZE'
ENV_OFFSET_DAYS = 'PIPELINE_COMPLETION_OFFSET_DAYS'
ENV_MIN_AMOUNT = 'PIPELINE_MIN_CONTRACT_AMOUNT'
ENV_EXCLUDED_TYPES = 'PIPELINE_EXCLUDED_TYPES'
ENV_EXCLUDED_KEYWORDS = 'PIPELINE_EXCLUDED_KEYWORDS'


class ConfigError(ValueError):
    """Raised when pipeline settings fail validation."""

    def __init__(self, message: str, errors: list = None):
        super().__init__(message)
        self.errors = errors or []


def split_comma_list(v: Any) -> List[str]:
    """
    Convert comma-separated text to a list of trimmed, non-empty entries.

    Examples:
        "조경공사, 전기공사" -> ["조경공사", "전기공사"]
        " a ,, b " -> ["a", "b"]
        None -> []
    """
    return to_list(v)


CommaList = Annotated[List[str], BeforeValidator(split_comma_list)]


class PipelineConfig(BaseModel):
    """
    Settings for a single pipeline run. Frozen once built.

    Usage:
        config = PipelineConfig(completion_offset_days=60, excluded_keywords="철거, 도색")
        config.cutoff_date  # today + 60 days as 'YYYY-MM-DD'
    """

    model_config = ConfigDict(frozen=True)

    chunk_size: int = Field(default=500, gt=0, description="Rows per upload chunk")
    completion_offset_days: int = Field(
        default=30, ge=0, le=365,
        description="Cutoff = today + N days"
    )
    min_contract_amount: float = Field(
        default=10_000_000, ge=0,
        description="Minimum Narajang contract amount (inclusive)"
    )
    excluded_types: CommaList = Field(
        default_factory=lambda: list(EXCLUDED_CONSTR_TYPES),
        description="Raw construction-type labels to drop"
    )
    excluded_keywords: CommaList = Field(
        default_factory=lambda: list(EXCLUDED_KEYWORDS),
        description="Project-name keywords to drop"
    )
    today: date = Field(default_factory=date.today)

    @property
    def cutoff_date(self) -> str:
        """Minimum acceptable completion date, as 'YYYY-MM-DD'."""
        cutoff = self.today + relativedelta(days=self.completion_offset_days)
        return cutoff.strftime('%Y-%m-%d')

    @classmethod
    def build(cls, **values) -> 'PipelineConfig':
        """
        Build a config, converting pydantic errors to ConfigError.

        None values are dropped so callers can pass unset CLI options through.
        """
        values = {k: v for k, v in values.items() if v is not None}
        try:
            return cls(**values)
        except PydanticValidationError as e:
            problems = [
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                for err in e.errors()
            ]
            raise ConfigError(f"Invalid pipeline config: {'; '.join(problems)}", errors=problems) from e

    @classmethod
    def from_env(cls, **overrides) -> 'PipelineConfig':
        """
        Build a config from PIPELINE_* environment variables.

        Keyword overrides (e.g. CLI options) win over the environment;
        None overrides are ignored.
        """
        values = {
            'chunk_size': os.environ.get(ENV_CHUNK_SIZE) or None,
            'completion_offset_days': os.environ.get(ENV_OFFSET_DAYS) or None,
            'min_contract_amount': os.environ.get(ENV_MIN_AMOUNT) or None,
            'excluded_types': os.environ.get(ENV_EXCLUDED_TYPES),
            'excluded_keywords': os.environ.get(ENV_EXCLUDED_KEYWORDS),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        config = cls.build(**values)
        logger.debug(f"Pipeline config: {config.model_dump()}")
        return config
