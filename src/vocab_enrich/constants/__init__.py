"""Shared constants (column names, defaults, backend configuration)."""

from .columns import (
    ID,
    PART_OF_SPEECH,
    PRIMARY_DEFINITION,
    PROFICIENCY_LEVEL,
    USAGE_EXAMPLE,
    VOCAB_COLUMNS,
    WORD,
)
from .defaults import (
    CEFR_LEVELS,
    LEVEL_NOT_AVAILABLE,
    MAX_MERGED_EXAMPLES,
    MAX_SOURCE_EXAMPLES,
)

__all__ = [
    "ID",
    "WORD",
    "PART_OF_SPEECH",
    "PROFICIENCY_LEVEL",
    "PRIMARY_DEFINITION",
    "USAGE_EXAMPLE",
    "VOCAB_COLUMNS",
    "CEFR_LEVELS",
    "LEVEL_NOT_AVAILABLE",
    "MAX_MERGED_EXAMPLES",
    "MAX_SOURCE_EXAMPLES",
]
