"""
Product suggestion engine.
"""

from shopping_assistant.core.suggestions.generator import (
    MAX_SUGGESTIONS,
    SuggestionReport,
    build_suggestion_report,
    generate_suggestions,
    merge_suggestions,
)
from shopping_assistant.core.suggestions.mapping import (
    IntentRule,
    KeywordRule,
    MappingConfiguration,
    MappingRegistry,
    StageRule,
    default_mapping,
)
from shopping_assistant.core.suggestions.ranking import fit_budget, rank_candidates

__all__ = [
    # Generation
    "MAX_SUGGESTIONS",
    "SuggestionReport",
    "build_suggestion_report",
    "generate_suggestions",
    "merge_suggestions",
    # Mapping
    "IntentRule",
    "KeywordRule",
    "MappingConfiguration",
    "MappingRegistry",
    "StageRule",
    "default_mapping",
    # Ranking
    "fit_budget",
    "rank_candidates",
]
