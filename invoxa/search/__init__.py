"""Search query analysis and suggestion pipeline."""

from .engine import SearchSuggestionEngine
from .models import (
    FilterProposal,
    QueryAnalysis,
    QueryCategory,
    SearchContext,
    SearchSuggestion,
    SuggestionIcon,
    SuggestionType,
    UsageRecord,
    UsageSummary,
)
from .usage import BoundedUsageLog, JsonFileUsageStore, MemoryUsageStore, UsageStore, UsageTracker

__all__ = [
    "BoundedUsageLog",
    "FilterProposal",
    "JsonFileUsageStore",
    "MemoryUsageStore",
    "QueryAnalysis",
    "QueryCategory",
    "SearchContext",
    "SearchSuggestion",
    "SearchSuggestionEngine",
    "SuggestionIcon",
    "SuggestionType",
    "UsageRecord",
    "UsageStore",
    "UsageSummary",
    "UsageTracker",
]
