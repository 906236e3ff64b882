"""Search suggestion models and data structures."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class QueryCategory(str, Enum):
    """Coarse category assigned to a query."""

    INVOICE = "invoice"
    CLIENT = "client"
    EXPENSE = "expense"
    REPORT = "report"
    GENERAL = "general"


class SuggestionType(str, Enum):
    """Source of a search suggestion."""

    CORRECTION = "correction"
    EXPANSION = "expansion"
    FILTER = "filter"
    RELATED = "related"
    COMBINATION = "combination"
    POPULAR = "popular"


class SuggestionIcon(str, Enum):
    """Icons the UI knows how to render."""

    SPELL_CHECK = "spell-check"
    LIGHTBULB = "lightbulb"
    FILTER = "filter"
    SEARCH = "search"
    LINK = "link"
    TRENDING_UP = "trending-up"


ICON_FOR_TYPE: dict[SuggestionType, SuggestionIcon] = {
    SuggestionType.CORRECTION: SuggestionIcon.SPELL_CHECK,
    SuggestionType.EXPANSION: SuggestionIcon.LIGHTBULB,
    SuggestionType.FILTER: SuggestionIcon.FILTER,
    SuggestionType.RELATED: SuggestionIcon.SEARCH,
    SuggestionType.COMBINATION: SuggestionIcon.LINK,
    SuggestionType.POPULAR: SuggestionIcon.TRENDING_UP,
}

TYPE_LABELS: dict[SuggestionType, str] = {
    SuggestionType.CORRECTION: "Spelling",
    SuggestionType.EXPANSION: "Expansion",
    SuggestionType.FILTER: "Filter",
    SuggestionType.RELATED: "Related",
    SuggestionType.COMBINATION: "Combine",
    SuggestionType.POPULAR: "Popular",
}


class SearchContext(BaseModel):
    """Caller-supplied context for a query."""

    model_config = ConfigDict(frozen=True)

    recent_searches: list[str] = Field(default_factory=list)  # most recent first
    popular_topics: list[str] = Field(default_factory=list)
    user_preferences: dict[str, Any] = Field(default_factory=dict)


class FilterProposal(BaseModel):
    """A structured filter inferred from the query text."""

    model_config = ConfigDict(frozen=True)

    name: str
    key: str
    value: Any
    description: str


class QueryAnalysis(BaseModel):
    """Structural analysis of a single query."""

    model_config = ConfigDict(frozen=True)

    original_query: str
    corrected_query: str | None = None
    category: QueryCategory = QueryCategory.GENERAL
    confidence: float = Field(ge=0.0, le=1.0)
    suggested_filters: list[FilterProposal] = Field(default_factory=list)
    semantic_expansions: list[str] = Field(default_factory=list)
    related_topics: list[str] = Field(default_factory=list)
    domain_terms: list[str] = Field(default_factory=list)
    processing_time: float = 0.0


class SearchSuggestion(BaseModel):
    """A single actionable suggestion shown to the user."""

    model_config = ConfigDict(frozen=True)

    type: SuggestionType
    title: str
    query: str
    description: str
    confidence: float = Field(ge=0.0, le=1.0)
    icon: SuggestionIcon
    filters: dict[str, Any] | None = None

    @property
    def confidence_band(self) -> str:
        """Bucket the confidence into high, medium or low."""
        if self.confidence >= 0.8:
            return "high"
        if self.confidence >= 0.6:
            return "medium"
        return "low"

    @property
    def type_label(self) -> str:
        """Human-readable name of the suggestion type."""
        return TYPE_LABELS[self.type]


class UsageRecord(BaseModel):
    """One accepted or rejected suggestion."""

    model_config = ConfigDict(frozen=True)

    suggestion: SearchSuggestion
    was_used: bool
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class UsageSummary(BaseModel):
    """Aggregate view over a session's usage log."""

    total: int = 0
    accepted: int = 0
    rejected: int = 0
    accepted_by_type: dict[str, int] = Field(default_factory=dict)

    @property
    def acceptance_rate(self) -> float:
        """Share of tracked suggestions that were accepted."""
        if not self.total:
            return 0.0
        return self.accepted / self.total
