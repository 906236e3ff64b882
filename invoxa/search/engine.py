"""Search query intelligence pipeline."""

import logging
import time

from invoxa.config import Settings, get_settings
from invoxa.llm.base import LLMProvider
from .classifier import classify_query, score_confidence
from .expander import SemanticExpander
from .filters import extract_filters
from .lexer import analyze_lexically
from .models import QueryAnalysis, SearchContext, SearchSuggestion, UsageRecord
from .ranker import rank_suggestions
from .usage import DEFAULT_SESSION, JsonFileUsageStore, MemoryUsageStore, UsageTracker

logger = logging.getLogger(__name__)


class SearchSuggestionEngine:
    """Analyzes search queries and turns them into ranked suggestions."""

    def __init__(
        self,
        llm_provider: LLMProvider | None = None,
        usage_tracker: UsageTracker | None = None,
        settings: Settings | None = None,
    ):
        """Initialize the engine.

        Args:
            llm_provider: Provider for semantic expansion, created lazily when omitted
            usage_tracker: Tracker for suggestion usage
            settings: Application settings, defaults to the global instance
        """
        self.settings = settings or get_settings()
        self.expander = SemanticExpander(
            llm_provider=llm_provider,
            timeout=self.settings.expansion_timeout,
        )
        self.usage_tracker = usage_tracker or self._default_tracker()

    def _default_tracker(self) -> UsageTracker:
        if self.settings.usage_storage_dir is not None:
            store = JsonFileUsageStore(self.settings.usage_storage_dir)
        else:
            store = MemoryUsageStore(max_sessions=self.settings.usage_max_sessions)
        return UsageTracker(store=store, capacity=self.settings.usage_log_capacity)

    async def analyze_query(
        self,
        query: str,
        context: SearchContext | None = None,
    ) -> QueryAnalysis:
        """Analyze a query.

        The lexical, filter and classification stages run before the single
        awaited expansion call.

        Args:
            query: Raw query text
            context: Optional search context

        Returns:
            QueryAnalysis for the query
        """
        start_time = time.time()

        lexical = analyze_lexically(query)
        effective_query = lexical.effective_query
        category = classify_query(effective_query)
        confidence = score_confidence(query, lexical.has_domain_terms)
        filters = extract_filters(query)

        logger.debug(
            f"Query {query!r}: category={category.value}, confidence={confidence:.2f}, "
            f"filters={len(filters)}, corrected={lexical.corrected_query!r}"
        )

        expansion = await self.expander.expand(query, context)
        if not expansion.success:
            logger.info(f"Continuing without semantic expansion: {expansion.error}")

        analysis = QueryAnalysis(
            original_query=query,
            corrected_query=lexical.corrected_query,
            category=category,
            confidence=confidence,
            suggested_filters=filters,
            semantic_expansions=expansion.expansions,
            related_topics=expansion.related_topics,
            domain_terms=lexical.domain_terms,
            processing_time=time.time() - start_time,
        )

        logger.info(f"Analyzed query in {analysis.processing_time:.2f}s as {category.value}")
        return analysis

    async def generate_search_suggestions(
        self,
        query: str,
        context: SearchContext | None = None,
        analysis: QueryAnalysis | None = None,
    ) -> list[SearchSuggestion]:
        """Produce ranked suggestions for a query.

        Args:
            query: Raw query text
            context: Optional search context
            analysis: Analysis of the same query; computed when omitted or
                when it was made for a different query

        Returns:
            At most ``suggestion_limit`` suggestions, most confident first;
            an empty list means there is nothing to suggest
        """
        if not query.strip():
            return []

        if analysis is not None and analysis.original_query != query:
            logger.warning(
                f"Ignoring analysis of {analysis.original_query!r} for query {query!r}"
            )
            analysis = None
        if analysis is None:
            analysis = await self.analyze_query(query, context)

        suggestions = rank_suggestions(
            query,
            analysis,
            context=context,
            limit=self.settings.suggestion_limit,
        )
        logger.info(f"Generated {len(suggestions)} suggestions for {query!r}")
        return suggestions

    async def improve_query(self, query: str, intent: str | None = None) -> str:
        """Rewrite a query; returns it unchanged when the rewrite fails."""
        improved = await self.expander.improve(query, intent)
        if improved != query:
            logger.info(f"Improved query {query!r} -> {improved!r}")
        return improved

    def track_suggestion_usage(
        self,
        suggestion: SearchSuggestion,
        was_used: bool,
        session_id: str = DEFAULT_SESSION,
    ) -> UsageRecord:
        """Record whether a suggestion was accepted."""
        return self.usage_tracker.track(suggestion, was_used, session_id=session_id)

    async def health_check(self) -> dict[str, bool]:
        """Check health of the pipeline components.

        Returns:
            Health status dictionary
        """
        health = {
            "llm_provider": await self.expander.health_check(),
            "suggestion_engine": True,
        }
        # Suggestions degrade gracefully without the provider
        health["overall"] = health["suggestion_engine"]
        return health

    async def aclose(self) -> None:
        """Release the provider's network resources."""
        await self.expander.aclose()
