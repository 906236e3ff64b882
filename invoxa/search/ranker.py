"""Assembly and ranking of search suggestions."""

from .models import (
    ICON_FOR_TYPE,
    QueryAnalysis,
    SearchContext,
    SearchSuggestion,
    SuggestionType,
)

MAX_SUGGESTIONS = 8
MAX_CONTEXTUAL_SUGGESTIONS = 2

CORRECTION_CONFIDENCE = 0.9
EXPANSION_CONFIDENCE = 0.8
EXPANSION_DECAY = 0.1
FILTER_CONFIDENCE = 0.7
RELATED_CONFIDENCE = 0.6
RELATED_DECAY = 0.05
COMBINATION_CONFIDENCE = 0.6
POPULAR_CONFIDENCE = 0.5


def _decayed(start: float, step: float, index: int) -> float:
    return round(max(0.0, start - step * index), 4)


def _suggestion(type_: SuggestionType, **fields) -> SearchSuggestion:
    return SearchSuggestion(type=type_, icon=ICON_FOR_TYPE[type_], **fields)


def correction_suggestions(query: str, analysis: QueryAnalysis) -> list[SearchSuggestion]:
    corrected = analysis.corrected_query
    if not corrected or corrected == query:
        return []
    return [
        _suggestion(
            SuggestionType.CORRECTION,
            title="Did you mean?",
            query=corrected,
            description=f'Corrected spelling: "{corrected}"',
            confidence=CORRECTION_CONFIDENCE,
        )
    ]


def expansion_suggestions(analysis: QueryAnalysis) -> list[SearchSuggestion]:
    return [
        _suggestion(
            SuggestionType.EXPANSION,
            title="Try this instead",
            query=expansion,
            description=f'Expanded search: "{expansion}"',
            confidence=_decayed(EXPANSION_CONFIDENCE, EXPANSION_DECAY, index),
        )
        for index, expansion in enumerate(analysis.semantic_expansions)
    ]


def filter_suggestions(query: str, analysis: QueryAnalysis) -> list[SearchSuggestion]:
    return [
        _suggestion(
            SuggestionType.FILTER,
            title=f"Filter by {proposal.name}",
            query=query,
            description=proposal.description,
            confidence=FILTER_CONFIDENCE,
            filters={proposal.key: proposal.value},
        )
        for proposal in analysis.suggested_filters
    ]


def related_suggestions(analysis: QueryAnalysis) -> list[SearchSuggestion]:
    return [
        _suggestion(
            SuggestionType.RELATED,
            title=f"Search for {topic}",
            query=topic,
            description=f"Find conversations about {topic}",
            confidence=_decayed(RELATED_CONFIDENCE, RELATED_DECAY, index),
        )
        for index, topic in enumerate(analysis.related_topics)
    ]


def contextual_suggestions(
    query: str,
    context: SearchContext,
    limit: int = MAX_CONTEXTUAL_SUGGESTIONS,
) -> list[SearchSuggestion]:
    """Suggestions drawn from the caller's search history.

    The combination with the most recent prior search comes first; popular
    topics fill whatever slots remain, in the order the caller gave them.
    """
    suggestions = []
    lowered = query.lower()

    if context.recent_searches:
        recent = context.recent_searches[0]
        if recent and recent != query and recent not in query:
            suggestions.append(
                _suggestion(
                    SuggestionType.COMBINATION,
                    title="Combine with recent search",
                    query=f"{query} {recent}",
                    description=f'Search for both "{query}" and "{recent}"',
                    confidence=COMBINATION_CONFIDENCE,
                )
            )

    for topic in context.popular_topics:
        if len(suggestions) >= limit:
            break
        if not topic or topic.lower() in lowered:
            continue
        suggestions.append(
            _suggestion(
                SuggestionType.POPULAR,
                title=f"Popular: {topic}",
                query=topic,
                description="This is a frequently searched topic",
                confidence=POPULAR_CONFIDENCE,
            )
        )

    return suggestions[:limit]


def rank_suggestions(
    query: str,
    analysis: QueryAnalysis,
    context: SearchContext | None = None,
    limit: int = MAX_SUGGESTIONS,
) -> list[SearchSuggestion]:
    """Merge every suggestion source and keep the most confident ones.

    Args:
        query: Raw query text
        analysis: Analysis of the same query
        context: Optional caller search context
        limit: Maximum number of suggestions returned

    Returns:
        Suggestions sorted by descending confidence; ties keep assembly order
    """
    candidates = [
        *correction_suggestions(query, analysis),
        *expansion_suggestions(analysis),
        *filter_suggestions(query, analysis),
        *related_suggestions(analysis),
    ]
    if context is not None:
        candidates.extend(contextual_suggestions(query, context))

    # sorted() is stable, including with reverse=True
    ranked = sorted(candidates, key=lambda s: s.confidence, reverse=True)
    return ranked[:limit]
