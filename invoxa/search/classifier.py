"""Query category assignment and heuristic confidence scoring."""

from .models import QueryCategory
from .vocabulary import CATEGORY_KEYWORDS

BASE_CONFIDENCE = 0.5
DOMAIN_TERM_BOOST = 0.3
LENGTH_BOOST = 0.1
SHORT_QUERY_PENALTY = 0.3


def classify_query(query: str) -> QueryCategory:
    """Assign the first category whose keywords appear in the query."""
    text = query.lower()
    for category, keywords in CATEGORY_KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return category
    return QueryCategory.GENERAL


def score_confidence(query: str, has_domain_terms: bool) -> float:
    """Score how well-formed a query looks for business search.

    Args:
        query: Raw query text; surrounding whitespace is ignored
        has_domain_terms: Whether a business keyword was detected

    Returns:
        Confidence clamped to [0, 1]
    """
    length = len(query.strip())
    confidence = BASE_CONFIDENCE

    if has_domain_terms:
        confidence += DOMAIN_TERM_BOOST
    if length > 10:
        confidence += LENGTH_BOOST
    if length > 20:
        confidence += LENGTH_BOOST
    if length < 3:
        confidence -= SHORT_QUERY_PENALTY

    return round(min(1.0, max(0.0, confidence)), 4)
