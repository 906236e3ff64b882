"""Tokenization, spelling correction and domain-term detection."""

from dataclasses import dataclass, field

from .vocabulary import BUSINESS_KEYWORDS, COMMON_MISSPELLINGS


@dataclass(frozen=True)
class LexicalAnalysis:
    """Normalized view of a raw query."""

    tokens: list[str] = field(default_factory=list)
    corrected_tokens: list[str] = field(default_factory=list)
    corrected_query: str | None = None
    domain_terms: list[str] = field(default_factory=list)

    @property
    def has_domain_terms(self) -> bool:
        """Whether any business keyword appears in the query."""
        return bool(self.domain_terms)

    @property
    def effective_query(self) -> str:
        """The corrected query when one exists, else the normalized tokens."""
        return " ".join(self.corrected_tokens)


def normalize(query: str) -> list[str]:
    """Lowercase and whitespace-split a query."""
    return query.lower().split()


def find_domain_terms(tokens: list[str]) -> list[str]:
    """Return business keywords contained in any token, in table order."""
    return [
        keyword
        for keyword in BUSINESS_KEYWORDS
        if any(keyword in token for token in tokens)
    ]


def analyze_lexically(query: str) -> LexicalAnalysis:
    """Normalize a query and apply the misspelling table.

    Args:
        query: Raw query text

    Returns:
        LexicalAnalysis; blank input yields empty token lists
    """
    tokens = normalize(query)
    corrected = [COMMON_MISSPELLINGS.get(token, token) for token in tokens]
    corrected_query = " ".join(corrected) if corrected != tokens else None

    return LexicalAnalysis(
        tokens=tokens,
        corrected_tokens=corrected,
        corrected_query=corrected_query,
        domain_terms=find_domain_terms(corrected),
    )
