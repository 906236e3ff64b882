"""Semantic expansion and query rewriting through a hosted LLM."""

import asyncio
import json
import logging
import re
from typing import Callable

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from invoxa.llm.base import LLMProvider
from .models import SearchContext

logger = logging.getLogger(__name__)

MAX_ITEMS = 5
EXPANSION_MAX_TOKENS = 300
EXPANSION_TEMPERATURE = 0.7
IMPROVE_MAX_TOKENS = 100
IMPROVE_TEMPERATURE = 0.3

_CODE_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


class SemanticExpansion(BaseModel):
    """Outcome of an expansion request; empty on failure."""

    expansions: list[str] = Field(default_factory=list)
    related_topics: list[str] = Field(default_factory=list)
    success: bool = True
    error: str | None = None

    @classmethod
    def empty(cls, error: str | None = None) -> "SemanticExpansion":
        return cls(success=error is None, error=error)


class _ExpansionPayload(BaseModel):
    """Shape of the JSON the model is asked to return."""

    model_config = ConfigDict(populate_by_name=True)

    expansions: list[str] = Field(default_factory=list)
    related_topics: list[str] = Field(default_factory=list, alias="relatedTopics")

    @field_validator("expansions", "related_topics", mode="before")
    @classmethod
    def _none_as_empty(cls, value):
        return value or []


def _clean_items(items: list[str]) -> list[str]:
    cleaned = [item.strip() for item in items if item and item.strip()]
    return cleaned[:MAX_ITEMS]


def parse_expansion_response(text: str) -> SemanticExpansion:
    """Parse the model's JSON reply.

    Raises:
        ValueError: If the reply is not the expected JSON object
    """
    body = text.strip()
    fenced = _CODE_FENCE.match(body)
    if fenced:
        body = fenced.group(1)

    try:
        payload = _ExpansionPayload.model_validate_json(body)
    except ValidationError as e:
        raise ValueError(f"Malformed expansion payload: {e}") from e

    return SemanticExpansion(
        expansions=_clean_items(payload.expansions),
        related_topics=_clean_items(payload.related_topics),
    )


def format_context(context: SearchContext | None) -> str:
    """Serialize a search context for embedding in a prompt."""
    if context is None:
        return ""

    recent = ", ".join(context.recent_searches) or "none"
    popular = ", ".join(context.popular_topics) or "none"
    preferences = json.dumps(context.user_preferences) if context.user_preferences else "none"
    return (
        f"\nRecent searches: {recent}"
        f"\nPopular topics: {popular}"
        f"\nUser preferences: {preferences}\n"
    )


def build_expansion_prompt(query: str, context: SearchContext | None = None) -> str:
    """Build the prompt asking for expansions and related topics."""
    return f"""Analyze this business search query and provide suggestions:

Query: "{query}"
Context: {format_context(context)}

Please provide:
1. 3-5 semantic expansions (alternative ways to search for the same concept)
2. 3-5 related business topics that might be relevant

Focus on business, invoicing, client management, expenses, and project management contexts.

Respond in JSON format:
{{
  "expansions": ["expansion1", "expansion2", ...],
  "relatedTopics": ["topic1", "topic2", ...]
}}"""


def build_improve_prompt(query: str, intent: str | None = None) -> str:
    """Build the prompt asking for a rewritten query."""
    return f"""Improve this business search query to be more effective:

Original query: "{query}"
User intent: {intent or "not specified"}

Rules:
1. Keep the core meaning intact
2. Add relevant business terms if missing
3. Fix obvious typos
4. Make it more specific if too vague
5. Suggest better keywords for business context

Return only the improved query, nothing else."""


class SemanticExpander:
    """Best-effort wrapper around the hosted text-generation call.

    Neither method raises: any provider, timeout or parse failure is
    logged and mapped to an empty expansion or the unchanged query.
    """

    def __init__(
        self,
        llm_provider: LLMProvider | None = None,
        provider_factory: Callable[[], LLMProvider] | None = None,
        timeout: float = 10.0,
    ):
        """Initialize the expander.

        Args:
            llm_provider: Provider to call; created lazily when omitted
            provider_factory: Callable building the provider on first use
            timeout: Seconds to wait for one remote call
        """
        self.llm_provider = llm_provider
        self.provider_factory = provider_factory
        self.timeout = timeout

    def _ensure_provider(self) -> LLMProvider:
        if self.llm_provider is None:
            if self.provider_factory is None:
                from invoxa.llm.factory import create_llm_provider

                self.provider_factory = create_llm_provider
            self.llm_provider = self.provider_factory()
        return self.llm_provider

    async def _complete(self, prompt: str, max_tokens: int, temperature: float) -> str:
        provider = self._ensure_provider()
        result = await asyncio.wait_for(
            provider.generate_response(
                prompt=prompt,
                max_tokens=max_tokens,
                temperature=temperature,
            ),
            timeout=self.timeout,
        )
        if not result.success:
            raise RuntimeError(result.error or "provider reported failure")
        return result.content

    async def expand(self, query: str, context: SearchContext | None = None) -> SemanticExpansion:
        """Ask the model for alternative phrasings and related topics.

        Args:
            query: Raw query text
            context: Optional search context embedded in the prompt

        Returns:
            SemanticExpansion; empty with success=False on any failure
        """
        if not query.strip():
            return SemanticExpansion.empty()

        try:
            text = await self._complete(
                build_expansion_prompt(query, context),
                max_tokens=EXPANSION_MAX_TOKENS,
                temperature=EXPANSION_TEMPERATURE,
            )
            expansion = parse_expansion_response(text)
        except asyncio.TimeoutError:
            logger.warning(f"Semantic expansion timed out after {self.timeout}s")
            return SemanticExpansion.empty(error="timeout")
        except Exception as e:
            logger.error(f"Error getting semantic expansion: {e}")
            return SemanticExpansion.empty(error=str(e))

        logger.debug(
            f"Expansion for {query!r}: {len(expansion.expansions)} phrasings, "
            f"{len(expansion.related_topics)} topics"
        )
        return expansion

    async def improve(self, query: str, intent: str | None = None) -> str:
        """Ask the model to rewrite a query.

        Args:
            query: Raw query text
            intent: Optional description of what the user is after

        Returns:
            The rewritten query, or the original on failure or empty reply
        """
        if not query.strip():
            return query

        try:
            text = await self._complete(
                build_improve_prompt(query, intent),
                max_tokens=IMPROVE_MAX_TOKENS,
                temperature=IMPROVE_TEMPERATURE,
            )
        except asyncio.TimeoutError:
            logger.warning(f"Query improvement timed out after {self.timeout}s")
            return query
        except Exception as e:
            logger.error(f"Error improving query: {e}")
            return query

        improved = re.sub(r"['\"]", "", text).strip()
        return improved or query

    async def health_check(self) -> bool:
        """Check that the underlying provider is reachable."""
        try:
            return await self._ensure_provider().health_check()
        except Exception as e:
            logger.warning(f"Semantic expander health check failed: {e}")
            return False

    async def aclose(self) -> None:
        """Close the provider if one was created."""
        if self.llm_provider is not None:
            await self.llm_provider.aclose()
