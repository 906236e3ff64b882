"""HTTP API exposing the search suggestion pipeline."""

import asyncio
import json
import logging
from typing import Any

from aiohttp import web
from pydantic import BaseModel, Field, ValidationError

from invoxa.search import SearchContext, SearchSuggestion, SearchSuggestionEngine
from invoxa.search.usage import DEFAULT_SESSION

logger = logging.getLogger(__name__)


class AnalyzeRequest(BaseModel):
    """Body of analyze and suggestion requests."""

    query: str
    context: SearchContext | None = None


class ImproveRequest(BaseModel):
    """Body of query improvement requests."""

    query: str
    intent: str | None = None


class UsageRequest(BaseModel):
    """Body of usage tracking requests."""

    suggestion: SearchSuggestion
    was_used: bool
    session_id: str = Field(default=DEFAULT_SESSION, min_length=1)


def _bad_request(message: str) -> web.HTTPBadRequest:
    return web.HTTPBadRequest(
        text=json.dumps({"error": message}),
        content_type="application/json",
    )


def suggestion_payload(suggestion: SearchSuggestion) -> dict[str, Any]:
    """Serialize a suggestion with its display helpers."""
    payload = suggestion.model_dump(mode="json")
    payload["confidence_band"] = suggestion.confidence_band
    payload["type_label"] = suggestion.type_label
    return payload


class WebServer:
    """HTTP server for the search suggestion endpoints."""

    def __init__(
        self,
        engine: SearchSuggestionEngine | None = None,
        host: str = "0.0.0.0",
        port: int = 3000,
    ):
        """Initialize web server."""
        self.engine = engine or SearchSuggestionEngine()
        self.host = host
        self.port = port
        self.app = web.Application()
        self._setup_routes()
        logger.info(f"Web server initialized on port {port}")

    def _setup_routes(self):
        """Set up HTTP routes."""
        self.app.router.add_get("/", self._handle_root)
        self.app.router.add_get("/health", self._handle_health)
        self.app.router.add_post("/api/search/analyze", self._handle_analyze)
        self.app.router.add_post("/api/search/suggestions", self._handle_suggestions)
        self.app.router.add_post("/api/search/improve", self._handle_improve)
        self.app.router.add_post("/api/search/usage", self._handle_track_usage)
        self.app.router.add_get("/api/search/usage", self._handle_usage_summary)
        logger.info("Routes configured: /, /health, /api/search/{analyze,suggestions,improve,usage}")

    @staticmethod
    async def _parse(request: web.Request, model: type[BaseModel]) -> BaseModel:
        try:
            data = await request.json()
        except ValueError:
            raise _bad_request("Request body must be JSON")
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise _bad_request(str(e))

    async def _handle_root(self, request: web.Request) -> web.Response:
        """Liveness endpoint; does not touch the provider."""
        return web.json_response({"status": "ok", "service": "INVOXA Search Suggestions"})

    async def _handle_health(self, request: web.Request) -> web.Response:
        """Health check endpoint."""
        health = await self.engine.health_check()
        return web.json_response(
            {"status": "healthy", "service": "INVOXA Search Suggestions", "components": health}
        )

    async def _handle_analyze(self, request: web.Request) -> web.Response:
        """Return the analysis of a query."""
        body = await self._parse(request, AnalyzeRequest)
        try:
            analysis = await self.engine.analyze_query(body.query, body.context)
        except Exception as e:
            logger.error(f"Error analyzing query: {e}", exc_info=True)
            return web.json_response({"error": str(e)}, status=500)
        return web.json_response(analysis.model_dump(mode="json"))

    async def _handle_suggestions(self, request: web.Request) -> web.Response:
        """
        Return analysis and ranked suggestions for a query.

        One analysis serves both parts of the response, so the hosted model
        is called at most once.
        """
        body = await self._parse(request, AnalyzeRequest)
        try:
            analysis = await self.engine.analyze_query(body.query, body.context)
            suggestions = await self.engine.generate_search_suggestions(
                body.query, body.context, analysis=analysis
            )
        except Exception as e:
            logger.error(f"Error generating suggestions: {e}", exc_info=True)
            return web.json_response({"error": str(e)}, status=500)

        return web.json_response(
            {
                "analysis": analysis.model_dump(mode="json"),
                "suggestions": [suggestion_payload(s) for s in suggestions],
                "empty": not suggestions,
            }
        )

    async def _handle_improve(self, request: web.Request) -> web.Response:
        """Return an improved version of a query."""
        body = await self._parse(request, ImproveRequest)
        improved = await self.engine.improve_query(body.query, body.intent)
        return web.json_response(
            {"query": body.query, "improved": improved, "changed": improved != body.query}
        )

    async def _handle_track_usage(self, request: web.Request) -> web.Response:
        """Record whether a suggestion was accepted."""
        body = await self._parse(request, UsageRequest)
        record = await asyncio.to_thread(
            self.engine.track_suggestion_usage,
            body.suggestion,
            body.was_used,
            session_id=body.session_id,
        )
        return web.json_response(record.model_dump(mode="json"), status=201)

    async def _handle_usage_summary(self, request: web.Request) -> web.Response:
        """Summarize a session's usage log."""
        session_id = request.query.get("session_id") or DEFAULT_SESSION
        summary = await asyncio.to_thread(self.engine.usage_tracker.summarize, session_id)
        payload = summary.model_dump(mode="json")
        payload["acceptance_rate"] = summary.acceptance_rate
        payload["session_id"] = session_id
        return web.json_response(payload)

    async def start(self):
        """Start the web server."""
        runner = web.AppRunner(self.app)
        await runner.setup()
        site = web.TCPSite(runner, self.host, self.port)
        await site.start()
        logger.info(f"Web server started on {self.host}:{self.port}")
        return runner

    async def stop(self, runner):
        """Stop the web server."""
        await runner.cleanup()
        await self.engine.aclose()
        logger.info("Web server stopped")
