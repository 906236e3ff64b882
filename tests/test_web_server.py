"""Tests for the HTTP API."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from aiohttp import test_utils

from invoxa.config import Settings
from invoxa.llm.base import LLMProvider, ResponseResult
from invoxa.search import SearchSuggestionEngine
from invoxa.web_server import WebServer


def make_server(content: str = "", side_effect=None) -> WebServer:
    """Create a web server around an engine with a provider double."""
    provider = MagicMock(spec=LLMProvider)
    provider.generate_response = AsyncMock(
        return_value=ResponseResult(content=content, model="test-model"),
        side_effect=side_effect,
    )
    provider.health_check = AsyncMock(return_value=False)
    provider.aclose = AsyncMock()
    engine = SearchSuggestionEngine(llm_provider=provider, settings=Settings(_env_file=None))
    return WebServer(engine=engine)


class TestWebServer:
    """Test the search suggestion endpoints."""

    @pytest.mark.asyncio
    async def test_health(self):
        """Test the health endpoint reports degraded components."""
        async with test_utils.TestClient(test_utils.TestServer(make_server().app)) as client:
            response = await client.get("/health")
            data = await response.json()

        assert response.status == 200
        assert data["status"] == "healthy"
        assert data["components"]["llm_provider"] is False

    @pytest.mark.asyncio
    async def test_root_does_not_call_provider(self):
        """Test that the liveness endpoint stays off the provider."""
        server = make_server()
        async with test_utils.TestClient(test_utils.TestServer(server.app)) as client:
            response = await client.get("/")
            data = await response.json()

        assert response.status == 200
        assert data["status"] == "ok"
        server.engine.expander.llm_provider.health_check.assert_not_called()

    @pytest.mark.asyncio
    async def test_stop_closes_engine(self):
        """Test that stopping the server releases the provider."""
        server = make_server()
        runner = MagicMock()
        runner.cleanup = AsyncMock()

        await server.stop(runner)

        runner.cleanup.assert_awaited_once()
        server.engine.expander.llm_provider.aclose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_suggestions(self):
        """Test analysis and suggestions in one response."""
        server = make_server(side_effect=RuntimeError("down"))
        async with test_utils.TestClient(test_utils.TestServer(server.app)) as client:
            response = await client.post(
                "/api/search/suggestions",
                json={"query": "invioce recent", "context": {"recent_searches": ["acme"]}},
            )
            data = await response.json()

        assert response.status == 200
        assert data["analysis"]["corrected_query"] == "invoice recent"
        assert data["analysis"]["category"] == "invoice"
        assert data["empty"] is False
        first = data["suggestions"][0]
        assert first["type"] == "correction"
        assert first["icon"] == "spell-check"
        assert first["confidence_band"] == "high"

    @pytest.mark.asyncio
    async def test_empty_suggestions(self):
        """Test the explicit empty state."""
        async with test_utils.TestClient(test_utils.TestServer(make_server().app)) as client:
            response = await client.post("/api/search/suggestions", json={"query": "   "})
            data = await response.json()

        assert data["suggestions"] == []
        assert data["empty"] is True

    @pytest.mark.asyncio
    async def test_analyze(self):
        """Test the analyze endpoint."""
        async with test_utils.TestClient(test_utils.TestServer(make_server("{}").app)) as client:
            response = await client.post("/api/search/analyze", json={"query": "travel cost"})
            data = await response.json()

        assert response.status == 200
        assert data["category"] == "expense"
        assert data["original_query"] == "travel cost"

    @pytest.mark.asyncio
    async def test_improve(self):
        """Test the improve endpoint."""
        async with test_utils.TestClient(test_utils.TestServer(make_server("overdue client invoices").app)) as client:
            response = await client.post(
                "/api/search/improve", json={"query": "late bills", "intent": "chase payments"}
            )
            data = await response.json()

        assert data == {"query": "late bills", "improved": "overdue client invoices", "changed": True}

    @pytest.mark.asyncio
    async def test_track_and_summarize_usage(self):
        """Test recording a suggestion and reading the summary back."""
        suggestion = {
            "type": "popular",
            "title": "Popular: payroll",
            "query": "payroll",
            "description": "This is a frequently searched topic",
            "confidence": 0.5,
            "icon": "trending-up",
        }
        async with test_utils.TestClient(test_utils.TestServer(make_server().app)) as client:
            created = await client.post(
                "/api/search/usage",
                json={"suggestion": suggestion, "was_used": True, "session_id": "s1"},
            )
            summary = await client.get("/api/search/usage", params={"session_id": "s1"})
            data = await summary.json()

        assert created.status == 201
        assert data["accepted"] == 1
        assert data["accepted_by_type"] == {"popular": 1}
        assert data["acceptance_rate"] == 1.0

    @pytest.mark.asyncio
    async def test_usage_file_io_runs_off_the_event_loop(self, tmp_path):
        """Test that file-backed usage calls go through a worker thread."""
        provider = MagicMock(spec=LLMProvider)
        engine = SearchSuggestionEngine(
            llm_provider=provider,
            settings=Settings(_env_file=None, usage_storage_dir=tmp_path),
        )
        suggestion = {
            "type": "filter",
            "title": "Filter by Recent",
            "query": "invoices",
            "description": "Show results from the last 7 days",
            "confidence": 0.7,
            "icon": "filter",
        }
        with patch("invoxa.web_server.asyncio.to_thread", wraps=asyncio.to_thread) as to_thread:
            async with test_utils.TestClient(test_utils.TestServer(WebServer(engine=engine).app)) as client:
                await client.post(
                    "/api/search/usage",
                    json={"suggestion": suggestion, "was_used": False, "session_id": "team/alice"},
                )
                summary = await client.get("/api/search/usage", params={"session_id": "team_alice"})
                data = await summary.json()

        assert to_thread.call_count == 2
        assert data["total"] == 0
        assert len(list(tmp_path.iterdir())) == 1

    @pytest.mark.asyncio
    async def test_rejects_invalid_bodies(self):
        """Test that malformed requests get a 400."""
        async with test_utils.TestClient(test_utils.TestServer(make_server().app)) as client:
            not_json = await client.post("/api/search/analyze", data="query=invoices")
            missing = await client.post("/api/search/analyze", json={"context": {}})
            bad_icon = await client.post(
                "/api/search/usage",
                json={
                    "suggestion": {
                        "type": "popular",
                        "title": "t",
                        "query": "q",
                        "description": "d",
                        "confidence": 0.5,
                        "icon": "sparkles",
                    },
                    "was_used": True,
                },
            )

            assert not_json.status == 400
            assert missing.status == 400
            assert "error" in await missing.json()
            assert bad_icon.status == 400
