"""
Tests for the HTTP routes
"""
from datetime import date
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from main import app
from services.chat_orchestrator import ChatOrchestrator, ChatReply
from services.date_scanner import AlternativeDateScanner
from services.exceptions import GenerationError, ValidationError
from services.flight_formatter import normalize_offer
from services.models import DatePricePoint

from conftest import make_offer


@pytest.fixture
def orchestrator():
    mock = AsyncMock(spec=ChatOrchestrator)
    app.state.orchestrator = mock
    yield mock
    app.state.orchestrator = None


@pytest.fixture
def date_scanner():
    mock = AsyncMock(spec=AlternativeDateScanner)
    app.state.date_scanner = mock
    yield mock
    app.state.date_scanner = None


@pytest.fixture
def client():
    # No context manager: lifespan stays off and the injected mocks are used
    return TestClient(app)


class TestChatEndpoint:

    def test_returns_flight_data_with_display_keys(self, client, orchestrator):
        offer = normalize_offer(make_offer(offer_id="9"), None)
        orchestrator.handle_message.return_value = ChatReply(response="Here you go", flight_data=[offer])

        response = client.post("/api/chat", json={"message": "SF to NYC in December"})

        assert response.status_code == 200
        body = response.json()
        assert body["response"] == "Here you go"
        assert body["flightData"][0]["id"] == "9"
        assert body["flightData"][0]["priceUSD"] == 250.0
        assert body["flightData"][0]["airlineName"] == "United Airlines"
        assert body["flightData"][0]["bookingUrl"].endswith("#flt=SFO.JFK.2026-12-15")
        orchestrator.handle_message.assert_awaited_once_with("SF to NYC in December")

    def test_no_search_gives_null_flight_data(self, client, orchestrator):
        orchestrator.handle_message.return_value = ChatReply(response="Hi!", flight_data=None)

        response = client.post("/api/chat", json={"message": "hi"})

        assert response.status_code == 200
        assert response.json() == {"response": "Hi!", "flightData": None}

    def test_empty_search_gives_empty_list(self, client, orchestrator):
        orchestrator.handle_message.return_value = ChatReply(response="Nothing found", flight_data=[])

        response = client.post("/api/chat", json={"message": "Boston to Chicago"})

        assert response.json()["flightData"] == []

    def test_missing_message_is_bad_request(self, client, orchestrator):
        orchestrator.handle_message.side_effect = ValidationError("Message is required")

        response = client.post("/api/chat", json={})

        assert response.status_code == 400
        assert response.json()["error"] == "Message is required"
        orchestrator.handle_message.assert_awaited_once_with(None)

    def test_generation_failure_is_server_error(self, client, orchestrator):
        orchestrator.handle_message.side_effect = GenerationError("Text generation failed")

        response = client.post("/api/chat", json={"message": "hello"})

        assert response.status_code == 500
        assert response.json()["error"] == "Failed to generate response"

    def test_unexpected_failure_is_server_error(self, client, orchestrator):
        orchestrator.handle_message.side_effect = RuntimeError("boom")

        response = client.post("/api/chat", json={"message": "hello"})

        assert response.status_code == 500
        assert "boom" not in response.text


class TestAlternativeDatesEndpoint:

    def test_resolves_city_names(self, client, date_scanner):
        date_scanner.scan.return_value = [
            DatePricePoint(date=date(2026, 12, 16), price=200.0),
            DatePricePoint(date=date(2026, 12, 14), price=None),
        ]

        response = client.get(
            "/api/flights/alternative-dates",
            params={"origin": "san francisco", "destination": "jfk", "date": "2026-12-15", "days_before": 1, "days_after": 1},
        )

        assert response.status_code == 200
        assert response.json() == [
            {"date": "2026-12-16", "price": 200.0},
            {"date": "2026-12-14", "price": None},
        ]
        date_scanner.scan.assert_awaited_once_with(
            "SFO", "JFK", date(2026, 12, 15), days_before=1, days_after=1,
        )

    def test_window_is_bounded(self, client, date_scanner):
        response = client.get(
            "/api/flights/alternative-dates",
            params={"origin": "SFO", "destination": "JFK", "date": "2026-12-15", "days_before": 30},
        )

        assert response.status_code == 422
        date_scanner.scan.assert_not_awaited()


class TestServiceRoutes:

    def test_health(self, client):
        assert client.get("/api/health").json() == {"ok": True, "status": "healthy"}

    def test_root_lists_endpoints(self, client):
        body = client.get("/").json()
        assert body["status"] == "running"
        assert body["endpoints"]["chat"] == "/api/chat"
