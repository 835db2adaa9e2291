"""
Integration tests for the Alice Blue HTTP surface.

The app runs in-process through TestClient with the DI container pointed
at scripted broker responses.
"""

import pytest
from dependency_injector import providers
from fastapi import FastAPI
from fastapi.testclient import TestClient

from api.main import create_app
from api.middleware.error_handling import ErrorHandlingMiddleware
from api.middleware.request_ids import RequestIdMiddleware
from app.containers import AppContainer
from core.utils.exceptions import ConfigurationError
from services.alice.exceptions import UpstreamStatusError
from tests.mocks.mock_alice_api import (
    TRADES_URL,
    ScriptedTransport,
    network_error,
    respond,
    upstream_trades_payload,
)

VALID_SID_BODY = {"userId": "AB1234", "password": "pw", "twoFA": "1990", "appId": "APP1"}


@pytest.fixture
def make_client(make_settings, make_fetcher):
    containers = []

    def _make(transport=None, environment="testing", **alice_overrides):
        transport = transport or ScriptedTransport(respond(200, {}))
        container = AppContainer()
        container.settings.override(providers.Object(make_settings(environment, **alice_overrides)))
        container.http_fetcher.override(providers.Object(make_fetcher(transport)))
        containers.append(container)
        return TestClient(create_app(container))

    yield _make

    for container in containers:
        container.unwire()
        container.reset_override()


class TestSidExchange:
    def test_disabled_returns_403(self, make_client):
        transport = ScriptedTransport(respond(200, {"sessionID": "never"}))
        client = make_client(transport)

        response = client.post("/api/alice/sid", json=VALID_SID_BODY)

        assert response.status_code == 403
        assert response.json()["ok"] is False
        assert "disabled" in response.json()["message"]
        assert transport.call_count == 0

    @pytest.mark.parametrize("body", [
        {},
        {"userId": "AB1234", "password": "pw", "twoFA": "1990"},
        {**VALID_SID_BODY, "appId": ""},
    ])
    def test_missing_fields_return_400(self, make_client, body):
        client = make_client(allow_sid_exchange=True)

        response = client.post("/api/alice/sid", json=body)

        assert response.status_code == 400
        assert response.json() == {
            "ok": False,
            "message": "Missing required fields: userId, password, twoFA, appId",
        }

    def test_non_json_body_returns_400(self, make_client):
        client = make_client(allow_sid_exchange=True)

        response = client.post("/api/alice/sid", content="not json",
                               headers={"Content-Type": "application/json"})

        assert response.status_code == 400

    def test_success_returns_masked_sid_only(self, make_client):
        transport = ScriptedTransport(respond(200, {"stat": "Ok", "sessionID": "ABCDEF1234567890WXYZ"}))
        client = make_client(transport, allow_sid_exchange=True)

        response = client.post("/api/alice/sid", json=VALID_SID_BODY)

        assert response.status_code == 200
        assert response.json() == {
            "ok": True,
            "sessionIdMasked": "ABCDEF...WXYZ",
            "sessionId": "ABCDEF...WXYZ",
        }
        assert "1234567890" not in response.text
        assert transport.last_json() == VALID_SID_BODY

    def test_rejected_exchange_returns_502(self, make_client):
        transport = ScriptedTransport(respond(200, {"stat": "Not_Ok", "emsg": "Invalid 2FA"}))
        client = make_client(transport, allow_sid_exchange=True)

        response = client.post("/api/alice/sid", json=VALID_SID_BODY)

        assert response.status_code == 502
        assert response.json()["ok"] is False
        assert "Invalid 2FA" in response.json()["message"]

    def test_unreachable_endpoint_returns_502(self, make_client):
        transport = ScriptedTransport(respond(503, text="down"))
        client = make_client(transport, allow_sid_exchange=True)

        response = client.post("/api/alice/sid", json=VALID_SID_BODY)

        assert response.status_code == 502
        assert response.json()["message"] == "HTTP 503: down"


class TestMasterTrades:
    def test_unconfigured_serves_sample_trades(self, make_client):
        client = make_client()

        response = client.get("/api/alice/trades")

        assert response.status_code == 200
        body = response.json()
        assert body["source"] == "fallback"
        assert [t["id"] for t in body["trades"]] == ["T-1001", "T-1003", "T-1004", "T-1006", "T-1007"]
        assert all(t["account"] == "Master" for t in body["trades"])

    def test_live_trades_with_session_header(self, make_client):
        transport = ScriptedTransport(respond(200, upstream_trades_payload()))
        client = make_client(transport, trades_endpoint=TRADES_URL)

        response = client.get("/api/alice/trades", headers={"X-Session-Id": "SID-1"})

        assert response.status_code == 200
        body = response.json()
        assert body["source"] == "live"
        trade = body["trades"][0]
        assert trade["id"] == "X1"
        assert trade["symbol"] == "NIFTY"
        assert trade["side"] == "Sell"
        assert trade["quantity"] == 50
        assert trade["price"] == 100.5
        assert trade["type"] == "Market"
        assert trade["status"] == "Filled"
        assert transport.requests[0].headers["x-session-id"] == "SID-1"

    def test_upstream_status_is_surfaced(self, make_client):
        transport = ScriptedTransport(respond(404, text="no such account"))
        client = make_client(transport, trades_endpoint=TRADES_URL, api_key="key")

        response = client.get("/api/alice/trades")

        assert response.status_code == 404
        assert response.json() == {"error": "HTTP 404: no such account"}

    def test_network_failure_maps_to_500(self, make_client):
        client = make_client(ScriptedTransport(network_error()), trades_endpoint=TRADES_URL, api_key="key")

        response = client.get("/api/alice/trades")

        assert response.status_code == 500
        assert "ConnectError" in response.json()["error"]

    def test_fallback_disabled_returns_503(self, make_client):
        client = make_client(allow_fallback=False)

        response = client.get("/api/alice/trades")

        assert response.status_code == 503
        assert "no trades endpoint" in response.json()["error"]


class TestOperationalEndpoints:
    def test_health_reports_features(self, make_client):
        client = make_client(trades_endpoint=TRADES_URL)

        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["features"] == {
            "live_trades": True,
            "sample_fallback": True,
            "sid_exchange": False,
        }

    def test_metrics_expose_trade_reads(self, make_client):
        client = make_client()
        client.get("/api/alice/trades")

        response = client.get("/metrics")

        assert response.status_code == 200
        assert 'alice_trade_reads_total{source="fallback"} 1.0' in response.text

    def test_request_id_is_echoed_or_generated(self, make_client):
        client = make_client()

        echoed = client.get("/health", headers={"X-Request-ID": "req-123"})
        generated = client.get("/health")

        assert echoed.headers["X-Request-ID"] == "req-123"
        assert generated.headers["X-Request-ID"]

    def test_lifespan_runs_startup_validation(self, make_client):
        with make_client(allow_fallback=False) as client:
            response = client.get("/health")

        assert response.status_code == 200


class TestErrorHandlingMiddleware:
    @pytest.fixture
    def client(self):
        app = FastAPI()
        app.add_middleware(ErrorHandlingMiddleware)
        app.add_middleware(RequestIdMiddleware)

        @app.get("/config")
        def config_failure():
            raise ConfigurationError("trades endpoint missing")

        @app.get("/upstream")
        def upstream_failure():
            raise UpstreamStatusError(500, "boom")

        @app.get("/bug")
        def bug():
            raise RuntimeError("secret internals")

        return TestClient(app, raise_server_exceptions=False)

    def test_configuration_error_maps_to_503(self, client):
        response = client.get("/config", headers={"X-Request-ID": "req-9"})

        assert response.status_code == 503
        assert response.json()["error"] == "ConfigurationError"
        assert response.json()["message"] == "trades endpoint missing"
        assert response.json()["request_id"] == "req-9"

    def test_fetch_error_maps_to_502(self, client):
        response = client.get("/upstream")

        assert response.status_code == 502
        assert response.json()["message"] == "HTTP 500: boom"

    def test_unexpected_error_hides_details(self, client):
        response = client.get("/bug")

        assert response.status_code == 500
        assert response.json()["error"] == "Internal server error"
        assert "secret internals" not in response.text
