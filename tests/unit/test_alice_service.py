import pytest

from services.alice.exceptions import SessionExchangeDisabledError
from services.alice.models import Credentials, TradeSource
from services.alice.service import AliceService
from tests.mocks.mock_alice_api import TRADES_URL, ScriptedTransport, respond, upstream_trades_payload

CREDENTIALS = Credentials(userId="AB1234", password="pw", twoFA="1990", appId="APP1")


@pytest.mark.asyncio
async def test_exchange_is_refused_when_disabled(make_settings, make_fetcher, metrics):
    transport = ScriptedTransport(respond(200, {"sessionID": "SID"}))
    service = AliceService(make_settings(), make_fetcher(transport), metrics)

    with pytest.raises(SessionExchangeDisabledError) as exc_info:
        await service.exchange_session(CREDENTIALS)

    assert "ALICE__ALLOW_SID_EXCHANGE" in exc_info.value.message
    assert transport.call_count == 0


@pytest.mark.asyncio
async def test_exchange_returns_raw_sid_when_enabled(make_settings, make_fetcher, metrics):
    transport = ScriptedTransport(respond(200, {"stat": "Ok", "sessionID": "ABCDEF1234567890WXYZ"}))
    service = AliceService(make_settings(allow_sid_exchange=True), make_fetcher(transport), metrics)

    assert service.session_exchange_enabled
    assert await service.exchange_session(CREDENTIALS) == "ABCDEF1234567890WXYZ"


@pytest.mark.asyncio
async def test_trades_flow_through_service(make_settings, make_fetcher, metrics):
    transport = ScriptedTransport(respond(200, upstream_trades_payload()))
    service = AliceService(
        make_settings(trades_endpoint=TRADES_URL), make_fetcher(transport), metrics
    )

    feed = await service.get_master_trades(session_token="SID-1")

    assert feed.source == TradeSource.LIVE
    assert [t.id for t in feed.trades] == ["X1"]
    assert transport.requests[0].headers["x-session-id"] == "SID-1"
