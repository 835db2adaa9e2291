import pytest

from services.alice.exceptions import SessionExchangeError, UpstreamStatusError
from services.alice.models import Credentials
from services.alice.session import SessionAcquirer, extract_session_id
from tests.mocks.mock_alice_api import SID_URL, ScriptedTransport, respond


@pytest.fixture
def credentials():
    return Credentials(userId="AB1234", password="pw", twoFA="1990", appId="APP1")


@pytest.fixture
def make_acquirer(make_alice_settings, make_fetcher, metrics):
    def _make(transport):
        return SessionAcquirer(make_alice_settings(), make_fetcher(transport), metrics)
    return _make


@pytest.mark.asyncio
async def test_posts_credentials_as_json(make_acquirer, credentials):
    transport = ScriptedTransport(respond(200, {"stat": "Ok", "sessionID": "SID-1"}))

    await make_acquirer(transport).obtain_session(credentials)

    request = transport.requests[0]
    assert request.method == "POST"
    assert str(request.url) == SID_URL
    assert request.headers["content-type"] == "application/json"
    assert transport.last_json() == {
        "userId": "AB1234", "password": "pw", "twoFA": "1990", "appId": "APP1"
    }


@pytest.mark.asyncio
@pytest.mark.parametrize("payload, expected", [
    ({"sessionID": "UPPER"}, "UPPER"),
    ({"sessionId": "lower"}, "lower"),
    ({"stat": "Ok", "sessionId": "lower-ok"}, "lower-ok"),
    ({"sessionID": "UPPER", "sessionId": "lower"}, "UPPER"),
    ({"sessionID": "", "sessionId": "lower"}, "lower"),
])
async def test_returns_session_id_from_either_field(make_acquirer, credentials, payload, expected):
    transport = ScriptedTransport(respond(200, payload))

    assert await make_acquirer(transport).obtain_session(credentials) == expected


@pytest.mark.asyncio
async def test_payload_without_markers_fails_with_raw_payload(make_acquirer, credentials):
    payload = {"stat": "Not_Ok", "emsg": "Invalid 2FA"}
    transport = ScriptedTransport(respond(200, payload))

    with pytest.raises(SessionExchangeError) as exc_info:
        await make_acquirer(transport).obtain_session(credentials)

    assert "Invalid 2FA" in exc_info.value.message
    assert exc_info.value.message.startswith("Failed to obtain SID:")
    assert exc_info.value.payload == payload


@pytest.mark.asyncio
async def test_ok_status_without_session_id_fails(make_acquirer, credentials):
    transport = ScriptedTransport(respond(200, {"stat": "Ok"}))

    with pytest.raises(SessionExchangeError) as exc_info:
        await make_acquirer(transport).obtain_session(credentials)

    assert "without a session id" in exc_info.value.message


@pytest.mark.asyncio
async def test_non_json_response_is_treated_as_empty_payload(make_acquirer, credentials):
    transport = ScriptedTransport(respond(200, text="<html>maintenance</html>"))

    with pytest.raises(SessionExchangeError) as exc_info:
        await make_acquirer(transport).obtain_session(credentials)

    assert exc_info.value.payload == {}
    assert exc_info.value.message == "Failed to obtain SID: {}"


@pytest.mark.asyncio
async def test_unreachable_endpoint_propagates_fetch_error(make_acquirer, credentials, sleep_recorder):
    transport = ScriptedTransport(respond(502, text="bad gateway"))

    with pytest.raises(UpstreamStatusError) as exc_info:
        await make_acquirer(transport).obtain_session(credentials)

    assert exc_info.value.status_code == 502
    assert transport.call_count == 4
    assert sleep_recorder.delays == [0.5, 1.0, 2.0]


@pytest.mark.asyncio
async def test_exchange_outcomes_are_counted(make_acquirer, credentials, metrics):
    await make_acquirer(ScriptedTransport(respond(200, {"sessionId": "s"}))).obtain_session(credentials)
    with pytest.raises(SessionExchangeError):
        await make_acquirer(ScriptedTransport(respond(200, {}))).obtain_session(credentials)

    registry = metrics.registry
    assert registry.get_sample_value("alice_session_exchanges_total", {"outcome": "success"}) == 1
    assert registry.get_sample_value("alice_session_exchanges_total", {"outcome": "rejected"}) == 1


def test_extract_session_id_ignores_non_mappings():
    assert extract_session_id([{"sessionID": "x"}]) is None
    assert extract_session_id(None) is None


def test_credentials_repr_hides_secrets(credentials):
    text = repr(credentials)
    assert "AB1234" in text
    assert "pw" not in text.replace("password", "")
    assert "1990" not in text
