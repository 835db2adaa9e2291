from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from dependency_injector.wiring import inject, Provide
import time

from app.containers import AppContainer
from core.logging import get_api_logger_safe, get_audit_logger
from core.utils.exceptions import AliceMirrorException, create_error_context
from services.alice.exceptions import (
    ConfigurationIncompleteError,
    FetchError,
    SessionExchangeDisabledError,
)
from services.alice.models import Credentials
from services.alice.security import mask_session_id
from services.alice.service import AliceService
from api.schemas.responses import (
    SidExchangeFailure,
    SidExchangeResponse,
    TradesErrorResponse,
    TradesResponse,
)

router = APIRouter(tags=["Alice Blue"])

api_logger = get_api_logger_safe("alice_api")
audit_logger = get_audit_logger("alice_audit")

REQUIRED_SID_FIELDS = ("userId", "password", "twoFA", "appId")


def _upstream_status(error: Exception) -> int:
    """Surface an upstream HTTP error status as our own, 500 otherwise."""
    status_code = getattr(error, "status_code", None)
    if isinstance(status_code, int) and 400 <= status_code <= 599:
        return status_code
    return 500


@router.post(
    "/alice/sid",
    response_model=SidExchangeResponse,
    responses={400: {"model": SidExchangeFailure}, 403: {"model": SidExchangeFailure},
               502: {"model": SidExchangeFailure}},
)
@inject
async def exchange_sid(
    request: Request,
    alice_service: AliceService = Depends(Provide[AppContainer.alice_service]),
):
    """
    Exchange Alice Blue credentials for a SID (dev only).

    The SID is masked before it is returned.
    """
    client_ip = request.client.host if request.client else "unknown"

    if not alice_service.session_exchange_enabled:
        return JSONResponse(
            status_code=403,
            content=SidExchangeFailure(message=str(SessionExchangeDisabledError())).model_dump(),
        )

    try:
        body = await request.json()
    except ValueError:
        body = None
    if not isinstance(body, dict):
        body = {}

    if any(not body.get(field) for field in REQUIRED_SID_FIELDS):
        return JSONResponse(
            status_code=400,
            content=SidExchangeFailure(
                message="Missing required fields: userId, password, twoFA, appId"
            ).model_dump(),
        )

    credentials = Credentials(**{field: str(body[field]) for field in REQUIRED_SID_FIELDS})

    start_time = time.time()
    try:
        session_id = await alice_service.exchange_session(credentials)
    except SessionExchangeDisabledError as e:
        return JSONResponse(status_code=403, content=SidExchangeFailure(message=e.message).model_dump())
    except AliceMirrorException as e:
        api_logger.error("SID exchange error", client_ip=client_ip,
                         **create_error_context(e, "sid_exchange"))
        return JSONResponse(status_code=502, content=SidExchangeFailure(message=e.message).model_dump())

    masked = mask_session_id(session_id)
    audit_logger.info("SID issued", user_id=credentials.user_id, client_ip=client_ip,
                      sid_masked=masked, processing_time_ms=(time.time() - start_time) * 1000,
                      action="SID_EXCHANGE")
    return SidExchangeResponse(sessionIdMasked=masked, sessionId=masked)


@router.get(
    "/alice/trades",
    response_model=TradesResponse,
    responses={500: {"model": TradesErrorResponse}, 503: {"model": TradesErrorResponse}},
)
@inject
async def get_master_trades(
    request: Request,
    alice_service: AliceService = Depends(Provide[AppContainer.alice_service]),
):
    """
    Master account trades, live when configured, sample data otherwise.

    A SID may be supplied in the configured session header.
    """
    session_header = alice_service.settings.alice.session_header_name
    session_token = request.headers.get(session_header) or None

    try:
        feed = await alice_service.get_master_trades(session_token=session_token)
    except ConfigurationIncompleteError as e:
        api_logger.error("Trades unavailable", error=e.message)
        return JSONResponse(status_code=503, content={"error": e.message})
    except FetchError as e:
        status_code = _upstream_status(e)
        api_logger.error("Failed to fetch Alice trades", response_code=status_code,
                         **create_error_context(e, "get_master_trades"))
        return JSONResponse(status_code=status_code, content={"error": e.message})
    except AliceMirrorException as e:
        api_logger.error("Failed to fetch Alice trades", **create_error_context(e, "get_master_trades"))
        return JSONResponse(status_code=500, content={"error": e.message})

    api_logger.info("Master trades served", count=len(feed.trades), source=feed.source.value)
    return TradesResponse(trades=feed.trades, source=feed.source)
