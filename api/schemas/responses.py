from pydantic import BaseModel, ConfigDict, Field
from typing import List

from services.alice.models import CanonicalTrade, TradeSource


class SidExchangeResponse(BaseModel):
    """Successful SID exchange; both fields carry the masked SID"""
    model_config = ConfigDict(populate_by_name=True)

    ok: bool = True
    session_id_masked: str = Field(alias="sessionIdMasked")
    session_id: str = Field(alias="sessionId")


class SidExchangeFailure(BaseModel):
    ok: bool = False
    message: str


class TradesResponse(BaseModel):
    """Master trades with the source that produced them"""
    trades: List[CanonicalTrade]
    source: TradeSource


class TradesErrorResponse(BaseModel):
    error: str
