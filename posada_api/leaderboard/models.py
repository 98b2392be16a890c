"""
Data models for community trade reports.
"""

import time
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

SELL_EVENTS = ("sell", "sell_half")
BUY_EVENTS = ("buy", "add")


class Trade(BaseModel):
    """A trade reported by an opted-in bot."""

    model_config = ConfigDict(extra="ignore")

    ts: int = Field(default_factory=lambda: int(time.time()))
    cid: str
    event: str
    symbol: str = ""
    strategy: str = ""
    cost: Optional[float] = None
    pnl: Optional[float] = None
    reason: str = ""

    @field_validator("symbol", "strategy", "reason", mode="before")
    @classmethod
    def none_as_empty(cls, value):
        return "" if value is None else value

    @field_validator("cid", mode="before")
    @classmethod
    def cid_as_text(cls, value):
        return str(value) if isinstance(value, int) else value

    @property
    def is_sell(self) -> bool:
        return self.event in SELL_EVENTS

    @property
    def is_buy(self) -> bool:
        return self.event in BUY_EVENTS


class UserProfile(BaseModel):
    """Leaderboard identity of a customer."""

    model_config = ConfigDict(validate_assignment=True, extra="ignore")

    username: str = ""
    opt_in: bool = False
    joined: int = Field(default_factory=lambda: int(time.time()))
