"""
Data models for upstream market data.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict


class Token(BaseModel):
    """Model for a listed token and its latest prices."""

    model_config = ConfigDict(validate_assignment=True, extra="ignore")

    ticker: str
    name: str
    price_ada: Optional[float] = None
    price_usd: Optional[float] = None
    token_id: str = ""
    logo: str = ""
    decimals: int = 0

    def ada_usd_rate(self) -> Optional[float]:
        """USD value of one ADA implied by this token's two prices."""
        if (self.price_ada or 0) > 0 and (self.price_usd or 0) > 0:
            return self.price_usd / self.price_ada
        return None
