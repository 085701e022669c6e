from datetime import datetime, timezone
from typing import Optional
from pydantic import BaseModel, Field, field_validator


class AnalyticsRequest(BaseModel):
    timeframe: Optional[str] = None
    blockchain: Optional[str] = None
    address: Optional[str] = None
    limit: Optional[int] = Field(None, ge=1, le=5000)


class HistoricalTx(BaseModel):
    """One `whale_transactions` row as the analytics engine sees it."""

    id: Optional[str] = None
    from_address: str = ""
    to_address: Optional[str] = None
    value_usd: float = 0.0
    blockchain: str = ""
    created_at: Optional[str] = None
    whale_score: Optional[float] = None
    risk_level: Optional[str] = None

    model_config = {"coerce_numbers_to_str": True}

    @field_validator("value_usd", mode="before")
    @classmethod
    def _null_value(cls, v):
        return 0.0 if v is None else v

    @property
    def epoch(self) -> float:
        """created_at as unix seconds, 0 when missing or unparseable."""
        if not self.created_at:
            return 0.0
        try:
            ts = datetime.fromisoformat(self.created_at.replace("Z", "+00:00"))
        except ValueError:
            return 0.0
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=timezone.utc)
        return ts.timestamp()


class HealthResponse(BaseModel):
    status: str = "ok"
    function: str = "analytics-engine"
    version: str = "1.0.0"
