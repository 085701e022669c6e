from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class PatternType(str, Enum):
    DEX_INTERACTION = "dex_interaction"
    BRIDGE_TRANSFER = "bridge_transfer"
    WHALE_TO_WHALE = "whale_to_whale"
    LARGE_TRANSFER = "large_transfer"


class WhaleTransaction(BaseModel):
    hash: str
    from_address: str
    to_address: str
    amount: str
    value_usd: int
    token_symbol: str
    blockchain: str
    block_number: int
    whale_score: int = Field(..., ge=0, le=100)
    risk_level: RiskLevel
    pattern_type: PatternType
    transaction_type: str = "transfer"
    timestamp: str

    def to_row(self) -> dict:
        return self.model_dump(mode="json")


class ScanSummary(BaseModel):
    scanned_chains: list[str]
    new_transactions: int
    transactions: list[WhaleTransaction]


class TransactionFilters(BaseModel):
    risk_level: Optional[RiskLevel] = None
    min_amount: Optional[float] = Field(None, ge=0)


class TransactionQuery(BaseModel):
    blockchain: Optional[str] = None
    limit: Optional[int] = Field(None, ge=1)
    offset: Optional[int] = Field(None, ge=0)
    filters: Optional[TransactionFilters] = None


class ScanRequest(BaseModel):
    blockchain: Optional[str] = None


class EmptyPayload(BaseModel):
    pass


class ChainBreakdown(BaseModel):
    count: int = 0
    volume: float = 0


class WhaleStats(BaseModel):
    total_transactions: int = 0
    total_volume_usd: float = 0
    avg_transaction_usd: float = 0
    avg_whale_score: int = 0
    by_blockchain: dict[str, ChainBreakdown] = Field(default_factory=dict)
    by_risk_level: dict[str, int] = Field(
        default_factory=lambda: {level.value: 0 for level in RiskLevel}
    )
    top_whales: int = 0
    last_24h_volume: float = 0


class HealthResponse(BaseModel):
    status: str = "ok"
    function: str = "whale-scanner"
    version: str = "1.0.0"
    chains: list[str] = Field(default_factory=list)
    scan_interval_seconds: int = 0
