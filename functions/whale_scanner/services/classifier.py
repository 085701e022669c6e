"""
Whale Classifier: scores a transfer against its chain's whale threshold and
labels its risk tier and likely intent. Pure functions, no I/O.
"""
import math
from shared.chains import whale_threshold_for
from functions.whale_scanner.config import (
    CRITICAL_SCORE, CRITICAL_VALUE_USD,
    HIGH_SCORE, HIGH_VALUE_USD,
    MEDIUM_SCORE, MEDIUM_VALUE_USD,
    WHALE_TO_WHALE_USD, DEX_ROUTERS, BRIDGES,
)
from functions.whale_scanner.models.schemas import PatternType, RiskLevel


def whale_score(value_usd: float, chain: str | None) -> int:
    """
    0-100 intensity score from how many times the value exceeds the chain threshold.

    Piecewise linear in the ratio with shrinking slopes, so the score climbs
    quickly just above the threshold and flattens out towards 100.
    """
    ratio = value_usd / whale_threshold_for(chain)
    if math.isnan(ratio) or ratio < 1:
        return 0
    if math.isinf(ratio):
        return 100
    if ratio < 2:
        return 30 + math.floor(ratio * 10)
    if ratio < 5:
        return 50 + math.floor((ratio - 2) * 5)
    if ratio < 10:
        return 65 + math.floor((ratio - 5) * 3)
    if ratio < 50:
        return 80 + math.floor((ratio - 10) * 0.3)
    return min(100, 92 + math.floor((ratio - 50) * 0.05))


def risk_level(value_usd: float, score: int) -> RiskLevel:
    # First matching tier wins
    if score >= CRITICAL_SCORE or value_usd >= CRITICAL_VALUE_USD:
        return RiskLevel.CRITICAL
    if score >= HIGH_SCORE or value_usd >= HIGH_VALUE_USD:
        return RiskLevel.HIGH
    if score >= MEDIUM_SCORE or value_usd >= MEDIUM_VALUE_USD:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def _matches(address: str, known: list[str]) -> bool:
    return any(k[2:] in address for k in known)


def pattern_type(to_address: str | None, value_usd: float) -> PatternType:
    """Destination-based labels take priority over the whale-to-whale value rule."""
    address = (to_address or "").lower()
    if address and _matches(address, DEX_ROUTERS):
        return PatternType.DEX_INTERACTION
    if address and _matches(address, BRIDGES):
        return PatternType.BRIDGE_TRANSFER
    if value_usd >= WHALE_TO_WHALE_USD:
        return PatternType.WHALE_TO_WHALE
    return PatternType.LARGE_TRANSFER
