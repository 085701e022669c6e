"""
Aggregate statistics over stored whale transactions.
"""
import math
from datetime import datetime, timedelta, timezone
from functions.whale_scanner.config import TOP_WHALE_SCORE
from functions.whale_scanner.models.schemas import ChainBreakdown, WhaleStats


def _parse_ts(value) -> datetime | None:
    if not value:
        return None
    try:
        ts = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None
    return ts if ts.tzinfo else ts.replace(tzinfo=timezone.utc)


def summarize_transactions(rows: list[dict], now: datetime | None = None) -> WhaleStats:
    now = now or datetime.now(timezone.utc)
    cutoff = now - timedelta(hours=24)
    stats = WhaleStats(total_transactions=len(rows))

    total_score = 0
    for row in rows:
        value = row.get("value_usd") or 0
        score = row.get("whale_score") or 0
        stats.total_volume_usd += value

        chain = row.get("blockchain") or "unknown"
        bucket = stats.by_blockchain.setdefault(chain, ChainBreakdown())
        bucket.count += 1
        bucket.volume += value

        level = row.get("risk_level")
        if level in stats.by_risk_level:
            stats.by_risk_level[level] += 1

        total_score += score
        if score >= TOP_WHALE_SCORE:
            stats.top_whales += 1

        ts = _parse_ts(row.get("timestamp"))
        if ts and ts >= cutoff:
            stats.last_24h_volume += value

    if rows:
        stats.avg_transaction_usd = stats.total_volume_usd / len(rows)
        stats.avg_whale_score = math.floor(total_score / len(rows))
    return stats
