"""
Statistical analyses over historical whale transactions: behaviour patterns,
risk scoring, volume trends, anomalies and wallet clusters.

All functions are pure. They take HistoricalTx lists in any order and sort
by `created_at` where order matters.
"""
import math
from collections import defaultdict
from typing import Sequence
from functions.analytics_engine.config import (
    PATTERN_MIN_TXS, TREND_PATTERN_MIN_TXS, WASH_TRADING_MIN_TXS, WASH_TRADING_MAX_GAP_SECONDS,
    WASH_TRADING_CONFIDENCE, MAX_CONFIDENCE,
    RISK_WEIGHTS, RISK_HIGH, RISK_MEDIUM, MIN_TIME_SPAN_SECONDS, VELOCITY_WINDOW,
    TREND_MIN_POINTS, SHORT_MA_WINDOW, LONG_MA_WINDOW, EMA_ALPHA, PREDICTION_HORIZONS,
    ANOMALY_MIN_POINTS, ANOMALY_Z_THRESHOLD, ANOMALY_HIGH_Z, ANOMALY_PREVIEW,
    CLUSTER_COUNT, CLUSTER_ITERATIONS,
)
from functions.analytics_engine.models.schemas import HistoricalTx
from functions.analytics_engine.services.indicators import (
    correlation, exponential_moving_average, mean, moving_average, standard_deviation, z_score,
)

Point = tuple[float, float]


def _chronological(txs: Sequence[HistoricalTx]) -> list[HistoricalTx]:
    return sorted(txs, key=lambda t: t.epoch)


def _confidence(delta: float, base: float) -> float:
    return min(MAX_CONFIDENCE, 0.6 + abs(delta) / (base or 1) * 0.3)


# --- Patterns ---------------------------------------------------------------

def detect_patterns(txs: Sequence[HistoricalTx]) -> dict:
    """Accumulation / distribution and wash-trading candidates per sender."""
    patterns: dict[str, list[dict]] = {
        "accumulation": [],
        "distribution": [],
        "rotation": [],
        "wash_trading": [],
    }

    by_sender: dict[str, list[HistoricalTx]] = defaultdict(list)
    for tx in txs:
        by_sender[tx.from_address].append(tx)

    for address, group in by_sender.items():
        if len(group) < PATTERN_MIN_TXS:
            continue

        ordered = _chronological(group)
        volumes = [t.value_usd for t in ordered]
        ma = moving_average(volumes, min(3, len(volumes)))
        trend = ma[-1] - ma[0]

        if trend and len(volumes) >= TREND_PATTERN_MIN_TXS:
            kind = "accumulation" if trend > 0 else "distribution"
            patterns[kind].append({
                "address": address,
                "confidence": _confidence(trend, ma[0]),
                "volume_trend": trend,
                "transaction_count": len(group),
            })

        times = [t.epoch for t in ordered]
        avg_gap = mean([b - a for a, b in zip(times, times[1:])])
        if len(group) >= WASH_TRADING_MIN_TXS and avg_gap < WASH_TRADING_MAX_GAP_SECONDS:
            patterns["wash_trading"].append({
                "address": address,
                "confidence": WASH_TRADING_CONFIDENCE,
                "avg_time_gap_minutes": round(avg_gap / 60, 2),
                "transaction_count": len(group),
            })

    return patterns


# --- Risk -------------------------------------------------------------------

def risk_label(score: float) -> str:
    if score > RISK_HIGH:
        return "high"
    if score > RISK_MEDIUM:
        return "medium"
    return "low"


def calculate_risk(txs: Sequence[HistoricalTx], address: str | None = None) -> dict:
    """Weighted volume / frequency / velocity / diversity risk, 0-100."""
    if address:
        needle = address.lower()
        relevant = [
            t for t in txs
            if t.from_address.lower() == needle or (t.to_address or "").lower() == needle
        ]
    else:
        relevant = list(txs)

    if not relevant:
        return {"overall_score": 0, "risk_level": "low", "factors": {}}

    relevant = _chronological(relevant)
    volumes = [t.value_usd for t in relevant]
    times = [t.epoch for t in relevant]

    avg_volume = mean(volumes)
    variance_ratio = standard_deviation(volumes) / (avg_volume or 1)
    volume_risk = min(100.0, avg_volume / 1_000_000 * 20 + variance_ratio * 30)

    span = max(max(times) - min(times), MIN_TIME_SPAN_SECONDS)
    per_day = len(relevant) / (span / 86400)
    frequency_risk = min(100.0, per_day * 10)

    recent = volumes[-VELOCITY_WINDOW:]
    older = volumes[:-VELOCITY_WINDOW]
    recent_avg = mean(recent)
    older_avg = mean(older) if older else recent_avg
    velocity_change = abs((recent_avg - older_avg) / (older_avg or 1))
    velocity_risk = min(100.0, velocity_change * 50)

    chains = {t.blockchain for t in relevant}
    diversity_risk = 30 if len(chains) > 3 else len(chains) * 10

    overall = math.floor(
        volume_risk * RISK_WEIGHTS["volume"]
        + frequency_risk * RISK_WEIGHTS["frequency"]
        + velocity_risk * RISK_WEIGHTS["velocity"]
        + diversity_risk * RISK_WEIGHTS["diversity"]
    )
    overall = min(100, overall)

    return {
        "overall_score": overall,
        "risk_level": risk_label(overall),
        "factors": {
            "volume_risk": {
                "score": math.floor(volume_risk),
                "avg_volume_usd": math.floor(avg_volume),
                "variance": round(variance_ratio, 2),
            },
            "frequency_risk": {
                "score": math.floor(frequency_risk),
                "transactions_per_day": round(per_day, 2),
            },
            "velocity_risk": {
                "score": math.floor(velocity_risk),
                "change_percentage": round(velocity_change * 100, 2),
            },
            "diversity_risk": {
                "score": diversity_risk,
                "blockchain_count": len(chains),
            },
        },
    }


# --- Trends -----------------------------------------------------------------

def predict_trends(txs: Sequence[HistoricalTx]) -> dict:
    """Short/long moving-average crossover confirmed by an EMA."""
    if len(txs) < TREND_MIN_POINTS:
        return {"trend": "insufficient_data", "confidence": 0, "predictions": []}

    volumes = [t.value_usd for t in _chronological(txs)]
    short = moving_average(volumes, SHORT_MA_WINDOW)[-1]
    long = moving_average(volumes, LONG_MA_WINDOW)[-1]
    ema = exponential_moving_average(volumes, EMA_ALPHA)
    ema_now = ema[-1]

    if short > long and ema_now > long:
        trend = "bullish"
        confidence = min(MAX_CONFIDENCE, 0.6 + (short - long) / (long or 1))
    elif short < long and ema_now < long:
        trend = "bearish"
        confidence = min(MAX_CONFIDENCE, 0.6 + (long - short) / (long or 1))
    else:
        trend = "neutral"
        confidence = 0.5

    last = volumes[-1]
    avg_change = (ema_now - ema[0]) / len(ema)
    predictions = [
        {
            "timeframe": horizon,
            "predicted_volume_usd": max(0, math.floor(last + avg_change * step)),
            "trend_direction": trend,
            "confidence": round(confidence * (1 - step * 0.1), 2),
        }
        for step, horizon in enumerate(PREDICTION_HORIZONS, start=1)
    ]

    return {
        "trend": trend,
        "confidence": round(confidence, 2),
        "short_ma": math.floor(short),
        "long_ma": math.floor(long),
        "ema": math.floor(ema_now),
        "volume_time_correlation": round(correlation(list(range(len(volumes))), volumes), 2),
        "predictions": predictions,
    }


# --- Anomalies --------------------------------------------------------------

def detect_anomalies(txs: Sequence[HistoricalTx]) -> dict:
    """Transactions whose USD value is more than 2.5 standard deviations from the mean."""
    if len(txs) < ANOMALY_MIN_POINTS:
        return {"anomalies": [], "threshold_used": 0}

    volumes = [t.value_usd for t in txs]
    mu = mean(volumes)
    sigma = standard_deviation(volumes)

    anomalies = []
    for tx in txs:
        z = z_score(tx.value_usd, mu, sigma)
        if abs(z) <= ANOMALY_Z_THRESHOLD:
            continue
        deviation = (tx.value_usd - mu) / mu * 100 if mu else 0.0
        anomalies.append({
            "transaction_id": tx.id,
            "address": tx.from_address,
            "value_usd": tx.value_usd,
            "z_score": round(z, 2),
            "severity": "high" if abs(z) > ANOMALY_HIGH_Z else "medium",
            "deviation_from_mean": f"{deviation:.2f}%",
            "timestamp": tx.created_at,
        })

    return {
        "anomalies": anomalies[:ANOMALY_PREVIEW],
        "total_anomalies": len(anomalies),
        "threshold_used": ANOMALY_Z_THRESHOLD,
        "mean_volume": math.floor(mu),
        "std_deviation": math.floor(sigma),
    }


# --- Clusters ---------------------------------------------------------------

def _nearest(point: Point, centroids: list[Point]) -> int:
    best, best_dist = 0, math.inf
    for idx, (cx, cy) in enumerate(centroids):
        dist = math.hypot(point[0] - cx, point[1] - cy)
        if dist < best_dist:
            best, best_dist = idx, dist
    return best


def _cluster_type(avg_vol: float, avg_count: float, max_vol: float, max_count: float) -> str:
    if avg_vol > max_vol * 0.6 or avg_count > max_count * 0.6:
        return "high_activity_whales"
    if avg_vol < max_vol * 0.3 and avg_count < max_count * 0.3:
        return "low_activity_participants"
    return "medium_activity"


def cluster_wallets(txs: Sequence[HistoricalTx], k: int = CLUSTER_COUNT) -> dict:
    """k-means over (average volume, transaction count), both scaled to [0, 1]."""
    totals: dict[str, list[float]] = {}
    for tx in txs:
        entry = totals.setdefault(tx.from_address, [0, 0.0])
        entry[0] += 1
        entry[1] += tx.value_usd

    wallets = [
        {"address": addr, "count": int(count), "total": total, "avg": total / count}
        for addr, (count, total) in totals.items()
    ]
    k = max(1, min(k, len(wallets)))
    if not wallets:
        return {"clusters": [], "total_wallets_analyzed": 0, "cluster_count": k}

    max_vol = max(w["avg"] for w in wallets) or 1
    max_count = max(w["count"] for w in wallets)
    points: list[Point] = [(w["avg"] / max_vol, w["count"] / max_count) for w in wallets]

    # Evenly spaced along the diagonal
    centroids: list[Point] = [(i / (k - 1 or 1), i / (k - 1 or 1)) for i in range(k)]
    for _ in range(CLUSTER_ITERATIONS):
        members: list[list[Point]] = [[] for _ in range(k)]
        for p in points:
            members[_nearest(p, centroids)].append(p)
        for idx, group in enumerate(members):
            if group:
                centroids[idx] = (mean([p[0] for p in group]), mean([p[1] for p in group]))

    assigned: list[list[dict]] = [[] for _ in range(k)]
    for wallet, p in zip(wallets, points):
        assigned[_nearest(p, centroids)].append({
            "address": wallet["address"],
            "avg_volume": math.floor(wallet["avg"]),
            "transaction_count": wallet["count"],
            "total_volume": math.floor(wallet["total"]),
        })

    clusters = []
    for group in assigned:
        if not group:
            continue
        avg_vol = mean([w["avg_volume"] for w in group])
        avg_count = mean([w["transaction_count"] for w in group])
        clusters.append({
            "wallets": group,
            "characteristics": {
                "type": _cluster_type(avg_vol, avg_count, max_vol, max_count),
                "avg_volume_usd": math.floor(avg_vol),
                "avg_transaction_count": math.floor(avg_count),
                "wallet_count": len(group),
            },
        })

    return {"clusters": clusters, "total_wallets_analyzed": len(wallets), "cluster_count": k}


# --- Dashboard --------------------------------------------------------------

def dashboard_stats(txs: Sequence[HistoricalTx]) -> dict:
    chains: dict[str, int] = defaultdict(int)
    risks: dict[str, int] = defaultdict(int)
    for tx in txs:
        chains[tx.blockchain] += 1
        risks[tx.risk_level or "unknown"] += 1

    scores = [t.whale_score or 0 for t in txs]
    return {
        "overview": {
            "total_transactions": len(txs),
            "total_volume_usd": sum(t.value_usd for t in txs),
            "unique_whales": len({t.from_address for t in txs}),
            "avg_whale_score": math.floor(mean(scores)),
        },
        "blockchain_distribution": dict(chains),
        "risk_distribution": dict(risks),
    }
