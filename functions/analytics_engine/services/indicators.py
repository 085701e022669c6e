"""
Small statistics helpers used by the analytics engine. Inputs are plain
lists of floats; empty input yields empty or zero output.
"""
import math
from typing import Sequence


def mean(data: Sequence[float]) -> float:
    return sum(data) / len(data) if data else 0.0


def moving_average(data: Sequence[float], window: int) -> list[float]:
    """Trailing moving average. The first `window - 1` points average what is available."""
    window = max(1, window)
    result = []
    for i in range(len(data)):
        chunk = data[max(0, i - window + 1):i + 1]
        result.append(sum(chunk) / len(chunk))
    return result


def standard_deviation(data: Sequence[float]) -> float:
    """Population standard deviation."""
    if not data:
        return 0.0
    m = mean(data)
    return math.sqrt(sum((x - m) ** 2 for x in data) / len(data))


def z_score(value: float, mu: float, sigma: float) -> float:
    if sigma == 0:
        return 0.0
    return (value - mu) / sigma


def correlation(x: Sequence[float], y: Sequence[float]) -> float:
    """Pearson correlation; 0 for mismatched, empty or constant series."""
    if len(x) != len(y) or not x:
        return 0.0
    mx, my = mean(x), mean(y)
    num = sum((a - mx) * (b - my) for a, b in zip(x, y))
    den = math.sqrt(sum((a - mx) ** 2 for a in x) * sum((b - my) ** 2 for b in y))
    return num / den if den else 0.0


def exponential_moving_average(data: Sequence[float], alpha: float = 0.3) -> list[float]:
    if not data:
        return []
    result = [float(data[0])]
    for value in data[1:]:
        result.append(alpha * value + (1 - alpha) * result[-1])
    return result
