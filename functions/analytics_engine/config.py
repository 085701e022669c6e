FUNCTION_NAME = "analytics-engine"
ERROR_CODE = "ANALYTICS_ENGINE_ERROR"

TRANSACTIONS_TABLE = "whale_transactions"
HISTORY_LIMIT = 500
HISTORY_COLUMNS = "id,from_address,to_address,value_usd,blockchain,created_at,whale_score,risk_level"

# Pattern detection
PATTERN_MIN_TXS = 3
TREND_PATTERN_MIN_TXS = 5
WASH_TRADING_MIN_TXS = 4
WASH_TRADING_MAX_GAP_SECONDS = 3600
WASH_TRADING_CONFIDENCE = 0.7
MAX_CONFIDENCE = 0.95

# Risk scoring
RISK_WEIGHTS = {"volume": 0.35, "frequency": 0.25, "velocity": 0.30, "diversity": 0.10}
RISK_HIGH = 70
RISK_MEDIUM = 40
MIN_TIME_SPAN_SECONDS = 3600
VELOCITY_WINDOW = 10

# Trend prediction
TREND_MIN_POINTS = 10
SHORT_MA_WINDOW = 5
LONG_MA_WINDOW = 10
EMA_ALPHA = 0.3
PREDICTION_HORIZONS = ["1h", "4h", "24h"]

# Anomaly detection
ANOMALY_MIN_POINTS = 5
ANOMALY_Z_THRESHOLD = 2.5
ANOMALY_HIGH_Z = 3.0
ANOMALY_PREVIEW = 20

# Wallet clustering
CLUSTER_COUNT = 3
CLUSTER_ITERATIONS = 5
