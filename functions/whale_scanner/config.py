from shared.config import settings

FUNCTION_NAME = "whale-scanner"
ERROR_CODE = "WHALE_SCANNER_ERROR"

# Scanning
SCAN_BLOCK_COUNT = 3               # Latest blocks read per chain per scan
SCAN_INTERVAL = settings.SCAN_INTERVAL_SECONDS
SCAN_RESULT_PREVIEW = 10           # Transactions echoed back by scan_new
TRANSACTIONS_TABLE = "whale_transactions"

# Queries
DEFAULT_PAGE_SIZE = 50
STATS_COLUMNS = "blockchain,amount,value_usd,risk_level,whale_score,timestamp"
TOP_WHALE_SCORE = 80

# Tokens reported by get_prices
PRICE_SYMBOLS = ["ETH", "BTC", "USDC", "USDT", "MATIC", "BNB"]

# Risk cascade (USD values)
CRITICAL_SCORE, CRITICAL_VALUE_USD = 90, 10_000_000
HIGH_SCORE, HIGH_VALUE_USD = 70, 1_000_000
MEDIUM_SCORE, MEDIUM_VALUE_USD = 50, 500_000

WHALE_TO_WHALE_USD = 5_000_000

# Known DEX routers
DEX_ROUTERS = [
    "0x7a250d5630b4cf539739df2c5dacb4c659f2488d",  # Uniswap V2
    "0xe592427a0aece92de3edee1f18e0157c05861564",  # Uniswap V3
    "0xd9e1ce17f2641f24ae83637ab66a2cca9c378b9f",  # SushiSwap
    "0x1111111254fb6c44bac0bed2854e76f90643097d",  # 1inch
]

# Known bridge contracts
BRIDGES = [
    "0x40ec5b33f54e0e8a33a975908c5ba1c14e5bbbdf",  # Polygon Bridge
    "0x8315177ab297ba92a06054ce80a67ed4dbd7ed3a",  # Arbitrum Bridge
]
