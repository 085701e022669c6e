FUNCTION_NAME = "alert-processor"
ERROR_CODE = "ALERT_PROCESSOR_ERROR"

ALERTS_TABLE = "alerts"
DEFAULT_PAGE_SIZE = 50
DEFAULT_ALERT_TYPE = "whale_transaction"
DEFAULT_SEVERITY = "info"

# Demo alert generator
TEST_ALERT_COUNT = 5
TEST_ALERT_TYPES = ["whale_transaction", "pattern_detected", "threshold_breach", "agent_status"]
TEST_SEVERITIES = ["info", "warning", "critical"]
TEST_BLOCKCHAINS = ["ethereum", "polygon", "arbitrum"]
