FUNCTION_NAME = "agent-deployment"
ERROR_CODE = "AGENT_DEPLOYMENT_ERROR"

AGENTS_TABLE = "agents"
DEFAULT_AGENT_TYPE = "whale_tracker"
DEPLOYMENT_REGION = "us-east-1"
