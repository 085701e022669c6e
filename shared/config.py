from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Supabase (PostgREST + GoTrue)
    SUPABASE_URL: str = ""
    SUPABASE_KEY: str = ""

    # Blockchain RPC endpoints
    ETHEREUM_RPC_URL: str = "https://eth.llamarpc.com"
    POLYGON_RPC_URL: str = "https://polygon.llamarpc.com"
    ARBITRUM_RPC_URL: str = "https://arbitrum.llamarpc.com"
    OPTIMISM_RPC_URL: str = "https://optimism.llamarpc.com"
    BSC_RPC_URL: str = "https://bsc.llamarpc.com"

    # Prices
    DEFILLAMA_API_URL: str = "https://coins.llama.fi"
    PRICE_CACHE_TTL_SECONDS: int = 60

    # Whale scanning
    SCAN_INTERVAL_SECONDS: int = 300  # 0 disables the background scan

    # Application
    HTTP_TIMEOUT_SECONDS: float = 10.0
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def rest_url(self) -> str:
        return f"{self.SUPABASE_URL.rstrip('/')}/rest/v1"

    @property
    def auth_url(self) -> str:
        return f"{self.SUPABASE_URL.rstrip('/')}/auth/v1"


settings = Settings()
