"""
Centralized application settings
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional


class Settings(BaseSettings):
    """Storefront backend settings"""

    # API Settings
    API_TITLE: str = "MinkenWorld Storefront API"
    API_VERSION: str = "1.0.0"
    API_DESCRIPTION: str = "Storefront backend and shopping assistant for the MinkenWorld marketplace"
    LOG_LEVEL: str = "INFO"

    # Commerce backend (Medusa Store API)
    MEDUSA_BACKEND_URL: str = "http://localhost:9000"
    MEDUSA_PUBLISHABLE_KEY: str = ""
    COMMERCE_TIMEOUT_SECONDS: float = 30.0
    CATALOG_CACHE_TTL_SECONDS: int = 300
    CATALOG_CACHE_MAX_ENTRIES: int = 256

    # Shopping assistant (Anthropic)
    ANTHROPIC_API_KEY: str = ""
    CLAUDE_MODEL: str = "claude-haiku-4-5-20251001"
    MAX_TOKENS: int = 2048
    MAX_TOOL_ITERATIONS: int = 5
    AGENT_TIMEOUT_SECONDS: float = 60.0
    MAX_HISTORY_MESSAGES: int = 10
    MAX_HISTORY_TOKENS: int = 8000
    CHAT_RATE_LIMIT_PER_MINUTE: int = 20

    # Messaging (TalkJS)
    TALKJS_APP_ID: str = ""
    TALKJS_SECRET_KEY: str = ""
    TALKJS_API_URL: str = "https://api.talkjs.com"

    # Storefront
    SITE_NAME: str = "MinkenWorld"
    BASE_URL: str = "http://localhost:3000"
    DEFAULT_REGION: str = "ke"
    DEFAULT_CURRENCY: str = "KES"
    PRODUCT_LIMIT: int = 12

    # CORS - Can be string (comma-separated) or JSON array
    # Example: "http://localhost:3000,https://yourdomain.com" or '["http://localhost:3000"]'
    ALLOWED_ORIGINS: Optional[str] = "http://localhost:3000,http://localhost:3001"

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    def get_allowed_origins(self) -> List[str]:
        """Parse ALLOWED_ORIGINS string into list"""
        if not self.ALLOWED_ORIGINS:
            return ["http://localhost:3000"]

        # Try JSON parse first (for array format)
        import json
        try:
            origins = json.loads(self.ALLOWED_ORIGINS)
            if isinstance(origins, list):
                return origins
        except (json.JSONDecodeError, ValueError):
            pass

        # Fall back to comma-separated string
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",")]

    @property
    def assistant_configured(self) -> bool:
        return bool(self.ANTHROPIC_API_KEY)

    @property
    def messaging_configured(self) -> bool:
        return bool(self.TALKJS_APP_ID and self.TALKJS_SECRET_KEY)


settings = Settings()
