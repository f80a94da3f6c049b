"""
Centralized configuration for Responsive Tester
Every tunable of the service is read from the environment (or .env) here
"""

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """
    Service settings, read from environment variables.
    Defaults suit local development; production overrides via .env.
    """

    # ======================
    # Completion Service Configuration
    # ======================
    ANTHROPIC_API_KEY: str = Field(default="", description="Anthropic API key")
    ANTHROPIC_MODEL: str = Field(
        default="claude-sonnet-4-20250514",
        description="Claude model used for analysis and CSS fix generation"
    )
    ANALYSIS_MAX_TOKENS: int = Field(
        default=500,
        description="Max tokens for the free-form analysis response"
    )
    CSS_FIX_MAX_TOKENS: int = Field(
        default=1000,
        description="Max tokens for the CSS fix response"
    )
    DESIGN_MAX_TOKENS: int = Field(
        default=1000,
        description="Max tokens for the design issue scan response"
    )
    COMPLETION_TEMPERATURE: float = Field(
        default=0.7,
        description="Sampling temperature for every completion request"
    )

    # ======================
    # Scanner Configuration
    # ======================
    SCAN_LOAD_TIMEOUT: int = Field(
        default=10,
        description="Seconds to wait for the scanned page to fire load"
    )
    DESIGN_HTML_LIMIT: int = Field(
        default=8000,
        description="Max characters of page HTML forwarded to the design scan"
    )

    # ======================
    # Browser Pool Configuration
    # ======================
    BROWSER_POOL_SIZE: int = Field(
        default=3,
        description="Browsers kept warm; also the max number of concurrent page loads"
    )
    BROWSER_MAX_PAGES: int = Field(
        default=10,
        description="Pages a browser serves before it is relaunched"
    )
    BROWSER_TIMEOUT: int = Field(
        default=300,
        description="Seconds a browser may live before it is relaunched"
    )

    # ======================
    # Outbound HTTP Configuration
    # ======================
    FETCH_TIMEOUT: int = Field(
        default=30,
        description="Timeout in seconds for the page proxy fetch"
    )
    FETCH_USER_AGENT: str = Field(
        default="Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
        description="User agent sent by the page proxy"
    )
    WORDPRESS_TIMEOUT: int = Field(
        default=30,
        description="Timeout in seconds for WordPress REST calls"
    )

    # ======================
    # Logging Configuration
    # ======================
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level"
    )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"  # Allow extra env vars in .env file


# ======================
# Convenience Functions
# ======================

def get_settings() -> Settings:
    """Build settings from the current environment"""
    return Settings()
