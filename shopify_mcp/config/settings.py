"""
Configuration management for the Shopify Admin MCP gateway.
Loads settings from environment variables with sensible defaults.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from dotenv import load_dotenv

# Load .env from project root
PROJECT_ROOT = Path(__file__).parent.parent.parent
load_dotenv(PROJECT_ROOT / ".env")

DEFAULT_API_VERSION = "2025-01"


@dataclass
class ShopifyConfig:
    """Credentials and transport options for the Admin API.

    Values passed explicitly take precedence; anything left empty is
    filled from the environment.
    """

    store_url: str = ""
    access_token: str = ""
    api_version: str = ""
    timeout_seconds: float = 0.0
    max_retries: int = -1

    def __post_init__(self):
        self.store_url = self.store_url or os.getenv("SHOPIFY_STORE_URL", "")
        self.access_token = self.access_token or os.getenv("SHOPIFY_ACCESS_TOKEN", "")
        self.api_version = (
            self.api_version or os.getenv("SHOPIFY_API_VERSION", "") or DEFAULT_API_VERSION
        )
        if not self.timeout_seconds:
            self.timeout_seconds = float(os.getenv("SHOPIFY_TIMEOUT_SECONDS", "30"))
        if self.max_retries < 0:
            self.max_retries = int(os.getenv("SHOPIFY_MAX_RETRIES", "0"))


@dataclass
class LoggingConfig:
    level: str = "INFO"
    log_file: str = ""

    def __post_init__(self):
        self.level = os.getenv("LOG_LEVEL", self.level)
        self.log_file = os.getenv("LOG_FILE", self.log_file)


@dataclass
class ServerConfig:
    name: str = "shopify-mcp-server"
    version: str = "1.0.0"


@dataclass
class Settings:
    shopify: ShopifyConfig = field(default_factory=ShopifyConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    server: ServerConfig = field(default_factory=ServerConfig)

    # Pagination ceiling for fetchAll list calls
    max_paginated_items: int = 10000

    def validate(self) -> list[str]:
        """Validate required configuration. Returns list of missing items."""
        missing = []
        if not self.shopify.store_url:
            missing.append("SHOPIFY_STORE_URL")
        if not self.shopify.access_token:
            missing.append("SHOPIFY_ACCESS_TOKEN")
        return missing


# Global settings instance, read by main.py only
settings = Settings()
