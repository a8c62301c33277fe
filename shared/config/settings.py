"""
Application settings loaded from environment variables.
Uses pydantic-settings for type-safe configuration.
"""

from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Gateway settings with defaults for development."""

    # Server binding
    ws_gateway_host: str = "0.0.0.0"
    # PORT is accepted for platforms that inject it (Heroku, Render, Fly)
    ws_gateway_port: int = Field(
        default=3000,
        validation_alias=AliasChoices("ws_gateway_port", "port"),
    )

    # Comma-separated list of allowed origins (empty or "*" accepts any origin)
    allowed_origins: str = ""

    # Environment
    environment: str = "development"
    debug: bool = True

    # WebSocket limits
    ws_max_message_size: int = 64 * 1024  # 64 KB
    ws_max_total_connections: int = 1000  # Maximum concurrent WebSocket connections
    ws_broadcast_batch_size: int = 50  # Connections to send to in parallel

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"

    def get_allowed_origins(self) -> list[str]:
        """
        Parse allowed_origins into a list.

        Returns an empty list when every origin is accepted.
        """
        origins = [o.strip() for o in self.allowed_origins.split(",") if o.strip()]
        if "*" in origins:
            return []
        return origins

    def validate_production_settings(self) -> list[str]:
        """
        Validate that the gateway is safely configured for production.
        Returns a list of validation errors. Empty list means all checks pass.
        """
        errors = []

        if self.environment == "production":
            if self.debug:
                errors.append("DEBUG must be False in production")

            if not self.get_allowed_origins():
                errors.append(
                    "ALLOWED_ORIGINS must be set in production (comma-separated list of allowed domains)"
                )

        if not 0 < self.ws_gateway_port < 65536:
            errors.append(f"WS_GATEWAY_PORT out of range: {self.ws_gateway_port}")

        if self.ws_broadcast_batch_size < 1:
            errors.append("WS_BROADCAST_BATCH_SIZE must be at least 1")

        return errors


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Convenience exports
settings = get_settings()
