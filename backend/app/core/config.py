"""
Configuration settings for the SwiftCourier Realtime Backend.

This module handles application configuration using Pydantic settings.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings."""

    # Application
    app_name: str = "SwiftCourier Realtime Backend"
    api_version: str = "v1"
    debug: bool = True
    log_level: str = "INFO"

    # Security Configuration (JWT)
    secret_key: str = "your-secret-key-change-this-in-production-min-32-chars"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 30

    # Redis Configuration (token revocation)
    redis_url: str = "redis://localhost:6379/0"
    redis_decode_responses: bool = True

    # Realtime stream
    sse_heartbeat_seconds: float = 30.0
    sse_queue_size: int = 256
    dedupe_events: bool = True

    # Shipping domain
    status_transition_policy: str = "permissive"  # permissive | forward_only
    seed_demo_data: bool = True

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
