"""Application configuration from environment."""
from pydantic import ConfigDict
from pydantic_settings import BaseSettings

from phaseslot.logic.models import VolatilityProfile


class Settings(BaseSettings):
    """Server settings. Override with PHASESLOT_* environment variables."""

    model_config = ConfigDict(env_prefix="PHASESLOT_")

    # Server
    debug: bool = False
    log_level: str = "INFO"
    redis_url: str = "redis://localhost:6379/0"

    # Protocol
    protocol_version: str = "1.0"
    currency: str = "USD"

    # Betting
    allowed_bets: list[float] = [0.25, 0.50, 1.00, 5.00, 10.00, 25.00]
    default_bet: float = 1.00
    starting_balance: float = 1000.00

    # Game config defaults
    volatility_profile: VolatilityProfile = VolatilityProfile.MEDIUM
    big_win_threshold_multiplier: float = 5

    # Redis TTLs
    session_state_ttl_seconds: int = 86400
    lock_ttl_seconds: int = 30  # Auto-expire lock if process crashes mid-spin
    idempotency_ttl_seconds: int = 3600


settings = Settings()
