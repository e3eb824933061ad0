"""
Application settings
Read from environment variables / .env
"""
from decimal import Decimal
from typing import Dict
from pydantic import ConfigDict
from pydantic_settings import BaseSettings

from core.payments.models import EngineConfig


class Settings(BaseSettings):
    """Application settings"""

    # application
    APP_NAME: str = "Camp Reservations Back-Office"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # database
    DATABASE_URL: str = "sqlite:///./camps.db"

    # JWT
    SECRET_KEY: str = "camp-secret-key-change-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 480

    # payment engine
    DEPOSIT_BASE_AMOUNT: Decimal = Decimal("500.00")
    DEPOSIT_MATCH_TOLERANCE: Decimal = Decimal("100.00")
    ORDER_ID_PREFIX: str = "RES"
    GATEWAY_CHANNEL_METHODS: Dict[int, str] = {64: "BLIK", 53: "Karta"}
    DEFAULT_GATEWAY_METHOD: str = "Online"
    DEFAULT_MANUAL_METHOD: str = "Ręczna"

    model_config = ConfigDict(env_file=".env", case_sensitive=True)

    def engine_config(self) -> EngineConfig:
        """Engine constants built from the settings"""
        return EngineConfig(
            deposit_base=self.DEPOSIT_BASE_AMOUNT,
            deposit_match_tolerance=self.DEPOSIT_MATCH_TOLERANCE,
            order_id_prefix=self.ORDER_ID_PREFIX,
            channel_methods=tuple(sorted(self.GATEWAY_CHANNEL_METHODS.items())),
            default_gateway_method=self.DEFAULT_GATEWAY_METHOD,
            default_manual_method=self.DEFAULT_MANUAL_METHOD,
        )


# global settings instance
settings = Settings()
