"""
Configuration Management Module

Environment-based register configuration using pydantic-settings.
Structured values are given as JSON, e.g.

    CASH_REGISTER_DENOMINATIONS='[100, 50, 20, 10, 5, 1]'
    CASH_REGISTER_INITIAL_STOCK='{"1": 50, "5": 10}'
"""

from decimal import Decimal
from typing import Dict, List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .core import DEFAULT_DENOMINATIONS, DenominationSet
from .inventory import DEFAULT_STOCK, Inventory, default_inventory


class RegisterSettings(BaseSettings):
    """Cash register configuration"""

    model_config = SettingsConfigDict(env_prefix="CASH_REGISTER_")

    # Denomination ladder and starting stock
    denominations: List[Decimal] = [d.value.to_decimal() for d in DEFAULT_DENOMINATIONS]
    initial_stock: Dict[str, int] = dict(DEFAULT_STOCK)

    # Business rules
    default_strategy: str = "maxLarge"
    journal_size: int = Field(default=1000, gt=0)

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text

    def ladder(self) -> DenominationSet:
        return DenominationSet(self.denominations)

    def starting_inventory(self) -> Inventory:
        return default_inventory(self.initial_stock, self.ladder())


def get_settings() -> RegisterSettings:
    """Load settings from the environment"""
    return RegisterSettings()
