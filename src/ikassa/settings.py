"""Application settings via environment variables."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ikassa.checkout import CheckoutConfig

__all__ = ["Settings"]


class Settings(BaseSettings):
    """Central configuration, read from the environment."""

    model_config = SettingsConfigDict(env_prefix="IKASSA_")

    # Checkout
    checkout_id: str = ""
    sign_algorithm: str = "sha256"
    sign_key: str = Field(default="", repr=False)
    sign_test_key: str = Field(default="", repr=False)

    # Logging
    log_json: bool = True
    log_level: str = "INFO"

    def checkout_config(self) -> CheckoutConfig:
        """Raises ConfigurationError when the checkout id or a key is missing."""
        return CheckoutConfig(
            checkout_id=self.checkout_id,
            sign_key=self.sign_key,
            sign_test_key=self.sign_test_key,
            sign_algorithm=self.sign_algorithm,
        )
