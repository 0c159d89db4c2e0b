"""Environment-driven settings.

Values are read from environment variables (prefix ``POW_``) and
optionally from a ``.env`` file. Call ``to_config()`` once at startup
and share the resulting ``PowConfig``.

Example:
    POW_SALT=9f2c... POW_SALT_ENCODING=hex POW_DIFFICULTY_AVERAGE=50000

    from powsha256.settings import PowSettings
    settings = PowSettings()
    config = settings.to_config()
    proof = config.prove_work(b"payload", settings.difficulty())
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field, field_validator, ValidationInfo
from pydantic_settings import BaseSettings, SettingsConfigDict

from .config import PowConfig
from .difficulty import AverageAttempts
from .types import MAX_U128


class PowSettings(BaseSettings):
    """Proof-of-work settings loaded from the environment."""

    salt: str = Field(alias="POW_SALT")
    salt_encoding: Literal["utf-8", "hex"] = Field(default="utf-8", alias="POW_SALT_ENCODING")

    # Expected hashes per proof
    difficulty_average: int = Field(
        default=100_000,
        ge=1,
        le=MAX_U128,
        alias="POW_DIFFICULTY_AVERAGE",
    )
    workers: int = Field(default=1, ge=1, alias="POW_WORKERS")

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    @field_validator("salt")
    @classmethod
    def _salt_not_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("POW_SALT must not be empty")
        return value

    @field_validator("salt_encoding")
    @classmethod
    def _hex_salt_parses(cls, value: str, info: ValidationInfo) -> str:
        salt = info.data.get("salt")
        if value == "hex" and salt is not None:
            try:
                bytes.fromhex(salt)
            except ValueError as e:
                raise ValueError(f"POW_SALT is not valid hex: {e}") from e
        return value

    def salt_bytes(self) -> bytes:
        if self.salt_encoding == "hex":
            return bytes.fromhex(self.salt)
        return self.salt.encode("utf-8")

    def difficulty(self) -> AverageAttempts:
        return AverageAttempts(self.difficulty_average)

    def to_config(self) -> PowConfig:
        return PowConfig(salt=self.salt_bytes(), workers=self.workers)
