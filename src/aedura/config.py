from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: str = Field("sqlite:///aedura.db")
    api_title: str = Field("Aedura Signup API")
    environment: Literal["development", "production"] = Field("development")
    jwt_secret: Optional[str] = Field(None)
    jwt_algorithm: str = Field("HS256")
    token_ttl_hours: int = Field(24, gt=0)
    password_time_cost: int = Field(3, ge=1)
    password_memory_cost: int = Field(64 * 1024, ge=8)
    password_parallelism: int = Field(1, ge=1)
    free_text_min_length: int = Field(1, ge=1)
    allow_query_login: bool = Field(False)

    @field_validator("jwt_algorithm")
    @classmethod
    def _hmac_only(cls, value: str) -> str:
        value = value.upper()
        if value not in {"HS256", "HS384", "HS512"}:
            raise ValueError("jwt_algorithm must be one of HS256, HS384, HS512")
        return value

    @property
    def secure_cookies(self) -> bool:
        return self.environment == "production"


settings = Settings()
