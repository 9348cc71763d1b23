from decimal import Decimal
from typing import List, Union
from pydantic import AnyHttpUrl, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True)

    API_V1_STR: str = "/api/v1"

    PROJECT_NAME: str = "Marketplace Catalog Service"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "postgresql://localhost:5432/marketplace_db"
    TEST_DATABASE_URL: str = "sqlite+aiosqlite:///:memory:"

    # CORS
    BACKEND_CORS_ORIGINS: List[AnyHttpUrl] = []

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> Union[List[str], str]:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",")]
        elif isinstance(v, (list, str)):
            return v
        raise ValueError(v)

    # Catalog rules
    MAX_ATTRIBUTES_PER_PRODUCT: int = 3
    DEFAULT_VARIANT_PRICE: Decimal = Decimal("0")
    DEFAULT_VARIANT_STOCK: int = 0


settings = Settings()
