# hextags/common/settings.py
from __future__ import annotations

from functools import lru_cache
from typing import Optional
from pydantic import BaseModel, Field, AliasChoices, field_validator, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _to_bool(v: str | bool | int | None, default: bool = False) -> bool:
    if isinstance(v, bool):
        return v
    if v is None:
        return default
    s = str(v).strip().lower()
    return s in {"1", "true", "yes", "y", "on"}


class DBConfig(BaseModel):
    driver: str = "postgresql+psycopg"
    host: str = "localhost"
    port: int = 5432
    name: str = "hextags"
    user: str = "hextags"
    password: str = "hextags"
    schema_name: str = "public"  # "public" means: no explicit schema on tables
    echo: bool = False
    pool_size: int = 10
    max_overflow: int = 20
    pool_pre_ping: bool = True
    pool_recycle: int = 1800

    # Optional single URL (if set, it takes precedence)
    url: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("url", "database_url"),
    )

    @computed_field  # type: ignore[misc]
    @property
    def effective_url(self) -> str:
        if self.url:
            return self.url
        return f"{self.driver}://{self.user}:{self.password}@{self.host}:{self.port}/{self.name}"


class TagConfig(BaseModel):
    # Exact-match dedup by default; False folds case when building the text key
    case_sensitive: bool = True
    max_text_length: int = Field(200, ge=1)
    max_group_length: int = Field(100, ge=1)
    resolve_retries: int = Field(3, ge=1, le=20)

    @field_validator("case_sensitive", mode="before")
    @classmethod
    def _boolify(cls, v):
        return _to_bool(v, default=True)


class Settings(BaseSettings):
    # -------- App / Env --------
    app_name: str = "hextags"
    app_env: str = "development"  # development|test|staging|production
    log_level: str = "INFO"

    # -------- Sub-configs --------
    db: DBConfig = DBConfig()
    tags: TagConfig = TagConfig()

    # Top-level DATABASE_URL wins over DB__* parts
    database_url_override: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("DATABASE_URL", "database_url_override"),
    )

    # -------- Alembic / migrations --------
    alembic_version_table_schema: Optional[str] = None

    # -------- Testcontainers / CI toggles --------
    use_testcontainers: bool = False
    test_db_image: str = "postgres:15-alpine"
    test_database_url: str = "sqlite+pysqlite:///:memory:"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("use_testcontainers", mode="before")
    @classmethod
    def _boolify(cls, v):
        return _to_bool(v)

    # ===== Convenience: DB URL & schema =====
    @computed_field  # type: ignore[misc]
    @property
    def database_url(self) -> str:
        return self.database_url_override or self.db.effective_url

    @computed_field  # type: ignore[misc]
    @property
    def db_schema(self) -> Optional[str]:
        schema = self.db.schema_name
        if not schema or schema.lower() == "public":
            return None
        return schema


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Global settings accessor (cached). Use this everywhere you need config:
        from hextags.common.settings import get_settings
        cfg = get_settings()
    """
    return Settings()  # pydantic_settings will read from .env automatically
