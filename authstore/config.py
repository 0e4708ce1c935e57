"""Configuration settings."""
from typing import Any

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Database settings for building the store's engine.

    The store itself never reads these; they are consumed by
    authstore.models.create_engine_from_settings.
    """

    # Hosting platforms hand out postgresql:// URLs; SQLAlchemy async needs
    # the postgresql+asyncpg:// driver prefix.
    database_url: str = "postgresql+asyncpg://localhost:5432/sqrl"
    debug: bool = False  # echo SQL
    pool_pre_ping: bool = True

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        if self.database_url.startswith("postgresql://"):
            object.__setattr__(
                self,
                "database_url",
                self.database_url.replace("postgresql://", "postgresql+asyncpg://", 1)
            )

    class Config:
        env_file = ".env"
        env_prefix = "AUTHSTORE_"
