
from pydantic import Field
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application configuration loaded from environment variables / .env file."""

    app_name: str = "Shopping"
    app_env: str = "development"
    app_port: int = 8000

    # Database (SQLite for local dev)
    database_url: str = Field(
        default="sqlite+aiosqlite:///./shopping_dev.db",
        alias="DATABASE_URL",
    )

    # Query routing
    query_method: str = Field(
        default="database", alias="QUERY_METHOD",
    )  # "database" | "typesense"
    default_per_page: int = Field(default=15, alias="DEFAULT_PER_PAGE")

    # Typesense
    typesense_host: str = Field(default="localhost", alias="TYPESENSE_HOST")
    typesense_port: int = Field(default=8108, alias="TYPESENSE_PORT")
    typesense_protocol: str = Field(default="http", alias="TYPESENSE_PROTOCOL")
    typesense_api_key: str | None = Field(default=None, alias="TYPESENSE_API_KEY")
    typesense_timeout: float = Field(default=5.0, alias="TYPESENSE_TIMEOUT")
    typesense_collection_prefix: str = Field(
        default="", alias="TYPESENSE_COLLECTION_PREFIX",
    )
    typesense_max_per_page: int = Field(
        default=250, alias="TYPESENSE_MAX_PER_PAGE",
    )  # Typesense rejects per_page above 250

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "populate_by_name": True,
    }

    @property
    def typesense_url(self) -> str:
        return f"{self.typesense_protocol}://{self.typesense_host}:{self.typesense_port}"

    @property
    def typesense_enabled(self) -> bool:
        """The search-index driver is available only when an API key is configured."""
        return bool(self.typesense_api_key)

settings = Settings()
