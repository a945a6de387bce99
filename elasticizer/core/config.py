from pydantic import BaseModel, ConfigDict
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional

ELASTICSEARCH_REFRESH = "wait_for"


class ElasticizerConfig(BaseModel):
    """Per-translator configuration; immutable once built."""

    model_config = ConfigDict(frozen=True)

    host: str
    document_type: str
    prefix: str = ""
    refresh: str = ELASTICSEARCH_REFRESH


class Settings(BaseSettings):
    PORT: int = 8000
    # local front end; override with a JSON array in .env
    CORS_ALLOW_ORIGINS: List[str] = ["http://localhost:8080"]
    API_BASE_PATH: str = "/api"

    ES_HOST: str = "http://localhost:9200"
    ES_CLOUD_ID: Optional[str] = None
    ES_USERNAME: str | None = None
    ES_PASSWORD: str | None = None
    ES_API_KEY: str | None = None
    ES_REQUEST_TIMEOUT: int = 30
    ES_MAX_RETRIES: int = 3

    # Typeless engines (7.x+) only know "_doc"
    ES_DOCUMENT_TYPE: str = "_doc"
    # Prepended to every logical index name, e.g. "staging." -> "staging.logs"
    ES_INDEX_PREFIX: str = ""
    # "wait_for" makes writes visible to the next search before we answer
    ES_REFRESH: str = ELASTICSEARCH_REFRESH

    # Size used when the caller does not paginate. Keep it <= the index setting
    # max_result_window (10,000 by default); larger windows make ES answer 400.
    ES_MAX_RESULTS: int = 10_000

    # Allow .env file to override defaults
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    def elasticizer_config(self) -> ElasticizerConfig:
        return ElasticizerConfig(
            host=self.ES_HOST,
            document_type=self.ES_DOCUMENT_TYPE,
            prefix=self.ES_INDEX_PREFIX,
            refresh=self.ES_REFRESH,
        )


settings = Settings()
