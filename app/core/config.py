from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    app_name: str = Field(default="News Scraper API", alias="APP_NAME")
    environment: str = Field(default="development", alias="ENVIRONMENT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_json: bool = Field(default=False, alias="LOG_JSON")

    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=5000, alias="PORT")

    database_url: str = Field(default="sqlite+aiosqlite:///./news.db", alias="DATABASE_URL")
    db_pool_size: int = Field(default=20, alias="DB_POOL_SIZE")
    db_pool_timeout_seconds: float = Field(default=2.0, alias="DB_POOL_TIMEOUT_SECONDS")
    db_pool_recycle_seconds: int = Field(default=30, alias="DB_POOL_RECYCLE_SECONDS")

    storage_dir: str = Field(default="./data", alias="STORAGE_DIR")
    snapshot_retention: int = Field(default=7, alias="SNAPSHOT_RETENTION")

    site_url: str = Field(default="https://g1.globo.com", alias="SITE_URL")
    source_label: str = Field(default="G1", alias="SOURCE_LABEL")
    post_selector: str = Field(default=".feed-post", alias="POST_SELECTOR")
    title_selector: str = Field(default=".feed-post-link", alias="TITLE_SELECTOR")
    summary_selector: str = Field(default=".feed-post-body-resumo", alias="SUMMARY_SELECTOR")
    link_selector: str = Field(default="a", alias="LINK_SELECTOR")
    summary_placeholder: str = Field(default="No summary available", alias="SUMMARY_PLACEHOLDER")

    request_timeout_seconds: float = Field(default=10.0, alias="REQUEST_TIMEOUT_SECONDS")
    user_agent: str = Field(
        default=(
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
        ),
        alias="USER_AGENT",
    )
    accept_language: str = Field(default="pt-BR,pt;q=0.9,en-US;q=0.8,en;q=0.7", alias="ACCEPT_LANGUAGE")

    # Recent rows needed before a scrape request is answered from the store
    cache_window_seconds: int = Field(default=300, alias="CACHE_WINDOW_SECONDS")
    cache_min_articles: int = Field(default=10, alias="CACHE_MIN_ARTICLES")
    cache_max_articles: int = Field(default=50, alias="CACHE_MAX_ARTICLES")
    fallback_limit: int = Field(default=50, alias="FALLBACK_LIMIT")

    default_page_limit: int = Field(default=50, alias="DEFAULT_PAGE_LIMIT")

    scheduler_enabled: bool = Field(default=True, alias="SCHEDULER_ENABLED")
    scrape_interval_minutes: int = Field(default=15, alias="SCRAPE_INTERVAL_MINUTES")

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

settings = Settings()
