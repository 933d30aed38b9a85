from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "decklist-scraper"
    debug: bool = False

    database_url: str = "sqlite+aiosqlite:///decklists.db"

    user_agent: str = "decklist-scraper/1.0"

    # Upper bound for a single request, in seconds
    request_timeout: float = 60.0

    # Pause between consecutive requests to the same source, in seconds
    politeness_delay: float = 1.0

    # Hard cap on listing pages scanned per discovery pass
    max_discovery_pages: int = 10


settings = Settings()
