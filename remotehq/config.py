from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    DB_URL: str = "sqlite:///./remotehq.db"

    USER_AGENT: str = "RemoteHQ Job Aggregator"
    BROWSER_USER_AGENT: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    )
    HTTP_TIMEOUT: float = 30.0

    SOURCE_DELAY_SECONDS: float = 1.0
    BATCH_DELAY_SECONDS: float = 0.5
    MAX_RECORDS_PER_SOURCE: int = 100
    DETAIL_LOOKUP_LIMIT: int = 500
    DETAIL_BATCH_SIZE: int = 5

    FETCH_INTERVAL_HOURS: int = 6
    FETCH_ON_STARTUP: bool = True

    LOG_LEVEL: str = "INFO"
    LOG_BUFFER_SIZE: int = 200

    DEFAULT_WHITELIST: list[str] = [
        "software", "engineer", "developer", "dev", "fullstack", "frontend",
        "backend", "swe", "sde", "sdet", "sre", "platform", "infrastructure",
        "infra", "mobile", "ios", "android", "cloud", "devops", "ai",
    ]
    DEFAULT_HARVESTING_MODE: str = "fuzzy"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
