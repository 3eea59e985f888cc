import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    # Square API Settings
    square_api_url: str = os.getenv("SQUARE_API_URL", "https://connect.squareup.com/v2")
    square_access_token: str = os.getenv("SQUARE_ACCESS_TOKEN", "")
    square_version: str = os.getenv("SQUARE_VERSION", "2024-01-17")
    square_application_id: str = os.getenv("SQUARE_APPLICATION_ID", "")
    square_location_id: str = os.getenv("SQUARE_LOCATION_ID", "")
    square_timeout: float = float(os.getenv("SQUARE_TIMEOUT", "30"))

    # Rate limiting / retries
    square_max_retries: int = int(os.getenv("SQUARE_MAX_RETRIES", "3"))
    square_retry_delay: float = float(os.getenv("SQUARE_RETRY_DELAY", "1.0"))
    square_page_delay: float = float(os.getenv("SQUARE_PAGE_DELAY", "0.2"))
    square_max_requests_per_second: int = int(os.getenv("SQUARE_MAX_REQUESTS_PER_SECOND", "25"))
    square_batch_size: int = int(os.getenv("SQUARE_BATCH_SIZE", "100"))

    # In-memory cache
    cache_max_size: int = int(os.getenv("CACHE_MAX_SIZE", "1000"))
    cache_ttl: float = float(os.getenv("CACHE_TTL", "300"))

    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    cors_origins: str = os.getenv("CORS_ORIGINS", "*")


settings = Settings()
