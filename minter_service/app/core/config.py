from pydantic import AnyHttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    DATABASE_URL: str

    HANDCASH_APP_ID: str
    HANDCASH_APP_SECRET: str
    HANDCASH_BASE_URL: AnyHttpUrl = "https://cloud.handcash.io"

    # service-level account that owns the collection and signs mint orders
    HANDCASH_MINTER_APP_ID: str = ""
    HANDCASH_MINTER_APP_SECRET: str = ""
    HANDCASH_MINTER_AUTH_TOKEN: str = ""

    SESSION_SECRET: str = "handcash-secret"
    SESSION_HTTPS_ONLY: bool = False
    SESSION_MAX_AGE: int = 24 * 60 * 60

    APP_URL: AnyHttpUrl = "http://localhost:8000"
    SEED_IMAGE_BASE_URL: AnyHttpUrl = "https://res.cloudinary.com/dcerwavw6/image/upload/seeds"

    MINT_POLL_INITIAL_DELAY: float = 0.0
    MINT_POLL_BASE_INTERVAL: float = 1.0
    MINT_POLL_MAX_INTERVAL: float = 8.0
    MINT_POLL_TIMEOUT: float = 120.0

    INVENTORY_PAGE_SIZE: int = 50

    WEBHOOK_MINT_ENABLED: bool = False

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
