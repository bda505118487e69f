from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env")

    APP_NAME: str = "TCG-INVENTORY"
    SECRET_KEY: str = "change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 480
    DATABASE_URL: str = "sqlite+pysqlite:///./tcg_inventory.db"
    PARTNER_USERNAME: str = "partner"
    PARTNER_EMAIL: str = "partner@example.com"
    PARTNER_PASSWORD: str = "change-me"
    TRANSFER_NUMBER_PREFIX: str = "TR"
    TRANSFER_NUMBER_MAX_ATTEMPTS: int = 5
    TRANSFER_RESTOCK_ON_CLOSE: bool = False
    DEFAULT_LOW_STOCK_THRESHOLD: int = 5
    METRICS_ENABLED: bool = True
    OPS_ENABLE_INTEGRITY_SCAN: bool = True

settings = Settings()
