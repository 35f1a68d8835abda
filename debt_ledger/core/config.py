from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    PROJECT_NAME: str = "Debt Ledger"
    PROJECT_VERSION: str = "0.1.0"

    # MongoDB
    MONGODB_URL: str = "mongodb://localhost:27017"
    DATABASE_NAME: str = "debt_ledger"

    # Payment allocation
    AUTO_REDISTRIBUTE: bool = True
    CAP_TOTAL_TO_PENDING: bool = True
    MAX_PAYMENT_AMOUNT: float = 1_000_000

    # Display
    CURRENCY_SYMBOL: str = "₹"
    DEFAULT_ADJUSTED_BY: str = "System"

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env"
    )

settings = Settings()
