from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    # App
    APP_NAME: str = "KNK Workforce"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "postgresql://workforce_user:workforce_pass@db:5432/workforce_db"

    # Security (tokens are issued by the auth service, we only verify them)
    SECRET_KEY: str = "your-secret-key-change-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24  # 24 hours

    # Day buckets are cut at local midnight in this zone
    ORG_TIMEZONE: str = "Europe/Helsinki"

    # Payroll rules
    DEFAULT_REGULAR_RATE: float = 25.0  # used until an admin configures a rate
    REGULAR_HOURS_PER_DAY: float = 8.0
    OVERTIME_MULTIPLIER: float = 1.5  # Mon-Sat hours past the daily threshold
    SUNDAY_MULTIPLIER: float = 2.0  # every Sunday hour

    # Cleaner detail page
    WORKER_DETAIL_LOG_LIMIT: int = 200
    WORKER_DETAIL_DAY_LIMIT: int = 30

    # App URL (frontend)
    FRONTEND_URL: Optional[str] = None

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
