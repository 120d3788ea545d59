from pydantic_settings import BaseSettings
from typing import List, Any, Optional
import json


def parse_cors_origins(v: Any) -> List[str]:
    """Parse CORS origins from string or list"""
    if isinstance(v, list):
        return v
    if isinstance(v, str):
        # Try JSON parsing first
        if v.startswith('['):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                pass
        # Fall back to comma-separated
        return [origin.strip() for origin in v.split(',') if origin.strip()]
    return []


class Settings(BaseSettings):
    """Application settings - all configurable via environment variables"""

    # ==========================================
    # Application
    # ==========================================
    APP_NAME: str = "NITP Student Portal"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    SECRET_KEY: str
    API_VERSION: str = "v1"

    # Server Configuration
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 8000

    # ==========================================
    # Database
    # ==========================================
    DATABASE_URL: str
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_ECHO: bool = False

    # ==========================================
    # Authentication / credential issuance
    # ==========================================
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 43200  # 30 days, same as the old portal
    JWT_ISSUER: Optional[str] = None
    JWT_AUDIENCE: Optional[str] = None
    BCRYPT_ROUNDS: int = 10  # 4 for tests (fast), 10+ for prod

    # ==========================================
    # Student registration
    # ==========================================
    INSTITUTE_EMAIL_DOMAIN: str = "nitp.ac.in"
    REGISTRATION_ROLE_TYPE: str = "student"

    # Defaults used when the registration.* system settings rows are missing
    DEFAULT_ALLOW_REGISTER: bool = True
    DEFAULT_UNIQUE_EMAIL: bool = True
    DEFAULT_EMAIL_CONFIRMATION: bool = False

    # ==========================================
    # Email
    # ==========================================
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_USER: str = ""
    SMTP_PASSWORD: str = ""
    EMAIL_FROM: str = "noreply@nitp.ac.in"
    EMAIL_FROM_NAME: str = "NITP Student Portal"

    # SendGrid Configuration (preferred when an API key is present)
    SENDGRID_API_KEY: str = ""
    USE_SENDGRID: bool = True

    # Public URL of this API, used to build confirmation links
    PUBLIC_API_URL: str = "http://localhost:8000"

    # ==========================================
    # CORS (stored as comma-separated string, parsed to list)
    # ==========================================
    CORS_ORIGINS_STR: str = "http://localhost:3000,http://127.0.0.1:3000"

    @property
    def CORS_ORIGINS(self) -> List[str]:
        """Parse CORS origins from comma-separated string"""
        return parse_cors_origins(self.CORS_ORIGINS_STR)

    # ==========================================
    # Rate Limiting
    # ==========================================
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_PER_MINUTE: int = 60
    RATE_LIMIT_STORAGE_URI: str = "memory://"  # redis://host:6379/1 in production
    REGISTER_RATE_LIMIT: str = "3/minute"
    PASSWORD_REQUEST_RATE_LIMIT: str = "5/minute"

    # ==========================================
    # Logging
    # ==========================================
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/app.log"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env that aren't defined in Settings

    def get_confirmation_url(self, confirmation_token: str) -> str:
        return (
            f"{self.PUBLIC_API_URL.rstrip('/')}/api/{self.API_VERSION}"
            f"/auth/email-confirmation?confirmation={confirmation_token}"
        )


# Create settings instance
settings = Settings()
