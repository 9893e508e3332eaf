from typing import List, Optional
from pydantic import model_validator
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Explicitly load .env file and override existing environment variables
# This ensures that values from .env take precedence over system-wide environment variables.
load_dotenv(override=True)

class Settings(BaseSettings):
    """Base settings for the fleet tracker service."""

    # API settings
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "Fleet Tracker Service"

    # CORS settings, comma separated
    BACKEND_CORS_ORIGINS: str = "*"

    # Database settings
    # Default values for local development, override these in .env file
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "fleet"
    POSTGRES_PORT: int = 5432

    # Full connection string, used verbatim when provided
    DATABASE_URL: Optional[str] = None

    SQLALCHEMY_DATABASE_URI: Optional[str] = None

    # Cache settings
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_SOCKET_TIMEOUT: float = 1.0  # seconds

    # JWT Authentication settings
    JWT_SECRET_KEY: str = "fleet-tracker"  # Change this in production
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24  # 1 day

    # Demo account accepted by the login endpoint
    DEMO_USERNAME: str = "demo-user"
    DEMO_PASSWORD: str = "demo-pass"

    # Background telemetry simulator
    SIMULATOR_ENABLED: bool = True

    LOG_LEVEL: str = "INFO"

    model_config = {
        "case_sensitive": True,
        "env_file": ".env"
    }

    @model_validator(mode="after")
    def assemble_db_connection(self) -> "Settings":
        if self.SQLALCHEMY_DATABASE_URI:
            return self
        # If DATABASE_URL is provided, use it directly
        if self.DATABASE_URL:
            self.SQLALCHEMY_DATABASE_URI = self.DATABASE_URL
            return self

        # Otherwise, build the connection string from individual components
        self.SQLALCHEMY_DATABASE_URI = (
            f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )
        return self

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.BACKEND_CORS_ORIGINS.split(",") if origin.strip()]

# Create settings instance
settings = Settings()
