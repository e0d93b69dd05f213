from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
from pydantic import Field, field_validator
from typing import Annotated, List, Optional

class Settings(BaseSettings):
    # Basic environment settings
    ENVIRONMENT: str = Field("development")

    # Target ERP system
    ERP_BASE_URL: str = Field("http://13.200.122.70/")
    # Alternative URLs should be provided as a comma-separated list in the env var.
    ERP_ALTERNATIVE_URLS: Annotated[List[str], NoDecode] = Field(default_factory=list)
    FINANCIAL_YEAR: str = Field("2024-2025")

    # Browser session settings
    BROWSER_HEADLESS: bool = Field(True)
    BROWSER_SLOW_MO: int = Field(0)
    BROWSER_TIMEOUT: int = Field(60000)
    VIEWPORT_WIDTH: int = Field(1920)
    VIEWPORT_HEIGHT: int = Field(1080)

    # Workflow pacing (seconds between steps, milliseconds between fields)
    STEP_DELAY_SECONDS: float = Field(1.0)
    FIELD_DELAY_MS: int = Field(200)
    SELECTOR_OVERRIDES_FILE: Optional[str] = Field(None)

    # Job processing settings
    WORKER_CONCURRENCY: int = Field(1)
    SKIP_TERMINAL_JOBS: bool = Field(True)

    # Logging configuration
    LOG_LEVEL: str = Field("INFO")

    # Email service settings
    SENDGRID_API_KEY: Optional[str] = Field(None)
    FROM_EMAIL: Optional[str] = Field(None)

    @field_validator("ERP_ALTERNATIVE_URLS", mode="before")
    def assemble_alternative_urls(cls, v):
        if isinstance(v, str):
            return [url.strip() for url in v.split(",") if url.strip()]
        return v

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

# Create a single instance of the settings that can be imported anywhere in the project.
settings = Settings()
