import logging
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, HttpUrl, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict


class TeamPatch(BaseModel):
    """A team record added to the directory when the team table lacks it."""

    id: int
    guid: UUID
    name: str
    alias: Optional[str] = None
    league: Optional[str] = None


# The Athletics are missing from the team table
DEFAULT_TEAM_PATCHES = [
    TeamPatch(
        id=85,  # ID in the catalog database
        guid=UUID("27A59D3B-FF7C-48EA-B016-4798F560F5E1"),  # SportRadar GUID
        name="Athletics",
        alias="ATH",
        league="MLB",
    )
]


MIN_BATCH_SIZE = 1
MAX_BATCH_SIZE = 1000


class AppSettings(BaseSettings):
    """Application settings loaded from environment variables or .env file."""

    # Supabase Configuration
    supabase_url: HttpUrl = Field(..., description="URL for the Supabase project.")
    supabase_key: str = Field(..., description="Service key for the Supabase project.")
    catalog_schema: str = Field(
        "public", description="Schema holding the content catalog and team tables."
    )
    roster_schema: str = Field(
        "sportradar", description="Schema holding the per-league player tables."
    )

    # Matching Service Configuration
    llm_api_url: HttpUrl = Field(
        ..., description="Chat completions endpoint used to match players."
    )
    llm_api_key: str = Field(..., description="Bearer token for the matching service.")
    llm_model: str = Field("gpt-4o", description="Model name sent with each request.")
    max_completion_tokens: int = Field(3500, gt=0)
    temperature: float = Field(1.0, ge=0, le=2)
    top_p: float = Field(1.0, gt=0, le=1)
    request_timeout_seconds: float = Field(60.0, gt=0)
    request_delay_seconds: float = Field(
        0.9,
        ge=0,
        description="Pause after every matching call to stay under the rate limit.",
    )

    # Batch Settings
    batch_size: int = Field(
        30,
        ge=MIN_BATCH_SIZE,
        le=MAX_BATCH_SIZE,
        description="Maximum number of mentions read per run.",
    )
    content_id_chunk_size: int = Field(
        100, ge=1, description="Maximum content ids per IN filter."
    )
    team_patches: List[TeamPatch] = Field(
        default_factory=lambda: list(DEFAULT_TEAM_PATCHES),
        description="Teams appended to the directory when absent from the team table.",
    )

    # Logging Configuration
    log_level: str = Field(
        "INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."
    )

    # Pydantic Settings Configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @property
    def secrets(self) -> List[str]:
        return [self.supabase_key, self.llm_api_key]


LOG_LEVELS = ("DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


def load_settings() -> AppSettings:
    """Reads settings once at startup, exiting when required values are missing."""
    try:
        settings = AppSettings()
    except ValidationError as e:
        logging.error(f"Invalid roster-match configuration:\n{e}")
        raise SystemExit("Failed to load application settings. Exiting.")

    level = settings.log_level.upper()
    if level not in LOG_LEVELS:
        logging.warning(f"Unknown log level {settings.log_level!r}, using INFO.")
        level = "INFO"
    settings.log_level = level
    return settings
