import tempfile
from functools import lru_cache
from pathlib import Path
from typing import List, Literal, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevelChoice = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="LATEXFIX_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore"
    )

    # --- Server ---
    host: str = Field("0.0.0.0", description="Interface the HTTP server binds to")
    port: int = Field(3000, validation_alias=AliasChoices("PORT", "LATEXFIX_PORT"))
    cors_origins: List[str] = Field(default_factory=lambda: ["*"], description="Allowed CORS origins")
    max_source_bytes: int = Field(10 * 1024 * 1024, description="Largest accepted LaTeX payload")
    output_filename: str = Field("document.pdf", description="Filename advertised for the returned PDF")

    # --- Compilation ---
    compiler: str = Field("pdflatex", description="LaTeX engine invoked per attempt")
    compile_timeout_seconds: float = Field(30.0, description="Wall-clock limit for one compiler run")
    max_attempts: int = Field(3, description="Ceiling on compile attempts per job")
    work_root: Path = Field(Path(tempfile.gettempdir()), description="Parent directory for job workspaces")

    # --- Completion service ---
    llm_model: str = "claude-sonnet-4-20250514"
    llm_max_tokens: int = 4000
    llm_temperature: float = 0.3
    llm_timeout_seconds: float = Field(60.0, description="Per-request timeout for the completion service")
    llm_max_retries: int = Field(2, description="Transport retries with exponential backoff")

    # --- Logging ---
    log_level: LogLevelChoice = "INFO"
    json_logs: bool = True

    # --- Secrets (Read from Env Only) ---
    anthropic_api_key: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("ANTHROPIC_API_KEY", "LATEXFIX_ANTHROPIC_API_KEY"),
        description="Anthropic API Key",
    )

    @field_validator("max_attempts")
    @classmethod
    def _at_least_one_attempt(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_attempts must be at least 1")
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_level(cls, v):
        if isinstance(v, str):
            return v.upper()
        return v

    @property
    def fix_configured(self) -> bool:
        return bool(self.anthropic_api_key)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
