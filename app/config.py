"""
Application configuration. Loads from environment variables.
Secrets and sensitive config must never be hardcoded.
"""

import os

from dotenv import load_dotenv

load_dotenv()
from functools import lru_cache
from typing import Optional


@lru_cache(maxsize=1)
def get_settings() -> "Settings":
    """Return cached settings instance."""
    return Settings()


class Settings:
    """Application settings loaded from environment."""

    # App
    app_name: str = "PartnerPulse"
    debug: bool = False

    # Database (postgresql+psycopg for psycopg3; sqlite:// accepted for local runs)
    database_url: str = "postgresql+psycopg://localhost:5432/partnerpulse_dev"
    db_connect_timeout: int = 10  # seconds

    # Security
    secret_key: str = ""
    internal_job_token: str = ""  # Required for /internal/* endpoints

    # LLM
    llm_provider: str = "openai"
    llm_api_key: Optional[str] = None
    # Model roles: reasoning=insight synthesis, cheap=classification and summaries
    llm_model_reasoning: str = "gpt-4o"
    llm_model_cheap: str = "gpt-4o-mini"
    llm_timeout: float = 30.0
    llm_max_retries: int = 2

    # Insight scoring
    insight_llm_adjustment_bound: int = 20  # max |LLM score - base score| applied
    classify_max_chars: int = 1000
    summarize_max_chars: int = 4000
    summary_fallback_chars: int = 500

    # Jobs
    ingest_max_partners: int = 10  # partners processed per ingest run
    digest_limit: int = 10

    def __init__(self) -> None:
        self.app_name = os.getenv("APP_NAME", self.app_name)
        self.debug = os.getenv("DEBUG", "false").lower() == "true"

        default_user = os.getenv("PGUSER") or os.getenv("USER") or "postgres"
        default_url = (
            f"postgresql+psycopg://{default_user}:"
            f"{os.getenv('PGPASSWORD', '')}@"
            f"{os.getenv('PGHOST', 'localhost')}:"
            f"{os.getenv('PGPORT', '5432')}/"
            f"{os.getenv('PGDATABASE', 'partnerpulse_dev')}"
        )
        raw_url = os.getenv("DATABASE_URL", default_url)
        # Ensure psycopg3 driver if URL uses generic postgresql:// (or Heroku-style postgres://)
        if raw_url.startswith("postgres://"):
            raw_url = raw_url.replace("postgres://", "postgresql://", 1)
        if raw_url.startswith("postgresql://") and not raw_url.startswith("postgresql+psycopg"):
            raw_url = raw_url.replace("postgresql://", "postgresql+psycopg://", 1)
        self.database_url = raw_url
        self.db_connect_timeout = int(os.getenv("DB_CONNECT_TIMEOUT", str(self.db_connect_timeout)))

        self.secret_key = os.getenv("SECRET_KEY", "")
        self.internal_job_token = os.getenv("INTERNAL_JOB_TOKEN", "")

        self.llm_provider = os.getenv("LLM_PROVIDER", self.llm_provider)
        self.llm_api_key = os.getenv("LLM_API_KEY") or os.getenv("OPENAI_API_KEY")
        self.llm_model_reasoning = os.getenv("LLM_MODEL_REASONING", self.llm_model_reasoning)
        self.llm_model_cheap = os.getenv("LLM_MODEL_CHEAP", self.llm_model_cheap)
        self.llm_timeout = float(os.getenv("LLM_TIMEOUT", str(self.llm_timeout)))
        self.llm_max_retries = int(os.getenv("LLM_MAX_RETRIES", str(self.llm_max_retries)))

        self.insight_llm_adjustment_bound = int(
            os.getenv("INSIGHT_LLM_ADJUSTMENT_BOUND", str(self.insight_llm_adjustment_bound))
        )
        self.classify_max_chars = int(
            os.getenv("CLASSIFY_MAX_CHARS", str(self.classify_max_chars))
        )
        self.summarize_max_chars = int(
            os.getenv("SUMMARIZE_MAX_CHARS", str(self.summarize_max_chars))
        )
        self.summary_fallback_chars = int(
            os.getenv("SUMMARY_FALLBACK_CHARS", str(self.summary_fallback_chars))
        )

        self.ingest_max_partners = int(
            os.getenv("INGEST_MAX_PARTNERS", str(self.ingest_max_partners))
        )
        self.digest_limit = int(os.getenv("DIGEST_LIMIT", str(self.digest_limit)))
