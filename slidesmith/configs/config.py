"""
Configuration module for SlideSmith (configs).
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class RetryPolicy:
    """Attempt budget and per-attempt deadline for one remote operation."""

    max_attempts: int
    timeout: float | None = None
    backoff_step: float = 5.0


class Config:
    def __init__(self) -> None:
        # Edge functions (remote AI / PDF services)
        self.edge_functions_url = os.getenv(
            "EDGE_FUNCTIONS_URL", "http://localhost:54321/functions/v1"
        ).rstrip("/")
        self.edge_functions_key = os.getenv("EDGE_FUNCTIONS_KEY") or None

        # Per-call deadlines (seconds)
        self.analyze_timeout = float(os.getenv("ANALYZE_TIMEOUT", "90"))
        self.outline_timeout = float(os.getenv("OUTLINE_TIMEOUT", "90"))
        self.slide_image_timeout = float(os.getenv("SLIDE_IMAGE_TIMEOUT", "90"))
        self.render_timeout = float(os.getenv("RENDER_TIMEOUT", "120"))
        self.extract_timeout = float(os.getenv("EXTRACT_TIMEOUT", "60"))

        # Retry budgets and pacing
        self.remote_max_attempts = int(os.getenv("REMOTE_MAX_ATTEMPTS", "3"))
        self.db_max_attempts = int(os.getenv("DB_MAX_ATTEMPTS", "3"))
        self.retry_backoff_step = float(os.getenv("RETRY_BACKOFF_STEP", "5"))
        self.slide_pacing_delay = float(os.getenv("SLIDE_PACING_DELAY", "5"))

        # Input limits
        self.transcript_min_chars = int(os.getenv("TRANSCRIPT_MIN_CHARS", "100"))
        self.transcript_max_chars = int(os.getenv("TRANSCRIPT_MAX_CHARS", "100000"))
        self.max_upload_mb = int(os.getenv("MAX_UPLOAD_MB", "10"))

        # Database
        self.database_url = os.getenv("DATABASE_URL") or None
        self.db_echo = os.getenv("DB_ECHO", "false").lower() == "true"

        # Logging / runtime
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()
        self.log_file = os.getenv("LOG_FILE")
        self.log_dir = os.getenv("LOG_DIR", "logs")
        self.port = int(os.getenv("PORT", "8000"))

        # Rate limits (slowapi syntax)
        self.rate_limit_enabled = (
            os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
        )
        self.run_rate_limit = os.getenv("RUN_RATE_LIMIT", "10/minute")
        self.extract_rate_limit = os.getenv("EXTRACT_RATE_LIMIT", "20/minute")

        # CORS settings
        self.cors_origins = self._parse_cors_origins(
            os.getenv("CORS_ORIGINS", "http://localhost:3000")
        )

    def _parse_cors_origins(self, origins_str: str) -> list[str]:
        """Parse CORS origins from a comma-separated string."""
        if not origins_str:
            return ["http://localhost:3000"]
        return [origin.strip() for origin in origins_str.split(",") if origin.strip()]

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024

    def policy_for(self, step: str) -> RetryPolicy:
        """Return the retry policy used for the given pipeline step."""
        timeouts: dict[str, float | None] = {
            "understand": self.analyze_timeout,
            "outline": self.outline_timeout,
            "images": self.slide_image_timeout,
            "render": self.render_timeout,
            "persist": None,
        }
        if step not in timeouts:
            raise ValueError(f"Unknown pipeline step: {step}")
        attempts = (
            self.db_max_attempts if step == "persist" else self.remote_max_attempts
        )
        return RetryPolicy(
            max_attempts=attempts,
            timeout=timeouts[step],
            backoff_step=self.retry_backoff_step,
        )


config = Config()
