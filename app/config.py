import os
import logging
import logging.config
from contextvars import ContextVar
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

# Base Paths
APP_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = APP_DIR.parent

# Resources
DEFAULT_ARTIFACTS_DIR = PROJECT_ROOT / "videos"  # local scratch working directory

LOG_FORMAT = "%(asctime)s [%(levelname)s] [%(request_id)s] %(name)s - %(message)s"

logger = logging.getLogger("viralcut")

# Request being served by the current task; copied into worker threads
request_id_var: ContextVar[str] = ContextVar("request_id", default="-")


class RequestIdFilter(logging.Filter):
    """Stamps each record with the ID of the request that produced it."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get()
        return True


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass(frozen=True)
class Settings:
    """
    Process-wide configuration.

    Built once at start-up and handed to every client, adapter and
    middleware that needs it.
    """

    gemini_api_key: str = ""
    transcription_model: str = "gemini-2.5-flash"
    highlight_model: str = "gemini-2.5-flash"
    highlight_temperature: float = 0.7

    artifacts_dir: Path = DEFAULT_ARTIFACTS_DIR
    cleanup_delay_seconds: float = 60.0

    # External call timeouts
    download_timeout_seconds: float = 600.0
    transcode_timeout_seconds: float = 300.0
    api_timeout_seconds: float = 300.0

    # Rate limiting (job-initiating endpoints only)
    rate_limit_requests: int = 10
    rate_limit_window_seconds: int = 3600
    # Proxies in front of the service; the client is read this many hops
    # from the right of X-Forwarded-For
    trusted_proxy_hops: int = 0

    # Security / domains
    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    allowed_hosts: list[str] = field(default_factory=lambda: ["*"])

    host: str = "0.0.0.0"
    port: int = 3000

    environment: str = "development"
    log_level: str = "INFO"
    log_file_path: Optional[str] = None

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def debug(self) -> bool:
        return not self.is_production

    @classmethod
    def from_env(cls) -> "Settings":
        """Read settings from environment variables."""
        return cls(
            gemini_api_key=os.getenv("GEMINI_API_KEY", ""),
            transcription_model=os.getenv("TRANSCRIPTION_MODEL", "gemini-2.5-flash"),
            highlight_model=os.getenv("HIGHLIGHT_MODEL", "gemini-2.5-flash"),
            highlight_temperature=float(os.getenv("HIGHLIGHT_TEMPERATURE", "0.7")),
            artifacts_dir=Path(os.getenv("ARTIFACTS_DIR", str(DEFAULT_ARTIFACTS_DIR))),
            cleanup_delay_seconds=float(os.getenv("CLEANUP_DELAY_SECONDS", "60")),
            download_timeout_seconds=float(os.getenv("DOWNLOAD_TIMEOUT_SECONDS", "600")),
            transcode_timeout_seconds=float(os.getenv("TRANSCODE_TIMEOUT_SECONDS", "300")),
            api_timeout_seconds=float(os.getenv("API_TIMEOUT_SECONDS", "300")),
            rate_limit_requests=int(os.getenv("RATE_LIMIT_REQUESTS", "10")),  # requests per window
            rate_limit_window_seconds=int(os.getenv("RATE_LIMIT_WINDOW", "3600")),  # seconds
            trusted_proxy_hops=int(os.getenv("TRUSTED_PROXY_HOPS", "0")),
            cors_origins=_split_csv(os.getenv("CORS_ORIGINS", "*")),
            allowed_hosts=_split_csv(os.getenv("ALLOWED_HOSTS", "*")),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "3000")),
            environment=os.getenv("ENVIRONMENT", "development").lower(),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            log_file_path=os.getenv("LOG_FILE_PATH") or None,
        )


def build_logging_config(settings: Settings) -> dict:
    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "level": settings.log_level,
            "formatter": "standard",
            "stream": "ext://sys.stdout",
            "filters": ["request_id"],
        },
    }
    if settings.log_file_path:
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": settings.log_level,
            "formatter": "standard",
            "filename": settings.log_file_path,
            "filters": ["request_id"],
            "maxBytes": 10 * 1024 * 1024,  # 10 MB
            "backupCount": 5,
            "encoding": "utf8",
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": LOG_FORMAT,
            }
        },
        "filters": {
            "request_id": {"()": RequestIdFilter},
        },
        "handlers": handlers,
        "loggers": {
            "viralcut": {
                "handlers": list(handlers),
                "level": settings.log_level,
                "propagate": False,
            },
            "app": {
                "handlers": list(handlers),
                "level": settings.log_level,
                "propagate": False,
            },
            # Let uvicorn log to console using its own handlers
            "uvicorn.error": {"level": "INFO"},
            "uvicorn.access": {"level": "INFO"},
        },
        "root": {
            "handlers": ["console"],
            "level": settings.log_level,
        },
    }


def configure_logging(settings: Settings) -> None:
    if settings.log_file_path:
        Path(settings.log_file_path).parent.mkdir(parents=True, exist_ok=True)
    logging.config.dictConfig(build_logging_config(settings))
