# finance_tracker/config.py
import logging
import os
from dataclasses import dataclass

logger = logging.getLogger("finance-tracker.config")

# ---------------- Defaults ----------------
DEFAULT_API_BASE = "https://touching-man-22.hasura.app/api/rest"
DEFAULT_TIMEOUT = 30.0
DEFAULT_SESSION_DIR = os.path.join("data", "sessions")
ADMIN_SECRET_HEADER = "x-hasura-admin-secret"


@dataclass(frozen=True)
class Settings:
    api_base: str = DEFAULT_API_BASE
    admin_secret: str = ""
    timeout: float = DEFAULT_TIMEOUT
    session_dir: str = DEFAULT_SESSION_DIR
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ=None):
        """Build settings from FINANCE_* environment variables"""
        env = os.environ if environ is None else environ

        raw_timeout = env.get("FINANCE_API_TIMEOUT", "")
        try:
            timeout = float(raw_timeout) if raw_timeout else DEFAULT_TIMEOUT
        except ValueError:
            logger.warning(f"Invalid FINANCE_API_TIMEOUT {raw_timeout!r}, using {DEFAULT_TIMEOUT}")
            timeout = DEFAULT_TIMEOUT

        settings = cls(
            api_base=env.get("FINANCE_API_BASE", DEFAULT_API_BASE).rstrip("/"),
            admin_secret=env.get("FINANCE_ADMIN_SECRET", ""),
            timeout=timeout,
            session_dir=env.get("FINANCE_SESSION_DIR", DEFAULT_SESSION_DIR),
            log_level=env.get("FINANCE_LOG_LEVEL", "INFO").upper(),
        )
        if not settings.admin_secret:
            logger.warning("FINANCE_ADMIN_SECRET is not set; API calls will be rejected")
        return settings


def configure_logging(level="INFO"):
    """Configure root logging once for the app process"""
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
