"""Centralized configuration loaded from .env."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from dotenv import load_dotenv

if TYPE_CHECKING:
    from html_extract.models import FetchOptions

DEFAULT_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"


def _load_env() -> None:
    env_path = Path.cwd() / ".env"
    if env_path.exists():
        load_dotenv(dotenv_path=env_path)
    else:
        load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    # Fetch defaults
    timeout: float = 10.0
    user_agent: str = DEFAULT_USER_AGENT
    use_random_user_agent: bool = False
    retries: int = 3
    retry_delay: float = 1.0
    max_redirects: int = 5

    # Logging
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> Settings:
        _load_env()
        return cls(
            timeout=float(os.getenv("HTML_EXTRACT_TIMEOUT", "10")),
            user_agent=os.getenv("HTML_EXTRACT_USER_AGENT", DEFAULT_USER_AGENT),
            use_random_user_agent=_env_bool("HTML_EXTRACT_RANDOM_USER_AGENT", False),
            retries=int(os.getenv("HTML_EXTRACT_RETRIES", "3")),
            retry_delay=float(os.getenv("HTML_EXTRACT_RETRY_DELAY", "1.0")),
            max_redirects=int(os.getenv("HTML_EXTRACT_MAX_REDIRECTS", "5")),
            log_level=os.getenv("HTML_PARSER_LOGGER_LEVEL", "INFO").upper(),
        )

    def fetch_options(self, **overrides) -> FetchOptions:
        """Build FetchOptions seeded from these settings; keyword overrides win."""
        from html_extract.models import FetchOptions

        values = {
            "timeout": self.timeout,
            "user_agent": self.user_agent,
            "use_random_user_agent": self.use_random_user_agent,
            "retries": self.retries,
            "retry_delay": self.retry_delay,
            "max_redirects": self.max_redirects,
        }
        values.update(overrides)
        return FetchOptions(**values)
