import math
import re

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

load_dotenv()

# Go-style duration units, in seconds
_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")


def parse_duration(value: str) -> float:
    """
    Parse a duration string into seconds.

    Accepts bare numbers (seconds) and unit sequences such as "15s", "1m",
    "1m30s", "500ms" or "1.5h".

    Raises:
        ValueError: If the string is empty, negative or has an unknown unit.
    """
    text = value.strip()
    if not text:
        raise ValueError("empty duration")

    try:
        seconds = float(text)
    except ValueError:
        pos = 0
        seconds = 0.0
        while pos < len(text):
            match = _DURATION_PART.match(text, pos)
            if not match:
                raise ValueError(f"invalid duration {value!r}")
            seconds += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
            pos = match.end()

    if not math.isfinite(seconds):
        raise ValueError(f"invalid duration {value!r}")
    if seconds < 0:
        raise ValueError(f"negative duration {value!r}")
    return seconds


class Settings(BaseSettings):
    PROJECT_NAME: str = "Homepage"

    # Listener
    HOST: str = "127.0.0.1"
    PORT: int = 8080
    KEEP_ALIVE_TIMEOUT: int = 60  # seconds an idle connection stays open

    # Seconds to wait for in-flight requests after SIGINT ("15s", "1m" also accepted)
    GRACEFUL_TIMEOUT: float = 15.0

    # Filesystem layout, relative paths resolve against the working directory
    SITE_ROOT: str = "."
    POSTS_DIR: str = "db"
    TEMPLATE_PATH: str = "assets/documents/blogtemplate.html"
    FAVICON_PATH: str = "assets/art/favicon.ico"

    SLOW_REQUEST_THRESHOLD_MS: float = 500.0

    model_config = SettingsConfigDict(case_sensitive=True, env_file=".env", extra="ignore")

    @field_validator("GRACEFUL_TIMEOUT", mode="before")
    @classmethod
    def _parse_graceful_timeout(cls, value):
        if isinstance(value, str):
            return parse_duration(value)
        return value


settings = Settings()
