import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)

# Application Settings
DEFAULT_REQUEST_TIMEOUT = 10  # seconds
DEFAULT_FEED_LIMIT = 50
SECRET_KEY = os.getenv("ORBIT_SECRET_KEY", "orbit-dev-secret")


def _int_from_env(name: str, default: int) -> int:
    configured = os.getenv(name)
    if configured:
        try:
            return int(configured)
        except ValueError:
            logger.warning("Ignoring invalid %s=%r, using %s", name, configured, default)
    return default


@dataclass(frozen=True)
class BackendConfig:
    url: str
    anon_key: str
    timeout: int = DEFAULT_REQUEST_TIMEOUT
    feed_limit: int = DEFAULT_FEED_LIMIT

    @classmethod
    def from_env(cls) -> "BackendConfig":
        url = os.getenv("SUPABASE_URL")
        anon_key = os.getenv("SUPABASE_ANON_KEY")
        if not all([url, anon_key]):
            raise ValueError("Missing required environment variables: SUPABASE_URL, SUPABASE_ANON_KEY")

        return cls(
            url=url.rstrip("/"),
            anon_key=anon_key,
            timeout=_int_from_env("ORBIT_REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT),
            feed_limit=_int_from_env("ORBIT_FEED_LIMIT", DEFAULT_FEED_LIMIT),
        )
