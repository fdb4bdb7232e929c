"""Process configuration read from environment variables."""
import math
import os
from dataclasses import dataclass
from typing import Optional, Tuple
from dotenv import load_dotenv


def _get_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _get_number(name: str, default: str, kind=float):
    raw = os.getenv(name, default)
    try:
        return kind(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


LIST_EVERYTHING = "*"


def _split_prefixes(raw: str) -> Tuple[str, ...]:
    # "*" stands for the empty prefix, which matches every name
    prefixes = (p.strip() for p in raw.split(","))
    return tuple("" if p == LIST_EVERYTHING else p for p in prefixes if p)


@dataclass(frozen=True)
class ListerConfig:
    """Immutable settings for the lifetime of the process."""
    registry_host: str = "http://localhost:8080"
    refresh_interval: float = 60.0
    public_prefixes: Tuple[str, ...] = ()
    pull_hostname: Optional[str] = None
    show_index: bool = False
    show_listings: bool = True
    request_timeout: float = 30.0
    tag_fetch_concurrency: int = 4
    listen_host: str = "0.0.0.0"
    listen_port: int = 8000
    registry_token: Optional[str] = None
    token_realm: Optional[str] = None
    token_service: Optional[str] = None
    registry_username: Optional[str] = None
    registry_password: Optional[str] = None

    def __post_init__(self):
        if not math.isfinite(self.refresh_interval) or self.refresh_interval <= 0:
            raise ValueError("REFRESH_INTERVAL must be a positive finite number")
        if not math.isfinite(self.request_timeout) or self.request_timeout <= 0:
            raise ValueError("REQUEST_TIMEOUT must be a positive finite number")
        if self.tag_fetch_concurrency < 1:
            raise ValueError("TAG_FETCH_CONCURRENCY must be at least 1")

    @classmethod
    def from_env(cls, load_env_file: bool = True) -> 'ListerConfig':
        """Build configuration from environment variables.

        Args:
            load_env_file: Load `.env` (or `env`) into the environment first

        Raises:
            ValueError: If a value is malformed or out of range
        """
        if load_env_file:
            # Load environment variables from .env or env file
            load_dotenv('.env') or load_dotenv('env')

        return cls(
            registry_host=os.getenv("REGISTRY_HOST", "http://localhost:8080"),
            refresh_interval=_get_number("REFRESH_INTERVAL", "60"),
            public_prefixes=_split_prefixes(os.getenv("PUBLIC_PREFIXES", "")),
            pull_hostname=os.getenv("PULL_HOSTNAME") or None,
            show_index=_get_bool("SHOW_INDEX", False),
            show_listings=_get_bool("SHOW_LISTINGS", True),
            request_timeout=_get_number("REQUEST_TIMEOUT", "30"),
            tag_fetch_concurrency=_get_number("TAG_FETCH_CONCURRENCY", "4", int),
            listen_host=os.getenv("LISTEN_HOST", "0.0.0.0"),
            listen_port=_get_number("LISTEN_PORT", "8000", int),
            registry_token=os.getenv("REGISTRY_TOKEN") or None,
            token_realm=os.getenv("TOKEN_REALM") or None,
            token_service=os.getenv("TOKEN_SERVICE") or None,
            registry_username=os.getenv("REGISTRY_USERNAME") or None,
            registry_password=os.getenv("REGISTRY_PASSWORD") or None
        )
