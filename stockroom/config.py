# stockroom/config.py
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

DEFAULT_BASE_URL = "http://localhost:4000/api"
DEFAULT_STORAGE_PATH = Path.home() / ".stockroom" / "storage.json"
PRODUCTS_KEY = "sim_products_v1"


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class ClientConfig:
    """Settings handed to StockroomClient at construction time."""

    base_url: str = DEFAULT_BASE_URL
    timeout: float = 10.0
    storage_path: Path = DEFAULT_STORAGE_PATH
    storage_key: str = PRODUCTS_KEY
    # extra remote attempts for reads; writes are never retried
    read_retries: int = 1
    sticky_fallback: bool = True

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "ClientConfig":
        load_dotenv(env_file)
        return cls(
            base_url=os.getenv("STOCKROOM_API_BASE_URL") or DEFAULT_BASE_URL,
            timeout=float(os.getenv("STOCKROOM_TIMEOUT", 10)),
            storage_path=Path(os.getenv("STOCKROOM_STORAGE_PATH") or DEFAULT_STORAGE_PATH).expanduser(),
            storage_key=os.getenv("STOCKROOM_STORAGE_KEY") or PRODUCTS_KEY,
            read_retries=int(os.getenv("STOCKROOM_READ_RETRIES", 1)),
            sticky_fallback=_env_bool("STOCKROOM_STICKY_FALLBACK", True),
        )
