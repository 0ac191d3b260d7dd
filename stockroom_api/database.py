import asyncio
import time
from typing import Dict, Any

# This file holds the in-memory product store and its lock.

PRODUCTS: Dict[str, Dict[str, Any]] = {}
STARTED_AT = time.monotonic()
_LOCK = asyncio.Lock()

def _get_lock() -> asyncio.Lock:
    return _LOCK

def uptime() -> float:
    return time.monotonic() - STARTED_AT
