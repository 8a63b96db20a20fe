"""TTL / stale-while-revalidate settings for catalog reads.

Admin views use short windows so edits show up quickly; public pages cache
longer. The catalog service reads the ``ttl`` of a strategy to decide how
long an in-process result stays valid.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional


@dataclass(frozen=True)
class CacheStrategy:
    swr: int
    ttl: int

    def to_dict(self) -> Dict[str, int]:
        return {"swr": self.swr, "ttl": self.ttl}


CACHE_STRATEGIES: Dict[str, CacheStrategy] = {
    "admin": CacheStrategy(swr=30, ttl=60),
    "admin_listing": CacheStrategy(swr=60, ttl=300),
    "public": CacheStrategy(swr=300, ttl=600),
    "individual_item": CacheStrategy(swr=300, ttl=900),
    "static": CacheStrategy(swr=600, ttl=1800),
    "realtime": CacheStrategy(swr=10, ttl=30),
}


def environment_aware(strategy: CacheStrategy, app_env: str) -> Optional[CacheStrategy]:
    """Return the strategy to use in ``app_env``; ``None`` disables caching."""
    env = (app_env or "").strip().lower()
    if env == "development":
        return None
    if env in {"staging", "preview"}:
        return CacheStrategy(swr=strategy.swr // 2, ttl=strategy.ttl // 2)
    return strategy


def get_strategy(name: str) -> CacheStrategy:
    try:
        return CACHE_STRATEGIES[name]
    except KeyError:
        raise ValueError(f"unknown cache strategy: {name}") from None
