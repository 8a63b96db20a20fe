from typing import Dict, List, Optional, Tuple
import time
from sqlalchemy import func, or_
from sqlalchemy.orm import selectinload
from ..cache_strategies import CacheStrategy, environment_aware, get_strategy
from ..db.session import get_session
from ..models.laptop import Laptop
from ..models.order import Order
from ..utils.dto import to_laptop_dto
from ..utils.pagination import normalize_paging, page_meta


MAX_CACHE_ENTRIES = 256


class CatalogService:
    """Read-side laptop queries for the storefront and the admin console.

    Results are cached in-process; each query picks a named cache strategy
    and keeps its result for that strategy's ttl. Admin mutations call
    ``invalidate_cache``.
    """

    def __init__(self, session_factory=get_session, app_env: str = "production", max_entries: int = MAX_CACHE_ENTRIES):
        self._session_factory = session_factory
        self._app_env = app_env
        self._max_entries = max(1, max_entries)
        # key -> (stored_at, ttl, result)
        self._cache: Dict[Tuple, Tuple[float, int, object]] = {}

    def _strategy(self, name: str) -> Optional[CacheStrategy]:
        return environment_aware(get_strategy(name), self._app_env)

    def _cached(self, key: Tuple, strategy_name: str, loader):
        strategy = self._strategy(strategy_name)
        now = time.time()
        if strategy is not None:
            hit = self._cache.get(key)
            if hit and now - hit[0] <= hit[1]:
                return hit[2]
        result = loader()
        if strategy is not None:
            self._store(key, now, strategy.ttl, result)
        return result

    def _store(self, key: Tuple, now: float, ttl: int, result) -> None:
        expired = [k for k, (stored_at, k_ttl, _) in self._cache.items() if now - stored_at > k_ttl]
        for k in expired:
            del self._cache[k]
        self._cache.pop(key, None)
        # dicts keep insertion order, the first key is the oldest write
        while len(self._cache) >= self._max_entries:
            del self._cache[next(iter(self._cache))]
        self._cache[key] = (now, ttl, result)

    @staticmethod
    def _published(session):
        return session.query(Laptop).filter(Laptop.published.is_(True))

    def list_published(self, *, page: int = 1, page_size: int = 12) -> Dict:
        """Return dict: { items: [LaptopDTO], pagination: {...} }"""
        p, ps = normalize_paging(page, page_size)
        # first page is hit the most, keep it longer
        strategy = "public" if p == 1 else "admin_listing"

        def load() -> Dict:
            with self._session_factory() as session:
                q = self._published(session)
                total = q.count()
                rows = (
                    q.options(selectinload(Laptop.images))
                    .order_by(Laptop.date_published.desc(), Laptop.id.desc())
                    .offset((p - 1) * ps)
                    .limit(ps)
                    .all()
                )
                return {"items": [to_laptop_dto(r) for r in rows], "pagination": page_meta(p, ps, total)}

        return self._cached(("published", p, ps), strategy, load)

    def list_admin(self) -> List[Dict]:
        def load() -> List[Dict]:
            with self._session_factory() as session:
                rows = (
                    session.query(Laptop)
                    .options(selectinload(Laptop.images))
                    .order_by(Laptop.id.desc())
                    .all()
                )
                return [to_laptop_dto(r) for r in rows]

        return self._cached(("admin",), "admin_listing", load)

    def get_laptop(self, laptop_id: int, *, published_only: bool = True) -> Dict:
        """Return LaptopDTO for given id, or {} when missing/hidden."""

        def load() -> Dict:
            with self._session_factory() as session:
                q = session.query(Laptop).options(selectinload(Laptop.images)).filter(Laptop.id == laptop_id)
                if published_only:
                    q = q.filter(Laptop.published.is_(True))
                row = q.first()
                return to_laptop_dto(row) if row else {}

        strategy = "individual_item" if published_only else "admin"
        return self._cached(("laptop", laptop_id, published_only), strategy, load)

    def search(self, query: str, *, limit: int = 10) -> List[Dict]:
        term = (query or "").strip()
        if not term:
            return []
        limit = max(1, min(int(limit or 10), 50))

        def load() -> List[Dict]:
            like = f"%{term}%"
            with self._session_factory() as session:
                rows = (
                    self._published(session)
                    .options(selectinload(Laptop.images))
                    .filter(or_(Laptop.title.ilike(like), Laptop.description.ilike(like)))
                    .order_by(Laptop.date_published.desc(), Laptop.id.desc())
                    .limit(limit)
                    .all()
                )
                return [to_laptop_dto(r, image_limit=1) for r in rows]

        return self._cached(("search", term.lower(), limit), "public", load)

    def related(self, laptop_id: int, *, limit: int = 4) -> List[Dict]:
        def load() -> List[Dict]:
            with self._session_factory() as session:
                rows = (
                    self._published(session)
                    .options(selectinload(Laptop.images))
                    .filter(Laptop.id != laptop_id)
                    .order_by(Laptop.date_published.desc(), Laptop.id.desc())
                    .limit(limit)
                    .all()
                )
                return [to_laptop_dto(r, image_limit=1) for r in rows]

        return self._cached(("related", laptop_id, limit), "public", load)

    def stats(self) -> Dict[str, int]:
        def load() -> Dict[str, int]:
            with self._session_factory() as session:
                total = session.query(func.count(Laptop.id)).scalar() or 0
                published = self._published(session).count()
                orders = session.query(func.count(Order.id)).scalar() or 0
                pending = session.query(func.count(Order.id)).filter(Order.status == "pending").scalar() or 0
                return {
                    "laptops": int(total),
                    "published": int(published),
                    "orders": int(orders),
                    "pending_orders": int(pending),
                }

        return self._cached(("stats",), "realtime", load)

    def invalidate_cache(self, laptop_id: Optional[int] = None) -> None:
        """Drop cached results. Listings embed every laptop, so clear all."""
        self._cache.clear()
        return None
