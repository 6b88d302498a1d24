from __future__ import annotations

import asyncio
import logging
import threading
import time
from typing import Any, Callable, Iterable, Mapping, Optional

from eve_industry_calculator.domain.industry import ActivityKind


class EsiMarketDataSource:
    """MarketDataSource over public ESI with in-memory TTL caches.

    Both endpoints return the whole universe in one (paginated) payload, so
    they are fetched once per TTL and sliced locally. The blocking HTTP client
    runs in a worker thread.
    """

    def __init__(
        self,
        esi_client: Any,
        *,
        market_prices_cache_ttl_seconds: int = 3600,
        industry_systems_cache_ttl_seconds: int = 8 * 3600,
        clock: Callable[[], float] = time.time,
    ):
        self._esi_client = esi_client
        self._market_prices_cache_ttl_seconds = int(market_prices_cache_ttl_seconds)
        self._industry_systems_cache_ttl_seconds = int(industry_systems_cache_ttl_seconds)
        self._clock = clock

        self._lock = threading.Lock()
        # (timestamp, {type_id: adjusted_price})
        self._market_prices_cache: Optional[tuple[float, dict[int, float]]] = None
        # (timestamp, {solar_system_id: {activity: cost_index}})
        self._industry_systems_cache: Optional[tuple[float, dict[int, dict[str, float]]]] = None

    def market_prices(self) -> dict[int, float]:
        """Return {type_id: adjusted_price} for every priced type (cached)."""

        now = self._clock()
        with self._lock:
            cache = self._market_prices_cache
        if cache and (now - cache[0] < self._market_prices_cache_ttl_seconds):
            return cache[1]

        data = self._esi_client.get("/markets/prices/", paginate=True)
        out: dict[int, float] = {}
        for row in data or []:
            if not isinstance(row, dict):
                continue
            type_id = row.get("type_id")
            price = row.get("adjusted_price")
            if type_id is None or price is None:
                continue
            try:
                out[int(type_id)] = float(price)
            except (TypeError, ValueError):
                continue

        if out:
            with self._lock:
                self._market_prices_cache = (now, out)
        else:
            logging.warning("ESI /markets/prices/ returned no adjusted prices")
        return out

    def industry_systems(self) -> dict[int, dict[str, float]]:
        """Return {solar_system_id: {activity: cost_index}} (cached)."""

        now = self._clock()
        with self._lock:
            cache = self._industry_systems_cache
        if cache and (now - cache[0] < self._industry_systems_cache_ttl_seconds):
            return cache[1]

        data = self._esi_client.get("/industry/systems/", paginate=True)
        out: dict[int, dict[str, float]] = {}
        for row in data or []:
            if not isinstance(row, dict) or row.get("solar_system_id") is None:
                continue
            indices: dict[str, float] = {}
            for ci in row.get("cost_indices") or []:
                if not isinstance(ci, dict):
                    continue
                activity = ci.get("activity")
                value = ci.get("cost_index")
                if activity is None or value is None:
                    continue
                try:
                    indices[str(activity)] = float(value)
                except (TypeError, ValueError):
                    continue
            out[int(row["solar_system_id"])] = indices

        if out:
            with self._lock:
                self._industry_systems_cache = (now, out)
        else:
            logging.warning("ESI /industry/systems/ returned no cost indices")
        return out

    async def get_market_prices(self, type_ids: Iterable[int]) -> dict[int, float]:
        wanted = {int(t) for t in type_ids}
        prices = await asyncio.to_thread(self.market_prices)
        return {tid: prices[tid] for tid in wanted if tid in prices}

    async def get_system_cost_index(self, solar_system_id: int, activity: ActivityKind) -> Optional[float]:
        systems = await asyncio.to_thread(self.industry_systems)
        return (systems.get(int(solar_system_id)) or {}).get(activity.value)


class StaticMarketData:
    """MarketDataSource over fixed maps (tests and offline runs)."""

    def __init__(
        self,
        prices: Optional[Mapping[int, float]] = None,
        cost_indices: Optional[Mapping[int, Mapping[str, float]]] = None,
    ):
        self._prices = {int(k): float(v) for k, v in (prices or {}).items()}
        self._cost_indices = {int(k): {str(a): float(v) for a, v in m.items()} for k, m in (cost_indices or {}).items()}

    async def get_market_prices(self, type_ids: Iterable[int]) -> dict[int, float]:
        return {int(t): self._prices[int(t)] for t in type_ids if int(t) in self._prices}

    async def get_system_cost_index(self, solar_system_id: int, activity: ActivityKind) -> Optional[float]:
        return (self._cost_indices.get(int(solar_system_id)) or {}).get(activity.value)
