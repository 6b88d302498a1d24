from __future__ import annotations

import logging
import random
import threading
import time
from typing import Any, Callable, Optional
from urllib.parse import urlencode

import requests


class EsiErrorRateLimiter:
    """Cooperative rate limiter for ESI's error budget.

    ESI provides a floating-window error budget via response headers:
      - X-Esi-Error-Limit-Remain
      - X-Esi-Error-Limit-Reset

    Those headers are the source of truth; when the budget is depleted (or
    low) callers are asked to sleep before the next request.
    """

    def __init__(self, *, low_watermark: int = 5, max_sleep_seconds: int = 60):
        self._lock = threading.Lock()
        self._remain: Optional[int] = None
        self._reset_seconds: Optional[int] = None
        self._low_watermark = int(low_watermark)
        self._max_sleep_seconds = int(max_sleep_seconds)

    def update_from_headers(self, headers: Any) -> None:
        if not headers:
            return
        remain = _header_int(headers, "X-Esi-Error-Limit-Remain")
        reset_seconds = _header_int(headers, "X-Esi-Error-Limit-Reset")

        with self._lock:
            if remain is not None:
                self._remain = max(0, remain)
            if reset_seconds is not None:
                self._reset_seconds = max(0, reset_seconds)

    def suggested_sleep_seconds(self) -> float:
        with self._lock:
            remain = self._remain
            reset_seconds = self._reset_seconds

        # No headers seen yet: don't gate.
        if remain is None or reset_seconds is None:
            return 0.0

        if remain <= 0:
            jitter = random.uniform(0.05, 0.35)
            return min(float(reset_seconds) + jitter, float(self._max_sleep_seconds))

        if remain < self._low_watermark:
            return 0.2

        return 0.0

    def snapshot(self) -> tuple[Optional[int], Optional[int]]:
        with self._lock:
            return self._remain, self._reset_seconds


def _header_int(headers: Any, name: str) -> Optional[int]:
    raw = headers.get(name)
    if raw is None:
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


def _parse_retry_after_seconds(headers: Any) -> float:
    if not headers:
        return 0.0
    ra = headers.get("Retry-After")
    if ra is None:
        return 0.0
    try:
        return max(0.0, float(ra))
    except (TypeError, ValueError):
        return 0.0


_RETRY_STATUS_CODES = (420, 429, 500, 502, 503, 504)


class EsiPublicClient:
    """Minimal client for unauthenticated ESI endpoints (market prices, industry systems)."""

    def __init__(
        self,
        *,
        base_uri: str,
        user_agent: str,
        compatibility_date: str,
        timeout_seconds: int = 15,
        max_retries: int = 3,
        http: Optional[Any] = None,
        limiter: Optional[EsiErrorRateLimiter] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.base_uri = base_uri.rstrip("/")
        self.timeout_seconds = int(timeout_seconds)
        self.max_retries = int(max_retries)
        self._http = http if http is not None else requests.Session()
        self._limiter = limiter or EsiErrorRateLimiter()
        self._sleep = sleep
        self._headers = {
            "Accept": "application/json",
            "User-Agent": user_agent,
            "X-Compatibility-Date": compatibility_date,
        }

    def _gate(self, context: str) -> None:
        wait = self._limiter.suggested_sleep_seconds()
        if wait <= 0:
            return
        remain, reset_seconds = self._limiter.snapshot()
        logging.debug(
            "ESI limiter sleeping %.2fs before %s (remain=%s reset=%s)",
            float(wait),
            context,
            remain if remain is not None else "?",
            reset_seconds if reset_seconds is not None else "?",
        )
        self._sleep(wait)

    def _get_page(self, endpoint: str, params: Optional[dict]) -> Optional[requests.Response]:
        query = "?" + urlencode(sorted(params.items()), doseq=True) if params else ""
        url = f"{self.base_uri}{endpoint}{query}"

        retries = 0
        while True:
            try:
                self._gate(f"GET {endpoint}")
                response = self._http.get(url, headers=self._headers, timeout=self.timeout_seconds)
            except requests.RequestException as e:
                retries += 1
                if retries >= self.max_retries:
                    raise RuntimeError(f"ESI GET failed after retries: {url}") from e
                logging.error("ESI request error %s: %s", url, e)
                self._sleep(2 ** retries)
                continue

            self._limiter.update_from_headers(response.headers)
            if response.status_code == 200:
                return response
            if response.status_code in (403, 404):
                logging.warning("ESI GET %s: %s", response.status_code, url)
                return None
            if response.status_code in _RETRY_STATUS_CODES:
                retries += 1
                if retries >= self.max_retries:
                    raise RuntimeError(f"ESI GET {response.status_code} after retries: {url}")
                retry_after = _parse_retry_after_seconds(response.headers)
                backoff = (2 ** retries) + random.uniform(0, 1)
                wait = max(backoff, retry_after, self._limiter.suggested_sleep_seconds())
                logging.warning("ESI GET %s on %s, retrying in %.1fs...", response.status_code, url, wait)
                self._sleep(wait)
                continue
            response.raise_for_status()
            return response

    def get(self, endpoint: str, params: Optional[dict] = None, *, paginate: bool = False) -> Any:
        """GET a public endpoint; with `paginate=True` all X-Pages are fetched and concatenated."""

        if not paginate:
            response = self._get_page(endpoint, params)
            return response.json() if response is not None else None

        all_data: list[Any] = []
        page = 1
        while True:
            paged_params = dict(params) if params else {}
            paged_params["page"] = page
            response = self._get_page(endpoint, paged_params)
            if response is None:
                return all_data if all_data else None
            data_json = response.json()
            all_data.extend(data_json if isinstance(data_json, list) else [data_json])
            total_pages = _header_int(response.headers, "X-Pages") or 1
            if page >= total_pages:
                return all_data
            page += 1
