from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


def _env(name: str, default: str) -> str:
    value = os.getenv(name)
    return default if value is None or value == "" else value


def _bool(name: str, default: bool) -> bool:
    raw = _env(name, "1" if default else "0").strip().lower()
    return raw in {"1", "true", "yes", "y", "on"}


def _int(name: str, default: int) -> int:
    raw = _env(name, str(default)).strip()
    try:
        return int(raw)
    except ValueError:
        return default


def _float(name: str, default: float) -> float:
    raw = _env(name, str(default)).strip()
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class CalculatorSettings:
    sde_db_uri: str
    language: str
    esi_base: str
    esi_user_agent: str
    esi_compatibility_date: str
    esi_timeout_seconds: int
    market_prices_cache_ttl_seconds: int
    industry_systems_cache_ttl_seconds: int
    price_lookup_timeout_seconds: float
    default_cost_index: float
    scc_surcharge_rate: float


@lru_cache(maxsize=1)
def get_settings() -> CalculatorSettings:
    return CalculatorSettings(
        sde_db_uri=_env("EVE_CALC_SDE_DB_URI", "sqlite:///database/eve_sde.db"),
        language=_env("EVE_CALC_LANGUAGE", "en"),
        esi_base=_env("EVE_CALC_ESI_BASE", "https://esi.evetech.net/latest").rstrip("/"),
        esi_user_agent=_env("EVE_CALC_ESI_USER_AGENT", "eve-industry-calculator"),
        esi_compatibility_date=_env("EVE_CALC_ESI_COMPATIBILITY_DATE", "2025-09-30"),
        esi_timeout_seconds=_int("EVE_CALC_ESI_TIMEOUT", default=15),
        market_prices_cache_ttl_seconds=_int("EVE_CALC_MARKET_PRICES_TTL", default=3600),
        industry_systems_cache_ttl_seconds=_int("EVE_CALC_INDUSTRY_SYSTEMS_TTL", default=8 * 3600),
        price_lookup_timeout_seconds=_float("EVE_CALC_PRICE_LOOKUP_TIMEOUT", default=30.0),
        default_cost_index=_float("EVE_CALC_DEFAULT_COST_INDEX", default=0.0014),
        scc_surcharge_rate=_float("EVE_CALC_SCC_SURCHARGE_RATE", default=0.04),
    )
