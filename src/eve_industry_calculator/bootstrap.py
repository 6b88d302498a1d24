from __future__ import annotations

import logging
from typing import Optional

from eve_industry_calculator.application.industry.costs import CostEstimator
from eve_industry_calculator.application.industry.service import BlueprintCalculator
from eve_industry_calculator.application.ports import MarketDataSource
from eve_industry_calculator.config.settings import CalculatorSettings, get_settings
from eve_industry_calculator.infrastructure.esi.client import EsiPublicClient
from eve_industry_calculator.infrastructure.esi.market_data import EsiMarketDataSource
from eve_industry_calculator.infrastructure.sde_attribute_store import SdeAttributeStore
from eve_industry_calculator.infrastructure.session_provider import SdeDatabase


def build_market_data(settings: CalculatorSettings) -> EsiMarketDataSource:
    client = EsiPublicClient(
        base_uri=settings.esi_base,
        user_agent=settings.esi_user_agent,
        compatibility_date=settings.esi_compatibility_date,
        timeout_seconds=settings.esi_timeout_seconds,
    )
    return EsiMarketDataSource(
        client,
        market_prices_cache_ttl_seconds=settings.market_prices_cache_ttl_seconds,
        industry_systems_cache_ttl_seconds=settings.industry_systems_cache_ttl_seconds,
    )


def build_calculator(
    settings: Optional[CalculatorSettings] = None,
    *,
    db: Optional[SdeDatabase] = None,
    market: Optional[MarketDataSource] = None,
) -> BlueprintCalculator:
    """Wire the SDE store, the market source and cost settings into a calculator."""

    settings = settings or get_settings()
    db = db or SdeDatabase(settings.sde_db_uri, language=settings.language)
    if market is None:
        market = build_market_data(settings)

    logging.info("Using SDE database %s (language=%s)", db.get_db_name(), settings.language)

    estimator = CostEstimator(
        market,
        scc_surcharge_rate=settings.scc_surcharge_rate,
        default_cost_index=settings.default_cost_index,
        lookup_timeout_seconds=settings.price_lookup_timeout_seconds,
    )
    return BlueprintCalculator(
        SdeAttributeStore(db, language=db.language),
        estimator=estimator,
    )
