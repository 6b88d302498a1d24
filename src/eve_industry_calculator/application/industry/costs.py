from __future__ import annotations

import asyncio
import logging
from typing import Iterable, Mapping, Optional

from eve_industry_calculator.application.ports import MarketDataSource
from eve_industry_calculator.domain.industry import ActivityKind
from eve_industry_calculator.domain.models import BlueprintMaterial, FacilityConfig, JobCost


SCC_SURCHARGE_RATE = 0.04
DEFAULT_COST_INDEX = 0.0014
DEFAULT_LOOKUP_TIMEOUT_SECONDS = 30.0


def estimated_item_value(materials: Iterable[BlueprintMaterial], prices: Mapping[int, float]) -> float:
    """Sum of adjusted price x single-run base quantity; unknown prices count as 0."""

    total = 0.0
    for mat in materials:
        price = prices.get(int(mat.type_id))
        if price is None:
            continue
        total += float(price) * int(mat.quantity)
    return total


def job_cost(
    *,
    eiv: float,
    cost_index: float,
    structure_tax_multiplier: float,
    facility_tax_rate: float,
    runs: int,
    scc_surcharge_rate: float = SCC_SURCHARGE_RATE,
) -> JobCost:
    coefficient_tax = eiv * cost_index * structure_tax_multiplier
    building_and_scc = eiv * (scc_surcharge_rate + facility_tax_rate)
    per_run = coefficient_tax + building_and_scc
    return JobCost(
        eiv=eiv,
        cost_index=cost_index,
        structure_tax_multiplier=structure_tax_multiplier,
        coefficient_tax=coefficient_tax,
        building_and_scc_tax=building_and_scc,
        facility_cost_per_run=per_run,
        facility_cost=per_run * int(runs),
    )


class CostEstimator:
    """Derive EIV and job fees; market lookups degrade instead of failing."""

    def __init__(
        self,
        market: Optional[MarketDataSource] = None,
        *,
        scc_surcharge_rate: float = SCC_SURCHARGE_RATE,
        default_cost_index: float = DEFAULT_COST_INDEX,
        lookup_timeout_seconds: float = DEFAULT_LOOKUP_TIMEOUT_SECONDS,
    ):
        self._market = market
        self._scc_surcharge_rate = float(scc_surcharge_rate)
        self._default_cost_index = float(default_cost_index)
        self._lookup_timeout_seconds = float(lookup_timeout_seconds)

    @property
    def default_cost_index(self) -> float:
        return self._default_cost_index

    async def fetch_prices(self, type_ids: Iterable[int]) -> dict[int, float]:
        ids = sorted({int(t) for t in type_ids})
        if not ids or self._market is None:
            return {}
        try:
            prices = await asyncio.wait_for(self._market.get_market_prices(ids), timeout=self._lookup_timeout_seconds)
        except asyncio.TimeoutError:
            logging.warning("Market price lookup timed out after %.1fs; using 0 for %d types", self._lookup_timeout_seconds, len(ids))
            return {}
        except Exception as e:
            logging.warning("Market price lookup failed (%s); using 0 for %d types", e, len(ids))
            return {}
        return {int(k): float(v) for k, v in (prices or {}).items() if v is not None}

    async def fetch_cost_index(self, solar_system_id: int, activity: ActivityKind) -> float:
        if self._market is None:
            return self._default_cost_index
        try:
            value = await asyncio.wait_for(
                self._market.get_system_cost_index(int(solar_system_id), activity),
                timeout=self._lookup_timeout_seconds,
            )
        except asyncio.TimeoutError:
            logging.warning("Cost index lookup for system %s timed out; using %.4f", solar_system_id, self._default_cost_index)
            return self._default_cost_index
        except Exception as e:
            logging.warning("Cost index lookup for system %s failed (%s); using %.4f", solar_system_id, e, self._default_cost_index)
            return self._default_cost_index
        if value is None:
            logging.warning(
                "No %s cost index for system %s; using %.4f",
                activity.value,
                solar_system_id,
                self._default_cost_index,
            )
            return self._default_cost_index
        return float(value)

    async def estimate(
        self,
        materials: Iterable[BlueprintMaterial],
        *,
        facility: FacilityConfig,
        activity: ActivityKind,
        runs: int,
        structure_tax_multiplier: float = 1.0,
        prices: Optional[Mapping[int, float]] = None,
        cost_index: Optional[float] = None,
    ) -> JobCost:
        mats = list(materials)

        prices_task = None if prices is not None else self.fetch_prices(m.type_id for m in mats)
        index_task = None if cost_index is not None else self.fetch_cost_index(facility.solar_system_id, activity)

        if prices_task is not None and index_task is not None:
            price_map, index = await asyncio.gather(prices_task, index_task)
        elif prices_task is not None:
            price_map, index = await prices_task, float(cost_index)
        elif index_task is not None:
            price_map, index = dict(prices or {}), await index_task
        else:
            price_map, index = dict(prices or {}), float(cost_index)

        eiv = estimated_item_value(mats, price_map)
        cost = job_cost(
            eiv=eiv,
            cost_index=index,
            structure_tax_multiplier=float(structure_tax_multiplier),
            facility_tax_rate=float(facility.tax_rate),
            runs=runs,
            scc_surcharge_rate=self._scc_surcharge_rate,
        )
        logging.debug(
            "Job cost: eiv=%.2f index=%.4f tax_mult=%.4f per_run=%.2f runs=%d facility=%.2f",
            cost.eiv,
            cost.cost_index,
            cost.structure_tax_multiplier,
            cost.facility_cost_per_run,
            int(runs),
            cost.facility_cost,
        )
        return cost
