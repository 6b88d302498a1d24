from __future__ import annotations

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Mapping, Optional

from eve_industry_calculator.application.errors import CalculationError
from eve_industry_calculator.application.industry.bonuses import BonusResolver
from eve_industry_calculator.application.industry.costs import CostEstimator
from eve_industry_calculator.application.industry.projection import (
    format_duration,
    project_materials,
    project_product,
    project_time,
)
from eve_industry_calculator.application.ports import AttributeStore, MarketDataSource
from eve_industry_calculator.domain.models import BlueprintSpec, CalculationRequest, CalculationResult


class BlueprintCalculator:
    """Turn a blueprint, a facility, skills and a run count into materials, time and cost.

    `calculate` never raises: terminal problems (unknown blueprint, no base
    materials/time) come back as `CalculationResult(success=False)` and degraded
    lookups (prices, cost index, attribute rows) fall back to neutral values.
    """

    def __init__(
        self,
        store: AttributeStore,
        market: Optional[MarketDataSource] = None,
        *,
        estimator: Optional[CostEstimator] = None,
    ):
        self._store = store
        self._resolver = BonusResolver(store)
        self._estimator = estimator or CostEstimator(market)

    def load_blueprint(self, request: CalculationRequest) -> BlueprintSpec:
        bp_id = int(request.blueprint_type_id)
        activity = request.activity

        materials = self._store.get_blueprint_materials(bp_id, activity)
        if not materials:
            raise CalculationError(f"No {activity.value} materials found for blueprint {bp_id}")

        time_seconds = self._store.get_blueprint_time(bp_id, activity)
        if time_seconds is None:
            raise CalculationError(f"No {activity.value} time found for blueprint {bp_id}")

        return BlueprintSpec(
            blueprint_type_id=bp_id,
            activity=activity,
            materials=tuple(materials),
            time_seconds=int(time_seconds),
            product=self._store.get_blueprint_product(bp_id, activity),
            required_skill_ids=tuple(int(s) for s in self._store.get_blueprint_required_skills(bp_id, activity)),
        )

    async def calculate(
        self,
        request: CalculationRequest,
        *,
        prices: Optional[Mapping[int, float]] = None,
        cost_index: Optional[float] = None,
    ) -> CalculationResult:
        """Run one calculation.

        `prices` (type_id -> adjusted price) and `cost_index` skip the
        corresponding market lookups when given.
        """

        try:
            blueprint = self.load_blueprint(request)
            bonuses = self._resolver.resolve(request, blueprint)
            total = bonuses.total

            type_ids = [m.type_id for m in blueprint.materials]
            if blueprint.product is not None:
                type_ids.append(blueprint.product.type_id)
            type_info = self._store.get_type_info(type_ids)

            materials = project_materials(
                blueprint.materials,
                material_multiplier=total.material,
                runs=request.runs,
                type_info=type_info,
            )
            time = project_time(blueprint.time_seconds, time_multiplier=total.time, runs=request.runs)
            product = project_product(blueprint.product, runs=request.runs, type_info=type_info)

            cost = await self._estimator.estimate(
                blueprint.materials,
                facility=request.facility,
                activity=request.activity,
                runs=request.runs,
                structure_tax_multiplier=bonuses.structure_tax_multiplier,
                prices=prices,
                cost_index=cost_index,
            )
        except CalculationError as e:
            logging.warning("Blueprint calculation failed: %s", e)
            return CalculationResult.failure(str(e))
        except Exception as e:
            logging.exception("Unexpected error calculating blueprint %s", request.blueprint_type_id)
            return CalculationResult.failure(f"Calculation failed: {e}")

        logging.info(
            "Calculated blueprint %s x%d: %d materials, time %s, total cost %.2f",
            blueprint.blueprint_type_id,
            request.runs,
            len(materials),
            format_duration(time.final_seconds),
            cost.total_cost,
        )

        return CalculationResult(
            success=True,
            materials=materials,
            time=time,
            facility_cost=cost.facility_cost,
            total_cost=cost.total_cost,
            product=product,
            bonuses=bonuses,
            job_cost=cost,
        )

    def calculate_sync(
        self,
        request: CalculationRequest,
        *,
        prices: Optional[Mapping[int, float]] = None,
        cost_index: Optional[float] = None,
    ) -> CalculationResult:
        """Blocking wrapper for callers without an event loop (CLI, Flask views).

        Market lookups that outlive their timeout keep running in their worker
        thread; this returns without waiting for them.
        """

        loop = asyncio.new_event_loop()
        executor = ThreadPoolExecutor(thread_name_prefix="market-lookup")
        loop.set_default_executor(executor)
        try:
            return loop.run_until_complete(self.calculate(request, prices=prices, cost_index=cost_index))
        finally:
            executor.shutdown(wait=False)
            loop.run_until_complete(loop.shutdown_asyncgens())
            loop.close()
