"""
Days-until-stockout estimators used by the alert engine.

- ClampedStockEstimator: current stock clamped at zero; ignores sales velocity
- SalesVelocityEstimator: current stock / average daily units sold in the window
"""

import math
from typing import Optional


class StockoutEstimator:
    # Whether the engine has to load per-warehouse sales volume for this estimator
    needs_sales_velocity: bool = False

    def estimate(self, current_stock: int, daily_sales_rate: Optional[float] = None) -> Optional[int]:
        raise NotImplementedError


class ClampedStockEstimator(StockoutEstimator):
    needs_sales_velocity = False

    def estimate(self, current_stock, daily_sales_rate=None):
        return max(int(current_stock), 0)


class SalesVelocityEstimator(StockoutEstimator):
    needs_sales_velocity = True

    def estimate(self, current_stock, daily_sales_rate=None):
        if current_stock <= 0:
            return 0
        # No sales at this warehouse in the window: stock never runs out at this rate
        if not daily_sales_rate or daily_sales_rate <= 0:
            return None
        return int(math.floor(current_stock / daily_sales_rate))


ESTIMATORS = {
    "clamped": ClampedStockEstimator,
    "velocity": SalesVelocityEstimator,
}


def get_stockout_estimator(name: str) -> StockoutEstimator:
    try:
        return ESTIMATORS[(name or "").strip().lower()]()
    except KeyError:
        raise ValueError(
            f"Unknown stockout estimator {name!r}, expected one of: {', '.join(sorted(ESTIMATORS))}"
        ) from None
