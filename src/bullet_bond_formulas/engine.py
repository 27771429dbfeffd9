# Requires Python 3.12+
# Uses native type hints: list[x], tuple[x, y], X | None (PEP 585, PEP 604)
"""
Bond calculation pipeline.

    normalize -> generate schedule -> solve IRR (issuer, investor) -> metrics

compute() is a pure function of its inputs: it keeps no state between calls
and can be invoked on every parameter edit. Invalid parameters raise
ValidationError before anything is computed, so a caller holding a previous
BondCalculation can keep displaying it.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Mapping

from bullet_bond_formulas.irr import solve_irr
from bullet_bond_formulas.metrics import MetricSet, compute_metrics
from bullet_bond_formulas.parameters import (
    FULL,
    EngineVariant,
    InstrumentParameters,
    NormalizedParameters,
    normalize,
)
from bullet_bond_formulas.schedule import BulletSchedule, schedule_from_parameters

__version__ = "0.1.0"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BondCalculation:
    """Schedule and metrics for one set of validated parameters."""
    parameters: NormalizedParameters
    schedule: BulletSchedule
    metrics: MetricSet

    def summary(self) -> dict:
        p = self.parameters
        return {
            "issuer": p.params.issuer,
            "currency": p.params.currency,
            "variant": p.variant.name,
            "face_value": p.face_value,
            "issuance_price": p.issuance_price,
            "total_periods": p.total_periods,
            "periods_per_year": p.periods_per_year,
            "coupon_amount": p.coupon_amount,
            "registry_cost": p.costs.registry,
            "placement_cost": p.costs.placement,
            "structuring_cost": p.costs.structuring,
            "issuer_initial_flow": p.issuer_initial_flow,
            "investor_initial_flow": p.investor_initial_flow,
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary": self.summary(),
            "metrics": self.metrics.to_dict(),
            "schedule": self.schedule.to_rows(),
        }


def compute(
    params: InstrumentParameters,
    variant: EngineVariant | str = FULL,
    *,
    discount_rate: float | None = None,
    bracket: bool = False,
) -> BondCalculation:
    """
    Run the full calculation for one instrument.

    Args:
        params: Instrument parameters (percentage convention).
        variant: FULL (costs and grace periods) or COMPACT.
        discount_rate: Optional periodic market rate for price, duration
            and convexity. None values the bond at its own TEP.
        bracket: Let the IRR solver fall back to Brent's method when
            Newton-Raphson does not converge.

    Returns:
        BondCalculation

    Raises:
        ValidationError: If any parameter violates its constraints.
        ValueError: If discount_rate is not a finite rate above -1.
    """
    if discount_rate is not None and not (math.isfinite(discount_rate) and discount_rate > -1.0):
        raise ValueError(f"discount_rate must be a finite periodic rate above -1, got {discount_rate}")

    normalized = normalize(params, variant)
    schedule = schedule_from_parameters(normalized)

    if len(schedule) == 0:
        issuer_irr = investor_irr = None
    else:
        seed = normalized.variant.irr_seed
        issuer_irr = solve_irr(schedule.issuer_cash_flows, guess=seed, bracket=bracket)
        investor_irr = solve_irr(schedule.investor_cash_flows, guess=seed, bracket=bracket)

    metrics = compute_metrics(
        schedule,
        issuer_irr,
        investor_irr,
        periodic_rate=normalized.periodic_rate,
        periods_per_year=normalized.periods_per_year,
        face_value=normalized.face_value,
        coupon_amount=normalized.coupon_amount,
        discount_rate=discount_rate,
    )

    logger.info(
        "Computed %s bond: %d periods, TEP=%.6f%%, TCEA=%.6f%%, TCREA=%.6f%%%s",
        normalized.variant.name,
        normalized.total_periods,
        metrics.periodic_rate * 100.0,
        metrics.issuer_irr * 100.0,
        metrics.investor_irr * 100.0,
        "" if metrics.converged else " (approximate IRR)",
    )
    return BondCalculation(parameters=normalized, schedule=schedule, metrics=metrics)


def compute_from_dict(data: Mapping[str, Any], variant: EngineVariant | str = FULL,
                      **kwargs: Any) -> BondCalculation:
    """Convenience wrapper taking a plain mapping of parameter fields."""
    return compute(InstrumentParameters.from_dict(data), variant, **kwargs)
