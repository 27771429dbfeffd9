# Requires Python 3.12+
# Uses native type hints: list[x], tuple[x, y], X | None (PEP 585, PEP 604)
"""
Yield metrics for a bullet schedule: annualized rates, price, Macaulay
duration, and convexity.

All discounting is per period at a single flat periodic rate. By default that
rate is the bond's own TEP, so the price of a bond valued at its coupon rate
comes back at face value.
"""

from __future__ import annotations

import math

import numpy as np
from dataclasses import dataclass

from bullet_bond_formulas.irr import IRRResult
from bullet_bond_formulas.schedule import BulletSchedule

__version__ = "0.1.0"


def annualize_rate(periodic_rate: float, periods_per_year: int) -> float:
    """Effective annual rate: (1 + r)^m - 1."""
    return (1.0 + periodic_rate) ** periods_per_year - 1.0


def promised_flows(total_periods: int, coupon_amount: float, face_value: float) -> np.ndarray:
    """Coupon every period plus face value at maturity, periods 1..N."""
    flows = np.full(int(total_periods), float(coupon_amount))
    if total_periods > 0:
        flows[-1] += face_value
    return flows


@dataclass(frozen=True)
class MetricSet:
    """
    Summary metrics for one calculation.

    Rates are decimals. ``issuer_irr`` (TCEA) and ``investor_irr`` (TCREA) are
    annualized; the raw periodic solver results are kept alongside so a
    caller can tell an approximate figure from a converged one.
    """
    periodic_rate: float
    annual_rate: float
    issuer_irr: float
    investor_irr: float
    issuer_irr_result: IRRResult | None
    investor_irr_result: IRRResult | None
    price: float
    duration: float
    modified_duration: float
    convexity: float
    discount_rate: float

    @property
    def converged(self) -> bool:
        results = (self.issuer_irr_result, self.investor_irr_result)
        return all(r is not None and r.converged for r in results)

    def to_dict(self) -> dict:
        """Plain-number summary; tep, tcea and tcrea are in percent."""
        return {
            "tep": self.periodic_rate * 100.0,
            "annual_rate": self.annual_rate * 100.0,
            "tcea": self.issuer_irr * 100.0,
            "tcrea": self.investor_irr * 100.0,
            "price": self.price,
            "duration": self.duration,
            "modified_duration": self.modified_duration,
            "convexity": self.convexity,
            "discount_rate": self.discount_rate * 100.0,
            "issuer_irr_converged": bool(self.issuer_irr_result and self.issuer_irr_result.converged),
            "investor_irr_converged": bool(self.investor_irr_result and self.investor_irr_result.converged),
        }


def compute_metrics(
    schedule: BulletSchedule,
    issuer_irr: IRRResult | None,
    investor_irr: IRRResult | None,
    periodic_rate: float,
    periods_per_year: int,
    face_value: float,
    coupon_amount: float,
    discount_rate: float | None = None,
) -> MetricSet:
    """
    Aggregate the schedule and solved IRRs into a MetricSet.

    Formulas (y = periodic discount rate, N = number of periods):
        PV_i      = CF_i / (1 + y)^i,   CF_i = coupon (+ face at i = N)
        Price     = sum PV_i
        Duration  = sum i * PV_i / Price / periods_per_year        (years)
        Convexity = sum i (i + 1) PV_i / ((1 + y)^2 * Price)        (periods^2)

    The promised stream is valued regardless of any grace window in the
    schedule; only its length is taken from the schedule.

    Args:
        schedule: Output of generate_schedule.
        issuer_irr: Periodic IRR of the issuer vector (None if not solved).
        investor_irr: Periodic IRR of the investor vector (None if not solved).
        periodic_rate: TEP as a decimal.
        periods_per_year: Coupons per year.
        face_value: Face value of the bond.
        coupon_amount: Coupon paid per period.
        discount_rate: Periodic rate used for price/duration/convexity.
            None reuses ``periodic_rate``. Supplying a market rate gives
            values that differ from the form's figures.

    Returns:
        MetricSet. An empty schedule or zero price yields zero price,
        duration and convexity; unsolved IRRs are reported as 0.
    """
    y = periodic_rate if discount_rate is None else discount_rate
    if periods_per_year < 1:
        raise ValueError(f"periods_per_year must be at least 1, got {periods_per_year}")
    if not (math.isfinite(y) and y > -1.0):
        raise ValueError(f"discount rate must be a finite periodic rate above -1, got {y}")
    n = len(schedule)
    m = periods_per_year

    issuer_annual = annualize_rate(issuer_irr.rate, m) if issuer_irr is not None else 0.0
    investor_annual = annualize_rate(investor_irr.rate, m) if investor_irr is not None else 0.0

    price = duration = convexity = 0.0
    if n > 0:
        i = np.arange(1, n + 1)
        pv = promised_flows(n, coupon_amount, face_value) / (1.0 + y) ** i
        price = float(np.sum(pv))
        if price != 0.0:
            duration = float(np.sum(i * pv) / price) / m
            convexity = float(np.sum(i * (i + 1) * pv) / ((1.0 + y) ** 2 * price))

    return MetricSet(
        periodic_rate=periodic_rate,
        annual_rate=annualize_rate(periodic_rate, m),
        issuer_irr=issuer_annual,
        investor_irr=investor_annual,
        issuer_irr_result=issuer_irr,
        investor_irr_result=investor_irr,
        price=price,
        duration=duration,
        modified_duration=duration / (1.0 + y),
        convexity=convexity,
        discount_rate=y,
    )
