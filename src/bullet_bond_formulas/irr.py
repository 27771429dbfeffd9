# Requires Python 3.12+
# Uses native type hints: list[x], tuple[x, y], X | None (PEP 585, PEP 604)
from __future__ import annotations

import logging
import math
import warnings
from dataclasses import dataclass
from enum import Enum
from typing import Sequence

import numpy as np
from scipy.optimize import brentq

from bullet_bond_formulas import config
from bullet_bond_formulas.exceptions import NonConvergenceWarning

__version__ = "0.1.0"

logger = logging.getLogger(__name__)


# =============================================================================
# Internal rate of return (Newton-Raphson)
# =============================================================================

class IRRStatus(Enum):
    """How the solver stopped."""
    CONVERGED = "converged"              # |npv| < tolerance
    MAX_ITERATIONS = "max_iterations"    # iteration cap reached
    FLAT_DERIVATIVE = "flat_derivative"  # |dnpv| < tolerance, cannot divide
    NON_FINITE = "non_finite"            # rate or npv stopped being a finite number
    DEGENERATE = "degenerate"            # every flow is zero, no rate is defined
    BRACKETED = "bracketed"              # recovered by the brentq fallback


@dataclass(frozen=True)
class IRRResult:
    """
    Periodic IRR and how it was obtained.

    ``rate`` is always the best available estimate. When ``converged`` is
    False it is the iterate the solver stopped on and should be read as
    approximate.
    """
    rate: float
    converged: bool
    status: IRRStatus
    iterations: int
    npv: float

    def __float__(self) -> float:
        return self.rate


def _as_vector(cash_flows: Sequence[float] | np.ndarray) -> np.ndarray:
    flows = np.asarray(cash_flows, dtype=float)
    if flows.ndim != 1 or flows.size == 0:
        raise ValueError(f"cash_flows must be a non-empty 1-D sequence, got shape {flows.shape}")
    return flows


def npv(rate: float, cash_flows: Sequence[float] | np.ndarray) -> float:
    """Net present value: sum_j CF_j / (1 + rate)^j, j starting at 0."""
    flows = _as_vector(cash_flows)
    t = np.arange(flows.size)
    return float(np.sum(flows / (1.0 + rate) ** t))


def npv_derivative(rate: float, cash_flows: Sequence[float] | np.ndarray) -> float:
    """d(NPV)/d(rate) = sum_{j>0} -j * CF_j / (1 + rate)^(j+1)."""
    flows = _as_vector(cash_flows)
    t = np.arange(flows.size)
    return float(np.sum(-t[1:] * flows[1:] / (1.0 + rate) ** (t[1:] + 1)))


def solve_irr(
    cash_flows: Sequence[float] | np.ndarray,
    guess: float = config.IRR_SEED_FULL,
    tolerance: float = config.IRR_TOLERANCE,
    max_iterations: int = config.IRR_MAX_ITERATIONS,
    bracket: bool = False,
) -> IRRResult:
    """
    Solve for the periodic IRR of a cash-flow vector.

    ALGORITHM:
    ----------
    Fixed seed, then up to ``max_iterations`` Newton steps:

        npv  = sum_j CF_j / (1+r)^j
        dnpv = sum_{j>0} -j CF_j / (1+r)^(j+1)
        stop if |npv|  < tolerance      (converged)
        stop if |dnpv| < tolerance      (derivative too flat, unconverged)
        r <- r - npv / dnpv

    There is no bracketing and no bound on r; pathological vectors can walk
    the iterate negative or off to infinity. Rather than raise, the solver
    returns the iterate it stopped on with ``converged=False`` and issues a
    NonConvergenceWarning.

    With ``bracket=True`` an unconverged Newton run is retried with Brent's
    method (scipy.optimize.brentq) on config.IRR_BRACKET. This changes the
    returned rate for vectors Newton cannot solve and is therefore opt-in.

    Args:
        cash_flows: Signed flows, index 0 at t=0.
        guess: Newton seed (0.10 full engine, 0.09 compact engine).
        tolerance: Threshold for both |npv| and |dnpv|.
        max_iterations: Newton iteration cap.
        bracket: Enable the brentq fallback.

    Returns:
        IRRResult

    Raises:
        ValueError: If cash_flows is empty or not one-dimensional.

    Example:
        >>> solve_irr([-1000, 110, 110, 1110]).rate
        0.11  # approximately
    """
    flows = _as_vector(cash_flows)
    t = np.arange(flows.size)

    rate = float(guess)
    value = math.nan
    status = IRRStatus.MAX_ITERATIONS
    iterations = 0

    if not np.any(flows):
        warnings.warn("IRR undefined for an all-zero cash-flow vector",
                      NonConvergenceWarning, stacklevel=2)
        return IRRResult(rate, False, IRRStatus.DEGENERATE, 0, 0.0)

    with np.errstate(over="ignore", divide="ignore", invalid="ignore"):
        for iterations in range(1, max_iterations + 1):
            discount = (1.0 + rate) ** t
            value = float(np.sum(flows / discount))
            slope = float(np.sum(-t[1:] * flows[1:] / (discount[1:] * (1.0 + rate))))

            if not (math.isfinite(value) and math.isfinite(slope)):
                status = IRRStatus.NON_FINITE
                break
            if abs(value) < tolerance:
                status = IRRStatus.CONVERGED
                break
            if abs(slope) < tolerance:
                status = IRRStatus.FLAT_DERIVATIVE
                break

            step = value / slope
            if not math.isfinite(rate - step):
                status = IRRStatus.NON_FINITE
                break
            rate = rate - step

    if status is IRRStatus.CONVERGED:
        logger.debug("IRR converged to %.10f after %d iterations", rate, iterations)
        return IRRResult(rate, True, status, iterations, value)

    logger.debug("Newton stopped unconverged (%s) at rate=%r after %d iterations",
                 status.value, rate, iterations)

    if bracket:
        recovered = _solve_bracketed(flows, max_iterations)
        if recovered is not None:
            return IRRResult(recovered, True, IRRStatus.BRACKETED, iterations,
                             npv(recovered, flows))

    warnings.warn(
        f"IRR did not converge ({status.value}) after {iterations} iterations; "
        f"returning approximate rate {rate!r}",
        NonConvergenceWarning,
        stacklevel=2,
    )
    return IRRResult(rate, False, status, iterations, value)


def _solve_bracketed(flows: np.ndarray, max_iterations: int) -> float | None:
    """Brent's method on the configured bracket; None if no sign change."""
    low, high = config.IRR_BRACKET
    try:
        return float(brentq(npv, low, high, args=(flows,), xtol=config.IRR_BRACKET_XTOL,
                            maxiter=max_iterations))
    except (ValueError, RuntimeError) as e:
        # brentq raises ValueError when f(low) and f(high) share a sign
        logger.debug("Bracketed IRR fallback failed: %s", e)
        return None
