# Requires Python 3.12+
"""
Numerical constants and input bounds for the bullet bond engine.

Rates and fee bounds follow the percentage convention used throughout the
package (2.6 means 2.6%).
"""

from __future__ import annotations

# =============================================================================
# Root finder
# =============================================================================

IRR_SEED_FULL = 0.10      # Newton seed, full variant
IRR_SEED_COMPACT = 0.09   # Newton seed, compact variant
IRR_TOLERANCE = 1e-6      # |npv| convergence and |dnpv| flatness threshold
IRR_MAX_ITERATIONS = 100

# Bracket used by the opt-in brentq fallback (periodic rates)
IRR_BRACKET = (-0.99, 10.0)
IRR_BRACKET_XTOL = 1e-12

# =============================================================================
# Validation bounds (percent unless noted)
# =============================================================================

COUPON_RATE_BOUNDS = (0.0, 12.0)
ISSUANCE_FEE_BOUNDS = (1.0, 10.0)   # placement and structuring
REGISTRY_FEE_BOUNDS = (0.0, 10.0)
MIN_DAYS_PER_PERIOD = 10            # days

# =============================================================================
# Form defaults
# =============================================================================

DEFAULT_FACE_VALUE = 200_000.0
DEFAULT_COUPON_RATE = 2.6
DEFAULT_YEARS = 8
DEFAULT_DAYS_PER_YEAR = 360
DEFAULT_DAYS_PER_PERIOD = 180
DEFAULT_REGISTRY_FEE = 0.0375
DEFAULT_PLACEMENT_FEE = 2.0
DEFAULT_STRUCTURING_FEE = 1.5
DEFAULT_CURRENCY = "PEN"
