# Requires Python 3.12+
"""
Bullet Bond Formulas: coupon schedules, IRRs, and yield metrics for bonds
repaid with a single balloon ("American" method), with optional issuance
costs and grace periods.
"""

from __future__ import annotations

import logging

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

# Errors
from bullet_bond_formulas.exceptions import (
    ValidationError,
    NonConvergenceWarning,
)

# Parameters and normalizer
from bullet_bond_formulas.parameters import (
    GraceKind,
    EngineVariant,
    FULL,
    COMPACT,
    InstrumentParameters,
    IssuanceCosts,
    NormalizedParameters,
    normalize,
)

# Schedule
from bullet_bond_formulas.schedule import (
    PeriodRecord,
    BulletSchedule,
    generate_schedule,
    schedule_from_parameters,
)

# Root finder
from bullet_bond_formulas.irr import (
    IRRStatus,
    IRRResult,
    npv,
    npv_derivative,
    solve_irr,
)

# Metrics
from bullet_bond_formulas.metrics import (
    MetricSet,
    annualize_rate,
    promised_flows,
    compute_metrics,
)

# Pipeline
from bullet_bond_formulas.engine import (
    BondCalculation,
    compute,
    compute_from_dict,
)

__all__ = [
    "__version__",
    # Errors
    "ValidationError",
    "NonConvergenceWarning",
    # Parameters
    "GraceKind",
    "EngineVariant",
    "FULL",
    "COMPACT",
    "InstrumentParameters",
    "IssuanceCosts",
    "NormalizedParameters",
    "normalize",
    # Schedule
    "PeriodRecord",
    "BulletSchedule",
    "generate_schedule",
    "schedule_from_parameters",
    # Root finder
    "IRRStatus",
    "IRRResult",
    "npv",
    "npv_derivative",
    "solve_irr",
    # Metrics
    "MetricSet",
    "annualize_rate",
    "promised_flows",
    "compute_metrics",
    # Pipeline
    "BondCalculation",
    "compute",
    "compute_from_dict",
]
