# Requires Python 3.12+
# Uses native type hints: list[x], tuple[x, y], X | None (PEP 585, PEP 604)
"""
Instrument parameters, engine variants, and the parameter normalizer.

Structure:
  (1) GraceKind - grace-period policy (none / partial / total)
  (2) EngineVariant - capability flags shared by the full and compact engines
  (3) InstrumentParameters - raw inputs as entered on the bond form
  (4) normalize() - validation plus derived fields (TEP, coupon, costs, t=0 flows)

Rate convention: every rate and fee on InstrumentParameters is a percentage
(e.g. 2.6 for 2.6%, 0.0375 for 3.75 bp). Derived periodic rates on
NormalizedParameters are decimals.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any, Mapping

from bullet_bond_formulas import config
from bullet_bond_formulas.exceptions import ValidationError

__version__ = "0.1.0"

logger = logging.getLogger(__name__)


# =============================================================================
# ENUMS
# =============================================================================

class GraceKind(Enum):
    """Grace-period policy applied to the first ``grace_periods`` periods."""
    NONE = "none"        # no special treatment
    PARTIAL = "partial"  # interest only, no amortization
    TOTAL = "total"      # nothing is paid

    @classmethod
    def parse(cls, value: GraceKind | str) -> GraceKind:
        """
        Accept an enum member, its value, or a one-letter form code.

        Form codes: S (sin periodo) -> NONE, P (parcial) -> PARTIAL,
        T (total) -> TOTAL.
        """
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        codes = {"s": cls.NONE, "p": cls.PARTIAL, "t": cls.TOTAL}
        if text in codes:
            return codes[text]
        try:
            return cls(text)
        except ValueError:
            raise ValueError(
                f"grace_kind must be one of none/partial/total (or S/P/T), got {value!r}"
            ) from None

    @property
    def code(self) -> str:
        return {GraceKind.NONE: "S", GraceKind.PARTIAL: "P", GraceKind.TOTAL: "T"}[self]


# =============================================================================
# ENGINE VARIANTS
# =============================================================================

@dataclass(frozen=True)
class EngineVariant:
    """
    Capability set of the engine.

    The full variant charges issuance costs at t=0 and honours grace periods;
    the compact variant does neither and seeds Newton-Raphson slightly lower.
    """
    name: str
    has_issuance_costs: bool
    has_grace_period: bool
    irr_seed: float

    @classmethod
    def from_name(cls, name: EngineVariant | str) -> EngineVariant:
        if isinstance(name, cls):
            return name
        try:
            return VARIANTS[str(name).strip().lower()]
        except KeyError:
            raise ValueError(
                f"variant must be one of {sorted(VARIANTS)}, got {name!r}"
            ) from None


FULL = EngineVariant("full", has_issuance_costs=True, has_grace_period=True,
                     irr_seed=config.IRR_SEED_FULL)
COMPACT = EngineVariant("compact", has_issuance_costs=False, has_grace_period=False,
                        irr_seed=config.IRR_SEED_COMPACT)
VARIANTS = {FULL.name: FULL, COMPACT.name: COMPACT}


# =============================================================================
# INSTRUMENT PARAMETERS - as entered on the form
# =============================================================================

@dataclass(frozen=True)
class InstrumentParameters:
    """
    Raw instrument description. Immutable for the length of a calculation.

    ``periods_per_year`` may be left as None, in which case it is derived
    from the day counts (``days_per_year // days_per_period``). An unset
    ``issuance_price`` means the bond is placed at par.
    """
    face_value: float = config.DEFAULT_FACE_VALUE
    coupon_rate: float = config.DEFAULT_COUPON_RATE        # annual %, effective
    years: int = config.DEFAULT_YEARS
    periods_per_year: int | None = None
    days_per_year: int = config.DEFAULT_DAYS_PER_YEAR
    days_per_period: int = config.DEFAULT_DAYS_PER_PERIOD
    issuance_price: float | None = None
    registry_fee: float = config.DEFAULT_REGISTRY_FEE      # % of face (CAVALI)
    placement_fee: float = config.DEFAULT_PLACEMENT_FEE    # % of face
    structuring_fee: float = config.DEFAULT_STRUCTURING_FEE  # % of face
    grace_kind: GraceKind = GraceKind.NONE
    grace_periods: int = 0
    issuer: str = ""
    currency: str = config.DEFAULT_CURRENCY

    def __post_init__(self) -> None:
        object.__setattr__(self, "grace_kind", GraceKind.parse(self.grace_kind))

    @property
    def resolved_periods_per_year(self) -> int:
        """Coupons per year; 0 when neither given nor derivable."""
        if self.periods_per_year is not None:
            return int(self.periods_per_year)
        if self.days_per_period > 0:
            return int(self.days_per_year // self.days_per_period)
        return 0

    @property
    def total_periods(self) -> int:
        return int(self.years) * self.resolved_periods_per_year

    @property
    def resolved_issuance_price(self) -> float:
        return self.face_value if self.issuance_price is None else self.issuance_price

    @property
    def periodic_coupon_rate(self) -> float:
        """TEP: (1 + annual)^(1/m) - 1, as a decimal."""
        m = self.resolved_periods_per_year
        if m <= 0:
            return 0.0
        return (1.0 + self.coupon_rate / 100.0) ** (1.0 / m) - 1.0

    @property
    def coupon_amount(self) -> float:
        return self.face_value * self.periodic_coupon_rate

    def with_face_value(self, face_value: float) -> InstrumentParameters:
        """Copy with a new face value; the issuance price resets to par."""
        return replace(self, face_value=face_value, issuance_price=face_value)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> InstrumentParameters:
        """
        Build parameters from a plain mapping keyed by field name.

        Values are coerced to the field's type. Unknown keys and values that
        cannot be coerced are reported together as a ValidationError.
        """
        known = {f.name: f for f in fields(cls)}
        violations: dict[str, str] = {}
        kwargs: dict[str, Any] = {}

        for key, value in data.items():
            if key not in known:
                violations[key] = "unknown field"
                continue
            try:
                kwargs[key] = _coerce(key, value)
            except (TypeError, ValueError) as e:
                violations[key] = str(e)

        if violations:
            raise ValidationError(violations)
        return cls(**kwargs)


_INT_FIELDS = {"years", "periods_per_year", "days_per_year", "days_per_period", "grace_periods"}
_STR_FIELDS = {"issuer", "currency"}


def _coerce(key: str, value: Any) -> Any:
    if key == "grace_kind":
        return GraceKind.parse(value)
    if key in _STR_FIELDS:
        return str(value)
    if value is None and key in ("periods_per_year", "issuance_price"):
        return None
    if key in _INT_FIELDS:
        number = float(value)
        if not number.is_integer():
            raise ValueError(f"must be a whole number, got {value!r}")
        return int(number)
    return float(value)


# =============================================================================
# NORMALIZED PARAMETERS - validated inputs plus derived fields
# =============================================================================

@dataclass(frozen=True)
class IssuanceCosts:
    """Issuance costs paid by the issuer at t=0, in currency units."""
    registry: float = 0.0
    placement: float = 0.0
    structuring: float = 0.0

    @property
    def total(self) -> float:
        return self.registry + self.placement + self.structuring


@dataclass(frozen=True)
class NormalizedParameters:
    """Validated parameters and everything derived from them."""
    params: InstrumentParameters
    variant: EngineVariant
    periods_per_year: int
    total_periods: int
    periodic_rate: float
    coupon_amount: float
    issuance_price: float
    grace_kind: GraceKind
    grace_periods: int
    costs: IssuanceCosts = field(default_factory=IssuanceCosts)

    @property
    def face_value(self) -> float:
        return self.params.face_value

    @property
    def issuer_initial_flow(self) -> float:
        """Issuer receives the placement price and pays the issuance costs."""
        return self.issuance_price - self.costs.total

    @property
    def investor_initial_flow(self) -> float:
        """Investor pays the placement price."""
        return -self.issuance_price


_FLOAT_FIELDS = ("face_value", "coupon_rate", "registry_fee", "placement_fee", "structuring_fee")


def _is_finite(value: Any) -> bool:
    try:
        return math.isfinite(value)
    except TypeError:
        return False


def _is_whole(value: Any) -> bool:
    return _is_finite(value) and float(value).is_integer()


def _check_range(violations: dict[str, str], name: str, value: float,
                 bounds: tuple[float, float]) -> None:
    if name in violations:
        return
    low, high = bounds
    if not (low <= value <= high):
        violations[name] = f"must be between {low:g}% and {high:g}%, got {value}"


def _check_numbers(params: InstrumentParameters) -> dict[str, str]:
    """Reject non-finite amounts and rates, and non-integral counts."""
    violations: dict[str, str] = {}
    for name in _FLOAT_FIELDS:
        value = getattr(params, name)
        if not _is_finite(value):
            violations[name] = f"must be a finite number, got {value!r}"
    if params.issuance_price is not None and not _is_finite(params.issuance_price):
        violations["issuance_price"] = f"must be a finite number, got {params.issuance_price!r}"
    for name in _INT_FIELDS:
        value = getattr(params, name)
        if name == "periods_per_year" and value is None:
            continue
        if not _is_whole(value):
            violations[name] = f"must be a whole number, got {value!r}"
    return violations


def normalize(params: InstrumentParameters,
              variant: EngineVariant | str = FULL) -> NormalizedParameters:
    """
    Validate instrument parameters and derive secondary fields.

    Numbers are checked for soundness first (finite amounts and rates,
    whole-number counts); range rules then apply to the fields that passed.

    Args:
        params: Raw instrument parameters (percentage convention).
        variant: Engine capability set, FULL or COMPACT (or its name).

    Returns:
        NormalizedParameters with TEP, coupon amount, costs and t=0 flows.

    Raises:
        ValidationError: Listing every violated constraint.
    """
    variant = EngineVariant.from_name(variant)
    violations = _check_numbers(params)

    if "face_value" not in violations and params.face_value <= 0:
        violations["face_value"] = f"must be positive, got {params.face_value}"
    issuance_price = params.resolved_issuance_price
    if "issuance_price" not in violations and not (_is_finite(issuance_price) and issuance_price > 0):
        violations["issuance_price"] = f"must be positive, got {issuance_price}"
    _check_range(violations, "coupon_rate", params.coupon_rate, config.COUPON_RATE_BOUNDS)
    if "years" not in violations and params.years <= 0:
        violations["years"] = f"must be positive, got {params.years}"
    if "days_per_year" not in violations and params.days_per_year <= 0:
        violations["days_per_year"] = f"must be positive, got {params.days_per_year}"
    if "days_per_period" not in violations and params.days_per_period < config.MIN_DAYS_PER_PERIOD:
        violations["days_per_period"] = (
            f"must be at least {config.MIN_DAYS_PER_PERIOD}, got {params.days_per_period}"
        )

    # Periods per year is only readable once the fields it derives from are sound
    period_inputs = ("periods_per_year",) if params.periods_per_year is not None \
        else ("days_per_year", "days_per_period")
    periods_known = not any(name in violations for name in period_inputs)
    if periods_known and params.resolved_periods_per_year < 1:
        violations["periods_per_year"] = (
            f"must be at least 1, got {params.resolved_periods_per_year}"
        )
        periods_known = False

    if variant.has_issuance_costs:
        _check_range(violations, "registry_fee", params.registry_fee, config.REGISTRY_FEE_BOUNDS)
        _check_range(violations, "placement_fee", params.placement_fee, config.ISSUANCE_FEE_BOUNDS)
        _check_range(violations, "structuring_fee", params.structuring_fee,
                     config.ISSUANCE_FEE_BOUNDS)

    if periods_known and "years" not in violations:
        total_periods = params.total_periods
        if variant.has_grace_period and "grace_periods" not in violations:
            if params.grace_periods < 0 or params.grace_periods >= total_periods:
                violations["grace_periods"] = (
                    f"must be in [0, {total_periods}), got {params.grace_periods}"
                )

    if violations:
        logger.debug("Rejected parameters for %s variant: %s", variant.name, violations)
        raise ValidationError(violations)

    total_periods = params.total_periods

    if variant.has_issuance_costs:
        face = params.face_value
        costs = IssuanceCosts(
            registry=face * params.registry_fee / 100.0,
            placement=face * params.placement_fee / 100.0,
            structuring=face * params.structuring_fee / 100.0,
        )
    else:
        costs = IssuanceCosts()

    if variant.has_grace_period:
        grace_kind, grace_periods = params.grace_kind, params.grace_periods
    else:
        grace_kind, grace_periods = GraceKind.NONE, 0
    # A zero-length grace window behaves exactly like no grace at all
    if grace_periods == 0:
        grace_kind = GraceKind.NONE

    return NormalizedParameters(
        params=params,
        variant=variant,
        periods_per_year=params.resolved_periods_per_year,
        total_periods=total_periods,
        periodic_rate=params.periodic_coupon_rate,
        coupon_amount=params.coupon_amount,
        issuance_price=params.resolved_issuance_price,
        grace_kind=grace_kind,
        grace_periods=grace_periods,
        costs=costs,
    )
