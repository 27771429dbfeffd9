# Requires Python 3.12+
# Uses native type hints: list[x], tuple[x, y], X | None (PEP 585, PEP 604)
from __future__ import annotations

import numpy as np
from dataclasses import dataclass

from bullet_bond_formulas.parameters import GraceKind, NormalizedParameters

__version__ = "0.1.0"


# =============================================================================
# Bullet ("American") coupon schedule with grace-period overlay
# =============================================================================

@dataclass(frozen=True)
class PeriodRecord:
    """
    One row of the coupon table.

    Flows are signed from each counterparty's point of view: the issuer pays
    (negative), the investor receives (positive).
    """
    period: int
    coupon_rate: float       # annual %, as entered
    periodic_rate: float     # TEP, decimal
    opening_balance: float
    interest: float
    amortization: float
    payment: float
    closing_balance: float
    issuer_flow: float
    investor_flow: float
    grace_kind: GraceKind

    def to_dict(self) -> dict:
        return {
            "period": self.period,
            "coupon_rate": self.coupon_rate,
            "periodic_rate": self.periodic_rate,
            "opening_balance": self.opening_balance,
            "interest": self.interest,
            "amortization": self.amortization,
            "payment": self.payment,
            "closing_balance": self.closing_balance,
            "issuer_flow": self.issuer_flow,
            "investor_flow": self.investor_flow,
            "grace_kind": self.grace_kind.value,
        }


@dataclass(frozen=True)
class BulletSchedule:
    """
    Column-oriented coupon schedule for periods 1..N.

    Per-period arrays have length N. The two cash-flow vectors have length
    N+1: index 0 is the t=0 flow (net proceeds for the issuer, price paid by
    the investor) and index i the flow of period i.
    """
    period: np.ndarray
    opening_balance: np.ndarray
    interest: np.ndarray
    amortization: np.ndarray
    payment: np.ndarray
    closing_balance: np.ndarray
    issuer_flow: np.ndarray
    investor_flow: np.ndarray
    grace_kind: tuple[GraceKind, ...]
    issuer_cash_flows: np.ndarray
    investor_cash_flows: np.ndarray
    periodic_rate: float = 0.0
    coupon_rate: float = 0.0

    def __len__(self) -> int:
        return len(self.period)

    @property
    def total_periods(self) -> int:
        return len(self.period)

    def records(self) -> tuple[PeriodRecord, ...]:
        """Materialize the schedule as immutable PeriodRecord rows."""
        return tuple(
            PeriodRecord(
                period=int(self.period[k]),
                coupon_rate=self.coupon_rate,
                periodic_rate=self.periodic_rate,
                opening_balance=float(self.opening_balance[k]),
                interest=float(self.interest[k]),
                amortization=float(self.amortization[k]),
                payment=float(self.payment[k]),
                closing_balance=float(self.closing_balance[k]),
                issuer_flow=float(self.issuer_flow[k]),
                investor_flow=float(self.investor_flow[k]),
                grace_kind=self.grace_kind[k],
            )
            for k in range(len(self.period))
        )

    def to_rows(self) -> list[dict]:
        return [record.to_dict() for record in self.records()]


def _freeze(*arrays: np.ndarray) -> None:
    for arr in arrays:
        arr.setflags(write=False)


def generate_schedule(
    face_value: float,
    periodic_rate: float,
    total_periods: int,
    grace_kind: GraceKind | str = GraceKind.NONE,
    grace_periods: int = 0,
    issuer_initial_flow: float = 0.0,
    investor_initial_flow: float = 0.0,
    coupon_rate: float = 0.0,
) -> BulletSchedule:
    """
    Build the bullet coupon schedule.

    For period i = 1..N:
        - i <= grace_periods, TOTAL grace: nothing accrues or moves.
        - i <= grace_periods, PARTIAL grace: coupon paid, no amortization.
        - otherwise: coupon paid; full face value amortized at i = N.

    The outstanding balance stays at face value until maturity, so the
    opening balance of every period is the face value and the closing
    balance is zero only at N.

    Args:
        face_value: Face (nominal) value of the bond.
        periodic_rate: Periodic coupon rate (TEP) as a decimal.
        total_periods: Number of coupon periods N.
        grace_kind: Grace policy for the first ``grace_periods`` periods.
        grace_periods: Length of the grace window in periods.
        issuer_initial_flow: t=0 flow prepended to the issuer vector.
        investor_initial_flow: t=0 flow prepended to the investor vector.
        coupon_rate: Annual coupon rate (%), carried onto each row for display.

    Returns:
        BulletSchedule. With ``total_periods == 0`` the schedule is empty and
        each cash-flow vector holds only its t=0 flow.

    Raises:
        ValueError: If total_periods or grace_periods is negative.
    """
    grace_kind = GraceKind.parse(grace_kind)
    if total_periods < 0:
        raise ValueError(f"total_periods must be non-negative, got {total_periods}")
    if grace_periods < 0:
        raise ValueError(f"grace_periods must be non-negative, got {grace_periods}")

    n = int(total_periods)
    coupon = face_value * periodic_rate

    period = np.arange(1, n + 1)
    opening_balance = np.full(n, float(face_value))
    interest = np.zeros(n)
    amortization = np.zeros(n)
    grace_flags: list[GraceKind] = []

    for k in range(n):
        i = k + 1
        if i <= grace_periods and grace_kind is not GraceKind.NONE:
            grace_flags.append(grace_kind)
            if grace_kind is GraceKind.PARTIAL:
                interest[k] = coupon
            continue
        grace_flags.append(GraceKind.NONE)
        interest[k] = coupon
        if i == n:
            amortization[k] = opening_balance[k]

    payment = interest + amortization
    closing_balance = opening_balance.copy()
    if n > 0:
        closing_balance[-1] = 0.0

    # 0.0 - x keeps untouched total-grace periods at +0.0 rather than -0.0
    issuer_flow = 0.0 - payment
    investor_flow = payment.copy()

    issuer_cash_flows = np.concatenate(([float(issuer_initial_flow)], issuer_flow))
    investor_cash_flows = np.concatenate(([float(investor_initial_flow)], investor_flow))

    _freeze(period, opening_balance, interest, amortization, payment, closing_balance,
            issuer_flow, investor_flow, issuer_cash_flows, investor_cash_flows)

    return BulletSchedule(
        period=period,
        opening_balance=opening_balance,
        interest=interest,
        amortization=amortization,
        payment=payment,
        closing_balance=closing_balance,
        issuer_flow=issuer_flow,
        investor_flow=investor_flow,
        grace_kind=tuple(grace_flags),
        issuer_cash_flows=issuer_cash_flows,
        investor_cash_flows=investor_cash_flows,
        periodic_rate=float(periodic_rate),
        coupon_rate=float(coupon_rate),
    )


def schedule_from_parameters(normalized: NormalizedParameters) -> BulletSchedule:
    """
    Generate the schedule for validated parameters.

    Unpacks NormalizedParameters and prepends the t=0 flows computed by the
    normalizer for generate_schedule.
    """
    return generate_schedule(
        face_value=normalized.face_value,
        periodic_rate=normalized.periodic_rate,
        total_periods=normalized.total_periods,
        grace_kind=normalized.grace_kind,
        grace_periods=normalized.grace_periods,
        issuer_initial_flow=normalized.issuer_initial_flow,
        investor_initial_flow=normalized.investor_initial_flow,
        coupon_rate=normalized.params.coupon_rate,
    )
