"""
Unit tests for the Newton-Raphson IRR solver.

Checks recovery of known flat rates, the explicit non-convergence tagging
(flat derivative, iteration cap, non-finite iterates), and the opt-in
Brent bracket fallback.

Version: 0.1.0
Status: Active
"""

import unittest
import warnings

import numpy as np

from bullet_bond_formulas.exceptions import NonConvergenceWarning
from bullet_bond_formulas.irr import (
    IRRStatus,
    npv,
    npv_derivative,
    solve_irr,
)


def flat_rate_bond(rate: float, periods: int, face: float = 1_000.0) -> list[float]:
    """Par bond priced at ``face`` paying ``face * rate`` each period."""
    coupon = face * rate
    return [-face] + [coupon] * (periods - 1) + [coupon + face]


class TestNPV(unittest.TestCase):

    def test_npv_at_zero_is_sum(self):
        self.assertAlmostEqual(npv(0.0, [-100.0, 60.0, 60.0]), 20.0)

    def test_derivative_matches_finite_difference(self):
        flows = flat_rate_bond(0.07, 10)
        h = 1e-7
        fd = (npv(0.05 + h, flows) - npv(0.05 - h, flows)) / (2 * h)
        self.assertAlmostEqual(npv_derivative(0.05, flows), fd, delta=1e-3)

    def test_empty_vector_rejected(self):
        with self.assertRaises(ValueError):
            npv(0.1, [])
        with self.assertRaises(ValueError):
            solve_irr([])


class TestSolveIRR(unittest.TestCase):

    def test_recovers_flat_rate(self):
        result = solve_irr(flat_rate_bond(0.11, 10))
        self.assertTrue(result.converged)
        self.assertIs(result.status, IRRStatus.CONVERGED)
        self.assertAlmostEqual(result.rate, 0.11, delta=1e-6)
        self.assertLess(abs(result.npv), 1e-6)
        self.assertEqual(float(result), result.rate)

    def test_recovers_rate_from_either_seed(self):
        flows = flat_rate_bond(0.0129166, 16, face=200_000.0)
        for seed in (0.10, 0.09):
            with self.subTest(seed=seed):
                result = solve_irr(flows, guess=seed)
                self.assertTrue(result.converged)
                self.assertAlmostEqual(result.rate, 0.0129166, delta=1e-9)

    def test_issuer_perspective_same_rate(self):
        flows = -np.asarray(flat_rate_bond(0.04, 8))
        result = solve_irr(flows)
        self.assertTrue(result.converged)
        self.assertAlmostEqual(result.rate, 0.04, delta=1e-6)

    def test_accepts_numpy_arrays(self):
        result = solve_irr(np.array(flat_rate_bond(0.06, 5)))
        self.assertAlmostEqual(result.rate, 0.06, delta=1e-6)

    def test_seed_already_root(self):
        result = solve_irr(flat_rate_bond(0.10, 4), guess=0.10)
        self.assertTrue(result.converged)
        self.assertEqual(result.iterations, 1)
        self.assertAlmostEqual(result.rate, 0.10, places=12)


class TestNonConvergence(unittest.TestCase):

    def test_degenerate_vector_reports_nonconvergence(self):
        with self.assertWarns(NonConvergenceWarning):
            result = solve_irr([1_000.0, 0.0, 0.0])
        self.assertFalse(result.converged)
        self.assertIs(result.status, IRRStatus.FLAT_DERIVATIVE)
        self.assertEqual(result.rate, 0.10)

    def test_all_zero_vector_is_degenerate(self):
        with self.assertWarns(NonConvergenceWarning):
            result = solve_irr([0.0, 0.0, 0.0])
        self.assertFalse(result.converged)
        self.assertIs(result.status, IRRStatus.DEGENERATE)
        self.assertEqual(result.iterations, 0)

    def test_iteration_cap(self):
        with self.assertWarns(NonConvergenceWarning):
            result = solve_irr(flat_rate_bond(0.11, 10), max_iterations=1)
        self.assertFalse(result.converged)
        self.assertIs(result.status, IRRStatus.MAX_ITERATIONS)
        self.assertEqual(result.iterations, 1)

    def test_seed_at_minus_one_is_non_finite(self):
        # (1 + r)^j is zero at r = -1, so every discounted flow blows up
        with self.assertWarns(NonConvergenceWarning):
            result = solve_irr(flat_rate_bond(0.11, 10), guess=-1.0)
        self.assertFalse(result.converged)
        self.assertIs(result.status, IRRStatus.NON_FINITE)
        self.assertEqual(result.rate, -1.0)
        self.assertEqual(result.iterations, 1)

    def test_bracket_fallback_recovers(self):
        flows = flat_rate_bond(0.11, 10)
        with warnings.catch_warnings():
            warnings.simplefilter("error", NonConvergenceWarning)
            result = solve_irr(flows, max_iterations=1, bracket=True)
        self.assertTrue(result.converged)
        self.assertIs(result.status, IRRStatus.BRACKETED)
        self.assertAlmostEqual(result.rate, 0.11, delta=1e-6)

    def test_bracket_fallback_cannot_invent_a_root(self):
        with self.assertWarns(NonConvergenceWarning):
            result = solve_irr([1_000.0, 0.0, 0.0], bracket=True)
        self.assertFalse(result.converged)


if __name__ == "__main__":
    unittest.main()
