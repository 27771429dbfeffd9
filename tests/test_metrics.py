"""
Unit tests for the metric aggregator.

Price, Macaulay duration and convexity are checked against hand-computed
values for a short annual bond, plus the identities that hold when the bond
is valued at its own coupon rate.

Version: 0.1.0
Status: Active
"""

import unittest

import numpy as np

from bullet_bond_formulas.irr import solve_irr
from bullet_bond_formulas.metrics import (
    annualize_rate,
    compute_metrics,
    promised_flows,
)
from bullet_bond_formulas.schedule import generate_schedule


class TestAnnualize(unittest.TestCase):

    def test_inverse_of_periodic_conversion(self):
        tep = 1.026 ** 0.5 - 1
        self.assertAlmostEqual(annualize_rate(tep, 2), 0.026, places=14)

    def test_zero_rate(self):
        self.assertEqual(annualize_rate(0.0, 12), 0.0)


class TestPromisedFlows(unittest.TestCase):

    def test_balloon_at_maturity(self):
        np.testing.assert_allclose(promised_flows(3, 50.0, 1_000.0), [50.0, 50.0, 1_050.0])

    def test_empty(self):
        self.assertEqual(promised_flows(0, 50.0, 1_000.0).size, 0)


class TestComputeMetrics(unittest.TestCase):
    """Three-period annual bond, 5% coupon, valued at 5%."""

    def setUp(self):
        self.face, self.rate, self.n = 1_000.0, 0.05, 3
        self.coupon = self.face * self.rate
        self.sch = generate_schedule(self.face, self.rate, self.n,
                                     issuer_initial_flow=self.face,
                                     investor_initial_flow=-self.face)
        self.issuer = solve_irr(self.sch.issuer_cash_flows)
        self.investor = solve_irr(self.sch.investor_cash_flows)
        self.metrics = compute_metrics(self.sch, self.issuer, self.investor,
                                       self.rate, 1, self.face, self.coupon)

    def test_price_at_own_rate_is_face(self):
        self.assertAlmostEqual(self.metrics.price, self.face, places=8)

    def test_duration(self):
        pv = [50 / 1.05, 50 / 1.05 ** 2, 1_050 / 1.05 ** 3]
        expected = sum((i + 1) * v for i, v in enumerate(pv)) / sum(pv)
        self.assertAlmostEqual(self.metrics.duration, expected, places=12)
        self.assertAlmostEqual(self.metrics.duration, 2.8594, places=4)
        self.assertAlmostEqual(self.metrics.modified_duration, expected / 1.05, places=12)

    def test_convexity(self):
        self.assertAlmostEqual(self.metrics.convexity, 10.2056, places=3)

    def test_irrs_equal_coupon_rate_at_par(self):
        self.assertAlmostEqual(self.metrics.issuer_irr, 0.05, places=9)
        self.assertAlmostEqual(self.metrics.investor_irr, 0.05, places=9)
        self.assertTrue(self.metrics.converged)

    def test_duration_in_years_scales_with_frequency(self):
        semi = compute_metrics(self.sch, self.issuer, self.investor,
                               self.rate, 2, self.face, self.coupon)
        self.assertAlmostEqual(semi.duration, self.metrics.duration / 2, places=12)

    def test_zero_coupon_duration_is_maturity(self):
        sch = generate_schedule(1_000.0, 0.0, 8)
        m = compute_metrics(sch, None, None, 0.0, 4, 1_000.0, 0.0)
        self.assertAlmostEqual(m.price, 1_000.0)
        self.assertAlmostEqual(m.duration, 2.0)
        self.assertAlmostEqual(m.convexity, 72.0)

    def test_explicit_discount_rate(self):
        m = compute_metrics(self.sch, self.issuer, self.investor, self.rate, 1,
                            self.face, self.coupon, discount_rate=0.06)
        self.assertLess(m.price, self.face)
        self.assertEqual(m.discount_rate, 0.06)
        self.assertEqual(m.periodic_rate, self.rate)

    def test_rejects_zero_periods_per_year(self):
        with self.assertRaises(ValueError):
            compute_metrics(self.sch, self.issuer, self.investor, self.rate, 0,
                            self.face, self.coupon)

    def test_rejects_discount_rate_of_minus_one(self):
        with self.assertRaises(ValueError):
            compute_metrics(self.sch, self.issuer, self.investor, self.rate, 1,
                            self.face, self.coupon, discount_rate=-1.0)

    def test_to_dict_uses_percent_for_rates(self):
        d = self.metrics.to_dict()
        self.assertAlmostEqual(d["tep"], 5.0)
        self.assertAlmostEqual(d["tcea"], 5.0, places=7)
        self.assertAlmostEqual(d["tcrea"], 5.0, places=7)
        self.assertTrue(d["issuer_irr_converged"])


class TestDegenerateMetrics(unittest.TestCase):

    def test_empty_schedule_zeroes_metrics(self):
        sch = generate_schedule(1_000.0, 0.05, 0)
        m = compute_metrics(sch, None, None, 0.05, 2, 1_000.0, 50.0)
        self.assertEqual(m.price, 0.0)
        self.assertEqual(m.duration, 0.0)
        self.assertEqual(m.convexity, 0.0)
        self.assertEqual(m.issuer_irr, 0.0)
        self.assertEqual(m.investor_irr, 0.0)
        self.assertFalse(m.converged)

    def test_zero_face_zero_coupon(self):
        sch = generate_schedule(0.0, 0.05, 3)
        m = compute_metrics(sch, None, None, 0.05, 1, 0.0, 0.0)
        self.assertEqual(m.price, 0.0)
        self.assertEqual(m.duration, 0.0)


if __name__ == "__main__":
    unittest.main()
