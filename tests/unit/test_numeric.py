"""
Unit tests for the numeric helpers.
"""

import unittest

from accelmon.streams.numeric import (
    axis_means, axis_std_devs, axis_variances, clamp, composite_noise, ema, linear_map,
)


class TestNumeric(unittest.TestCase):

    def test_axis_means(self):
        means = axis_means([(10.0, 0.0, -4.0), (20.0, 2.0, 4.0)])
        self.assertEqual(list(means), [15.0, 1.0, 0.0])

    def test_population_variance(self):
        samples = [(10.0, 1.0, 0.0), (20.0, 1.0, 0.0)]
        self.assertEqual(list(axis_variances(samples)), [25.0, 0.0, 0.0])
        self.assertEqual(list(axis_std_devs(samples)), [5.0, 0.0, 0.0])

    def test_empty_samples(self):
        with self.assertRaises(ValueError):
            axis_means([])
        with self.assertRaises(ValueError):
            axis_variances([])

    def test_composite_noise(self):
        self.assertAlmostEqual(composite_noise([3.0, 4.0, 0.0]), 5.0)
        self.assertIsInstance(composite_noise(axis_std_devs([(1.0, 1.0, 1.0), (3.0, 3.0, 3.0)])), float)

    def test_ema(self):
        self.assertAlmostEqual(ema(0.0, 100.0, 0.15), 15.0)
        self.assertEqual(ema(5.0, 5.0, 0.5), 5.0)
        self.assertEqual(ema(0.0, 10.0, 1.0), 10.0)

    def test_clamp(self):
        self.assertEqual(clamp(-1, 0, 5), 0)
        self.assertEqual(clamp(7, 0, 5), 5)
        self.assertEqual(clamp(3, 0, 5), 3)

    def test_linear_map(self):
        self.assertAlmostEqual(linear_map(5, 5, 50, 0.05, 0.5), 0.05)
        self.assertAlmostEqual(linear_map(50, 5, 50, 0.05, 0.5), 0.5)
        self.assertAlmostEqual(linear_map(27.5, 5, 50, 0.05, 0.5), 0.275)
        self.assertEqual(linear_map(3, 1, 1, 0.2, 0.9), 0.2)


if __name__ == '__main__':
    unittest.main()
