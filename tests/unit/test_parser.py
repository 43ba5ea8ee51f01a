"""
Unit tests for the wire protocol parser.
"""

import math
import unittest

from accelmon.ingestion import Data, Invalid, MessageParser, Registration, parse_line


class TestMessageParser(unittest.TestCase):
    """Test cases for MessageParser."""

    def setUp(self):
        self.parser = MessageParser()

    def test_registration(self):
        self.assertEqual(self.parser.parse("S3"), Registration(3))
        self.assertEqual(self.parser.parse("  S1\r"), Registration(1))

    def test_registration_out_of_range(self):
        for line in ("S0", "S7", "S12", "S", "Sx", "S-1"):
            self.assertIsInstance(self.parser.parse(line), Invalid, line)

    def test_registration_with_extra_tokens(self):
        self.assertIsInstance(self.parser.parse("S1 x=1"), Invalid)

    def test_data(self):
        message = self.parser.parse("m2 x=1.5 y=-2 z=1000")
        self.assertEqual(message, Data(2, 1.5, -2.0, 1000.0))

    def test_data_axis_order_and_commas(self):
        self.assertEqual(self.parser.parse("m4 z=3 y=2 x=1"), Data(4, 1.0, 2.0, 3.0))
        self.assertEqual(self.parser.parse("m4,x=1,y=2,z=3"), Data(4, 1.0, 2.0, 3.0))

    def test_data_ignores_unknown_tokens(self):
        self.assertEqual(self.parser.parse("m1 t=99 x=1 y=2 z=3"), Data(1, 1.0, 2.0, 3.0))

    def test_missing_axis(self):
        message = self.parser.parse("m1 x=1 y=2")
        self.assertIsInstance(message, Invalid)
        self.assertIn("z", message.reason)

    def test_unparseable_axis(self):
        self.assertIsInstance(self.parser.parse("m1 x=abc y=2 z=3"), Invalid)
        self.assertIsInstance(self.parser.parse("m1 x= y=2 z=3"), Invalid)

    def test_only_signed_decimals_accepted(self):
        for value in ("1_000", "0x10", "1e", "infinity", "1.5.2", "--1", "١"):
            line = f"m1 x={value} y=0 z=0"
            self.assertIsInstance(self.parser.parse(line), Invalid, line)

    def test_decimal_spellings(self):
        message = self.parser.parse("m1 x=-12.5 y=+.5 z=1e3")
        self.assertEqual(message, Data(1, -12.5, 0.5, 1000.0))
        self.assertEqual(self.parser.parse("m2 x=3. y=-0 z=2E-1"), Data(2, 3.0, -0.0, 0.2))

    def test_invalid_data_id(self):
        for line in ("m0 x=1 y=2 z=3", "m7 x=1 y=2 z=3", "m x=1 y=2 z=3", "m١ x=1 y=2 z=3"):
            self.assertIsInstance(self.parser.parse(line), Invalid, line)

    def test_unrecognised_lines(self):
        for line in ("", "   ", "hello", "M1 x=1 y=2 z=3", "s1"):
            self.assertIsInstance(self.parser.parse(line), Invalid, line)

    def test_non_finite_values_pass_through(self):
        message = self.parser.parse("m1 x=nan y=inf z=0")
        self.assertIsInstance(message, Data)
        self.assertTrue(math.isnan(message.x))
        self.assertTrue(math.isinf(message.y))

    def test_overflow_becomes_infinite(self):
        message = self.parser.parse("m1 x=1e999 y=0 z=0")
        self.assertIsInstance(message, Data)
        self.assertTrue(math.isinf(message.x))

    def test_wider_id_range(self):
        parser = MessageParser(max_streams=9)
        self.assertEqual(parser.parse("S9"), Registration(9))

    def test_parse_line_default(self):
        self.assertEqual(parse_line("S6"), Registration(6))
        self.assertIsInstance(parse_line("S7"), Invalid)


if __name__ == '__main__':
    unittest.main()
