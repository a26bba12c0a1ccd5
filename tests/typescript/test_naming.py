# pylint: disable=missing-docstring

import unittest

from twx_ts_codegen.typescript import naming


class Test_class_name(unittest.TestCase):
    def test_valid_name_is_kept(self) -> None:
        self.assertEqual("Sensor", naming.class_name("Sensor"))

    def test_runs_are_replaced_once(self) -> None:
        self.assertEqual("Demo_Sensor_1", naming.class_name("Demo.--Sensor 1"))

    def test_leading_digits(self) -> None:
        self.assertEqual("_Printer", naming.class_name("3Printer"))
        self.assertEqual("xPrinter", naming.class_name("3-Printer", separator="x"))

    def test_empty_separator(self) -> None:
        self.assertEqual("DemoSensor", naming.class_name("Demo.Sensor", separator=""))

    def test_only_disallowed_characters(self) -> None:
        self.assertEqual("", naming.class_name("123", separator=""))


if __name__ == "__main__":
    unittest.main()
