#!/usr/bin/env python3

import unittest

from rawargs import text


class JoinErrorsTests(unittest.TestCase):

    def test_single_line(self):
        self.assertEqual(text.join_errors(["Unknown argument 'x'"]), "ERROR: Unknown argument 'x'")

    def test_multi_line_alignment(self):
        self.assertEqual(
            text.format_error("Can't parse 'sideways'.\nPossible values: (left|down|up|right)"),
            "ERROR: Can't parse 'sideways'.\n"
            "       Possible values: (left|down|up|right)"
            )

    def test_order_preserved(self):
        self.assertEqual(
            text.join_errors(["first", "second\nmore", "third"]),
            "ERROR: first\nERROR: second\n       more\nERROR: third",
            )

    def test_empty_lines_dropped(self):
        self.assertEqual(text.format_error("a\n\nb\n"), "ERROR: a\n       b")

    def test_empty(self):
        self.assertEqual(text.join_errors([]), "")

    def test_custom_prefix(self):
        self.assertEqual(text.format_error("x\ny", prefix="! "), "! x\n  y")


if __name__ == "__main__":
    unittest.main()
