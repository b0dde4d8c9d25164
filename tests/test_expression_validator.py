"""
Tests for DAX expression checks
"""

import logging
import unittest

from phantom_pbip.validators import collapse_expression, is_balanced, sanitize_expression


class TestCollapseExpression(unittest.TestCase):

    def test_multiline_collapses_to_one_line(self):
        expression = "VAR _AC = SUM(Sales[Revenue])\n    VAR _PY = SUM(Sales[RevenuePY])\nRETURN\n_AC - _PY"
        self.assertEqual(
            collapse_expression(expression),
            "VAR _AC = SUM(Sales[Revenue]) VAR _PY = SUM(Sales[RevenuePY]) RETURN _AC - _PY",
        )

    def test_comment_lines_are_dropped(self):
        expression = "// prior year\nSUM(Sales[RevenuePY])\n-- done"
        self.assertEqual(collapse_expression(expression), "SUM(Sales[RevenuePY])")

    def test_empty(self):
        self.assertEqual(collapse_expression(''), '')
        self.assertEqual(collapse_expression(None), '')


class TestIsBalanced(unittest.TestCase):

    def test_balanced(self):
        self.assertTrue(is_balanced('IF(_PY <> 0, DIVIDE(_AC - _PY, ABS(_PY)), BLANK())'))
        self.assertTrue(is_balanced('CALCULATE(COUNTROWS(Shipment), Shipment[Status] = "In Transit")'))

    def test_parentheses_inside_references_and_strings_are_opaque(self):
        self.assertTrue(is_balanced("[Revenue (PY)] + 1"))
        self.assertTrue(is_balanced('IF(1, "(", ")")'))
        self.assertTrue(is_balanced("'Date Table'[Month]"))

    def test_doubled_quotes_are_escapes(self):
        self.assertTrue(is_balanced('"say ""hi"""'))

    def test_unbalanced(self):
        self.assertFalse(is_balanced('SUM(Sales[Revenue]'))
        self.assertFalse(is_balanced('SUM(Sales[Revenue]))'))
        self.assertFalse(is_balanced('Sales[Revenue'))
        self.assertFalse(is_balanced('"open'))
        self.assertFalse(is_balanced('Revenue]'))


class TestSanitizeExpression:

    def test_valid_expression_is_collapsed(self):
        assert sanitize_expression("SUM(\n  Sales[Revenue]\n)", 'Total Revenue') == 'SUM( Sales[Revenue] )'

    def test_malformed_expression_degrades(self, caplog):
        with caplog.at_level(logging.WARNING):
            assert sanitize_expression('SUM(Sales[Revenue]', 'Broken') == 'BLANK()'
        assert 'Broken' in caplog.text

    def test_empty_expression_degrades(self):
        assert sanitize_expression('   \n  ', 'Empty') == 'BLANK()'
