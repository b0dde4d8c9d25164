"""
Structural checks for DAX expressions written into TMDL.

TMDL keeps a measure's expression on the declaration line, so every
expression is collapsed to one line and checked for balanced parentheses,
brackets and quotes before it is emitted.
"""
import logging
import re

logger = logging.getLogger(__name__)

BLANK_EXPRESSION = 'BLANK()'

_WHITESPACE = re.compile(r'\s+')


def collapse_expression(expression: str) -> str:
    """Collapse a multi-line DAX expression to a single line

    Whole-line ``//`` comments are dropped since they would swallow the rest
    of the collapsed line.
    """
    lines = []
    for line in (expression or '').splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith('//') or stripped.startswith('--'):
            continue
        lines.append(stripped)
    return _WHITESPACE.sub(' ', ' '.join(lines)).strip()


def is_balanced(expression: str) -> bool:
    """Check that parentheses, brackets and quotes are balanced

    Column and measure references (``[...]``) and string literals are
    skipped as opaque runs; doubled quotes inside them are escapes.
    """
    depth = 0
    i = 0
    length = len(expression)
    while i < length:
        char = expression[i]
        if char in ('"', "'", '['):
            closing = ']' if char == '[' else char
            i += 1
            while i < length:
                if expression[i] == closing:
                    if i + 1 < length and expression[i + 1] == closing:
                        i += 2
                        continue
                    break
                i += 1
            if i >= length:
                return False
        elif char == ']':
            return False
        elif char == '(':
            depth += 1
        elif char == ')':
            depth -= 1
            if depth < 0:
                return False
        i += 1
    return depth == 0


def sanitize_expression(expression: str, name: str = '') -> str:
    """Collapse an expression and replace it with BLANK() when it is malformed"""
    collapsed = collapse_expression(expression)
    if not collapsed:
        logger.warning(f"Measure '{name}' has an empty expression; using {BLANK_EXPRESSION}")
        return BLANK_EXPRESSION
    if not is_balanced(collapsed):
        logger.warning(f"Measure '{name}' has an unbalanced expression; using {BLANK_EXPRESSION}")
        return BLANK_EXPRESSION
    return collapsed
