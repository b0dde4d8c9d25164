"""Validators for generated model content."""

from .expression_validator import collapse_expression, is_balanced, sanitize_expression

__all__ = ['collapse_expression', 'is_balanced', 'sanitize_expression']
