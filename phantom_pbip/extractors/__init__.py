"""Extractors deriving bindings from dashboard items."""

from .binding_extractor import extract_metric_bindings, extract_dimension_bindings

__all__ = ['extract_metric_bindings', 'extract_dimension_bindings']
