"""Shared fixtures for the exporter tests."""

import pytest

from phantom_pbip.config import ExportConfig
from phantom_pbip.generators.template_engine import TemplateEngine


@pytest.fixture
def export_config():
    return ExportConfig()


@pytest.fixture
def template_engine(export_config):
    return TemplateEngine(export_config.template_directory)


@pytest.fixture
def retail_items():
    """A small Retail dashboard covering cards, charts, tables and a slicer"""
    return [
        {
            'id': 'card-revenue',
            'type': 'card',
            'title': 'Revenue',
            'layout': {'x': 0, 'y': 0, 'w': 6, 'h': 4},
            'props': {'metric': 'revenue', 'operation': 'sum', 'colorIndex': 1},
        },
        {
            'id': 'bar-category',
            'type': 'bar',
            'title': "Top 5 Category by Revenue",
            'layout': {'x': 6, 'y': 0, 'w': 9, 'h': 8},
            'props': {'dimension': 'Category', 'metric': 'revenue', 'operation': 'sum', 'topN': 5, 'sort': 'desc'},
        },
        {
            'id': 'line-trend',
            'type': 'line',
            'title': 'Revenue Trend',
            'layout': {'x': 15, 'y': 0, 'w': 9, 'h': 8},
            'props': {'metric': 'profit', 'operation': 'avg', 'comparison': 'py'},
        },
        {
            'id': 'table-details',
            'type': 'table',
            'title': 'Retail Details',
            'layout': {'x': 0, 'y': 8, 'w': 12, 'h': 10},
            'props': {'columns': ['Store', 'Revenue', 'Profit']},
            'customKey': {'kept': True},
        },
        {
            'id': 'slicer-region',
            'type': 'slicer',
            'title': 'Filter by Region',
            'layout': {'x': 12, 'y': 8, 'w': 6, 'h': 2},
            'props': {'dimension': 'Region'},
        },
    ]


@pytest.fixture
def retail_state():
    return {
        'data': {
            'Store': [
                {'StoreID': 'S1', 'StoreName': 'Downtown', 'Region': 'North', 'Country': 'US'},
                {'StoreID': 'S2', 'StoreName': 'Mall', 'Region': 'South', 'Country': 'US'},
            ],
            'Product': [
                {'ProductID': 'P1', 'ProductName': 'Widget', 'Category': 'Gadgets', 'Price': 9.5},
            ],
            'Sales': [
                {'SaleID': '1', 'StoreID': 'S1', 'ProductID': 'P1', 'Date': '2024-01-15T00:00:00.000Z',
                 'Quantity': 3, 'Revenue': 28.5, 'RevenuePY': 20.0, 'RevenuePL': 30.0, 'Profit': 10.0},
                {'SaleID': '2', 'StoreID': 'S2', 'ProductID': 'P1', 'Date': '2024-02-03T00:00:00.000Z',
                 'Quantity': 1, 'Revenue': 9.5, 'RevenuePY': 12.0, 'RevenuePL': 10.0, 'Profit': 2.5},
            ],
        },
        'filters': {'region': 'North'},
        'themeColors': ['#342BC2', '#6F67F1', '#9993FF'],
        'dashboardName': 'Retail Overview',
    }
