"""
Argument Parser Factory for CLI

Creates and configures argument parsers for the phantom-pbip commands.
"""

import argparse

from ..models import Scenario

SCENARIO_CHOICES = [s.value for s in Scenario]


class ArgumentParserFactory:
    """Factory for creating argument parsers"""

    @staticmethod
    def create_main_parser() -> argparse.ArgumentParser:
        """Create main argument parser"""
        parser = argparse.ArgumentParser(
            prog='phantom-pbip',
            description='Export Phantom dashboards as Power BI Projects (PBIP)',
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Examples:
  # Export a dashboard
  %(prog)s export dashboard.json --scenario Retail --state store.json --output ./PhantomRetail.pbip.zip

  # List the measures a dashboard needs
  %(prog)s measures dashboard.json --scenario SaaS --format json

  # Show the default bindings of a visual type
  %(prog)s recipe bar --scenario HR
"""
        )

        # Global options
        parser.add_argument('--config-file', help='Path to configuration file (YAML format)')
        parser.add_argument('--verbose', '-v', action='store_true', help='Enable verbose output')
        parser.add_argument('--debug', action='store_true', help='Enable debug output')

        return parser

    @staticmethod
    def add_scenario_argument(parser):
        parser.add_argument('--scenario', '-s', required=True,
                            help=f"Scenario name ({', '.join(SCENARIO_CHOICES)})")

    @staticmethod
    def add_export_parser(subparsers):
        """Add export command parser"""
        parser = subparsers.add_parser('export', help='Export dashboard items as a zipped PBIP project')
        parser.add_argument('items_file', metavar='ITEMS_JSON', help='JSON file with the dashboard items')
        ArgumentParserFactory.add_scenario_argument(parser)
        parser.add_argument('--state', dest='state_file', metavar='STATE_JSON',
                            help='JSON file with the store snapshot (data, filters, themeColors, dashboardName)')
        parser.add_argument('--output', '-o', help='Output archive path (defaults to <Project>.pbip.zip)')
        return parser

    @staticmethod
    def add_measures_parser(subparsers):
        """Add measures command parser"""
        parser = subparsers.add_parser('measures', help='List the DAX measures generated for a dashboard')
        parser.add_argument('items_file', metavar='ITEMS_JSON', help='JSON file with the dashboard items')
        ArgumentParserFactory.add_scenario_argument(parser)
        parser.add_argument('--format', choices=['text', 'json'], default='text', help='Output format')
        return parser

    @staticmethod
    def add_recipe_parser(subparsers):
        """Add recipe command parser"""
        parser = subparsers.add_parser('recipe', help='Show the default bindings and title for a visual type')
        parser.add_argument('visual_type', metavar='VISUAL_TYPE', help='Visual type, e.g. bar, line, card')
        ArgumentParserFactory.add_scenario_argument(parser)
        return parser
