"""
Command-line entry point for the Phantom PBIP exporter
"""

import logging
import sys
from typing import List, Optional

import yaml

from .cli.argument_parser import ArgumentParserFactory
from .cli.commands import COMMAND_HANDLERS
from .cli.output_formatter import OutputFormatter
from .common.log_utils import configure_logging, log_debug, log_error
from .config import ConfigManager
from .exceptions import OutputWriteError, PhantomExportError, UnknownScenarioError

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2

logger = logging.getLogger(__name__)


def create_parser():
    parser = ArgumentParserFactory.create_main_parser()
    subparsers = parser.add_subparsers(dest='command', help='Available commands')
    ArgumentParserFactory.add_export_parser(subparsers)
    ArgumentParserFactory.add_measures_parser(subparsers)
    ArgumentParserFactory.add_recipe_parser(subparsers)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Run the CLI and return the process exit code"""
    parser = create_parser()
    args = parser.parse_args(argv)

    level = 'debug' if args.debug else ('info' if args.verbose else None)
    configure_logging(level=level)

    if not args.command:
        parser.print_help()
        return EXIT_USAGE

    try:
        config_manager = ConfigManager(config_file=args.config_file)
        config = config_manager.get_export_config()
        config_manager.validate_config(config)
    except (OSError, ValueError, yaml.YAMLError) as e:
        logger.error(f"Invalid configuration: {e}")
        return EXIT_USAGE

    log_debug(f"Running {args.command} command")
    handler = COMMAND_HANDLERS[args.command](config, OutputFormatter(), logger)
    try:
        return EXIT_OK if handler.execute(args) else EXIT_FAILURE
    except UnknownScenarioError as e:
        logger.error(str(e))
        return EXIT_USAGE
    except OutputWriteError as e:
        logger.error(str(e))
        return EXIT_FAILURE
    except (OSError, ValueError) as e:
        logger.error(f"Cannot read input file: {e}")
        return EXIT_USAGE
    except PhantomExportError as e:
        logger.error(f"Export failed: {e}")
        return EXIT_FAILURE
    except Exception as e:
        if args.debug:
            log_error("Command failed", e)
        else:
            logger.error(f"Command failed: {e}")
        return EXIT_FAILURE


if __name__ == '__main__':
    sys.exit(main())
