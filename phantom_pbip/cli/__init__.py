"""
CLI module for the Phantom PBIP exporter
"""

from .argument_parser import ArgumentParserFactory
from .commands import COMMAND_HANDLERS, CommandHandler
from .output_formatter import OutputFormatter

__all__ = [
    'ArgumentParserFactory',
    'COMMAND_HANDLERS',
    'CommandHandler',
    'OutputFormatter',
]
