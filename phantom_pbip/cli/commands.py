"""
Command handlers for the phantom-pbip CLI.
"""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict

from ..common.log_utils import log_file_generated, log_info, log_warning
from ..config import ExportConfig
from ..dax.measure_generator import generate_all_measures
from ..exceptions import OutputWriteError
from ..exporter import create_pbip_package
from ..generators.model_file_generator import route_measures
from ..models import Scenario, coerce_items
from ..recipes import generate_smart_title, get_recipe_for_visual
from ..scenarios import get_schema_for_scenario
from .output_formatter import OutputFormatter


class CommandHandler(ABC):
    """Abstract base class for command handlers"""

    def __init__(self, config: ExportConfig, output_formatter: OutputFormatter, logger: logging.Logger):
        self.config = config
        self.output_formatter = output_formatter
        self.logger = logger

    @abstractmethod
    def execute(self, args: Any) -> bool:
        """Execute the command"""
        pass


def load_json_file(path: str) -> Any:
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


def load_items(path: str):
    """Items file holds either a list of items or an object with an ``items`` list"""
    data = load_json_file(path)
    if isinstance(data, dict):
        if 'items' not in data:
            log_warning(f"{path} has no 'items' key; treating it as an empty dashboard")
        data = data.get('items', [])
    if not isinstance(data, list):
        raise ValueError(f"{path} does not contain a list of dashboard items")
    return coerce_items(data)


class ExportCommandHandler(CommandHandler):
    """Handler for the export command"""

    def execute(self, args: Any) -> bool:
        items = load_items(args.items_file)
        state = load_json_file(args.state_file) if args.state_file else None
        package = create_pbip_package(items, args.scenario, state, config=self.config)

        output_path = Path(args.output) if args.output else Path.cwd() / package.filename
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_bytes(package.blob)
        except OSError as e:
            raise OutputWriteError(output_path, e.strerror or str(e)) from e
        log_info(f"Wrote {package.filename} to {output_path}")
        log_file_generated(str(output_path), f"{len(package.files)} files")
        self.output_formatter.print_export_results(package, str(output_path))
        return True


class MeasuresCommandHandler(CommandHandler):
    """Handler for the measures command"""

    def execute(self, args: Any) -> bool:
        scenario = Scenario.parse(args.scenario)
        items = load_items(args.items_file)
        measures = route_measures(generate_all_measures(items, scenario), get_schema_for_scenario(scenario))
        self.output_formatter.print_measures(measures, args.format)
        return True


class RecipeCommandHandler(CommandHandler):
    """Handler for the recipe command"""

    def execute(self, args: Any) -> bool:
        scenario = Scenario.parse(args.scenario)
        recipe = get_recipe_for_visual(args.visual_type, scenario)
        title = generate_smart_title(args.visual_type, recipe, scenario)
        self.output_formatter.print_recipe(args.visual_type, recipe, title)
        return True


COMMAND_HANDLERS: Dict[str, type] = {
    'export': ExportCommandHandler,
    'measures': MeasuresCommandHandler,
    'recipe': RecipeCommandHandler,
}
