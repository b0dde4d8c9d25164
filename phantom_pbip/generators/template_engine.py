"""
Template engine for rendering PBIP semantic model and guide templates.
"""
import json
import logging
from pathlib import Path
from typing import Any, Dict, Union

from jinja2 import Environment, FileSystemLoader, Template
from pybars import Compiler

from ..utils.json_encoder import ModelJSONEncoder, model_to_dict

# Templates rendered with handlebars; everything else uses Jinja2
HANDLEBARS_TEMPLATES = ('table',)

TEMPLATE_FILES = {
    'table': {'filename': 'Table.tmdl', 'target_filename': 'definition/tables/{table_name}.tmdl'},
    'database': {'filename': 'database.tmdl', 'target_filename': 'definition/database.tmdl'},
    'model': {'filename': 'model.tmdl', 'target_filename': 'definition/model.tmdl'},
    'culture': {'filename': 'culture.tmdl', 'target_filename': 'definition/cultures/{culture_name}.tmdl'},
    'guide': {'filename': 'guide.md', 'target_filename': '{project_name}_Guide.md'},
}


class TemplateEngine:
    """Template engine for rendering PBIP templates"""

    def __init__(self, template_directory: Union[str, Path]):
        """Initialize template engine with template directory"""
        self.logger = logging.getLogger(__name__)
        self.template_directory = Path(template_directory)
        self.logger.debug(f"Using template directory: {self.template_directory}")

        self.templates = {}
        self.handlebars_compiler = Compiler()

        self.jinja_env = Environment(
            loader=FileSystemLoader(str(self.template_directory)),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True
        )

        self._load_templates()

    def _load_templates(self):
        """Load all template files"""
        if not self.template_directory.exists():
            raise FileNotFoundError(f"Template directory not found: {self.template_directory}")

        for template_name, template_info in TEMPLATE_FILES.items():
            template_path = self.template_directory / template_info['filename']
            if not template_path.exists():
                self.logger.warning(f"Template file not found: {template_path}")
                continue

            with open(template_path, 'r', encoding='utf-8') as f:
                template_content = f.read()

            if template_name in HANDLEBARS_TEMPLATES:
                self.templates[template_name] = self.handlebars_compiler.compile(template_content)
            else:
                self.templates[template_name] = self.jinja_env.from_string(template_content)

    def render(self, template_name: str, context: Dict[str, Any]) -> str:
        """Render a template with the given context"""
        if template_name not in self.templates:
            raise ValueError(f"Template not found: {template_name}")

        template = self.templates[template_name]
        self.logger.debug(f"Rendering template: {template_name}")

        if template_name in HANDLEBARS_TEMPLATES:
            return str(template(context))
        try:
            return self._render_jinja_template(template, context)
        except Exception as e:
            self.logger.error(f"Error rendering template {template_name}: {e}")
            raise

    def _render_jinja_template(self, template: Template, context: Dict[str, Any]) -> str:
        """Render a Jinja2 template with the given context"""
        processed_context = {}
        for key, value in context.items():
            value = model_to_dict(value)
            if isinstance(value, (dict, list)):
                processed_context[key + '_json'] = json.dumps(value, cls=ModelJSONEncoder)
            processed_context[key] = value
        return template.render(**processed_context)
