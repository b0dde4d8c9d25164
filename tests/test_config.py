"""
Tests for configuration loading and logging helpers
"""

import logging

import pytest
import yaml

from phantom_pbip.common import log_utils
from phantom_pbip.config import DEFAULT_THEME_COLORS, ConfigManager, ExportConfig
from phantom_pbip.config_loader import load_config_file, load_packaged_config


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for name in ('PHANTOM_PBIP_CANVAS_WIDTH', 'PHANTOM_PBIP_CULTURE', 'PHANTOM_PBIP_COMPRESSION_LEVEL',
                 'PHANTOM_PBIP_PROJECT_PREFIX', 'PHANTOM_PBIP_LOG_LEVEL', 'PHANTOM_PBIP_LOG_OUTPUT_FILES'):
        # recorded so teardown also clears values loaded from .env
        monkeypatch.setenv(name, '')
        monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
    return tmp_path


class TestConfigManager:

    def test_defaults(self, clean_env):
        config = ConfigManager().get_export_config()
        assert config == ExportConfig()
        assert (config.canvas_width, config.canvas_height) == (1280, 720)
        assert (config.grid_columns, config.grid_rows) == (24, 18)
        assert config.default_theme_colors == DEFAULT_THEME_COLORS

    def test_environment_overrides(self, clean_env, monkeypatch):
        monkeypatch.setenv('PHANTOM_PBIP_CANVAS_WIDTH', '1920')
        monkeypatch.setenv('PHANTOM_PBIP_CULTURE', 'de-DE')
        config = ConfigManager().get_export_config()
        assert config.canvas_width == 1920
        assert config.culture == 'de-DE'

    def test_invalid_environment_value_is_ignored(self, clean_env, monkeypatch):
        monkeypatch.setenv('PHANTOM_PBIP_CANVAS_WIDTH', 'wide')
        assert ConfigManager().get_export_config().canvas_width == 1280

    def test_dotenv_file(self, clean_env):
        (clean_env / '.env').write_text('PHANTOM_PBIP_PROJECT_PREFIX=Demo\n')
        config = ConfigManager().get_export_config()
        assert config.project_prefix == 'Demo'

    def test_yaml_file_wins_over_environment(self, clean_env, monkeypatch):
        monkeypatch.setenv('PHANTOM_PBIP_COMPRESSION_LEVEL', '1')
        path = clean_env / 'phantom.yaml'
        path.write_text(yaml.safe_dump({'export': {'compression_level': 9, 'unknown_key': True}}))
        config = ConfigManager(config_file=str(path)).get_export_config()
        assert config.compression_level == 9

    def test_validation(self, clean_env):
        manager = ConfigManager()
        assert manager.validate_config(ExportConfig())
        with pytest.raises(ValueError):
            manager.validate_config(ExportConfig(canvas_width=0))
        with pytest.raises(ValueError):
            manager.validate_config(ExportConfig(compression_level=12))
        with pytest.raises(ValueError):
            manager.validate_config(ExportConfig(template_directory=str(clean_env / 'missing')))


class TestConfigLoader:

    def test_missing_file(self, clean_env):
        with pytest.raises(FileNotFoundError):
            load_config_file('does-not-exist.yaml')

    def test_empty_file(self, clean_env):
        (clean_env / 'empty.yaml').write_text('')
        assert load_config_file('empty.yaml') == {}

    def test_local_config_directory(self, clean_env):
        (clean_env / 'config').mkdir()
        (clean_env / 'config' / 'local.yaml').write_text('export:\n  culture: fr-FR\n')
        assert load_config_file('local.yaml') == {'export': {'culture': 'fr-FR'}}

    def test_packaged_catalog(self):
        catalog = load_packaged_config('scenarios.yaml')
        assert set(catalog['scenarios']) == {'Retail', 'SaaS', 'HR', 'Logistics', 'Finance', 'Portfolio', 'Social'}


class TestLogUtils:

    def test_log_level_resolution(self, clean_env, monkeypatch):
        assert log_utils.get_log_level('debug') == logging.DEBUG
        assert log_utils.get_log_level('nonsense') == logging.INFO
        monkeypatch.setenv('PHANTOM_PBIP_LOG_LEVEL', 'warning')
        assert log_utils.get_log_level() == logging.WARNING

    def test_generated_files_are_quiet_by_default(self, clean_env, caplog):
        with caplog.at_level(logging.INFO, logger='phantom_pbip'):
            log_utils.log_file_generated('PhantomRetail.pbip')
        assert 'PhantomRetail.pbip' not in caplog.text

    def test_generated_files_logged_when_enabled(self, clean_env, monkeypatch, caplog):
        monkeypatch.setenv('PHANTOM_PBIP_LOG_OUTPUT_FILES', 'true')
        with caplog.at_level(logging.INFO, logger='phantom_pbip'):
            log_utils.log_file_generated('PhantomRetail.pbip', '18 files')
        assert 'Generated PhantomRetail.pbip - 18 files' in caplog.text

    def test_log_error_with_exception(self, caplog):
        with caplog.at_level(logging.ERROR, logger='phantom_pbip'):
            log_utils.log_error('Export failed', ValueError('bad'))
        assert 'Export failed: bad' in caplog.text

    def test_level_helpers(self, caplog):
        with caplog.at_level(logging.DEBUG, logger='phantom_pbip'):
            log_utils.log_debug('resolving bindings')
            log_utils.log_info('wrote package')
            log_utils.log_warning('metric not mapped', {'metric': 'footfall'})
        assert [(r.levelno, r.getMessage()) for r in caplog.records] == [
            (logging.DEBUG, 'resolving bindings'),
            (logging.INFO, 'wrote package'),
            (logging.WARNING, 'metric not mapped'),
        ]
