"""
Tests for the phantom-pbip command line
"""

import json
import logging
import zipfile

import pytest

from phantom_pbip.cli.commands import load_items
from phantom_pbip.main import EXIT_FAILURE, EXIT_OK, EXIT_USAGE, main


@pytest.fixture
def workspace(tmp_path, monkeypatch, retail_items, retail_state):
    monkeypatch.chdir(tmp_path)
    (tmp_path / 'items.json').write_text(json.dumps(retail_items), encoding='utf-8')
    (tmp_path / 'state.json').write_text(json.dumps(retail_state), encoding='utf-8')
    return tmp_path


class TestExportCommand:

    def test_export_writes_archive(self, workspace, capsys):
        output = workspace / 'out' / 'dashboard.pbip.zip'
        code = main(['export', 'items.json', '--scenario', 'Retail', '--state', 'state.json', '-o', str(output)])
        assert code == EXIT_OK
        assert zipfile.is_zipfile(output)
        assert 'PhantomRetail' in capsys.readouterr().out

    def test_default_output_name(self, workspace):
        assert main(['export', 'items.json', '-s', 'retail']) == EXIT_OK
        assert (workspace / 'PhantomRetail.pbip.zip').exists()

    def test_items_object_form(self, workspace, retail_items):
        (workspace / 'wrapped.json').write_text(json.dumps({'items': retail_items}), encoding='utf-8')
        assert main(['export', 'wrapped.json', '-s', 'Retail']) == EXIT_OK

    def test_unknown_scenario(self, workspace):
        assert main(['export', 'items.json', '-s', 'Healthcare']) == EXIT_USAGE

    def test_missing_items_file(self, workspace):
        assert main(['export', 'missing.json', '-s', 'Retail']) == EXIT_USAGE

    def test_malformed_items_file(self, workspace):
        (workspace / 'bad.json').write_text('{not json', encoding='utf-8')
        assert main(['export', 'bad.json', '-s', 'Retail']) == EXIT_USAGE

    def test_items_must_be_a_list(self, workspace):
        (workspace / 'scalar.json').write_text('42', encoding='utf-8')
        assert main(['export', 'scalar.json', '-s', 'Retail']) == EXIT_USAGE

    def test_serialization_failure(self, workspace, monkeypatch):
        def fail(*args, **kwargs):
            raise OSError('disk full')

        monkeypatch.setattr(zipfile.ZipFile, 'writestr', fail)
        assert main(['export', 'items.json', '-s', 'Retail']) == EXIT_FAILURE

    def test_unwritable_output(self, workspace):
        (workspace / 'taken').mkdir()
        assert main(['export', 'items.json', '-s', 'Retail', '-o', str(workspace / 'taken')]) == EXIT_FAILURE

    def test_items_object_without_items_key(self, workspace, caplog):
        (workspace / 'empty.json').write_text('{"title": "x"}', encoding='utf-8')
        with caplog.at_level(logging.WARNING, logger='phantom_pbip'):
            assert load_items('empty.json') == []
        assert "has no 'items' key" in caplog.text


class TestOtherCommands:

    def test_measures_json(self, workspace, capsys):
        assert main(['measures', 'items.json', '-s', 'Retail', '--format', 'json']) == EXIT_OK
        measures = json.loads(capsys.readouterr().out)
        names = [m['name'] for m in measures]
        assert names[0] == 'Total revenue'
        assert 'Margin %' in names

    def test_measures_text(self, workspace, capsys):
        assert main(['measures', 'items.json', '-s', 'Retail']) == EXIT_OK
        assert 'Sales.Total revenue [Base Measures]' in capsys.readouterr().out

    def test_recipe(self, workspace, capsys):
        assert main(['recipe', 'bar', '-s', 'HR']) == EXIT_OK
        assert 'Title:' in capsys.readouterr().out

    def test_no_command(self, workspace):
        assert main([]) == EXIT_USAGE

    def test_bad_config_file(self, workspace):
        (workspace / 'broken.yaml').write_text('export: [unclosed', encoding='utf-8')
        assert main(['--config-file', 'broken.yaml', 'recipe', 'bar', '-s', 'HR']) == EXIT_USAGE

    def test_invalid_config_value(self, workspace):
        (workspace / 'wide.yaml').write_text('export:\n  canvas_width: 0\n', encoding='utf-8')
        assert main(['--config-file', 'wide.yaml', 'recipe', 'bar', '-s', 'HR']) == EXIT_USAGE
