"""
Tests for the command-line interface.
"""

import json
from unittest.mock import AsyncMock, patch

import pytest
import yaml

from marketcompat.cli import EXIT_INPUT_ERROR, EXIT_OK, EXIT_RESOURCE_ERROR, load_plugins, main
from marketcompat.models import PluginDescriptor, RawVersionRecord
from marketcompat.results import build_failed_result, build_result
from marketcompat.utils.error_handling import InputValidationError, ResourceError

PLUGINS = [
    {"name": "ScriptRunner", "marketplaceUrl": "https://m.example.com/apps/1/sr", "currentVersion": "8.0",
     "type": "jira"},
    {"name": "Gliffy", "marketplaceUrl": "https://m.example.com/apps/2/gliffy", "currentVersion": "10.0",
     "type": "confluence"},
]


@pytest.fixture
def plugin_file(tmp_path):
    path = tmp_path / "plugins.yaml"
    path.write_text(yaml.safe_dump({"plugins": PLUGINS}), encoding="utf-8")
    return path


@pytest.fixture
def mock_runner():
    with patch("marketcompat.cli.BatchRunner") as runner_cls, \
            patch("marketcompat.cli.configure_logging"):
        yield runner_cls


class TestLoadPlugins:

    def test_yaml_mapping(self, plugin_file):
        plugins = load_plugins(str(plugin_file))
        assert [p.name for p in plugins] == ["ScriptRunner", "Gliffy"]

    def test_json_list(self, tmp_path):
        path = tmp_path / "plugins.json"
        path.write_text(json.dumps(PLUGINS), encoding="utf-8")
        assert len(load_plugins(str(path))) == 2

    def test_type_filter(self, plugin_file):
        plugins = load_plugins(str(plugin_file), "Confluence")
        assert [p.name for p in plugins] == ["Gliffy"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(InputValidationError, match="Could not read plugin file"):
            load_plugins(str(tmp_path / "nope.yaml"))

    def test_wrong_shape(self, tmp_path):
        path = tmp_path / "plugins.yaml"
        path.write_text("plugins: 3\n", encoding="utf-8")
        with pytest.raises(InputValidationError, match="must contain a list"):
            load_plugins(str(path))


class TestMain:

    def test_writes_results(self, plugin_file, tmp_path, mock_runner, capsys):
        plugin = PluginDescriptor.from_dict(PLUGINS[0])
        records = [RawVersionRecord("8.0", "9.0 - 9.12", "9.0", "9.12")]
        mock_runner.return_value.run = AsyncMock(return_value=[
            build_result(plugin, records, "9.4", "rest-api"),
            build_failed_result(PluginDescriptor.from_dict(PLUGINS[1]), "9.4", "All methods failed"),
        ])
        output = tmp_path / "out.json"

        code = main(["--target", "9.4", "--plugins", str(plugin_file), "-o", str(output), "-q"])

        assert code == EXIT_OK
        payload = json.loads(output.read_text(encoding="utf-8"))
        assert payload["targetVersion"] == "9.4"
        assert payload["summary"]["compatible"] == 1
        assert payload["summary"]["errors"] == 1
        assert [r["status"] for r in payload["results"]] == ["compatible", "error"]
        assert "Compatible: 1" in capsys.readouterr().err
        assert mock_runner.call_args.kwargs["progress"] is None

    def test_stdout_output(self, plugin_file, mock_runner, capsys):
        mock_runner.return_value.run = AsyncMock(return_value=[])

        code = main(["-t", "9.4", "-p", str(plugin_file)])

        assert code == EXIT_OK
        assert json.loads(capsys.readouterr().out)["results"] == []

    def test_input_error(self, plugin_file, mock_runner, capsys):
        mock_runner.return_value.run = AsyncMock(side_effect=InputValidationError("Target version is required"))

        assert main(["-t", " ", "-p", str(plugin_file)]) == EXIT_INPUT_ERROR
        assert "Target version is required" in capsys.readouterr().err

    def test_missing_plugin_file(self, tmp_path, mock_runner):
        assert main(["-t", "9.4", "-p", str(tmp_path / "none.yaml")]) == EXIT_INPUT_ERROR
        mock_runner.assert_not_called()

    def test_browser_unavailable(self, plugin_file, mock_runner):
        mock_runner.return_value.run = AsyncMock(side_effect=ResourceError("Could not launch headless browser"))
        assert main(["-t", "9.4", "-p", str(plugin_file)]) == EXIT_RESOURCE_ERROR

    def test_bad_config_file(self, plugin_file, tmp_path, mock_runner):
        code = main(["-t", "9.4", "-p", str(plugin_file), "-c", str(tmp_path / "missing.yaml")])
        assert code == EXIT_INPUT_ERROR
