"""Integration tests for the plughost CLI.

Runs the real Typer application against plugin folders written to a
temporary directory, with configuration isolated from the user's.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from plughost import __version__
from plughost.app import app
from plughost.config import load_host_config
from plughost.exceptions import ConfigError


COUNTDOWN = """
local n = 2
function init() sys.print("init ", math.add(2, 3)) end
function update()
    n = n - 1
    sys.print("tick ", n)
    if n == 0 then sys.exit() end
end
function destroy() sys.print("bye") end
"""


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


class TestRun:
    def test_full_lifecycle(
        self,
        runner: CliRunner,
        isolated_config: Path,
        plugin_root: Path,
        write_plugin,
    ) -> None:
        write_plugin("countdown", COUNTDOWN)
        result = runner.invoke(app, ["--no-color", "run", "--plugins", str(plugin_root)])

        assert result.exit_code == 0, result.output
        assert "init 5" in result.output
        assert "tick 1" in result.output
        assert "tick 0" in result.output
        assert "bye" in result.output
        assert "exit_requested" in result.output

    def test_max_cycles(
        self,
        runner: CliRunner,
        isolated_config: Path,
        plugin_root: Path,
        write_plugin,
    ) -> None:
        write_plugin("idle", "function init() end\nfunction update() end\nfunction destroy() end")
        result = runner.invoke(
            app, ["--no-color", "run", "--plugins", str(plugin_root), "--max-cycles", "3"]
        )
        assert result.exit_code == 0, result.output
        assert "Stopped after 3 cycle(s): max_cycles" in result.output

    def test_plugin_errors_do_not_change_exit_code(
        self,
        runner: CliRunner,
        isolated_config: Path,
        plugin_root: Path,
        write_plugin,
    ) -> None:
        write_plugin("broken", 'function update() error("kaboom") end')
        result = runner.invoke(app, ["--no-color", "run", "--plugins", str(plugin_root)])
        assert result.exit_code == 0
        assert "kaboom" in result.output
        assert "update_failed" in result.output

    def test_no_plugins(
        self, runner: CliRunner, isolated_config: Path, plugin_root: Path
    ) -> None:
        result = runner.invoke(app, ["--no-color", "run", "--plugins", str(plugin_root)])
        assert result.exit_code == 0
        assert "No plugins found" in result.output

    def test_missing_folder_is_logged(
        self, runner: CliRunner, isolated_config: Path
    ) -> None:
        result = runner.invoke(app, ["--no-color", "run", "--plugins", "does-not-exist"])
        assert result.exit_code == 0
        assert "Unable to scan folder" in result.output

    def test_invalid_memory_limit_is_usage_error(
        self, runner: CliRunner, isolated_config: Path, plugin_root: Path
    ) -> None:
        result = runner.invoke(
            app, ["run", "--plugins", str(plugin_root), "--memory-limit", "0"]
        )
        assert result.exit_code == 2

    def test_config_file_supplies_defaults(
        self,
        runner: CliRunner,
        isolated_config: Path,
        plugin_root: Path,
        write_plugin,
    ) -> None:
        write_plugin("countdown", COUNTDOWN)
        (isolated_config / "plughost.json").write_text(
            json.dumps({"plugins_dir": str(plugin_root)})
        )
        result = runner.invoke(app, ["--no-color", "run"])
        assert result.exit_code == 0, result.output
        assert "bye" in result.output

    def test_broken_project_config(
        self, runner: CliRunner, isolated_config: Path
    ) -> None:
        (isolated_config / "plughost.json").write_text("{oops")
        result = runner.invoke(app, ["run"])
        assert result.exit_code == 1
        assert isinstance(result.exception, ConfigError)


class TestList:
    def test_json_listing(
        self,
        runner: CliRunner,
        isolated_config: Path,
        plugin_root: Path,
        write_plugin,
    ) -> None:
        write_plugin("good", "function init() end")
        write_plugin("bad", 'error("nope")')
        result = runner.invoke(
            app, ["--json", "--quiet", "list", "--plugins", str(plugin_root)]
        )
        assert result.exit_code == 0, result.output
        rows = {row["id"]: row for row in json.loads(result.stdout)}
        assert rows["good"]["status"] == "loaded"
        assert rows["bad"]["status"] == "failed"
        assert "nope" in rows["bad"]["error"]

    def test_list_does_not_run_lifecycle(
        self,
        runner: CliRunner,
        isolated_config: Path,
        plugin_root: Path,
        write_plugin,
    ) -> None:
        write_plugin("countdown", COUNTDOWN)
        result = runner.invoke(
            app, ["--plain", "--no-color", "list", "--plugins", str(plugin_root)]
        )
        assert result.exit_code == 0
        assert "init 5" not in result.output
        assert "countdown\tloaded" in result.output


class TestConfigCommands:
    def test_set_and_show(self, runner: CliRunner, isolated_config: Path) -> None:
        result = runner.invoke(app, ["config", "set", "memory_limit", "4096000"])
        assert result.exit_code == 0, result.output
        assert load_host_config().memory_limit == 4_096_000

        result = runner.invoke(app, ["--json", "--quiet", "config", "show"])
        assert json.loads(result.stdout)["memory_limit"] == 4_096_000

    def test_set_bool_and_nested(self, runner: CliRunner, isolated_config: Path) -> None:
        runner.invoke(app, ["config", "set", "destroy_all", "yes"])
        runner.invoke(app, ["config", "set", "output.format", "json"])
        config = load_host_config()
        assert config.destroy_all is True
        assert config.output.format == "json"

    def test_stored_output_format_is_used(
        self,
        runner: CliRunner,
        isolated_config: Path,
        plugin_root: Path,
        write_plugin,
    ) -> None:
        write_plugin("good", "x = 1")
        result = runner.invoke(app, ["config", "set", "output.format", "json"])
        assert result.exit_code == 0, result.output

        result = runner.invoke(app, ["--quiet", "list", "--plugins", str(plugin_root)])
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)[0]["id"] == "good"

        result = runner.invoke(
            app, ["--plain", "--quiet", "list", "--plugins", str(plugin_root)]
        )
        assert result.stdout.startswith("id\tstatus")

    def test_unknown_output_format_is_rejected(
        self, runner: CliRunner, isolated_config: Path
    ) -> None:
        result = runner.invoke(app, ["config", "set", "output.format", "fancy"])
        assert result.exit_code == 2
        assert load_host_config().output.format == "auto"

    def test_set_unset_optional_field(self, runner: CliRunner, isolated_config: Path) -> None:
        result = runner.invoke(app, ["config", "set", "max_cycles", "10"])
        assert result.exit_code == 0, result.output
        assert load_host_config().max_cycles == 10

    def test_set_unknown_key(self, runner: CliRunner, isolated_config: Path) -> None:
        result = runner.invoke(app, ["config", "set", "nope", "1"])
        assert result.exit_code == 2

    def test_set_invalid_value(self, runner: CliRunner, isolated_config: Path) -> None:
        result = runner.invoke(app, ["config", "set", "memory_limit", "-5"])
        assert result.exit_code == 2

    def test_reset_with_force(self, runner: CliRunner, isolated_config: Path) -> None:
        runner.invoke(app, ["config", "set", "entrypoint", "init.lua"])
        result = runner.invoke(app, ["--force", "config", "reset"])
        assert result.exit_code == 0
        assert load_host_config().entrypoint == "main.lua"

    def test_reset_declined(self, runner: CliRunner, isolated_config: Path) -> None:
        runner.invoke(app, ["config", "set", "entrypoint", "init.lua"])
        result = runner.invoke(app, ["config", "reset"], input="n\n")
        assert result.exit_code == 0
        assert load_host_config().entrypoint == "init.lua"


def test_version(runner: CliRunner) -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output
