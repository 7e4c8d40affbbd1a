"""
Tests for the commands plugin.

Uses real TOML files. Tests command loading, filtering, details and
error handling for malformed entries.
"""

import toml

from dext.plugins.core.commands import CommandsPlugin, load_commands


class TestCommandsLoading:
    """Test loading commands from TOML files."""

    def test_loads_valid_commands(self, tmp_commands):
        commands = load_commands(tmp_commands)

        assert "lock" in commands
        assert "suspend" in commands
        assert commands["lock"]["exec"] == "hyprlock"
        assert commands["suspend"]["exec"] == "systemctl suspend"

    def test_skips_malformed_commands(self, tmp_path):
        """Commands missing 'exec' field should be skipped."""
        commands_path = tmp_path / "commands.toml"
        data = {
            "commands": {
                "good": {"description": "Works", "exec": "echo ok"},
                "bad": {"description": "Missing exec field"},
                "also_bad": "not a dict",
            }
        }
        commands_path.write_text(toml.dumps(data))

        commands = load_commands(commands_path)
        assert "good" in commands
        assert "bad" not in commands
        assert "also_bad" not in commands

    def test_empty_file_returns_no_commands(self, tmp_path):
        commands_path = tmp_path / "commands.toml"
        commands_path.write_text("")
        assert load_commands(commands_path) == {}

    def test_missing_file_returns_no_commands(self, tmp_path):
        assert load_commands(tmp_path / "nope.toml") == {}

    def test_broken_toml_returns_no_commands(self, tmp_path):
        commands_path = tmp_path / "commands.toml"
        commands_path.write_text("[commands.lock\nexec = ")
        assert load_commands(commands_path) == {}

    def test_from_settings_reads_commands_file(self, settings, tmp_commands):
        settings["plugins"]["commands_file"] = str(tmp_commands)
        plugin = CommandsPlugin.from_settings(settings)
        assert set(plugin.commands) == {"lock", "suspend"}


class TestCommandsQuery:
    """Test the query() filtering logic."""

    def _make_plugin(self) -> CommandsPlugin:
        return CommandsPlugin({
            "lock": {"exec": "hyprlock", "description": "Lock screen"},
            "suspend": {"exec": "systemctl suspend", "description": "Suspend"},
        })

    def test_empty_phrase_lists_all_sorted(self):
        results = self._make_plugin().query([""])
        assert [r.title for r in results] == ["lock", "suspend"]

    def test_filter_by_name(self):
        results = self._make_plugin().query(["lock"])
        assert len(results) == 1
        assert results[0].title == "lock"
        assert results[0].arg == "hyprlock"

    def test_filter_by_description(self):
        results = self._make_plugin().query(["screen"])
        assert [r.title for r in results] == ["lock"]

    def test_filter_is_case_insensitive(self):
        assert len(self._make_plugin().query(["SUSP"])) == 1

    def test_unknown_phrase_returns_nothing(self):
        assert self._make_plugin().query(["nonexistent"]) == []

    def test_details_show_command_line(self):
        plugin = self._make_plugin()
        item = plugin.query(["suspend"])[0]
        html = plugin.details(item)
        assert "systemctl suspend" in html
        assert "Suspend" in html
