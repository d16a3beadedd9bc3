import json

from click.testing import CliRunner

from demolsp.cli import cli
from demolsp.utils.config import get_config_path


def run_cli(*args):
    runner = CliRunner()
    return runner.invoke(cli, [str(a) for a in args])


class TestCliCommands:
    def test_help(self):
        result = run_cli("--help")
        assert result.exit_code == 0
        assert "Commands:" in result.output
        for command in ["serve", "symbols", "diagnostics", "hover", "definition", "references", "rename", "config"]:
            assert command in result.output

    def test_config_command(self, isolated_config):
        result = run_cli("config")
        assert result.exit_code == 0
        assert "Config file:" in result.output
        assert "using defaults" in result.output

    def test_config_init(self, isolated_config):
        result = run_cli("config", "--init")
        assert result.exit_code == 0
        assert "Wrote default config" in result.output
        assert "max_line_length = 80" in get_config_path().read_text()

        result = run_cli("config", "--init")
        assert "already exists" in result.output

    def test_invalid_config(self, isolated_config, js_project):
        path = get_config_path()
        path.parent.mkdir(parents=True)
        path.write_text("[diagnostics\n")

        result = run_cli("symbols", js_project / "example.js")
        assert result.exit_code == 1
        assert "Invalid config file" in result.output


class TestFileCommands:
    def test_symbols(self, isolated_config, js_project):
        result = run_cli("--json", "symbols", js_project / "example.js")
        assert result.exit_code == 0
        symbols = json.loads(result.output)
        assert [(s["name"], s["kind"], s["line"], s["column"]) for s in symbols] == [
            ("a", "variable", 2, 6),
            ("counter", "variable", 3, 4),
            ("greet", "function", 4, 9),
        ]

    def test_symbols_plain(self, isolated_config, js_project):
        result = run_cli("symbols", js_project / "example.js")
        assert result.exit_code == 0
        assert "example.js:4:9 [function] greet" in result.output

    def test_diagnostics(self, isolated_config, js_project):
        result = run_cli("--json", "diagnostics", js_project / "example.js")
        assert result.exit_code == 0
        [diag] = json.loads(result.output)
        assert diag["line"] == 7
        assert diag["column"] == 80
        assert diag["end_column"] == 115
        assert diag["message"] == "Line exceeds 80 characters."

    def test_diagnostics_respects_config(self, isolated_config, js_project):
        path = get_config_path()
        path.parent.mkdir(parents=True)
        path.write_text("[diagnostics]\nmax_line_length = 30\n")

        result = run_cli("--json", "diagnostics", js_project / "example.js")
        assert [d["line"] for d in json.loads(result.output)] == [5, 7]

    def test_hover(self, isolated_config, js_project):
        result = run_cli("hover", js_project / "example.js", 3, 5)
        assert result.exit_code == 0
        assert "`counter`" in result.output
        assert "`variable`" in result.output

    def test_hover_nothing(self, isolated_config, js_project):
        result = run_cli("hover", js_project / "example.js", 6, 0)
        assert result.exit_code == 0
        assert "No information available" in result.output

    def test_definition(self, isolated_config, js_project):
        result = run_cli("--json", "definition", js_project / "example.js", 8, 0)
        assert result.exit_code == 0
        location = json.loads(result.output)
        assert (location["line"], location["column"]) == (4, 9)
        assert location["text"] == "function greet(name) {"

    def test_definition_not_found(self, isolated_config, js_project):
        result = run_cli("definition", js_project / "example.js", 5, 4)
        assert result.exit_code == 1
        assert "No declaration found" in result.output

    def test_references(self, isolated_config, js_project):
        result = run_cli("--json", "references", js_project / "example.js", 3, 5)
        assert result.exit_code == 0
        assert [loc["line"] for loc in json.loads(result.output)] == [3, 5]

    def test_line_must_be_positive(self, isolated_config, js_project):
        result = run_cli("references", js_project / "example.js", 0, 5)
        assert result.exit_code == 2

    def test_rename_dry_run(self, isolated_config, js_project):
        path = js_project / "example.js"
        before = path.read_text()
        result = run_cli("rename", path, 8, 0, "hello")
        assert result.exit_code == 0
        assert "Would rename 2 occurrence(s) to hello" in result.output
        assert path.read_text() == before

    def test_rename_write(self, isolated_config, js_project):
        path = js_project / "example.js"
        result = run_cli("rename", path, 8, 0, "hello", "--write")
        assert result.exit_code == 0
        assert "Renamed 2 occurrence(s)" in result.output
        lines = path.read_text().splitlines()
        assert lines[3] == "function hello(name) {"
        assert lines[7] == 'hello("world");'

    def test_rename_without_identifier(self, isolated_config, js_project):
        result = run_cli("rename", js_project / "example.js", 6, 0, "x")
        assert result.exit_code == 1
        assert "No identifier at that position" in result.output
