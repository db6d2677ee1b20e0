import json
from pathlib import Path

import yaml
from click.testing import CliRunner

from curl_converter.cli import main

FIXTURES = Path(__file__).parent / "fixtures"


class TestCliConvertCurl:
    def test_prints_yaml(self):
        runner = CliRunner()
        result = runner.invoke(main, ["convert", "curl", "curl -u admin:secret https://example.com"])

        assert result.exit_code == 0
        assert "request:" in result.output
        assert "username: admin" in result.output

    def test_writes_output_file(self, tmp_path):
        output_file = tmp_path / "out" / "request.yaml"
        runner = CliRunner()
        result = runner.invoke(main, [
            "convert", "curl", "curl -X POST -d '{\"a\":1}' https://example.com",
            "-o", str(output_file),
        ])

        assert result.exit_code == 0
        assert output_file.exists()
        doc = yaml.safe_load(output_file.read_text())
        assert doc["request"]["body"] == {"json": {"a": 1}}
        assert "Saved to" in result.output

    def test_compact_body(self):
        runner = CliRunner()
        result = runner.invoke(main, ["convert", "curl", "--compact", "curl -d '{\"a\":1}' https://example.com"])

        assert result.exit_code == 0
        assert "json: {a: 1}" in result.output

    def test_warnings_on_stderr(self):
        runner = CliRunner()
        result = runner.invoke(main, [
            "convert", "curl", "--no-loss-report", "curl --compressed https://example.com",
        ])

        assert result.exit_code == 0
        assert "Warning: Flag --compressed has no YAML equivalent" in result.output
        assert "# Warning:" not in result.output

    def test_debug_output(self, tmp_path):
        output_file = tmp_path / "request.yaml"
        runner = CliRunner()
        result = runner.invoke(main, [
            "convert", "curl", "--debug", "-o", str(output_file), "curl https://example.com",
        ])

        assert result.exit_code == 0
        start = result.output.index("{")
        end = result.output.rindex("}") + 1
        debug = json.loads(result.output[start:end])
        assert debug["tokens"] == ["curl", "https://example.com"]
        assert debug["ir"]["method"] == "GET"


class TestCliConvertFile:
    def test_script_to_yaml(self, tmp_path):
        output_file = tmp_path / "requests.yaml"
        runner = CliRunner()
        result = runner.invoke(main, [
            "convert", "file", str(FIXTURES / "api.sh"), "-o", str(output_file),
        ])

        assert result.exit_code == 0
        doc = yaml.safe_load(output_file.read_text())
        assert len(doc["requests"]) == 3

    def test_missing_file(self):
        runner = CliRunner()
        result = runner.invoke(main, ["convert", "file", "does-not-exist.sh"])

        assert result.exit_code != 0

    def test_script_without_commands(self, tmp_path):
        script = tmp_path / "empty.sh"
        script.write_text("echo hi\n")
        runner = CliRunner()
        result = runner.invoke(main, ["convert", "file", str(script)])

        assert result.exit_code == 0
        assert "Warning: No curl commands found in file" in result.output


class TestCliConvertYaml:
    def test_yaml_to_curl(self):
        runner = CliRunner()
        result = runner.invoke(main, ["convert", "yaml", str(FIXTURES / "requests.yaml")])

        assert result.exit_code == 0
        assert "'https://api.example.com/users?page=2'" in result.output
        assert "-X POST" in result.output
        assert "Warning: expect block has no curl equivalent" in result.output


class TestCliConvertAuto:
    def test_detects_yaml(self):
        runner = CliRunner()
        result = runner.invoke(main, ["convert", "auto", str(FIXTURES / "requests.yaml")])

        assert result.exit_code == 0
        assert "(format: yaml)" in result.output
        assert "-X POST" in result.output

    def test_detects_script(self):
        runner = CliRunner()
        result = runner.invoke(main, ["convert", "auto", str(FIXTURES / "api.sh")])

        assert result.exit_code == 0
        assert "(format: script)" in result.output
        assert "requests:" in result.output


class TestCliFlags:
    def test_lists_flags(self):
        runner = CliRunner()
        result = runner.invoke(main, ["flags"])

        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert "-X <value>" in lines
        assert "--compressed" in lines

    def test_verbose_option(self):
        runner = CliRunner()
        result = runner.invoke(main, ["-v", "flags"])

        assert result.exit_code == 0
