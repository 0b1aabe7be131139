"""Tests for the generate and validate commands."""

import json
from io import StringIO
from pathlib import Path
from unittest.mock import patch

import pytest
import yaml

from polyschema.cli import GeneratorCLI, build_parser, main
from polyschema.core.errors import InvalidArgumentsError, SchemaBuildError
from polyschema.options import GeneratorSettings, OutputStrategy

FIXTURE_SCOPE = [
    "--type-scanning-allowed-package",
    "_fixtures",
    "--subtype-scanning-allowed-package",
    "_fixtures",
]


def parse(*argv):
    return build_parser().parse_args(list(argv))


class TestBuildOptions:
    """Turning parsed arguments into generator options."""

    def setup_method(self):
        self.cli = GeneratorCLI(GeneratorSettings())

    def test_defaults(self, tmp_path):
        options = self.cli.build_options(parse("generate", "-o", str(tmp_path)))

        assert options.output_directory == tmp_path
        assert options.output_directory_strategy is OutputStrategy.DIRECTORY_TREE
        assert options.type_scanning.unrestricted
        assert options.subtype_scanning.unrestricted
        assert not options.echo_only

    def test_repeatable_scanning_flags(self, tmp_path):
        args = parse(
            "generate",
            "-o",
            str(tmp_path),
            "--type-scanning-allowed-module",
            "a.*",
            "--type-scanning-allowed-module",
            "b.*",
            "--subtype-scanning-allowed-package",
            "c",
        )

        options = self.cli.build_options(args)

        assert options.type_scanning.modules == frozenset({"a.*", "b.*"})
        assert options.subtype_scanning.packages == frozenset({"c"})

    def test_settings_supply_strategy(self, tmp_path, monkeypatch):
        monkeypatch.setenv("POLYSCHEMA_OUTPUT_DIRECTORY_STRATEGY", "flatDirectory")
        cli = GeneratorCLI()

        options = cli.build_options(parse("generate", "-o", str(tmp_path)))

        assert options.output_directory_strategy is OutputStrategy.FLAT_DIRECTORY

    def test_flag_beats_settings(self, tmp_path, monkeypatch):
        monkeypatch.setenv("POLYSCHEMA_OUTPUT_DIRECTORY_STRATEGY", "flatDirectory")
        cli = GeneratorCLI()

        options = cli.build_options(
            parse("generate", "-o", str(tmp_path), "--output-directory-strategy", "directoryTree")
        )

        assert options.output_directory_strategy is OutputStrategy.DIRECTORY_TREE

    def test_invalid_options_carry_usage(self, tmp_path):
        args = parse("generate", "-o", str(tmp_path))
        args.output_directory_strategy = "sideways"

        with pytest.raises(InvalidArgumentsError) as exc_info:
            self.cli.build_options(args, "usage: polyschema generate")

        assert exc_info.value.message.endswith("usage: polyschema generate")


class TestGenerateCommand:
    """End-to-end runs of ``polyschema generate``."""

    def test_writes_directory_tree(self, tmp_path):
        assert main(["generate", "-o", str(tmp_path), *FIXTURE_SCOPE]) == 0

        written = sorted(p.relative_to(tmp_path).as_posix() for p in tmp_path.rglob("*.yml"))
        assert written == [
            "_fixtures/models/Drawing.yml",
            "_fixtures/models/Event.yml",
            "_fixtures/models/Garage.yml",
        ]

    def test_writes_flat_directory(self, tmp_path):
        argv = ["generate", "-o", str(tmp_path), "--output-directory-strategy", "flatDirectory"]

        assert main([*argv, *FIXTURE_SCOPE]) == 0
        assert (tmp_path / "_fixtures.models.Drawing.yml").is_file()

    def test_documents_start_with_timestamp_header(self, tmp_path):
        main(["generate", "-o", str(tmp_path), *FIXTURE_SCOPE])

        text = (tmp_path / "_fixtures" / "models" / "Drawing.yml").read_text(encoding="utf-8")
        lines = text.splitlines()
        assert lines[0] == "---"
        assert lines[1].startswith("# timestamp=")
        assert yaml.safe_load(text)["title"] == "Drawing"

    def test_echo_only_writes_nothing(self, tmp_path, capsys):
        assert main(["generate", "-e", "-o", str(tmp_path), *FIXTURE_SCOPE]) == 0

        assert list(tmp_path.iterdir()) == []
        err = capsys.readouterr().err
        assert "--output-directory=" in err
        assert "--python-path=" in err

    def test_log_file(self, tmp_path):
        log_file = tmp_path / "logs" / "run.log"

        main(["generate", "-o", str(tmp_path / "out"), "--log-file", str(log_file), *FIXTURE_SCOPE])

        assert "Wrote 3 schemas" in log_file.read_text(encoding="utf-8")

    def test_failure_returns_one(self, tmp_path, capsys):
        with patch("polyschema.cli.generate", side_effect=RuntimeError("boom")):
            assert main(["generate", "-o", str(tmp_path)]) == 1

        assert (
            "Error: [UNKNOWN_ERROR] Schema generation failed (Original: boom)"
            in capsys.readouterr().err
        )

    def test_core_error_is_reported_as_is(self, tmp_path, capsys):
        with patch("polyschema.cli.generate", side_effect=SchemaBuildError("acme.Shape")):
            assert main(["generate", "-o", str(tmp_path)]) == 1

        assert (
            "Error: [SCHEMA_BUILD_FAILURE] Failed to generate schema for acme.Shape"
            in capsys.readouterr().err
        )

    def test_missing_output_directory_is_a_usage_error(self):
        with pytest.raises(SystemExit) as exc_info:
            main(["generate"])

        assert exc_info.value.code == 2

    def test_unknown_strategy_is_a_usage_error(self, tmp_path):
        with pytest.raises(SystemExit) as exc_info:
            main(["generate", "-o", str(tmp_path), "--output-directory-strategy", "sideways"])

        assert exc_info.value.code == 2


class TestValidateCommand:
    """Test cases for ``polyschema validate``."""

    def setup_method(self):
        self.cli = GeneratorCLI(GeneratorSettings())

    @pytest.fixture
    def drawing_schema(self, tmp_path):
        main(["generate", "-o", str(tmp_path), *FIXTURE_SCOPE])
        return tmp_path / "_fixtures" / "models" / "Drawing.yml"

    def write_payload(self, tmp_path, payload):
        path = tmp_path / "payload.json"
        path.write_text(json.dumps(payload), encoding="utf-8")
        return str(path)

    def test_valid_payload(self, tmp_path, drawing_schema, capsys):
        payload = self.write_payload(
            tmp_path, {"name": "d", "shapes": [{"@type": "circle", "radius": 1}]}
        )

        assert main(["validate", "--schema", str(drawing_schema), "--input", payload]) == 0
        assert "✅ Payload is valid" in capsys.readouterr().out

    def test_invalid_payload(self, tmp_path, drawing_schema, capsys):
        payload = self.write_payload(tmp_path, {"name": "d", "shapes": [{"@type": "triangle"}]})

        assert main(["validate", "--schema", str(drawing_schema), "--input", payload]) == 1
        out = capsys.readouterr().out
        assert "❌ Payload validation failed:" in out
        assert "At 'shapes -> 0':" in out

    def test_payload_from_stdin(self, drawing_schema):
        with patch("sys.stdin", StringIO(json.dumps({"name": "d"}))):
            assert self.cli.run_validate(str(drawing_schema), "-") == 0

    def test_missing_schema(self, tmp_path, capsys):
        assert self.cli.run_validate(str(tmp_path / "missing.yml"), "-") == 1
        assert "Schema not found" in capsys.readouterr().err

    def test_load_payload_invalid_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("invalid json")

        with pytest.raises(ValueError, match="Invalid JSON"):
            self.cli.load_payload(str(path))

    def test_load_payload_nonexistent_file(self):
        with pytest.raises(ValueError, match="Input file not found"):
            self.cli.load_payload("/path/that/does/not/exist.json")


def test_no_command_prints_help(capsys):
    assert main([]) == 1
    assert "generate" in capsys.readouterr().out


def test_version(capsys):
    with pytest.raises(SystemExit) as exc_info:
        main(["--version"])

    assert exc_info.value.code == 0
    assert capsys.readouterr().out.startswith("polyschema ")


def test_usage_recorded_on_generate_args(tmp_path):
    args = parse("generate", "-o", str(tmp_path))

    assert args.usage.startswith("usage:")
    assert isinstance(args.output_directory, Path)
