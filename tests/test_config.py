"""
tests/test_config.py
Unit tests for dataset_generator.core.config (options, loading, validation).

Tests cover:
- Defaults and enum parsing
- Loading from JSON files with override precedence
- Errors for unreadable or malformed configuration
- Validation problems reported together
"""

from __future__ import annotations

import json

import pytest

from dataset_generator.core.config import (
    DEFAULT_OPTIONS,
    EXAMPLE_CONFIG,
    AppendMode,
    ConfigError,
    ConfigManager,
    GeneratorMode,
    GeneratorOptions,
    get_validation_problems,
    load_config,
    parse_append_mode,
    parse_generator_mode,
    validate_options,
)


@pytest.fixture()
def config_file(tmp_path):
    """Write a JSON configuration file and return its path."""

    def _write(data, name="dataset.json"):
        path = tmp_path / name
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return _write


class TestDefaults:
    def test_values(self):
        assert DEFAULT_OPTIONS.indentation == "  "
        assert DEFAULT_OPTIONS.generator_mode == GeneratorMode.FUNCTION
        assert DEFAULT_OPTIONS.append_mode == AppendMode.MULTILINE
        assert DEFAULT_OPTIONS.target == "firedac"
        assert DEFAULT_OPTIONS.max_rows == 100
        assert DEFAULT_OPTIONS.right_margin == 80
        assert DEFAULT_OPTIONS.comment_truncated_rows is False

    def test_defaults_are_valid(self):
        assert get_validation_problems(DEFAULT_OPTIONS) == []

    def test_options_are_immutable(self):
        with pytest.raises(AttributeError):
            DEFAULT_OPTIONS.max_rows = 5

    def test_with_overrides_returns_copy(self):
        changed = DEFAULT_OPTIONS.with_overrides(max_rows=5, generator_mode="unit")
        assert changed.max_rows == 5
        assert changed.generator_mode == GeneratorMode.UNIT
        assert DEFAULT_OPTIONS.max_rows == 100

    def test_to_dict_uses_enum_values(self):
        data = DEFAULT_OPTIONS.to_dict()
        assert data["generator_mode"] == "function"
        assert data["append_mode"] == "multiline"


class TestEnumParsing:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("rowarray", AppendMode.ROW_ARRAY),
            ("row_array", AppendMode.ROW_ARRAY),
            ("Row-Array", AppendMode.ROW_ARRAY),
            ("SINGLELINE", AppendMode.SINGLELINE),
            (AppendMode.MULTILINE, AppendMode.MULTILINE),
        ],
    )
    def test_append_mode(self, text, expected):
        assert parse_append_mode(text) == expected

    def test_generator_mode(self):
        assert parse_generator_mode(" Unit ") == GeneratorMode.UNIT

    def test_unknown_value_lists_choices(self):
        with pytest.raises(ConfigError, match="structure, append, function, unit"):
            parse_generator_mode("everything")

    def test_mode_scopes(self):
        assert not GeneratorMode.STRUCTURE.includes_rows
        assert GeneratorMode.APPEND.includes_rows
        assert not GeneratorMode.APPEND.includes_function
        assert GeneratorMode.UNIT.includes_function


class TestLoading:
    def test_no_sources_gives_defaults(self):
        assert ConfigManager().get_config() == DEFAULT_OPTIONS

    def test_file_values(self, config_file):
        options = load_config(config_file=config_file(EXAMPLE_CONFIG))
        assert options.generator_mode == GeneratorMode.UNIT
        assert options.append_mode == AppendMode.SINGLELINE
        assert options.target == "clientdataset"
        assert options.unit_name == "Fake.Orders"
        assert options.max_rows == 20
        # Keys the file leaves out keep their defaults
        assert options.indentation == "  "

    def test_overrides_win_over_file(self, config_file):
        path = config_file({"max_rows": 20, "right_margin": 60})
        options = load_config({"max_rows": 3, "right_margin": None}, config_file=path)
        assert options.max_rows == 3
        assert options.right_margin == 60

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(config_file=tmp_path / "missing.json")

    def test_not_json_extension(self, tmp_path):
        path = tmp_path / "dataset.yaml"
        path.write_text("max_rows: 3", encoding="utf-8")
        with pytest.raises(ConfigError, match="must be JSON"):
            load_config(config_file=path)

    def test_malformed_json(self, tmp_path):
        path = tmp_path / "dataset.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid JSON"):
            load_config(config_file=path)

    def test_json_must_be_object(self, config_file):
        with pytest.raises(ConfigError, match="JSON object"):
            load_config(config_file=config_file([1, 2, 3]))

    def test_unknown_keys(self, config_file):
        with pytest.raises(ConfigError, match="rightmargin"):
            load_config(config_file=config_file({"rightmargin": 40}))

    def test_bad_enum_in_file(self, config_file):
        with pytest.raises(ConfigError):
            load_config(config_file=config_file({"append_mode": "sideways"}))

    def test_save_and_reload(self, tmp_path):
        options = DEFAULT_OPTIONS.with_overrides(
            append_mode="rowarray", indentation="\t", line_ending="\r\n"
        )
        path = tmp_path / "saved.json"
        manager = ConfigManager()
        manager.save_config(options, path)
        assert manager.get_config(config_file=path) == options


class TestValidation:
    def test_collects_every_problem(self):
        options = GeneratorOptions(
            max_rows=-1, right_margin=True, indentation="x", line_ending="\r"
        )
        problems = get_validation_problems(options)
        assert len(problems) == 4

    def test_error_message_joins_problems(self):
        with pytest.raises(ConfigError) as exc_info:
            validate_options(GeneratorOptions(max_rows=-1, target="paradox"))
        message = str(exc_info.value)
        assert message.startswith("Invalid generator options: ")
        assert "max_rows" in message
        assert "paradox" in message

    def test_target_alias_is_valid(self):
        assert get_validation_problems(GeneratorOptions(target="CDS")) == []

    def test_names_checked_per_mode(self):
        function_mode = GeneratorOptions(function_name="Given Orders", unit_name="")
        assert len(get_validation_problems(function_mode)) == 1

        unit_mode = GeneratorOptions(
            generator_mode=GeneratorMode.UNIT, function_name="Given Orders", unit_name=""
        )
        assert len(get_validation_problems(unit_mode)) == 2

    @pytest.mark.parametrize("name", ["ds", "data", "Result", "IDX", "col"])
    @pytest.mark.parametrize("mode", [GeneratorMode.FUNCTION, GeneratorMode.UNIT])
    def test_function_name_clashing_with_generated_code(self, name, mode):
        problems = get_validation_problems(GeneratorOptions(generator_mode=mode, function_name=name))
        assert len(problems) == 1
        assert "collides" in problems[0]

    def test_clashing_name_ignored_outside_function_modes(self):
        options = GeneratorOptions(generator_mode=GeneratorMode.APPEND, function_name="ds")
        assert get_validation_problems(options) == []

    def test_dotted_unit_name(self):
        options = GeneratorOptions(generator_mode=GeneratorMode.UNIT, unit_name="Fake.Orders")
        assert get_validation_problems(options) == []

    def test_margin_zero_disables_wrapping(self):
        assert get_validation_problems(GeneratorOptions(right_margin=0, max_rows=0)) == []
