"""
tests/test_generator.py
Unit tests for dataset_generator.core.generator (generator facade) and sinks.

Tests cover:
- Deterministic output for every mode combination
- Row capping and generation metadata
- Options validation before any rendering
- File and clipboard sinks, including failure handling
"""

from __future__ import annotations

import pyperclip
import pytest

from conftest import make_snapshot
from dataset_generator.core.config import DEFAULT_OPTIONS, ConfigError
from dataset_generator.core.generator import (
    DataSetGenerator,
    execute,
    render_lines,
    render_text,
    render_text_and_copy_to_clipboard,
    render_text_and_write_to_file,
)
from dataset_generator.core.schema import Snapshot
from dataset_generator.core.sinks import FileSink, MemorySink, SinkError, join_lines
from dataset_generator.sources import SequenceSource


def options(**overrides):
    return DEFAULT_OPTIONS.with_overrides(**overrides)


class TestDeterminism:
    @pytest.mark.parametrize("mode", ["structure", "append", "function", "unit"])
    @pytest.mark.parametrize("append_mode", ["multiline", "singleline", "rowarray"])
    def test_same_input_same_output(self, project_snapshot, mode, append_mode):
        opts = options(generator_mode=mode, append_mode=append_mode, right_margin=30)
        assert render_text(project_snapshot, opts) == render_text(project_snapshot, opts)

    def test_sources_and_snapshots_render_alike(self, two_by_two_snapshot):
        source = SequenceSource(
            [("Id", "INTEGER"), ("Code", "VARCHAR(10)")], two_by_two_snapshot.rows
        )
        assert render_text(source) == render_text(two_by_two_snapshot)


class TestMaxRows:
    def test_renders_prefix_in_source_order(self, numbered_snapshot):
        result = execute(numbered_snapshot, options(max_rows=2, append_mode="singleline"))
        rows = [line for line in result.lines if "AppendRecord" in line]
        assert rows == [
            "  ds.AppendRecord([1, 'row 1']);",
            "  ds.AppendRecord([2, 'row 2']);",
        ]
        assert result.metadata["rows_total"] == 5
        assert result.metadata["rows_rendered"] == 2
        assert result.metadata["rows_omitted"] == 3

    def test_zero_renders_structure_only(self, numbered_snapshot):
        result = execute(numbered_snapshot, options(max_rows=0, generator_mode="append"))
        assert result.lines == tuple(
            execute(numbered_snapshot, options(generator_mode="structure")).lines
        )

    def test_truncation_comment_is_opt_in(self, numbered_snapshot):
        opts = options(max_rows=2, comment_truncated_rows=True, generator_mode="append")
        result = execute(numbered_snapshot, opts)
        assert result.lines[-1] == "{ 3 more rows omitted, max rows is 2 }"

    def test_no_comment_when_nothing_omitted(self, numbered_snapshot):
        opts = options(comment_truncated_rows=True, generator_mode="append")
        result = execute(numbered_snapshot, opts)
        assert result.metadata["rows_omitted"] == 0
        assert not any("omitted" in line for line in result.lines)


class TestMetadata:
    def test_result_fields(self, two_by_two_snapshot):
        result = execute(two_by_two_snapshot, options(target="cds"))
        assert result.metadata["generator_mode"] == "function"
        assert result.metadata["append_mode"] == "multiline"
        assert result.metadata["target"] == "clientdataset"
        assert result.metadata["dataset_class"] == "TClientDataSet"
        assert result.metadata["column_count"] == 2
        assert result.metadata["line_count"] == len(result.lines)
        assert not result.has_warnings

    def test_code_uses_line_ending(self, two_by_two_snapshot):
        result = execute(two_by_two_snapshot, options(line_ending="\r\n"))
        assert result.code.endswith("end;\r\n")
        assert "\n" not in result.code.replace("\r\n", "")


class TestValidation:
    @pytest.mark.parametrize(
        "overrides",
        [
            {"max_rows": -1},
            {"right_margin": -5},
            {"indentation": "--"},
            {"target": "nosuchdataset"},
            {"generator_mode": "unit", "unit_name": "1st unit"},
            {"function_name": "begin"},
        ],
    )
    def test_invalid_options_raise_before_rendering(self, two_by_two_snapshot, overrides):
        with pytest.raises(ConfigError):
            execute(two_by_two_snapshot, options(**overrides))

    def test_all_problems_are_reported(self, two_by_two_snapshot):
        with pytest.raises(ConfigError) as exc_info:
            execute(two_by_two_snapshot, options(max_rows=-1, right_margin=-1))
        message = str(exc_info.value)
        assert "max_rows" in message
        assert "right_margin" in message

    def test_function_name_ignored_outside_function_modes(self, two_by_two_snapshot):
        result = execute(
            two_by_two_snapshot, options(generator_mode="structure", function_name="begin")
        )
        assert result.lines[0] == "with ds do"

    def test_invalid_options_write_nothing(self, tmp_path, two_by_two_snapshot):
        path = tmp_path / "out.pas"
        with pytest.raises(ConfigError):
            render_text_and_write_to_file(two_by_two_snapshot, path, options(max_rows=-1))
        assert not path.exists()


class TestEmptyAndUnsupported:
    @pytest.mark.parametrize("mode", ["structure", "append", "function", "unit"])
    def test_empty_snapshot(self, mode):
        result = execute(Snapshot.empty(), options(generator_mode=mode))
        assert result.lines
        assert not any("FieldDefs.Add" in line for line in result.lines)
        assert not any("CreateDataSet" in line for line in result.lines)

    def test_unsupported_column_is_reported(self):
        snapshot = make_snapshot(
            [("Id", "INTEGER"), ("Shape", "GEOMETRY")], [(1, "POINT(1 2)")]
        )
        result = execute(snapshot, options(generator_mode="append"))
        assert result.unsupported_columns == ["Shape"]
        assert result.has_warnings
        assert "  FieldByName('Id').Value := 1;" in result.lines
        assert "  FieldByName('Shape').Value := 'POINT(1 2)';" in result.lines


class TestFileSink:
    def test_write(self, tmp_path, two_by_two_snapshot):
        path = tmp_path / "GivenData.pas"
        result = render_text_and_write_to_file(two_by_two_snapshot, path)
        assert path.read_text(encoding="utf-8-sig") == result.code

    def test_non_ascii_text_survives_with_byte_order_mark(self, tmp_path):
        snapshot = make_snapshot([("City", "TEXT")], [("Zürich",)])
        path = tmp_path / "Cities.pas"
        render_text_and_write_to_file(snapshot, path)
        data = path.read_bytes()
        assert data.startswith(b"\xef\xbb\xbf")
        assert "    FieldByName('City').Value := 'Zürich';" in data[3:].decode("utf-8").splitlines()

    def test_overwrites_existing_content(self, tmp_path, two_by_two_snapshot):
        path = tmp_path / "GivenData.pas"
        path.write_text("old content that is longer than nothing\n" * 50, encoding="utf-8")
        render_text_and_write_to_file(two_by_two_snapshot, path)
        assert "old content" not in path.read_text(encoding="utf-8-sig")

    def test_crlf_line_endings(self, tmp_path, two_by_two_snapshot):
        path = tmp_path / "GivenData.pas"
        render_text_and_write_to_file(two_by_two_snapshot, path, options(line_ending="\r\n"))
        data = path.read_bytes()
        assert data.endswith(b"end;\r\n")
        assert data.count(b"\n") == data.count(b"\r\n")

    def test_missing_directory(self, tmp_path, two_by_two_snapshot):
        path = tmp_path / "missing" / "GivenData.pas"
        with pytest.raises(SinkError):
            render_text_and_write_to_file(two_by_two_snapshot, path)
        assert not path.exists()

    def test_no_temporary_files_left(self, tmp_path, two_by_two_snapshot):
        render_text_and_write_to_file(two_by_two_snapshot, tmp_path / "a.pas")
        assert [p.name for p in tmp_path.iterdir()] == ["a.pas"]

    def test_sink_error_is_an_os_error(self):
        assert issubclass(SinkError, OSError)

    def test_empty_output_writes_empty_file(self, tmp_path):
        path = tmp_path / "empty.pas"
        FileSink(path).write([])
        assert path.read_text(encoding="utf-8-sig") == ""


class TestClipboardSink:
    def test_copies_text(self, monkeypatch, two_by_two_snapshot):
        copied = []
        monkeypatch.setattr(pyperclip, "copy", copied.append)
        result = render_text_and_copy_to_clipboard(two_by_two_snapshot)
        assert copied == [result.code]

    def test_unavailable_clipboard(self, monkeypatch, two_by_two_snapshot):
        def fail(text):
            raise pyperclip.PyperclipException("no clipboard mechanism")

        monkeypatch.setattr(pyperclip, "copy", fail)
        with pytest.raises(SinkError, match="clipboard"):
            render_text_and_copy_to_clipboard(two_by_two_snapshot)


class TestMemorySink:
    def test_render_lines(self, two_by_two_snapshot):
        lines = render_lines(two_by_two_snapshot)
        assert lines[0] == "function GivenDataSet(aOwner: TComponent): TDataSet;"
        assert lines[-1] == "end;"

    def test_generator_write(self, two_by_two_snapshot):
        sink = MemorySink()
        result = DataSetGenerator().write(two_by_two_snapshot, sink)
        assert sink.lines == list(result.lines)
        assert sink.text == result.code

    def test_join_lines(self):
        assert join_lines([]) == ""
        assert join_lines(["a", "b"], "\r\n") == "a\r\nb\r\n"
