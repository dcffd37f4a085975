"""Tests for reading and concatenating file contents."""

import asyncio
import threading

import pytest
from synext.core.aggregator import BINARY_MARKER, ContentAggregator, FileSection
from synext.core.exceptions import ExtractionCancelled
from synext.core.models import (
    BudgetKind,
    CompressionLevel,
    ExtractionConfig,
    FileTypeSet,
    TreeNode,
    WarningKind,
)


def file_entry(path, display_path):
    return display_path, TreeNode(str(path), path.name, False, included=True)


@pytest.fixture
def aggregator():
    return ContentAggregator()


class TestFileSection:
    def test_render(self):
        assert FileSection("proj/a.ts", "let x = 1;").render() == "--- proj/a.ts ---\nlet x = 1;\n"

    def test_render_empty_body(self):
        assert FileSection("proj/empty.ts", "").render() == "--- proj/empty.ts ---\n"


class TestReadSection:
    def test_reads_text(self, temp_workspace, aggregator, ts_config):
        path = temp_workspace / "a.ts"
        path.write_text("let x = 1;")

        section = aggregator.read_section("proj/a.ts", str(path), ts_config)

        assert section.body == "let x = 1;"
        assert section.truncated is False
        assert section.warning is None

    def test_truncates_large_file(self, temp_workspace, aggregator):
        path = temp_workspace / "big.ts"
        path.write_text("a" * 100)
        config = ExtractionConfig(file_types=FileTypeSet([".ts"]), max_file_bytes=10)

        section = aggregator.read_section("big.ts", str(path), config)

        assert section.truncated is True
        assert section.body == "a" * 10 + "\n... [truncated: showing 10 of 100 bytes]"

    def test_truncation_inside_multibyte_character(self, temp_workspace, aggregator):
        path = temp_workspace / "accents.ts"
        path.write_bytes("é".encode("utf-8") * 10)
        config = ExtractionConfig(file_types=FileTypeSet([".ts"]), max_file_bytes=5)

        section = aggregator.read_section("accents.ts", str(path), config)

        assert section.truncated is True
        assert section.body.startswith("éé\n")
        assert section.warning is None

    def test_binary_content(self, temp_workspace, aggregator, ts_config):
        path = temp_workspace / "data.ts"
        path.write_bytes(b"\x00\x01\x02\x03binary")

        section = aggregator.read_section("data.ts", str(path), ts_config)

        assert section.body == BINARY_MARKER
        assert section.warning.kind is WarningKind.DECODE_FAILURE

    def test_unreadable_file(self, temp_workspace, aggregator, ts_config):
        section = aggregator.read_section("gone.ts", str(temp_workspace / "gone.ts"), ts_config)

        assert section.body.startswith("[unreadable file skipped: ")
        assert section.warning.kind is WarningKind.UNREADABLE_ENTRY

    def test_cp1252_fallback(self, temp_workspace, aggregator, ts_config):
        path = temp_workspace / "legacy.ts"
        path.write_bytes("// café\n".encode("cp1252"))

        section = aggregator.read_section("legacy.ts", str(path), ts_config)

        assert section.body == "// café\n"

    def test_applies_compression(self, temp_workspace, aggregator):
        path = temp_workspace / "a.ts"
        path.write_text("// comment\nlet x = 1;   \n\n\n\nlet y = 2;\n")
        config = ExtractionConfig(file_types=FileTypeSet([".ts"]), compression_level=CompressionLevel.FULL)

        section = aggregator.read_section("a.ts", str(path), config)

        assert section.body == "let x = 1;\n\nlet y = 2;"


class TestAggregate:
    def test_sections_follow_input_order(self, temp_workspace, aggregator, ts_config):
        files = []
        for name in ("b.ts", "a.ts", "c.ts"):
            path = temp_workspace / name
            path.write_text(name)
            files.append(file_entry(path, f"proj/{name}"))

        result = asyncio.run(aggregator.aggregate(files, ts_config))

        assert result.text == (
            "--- proj/b.ts ---\nb.ts\n"
            "\n--- proj/a.ts ---\na.ts\n"
            "\n--- proj/c.ts ---\nc.ts\n"
        )
        assert result.truncated is False

    def test_file_budget_reported(self, temp_workspace, aggregator):
        path = temp_workspace / "big.ts"
        path.write_text("a" * 100)
        config = ExtractionConfig(file_types=FileTypeSet([".ts"]), max_file_bytes=10)

        result = asyncio.run(aggregator.aggregate([file_entry(path, "big.ts")], config))

        assert result.budgets_hit == frozenset({BudgetKind.FILE_BYTES})
        assert result.truncated is True

    def test_warnings_collected(self, temp_workspace, aggregator, ts_config):
        good = temp_workspace / "good.ts"
        good.write_text("ok")
        files = [file_entry(temp_workspace / "gone.ts", "gone.ts"), file_entry(good, "good.ts")]

        result = asyncio.run(aggregator.aggregate(files, ts_config))

        assert len(result.warnings) == 1
        assert "--- good.ts ---\nok\n" in result.text

    def test_cancelled(self, temp_workspace, ts_config):
        path = temp_workspace / "a.ts"
        path.write_text("x")
        event = threading.Event()
        event.set()

        with pytest.raises(ExtractionCancelled):
            asyncio.run(ContentAggregator(event).aggregate([file_entry(path, "a.ts")], ts_config))
