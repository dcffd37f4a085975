import pytest
from synext.core.models import (
    CompressionLevel,
    ExtractionConfig,
    ExtractionResult,
    ExtractionWarning,
    FileTypeSet,
    TreeNode,
    WalkResult,
    WarningKind,
)


class TestFileTypeSet:
    def test_normalizes_entries(self):
        file_types = FileTypeSet(["ts", ".MD", " .py "])
        assert file_types.to_list() == [".md", ".py", ".ts"]

    def test_contains_uses_normalized_form(self):
        file_types = FileTypeSet([".ts"])
        assert ".ts" in file_types
        assert "TS" in file_types
        assert ".js" not in file_types
        assert "" not in file_types
        assert 3 not in file_types

    def test_empty_suffix_rejected(self):
        with pytest.raises(ValueError):
            FileTypeSet(["."])
        with pytest.raises(ValueError):
            FileTypeSet().add("   ")

    def test_toggle(self):
        file_types = FileTypeSet([".ts"])
        assert file_types.toggle(".md") is True
        assert ".md" in file_types
        assert file_types.toggle("md") is False
        assert ".md" not in file_types

    def test_add_remove_discard(self):
        file_types = FileTypeSet()
        file_types.add("ts")
        assert len(file_types) == 1
        file_types.discard(".js")
        file_types.remove(".ts")
        assert len(file_types) == 0
        with pytest.raises(KeyError):
            file_types.remove(".ts")

    def test_iteration_is_sorted(self):
        assert list(FileTypeSet([".ts", ".css", ".md"])) == [".css", ".md", ".ts"]

    def test_equality_and_copy(self):
        original = FileTypeSet([".ts"])
        duplicate = original.copy()
        assert duplicate == original
        duplicate.add(".md")
        assert duplicate != original


class TestCompressionLevel:
    @pytest.mark.parametrize("value,expected", [
        ("none", CompressionLevel.NONE),
        ("Light", CompressionLevel.LIGHT),
        ("FULL", CompressionLevel.FULL),
        (CompressionLevel.LIGHT, CompressionLevel.LIGHT),
    ])
    def test_parse(self, value, expected):
        assert CompressionLevel.parse(value) is expected

    def test_parse_invalid(self):
        with pytest.raises(ValueError):
            CompressionLevel.parse("maximum")


class TestExtractionConfig:
    def test_defaults(self):
        config = ExtractionConfig()
        assert len(config.file_types) == 0
        assert config.compression_level is CompressionLevel.NONE
        assert config.max_file_bytes == 1024 * 1024
        assert config.max_total_bytes == 8 * 1024 * 1024

    def test_file_types_are_snapshotted(self):
        file_types = FileTypeSet([".ts"])
        config = ExtractionConfig(file_types=file_types)
        file_types.add(".md")
        assert ".md" not in config.file_types

    def test_accepts_plain_iterables_and_strings(self):
        config = ExtractionConfig(file_types=["ts"], compression_level="light")
        assert ".ts" in config.file_types
        assert config.compression_level is CompressionLevel.LIGHT

    @pytest.mark.parametrize("field_name", ["max_file_bytes", "max_total_bytes", "max_depth", "concurrency"])
    def test_rejects_non_positive_limits(self, field_name):
        with pytest.raises(ValueError):
            ExtractionConfig(**{field_name: 0})

    def test_is_frozen(self):
        config = ExtractionConfig()
        with pytest.raises(AttributeError):
            config.max_file_bytes = 10


class TestTreeNode:
    def test_iter_included_files_uses_display_paths(self):
        tree = TreeNode("/abs/proj", "proj", True, children=(
            TreeNode("/abs/proj/src", "src", True, children=(
                TreeNode("/abs/proj/src/a.ts", "a.ts", False, included=True),
            ), included=True),
            TreeNode("/abs/proj/README.md", "README.md", False),
        ), included=True)

        files = list(tree.iter_included_files())

        assert [path for path, _ in files] == ["proj/src/a.ts"]
        assert files[0][1].absolute_path == "/abs/proj/src/a.ts"

    def test_walk_result_collects_across_roots(self):
        result = WalkResult(roots=(
            TreeNode("/a.ts", "a.ts", False, included=True),
            TreeNode("/b.md", "b.md", False),
            TreeNode("/c.ts", "c.ts", False, included=True),
        ))
        assert [path for path, _ in result.included_files()] == ["a.ts", "c.ts"]


class TestExtractionResult:
    def test_combined_text_with_content(self):
        result = ExtractionResult(tree_text="proj/", content_text="--- proj/a.ts ---\nx\n")
        assert result.combined_text == "proj/\n\n--- proj/a.ts ---\nx\n"

    def test_combined_text_tree_only(self):
        assert ExtractionResult(tree_text="proj/").combined_text == "proj/"

    def test_warning_summary(self):
        result = ExtractionResult(tree_text="", warnings=(
            ExtractionWarning(WarningKind.UNREADABLE_ENTRY, "/x", "Cannot read file"),
        ))
        assert result.has_warnings()
        assert "/x: Cannot read file" in result.get_warning_summary()
        assert ExtractionResult(tree_text="").get_warning_summary() == "No warnings."
