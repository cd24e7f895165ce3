from __future__ import annotations

from typing import TYPE_CHECKING

from catls import cli

if TYPE_CHECKING:
    from pathlib import Path


def test_end_to_end_markdown_export(sample_tree: Path, tmp_path: Path) -> None:
    output = tmp_path / "export.md"

    exit_code = cli.main([str(sample_tree), "--max-depth", "1", "--lines", "1", "--output", str(output)])

    assert exit_code == 0
    assert output.read_text(encoding="utf-8") == (
        "### a.txt\n@type: file\n@size: 6 bytes\n@depth: 1\n```text\nhello\n```\n---\n"
        "### sub/\n@type: directory\n@size: 0 bytes\n@depth: 1\n---\n"
    )


def test_end_to_end_markdown_is_reproducible(deep_tree: Path, tmp_path: Path) -> None:
    first = tmp_path / "first.md"
    second = tmp_path / "second.md"

    assert cli.main([str(deep_tree), "--content", "full", "--output", str(first)]) == 0
    assert cli.main([str(deep_tree), "--content", "full", "--output", str(second)]) == 0

    assert first.read_bytes() == second.read_bytes()


def test_end_to_end_output_file_is_truncated(sample_tree: Path, tmp_path: Path) -> None:
    output = tmp_path / "out.json"
    output.write_text("x" * 10_000, encoding="utf-8")

    assert cli.main([str(sample_tree), "--format", "json", "--output", str(output)]) == 0

    assert "x" * 100 not in output.read_text(encoding="utf-8")


def test_end_to_end_include_root_and_show_ignored(sample_tree: Path, tmp_path: Path) -> None:
    output = tmp_path / "out.md"

    exit_code = cli.main(
        [str(sample_tree), "--include-root", "--show-ignored", "--ignore", "sub", "--output", str(output)],
    )

    assert exit_code == 0
    text = output.read_text(encoding="utf-8")
    assert text.startswith("### .\n@type: directory\n@size: 0 bytes\n@depth: 0\n---\n")
    assert "### sub/\n@type: directory\n@size: 0 bytes\n@depth: 1\n@ignored: true\n---\n" in text
    assert "b.go" not in text
