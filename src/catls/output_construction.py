from __future__ import annotations

import contextlib
import json
import sys
from typing import TYPE_CHECKING, TextIO

from pydantic import BaseModel, Field

from catls.config import Entry, EntryKind, OutputMode
from catls.exceptions import OutputSinkError
from catls.file_manipulation import build_tree_lines, file_language

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator
    from pathlib import Path


@contextlib.contextmanager
def open_sink(output: Path | None, stdout: TextIO | None = None) -> Iterator[TextIO]:
    """Open the output destination for one run.

    A named file is created or truncated; without one the console stream is used
    and left open.

    Args:
        output (Path | None): file to write, or None for the console
        stdout (TextIO | None): console stream, defaults to sys.stdout

    Raises:
        OutputSinkError: if the file cannot be opened or created.

    Yields:
        Iterator[TextIO]: the writable sink
    """
    if output is None:
        yield stdout or sys.stdout
        return
    try:
        fh = output.open("w", encoding="utf-8")
    except OSError as e:
        raise OutputSinkError(path=output, reason=e.strerror or str(e)) from e
    with fh:
        yield fh


def render_markdown_entry(entry: Entry) -> str:
    """Render one entry as a Markdown section ending with a `---` rule.

    Fence markers inside the content are not escaped.
    """
    is_dir = entry.kind is EntryKind.DIRECTORY
    heading = entry.path + ("/" if is_dir and entry.path != "." else "")
    parts = [
        f"### {heading}\n",
        f"@type: {entry.kind}\n",
        f"@size: {entry.size} bytes\n",
        f"@depth: {entry.depth}\n",
    ]
    if entry.ignored:
        parts.append("@ignored: true\n")
    if entry.error:
        parts.append(f"⚠️ Error: {entry.error}\n")
    if entry.content is not None and not is_dir:
        lang = file_language(entry.path)
        parts.append(f"```{lang}\n{entry.content}\n```\n")
    parts.append("---\n")
    return "".join(parts)


class MarkdownStreamFormatter:
    """Writes each entry as soon as it arrives; holds no state between entries."""

    def __init__(self, sink: TextIO) -> None:
        self.sink = sink

    def open(self) -> None:
        return None

    def write(self, entry: Entry) -> None:
        self.sink.write(render_markdown_entry(entry))

    def close(self) -> None:
        self.sink.flush()


class JsonStreamFormatter:
    """Writes a single JSON array incrementally.

    The opening bracket goes out before the first entry is known; the only ordering
    state is whether an entry has been written yet, which decides comma placement.
    """

    def __init__(self, sink: TextIO) -> None:
        self.sink = sink
        self._first = True

    def open(self) -> None:
        self.sink.write("[")

    def write(self, entry: Entry) -> None:
        self.sink.write("\n" if self._first else ",\n")
        self._first = False
        self.sink.write(json.dumps(entry.to_json_dict(), ensure_ascii=False))

    def close(self) -> None:
        self.sink.write("]\n" if self._first else "\n]\n")
        self.sink.flush()


FORMATTERS: dict[OutputMode, type[MarkdownStreamFormatter | JsonStreamFormatter]] = {
    OutputMode.MARKDOWN: MarkdownStreamFormatter,
    OutputMode.JSON: JsonStreamFormatter,
}


def stream_format(entries: Iterable[Entry], sink: TextIO, mode: OutputMode) -> int:
    """Serialize entries to `sink` one at a time, in the order they arrive.

    If the entry sequence raises, the error propagates after the entries already
    received have been written; the JSON array is then left unterminated.

    Args:
        entries (Iterable[Entry]): the entry sequence, typically a walker generator
        sink (TextIO): where the serialized fragments are written
        mode (OutputMode): markdown or json

    Returns:
        int: the number of entries written
    """
    formatter = FORMATTERS[OutputMode(mode)](sink)
    formatter.open()
    count = 0
    for entry in entries:
        formatter.write(entry)
        count += 1
    formatter.close()
    return count


class WalkSummary(BaseModel):
    """Totals over a materialized list of entries."""

    files: int = Field(default=0, description="Regular files")
    directories: int = Field(default=0, description="Directories")
    symlinks: int = Field(default=0, description="Symbolic links")
    errors: int = Field(default=0, description="Entries carrying an error")
    ignored: int = Field(default=0, description="Ignore markers")
    total_bytes: int = Field(default=0, description="Sum of file sizes")
    deepest: int = Field(default=0, description="Largest depth seen")


def summarize(entries: Iterable[Entry]) -> WalkSummary:
    counts = {"files": 0, "directories": 0, "symlinks": 0, "errors": 0, "ignored": 0}
    total_bytes = deepest = 0
    for entry in entries:
        if entry.ignored:
            counts["ignored"] += 1
        elif entry.kind is EntryKind.DIRECTORY:
            counts["directories"] += 1
        elif entry.kind is EntryKind.SYMLINK:
            counts["symlinks"] += 1
        else:
            counts["files"] += 1
            total_bytes += entry.size
        if entry.error:
            counts["errors"] += 1
        deepest = max(deepest, entry.depth)
    return WalkSummary(**counts, total_bytes=total_bytes, deepest=deepest)


def write_markdown_summary(root_name: str, entries: Iterable[Entry], sink: TextIO) -> int:
    """Materialize the entries and write a structure-only Markdown overview.

    Args:
        root_name (str): label for the tree root
        entries (Iterable[Entry]): the entry sequence
        sink (TextIO): where the summary is written

    Returns:
        int: the number of entries summarized
    """
    recs = list(entries)
    summary = summarize(recs)
    sink.write(f"# {root_name}\n\n")
    sink.write("## Structure\n")
    sink.write("```text\n")
    sink.write("\n".join(build_tree_lines(root_name, recs)))
    sink.write("\n```\n\n")
    sink.write("## Totals\n")
    sink.write(f"@files: {summary.files}\n")
    sink.write(f"@directories: {summary.directories}\n")
    sink.write(f"@symlinks: {summary.symlinks}\n")
    sink.write(f"@errors: {summary.errors}\n")
    sink.write(f"@ignored: {summary.ignored}\n")
    sink.write(f"@size: {summary.total_bytes} bytes\n")
    sink.write(f"@deepest: {summary.deepest}\n")
    sink.flush()
    return len(recs)
