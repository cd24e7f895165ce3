"""catls: serialize a directory's structure and content as Markdown or JSON."""

from __future__ import annotations

__version__ = "0.1.0"

from catls.config import ContentPolicy, Entry, EntryKind, OutputMode, WalkOptions
from catls.file_manipulation import read_content
from catls.output_construction import stream_format
from catls.walker import walk

__all__ = [
    "ContentPolicy",
    "Entry",
    "EntryKind",
    "OutputMode",
    "WalkOptions",
    "__version__",
    "read_content",
    "stream_format",
    "walk",
]
