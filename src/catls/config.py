from __future__ import annotations

import os
from enum import StrEnum, auto

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator
from pydantic.alias_generators import to_pascal


class FileType(StrEnum):
    """Categorization of files by extension, used to pick a code fence language.

    This is a heuristic classification based on file extensions only.
    """

    TEXT = auto()
    PYTHON = auto()
    TOML = auto()
    JSON = auto()
    MARKDOWN = auto()
    YAML = auto()
    HTML = auto()
    CSS = auto()
    JAVASCRIPT = auto()
    TYPESCRIPT = auto()
    BASH = auto()
    RUST = auto()
    GO = auto()
    PHP = auto()
    SQL = auto()
    JAVA = auto()
    C = auto()
    CPP = auto()
    XML = auto()
    INI = auto()
    OTHER = auto()


EXT2LANG: dict[str, FileType] = {
    ".bash": FileType.BASH,
    ".c": FileType.C,
    ".cc": FileType.CPP,
    ".cfg": FileType.INI,
    ".conf": FileType.INI,
    ".cpp": FileType.CPP,
    ".css": FileType.CSS,
    ".cxx": FileType.CPP,
    ".go": FileType.GO,
    ".h": FileType.C,
    ".hpp": FileType.CPP,
    ".htm": FileType.HTML,
    ".html": FileType.HTML,
    ".ini": FileType.INI,
    ".java": FileType.JAVA,
    ".js": FileType.JAVASCRIPT,
    ".json": FileType.JSON,
    ".jsx": FileType.JAVASCRIPT,
    ".markdown": FileType.MARKDOWN,
    ".md": FileType.MARKDOWN,
    ".mjs": FileType.JAVASCRIPT,
    ".php": FileType.PHP,
    ".py": FileType.PYTHON,
    ".rs": FileType.RUST,
    ".sh": FileType.BASH,
    ".sql": FileType.SQL,
    ".toml": FileType.TOML,
    ".ts": FileType.TYPESCRIPT,
    ".tsx": FileType.TYPESCRIPT,
    ".txt": FileType.TEXT,
    ".xml": FileType.XML,
    ".yaml": FileType.YAML,
    ".yml": FileType.YAML,
    ".zsh": FileType.BASH,
}

_FENCE_LANGUAGE: dict[FileType, str] = {
    FileType.PYTHON: "python",
    FileType.TOML: "toml",
    FileType.JSON: "json",
    FileType.MARKDOWN: "markdown",
    FileType.YAML: "yaml",
    FileType.HTML: "html",
    FileType.CSS: "css",
    FileType.JAVASCRIPT: "javascript",
    FileType.TYPESCRIPT: "typescript",
    FileType.BASH: "bash",
    FileType.RUST: "rust",
    FileType.GO: "go",
    FileType.PHP: "php",
    FileType.SQL: "sql",
    FileType.JAVA: "java",
    FileType.C: "c",
    FileType.CPP: "cpp",
    FileType.XML: "xml",
    FileType.INI: "ini",
    FileType.TEXT: "text",
    FileType.OTHER: "",
}

FILENAME_LANGUAGE: dict[str, str] = {
    "dockerfile": "dockerfile",
    "makefile": "makefile",
}

DEFAULT_IGNORES = (".git", "node_modules")

# Prefix read to decide whether a file is binary.
SNIFF_BYTES = 8000


def guess_language(file_type: FileType) -> str:
    """Get the suggested code fence language for a given file type.

    Args:
        file_type (FileType): The categorized file type.

    Returns:
        str: The suggested language name for code fences, or empty string if none.
    """
    return _FENCE_LANGUAGE.get(file_type, "")


class OutputMode(StrEnum):
    """Wire formats the streaming formatter can render."""

    MARKDOWN = auto()
    JSON = auto()


class EntryKind(StrEnum):
    """Kind of a filesystem node, taken from its metadata at visit time."""

    FILE = auto()
    DIRECTORY = auto()
    SYMLINK = auto()


class ContentMode(StrEnum):
    NONE = auto()
    PREVIEW = auto()
    FULL = auto()


class ContentPolicy(BaseModel):
    """How much text is captured for each non-empty regular file.

    Attributes:
        mode: none, preview (first `lines` lines) or full.
        lines: Number of lines kept in preview mode.
    """

    model_config = ConfigDict(frozen=True)

    mode: ContentMode = Field(default=ContentMode.NONE, description="Content capture mode")
    lines: int = Field(default=10, ge=0, description="Lines kept in preview mode")

    @classmethod
    def none(cls) -> ContentPolicy:
        return cls(mode=ContentMode.NONE)

    @classmethod
    def preview(cls, lines: int) -> ContentPolicy:
        return cls(mode=ContentMode.PREVIEW, lines=lines)

    @classmethod
    def full(cls) -> ContentPolicy:
        return cls(mode=ContentMode.FULL)

    @computed_field
    @property
    def wants_content(self) -> bool:
        """Whether this policy reads anything at all."""
        return self.mode is not ContentMode.NONE


class WalkOptions(BaseModel):
    """Immutable configuration handed to the walker for one traversal.

    Attributes:
        max_depth: Deepest depth that is emitted; negative means unlimited.
        ignore: Substrings; any root-relative path containing one is pruned.
        content: Content capture policy for regular files.
        max_size: Byte cutoff for full content reads; None disables it.
        include_root: Emit the root itself as a depth-0 entry.
        mark_ignored: Emit a marker entry for each ignored node.
    """

    model_config = ConfigDict(frozen=True)

    max_depth: int = Field(default=-1, description="Negative means unlimited")
    ignore: tuple[str, ...] = Field(default=(), description="Substring ignore patterns")
    content: ContentPolicy = Field(default_factory=ContentPolicy, description="Content policy")
    max_size: int | None = Field(default=None, description="Byte cutoff for full content")
    include_root: bool = Field(default=False, description="Emit the root entry")
    mark_ignored: bool = Field(default=False, description="Emit ignore markers")

    @field_validator("ignore", mode="before")
    @classmethod
    def drop_empty_patterns(cls, value: object) -> object:
        if isinstance(value, str):
            value = [value]
        if isinstance(value, (list, tuple)):
            return tuple(p for p in value if isinstance(p, str) and p)
        return value

    @field_validator("max_size", mode="after")
    @classmethod
    def disable_non_positive_cutoff(cls, value: int | None) -> int | None:
        if value is not None and value <= 0:
            return None
        return value


class Entry(BaseModel):
    """One discovered filesystem node.

    Serialized with PascalCase keys (`Path`, `Kind`, `Size`, `Depth`, `Content`,
    `Ignored`, `Error`). `content` and `error` are None when not applicable and are
    then left out of the JSON object.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_pascal, populate_by_name=True)

    path: str = Field(..., description="Root-relative POSIX path; the root itself is '.'")
    kind: EntryKind = Field(..., description="file, directory or symlink")
    size: int = Field(default=0, ge=0, description="Size in bytes, 0 for directories")
    depth: int = Field(..., ge=0, description="Number of path segments below the root")
    content: str | None = Field(default=None, description="Captured text, if any")
    ignored: bool = Field(default=False, description="Marker for an ignored node")
    error: str | None = Field(default=None, description="Per-node diagnostic")

    @field_validator("path", "error", mode="after")
    @classmethod
    def replace_undecodable(cls, value: str | None) -> str | None:
        # Undecodable name bytes arrive as surrogates; map them to U+FFFD.
        if value is None:
            return None
        try:
            raw = os.fsencode(value)
        except UnicodeEncodeError:
            raw = value.encode("utf-8", errors="replace")
        return raw.decode("utf-8", errors="replace")

    def to_json_dict(self) -> dict[str, object]:
        """Return the JSON object for this entry, without the inapplicable keys."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
