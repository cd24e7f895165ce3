from __future__ import annotations

import io
import stat
from dataclasses import dataclass, field
from itertools import islice
from pathlib import Path
from typing import TYPE_CHECKING

from catls.config import (
    EXT2LANG,
    FILENAME_LANGUAGE,
    SNIFF_BYTES,
    ContentMode,
    ContentPolicy,
    EntryKind,
    FileType,
    guess_language,
)
from catls.exceptions import ContentReadError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from catls.config import Entry


def relpath(path: Path, root: Path) -> str:
    """Send the relative path of path from root.

    Args:
        path (Path): the path to "relativise"
        root (Path): the root to relativise from

    Returns:
        str: the relative path from root to path, with POSIX separators; "." for
            the root itself. If path is not under root, returns it unchanged.
    """
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()


def compute_depth(rel: str) -> int:
    """Depth of a root-relative POSIX path: 0 for the root, 1 for its children."""
    rel = rel.strip("/")
    if rel in {"", "."}:
        return 0
    return rel.count("/") + 1


def beyond_max_depth(depth: int, max_depth: int) -> bool:
    return max_depth >= 0 and depth > max_depth


def at_max_depth(depth: int, max_depth: int) -> bool:
    """True when nothing below `depth` may be emitted, so there is no need to descend."""
    return max_depth >= 0 and depth >= max_depth


def matches_ignore(rel: str, patterns: Sequence[str]) -> bool:
    """Plain substring containment; `log` also matches `catalogue/`."""
    return any(p and p in rel for p in patterns)


def file_language(path: Path | str) -> str:
    """Heuristically determine a file's language for syntax highlighting.

    - Uses the file name for Dockerfile/Makefile, the extension otherwise.
    - Returns a string like "python", "go", or "" for unknown.

    Args:
        path (Path | str): the file path to analyze

    Returns:
        str: a language string for the code fence, or "" if unknown
    """
    p = Path(path)
    by_name = FILENAME_LANGUAGE.get(p.name.lower())
    if by_name:
        return by_name
    return guess_language(EXT2LANG.get(p.suffix.lower(), FileType.OTHER))


def is_regular_file(path: Path) -> bool:
    try:
        st = path.stat()
    except OSError:
        return False
    return stat.S_ISREG(st.st_mode)


def looks_binary(chunk: bytes) -> bool:
    """NUL-byte heuristic: a NUL in the sniffed prefix marks the file as binary."""
    return b"\x00" in chunk


def read_content(
    path: Path,
    policy: ContentPolicy,
    *,
    max_bytes: int | None = None,
    sniff_bytes: int = SNIFF_BYTES,
) -> str | None:
    """Read the text of a file according to a content policy.

    The first `sniff_bytes` bytes are checked for a NUL byte; binary files give None.
    Accepted files are decoded as UTF-8, dropping undecodable bytes.

    - preview: at most `policy.lines` lines joined with "\\n", without a trailing newline.
    - full: the whole text, or the first `max_bytes` bytes when a cutoff is set.

    Args:
        path (Path): the file to read
        policy (ContentPolicy): how much text to keep
        max_bytes (int | None): byte cutoff for full reads, None for no cutoff
        sniff_bytes (int): size of the prefix checked for NUL bytes

    Raises:
        ContentReadError: if the file cannot be opened or read.

    Returns:
        str | None: the text, or None for policy none, non-regular, empty or binary files
    """
    if not policy.wants_content:
        return None
    try:
        st = path.stat()
        if not stat.S_ISREG(st.st_mode) or st.st_size == 0:
            return None
        with path.open("rb") as fh:
            if looks_binary(fh.read(sniff_bytes)):
                return None
            fh.seek(0)
            if policy.mode is ContentMode.PREVIEW:
                return _read_head_lines(fh, policy.lines)
            raw = fh.read(max_bytes) if max_bytes else fh.read()
    except OSError as e:
        raise ContentReadError(path=path, reason=str(e)) from e
    return raw.decode("utf-8", errors="ignore")


def _read_head_lines(fh: io.BufferedReader, n: int) -> str:
    text = io.TextIOWrapper(fh, encoding="utf-8", errors="ignore")
    try:
        lines = [ln.rstrip("\n") for ln in islice(text, max(0, n))]
    finally:
        text.detach()
    return "\n".join(lines)


@dataclass
class _TreeNode:
    dirs: dict[str, _TreeNode] = field(default_factory=dict)
    files: dict[str, Entry] = field(default_factory=dict)
    error: bool = False


def build_tree_lines(root_name: str, entries: Sequence[Entry]) -> list[str]:
    """Render entries as a Unicode tree, directories first, case-insensitive order.

    Directories are suffixed with "/", symlinks with " -> link" and entries that
    carry an error with " ⚠". The root entry itself, if present, is skipped.

    Args:
        root_name (str): label of the first line
        entries (Sequence[Entry]): entries with root-relative POSIX paths

    Returns:
        list[str]: the tree lines, starting with `root_name`
    """
    tree = _TreeNode()
    for entry in sorted(entries, key=lambda e: e.path.lower()):
        if compute_depth(entry.path) == 0:
            continue
        cur = tree
        parts = entry.path.strip("/").split("/")
        for part in parts[:-1]:
            cur = cur.dirs.setdefault(part, _TreeNode())
        leaf = parts[-1]
        if entry.kind is EntryKind.DIRECTORY:
            node = cur.dirs.setdefault(leaf, _TreeNode())
            node.error = node.error or bool(entry.error)
        else:
            cur.files[leaf] = entry

    lines: list[str] = [root_name]

    def walk(node: _TreeNode, prefix: str) -> None:
        items: list[tuple[str, _TreeNode | Entry]] = [(d, node.dirs[d]) for d in sorted(node.dirs, key=str.lower)]
        items.extend((f, node.files[f]) for f in sorted(node.files, key=str.lower))
        for idx, (name, child) in enumerate(items):
            last = idx == len(items) - 1
            branch = "└── " if last else "├── "
            if isinstance(child, _TreeNode):
                label = name + "/" + (" ⚠" if child.error else "")
            else:
                label = name
                if child.kind is EntryKind.SYMLINK:
                    label += " -> link"
                if child.error:
                    label += " ⚠"
            lines.append(prefix + branch + label)
            if isinstance(child, _TreeNode):
                walk(child, prefix + ("    " if last else "│   "))

    walk(tree, "")
    return lines
