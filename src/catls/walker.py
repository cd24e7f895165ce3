"""Depth-first directory walker yielding one Entry per visited node.

Nodes are pruned before they are stat'ed: first by depth, then by ignore
pattern. A pruned directory is never listed, so nothing beneath it is visited.
Per-node failures become entries carrying an `error`; only problems with the
root itself are raised.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

from catls.config import Entry, EntryKind, WalkOptions
from catls.exceptions import (
    ContentReadError,
    RootNotADirectoryError,
    RootNotFoundError,
    RootNotReadableError,
)
from catls.file_manipulation import (
    at_max_depth,
    beyond_max_depth,
    compute_depth,
    matches_ignore,
    read_content,
    relpath,
)
from catls.logging import logger

if TYPE_CHECKING:
    from collections.abc import Iterator


def resolve_root(root: str | Path) -> Path:
    """Resolve the traversal root to an absolute directory that can be listed.

    Args:
        root (str | Path): directory given by the caller

    Raises:
        RootNotFoundError: if the path does not exist.
        RootNotADirectoryError: if the path is not a directory.
        RootNotReadableError: if the directory cannot be listed.

    Returns:
        Path: the absolute root
    """
    path = Path(root).expanduser().resolve()
    if not path.exists():
        raise RootNotFoundError(path=path)
    if not path.is_dir():
        raise RootNotADirectoryError(path=path)
    try:
        with os.scandir(path) as it:
            next(it, None)
    except OSError as e:
        raise RootNotReadableError(path=path, reason=e.strerror or str(e)) from e
    return path


def walk(root: str | Path, options: WalkOptions | None = None) -> Iterator[Entry]:
    """Walk `root` depth-first, pre-order, siblings sorted by name.

    The root is validated immediately, so fatal errors surface when `walk` is
    called rather than when the first entry is pulled. Entries are produced lazily.

    Args:
        root (str | Path): directory to walk
        options (WalkOptions | None): traversal configuration, defaults to WalkOptions()

    Returns:
        Iterator[Entry]: entries in discovery order
    """
    opts = options or WalkOptions()
    root_path = resolve_root(root)
    logger.info(
        "walk started",
        root=str(root_path),
        max_depth=opts.max_depth,
        ignore=list(opts.ignore),
        content=str(opts.content.mode),
    )
    return _iter_tree(root_path, opts)


def _iter_tree(root: Path, opts: WalkOptions) -> Iterator[Entry]:
    try:
        children = _list_dir(root)
    except OSError as e:
        if opts.include_root:
            yield Entry(path=".", kind=EntryKind.DIRECTORY, depth=0, error=str(e))
        else:
            logger.warning("cannot list directory", path=str(root), error=str(e))
        return
    if opts.include_root:
        yield Entry(path=".", kind=EntryKind.DIRECTORY, depth=0)
    yield from _walk_children(children, root, opts)


def _list_dir(directory: Path) -> list[os.DirEntry[str]]:
    with os.scandir(directory) as it:
        return sorted(it, key=lambda d: d.name)


def _classify(child: os.DirEntry[str]) -> EntryKind:
    try:
        if child.is_symlink():
            return EntryKind.SYMLINK
        if child.is_dir(follow_symlinks=False):
            return EntryKind.DIRECTORY
    except OSError:
        pass
    return EntryKind.FILE


def _symlink_size(child: os.DirEntry[str], own_size: int) -> int:
    try:
        return child.stat(follow_symlinks=True).st_size
    except OSError:
        return own_size


def _walk_children(children: list[os.DirEntry[str]], root: Path, opts: WalkOptions) -> Iterator[Entry]:
    for child in children:
        path = Path(child.path)
        rel = relpath(path, root)
        depth = compute_depth(rel)
        if beyond_max_depth(depth, opts.max_depth):
            continue
        if matches_ignore(rel, opts.ignore):
            if opts.mark_ignored:
                yield Entry(path=rel, kind=_classify(child), depth=depth, ignored=True)
            continue

        kind = _classify(child)
        try:
            st = child.stat(follow_symlinks=False)
        except OSError as e:
            logger.warning("stat failed", path=rel, error=str(e))
            yield Entry(path=rel, kind=kind, depth=depth, error=str(e))
            continue

        if kind is EntryKind.DIRECTORY:
            if at_max_depth(depth, opts.max_depth):
                yield Entry(path=rel, kind=kind, depth=depth)
                continue
            try:
                grandchildren = _list_dir(path)
            except OSError as e:
                logger.warning("cannot list directory", path=rel, error=str(e))
                yield Entry(path=rel, kind=kind, depth=depth, error=str(e))
                continue
            yield Entry(path=rel, kind=kind, depth=depth)
            yield from _walk_children(grandchildren, root, opts)
        elif kind is EntryKind.SYMLINK:
            yield Entry(path=rel, kind=kind, size=_symlink_size(child, st.st_size), depth=depth)
        else:
            yield _file_entry(path, rel, st.st_size, depth, opts)


def _file_entry(path: Path, rel: str, size: int, depth: int, opts: WalkOptions) -> Entry:
    content = error = None
    if opts.content.wants_content and size > 0:
        try:
            content = read_content(path, opts.content, max_bytes=opts.max_size)
        except ContentReadError as e:
            logger.warning("content read failed", path=rel, error=str(e))
            error = str(e)
    return Entry(path=rel, kind=EntryKind.FILE, size=size, depth=depth, content=content, error=error)
