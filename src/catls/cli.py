"""
catls: cat + ls for directory trees.

Overview
--------
Recursively walks a directory and writes every file, directory and symlink
with its size and depth, plus file text, in a format an LLM (or a human) can
read:

1) **Markdown (`--format markdown`)**: one `### path` section per entry with
   `@type`, `@size` and `@depth` lines and a fenced content block.

2) **JSON (`--format json`)**: a single array of objects with keys
   `Path, Kind, Size, Depth, Content, Ignored, Error`.

Entries are written as they are discovered, so arbitrarily large trees are
streamed in bounded memory. Paths containing any `--ignore` substring are
pruned together with everything beneath them.

Usage
-----
    catls src --max-depth 2
    catls . --format json --ignore .git,node_modules,dist --output tree.json
    catls . --summary
    catls . --content full --max-size 0 --output dump.md --log-file catls.log

Defaults for `--max-depth`, `--max-size`, `--format`, `--ignore`, `--lines`
and `--content` can be set with `CATLS_*` variables in the environment or in
a `.env` file.
"""

from __future__ import annotations

import argparse
import sys
from typing import TYPE_CHECKING, TextIO

from pydantic import ValidationError

from catls import __version__
from catls.channel import buffered
from catls.config import OutputMode
from catls.exceptions import CatlsError
from catls.logging import logger, setup_logging
from catls.output_construction import open_sink, stream_format, write_markdown_summary
from catls.settings import Settings, env_defaults
from catls.walker import walk

if TYPE_CHECKING:
    from collections.abc import Sequence


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="catls",
        description="Serialize a directory's structure and content as Markdown or JSON.",
    )
    p.add_argument("path", nargs="?", default=None, help="Root directory (default: current directory).")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("--max-depth", type=int, default=None, help="Limit recursion depth (default: -1, unlimited).")
    p.add_argument(
        "--max-size",
        type=int,
        default=None,
        help="Max bytes read per file for full content (default: 64000, 0 for no limit).",
    )
    p.add_argument(
        "--format",
        type=str,
        choices=["markdown", "md", "json"],
        default=None,
        help="Output format (default: markdown).",
    )
    p.add_argument(
        "--ignore",
        action="append",
        default=None,
        help="Ignore pattern, substring match (repeatable, comma separated; default: .git,node_modules).",
    )
    p.add_argument(
        "--content",
        type=str,
        choices=["auto", "none", "preview", "full"],
        default=None,
        help="Content policy (default: auto = preview for markdown, full for json).",
    )
    p.add_argument("--lines", type=int, default=None, help="Preview line count (default: 10).")
    p.add_argument("--summary", action="store_true", help="Structure only, no content.")
    p.add_argument("--output", type=str, default=None, help="Write output to file instead of stdout.")
    p.add_argument("--include-root", action="store_true", help="Emit the root itself as a depth-0 entry.")
    p.add_argument("--show-ignored", action="store_true", help="Emit a marker entry for each ignored node.")
    p.add_argument("--threaded", action="store_true", help="Walk on a producer thread.")
    p.add_argument("--buffer-size", type=int, default=None, help="Hand-off queue size with --threaded.")
    p.add_argument("--log-file", type=str, default="", help="Log file path.")
    return p


def parse_args(argv: Sequence[str] | None = None) -> Settings:
    """Parse command-line arguments into Settings.

    Flags left unset fall back to `CATLS_*` environment defaults, then to the
    Settings defaults.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    values: dict[str, object] = dict(env_defaults())
    values.update({k: v for k, v in vars(args).items() if v is not None})
    try:
        return Settings(**values)
    except ValidationError as e:
        problems = "; ".join(f"{'.'.join(map(str, err['loc']))}: {err['msg']}" for err in e.errors())
        parser.error(problems)



def run(settings: Settings, stdout: TextIO | None = None) -> int:
    """Walk the configured root and write the formatted result.

    The root is validated before the sink is opened, so a bad root never
    truncates an existing output file.

    Args:
        settings (Settings): the run configuration
        stdout (TextIO | None): console stream used when no output file is set

    Raises:
        CatlsError: on a fatal error (bad root, output cannot be opened).

    Returns:
        int: the number of entries written
    """
    entries = walk(settings.path, settings.walk_options())
    if settings.threaded:
        entries = buffered(entries, maxsize=settings.buffer_size)

    with open_sink(settings.output, stdout) as sink:
        if settings.summary and settings.format is OutputMode.MARKDOWN:
            root_name = settings.path.expanduser().resolve().name or str(settings.path)
            return write_markdown_summary(root_name, entries, sink)
        return stream_format(entries, sink, settings.format)


def main(argv: Sequence[str] | None = None) -> int:
    settings = parse_args(argv)
    if settings.log_file:
        setup_logging(settings.log_file)

    try:
        count = run(settings)
    except CatlsError as e:
        logger.error("run aborted", error=str(e), error_type=type(e).__name__)
        print(f"catls: error: {e}", file=sys.stderr)
        return 1

    logger.info(
        "run finished",
        entries=count,
        format=str(settings.format),
        output=str(settings.output) if settings.output else "stdout",
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
