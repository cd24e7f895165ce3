from __future__ import annotations

import os
from pathlib import Path

from dotenv import dotenv_values, find_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

from catls.config import DEFAULT_IGNORES, ContentMode, ContentPolicy, OutputMode, WalkOptions

ENV_FILE = find_dotenv(usecwd=True)
ENV_PREFIX = "CATLS_"
ENV_FIELDS = ("max_depth", "max_size", "format", "ignore", "lines", "content")


def env_defaults(env_file: str | Path | None = None) -> dict[str, str]:
    """Collect setting defaults from a `.env` file and the process environment.

    Only `CATLS_*` variables naming a known setting are kept. Process environment
    variables take precedence over the `.env` file.

    Args:
        env_file: `.env` file to read. Defaults to the one found from the current directory.

    Returns:
        dict[str, str]: raw values keyed by setting name, e.g. {"max_depth": "2"}
    """
    path = ENV_FILE if env_file is None else str(env_file)
    merged: dict[str, str | None] = dict(dotenv_values(path)) if path else {}
    merged.update(os.environ)
    out: dict[str, str] = {}
    for name in ENV_FIELDS:
        value = merged.get(ENV_PREFIX + name.upper())
        if value is not None and value.strip():
            out[name] = value.strip()
    return out


class Settings(BaseModel):
    """Configuration settings for one catls run."""

    model_config = ConfigDict(frozen=True)

    path: Path = Field(default=Path("."), description="Root directory to walk.")
    max_depth: int = Field(default=-1, description="Limit recursion depth (negative: unlimited).")
    max_size: int = Field(default=64_000, description="Max bytes read per file (0: unlimited).")
    format: OutputMode = Field(default=OutputMode.MARKDOWN, description="Output format.")
    ignore: list[str] = Field(
        default_factory=lambda: list(DEFAULT_IGNORES),
        description="Ignore patterns (substring match).",
    )
    content: str = Field(default="auto", description="Content policy: auto, none, preview, full.")
    lines: int = Field(default=10, ge=0, description="Preview line count.")
    summary: bool = Field(default=False, description="Structure only, no content.")
    output: Path | None = Field(default=None, description="Output file (default: stdout).")
    include_root: bool = Field(default=False, description="Emit the root as a depth-0 entry.")
    show_ignored: bool = Field(default=False, description="Emit a marker for ignored nodes.")
    threaded: bool = Field(default=False, description="Walk on a producer thread.")
    buffer_size: int = Field(default=64, ge=1, description="Hand-off queue size when threaded.")
    log_file: str = Field(default="", description="Log file path.")

    @field_validator("format", mode="before")
    @classmethod
    def normalize_format(cls, value: object) -> object:
        if isinstance(value, str):
            value = value.strip().lower()
            return OutputMode.MARKDOWN if value == "md" else value
        return value

    @field_validator("ignore", mode="before")
    @classmethod
    def split_ignore(cls, value: object) -> object:
        if isinstance(value, str):
            value = [value]
        if isinstance(value, (list, tuple)):
            out: list[str] = []
            for item in value:
                out.extend(p.strip() for p in str(item).split(",") if p.strip())
            return out
        return value

    @field_validator("content", mode="after")
    @classmethod
    def check_content(cls, value: str) -> str:
        value = value.strip().lower()
        if value != "auto" and value not in set(ContentMode):
            msg = f"content must be one of auto, none, preview, full (got {value!r})"
            raise ValueError(msg)
        return value

    def content_policy(self) -> ContentPolicy:
        """Resolve the content policy for this run.

        `auto` previews for Markdown and reads full content for JSON; `summary`
        always disables content.
        """
        if self.summary:
            return ContentPolicy.none()
        mode = self.content
        if mode == "auto":
            mode = ContentMode.PREVIEW if self.format is OutputMode.MARKDOWN else ContentMode.FULL
        return ContentPolicy(mode=ContentMode(mode), lines=self.lines)

    def walk_options(self) -> WalkOptions:
        """Build the immutable walker configuration from these settings."""
        return WalkOptions(
            max_depth=self.max_depth,
            ignore=tuple(self.ignore),
            content=self.content_policy(),
            max_size=self.max_size,
            include_root=self.include_root,
            mark_ignored=self.show_ignored,
        )
